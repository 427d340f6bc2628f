import pytest
from lxml import etree

from domproxy.names import XML_NAMESPACE
from domproxy.utils import (
    escape_content,
    namespace_declarations,
    prefix_for,
    qualified_attribute_name,
    resolve_name,
)


@pytest.fixture
def element():
    root = etree.fromstring(
        '<root xmlns="http://default" xmlns:x="http://x"><a xmlns:y="http://y"/></root>'
    )
    return root[0]


def test_escape_content():
    assert escape_content('a<b>&"') == 'a&lt;b&gt;&amp;"'


def test_namespace_declarations(element):
    assert namespace_declarations(element) == {"xmlns:y": "http://y"}
    assert namespace_declarations(element.getparent()) == {
        "xmlns": "http://default",
        "xmlns:x": "http://x",
    }


def test_prefix_for(element):
    assert prefix_for(element, "http://x") == "x"
    assert prefix_for(element, "http://default") is None
    assert prefix_for(element, XML_NAMESPACE) == "xml"
    assert prefix_for(element, None) is None


def test_qualified_attribute_name(element):
    assert qualified_attribute_name(element, "{http://y}b") == "y:b"
    assert qualified_attribute_name(element, "b") == "b"
    assert qualified_attribute_name(None, f"{{{XML_NAMESPACE}}}id") == "xml:id"
    assert qualified_attribute_name(None, "{http://y}b") == "b"


@pytest.mark.parametrize(
    ("name", "expected"),
    (
        ("b", "b"),
        ("x:b", "{http://x}b"),
        ("y:b", "{http://y}b"),
        ("xml:id", f"{{{XML_NAMESPACE}}}id"),
        ("{http://z}b", "{http://z}b"),
        ("z:b", None),
    ),
)
def test_resolve_name(element, name, expected):
    assert resolve_name(element, name) == expected
