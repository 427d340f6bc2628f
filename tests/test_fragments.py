import pytest

from domproxy import Document, DocumentFragment, RejectedMutation
from domproxy.names import NodeType


def test_append_fragment():
    document = Document("<root>t</root>")
    root = document.root
    fragment = document.fragment("x<b/>y")

    assert root.add_child(fragment) is fragment

    assert str(document) == "<root>tx<b/>y</root>"
    assert fragment.child is None
    assert fragment.to_xml() == ""
    assert root.last_child.content == "y"


def test_fragment_after_element_with_tail():
    document = Document("<root><a/>z</root>")
    a = document.root.child
    fragment = document.fragment("x<b/>y")
    x, b, y = fragment.children()

    a.add_next_sibling(fragment)

    assert str(document) == "<root><a/>x<b/>yz</root>"
    assert a.next_sibling is x
    assert x.next_sibling is b
    assert b.next_sibling.content == "yz"
    assert b.parent is document.root


def test_fragment_before_element():
    document = Document("<root>w<a/></root>")
    a = document.root.last_child
    fragment = document.fragment("<b/><c/>")

    a.add_previous_sibling(fragment)

    assert str(document) == "<root>w<b/><c/><a/></root>"


def test_fragment_properties():
    document = Document("<root/>")
    fragment = document.fragment("x<b/>y")

    assert isinstance(fragment, DocumentFragment)
    assert fragment.node_type == NodeType.DOCUMENT_FRAG
    assert fragment.node_name == "#document-fragment"
    assert fragment.parent is None
    assert fragment.path == ""
    assert fragment.to_xml() == "x<b/>y"
    assert fragment.content == "xy"

    b = fragment.child.next_sibling
    assert b.parent is fragment
    assert b.path == "/b"


def test_fragment_uses_namespaces_of_root():
    document = Document('<root xmlns:x="http://x"/>')
    fragment = document.fragment("<x:a/>")
    a = fragment.child

    assert a.namespace == "x"
    document.root.add_child(fragment)
    assert str(document) == '<root xmlns:x="http://x"><x:a/></root>'


def test_fragment_siblings_are_rejected():
    document = Document("<root/>")
    fragment = document.fragment("x")

    with pytest.raises(RejectedMutation):
        fragment.add_next_sibling(document.new_element("a"))
    with pytest.raises(RejectedMutation):
        fragment.add_previous_sibling(document.new_element("a"))


def test_html_fragment(html_document):
    fragment = html_document.fragment("<i>x</i>y")

    assert fragment.to_html() == "<i>x</i>y"
    html_document.root.add_child(fragment)
    assert "<i>x</i>y</html>" in html_document.to_html()


def test_elements_named_like_fragment_containers():
    document = Document(
        "<domproxy-fragment><domproxy-fragment><a/></domproxy-fragment>"
        "</domproxy-fragment>"
    )
    root = document.root
    inner = root.child
    a = inner.child

    assert root.node_type == NodeType.ELEMENT
    assert inner.node_type == NodeType.ELEMENT
    assert not isinstance(inner, DocumentFragment)
    assert a.parent is inner
    assert a.path == "/domproxy-fragment/domproxy-fragment/a"


def test_duplicated_fragment():
    document = Document("<root/>")
    fragment = document.fragment("x<b/>")

    copy = fragment.duplicate()

    assert isinstance(copy, DocumentFragment)
    assert copy is not fragment
    assert copy.to_xml() == "x<b/>"
    assert copy.child.next_sibling.path == "/b"
