import pytest

from domproxy import (
    Comment,
    Document,
    Element,
    InvalidOperation,
    ProcessingInstruction,
    Text,
)
from domproxy.names import NodeType


def test_comments_and_processing_instructions():
    document = Document("<root><!--c--><?pi x?></root>")
    comment, pi = document.root.children()

    assert isinstance(comment, Comment)
    assert comment.node_type == NodeType.COMMENT
    assert comment.node_name == "comment"
    assert comment.content == "c"
    comment.content = "d"
    comment.node_name = "x"
    assert comment.node_name == "comment"

    assert isinstance(pi, ProcessingInstruction)
    assert pi.node_type == NodeType.PI
    assert pi.node_name == "pi"
    assert pi.content == "x"
    pi.node_name = "qi"
    pi.content = "y"

    assert str(document) == "<root><!--d--><?qi y?></root>"


def test_contains():
    document = Document('<root a="1"><b/>c</root>')
    root = document.root
    b, c = root.children()

    assert "a" in root
    assert "b" not in root
    assert b in root
    assert c in root
    assert root not in b
    assert document.new_element("b") not in root


def test_element_content():
    document = Document("<root>a<b>b<!--x--></b>c</root>")
    root = document.root
    b = root.child.next_sibling

    assert root.content == "abc"
    assert b.content == "b"

    b.content = "<new>"
    assert str(document) == "<root>a<b>&lt;new&gt;</b>c</root>"

    root.content = ""
    assert str(document) == "<root/>"
    assert root.child is None
    assert b.parent is None


def test_element_names():
    document = Document("<root/>")
    root = document.root

    assert isinstance(root, Element)
    assert root.node_type == NodeType.ELEMENT
    assert root.node_name == "root"
    assert repr(root).startswith("<Element('root')")

    root.node_name = "top"
    assert str(document) == "<top/>"


def test_item_access():
    document = Document('<root a="1"/>')
    root = document.root

    assert root["a"] == "1"
    assert root["b"] is None
    root["b"] = "2"
    assert root.get("b") == "2"
    assert root.get("c", "3") == "3"


def test_last_child():
    document = Document("<root><a/>b<c/></root>")
    root = document.root
    a = root.child

    assert root.last_child.node_name == "c"
    assert a.last_child is None

    root.last_child.unlink()
    assert isinstance(root.last_child, Text)
    assert root.last_child.content == "b"


def test_new_nodes_are_detached():
    document = Document("<root/>")

    for node in (
        document.new_comment("x"),
        document.new_element("x"),
        document.new_entity_reference("x"),
        document.new_processing_instruction("x"),
        document.new_text("x"),
    ):
        assert node.parent is None
        assert node.next_sibling is None
        assert node.previous_sibling is None
        assert node.document is document
        assert node in document
        assert node.unlink() is node


def test_node_name_of_text_and_fragment_is_fixed():
    document = Document("<root>a</root>")
    text = document.root.child
    fragment = document.fragment("x")

    text.node_name = "x"
    fragment.node_name = "x"

    assert text.node_name == "text"
    assert fragment.node_name == "#document-fragment"


def test_processing_instruction_without_content():
    document = Document("<root/>")
    pi = document.new_processing_instruction("pi")

    assert pi.content == ""
    assert pi.node_name == "pi"


def test_text_node_attributes():
    document = Document("<root>a</root>")
    text = document.root.child

    assert text.get("x") is None
    assert not text.has_attribute("x")
    assert text.attribute_nodes() == []
    with pytest.raises(InvalidOperation):
        text["x"] = "1"
