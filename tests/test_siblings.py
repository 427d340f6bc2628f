import pytest

from domproxy import Document, InvalidOperation


def test_add_element_after_element_with_tail():
    document = Document("<root><a/>tail</root>")
    a = document.root.child
    tail = a.next_sibling
    b = document.new_element("b")

    assert a.add_next_sibling(b) is b

    assert str(document) == "<root><a/><b/>tail</root>"
    assert a.next_sibling is b
    assert b.next_sibling is tail
    assert tail.previous_sibling is b


def test_add_element_after_text():
    document = Document("<root>foo<a/>bar</root>")
    foo, a, bar = document.root.children()

    foo.add_next_sibling(document.new_element("x"))
    bar.add_next_sibling(document.new_element("y"))

    assert str(document) == "<root>foo<x/><a/>bar<y/></root>"
    assert foo.next_sibling.node_name == "x"
    assert bar.next_sibling.node_name == "y"


def test_add_element_before_text():
    document = Document("<root>foo<a/>bar</root>")
    root = document.root
    foo = root.child
    bar = root.last_child
    x = document.new_element("x")
    y = document.new_element("y")

    foo.add_previous_sibling(x)
    bar.add_previous_sibling(y)

    assert str(document) == "<root><x/>foo<a/><y/>bar</root>"
    assert root.child is x
    assert x.next_sibling is foo
    assert foo.previous_sibling is x
    assert bar.previous_sibling is y


def test_comment_as_sibling_of_root():
    document = Document("<root/>")
    root = document.root
    comment = document.new_comment("c")

    root.add_previous_sibling(comment)

    assert root.previous_sibling is comment
    assert comment.next_sibling is root
    assert comment.parent is None
    serialization = str(document)
    assert serialization.index("<!--c-->") < serialization.index("<root/>")

    assert comment.unlink() is comment
    assert root.previous_sibling is None
    assert comment.next_sibling is None
    assert "<!--c-->" not in str(document)


def test_move_within_tree():
    document = Document("<root><a/><b>text</b></root>")
    root = document.root
    a, b = root.children()
    text = b.child

    text.add_previous_sibling(a)

    assert str(document) == "<root><b><a/>text</b></root>"
    assert a.parent is b
    assert text.previous_sibling is a
    assert root.child is b


def test_replace():
    document = Document("<root>x<a/>y</root>")
    root = document.root
    x, a, y = root.children()
    b = document.new_element("b")

    assert a.replace(b) is a

    assert str(document) == "<root>x<b/>y</root>"
    assert a.parent is None
    assert b.next_sibling is y
    assert y.previous_sibling is b


def test_replace_root_is_refused():
    document = Document("<root/>")
    with pytest.raises(InvalidOperation):
        document.root.replace(document.new_comment("c"))
    assert str(document) == "<root/>"


def test_replace_with_text():
    document = Document("<root>x<a/>y</root>")
    root = document.root
    x, a, y = root.children()

    a.replace(document.new_text("-"))

    assert str(document) == "<root>x-y</root>"
    assert root.child is x
    assert x.content == y.content == "x-y"


def test_replace_text_with_text():
    document = Document("<root>x</root>")
    root = document.root
    x = root.child
    y = document.new_text("y")

    assert x.replace(y) is x

    assert str(document) == "<root>y</root>"
    assert root.child is y
    assert y.parent is root
    assert y.content == "y"
    assert x.parent is None
    assert x.content == "x"


def test_replace_tail_text():
    document = Document("<root><a/>x<b/></root>")
    a = document.root.child
    x = a.next_sibling

    x.replace(document.new_text("y"))
    assert str(document) == "<root><a/>y<b/></root>"
    assert a.next_sibling.content == "y"

    a.next_sibling.replace(document.new_element("c"))
    assert str(document) == "<root><a/><c/><b/></root>"


def test_replace_text_with_fragment():
    document = Document("<root>x</root>")
    x = document.root.child

    x.replace(document.fragment("1<c/>2"))

    assert str(document) == "<root>1<c/>2</root>"
    assert x.parent is None


def test_unlink_and_reattach():
    document = Document("<root><a/><b/><c/></root>")
    root = document.root
    a, b, c = root.children()

    b.unlink()
    assert b.parent is None
    assert b.next_sibling is None
    assert b.previous_sibling is None
    assert a.next_sibling is c
    assert c.previous_sibling is a
    assert b not in root

    c.add_next_sibling(b)
    assert list(root.children()) == [a, c, b]
    assert b.parent is root
    assert c.next_sibling is b
    assert b.next_sibling is None
    assert sum(x is b for x in root.children()) == 1
    assert str(document) == "<root><a/><c/><b/></root>"


def test_unlink_root():
    document = Document("<root/>")
    with pytest.raises(InvalidOperation):
        document.root.unlink()


def test_unlinked_subtree_stays_usable():
    document = Document("<root><a>foo<b/>bar</a>baz</root>")
    root = document.root
    a = root.child
    foo, b, bar = a.children()

    a.unlink()

    assert str(document) == "<root>baz</root>"
    assert a.to_xml(format=False) == "<a>foo<b/>bar</a>"
    assert bar.parent is a
    assert b.next_sibling is bar
    assert a.next_sibling is None
    assert root.child.content == "baz"
