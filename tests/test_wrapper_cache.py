from domproxy import Document, Text


def test_cache_grows_with_wrapped_nodes():
    document = Document("<root><a/><b/></root>")
    assert len(document.cache) == 0

    root = document.root
    assert len(document.cache) == 1

    list(root.children())
    assert len(document.cache) == 3

    assert root.child.child is None
    assert len(document.cache) == 3


def test_identity_stability():
    document = Document("<root><a/>text<b x='1'/></root>")
    root = document.root
    assert document.root is root

    a = root.child
    assert root.child is a
    assert a.parent is root

    text = a.next_sibling
    assert isinstance(text, Text)
    assert a.next_sibling is text
    assert text.previous_sibling is a

    b = text.next_sibling
    assert b.previous_sibling is text
    assert root.last_child is b
    assert b.attribute("x") is b.attribute("x")
    assert b.attribute_nodes() == [b.attribute("x")]


def test_moving_into_another_document():
    source = Document("<root><a><b/>c</a></root>")
    target = Document("<target/>")
    a = source.root.child
    b = a.child
    c = b.next_sibling

    target.root.add_child(a)

    assert str(source) == "<root/>"
    assert str(target) == "<target><a><b/>c</a></target>"
    for node in (a, b, c):
        assert node.document is target
        assert node in target
        assert node._cache_key in target.cache
        assert node._cache_key not in source.cache
    assert a.parent is target.root
    assert a.child is b
    assert b.next_sibling is c


def test_pointer_ids():
    document = Document("<root><a/><b/></root>")
    root = document.root
    a, b = root.children()

    assert len({root.pointer_id, a.pointer_id, b.pointer_id}) == 3
    assert root.child.pointer_id == a.pointer_id

    text = document.new_text("foo")
    root.add_child(text)
    assert root.last_child.pointer_id == text.pointer_id

    coalesced = document.new_text("bar")
    survivor = root.add_child(coalesced)
    assert survivor is text
    assert coalesced.pointer_id == text.pointer_id


def test_unlinked_nodes_keep_their_wrappers():
    document = Document("<root><a><b/></a></root>")
    root = document.root
    a = root.child
    b = a.child

    a.unlink()
    assert a.parent is None
    assert root.child is None
    assert b.parent is a
    assert a._cache_key in document.cache

    root.add_child(a)
    assert root.child is a
    assert a.child is b
