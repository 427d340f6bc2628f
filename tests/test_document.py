from domproxy import Document


def test_cleanup_namespaces():
    document = Document('<root xmlns:x="http://x" xmlns:y="http://y"><x:a/></root>')

    document.cleanup_namespaces()

    assert str(document) == '<root xmlns:x="http://x"><x:a/></root>'


def test_clone():
    decorators = [lambda node: None]
    document = Document("<root><a/></root>", decorators=decorators)
    a = document.root.child

    clone = document.clone()

    assert str(clone) == str(document)
    assert clone.decorators == decorators
    assert clone.root is not document.root
    assert clone.root.child is not a
    assert a not in clone


def test_document_level_nodes():
    document = Document("<!--before--><root/><?pi after?>")
    root = document.root

    before = root.previous_sibling
    after = root.next_sibling
    assert before.content == "before"
    assert after.node_name == "pi"
    assert before.parent is None
    assert after.next_sibling is None

    before.unlink()
    assert root.previous_sibling is None
    assert before.parent is None
    assert "before" not in str(document)


def test_root():
    document = Document("<root/>")
    assert document.root is document.root
    assert document.root.document is document
    assert document.root.parent is None
    assert document.root.path == "/root"
