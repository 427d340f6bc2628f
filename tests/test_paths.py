from domproxy import Document


def test_paths():
    document = Document("<root>a<b/>c<b x='1'/><!--d--></root>")
    root = document.root
    a, b1, c, b2, d = root.children()

    assert root.path == "/root"
    assert b1.path == "/root/b[1]"
    assert b2.path == "/root/b[2]"
    assert a.path == "/root/text()[1]"
    assert c.path == "/root/text()[2]"
    assert d.path == "/root/comment()"
    assert b2.attribute("x").path == "/root/b[2]/@x"


def test_paths_of_detached_nodes():
    document = Document("<root/>")

    assert document.new_element("x").path == "/x"
    assert document.new_text("x").path == "text()"


def test_path_of_single_text():
    document = Document("<root><a>text</a></root>")
    assert document.root.child.child.path == "/root/a/text()"
