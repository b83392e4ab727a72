from chat_markdown.context import ORDERED, SerializationContext
from chat_markdown.nodes import E, ElementNode, TextNode, iter_subtree, raw_text


def test_builder_splits_classes_and_attributes():
    node = E("DIV", "hi", class_="a b", data_x="1", for_="f")
    assert node.tag == "div"
    assert node.classes == frozenset({"a", "b"})
    assert node.get("class") == "a b"
    assert node.get("data-x") == "1"
    assert node.get("for") == "f"
    assert isinstance(node.children[0], TextNode)


def test_nodes_hash_by_identity():
    a, b = E("p", "x"), E("p", "x")
    assert a != b
    assert len({a, b}) == 2


def test_iter_subtree_is_preorder():
    tree = E("div", E("p", "one"), E("p", "two"))
    tags = [n.tag if isinstance(n, ElementNode) else n.text for n in iter_subtree(tree)]
    assert tags == ["div", "p", "one", "p", "two"]


def test_raw_text_excludes_subtrees():
    label = E("span", "Python")
    tree = E("pre", label, E("code", "x = 1"))
    assert raw_text(tree) == "Pythonx = 1"
    assert raw_text(tree, exclude=frozenset([label])) == "x = 1"


def test_raw_text_handles_deep_trees():
    node = E("div", "deep")
    for _ in range(2000):
        node = E("div", node)
    assert raw_text(node) == "deep"


def test_find_skips_self():
    tree = E("div", E("div", "inner"))
    assert tree.find(lambda n: n.tag == "div") is tree.children[0]


def test_context_descend_returns_new_context():
    ctx = SerializationContext()
    child = ctx.descend(list_level=2, list_type=ORDERED)
    assert ctx.depth == 0 and ctx.list_level == 0
    assert child.depth == 1
    assert child.list_level == 2
    assert child.list_type == ORDERED


def test_built_nodes_mirror_a_tag_tree():
    inner = E("code", "x")
    tree = E("pre", "label", inner, class_="hl")
    assert tree.source.name == "pre"
    assert tree.source["class"] == "hl"
    assert inner.source.parent is tree.source
    assert tree.source.get_text() == "labelx"
