import logging

import pytest

from chat_markdown.nodes import E
from chat_markdown.selectors import (
    SelectorError, compile_selector, matches, select, select_first, select_one, valid_selectors,
)
from chat_markdown.soup import from_html


def test_compound_matching():
    node = E("div", class_="a b", id="main", data_role="assistant")
    assert matches(node, "div")
    assert matches(node, "*")
    assert matches(node, ".a.b")
    assert matches(node, "div.a#main")
    assert matches(node, "[data-role]")
    assert matches(node, "[data-role=assistant]")
    assert matches(node, '[data-role="assistant"]')
    assert matches(node, "[data-role^=assist]")
    assert matches(node, "[data-role*=sista]")
    assert not matches(node, "span.a")
    assert not matches(node, ".c")
    assert not matches(node, "[data-role=user]")


def test_escaped_classes():
    node = E("span", class_="text-sm !font-mono group/imagegen-image")
    assert matches(node, "span.\\!font-mono")
    assert matches(node, "span.group\\/imagegen-image")
    assert matches(node, "[class~=text-sm]")
    assert not matches(node, "[class~=text]")


def test_descendant_select_in_document_order():
    tree = E("div",
             E("section", E("p", "one", class_="x")),
             E("p", "two", class_="x"),
             E("section", E("div", E("p", "three", class_="x"))))
    found = select(tree, "section p.x")
    assert [n.text_content() for n in found] == ["one", "three"]
    assert select_one(tree, "p.x").text_content() == "one"
    assert select_first(tree, ["table", "p"]).text_content() == "one"


def test_combinators_use_ancestry():
    root = from_html('<div class="m"><p>direct</p><section><p>nested</p></section></div>')
    assert [n.text_content() for n in select(root, "div.m > p")] == ["direct"]
    nested = select_one(root, "section p")
    assert matches(nested, "div.m p")
    assert not matches(nested, "div.m > p")
    assert matches(nested, "section > p:first-child")


def test_select_excludes_root():
    tree = E("p", E("p", "inner"))
    assert select(tree, "p") == [tree.children[0]]


def test_invalid_selectors_raise_selector_error():
    with pytest.raises(SelectorError):
        compile_selector("div[")
    with pytest.raises(SelectorError):
        matches(E("div"), "span.!font-mono")


def test_valid_selectors_drops_and_logs_bad_entries(caplog):
    with caplog.at_level(logging.WARNING, logger="chat_markdown"):
        assert valid_selectors(["pre", "pre[", "div > p"], owner="Profile x") == ["pre", "div > p"]
    assert "Profile x" in caplog.text
    assert "'pre['" in caplog.text
