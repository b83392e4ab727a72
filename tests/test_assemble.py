from chat_markdown.assemble import extract_content_items, iter_candidates, to_markdown
from chat_markdown.items import CodeBlockItem, ImageItem, TextItem, add_text_item
from chat_markdown.profiles import Profile
from chat_markdown.soup import from_html
from chat_markdown.walker import Walker


def items_for(markup, **kwargs):
    return extract_content_items(from_html(markup), **kwargs)


def test_code_blocks_split_text_items():
    items = items_for(
        '<div><p>Intro</p><pre><code class="language-py">x = 1</code></pre><p>After</p></div>'
    )
    assert items == [TextItem("Intro"), CodeBlockItem("py", "x = 1"), TextItem("After")]


def test_adjacent_text_blocks_merge():
    assert items_for("<p>A</p><h2>B</h2><ul><li>C</li></ul>") == [TextItem("A\n\n## B\n\n- C")]


def test_add_text_item_ignores_blank_text():
    items = [TextItem("a")]
    add_text_item(items, "  ")
    add_text_item(items, None)
    add_text_item(items, " b ")
    assert items == [TextItem("a\n\nb")]


def test_nested_content_is_not_repeated():
    items = items_for("<ul><li><p>A</p><blockquote><p>B</p></blockquote></li></ul><p>C</p>")
    assert items == [TextItem("- A\n  > B\n\nC")]


def test_container_with_inline_content_is_one_block():
    items = items_for("<div>Text <b>bold</b><ul><li>x</li></ul></div>")
    assert items == [TextItem("Text **bold**\n\n- x")]


def test_image_grid_items():
    profile = Profile(image_grid=["div.grid"])
    items = items_for(
        '<p>Look:</p><div class="grid"><img src="https://x.test/1.png" alt="cat">'
        '<img src="data:image/png;base64,AA"><img src="/2.png"></div>',
        profile=profile, base_url="https://x.test/",
    )
    assert items == [
        TextItem("Look:"),
        ImageItem("https://x.test/1.png", "cat"),
        ImageItem("https://x.test/2.png", "Image"),
    ]


def test_skipped_subtrees_are_pruned():
    body = from_html('<p>keep</p><div class="ad"><p>drop</p></div>')
    walker = Walker(skip=lambda n: n.has_class("ad"))
    assert [n.tag for n in iter_candidates(body, walker)] == ["p"]
    assert extract_content_items(body, walker) == [TextItem("keep")]


def test_root_with_inline_content_is_a_candidate():
    body = from_html("plain text with <b>bold</b>")
    assert list(iter_candidates(body, Walker())) == [body]
    assert to_markdown(body) == "plain text with **bold**"


def test_to_markdown_joins_items():
    markup = "<p>Run:</p><pre><code>make</code></pre><p>Done.</p>"
    assert to_markdown(from_html(markup)) == "Run:\n\n```\nmake\n```\n\nDone."


def test_empty_body_has_no_items():
    assert items_for("<div> <span></span> </div>") == []
