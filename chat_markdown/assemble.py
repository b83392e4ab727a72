"""Turns a message body into an ordered list of content items."""

from typing import Iterator, Optional

from .items import CodeBlockItem, ImageItem, TextItem, add_text_item, items_to_markdown
from .nodes import ElementNode, SkipPredicate
from .walker import SELF_CONTAINED_KINDS, Walker


def _is_candidate(node: ElementNode, walker: Walker) -> bool:
    kind = walker.classify(node)
    if kind in SELF_CONTAINED_KINDS or node.tag == "p":
        return True
    return kind in ("container", "unknown") and walker.has_inline_content(node)


def iter_candidates(body: ElementNode, walker: Walker) -> Iterator[ElementNode]:
    """Block candidates in document order.

    Skipped subtrees are pruned. Descendants of a candidate are still
    yielded; the caller drops the ones already consumed.
    """
    stack = [body]
    while stack:
        node = stack.pop()
        if walker.skip(node):
            continue
        if _is_candidate(node, walker):
            yield node
        stack.extend(reversed(node.element_children()))


def extract_content_items(body: ElementNode, walker: Optional[Walker] = None,
                          skip: Optional[SkipPredicate] = None, **kwargs) -> list:
    walker = walker or Walker(skip=skip, **kwargs)
    items = []
    consumed = frozenset()
    for node in iter_candidates(body, walker):
        if node in consumed:
            continue
        rendered, used = walker.render(node)
        consumed = consumed | used
        for item in rendered:
            if isinstance(item, TextItem):
                add_text_item(items, item.content)
            elif isinstance(item, (CodeBlockItem, ImageItem)):
                items.append(item)
    return items


def to_markdown(body: ElementNode, walker: Optional[Walker] = None, **kwargs) -> str:
    return items_to_markdown(extract_content_items(body, walker, **kwargs))
