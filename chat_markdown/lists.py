"""Ordered/unordered lists with nested lists, blockquotes and code blocks."""

from typing import Optional

from . import blockquote
from .code import serialize_code_block
from .context import ORDERED, UNORDERED, SerializationContext
from .items import TextItem
from .log import log_debug
from .nodes import ElementNode, TextNode


def _list_start(node: ElementNode) -> int:
    try:
        return int(node.get("start", "1").strip())
    except ValueError:
        return 1


def _task_marker(li: ElementNode) -> str:
    """``[ ] `` / ``[x] `` for checkbox list items, else empty."""
    candidates = li.element_children()
    if candidates and candidates[0].tag in ("p", "span", "label"):
        candidates = candidates[0].element_children() + candidates
    for el in candidates:
        if el.tag == "input" and el.get("type", "").lower() == "checkbox":
            return "[x] " if "checked" in el.attributes else "[ ] "
    return ""


class _ItemLines:
    """Collects one list item's lines, marker first, continuation lines aligned under it."""

    def __init__(self, marker: str, indent: str, bq_prefix: str, task: str):
        self.marker = marker
        self.indent = indent
        self.bq_prefix = bq_prefix
        self.task = task
        self.continuation = indent + " " * (len(marker) + 1)
        self.lines = []

    def ensure_marker(self):
        if not self.lines:
            self.lines.append(f"{self.bq_prefix}{self.indent}{self.marker} {self.task}".rstrip())

    def add_text(self, text: str):
        for line in text.split("\n"):
            if not line.strip():
                continue
            if not self.lines:
                self.lines.append(f"{self.bq_prefix}{self.indent}{self.marker} {self.task}{line}")
            else:
                self.lines.append(f"{self.bq_prefix}{self.continuation}{line}")

    def add_nested(self, text: str):
        self.ensure_marker()
        for line in text.split("\n"):
            self.lines.append(f"{self.bq_prefix}{self.continuation}{line}" if line.strip() else self.bq_prefix)

    def add_lines(self, lines: list):
        self.ensure_marker()
        self.lines.extend(lines)


def serialize_list(walker, node: ElementNode, ordered: bool, level: int = 0,
                   within_blockquote: bool = False, blockquote_depth: int = 0,
                   ctx: Optional[SerializationContext] = None) -> Optional[TextItem]:
    ctx = ctx or SerializationContext()
    items = [c for c in node.element_children() if c.tag == "li"]
    if not items:
        log_debug(f"<{node.tag}> without <li> children")
        return None
    if walker.too_deep(ctx):
        return None

    unit = 3 if within_blockquote else 2
    indent = " " * (unit * level)
    bq_prefix = "> " * blockquote_depth if within_blockquote else ""
    list_ctx = ctx.descend(
        list_level=level,
        list_type=ORDERED if ordered else UNORDERED,
        within_blockquote=within_blockquote or ctx.within_blockquote,
        blockquote_depth=blockquote_depth or ctx.blockquote_depth,
    )

    lines = []
    number = _list_start(node) if ordered else 1
    for li in items:
        if walker.skip(li):
            continue
        marker = f"{number}." if ordered else "-"
        item = _ItemLines(marker, indent, bq_prefix, _task_marker(li))
        _serialize_item(walker, li, item, level, within_blockquote, blockquote_depth,
                        walker.child_context(li, list_ctx))
        item.ensure_marker()
        lines.extend(item.lines)
        number += 1

    return TextItem("\n".join(lines)) if lines else None


def _serialize_item(walker, li, item, level, within_blockquote, blockquote_depth, ctx):
    # Inline runs are buffered and flushed whenever a nested construct
    # interrupts them, so everything comes out in document order.
    run = []

    def flush():
        if run:
            item.add_text(walker.serialize_nodes(run, ctx))
            run.clear()

    for child in li.children:
        if isinstance(child, TextNode):
            run.append(child)
            continue
        if walker.skip(child):
            continue
        if child.tag in ("ul", "ol"):
            flush()
            nested = serialize_list(walker, child, child.tag == "ol", level + 1,
                                    within_blockquote, blockquote_depth, ctx)
            if nested:
                item.add_lines(nested.content.split("\n"))
        elif child.tag == "blockquote":
            flush()
            quoted = blockquote.serialize_blockquote(walker, child, 0, ctx)
            if quoted:
                item.add_nested(quoted)
        elif walker.is_code_block(child):
            flush()
            code = serialize_code_block(child, walker.profile)
            if code:
                item.add_nested(code.to_markdown())
        else:
            run.append(child)
    flush()
