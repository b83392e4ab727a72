from typing import Optional

from .context import SerializationContext
from .log import log_debug, log_warn
from .nodes import ElementNode


def _find_table(node: ElementNode) -> Optional[ElementNode]:
    if node.tag == "table":
        return node
    return node.find(lambda n: n.tag == "table")


def _rows(section: ElementNode) -> list:
    return [c for c in section.element_children() if c.tag == "tr"]


def _cells(row: ElementNode) -> list:
    return [c for c in row.element_children() if c.tag in ("td", "th")]


def _collect_rows(table: ElementNode):
    """(header row or None, body rows), without descending into nested tables."""
    head_rows, body_rows, foot_rows = [], [], []
    for child in table.element_children():
        if child.tag == "thead":
            head_rows.extend(_rows(child))
        elif child.tag == "tbody":
            body_rows.extend(_rows(child))
        elif child.tag == "tfoot":
            foot_rows.extend(_rows(child))
        elif child.tag == "tr":
            body_rows.append(child)
    body_rows.extend(foot_rows)

    header = head_rows[0] if head_rows else None
    if header is None and body_rows:
        first = _cells(body_rows[0])
        if first and all(c.tag == "th" for c in first):
            header = body_rows.pop(0)
    return header, body_rows


def _cell_text(walker, cell: ElementNode, ctx: SerializationContext) -> str:
    text = walker.serialize_children(cell, ctx.descend())
    text = " ".join(line.strip() for line in text.split("\n") if line.strip())
    return text.replace("|", "\\|")


def _row_line(values: list) -> str:
    return "| " + " | ".join(values) + " |"


def serialize_table(walker, node: ElementNode, ctx: Optional[SerializationContext] = None) -> Optional[str]:
    """Pipe table for ``node`` (a table or a container holding one).

    Returns ``None`` when no usable table is found; the caller then falls
    back to plain text.
    """
    ctx = ctx or SerializationContext()
    if walker.too_deep(ctx):
        return None
    table = _find_table(node)
    if table is None:
        log_debug(f"No <table> inside <{node.tag}>")
        return None

    header, body_rows = _collect_rows(table)
    body_rows = [r for r in body_rows if not walker.skip(r)]

    if header is not None and _cells(header):
        headers = [_cell_text(walker, c, ctx) for c in _cells(header)]
    else:
        first = next((r for r in body_rows if _cells(r)), None)
        headers = [""] * len(_cells(first)) if first is not None else []

    columns = len(headers)
    if columns == 0:
        log_warn("Table without columns; serializing as text")
        return None

    lines = [_row_line(headers), "|" + "---|" * columns]
    for row in body_rows:
        cells = _cells(row)
        if not cells:
            continue
        if len(cells) != columns:
            log_warn(f"Skipping table row with {len(cells)} cells (expected {columns})")
            continue
        lines.append(_row_line([_cell_text(walker, c, ctx) for c in cells]))

    if len(lines) == 2:
        log_debug("Table has no data rows")
        return None
    return "\n".join(lines)
