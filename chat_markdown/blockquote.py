from typing import Optional

from . import lists
from .context import SerializationContext
from .nodes import ElementNode, TextNode


def _prefixed(text: str, prefix: str) -> list[str]:
    return [prefix + line for line in text.split("\n")]


def serialize_blockquote(walker, node: ElementNode, nest_level: int = 0,
                         ctx: Optional[SerializationContext] = None) -> str:
    """Blockquote with every line carrying one ``"> "`` per nesting level.

    Nested blockquotes compute their own prefix; their lines are inserted as-is.
    """
    ctx = ctx or SerializationContext()
    if walker.too_deep(ctx):
        return ""
    prefix = "> " * (nest_level + 1)
    inner = walker.child_context(node, ctx, within_blockquote=True, blockquote_depth=nest_level + 1)

    blocks = []
    run = []

    def flush():
        if run:
            text = walker.serialize_nodes(run, inner)
            run.clear()
            if text:
                blocks.append(_prefixed(text, prefix))

    for child in node.children:
        if isinstance(child, TextNode) or not walker.is_block(child):
            run.append(child)
            continue
        if walker.skip(child):
            continue
        flush()
        if child.tag == "blockquote":
            text = serialize_blockquote(walker, child, nest_level + 1, inner)
            if text:
                blocks.append(text.split("\n"))
        elif child.tag in ("ul", "ol"):
            item = lists.serialize_list(walker, child, child.tag == "ol", 0, True, nest_level + 1, inner)
            if item:
                blocks.append(item.content.split("\n"))
        else:
            text = walker.serialize(child, inner).strip("\n")
            if text.strip():
                blocks.append(_prefixed(text, prefix))
    flush()

    lines = []
    for i, block in enumerate(blocks):
        if i:
            lines.append(prefix)
        lines.extend(block)
    while lines and not lines[-1].replace(">", "").strip():
        lines.pop()
    return "\n".join(lines)
