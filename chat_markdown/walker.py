"""Tree walker and spacing engine.

``Walker.serialize`` classifies a node, dispatches it through a table of
handlers and returns Markdown. ``Walker.serialize_nodes`` joins sibling
results: blocks are separated by exactly one blank line, inline fragments
are joined with a single space unless the text already ends in whitespace.
"""

import re
from typing import Optional

from . import inline
from .blockquote import serialize_blockquote
from .code import serialize_code_block
from .context import SerializationContext
from .items import TextItem
from .lists import serialize_list
from .log import log_warn
from .media import serialize_image_grid
from .nodes import ElementNode, SkipPredicate, TextNode, iter_subtree, raw_text
from .profiles import Profile
from .tables import serialize_table

DEFAULT_MAX_DEPTH = 100

HEADING_TAGS = {f"h{i}": i for i in range(1, 7)}

CONTAINER_TAGS = {
    "p", "div", "li", "pre", "section", "article", "main", "header", "footer",
    "figure", "figcaption", "details", "summary", "dl", "dt", "dd", "nav",
    "aside", "form", "fieldset", "body", "html", "center", "address",
    "thead", "tbody", "tfoot", "tr", "th", "td", "caption", "hgroup",
}

INLINE_TAGS = {
    "span", "strong", "b", "em", "i", "del", "s", "strike", "a", "br", "code",
    "kbd", "sub", "sup", "u", "ins", "mark", "small", "big", "abbr", "cite",
    "q", "time", "label", "img", "font", "var", "samp", "tt", "wbr", "dfn",
    "bdi", "bdo", "data", "input", "button", "svg", "path", "picture", "source",
}

MATHML_TAGS = {
    "math", "semantics", "annotation", "annotation-xml", "mrow", "mi", "mo",
    "mn", "ms", "mtext", "msup", "msub", "msubsup", "mfrac", "msqrt", "mroot",
    "mover", "munder", "munderover", "mtable", "mtr", "mtd", "mspace",
    "mstyle", "mpadded", "mphantom", "menclose",
}

BLOCK_KINDS = {
    "code", "image_grid", "table", "blockquote", "list", "rule",
    "math_display", "heading", "container", "unknown",
}
SELF_CONTAINED_KINDS = {
    "code", "image_grid", "table", "blockquote", "list", "rule",
    "math_display", "heading",
}
INLINE_KINDS = {"inline", "inline_code", "math_inline", "image"}


class Walker:
    def __init__(self, profile: Optional[Profile] = None, skip: Optional[SkipPredicate] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH, base_url: Optional[str] = None):
        self.profile = profile or Profile()
        self.skip = self.profile.skip_predicate(skip)
        self.max_depth = max_depth
        self.base_url = base_url
        self._warned = set()
        self._handlers = {
            "code": self._code_block,
            "image_grid": self._image_grid,
            "table": self._table,
            "blockquote": self._blockquote,
            "list": self._list,
            "rule": lambda node, ctx: "---",
            "math_display": lambda node, ctx: inline.display_math(node),
            "math_inline": lambda node, ctx: inline.inline_math(node),
            "heading": self._heading,
            "image": lambda node, ctx: inline.image(node, self.base_url),
            "inline_code": lambda node, ctx: inline.code_span(raw_text(node)),
            "inline": self._inline,
            "container": self.serialize_children,
            "unknown": self._unknown,
        }

    # --- Classification ---

    def classify(self, node: ElementNode) -> str:
        p = self.profile
        tag = node.tag
        if p.is_table_container(node) and node.find(lambda n: n.tag == "table"):
            return "table"
        if p.is_code_block(node): return "code"
        if p.is_image_grid(node): return "image_grid"
        if tag == "table": return "table"
        if tag == "blockquote": return "blockquote"
        if tag in ("ul", "ol"): return "list"
        if tag == "hr": return "rule"
        if p.is_math_display(node): return "math_display"
        if p.is_math_inline(node): return "math_inline"
        if tag in HEADING_TAGS: return "heading"
        if tag == "img": return "image"
        if p.is_inline_code(node): return "inline_code"
        if tag in inline.INLINE_FORMATS: return "inline"
        if tag in CONTAINER_TAGS: return "container"
        if tag in INLINE_TAGS or tag in MATHML_TAGS: return "inline"
        return "unknown"

    def is_block(self, node) -> bool:
        return isinstance(node, ElementNode) and self.classify(node) in BLOCK_KINDS

    def is_code_block(self, node) -> bool:
        return isinstance(node, ElementNode) and self.classify(node) == "code"

    def has_inline_content(self, node: ElementNode) -> bool:
        """True when ``node`` has non-blank text or inline elements as direct children."""
        for child in node.children:
            if isinstance(child, TextNode):
                if child.text.strip():
                    return True
            elif not self.skip(child) and self.classify(child) in INLINE_KINDS:
                if child.tag in ("img", "br") or raw_text(child).strip():
                    return True
        return False

    # --- Traversal ---

    def child_context(self, node: ElementNode, ctx: SerializationContext, **changes) -> SerializationContext:
        preserve = ctx.preserve_whitespace or self.profile.preserves_whitespace(node)
        return ctx.descend(preserve_whitespace=preserve, **changes)

    def too_deep(self, ctx: SerializationContext) -> bool:
        if ctx.depth <= self.max_depth:
            return False
        if "depth" not in self._warned:
            self._warned.add("depth")
            log_warn(f"Nesting deeper than {self.max_depth} levels; truncating")
        return True

    def serialize(self, node, ctx: Optional[SerializationContext] = None) -> str:
        ctx = ctx or SerializationContext()
        if isinstance(node, TextNode):
            return self.text(node, ctx)
        if self.too_deep(ctx) or self.skip(node):
            return ""
        return self._handlers[self.classify(node)](node, ctx)

    def render(self, node: ElementNode, ctx: Optional[SerializationContext] = None) -> tuple[list, frozenset]:
        """Content items for one block plus the set of nodes it consumed."""
        ctx = ctx or SerializationContext()
        consumed = frozenset(iter_subtree(node))
        if self.skip(node):
            return [], consumed
        kind = self.classify(node)
        if kind == "code":
            item = serialize_code_block(node, self.profile)
            return ([item] if item else []), consumed
        if kind == "image_grid":
            return serialize_image_grid(node, self.profile, self.base_url), consumed
        text = self.serialize(node, ctx).strip()
        return ([TextItem(text)] if text else []), consumed

    def text(self, node: TextNode, ctx: SerializationContext) -> str:
        text = node.text.replace("\xa0", " ")
        if ctx.preserve_whitespace:
            return text.replace("\t", "  ")
        text = re.sub(r"[\t\n\r]+", " ", text)
        return re.sub(r" {2,}", " ", text)

    def serialize_children(self, node: ElementNode, ctx: SerializationContext) -> str:
        return self.serialize_nodes(node.children, self.child_context(node, ctx))

    def serialize_nodes(self, nodes, ctx: SerializationContext) -> str:
        out = ""
        last_block = False

        for child in nodes:
            rendered = self.serialize(child, ctx)
            if not rendered:
                continue

            if isinstance(child, ElementNode) and child.tag == "br":
                # A run of <br> never opens more than one blank line
                if out and not out.endswith("\n\n"):
                    out = out.rstrip(" ") + "\n"
                continue

            if self.is_block(child):
                content = rendered.strip()
                if not content:
                    continue
                if out:
                    out = out.rstrip() + "\n\n"
                out += content + "\n"
                last_block = True
                continue

            if ctx.preserve_whitespace:
                if last_block:
                    out = out.rstrip() + "\n\n"
                out += rendered
                last_block = False
                continue

            stripped = rendered.strip()
            if not stripped:
                # Whitespace-only token: the next fragment adds the space
                continue

            leading = rendered[:len(rendered) - len(rendered.lstrip())]
            if last_block and out:
                out = out.rstrip() + "\n\n"
            elif out and "\n" in leading:
                if not out.endswith("\n\n"):
                    out = out.rstrip(" ") + "\n"
            elif out and not out.endswith((" ", "\n")):
                out += " "
            out += stripped

            if "\n" in rendered[len(rendered.rstrip()):]:
                out += "\n"
            last_block = False

        return out.strip()

    # --- Handlers ---

    def _code_block(self, node, ctx):
        item = serialize_code_block(node, self.profile)
        return item.to_markdown() if item else ""

    def _image_grid(self, node, ctx):
        return "\n".join(img.to_markdown() for img in serialize_image_grid(node, self.profile, self.base_url))

    def _table(self, node, ctx):
        markdown = serialize_table(self, node, ctx)
        if markdown is None:
            return self.serialize_children(node, ctx)
        return markdown

    def _blockquote(self, node, ctx):
        return serialize_blockquote(self, node, 0, ctx)

    def _list(self, node, ctx):
        item = serialize_list(self, node, node.tag == "ol", within_blockquote=ctx.within_blockquote, ctx=ctx)
        return item.content if item else ""

    def _heading(self, node, ctx):
        content = self.serialize_children(node, ctx)
        if not content:
            return ""
        return "#" * HEADING_TAGS[node.tag] + " " + content.replace("\n", " ")

    def _inline(self, node, ctx):
        if node.tag == "br":
            return "\n"
        content = self.serialize_children(node, ctx)
        formatted = inline.format_inline(node, content)
        raw = raw_text(node)
        if not formatted:
            return " " if raw and raw.isspace() else ""
        if raw[:1].isspace():
            formatted = " " + formatted
        if raw[-1:].isspace():
            formatted += " "
        return formatted

    def _unknown(self, node, ctx):
        if node.tag not in self._warned:
            self._warned.add(node.tag)
            log_warn(f"Unrecognized element <{node.tag}>; serializing its children")
        return self.serialize_children(node, ctx)
