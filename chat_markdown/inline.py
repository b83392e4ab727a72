"""Inline Markdown spans: emphasis, links, inline code, images and math."""

import re
from typing import Callable, Optional

from .log import log_debug
from .media import resolve_src
from .nodes import ElementNode, raw_text
from .selectors import select_one

TEX_ANNOTATION = 'annotation[encoding="application/x-tex"]'

_SUPERSCRIPTS = str.maketrans("⁰¹²³⁴⁵⁶⁷⁸⁹", "0123456789")
_SUPERSCRIPT_RE = re.compile(r"([A-Za-z0-9)])([⁰¹²³⁴⁵⁶⁷⁸⁹]+)")
_FRACTION_RE = re.compile(r"(\w+)/(\w+)")
_SQRT_GROUP_RE = re.compile(r"√\(([^)]+)\)")
_SQRT_ATOM_RE = re.compile(r"√([A-Za-z0-9]+)")

# Glyph -> TeX command. A space is added when a letter follows.
TEX_SYMBOLS = {
    "α": r"\alpha", "β": r"\beta", "γ": r"\gamma", "δ": r"\delta",
    "ε": r"\epsilon", "θ": r"\theta", "λ": r"\lambda", "μ": r"\mu",
    "π": r"\pi", "σ": r"\sigma", "τ": r"\tau", "φ": r"\phi", "ω": r"\omega",
    "Δ": r"\Delta", "Σ": r"\Sigma", "Π": r"\Pi", "Ω": r"\Omega",
    "±": r"\pm", "≠": r"\neq", "≤": r"\leq", "≥": r"\geq",
    "×": r"\times", "÷": r"\div", "∞": r"\infty",
}
_SYMBOL_RE = re.compile("([" + "".join(TEX_SYMBOLS) + "])(?=([A-Za-z])?)")


def _wrap(marker: str) -> Callable[[ElementNode, str], str]:
    def fmt(node, content):
        content = content.strip()
        return f"{marker}{content}{marker}" if content else ""
    return fmt


def _link(node, content):
    content = content.strip()
    href = node.get("href")
    if not href or not content:
        return content
    return f"[{content}]({href})"


def _line_break(node, content):
    return "\n"


def _kbd(node, content):
    return code_span(raw_text(node))


INLINE_FORMATS = {
    "strong": _wrap("**"),
    "b": _wrap("**"),
    "em": _wrap("*"),
    "i": _wrap("*"),
    "del": _wrap("~~"),
    "s": _wrap("~~"),
    "strike": _wrap("~~"),
    "a": _link,
    "br": _line_break,
    "kbd": _kbd,
}


def format_inline(node: ElementNode, content: str) -> str:
    """Apply the tag's inline markup to already-serialized ``content``.

    Tags without markup pass their content through.
    """
    fmt = INLINE_FORMATS.get(node.tag)
    return fmt(node, content) if fmt else content


def code_span(text: str) -> str:
    text = text.strip()
    if not text:
        return ""
    longest = max((len(run) for run in re.findall(r"`+", text)), default=0)
    if not longest:
        return f"`{text}`"
    fence = "`" * (longest + 1)
    return f"{fence} {text} {fence}"


def image(node: ElementNode, base_url: Optional[str] = None) -> str:
    src = resolve_src(node.get("src", ""), base_url)
    if not src:
        return ""
    alt = re.sub(r"\s+", " ", node.get("alt", "")).strip()
    return f"![{alt}]({src})"


# --- Math ---

def extract_tex_source(node: ElementNode) -> Optional[str]:
    annotation = select_one(node, TEX_ANNOTATION)
    if annotation is not None:
        tex = raw_text(annotation).strip()
        if tex:
            return tex
    return None


def reconstruct_latex(text: str) -> str:
    """Best-effort TeX from rendered math glyphs. Approximate by nature."""
    latex = text.strip()
    latex = _SUPERSCRIPT_RE.sub(lambda m: f"{m.group(1)}^{{{m.group(2).translate(_SUPERSCRIPTS)}}}", latex)
    latex = _FRACTION_RE.sub(r"\\frac{\1}{\2}", latex)
    latex = _SQRT_GROUP_RE.sub(r"\\sqrt{\1}", latex)
    latex = _SQRT_ATOM_RE.sub(r"\\sqrt{\1}", latex)
    latex = _SYMBOL_RE.sub(lambda m: TEX_SYMBOLS[m.group(1)] + (" " if m.group(2) else ""), latex)
    return latex


def math_source(node: ElementNode) -> Optional[str]:
    """TeX for a rendered math element, reconstructed when no source is embedded."""
    tex = extract_tex_source(node)
    if tex:
        return tex
    log_debug(f"No TeX annotation in <{node.tag}>, reconstructing from rendered text")
    rendered = select_one(node, ".katex-html")
    text = raw_text(rendered if rendered is not None else node).strip()
    return reconstruct_latex(text) if text else None


def inline_math(node: ElementNode) -> str:
    tex = math_source(node)
    return f"${tex}$" if tex else ""


def display_math(node: ElementNode) -> str:
    tex = math_source(node)
    return f"$$\n{tex}\n$$" if tex else ""
