import re
from typing import Optional

from .items import CodeBlockItem
from .nodes import ElementNode, iter_elements, raw_text
from .selectors import select_first

_LANG_CLASS_RE = re.compile(r"^(?:language|lang)-(.+)$")


def _language_from_classes(node: ElementNode) -> Optional[str]:
    for el in iter_elements(node):
        for cls in sorted(el.classes):
            m = _LANG_CLASS_RE.match(cls)
            if m:
                return m.group(1).lower()
        if el.get("data-language"):
            return el.get("data-language").strip().lower()
    return None


def detect_language(node: ElementNode, profile) -> tuple[Optional[str], Optional[ElementNode]]:
    """Language name and the UI label element it came from (if any)."""
    for sel in profile.code_language:
        label = select_first(node, [sel])
        if label is not None:
            text = re.sub(r"\s+", " ", raw_text(label)).strip()
            if text:
                return text.lower(), label
    return _language_from_classes(node), None


def serialize_code_block(node: ElementNode, profile) -> Optional[CodeBlockItem]:
    language, label = detect_language(node, profile)

    code_el = node if node.tag == "code" else select_first(node, profile.code_content)
    if code_el is not None:
        code = raw_text(code_el)
    else:
        code = raw_text(node, exclude=frozenset([label]) if label is not None else frozenset())

    if code.endswith("\n"):
        code = code[:-1]
    if not code.strip():
        if not language:
            return None
        code = ""
    return CodeBlockItem(language=language, content=code)
