"""CSS selectors over the node model, evaluated by soupsieve.

Selectors run against the BeautifulSoup tags the nodes mirror, so anything
``soup.select`` understands works in a profile (child and descendant
combinators, attribute operators, pseudo-classes). Matches are mapped back
to nodes.
"""

from functools import lru_cache
from typing import Iterable, Optional

import soupsieve as sv

from .log import log_warn
from .nodes import ElementNode, iter_elements


class SelectorError(ValueError):
    pass


@lru_cache(maxsize=512)
def compile_selector(selector: str):
    try:
        return sv.compile(selector)
    except sv.SelectorSyntaxError as e:
        raise SelectorError(f"Invalid selector {selector!r}: {e}") from e


def valid_selectors(selectors: Iterable[str], owner: str = "") -> list[str]:
    """``selectors`` minus the ones soupsieve cannot compile (each logged)."""
    valid = []
    for sel in selectors:
        try:
            compile_selector(sel)
        except (SelectorError, TypeError) as e:
            log_warn(f"{owner}: ignoring selector {sel!r}: {e}" if owner else f"Ignoring selector {sel!r}: {e}")
            continue
        valid.append(sel)
    return valid


def matches(node: ElementNode, selector: str) -> bool:
    return compile_selector(selector).match(node.source)


def matches_any(node: ElementNode, selectors: Iterable[str]) -> bool:
    return any(matches(node, s) for s in selectors)


def _to_nodes(root: ElementNode, tags: list) -> list[ElementNode]:
    if not tags:
        return []
    wanted = {id(t) for t in tags}
    return [n for n in iter_elements(root) if n is not root and id(n.source) in wanted]


def select(root: ElementNode, selector: str) -> list[ElementNode]:
    """Descendants of ``root`` matching ``selector``, in document order."""
    return _to_nodes(root, compile_selector(selector).select(root.source))


def select_one(root: ElementNode, selector: str) -> Optional[ElementNode]:
    tag = compile_selector(selector).select_one(root.source)
    if tag is None:
        return None
    found = _to_nodes(root, [tag])
    return found[0] if found else None


def select_first(root: ElementNode, selectors: Iterable[str]) -> Optional[ElementNode]:
    for s in selectors:
        el = select_one(root, s)
        if el is not None:
            return el
    return None
