"""BeautifulSoup front end: raw page bytes/HTML in, node trees out."""

import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import PreformattedString

from .log import log_debug
from .nodes import ElementNode, TextNode
from .profiles import Profile
from .selectors import select

NOISE_TAGS = ("script", "style", "noscript", "svg", "path", "button", "mat-icon", "nav", "aside")

_FRAGMENT_RE = re.compile(r"<!--StartFragment-->(.*)<!--EndFragment-->", re.DOTALL)


def try_repair_mojibake(text: str) -> str:
    """Repair strings where UTF-8 bytes were misinterpreted as Latin-1 or CP1252."""
    # Text that already carries high code points (e.g. Japanese) is left alone
    if any(ord(c) > 0x1000 for c in text):
        return text

    for enc in ["latin-1", "cp1252"]:
        try:
            repaired_text = text.encode(enc).decode("utf-8")
            # Heuristic: CJK in the repaired text means the guess was right
            if any(ord(c) >= 0x3000 for c in repaired_text):
                return repaired_text
        except (UnicodeEncodeError, UnicodeDecodeError):
            continue
    return text


def decode_html_bytes(raw: bytes) -> str:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        log_debug("Input is not UTF-8; decoding as cp932")
        text = raw.decode("cp932", errors="replace")
    return try_repair_mojibake(text)


def extract_fragment(raw: str) -> str:
    """Payload between the CF_HTML fragment markers, or ``raw`` unchanged."""
    if "StartFragment" in raw:
        match = _FRAGMENT_RE.search(raw)
        if match: return match.group(1)
    return raw


def clean_soup(soup: BeautifulSoup) -> BeautifulSoup:
    for tag_name in NOISE_TAGS:
        for el in soup.find_all(tag_name): el.decompose()
    for comment in soup.find_all(string=lambda t: isinstance(t, Comment)): comment.extract()
    return soup


def _attributes(tag: Tag) -> dict:
    attrs = {}
    for key, value in tag.attrs.items():
        attrs[key] = " ".join(value) if isinstance(value, list) else value
    return attrs


def from_soup(tag: Tag) -> ElementNode:
    """Convert a BeautifulSoup tag (and everything below it) into nodes.

    The conversion is iterative, so arbitrarily deep markup never hits the
    recursion limit here. Each node keeps its tag in ``source``.
    """
    root = ElementNode(tag.name, _attributes(tag), tag.get("class") or [], source=tag)
    stack = [(tag, root)]
    while stack:
        source, target = stack.pop()
        for child in source.children:
            if isinstance(child, Tag):
                node = ElementNode(child.name, _attributes(child), child.get("class") or [], source=child)
                target.children.append(node)
                stack.append((child, node))
            elif isinstance(child, PreformattedString):
                # Comments, doctypes, CDATA and processing instructions
                continue
            elif isinstance(child, NavigableString):
                target.children.append(TextNode(str(child)))
    return root


def parse_html(html: str) -> BeautifulSoup:
    return clean_soup(BeautifulSoup(html, "html.parser"))


def from_html(html: str) -> ElementNode:
    """Parse ``html`` into a node tree rooted at ``body``.

    Fragments without a ``<body>`` get a synthetic one.
    """
    soup = parse_html(html)
    if soup.body is not None:
        return from_soup(soup.body)
    body = soup.new_tag("body")
    for child in list(soup.contents):
        body.append(child.extract())
    soup.append(body)
    return from_soup(body)


def page_title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    title_tag = soup.find("title")
    return title_tag.get_text().strip() if title_tag else ""


def select_messages(root: ElementNode, profile: Profile) -> list[ElementNode]:
    """Message bodies for ``profile`` in document order.

    Matches of all ``message`` selectors are merged; a match nested inside
    another match is dropped. Falls back to ``[root]``.
    """
    found = set()
    for sel in profile.message:
        found.update(select(root, sel))
    if not found:
        return [root]

    messages = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node in found:
            messages.append(node)
            continue
        stack.extend(reversed(node.element_children()))
    log_debug(f"{len(messages)} message(s) found")
    return messages
