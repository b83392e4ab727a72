"""Content items handed to the formatting layer."""

from dataclasses import asdict, dataclass
from typing import Optional, Union


def code_fence(content: str) -> str:
    longest, run = 0, 0
    for ch in content:
        run = run + 1 if ch == "`" else 0
        longest = max(longest, run)
    return "`" * max(3, longest + 1)


@dataclass
class TextItem:
    content: str
    type: str = "text"

    def to_markdown(self) -> str:
        return self.content

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CodeBlockItem:
    language: Optional[str]
    content: str
    type: str = "code_block"

    def to_markdown(self) -> str:
        fence = code_fence(self.content)
        body = f"{self.content}\n" if self.content else ""
        return f"{fence}{self.language or ''}\n{body}{fence}"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ImageItem:
    src: str
    alt: str = "Image"
    type: str = "image"

    def to_markdown(self) -> str:
        return f"![{self.alt}]({self.src})"

    def to_dict(self) -> dict:
        return asdict(self)


ContentItem = Union[TextItem, CodeBlockItem, ImageItem]


def add_text_item(items: list, text: Optional[str]) -> None:
    """Append ``text``, merging into a preceding text item with a blank line."""
    text = (text or "").strip()
    if not text:
        return
    if items and isinstance(items[-1], TextItem):
        items[-1].content += f"\n\n{text}"
    else:
        items.append(TextItem(text))


def items_to_markdown(items: list) -> str:
    return "\n\n".join(md for md in (item.to_markdown() for item in items) if md)
