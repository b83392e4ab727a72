from dataclasses import dataclass, replace
from typing import Optional

ORDERED = "ordered"
UNORDERED = "unordered"


@dataclass(frozen=True)
class SerializationContext:
    """Per-descent serialization state. Never mutated; refine with ``descend``."""

    list_level: int = 0
    list_type: Optional[str] = None
    blockquote_depth: int = 0
    within_blockquote: bool = False
    preserve_whitespace: bool = False
    depth: int = 0

    def descend(self, **changes) -> "SerializationContext":
        return replace(self, depth=self.depth + 1, **changes)
