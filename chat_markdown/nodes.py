"""Node model consumed by the serializer.

Nodes compare and hash by identity: two structurally equal subtrees are still
different nodes, which is what the skip predicate and the consumed-node sets
rely on.

Every element keeps the BeautifulSoup ``Tag`` it mirrors in ``source`` so
profile selectors can be evaluated by soupsieve. Elements built by hand get
a detached ``Tag`` tree of their own.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Union

from bs4 import NavigableString, Tag


@dataclass(eq=False)
class TextNode:
    text: str


@dataclass(eq=False)
class ElementNode:
    tag: str
    attributes: dict = field(default_factory=dict)
    classes: frozenset = frozenset()
    children: list = field(default_factory=list)
    source: Any = field(default=None, repr=False)

    def __post_init__(self):
        self.tag = self.tag.lower()
        self.classes = frozenset(self.classes)
        if self.source is None:
            self.source = Tag(name=self.tag, attrs=dict(self.attributes))
            for child in self.children:
                if isinstance(child, TextNode):
                    self.source.append(NavigableString(child.text))
                else:
                    self.source.append(child.source)

    def get(self, name: str, default=None):
        return self.attributes.get(name, default)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def element_children(self) -> list["ElementNode"]:
        return [c for c in self.children if isinstance(c, ElementNode)]

    def find(self, predicate: Callable[["ElementNode"], bool]) -> Optional["ElementNode"]:
        """First descendant element (document order) matching ``predicate``."""
        for node in iter_elements(self):
            if node is not self and predicate(node):
                return node
        return None

    def find_all(self, predicate: Callable[["ElementNode"], bool]) -> list["ElementNode"]:
        return [n for n in iter_elements(self) if n is not self and predicate(n)]

    def text_content(self) -> str:
        return raw_text(self)

    def __repr__(self):
        cls = "." + ".".join(sorted(self.classes)) if self.classes else ""
        return f"<{self.tag}{cls} children={len(self.children)}>"


ContentNode = Union[TextNode, ElementNode]
SkipPredicate = Callable[[ElementNode], bool]


def iter_subtree(node: ContentNode) -> Iterator[ContentNode]:
    """Pre-order walk over ``node`` and all of its descendants (iterative)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, ElementNode):
            stack.extend(reversed(current.children))


def iter_elements(node: ContentNode) -> Iterator[ElementNode]:
    for n in iter_subtree(node):
        if isinstance(n, ElementNode):
            yield n


def raw_text(node: ContentNode, exclude: frozenset = frozenset()) -> str:
    """Concatenated character data, like the DOM's ``textContent``.

    Subtrees rooted at a node in ``exclude`` contribute nothing.
    """
    parts = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current in exclude:
            continue
        if isinstance(current, TextNode):
            parts.append(current.text)
        else:
            stack.extend(reversed(current.children))
    return "".join(parts)


def E(tag: str, *children, **attrs) -> ElementNode:
    """Build an element by hand: ``E("ul", E("li", "A"), class_="x")``.

    Strings become text nodes; ``class_`` is split into the class set and
    trailing underscores are dropped from other attribute names.
    """
    classes = attrs.pop("class_", "")
    attributes = {k.rstrip("_").replace("_", "-"): str(v) for k, v in attrs.items()}
    if classes:
        attributes["class"] = classes
    kids = [TextNode(c) if isinstance(c, str) else c for c in children]
    return ElementNode(tag, attributes, frozenset(classes.split()), kids)
