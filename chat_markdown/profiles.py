"""Per-platform node vocabularies.

A profile tells the serializer which elements are code blocks, image grids,
math, inline code and so on for one chat platform. Profiles are YAML files in
``chat_markdown/profiles/`` (or a configured directory); anything a profile
leaves out falls back to the generic defaults below.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from .log import log_debug, log_warn
from .nodes import ElementNode, SkipPredicate
from .selectors import matches_any, select_one, valid_selectors

PROFILES_DIR = Path(__file__).resolve().parent / "profiles"

SELECTOR_FIELDS = (
    "detect", "message", "code_block", "code_language", "code_content", "image_grid",
    "image", "table_container", "inline_code", "math_inline", "math_display", "skip",
)


class ProfileNotFoundError(KeyError):
    pass


@dataclass
class Profile:
    name: str = "default"
    is_default: bool = False
    detect: list = field(default_factory=list)
    message: list = field(default_factory=list)
    code_block: list = field(default_factory=lambda: ["pre", "code-block"])
    code_language: list = field(default_factory=list)
    code_content: list = field(default_factory=lambda: ["code"])
    image_grid: list = field(default_factory=list)
    image: list = field(default_factory=lambda: ["img"])
    table_container: list = field(default_factory=list)
    inline_code: list = field(default_factory=lambda: ["code"])
    math_inline: list = field(default_factory=lambda: ["span.katex", "span.math-inline"])
    math_display: list = field(default_factory=lambda: ["span.katex-display", "span.math-display", "div.math-display"])
    preserve_whitespace: list = field(default_factory=lambda: ["whitespace-pre-wrap"])
    skip: list = field(default_factory=list)

    def __post_init__(self):
        # Broken selectors are dropped here so matching never raises mid-walk
        for name in SELECTOR_FIELDS:
            setattr(self, name, valid_selectors(getattr(self, name), owner=f"Profile {self.name}.{name}"))

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "Profile":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                log_debug(f"Profile {name}: ignoring unknown key '{key}'")
                continue
            if value is None:
                continue
            if isinstance(value, str) and key != "name":
                value = [value]
            kwargs[key] = value
        kwargs.setdefault("name", name)
        return cls(**kwargs)

    def is_code_block(self, node: ElementNode) -> bool:
        return matches_any(node, self.code_block)

    def is_image_grid(self, node: ElementNode) -> bool:
        return matches_any(node, self.image_grid)

    def is_table_container(self, node: ElementNode) -> bool:
        return matches_any(node, self.table_container)

    def is_inline_code(self, node: ElementNode) -> bool:
        return matches_any(node, self.inline_code)

    def is_math_inline(self, node: ElementNode) -> bool:
        return matches_any(node, self.math_inline)

    def is_math_display(self, node: ElementNode) -> bool:
        return matches_any(node, self.math_display)

    def preserves_whitespace(self, node: ElementNode) -> bool:
        if any(node.has_class(c) for c in self.preserve_whitespace):
            return True
        style = node.get("style", "").replace(" ", "").lower()
        return "white-space:pre" in style

    def skip_predicate(self, extra: Optional[SkipPredicate] = None) -> SkipPredicate:
        """Caller predicate OR this profile's skip selectors."""
        selectors = list(self.skip)

        def skip(node: ElementNode) -> bool:
            if extra is not None and extra(node):
                return True
            return bool(selectors) and matches_any(node, selectors)

        return skip


def load_profiles(profiles_dir: Optional[Path] = None) -> dict[str, Profile]:
    """Load every ``*.yaml`` profile. Broken files are logged and skipped."""
    directory = Path(profiles_dir) if profiles_dir else PROFILES_DIR
    profiles = {}
    if not directory.exists(): return {}
    for p_path in sorted(directory.glob("*.yaml")):
        try:
            data = yaml.safe_load(p_path.read_text(encoding="utf-8"))
            if data:
                profiles[p_path.stem] = Profile.from_dict(p_path.stem, data)
        except (OSError, yaml.YAMLError, TypeError) as e:
            log_warn(f"Failed to load profile {p_path.name}: {e}")
    return profiles


def get_profile(name: str, profiles: Optional[dict[str, Profile]] = None) -> Profile:
    profiles = load_profiles() if profiles is None else profiles
    if name not in profiles:
        raise ProfileNotFoundError(name)
    return profiles[name]


def detect_profile(root: ElementNode, profiles: dict[str, Profile]) -> tuple[str, Profile]:
    """First profile whose ``detect`` selector finds something under ``root``."""
    for key, profile in profiles.items():
        for sel in profile.detect:
            if select_one(root, sel) is not None:
                return key, profile

    for key, profile in profiles.items():
        if profile.is_default: return key, profile
    return "default", Profile()
