from typing import Optional
from urllib.parse import urljoin

from .items import ImageItem
from .nodes import ElementNode
from .selectors import select


def resolve_src(src: str, base_url: Optional[str] = None) -> Optional[str]:
    """Absolute image URL, or None for empty and inline (data:/blob:) sources."""
    src = (src or "").strip()
    if not src or src.startswith(("data:", "blob:")):
        return None
    return urljoin(base_url, src) if base_url else src


def serialize_image_grid(node: ElementNode, profile, base_url: Optional[str] = None) -> list[ImageItem]:
    images, seen = [], set()
    for sel in profile.image:
        for img in select(node, sel):
            if img in seen:
                continue
            seen.add(img)
            src = resolve_src(img.get("src", ""), base_url)
            if not src:
                continue
            alt = (img.get("alt") or "").strip() or (node.get("aria-label") or "").strip() or "Image"
            images.append(ImageItem(src=src, alt=alt))
    if not images and node.tag == "img":
        src = resolve_src(node.get("src", ""), base_url)
        if src:
            images.append(ImageItem(src=src, alt=(node.get("alt") or "").strip() or "Image"))
    return images
