"""Chat page HTML to Markdown."""

from .assemble import extract_content_items, to_markdown
from .context import SerializationContext
from .items import CodeBlockItem, ImageItem, TextItem
from .nodes import E, ElementNode, TextNode
from .profiles import Profile, ProfileNotFoundError, detect_profile, get_profile, load_profiles
from .soup import from_html, from_soup, select_messages
from .walker import Walker

__version__ = "0.1.0"
