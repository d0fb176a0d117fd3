"""
URL slug normalization shared by products, categories and roles.
"""
import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_EDGE_DASHES = re.compile(r"^-+|-+$")
_UNSAFE = re.compile(r"[^a-z0-9_-]")


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated, alphanumeric slug."""
    slug = (text or "").lower().strip()
    slug = _NON_WORD.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    return _EDGE_DASHES.sub("", slug)


def normalize_slug(raw: str) -> str:
    """Slugify a manually entered slug, keeping something usable if that empties it."""
    trimmed = (raw or "").strip()
    return slugify(trimmed) or _UNSAFE.sub("-", trimmed.lower())
