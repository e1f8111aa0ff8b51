"""
Content addressing for uploaded images.
"""

from __future__ import annotations

import hashlib
import re

from cospress.core.config import DEFAULT_OBJECT_PREFIX
from cospress.core.errors import InvalidExtension

DEFAULT_EXTENSION = "png"
DEFAULT_CATEGORY = "images"

_EXTENSION_RE = re.compile(r"^[a-z0-9]{1,16}$")


def content_digest(data: bytes) -> str:
    # Same digest the editor has always used for image keys.
    return hashlib.md5(data).hexdigest()


def normalize_extension(extension: str | None) -> str:
    # Lower-cased, so objects stored under an upper-case extension get a new key.
    value = str(extension or "").strip().lstrip(".").lower()
    if not value:
        return DEFAULT_EXTENSION
    if not _EXTENSION_RE.match(value):
        raise InvalidExtension(value)
    return value


def extension_from_filename(filename: str | None) -> str:
    """Return the text after the last dot of a filename, or the default extension."""
    name = str(filename or "").strip()
    if "." not in name:
        return DEFAULT_EXTENSION
    return name.rsplit(".", 1)[1] or DEFAULT_EXTENSION


def build_object_key(
    data: bytes,
    extension: str | None,
    *,
    prefix: str = DEFAULT_OBJECT_PREFIX,
    category: str = DEFAULT_CATEGORY,
) -> str:
    """
    Build `<prefix><category>/<digest>.<extension>`.
    The key depends only on the bytes and the extension, never on a filename.
    """
    ext = normalize_extension(extension)
    clean_prefix = (prefix or "").lstrip("/")
    clean_category = category.strip("/")
    return f"{clean_prefix}{clean_category}/{content_digest(data)}.{ext}"
