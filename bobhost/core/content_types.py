"""Extension allow-list and content-type mapping for hosted assets."""

from __future__ import annotations

from enum import Enum


class AssetCategory(str, Enum):
    """Categories of files a static site may contain."""

    MARKUP = "markup"
    STYLE = "style"
    SCRIPT = "script"
    IMAGE = "image"
    FONT = "font"
    DATA = "data"
    MEDIA = "media"
    DOCUMENT = "document"
    WEB_MANIFEST = "web_manifest"


# extension -> (category, content type)
_EXTENSIONS: dict[str, tuple[AssetCategory, str]] = {
    "html": (AssetCategory.MARKUP, "text/html"),
    "htm": (AssetCategory.MARKUP, "text/html"),
    "css": (AssetCategory.STYLE, "text/css"),
    "js": (AssetCategory.SCRIPT, "application/javascript"),
    "mjs": (AssetCategory.SCRIPT, "application/javascript"),
    "cjs": (AssetCategory.SCRIPT, "application/javascript"),
    "png": (AssetCategory.IMAGE, "image/png"),
    "jpg": (AssetCategory.IMAGE, "image/jpeg"),
    "jpeg": (AssetCategory.IMAGE, "image/jpeg"),
    "gif": (AssetCategory.IMAGE, "image/gif"),
    "svg": (AssetCategory.IMAGE, "image/svg+xml"),
    "webp": (AssetCategory.IMAGE, "image/webp"),
    "ico": (AssetCategory.IMAGE, "image/x-icon"),
    "bmp": (AssetCategory.IMAGE, "image/bmp"),
    "tiff": (AssetCategory.IMAGE, "image/tiff"),
    "woff": (AssetCategory.FONT, "font/woff"),
    "woff2": (AssetCategory.FONT, "font/woff2"),
    "ttf": (AssetCategory.FONT, "font/ttf"),
    "otf": (AssetCategory.FONT, "font/otf"),
    "eot": (AssetCategory.FONT, "application/vnd.ms-fontobject"),
    "json": (AssetCategory.DATA, "application/json"),
    "xml": (AssetCategory.DATA, "application/xml"),
    "csv": (AssetCategory.DATA, "text/csv"),
    "txt": (AssetCategory.DATA, "text/plain"),
    "md": (AssetCategory.DATA, "text/markdown"),
    "map": (AssetCategory.DATA, "application/json"),
    "mp4": (AssetCategory.MEDIA, "video/mp4"),
    "webm": (AssetCategory.MEDIA, "video/webm"),
    "mp3": (AssetCategory.MEDIA, "audio/mpeg"),
    "wav": (AssetCategory.MEDIA, "audio/wav"),
    "ogg": (AssetCategory.MEDIA, "audio/ogg"),
    "m4a": (AssetCategory.MEDIA, "audio/mp4"),
    "pdf": (AssetCategory.DOCUMENT, "application/pdf"),
    "webmanifest": (AssetCategory.WEB_MANIFEST, "application/manifest+json"),
}

ALLOWED_EXTENSIONS: frozenset[str] = frozenset(_EXTENSIONS)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def extension_of(path: str) -> str:
    """Lower-cased extension of the last path segment, or ``""``."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def is_allowed(path: str) -> bool:
    return extension_of(path) in ALLOWED_EXTENSIONS


def category_of(path: str) -> AssetCategory | None:
    entry = _EXTENSIONS.get(extension_of(path))
    return entry[0] if entry else None


def content_type_for(path: str) -> str:
    """Content type for *path*, falling back to ``application/octet-stream``."""
    entry = _EXTENSIONS.get(extension_of(path))
    return entry[1] if entry else DEFAULT_CONTENT_TYPE


def is_markup(path: str) -> bool:
    return category_of(path) is AssetCategory.MARKUP
