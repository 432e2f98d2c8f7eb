"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

The server derives the Content-Type of a response from the file extension
alone. Only a handful of extensions are served; everything else is
rejected with 415 Unsupported Media Type before the disk is touched.

    ┌───────────────────┬──────────────┬──────────────────────────────────┐
    │  Extension        │  MIME type   │  Read as                         │
    ├───────────────────┼──────────────┼──────────────────────────────────┤
    │  .txt             │  text/plain  │  UTF-8 text                      │
    │  .html .htm       │  text/html   │  UTF-8 text                      │
    │  .jpg .jpeg       │  image/jpeg  │  raw bytes                       │
    │  .gif             │  image/gif   │  raw bytes                       │
    └───────────────────┴──────────────┴──────────────────────────────────┘

The lookup is case-insensitive: INDEX.HTML and index.html map the same way.

=============================================================================
"""

from pathlib import Path
from typing import Optional


TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"
IMAGE_JPEG = "image/jpeg"
IMAGE_GIF = "image/gif"


# =============================================================================
# MIME TYPE WHITELIST
# =============================================================================
#
# Maps file extensions (lowercase, with dot) to MIME types.
#
# =============================================================================

MIME_TYPES = {
    ".txt": TEXT_PLAIN,
    ".html": TEXT_HTML,
    ".htm": TEXT_HTML,
    ".jpg": IMAGE_JPEG,
    ".jpeg": IMAGE_JPEG,
    ".gif": IMAGE_GIF,
}

TEXT_TYPES = frozenset({TEXT_PLAIN, TEXT_HTML})
IMAGE_TYPES = frozenset({IMAGE_JPEG, IMAGE_GIF})


def get_content_type(path: str | Path) -> Optional[str]:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or name with extension.

    Returns:
        The MIME type, or None when the extension is not whitelisted.

    Examples:
        >>> get_content_type("/var/www/Index.HTM")
        'text/html'

        >>> get_content_type("photo.bmp") is None
        True
    """
    if isinstance(path, str):
        path = Path(path)

    return MIME_TYPES.get(path.suffix.lower())


def is_text_type(content_type: Optional[str]) -> bool:
    """Check whether a content type is served as UTF-8 text."""
    return content_type in TEXT_TYPES


def is_image_type(content_type: Optional[str]) -> bool:
    """Check whether a content type is served as raw bytes."""
    return content_type in IMAGE_TYPES
