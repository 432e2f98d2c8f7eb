"""
=============================================================================
RESOURCE LOADER
=============================================================================

Reads a validated file from disk, as text or as bytes depending on its
content type.

=============================================================================
ERROR COLLAPSING
=============================================================================

The protocol layer does not care WHY a file could not be read. Every
failure becomes a single ResourceLoadError that maps to 404 Not Found;
only a coarse reason is kept for the console log:

    ┌──────────────────────────────────────────┬───────────────┐
    │  Python exception                        │  reason       │
    ├──────────────────────────────────────────┼───────────────┤
    │  FileNotFoundError, NotADirectoryError,  │  missing      │
    │  IsADirectoryError                       │               │
    │  PermissionError                         │  permission   │
    │  Other OSError (name too long, EIO, ...) │  unreadable   │
    │  ValueError (NUL byte in path)           │  unreadable   │
    │  Content type not text or image          │  unsupported  │
    └──────────────────────────────────────────┴───────────────┘

Text payloads that fail carry the body "Not found"; image payloads carry
no body at all.

Undecodable bytes in a text file are NOT a failure: they are replaced with
U+FFFD and the file is served.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..http.mime_types import is_text_type, is_image_type
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = "Not found"


class ResourceLoadError(Exception):
    """
    Raised when a resource cannot be loaded.

    Attributes:
        status_code: Always 404.
        reason: Coarse cause ("missing", "permission", "unreadable",
                "unsupported").
        payload: "Not found" for text types, None otherwise.
    """

    def __init__(self, message: str, reason: str, payload: Optional[str] = None):
        super().__init__(message)
        self.status_code = HTTPStatus.NOT_FOUND
        self.reason = reason
        self.payload = payload


class ResourceLoader:
    """
    Loads file contents for a validated resource.

    Usage:
        loader = ResourceLoader()
        payload = loader.load(resource.path, resource.content_type)
        # str for text/plain and text/html, bytes for images
    """

    def load(self, path: Union[str, Path], content_type: Optional[str]) -> Union[str, bytes]:
        """
        Read an entire file.

        Args:
            path: Absolute path of the file.
            content_type: MIME type decided during validation.

        Returns:
            The file decoded as UTF-8 for text types, raw bytes for images.

        Raises:
            ResourceLoadError: If the file cannot be read or the content
                               type is neither text nor image.
        """
        path = Path(path)

        if is_text_type(content_type):
            return self._read(path, text=True)

        if is_image_type(content_type):
            return self._read(path, text=False)

        raise ResourceLoadError(
            f"Cannot load content type {content_type!r}",
            reason="unsupported",
            payload=NOT_FOUND_TEXT,
        )

    def _read(self, path: Path, text: bool) -> Union[str, bytes]:
        payload = NOT_FOUND_TEXT if text else None

        try:
            data = path.read_bytes()
            # No newline translation
            return data.decode("utf-8", errors="replace") if text else data

        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as e:
            reason = "missing"
            error = e
        except PermissionError as e:
            reason = "permission"
            error = e
        except (OSError, ValueError) as e:
            reason = "unreadable"
            error = e

        logger.warning(f"Failed to load {path} ({reason}): {error}")
        raise ResourceLoadError(f"Failed to load {path}: {error}", reason, payload)
