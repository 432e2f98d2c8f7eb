"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

Everything that knows about HTTP lives here:

    request.py       Request line parsing and validation
    response.py      Response formatting (text and binary framing)
    status_codes.py  The fixed set of status codes and reason phrases
    mime_types.py    Extension whitelist and content types

=============================================================================
"""

from .request import (
    HTTPRequest,
    HTTPParseError,
    RequestParser,
    RequestValidator,
    ResolvedResource,
)
from .response import HTTPResponse, ResponseFormatter, format_http_date
from .status_codes import HTTPStatus, reason_phrase
from .mime_types import get_content_type, is_text_type, is_image_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "HTTPParseError",
    "RequestParser",
    "RequestValidator",
    "ResolvedResource",

    # Response formatting
    "HTTPResponse",
    "ResponseFormatter",
    "format_http_date",

    # Status codes
    "HTTPStatus",
    "reason_phrase",

    # MIME types
    "get_content_type",
    "is_text_type",
    "is_image_type",
]
