"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with a small, fixed set of status codes.

    ┌────────┬──────────────────────────────┬────────────────────────────────┐
    │  Code  │  Reason phrase               │  When                          │
    ├────────┼──────────────────────────────┼────────────────────────────────┤
    │  200   │  OK                          │  File found and loaded         │
    │  400   │  Bad Request                 │  Malformed request line/path   │
    │  404   │  Not Found                   │  Missing or unreadable file    │
    │  406   │  Method Not Accepted         │  Anything but GET              │
    │  415   │  Unsupported Media Type      │  Extension not whitelisted     │
    │  500   │  Server Error                │  Server not started            │
    │  505   │  HTTP Version Not Supported  │  Protocol is not HTTP/1.1      │
    └────────┴──────────────────────────────┴────────────────────────────────┘

Note that 406 uses the phrase "Method Not Accepted" rather than the RFC
"Not Acceptable": this server uses 406 to reject methods, not to do
content negotiation.

Any code that is not in the table above is rendered with the generic
phrase "Server Error" while keeping its numeric value.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes produced by the request pipeline.

    Being an IntEnum, members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ACCEPTED = 406
    UNSUPPORTED_MEDIA_TYPE = 415
    FAIL = 500
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return reason_phrase(self)


# =============================================================================
# REASON PHRASES
# =============================================================================
#
# HTTP/1.1 404 Not Found
#          ─── ─────────
#           │      │
#           │      └── Reason phrase (from this dict)
#           └───────── Status code
#
# FAIL (500) has no entry: it renders as SERVER_ERROR_PHRASE
# like every other unrecognized code.
#
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ACCEPTED: "Method Not Accepted",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}

SERVER_ERROR_PHRASE = "Server Error"


def reason_phrase(code: int) -> str:
    """
    Get the reason phrase for any numeric status code.

    Args:
        code: Status code, either an HTTPStatus member or a plain int.

    Returns:
        The fixed phrase for known codes, "Server Error" otherwise.

    Examples:
        >>> reason_phrase(415)
        'Unsupported Media Type'
        >>> reason_phrase(418)
        'Server Error'
    """
    return _STATUS_PHRASES.get(code, SERVER_ERROR_PHRASE)
