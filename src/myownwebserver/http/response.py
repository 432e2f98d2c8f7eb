"""
=============================================================================
HTTP RESPONSE FORMATTER
=============================================================================

Builds the exact bytes written back to the client.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                    ◄── status line           │
    │    Server: 192.168.0.10:8080\r\n          ◄── every response        │
    │    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n ◄── every response       │
    │    Content-Type: text/html\r\n            ◄── 200 only              │
    │    Content-Length: 5\r\n                  ◄── 200 only              │
    │    \r\n                                   ◄── end of headers        │
    │    hello\r\n                              ◄── text body (200 only)  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Error responses stop after the blank line: they have no Content-Type, no
Content-Length and no body.

=============================================================================
TEXT VS BINARY FRAMING
=============================================================================

Text and image payloads leave the server differently:

    TEXT (text/plain, text/html)        BINARY (image/jpeg, image/gif)
    ────────────────────────────        ──────────────────────────────
    one write:                          two writes:
      headers + body + \r\n               1. headers
                                          2. raw image bytes

Content-Length is always the byte length of the payload itself. For text
the trailing CRLF after the body is not counted.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Union, TYPE_CHECKING
import logging

from .status_codes import HTTPStatus, reason_phrase

if TYPE_CHECKING:
    from ..transaction_log import TransactionLog


logger = logging.getLogger(__name__)

Payload = Union[str, bytes, None]


@dataclass
class HTTPResponse:
    """
    A response outcome: status code, content type and payload.

    The payload is a str for text content and bytes for images. Only a 200
    response ever puts its payload on the wire.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        ResponseFormatter        HTTPResponse           Connection
        .build()       ──────►   .writes()    ──────►   sendall() per chunk
                                    │
                                    ├── text:   [headers + body + CRLF]
                                    └── binary: [headers, body]

    =========================================================================
    """

    status: int = HTTPStatus.OK
    content_type: Optional[str] = None
    body: Payload = None
    version: str = "HTTP/1.1"
    server: str = ""
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 415 Unsupported Media Type"
        """
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    @property
    def is_success(self) -> bool:
        return self.status == HTTPStatus.OK

    @property
    def is_binary(self) -> bool:
        """True when the payload is raw bytes (written separately)."""
        return isinstance(self.body, bytes)

    @property
    def body_bytes(self) -> bytes:
        """The payload encoded for the wire (UTF-8 for text)."""
        if self.body is None:
            return b""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def headers(self) -> Dict[str, str]:
        """Response headers in the order they are written."""
        headers = {
            "Server": self.server,
            "Date": format_http_date(self.date),
        }

        if self.is_success:
            headers["Content-Type"] = self.content_type or ""
            headers["Content-Length"] = str(len(self.body_bytes))

        return headers

    def header_bytes(self) -> bytes:
        """
        Serialize the status line and headers, including the blank line
        that ends the header block.
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        return "\r\n".join(lines).encode("utf-8") + b"\r\n"

    def to_bytes(self) -> bytes:
        """
        Serialize the response for the first (or only) write.

        Text bodies of successful responses are appended together with a
        trailing CRLF. Binary bodies are NOT included; see writes().
        """
        header_bytes = self.header_bytes()

        if self.is_success and not self.is_binary and self.body is not None:
            return header_bytes + self.body_bytes + b"\r\n"

        return header_bytes

    def writes(self) -> list[bytes]:
        """
        All chunks to send, in order.

        Returns:
            [headers+text] for text responses and errors,
            [headers, image bytes] for successful binary responses.
        """
        chunks = [self.to_bytes()]

        if self.is_success and self.is_binary:
            chunks.append(self.body_bytes)

        return chunks


class ResponseFormatter:
    """
    Creates responses stamped with the server's identity and logs each one.

    Usage:
        formatter = ResponseFormatter("127.0.0.1:8080", transaction_log=log)

        # As an HTTPResponse (used by the connection loop)
        response = formatter.build(200, "text/html", "hello")

        # Straight to bytes
        data = formatter.format(404, None, None)
    """

    def __init__(
        self,
        server_address: str,
        protocol_version: str = "HTTP/1.1",
        transaction_log: Optional["TransactionLog"] = None,
    ):
        """
        Args:
            server_address: Value of the Server header, "ip:port".
            protocol_version: Version written in every status line.
            transaction_log: Where each formatted response is recorded.
        """
        self.server_address = server_address
        self.protocol_version = protocol_version
        self.transaction_log = transaction_log

    def build(self, status_code: int, content_type: Optional[str], payload: Payload) -> HTTPResponse:
        """
        Build a response and record it in the transaction log.

        Args:
            status_code: Any integer; unknown codes render as "Server Error".
            content_type: MIME type (only written for 200).
            payload: str for text, bytes for images, None for no body.

        Returns:
            The HTTPResponse.
        """
        try:
            status_code = HTTPStatus(status_code)
        except ValueError:
            pass  # Unknown codes keep their number, phrase is "Server Error"

        response = HTTPResponse(
            status=status_code,
            content_type=content_type,
            body=payload,
            version=self.protocol_version,
            server=self.server_address,
        )

        self._log_response(response)
        return response

    def format(self, status_code: int, content_type: Optional[str], payload: Payload) -> bytes:
        """
        Build a response and serialize its first write.

        For binary payloads this is the header block only; the caller
        writes the image bytes right after it.
        """
        return self.build(status_code, content_type, payload).to_bytes()

    def _log_response(self, response: HTTPResponse) -> None:
        logger.debug(f"Formatted response: {response.status_line}")

        if self.transaction_log is None:
            return

        if response.is_success:
            headers = response.headers
            self.transaction_log.write(
                f"[RESPONSE] - {response.status_line} "
                f"Content-Type: {headers['Content-Type']} "
                f"Content-Length: {headers['Content-Length']} "
                f"Server: {headers['Server']} "
                f"Date: {headers['Date']}"
            )
        else:
            self.transaction_log.write(f"[RESPONSE] - {response.status_line}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 1123).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Mon, 19 Oct 2026 12:00:00 GMT

    HTTP dates are always GMT, so aware datetimes are converted to UTC
    first.

    Args:
        dt: Datetime to format.

    Returns:
        Formatted date string.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    # Month names (1-indexed, so we subtract 1)
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
