"""
=============================================================================
HTTP REQUEST PARSER AND VALIDATOR
=============================================================================

Turns the raw bytes read off a client socket into either a resource that
can be served, or an HTTPParseError carrying the status code to answer with.

=============================================================================
WHAT WE LOOK AT
=============================================================================

Only the request line matters. Headers and body are read off the socket
but never interpreted:

    GET /index.html HTTP/1.1\r\n       ◄── line 0: the only line we parse
    Host: 192.168.0.10:8080\r\n
    User-Agent: curl/8.0\r\n
    \r\n

    "GET /index.html HTTP/1.1".split(" ")
      │        │          │
      │        │          └── tokens[2]: protocol version
      │        └───────────── tokens[1]: target
      └────────────────────── tokens[0]: method

=============================================================================
VALIDATION ORDER
=============================================================================

Each check is a hard gate. The first failing check decides the status and
nothing after it runs:

    ┌────┬─────────────────────────────────────────────┬────────┐
    │  # │  Check                                      │ Status │
    ├────┼─────────────────────────────────────────────┼────────┤
    │  1 │  Server is started                          │  500   │
    │  2 │  Request line has at least three tokens     │  400   │
    │  3 │  Method is GET, at offset 0 of the request  │  406   │
    │  4 │  Protocol equals the server's version       │  505   │
    │  5 │  Target starts with "/"                     │  400   │
    │  6 │  Resolve target beneath the web root        │  400*  │
    │  7 │  Extension is whitelisted                   │  415   │
    │  8 │  File exists                                │  404   │
    └────┴─────────────────────────────────────────────┴────────┘

    * Only when subdirectories are enabled and the target escapes the
      web root or cannot be resolved (NUL byte, symlink loop). With the
      default flattening, step 6 cannot fail.

The order matters: "POST /photo.bmp HTTP/2" is a 406, not a 415 or a 505.

=============================================================================
PATH RESOLUTION
=============================================================================

By default only the FILE NAME of the target is used:

    GET /docs/2020/report.txt   →   <web root>/report.txt
    GET /../../etc/passwd.txt   →   <web root>/passwd.txt

Directory components are discarded rather than rejected, so every file is
served from the top level of the web root and traversal is impossible.

With allow_subdirectories=True the whole target is resolved beneath the web
root instead, and anything that resolves outside of it is a 400.

=============================================================================
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TYPE_CHECKING

from .mime_types import get_content_type
from .status_codes import HTTPStatus

if TYPE_CHECKING:
    from ..transaction_log import TransactionLog


REQUEST_LINE_DELIMITER = "\r\n"
TOKEN_DELIMITER = " "
ACCEPTED_METHOD = "GET"


class HTTPParseError(Exception):
    """
    Raised when a request fails parsing or validation.

    Carries the HTTP status code that should be returned to the client:

        400 Bad Request                - Malformed request line or target
        404 Not Found                  - Resolved file does not exist
        406 Method Not Accepted        - Method other than GET
        415 Unsupported Media Type     - Extension not whitelisted
        500 Server Error               - Server not started
        505 HTTP Version Not Supported - Protocol mismatch
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    The three tokens of a request line.

    Attributes:
        method:       First token, e.g. "GET".
        target:       Second token, e.g. "/index.html".
        version:      Third token, e.g. "HTTP/1.1".
        request_line: The full first line, for logging.
    """

    method: str
    target: str
    version: str
    request_line: str = ""

    @property
    def file_name(self) -> str:
        """Last path segment of the target ("" for "/")."""
        return self.target.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ResolvedResource:
    """
    A validated request, ready for the resource loader.

    Attributes:
        path:         Absolute path of the file beneath the web root.
        content_type: MIME type derived from the extension.
        exists:       Whether the path is an existing regular file.
        status:       Outcome of validation (always 200 when returned).
    """

    path: Path
    content_type: str
    exists: bool = True
    status: HTTPStatus = HTTPStatus.OK


class RequestParser:
    """
    Splits raw request bytes into an HTTPRequest.

    Parsing is deliberately minimal: split on CRLF, take the first line,
    split it on single spaces. Consecutive spaces therefore produce empty
    tokens, and any tokens past the third are ignored.
    """

    def parse(self, data: bytes) -> HTTPRequest:
        """
        Parse the request line.

        Args:
            data: Raw bytes from the socket.

        Returns:
            HTTPRequest with method, target and version.

        Raises:
            HTTPParseError: (400) if the first line has fewer than 3 tokens.
        """
        text = data.decode("utf-8", errors="replace")
        request_line = text.split(REQUEST_LINE_DELIMITER)[0]
        tokens = request_line.split(TOKEN_DELIMITER)

        if len(tokens) < 3:
            raise HTTPParseError(f"Invalid request line: {request_line!r}")

        return HTTPRequest(
            method=tokens[0],
            target=tokens[1],
            version=tokens[2],
            request_line=request_line,
        )


class RequestValidator:
    """
    Runs the full parse-and-validate pipeline for one request.

    Usage:
        validator = RequestValidator(
            web_root="/var/www",
            is_started=lambda: server.is_started,
            transaction_log=log,
        )

        try:
            resource = validator.validate(raw)
        except HTTPParseError as e:
            ... answer with e.status_code
    """

    def __init__(
        self,
        web_root: str | Path,
        is_started: Callable[[], bool],
        protocol_version: str = "HTTP/1.1",
        allow_subdirectories: bool = False,
        transaction_log: Optional["TransactionLog"] = None,
    ):
        """
        Initialize the validator.

        Args:
            web_root: Directory all served files live in.
            is_started: Returns True once the server is listening.
            protocol_version: The only protocol token accepted.
            allow_subdirectories: Resolve the full target instead of only
                                  its file name.
            transaction_log: Where each request line is recorded.
        """
        self.web_root = Path(web_root).resolve()
        self.is_started = is_started
        self.protocol_version = protocol_version
        self.allow_subdirectories = allow_subdirectories
        self.transaction_log = transaction_log
        self._parser = RequestParser()

    def validate(self, data: bytes) -> ResolvedResource:
        """
        Parse and validate a raw request.

        Args:
            data: Raw bytes from the socket.

        Returns:
            ResolvedResource for an existing, whitelisted file.

        Raises:
            HTTPParseError: For the first check that fails.
        """
        if not self.is_started():
            raise HTTPParseError("Server is not started", HTTPStatus.FAIL)

        try:
            request = self._parser.parse(data)
        except HTTPParseError:
            self._log_request(data.decode("utf-8", errors="replace").split(REQUEST_LINE_DELIMITER)[0])
            raise

        self._log_request(f"{request.method} {request.target}")

        # ─────────────────────────────────────────────────────────────────
        # PROTOCOL CHECKS
        # ─────────────────────────────────────────────────────────────────
        if request.method != ACCEPTED_METHOD or not data.startswith(ACCEPTED_METHOD.encode()):
            raise HTTPParseError(
                f"Method not accepted: {request.method}",
                HTTPStatus.METHOD_NOT_ACCEPTED,
            )

        if request.version != self.protocol_version:
            raise HTTPParseError(
                f"Unsupported HTTP version: {request.version}",
                HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
            )

        if not request.target.startswith("/"):
            raise HTTPParseError(f"Target must start with '/': {request.target}")

        # ─────────────────────────────────────────────────────────────────
        # RESOURCE CHECKS
        # ─────────────────────────────────────────────────────────────────
        path = self.resolve(request)

        content_type = get_content_type(path)
        if content_type is None:
            raise HTTPParseError(
                f"Unsupported media type: {path.suffix or '(none)'}",
                HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
            )

        resource = ResolvedResource(
            path=path,
            content_type=content_type,
            exists=path.is_file(),
        )
        if not resource.exists:
            raise HTTPParseError(f"File not found: {path}", HTTPStatus.NOT_FOUND)

        return resource

    def resolve(self, request: HTTPRequest) -> Path:
        """
        Map a request target onto a path beneath the web root.

        Raises:
            HTTPParseError: (400) if subdirectories are enabled and the
                            target cannot be resolved or resolves
                            outside the web root.
        """
        if not self.allow_subdirectories:
            return self.web_root / request.file_name

        relative = request.target.replace("\\", "/").lstrip("/")
        if "\x00" in relative:
            raise HTTPParseError(f"NUL byte in target: {request.target!r}")

        try:
            full_path = (self.web_root / relative).resolve()
        except (ValueError, OSError) as e:
            # Symlink loops
            raise HTTPParseError(f"Cannot resolve target {request.target!r}: {e}")

        try:
            full_path.relative_to(self.web_root)
        except ValueError:
            raise HTTPParseError(f"Path escapes web root: {request.target}")
        return full_path

    def _log_request(self, description: str) -> None:
        if self.transaction_log is not None:
            self.transaction_log.write(f"[REQUEST] - {description}")
