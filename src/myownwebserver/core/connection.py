"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the small API the server loop needs:
read a request, write response chunks, close.

=============================================================================
ONE READ PER REQUEST
=============================================================================

TCP is a byte stream, so a request can in principle arrive split over
several recv() calls. This server does not reassemble: each request is a
single bounded read.

    recv(2048)  ──►  b"GET /index.html HTTP/1.1\r\nHost: ...\r\n\r\n"
                      └────────────── the request line is all we need ──┘

    recv(2048)  ──►  b""    ◄── client closed its side: connection is done

The request line is the first thing a client sends and is far shorter than
the buffer, so in practice it always arrives in the first read.

There is NO read timeout: a client that connects and sends nothing keeps
the (single-threaded) server waiting.

=============================================================================
"""

import socket
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterable
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Blocked in recv()
    WRITING = "writing"      # Sending response chunks
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        requests_handled: Number of reads that produced a request.
        buffer_size: Maximum bytes taken by a single read.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    requests_handled: int = 0

    buffer_size: int = 2048

    def __post_init__(self):
        # Blocking, no timeout
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    def read(self) -> bytes:
        """
        Read one request.

        Returns:
            Up to buffer_size bytes; b"" once the client has closed.

        Raises:
            OSError: On socket failure (the server treats it as fatal).
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(self.buffer_size)

        if data:
            self.requests_handled += 1
            logger.debug(f"[{self.id}] Read {len(data)} bytes")

        return data

    def send(self, chunks: Iterable[bytes]) -> None:
        """
        Send response chunks in order.

        Each chunk is a separate sendall(), so a binary response goes out
        as headers first, then the image bytes.

        Raises:
            OSError: On socket failure.
        """
        self.state = ConnectionState.WRITING

        for chunk in chunks:
            self.socket.sendall(chunk)

    def close(self):
        """Close the socket. Safe to call more than once."""
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.close()
        except OSError:
            pass  # Already disconnected

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def __enter__(self):
        """
        Allows using Connection with a 'with' statement:

            with conn:
                data = conn.read()
                conn.send(response.writes())
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
