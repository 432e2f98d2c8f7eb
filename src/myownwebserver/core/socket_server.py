"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: create, bind, listen, accept, close.

=============================================================================
ONE CONNECTION AT A TIME
=============================================================================

    ┌───────────────────────┐
    │   Listening Socket    │ ◄── Created once, bound to -webIP:-webPort
    └───────────┬───────────┘
                │ accept()
                ▼
    ┌───────────────────────┐
    │  Client connection    │ ◄── Handled to completion, synchronously
    └───────────┬───────────┘
                │ handler returns, connection closed
                ▼
            accept() again

While one client is being served, other clients wait in the listen
backlog. There is no thread pool and no select loop.

=============================================================================
FAILURE POLICY
=============================================================================

Any OSError while accepting, reading or writing is FATAL to the loop: it
is logged to the console and the listener stops. There is no
per-connection isolation and no retry.

=============================================================================
SHUTDOWN
=============================================================================

accept() is given a 1-second timeout so the loop can notice shutdown()
(or SIGINT/SIGTERM) without a client having to connect first:

    while running:
        try:
            accept()      # Blocks for 1 second max
        except timeout:
            continue      # Check running flag, loop again

=============================================================================
"""

import ipaddress
import socket
import signal
import logging
import threading
from typing import Optional, Callable

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    bind()            Create socket, bind, listen                     │
    │        │                                                             │
    │        ▼                                                             │
    │    serve(handler)    Main loop (blocks here!)                        │
    │        │                                                             │
    │        └──► while running:                                           │
    │                accept()        Wait for connection                   │
    │                Connection()    Wrap client socket                    │
    │                handler(conn)   Serve it to completion                │
    │                                                                      │
    │    shutdown()        Clear the running flag                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.bind()                    # Raises OSError if the port is taken
        server.serve(handle_connection)  # Blocks until shutdown or error
    """

    ACCEPT_POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, buffer size).

        The socket is created lazily in bind().
        """
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._original_handlers: dict = {}

    def _create_socket(self) -> socket.socket:
        """Create a TCP socket of the right address family."""
        family = socket.AF_INET
        if ipaddress.ip_address(self.config.host.split("%", 1)[0]).version == 6:
            family = socket.AF_INET6

        sock = socket.socket(family, socket.SOCK_STREAM)

        # SO_REUSEADDR: restart immediately instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers for graceful shutdown.

        Python only allows this from the main thread; when the server runs
        in a background thread (tests, embedding) shutdown() is the way to
        stop it.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def bind(self):
        """
        Create the listening socket, bind it and start listening.

        Raises:
            OSError: If the address cannot be bound (in use, no permission).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._running = True

        logger.info(f"Server listening on {self.config.host}:{self.config.port}")

    def serve(self, connection_handler: Callable[[Connection], None]):
        """
        Accept and handle connections until shutdown or a socket error.

        bind() must have been called first.

        Args:
            connection_handler: Called with each accepted connection; it
                                must fully serve and close it.
        """
        if self._socket is None:
            raise RuntimeError("serve() called before bind()")

        self._setup_signals()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        ┌─────────────────────────────────────────────────────────────────┐
        │                     Accept Loop Flow                             │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while self._running:                                           │
        │       ├──► accept()              (or timeout, loop again)        │
        │       ├──► Connection(...)                                       │
        │       └──► connection_handler(conn)                              │
        │                                                                  │
        │   OSError anywhere ──► log, leave the loop (server stops)        │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()

                logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    buffer_size=self.config.buffer_size,
                )

                connection_handler(conn)

            except socket.timeout:
                continue

            except OSError as e:
                if self._running:
                    logger.error(f"Socket error, stopping server: {e}")
                break

        self._running = False

    def shutdown(self):
        """
        Ask the accept loop to stop.

        Safe to call from a signal handler or another thread, and safe to
        call more than once.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Restore signal handlers and close the listening socket."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        logger.info("Socket server stopped")

