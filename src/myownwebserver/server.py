"""
=============================================================================
WEB SERVER
=============================================================================

The orchestrator: ties the socket server, the request pipeline and the
transaction log together.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WEB SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │    WebServer    │                          │
    │                        │  (state machine)│                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │       ┌──────────────┬──────────┴──────────┬──────────────┐         │
    │       ▼              ▼                     ▼              ▼         │
    │ ┌────────────┐ ┌──────────────┐ ┌────────────────┐ ┌────────────┐  │
    │ │SocketServer│ │RequestValid- │ │ ResourceLoader │ │ Response-  │  │
    │ │            │ │ator          │ │                │ │ Formatter  │  │
    │ └─────┬──────┘ └──────────────┘ └────────────────┘ └────────────┘  │
    │       ▼                                                             │
    │ ┌────────────┐          every event ──► TransactionLog              │
    │ │ Connection │                                                      │
    │ └────────────┘                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STATE MACHINE
=============================================================================

    STOPPED ──run()──► STARTED ──► ACCEPTING ◄─────────────────────┐
                                      │                             │
                                      │ client connects             │
                                      ▼                             │
                                   READING ◄── text 200 ────┐       │
                                      │                     │       │
                          ┌───────────┴─────────┐           │       │
                    empty read             request bytes    │       │
                          │                     ▼           │       │
                          │                RESPONDING ──────┘       │
                          │                     │ image 200, error  │
                          ▼                     ▼                   │
                       CLOSING ◄────────────────┘                   │
                          └─────────────────────────────────────────┘

    Any socket error ──► STOPPED (the server stops listening)

Only a successful TEXT response keeps the connection reading. An image
response, or any failure, is written and the socket is closed without
reading again.

=============================================================================
"""

import logging
import threading
from enum import Enum
from typing import Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import ResourceLoader, ResourceLoadError
from .http import (
    HTTPParseError, HTTPResponse, HTTPStatus,
    RequestValidator, ResponseFormatter, is_image_type,
)
from .transaction_log import TransactionLog


logger = logging.getLogger(__name__)


class ServerState(Enum):
    """Where the server is in its lifecycle."""
    STOPPED = "stopped"
    STARTED = "started"          # Listening, nothing accepted yet
    ACCEPTING = "accepting"      # Waiting in accept()
    READING = "reading"          # Waiting for request bytes
    RESPONDING = "responding"    # Running the pipeline, writing the response
    CLOSING = "closing"          # Closing the client socket


class WebServer:
    """
    Single-process HTTP/1.1 GET server for one web root.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(web_root="/var/www", host="127.0.0.1", port=8080)
        server = WebServer(config)
        server.run()        # Blocks until Ctrl+C or a socket error

    The request pipeline can be driven without a socket:

        response, keep_reading = server.handle_request(b"GET /index.html HTTP/1.1\\r\\n\\r\\n")

    =========================================================================
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the server.

        Args:
            config: Server configuration.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        self.config = config
        self.config.validate()  # Fail-fast on invalid config

        self.state = ServerState.STOPPED
        self._started = threading.Event()

        # ─────────────────────────────────────────────────────────────────
        # PIPELINE
        # ─────────────────────────────────────────────────────────────────

        self.transaction_log = TransactionLog(config.log_directory)

        self.validator = RequestValidator(
            web_root=config.web_root,
            is_started=lambda: self.is_started,
            protocol_version=config.protocol_version,
            allow_subdirectories=config.allow_subdirectories,
            transaction_log=self.transaction_log,
        )
        self.loader = ResourceLoader()
        self.formatter = ResponseFormatter(
            config.server_address,
            protocol_version=config.protocol_version,
            transaction_log=self.transaction_log,
        )

        self._socket_server = SocketServer(config)

    @property
    def is_started(self) -> bool:
        """True from the moment the listener is bound until it stops."""
        return self.state != ServerState.STOPPED

    def wait_until_started(self, timeout: float = None) -> bool:
        """Block until run() has bound the listener. Returns False on timeout."""
        return self._started.wait(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listener cannot be bound.
        """
        self._setup_logging()

        self._socket_server.bind()

        self.state = ServerState.STARTED
        self.transaction_log.initialize()
        self.transaction_log.write(
            f"[SERVER STARTED] - {self.config.web_root} {self.config.host} {self.config.port}"
        )
        self._print_startup_banner()
        self._started.set()

        try:
            self.state = ServerState.ACCEPTING
            self._socket_server.serve(self._process_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self.state = ServerState.STOPPED
            self._started.clear()
            self.transaction_log.close()
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. The run() call returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure console logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("myownwebserver").setLevel(level)

    def _print_startup_banner(self):
        print()
        print(f"  myOwnWebServer serving {self.config.web_root}")
        print(f"  http://{self.config.server_address}/")
        print(f"  Transaction log: {self.transaction_log.path}")
        print("  Press Ctrl+C to stop")
        print()

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_request(self, raw: bytes) -> Tuple[HTTPResponse, bool]:
        """
        Run one request through validate → load → format.

        Args:
            raw: Bytes from a single read.

        Returns:
            (response, keep_reading). keep_reading is True only for a
            successful text response; otherwise the connection ends after
            the response is sent.
        """
        try:
            resource = self.validator.validate(raw)
            payload = self.loader.load(resource.path, resource.content_type)

        except HTTPParseError as e:
            logger.info(f"Rejected request ({int(e.status_code)}): {e}")
            return self.formatter.build(e.status_code, None, None), False

        except ResourceLoadError as e:
            logger.info(f"Could not load resource ({e.reason}): {e}")
            return self.formatter.build(e.status_code, None, e.payload), False

        response = self.formatter.build(HTTPStatus.OK, resource.content_type, payload)
        return response, not is_image_type(resource.content_type)

    def _process_connection(self, conn: Connection):
        """
        Serve one client until it closes or a request fails.

        =====================================================================
        CONNECTION PROCESSING LOOP
        =====================================================================

        1. Read (one bounded recv)
        2. Empty read: the client is done, close
        3. Run the pipeline, send the response chunks
        4. Text success: back to 1. Image success or failure: close

        OSError is not caught here: it propagates to the accept loop,
        which stops the server.

        =====================================================================
        """
        with conn:
            while True:
                self.state = ServerState.READING
                raw = conn.read()
                if not raw:
                    break

                self.state = ServerState.RESPONDING
                response, keep_reading = self.handle_request(raw)
                conn.send(response.writes())

                if not keep_reading:
                    break

            self.state = ServerState.CLOSING

        logger.debug(f"[{conn.id}] {conn.client_ip} served {conn.requests_handled} requests")
        self.state = ServerState.ACCEPTING
