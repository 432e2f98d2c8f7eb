"""
=============================================================================
TRANSACTION LOG
=============================================================================

Every server event (start, request, response) is appended to a plain text
file, one line per event:

    2026-10-19 14:02:11 [SERVER STARTED] - /var/www 127.0.0.1 8080
    2026-10-19 14:02:15 [REQUEST] - GET /index.html
    2026-10-19 14:02:15 [RESPONSE] - HTTP/1.1 200 OK Content-Type: ...

=============================================================================
FILE HANDLING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     One log call                                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    open(path, "a")  ──►  write one line  ──►  close()               │
    │                                                                      │
    │    The file is never held open between calls.                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

On server start, initialize() checks whether a log from a previous run is
present. If so, the FIRST write after start truncates it (mode "w") and
every later write appends. That one-shot flag lives in LoggerState.

=============================================================================
FAILURE POLICY
=============================================================================

Logging must never break request handling. If a write fails, the handler
makes one best-effort attempt to record the error itself, then hands the
record to logging.Handler.handleError(), which reports on stderr and
returns.

=============================================================================
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Union


LOG_FILE_NAME = "myOwnWebServer.log"
LOG_FORMAT = "%(asctime)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Namespaced logger, kept out of the console output:
#   logging.getLogger("myownwebserver.transactions")
TRANSACTION_LOGGER_NAME = "myownwebserver.transactions"


@dataclass
class LoggerState:
    """
    One-shot truncation flag.

    rotated_once is False only between initialize() finding an old log
    file and the first write after it.
    """

    rotated_once: bool = True


class TransactionLogHandler(logging.Handler):
    """
    logging.Handler that opens, writes and closes the file per record.

    Unlike logging.FileHandler it holds no stream between records, so the
    file can be read, moved or deleted while the server runs.
    """

    def __init__(self, path: Union[str, Path], state: LoggerState):
        super().__init__(level=logging.INFO)
        self.path = Path(path)
        self.state = state
        self.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._append(self.format(record))
        except Exception as e:
            self._fallback(record, e)

    def _append(self, line: str) -> None:
        mode = "a"
        if not self.state.rotated_once:
            mode = "w"  # Truncate the previous run's log once
            self.state.rotated_once = True

        with open(self.path, mode, encoding="utf-8") as log_file:
            log_file.write(line + "\n")

    def _fallback(self, record: logging.LogRecord, error: Exception) -> None:
        try:
            timestamp = datetime.now().strftime(LOG_DATE_FORMAT)
            with open(self.path, "a", encoding="utf-8") as log_file:
                log_file.write(f"{timestamp} - {error}\n")
        except Exception:
            self.handleError(record)


class TransactionLog:
    """
    The server's append-only transaction log.

    Usage:
        log = TransactionLog("/opt/webserver")
        log.initialize()                     # once, at server start
        log.write("[SERVER STARTED] - ...")

    Only one TransactionLog is active per process: creating a new one
    detaches the previous one's handler from the shared logger.
    """

    def __init__(self, log_dir: Union[str, Path], file_name: str = LOG_FILE_NAME):
        """
        Args:
            log_dir: Directory the log file is written to.
            file_name: Name of the log file.
        """
        self.path = Path(log_dir) / file_name
        self.state = LoggerState()

        self._handler = TransactionLogHandler(self.path, self.state)
        self._logger = logging.getLogger(TRANSACTION_LOGGER_NAME)
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False

        for handler in list(self._logger.handlers):
            if isinstance(handler, TransactionLogHandler):
                self._logger.removeHandler(handler)
        self._logger.addHandler(self._handler)

    @property
    def existed_at_start(self) -> bool:
        """True while an old log file is waiting to be truncated."""
        return not self.state.rotated_once

    def initialize(self) -> None:
        """
        Record whether a log file from a previous run exists.

        Call once when the server starts. If it does, the next write
        truncates it.
        """
        self.state.rotated_once = not self.path.exists()

    def write(self, message: str) -> None:
        """Append one timestamped line to the log."""
        self._logger.info(message)

    def close(self) -> None:
        """Detach from the shared logger."""
        self._logger.removeHandler(self._handler)
        self._handler.close()
