"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized, validated configuration for the web server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHERE VALUES COME FROM                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Command-line arguments (mandatory)                             │
    │      └── -webRoot=<dir> -webIP=<address> -webPort=<port>           │
    │                                                                      │
    │   2. Environment variables (optional)                               │
    │      └── WEBSERVER_LOG_DIR    where myOwnWebServer.log is written  │
    │      └── WEBSERVER_LOG_LEVEL  console verbosity                    │
    │                                                                      │
    │   3. Defaults in the dataclass                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The config is a FROZEN dataclass: once the server starts, nothing can
change where it serves from or what it binds to.

=============================================================================
FAIL-FAST VALIDATION
=============================================================================

validate() runs before the server is created. A config that passes is
guaranteed to have:

    - a web root that is an existing directory
    - a bind address that belongs to this machine
    - a port in 1-65535

Any failure raises ConfigError and the server never starts.

=============================================================================
"""

import ipaddress
import logging
import os
import socket
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when configuration values are missing or invalid."""


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    MANDATORY
    - web_root, host, port

    NETWORK SETTINGS
    - buffer_size, backlog

    HTTP SETTINGS
    - protocol_version, allow_subdirectories

    LOGGING
    - log_dir, log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # MANDATORY SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    web_root: str
    """Directory all served files live in."""

    host: str
    """
    The IP address to bind to.
    Must be one of this machine's own addresses (see local_addresses()).
    """

    port: int
    """The TCP port to listen on."""

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 2048
    """
    Size of the single read per request, in bytes.
    Anything past this in one request is not looked at.
    """

    backlog: int = 128
    """Maximum number of queued connections waiting for accept()."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    protocol_version: str = "HTTP/1.1"
    """The only protocol token accepted, and the one every response uses."""

    allow_subdirectories: bool = False
    """
    False: only the file name of the target is used (/a/b/c.txt → c.txt).
    True:  the full target is resolved beneath web_root; escapes are 400.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_dir: Optional[str] = None
    """
    Directory for myOwnWebServer.log.
    None = the directory of the running program.
    """

    log_level: str = "INFO"
    """Console logging level (DEBUG, INFO, WARNING, ERROR)."""

    @property
    def server_address(self) -> str:
        """Value of the Server response header: "ip:port"."""
        return f"{self.host}:{self.port}"

    @property
    def log_directory(self) -> Path:
        """The resolved directory of the transaction log."""
        if self.log_dir:
            return Path(self.log_dir)
        return default_log_dir()

    @classmethod
    def from_args(cls, web_root: str, web_ip: str, web_port: str) -> "ServerConfig":
        """
        Create configuration from the three command-line values.

        Optional settings are read from the environment:

            WEBSERVER_LOG_DIR    Directory for the log file
            WEBSERVER_LOG_LEVEL  Console logging level (default: INFO)

        Raises:
            ConfigError: If the port is not an integer.
        """
        try:
            port = int(web_port)
        except ValueError:
            raise ConfigError("Sorry, the provided port is invalid!")

        return cls(
            web_root=web_root,
            host=web_ip,
            port=port,
            log_dir=os.getenv("WEBSERVER_LOG_DIR"),
            log_level=os.getenv("WEBSERVER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigError: On the first invalid value.
        """
        if not Path(self.web_root).is_dir():
            raise ConfigError("Sorry, the provided webRoot does not exist!")

        try:
            # Compared without any IPv6 scope, like local_addresses()
            address = ipaddress.ip_address(self.host.split("%", 1)[0])
        except ValueError:
            raise ConfigError("Sorry, the provided IPAddress is invalid!")

        if address not in local_addresses():
            raise ConfigError("Sorry, the provided IPAddress is not available on the current machine!")

        if not 0 < self.port < 65536:
            raise ConfigError(f"Sorry, the provided port is invalid! Must be 1-65535, got {self.port}.")

        if self.buffer_size < 1:
            raise ConfigError("buffer_size must be >= 1")


# =============================================================================
# HOST INSPECTION
# =============================================================================

def local_addresses() -> set:
    """
    IP addresses that belong to this machine.

    Collects every address the host name resolves to, plus the loopback
    addresses, as ipaddress objects so "::1" and "0:0::1" compare equal.
    """
    addresses = {ipaddress.ip_address("127.0.0.1"), ipaddress.ip_address("::1")}

    hostname = socket.gethostname()
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror as e:
        logger.debug(f"Could not resolve host name {hostname}: {e}")
        return addresses

    for family, _, _, _, sockaddr in infos:
        # IPv6 link-local addresses may carry a scope: fe80::1%eth0
        host = sockaddr[0].split("%", 1)[0]
        try:
            addresses.add(ipaddress.ip_address(host))
        except ValueError:
            continue

    return addresses


def default_log_dir() -> Path:
    """Directory of the running program, or the working directory."""
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path.cwd()
