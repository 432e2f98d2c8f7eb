"""
=============================================================================
MYOWNWEBSERVER - Minimal HTTP/1.1 Static File Server
=============================================================================

Serves the files of one directory over HTTP/1.1, one connection at a time,
using raw Python sockets. Only GET is accepted and only a handful of file
types are served. Every event is appended to myOwnWebServer.log.

=============================================================================
REQUEST PIPELINE
=============================================================================

    socket bytes
        │
        ▼
    ┌────────────────────┐   HTTPParseError (400/404/406/415/500/505)
    │  RequestValidator  │ ─────────────────────────────────────┐
    └─────────┬──────────┘                                      │
              │ ResolvedResource(path, content_type)            │
              ▼                                                 │
    ┌────────────────────┐   ResourceLoadError (404)            │
    │   ResourceLoader   │ ─────────────────────────────────┐   │
    └─────────┬──────────┘                                  │   │
              │ str (text) or bytes (image)                 │   │
              ▼                                             ▼   ▼
    ┌────────────────────────────────────────────────────────────────┐
    │                      ResponseFormatter                         │
    └─────────┬──────────────────────────────────────────────────────┘
              ▼
        socket bytes

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    myownwebserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m myownwebserver)
    ├── server.py            # WebServer state machine and connection loop
    ├── config.py            # ServerConfig dataclass
    ├── transaction_log.py   # myOwnWebServer.log writer
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop
    │   └── connection.py    # Client connection wrapper
    ├── http/
    │   ├── request.py       # Request line parsing and validation
    │   ├── response.py      # Response framing
    │   ├── status_codes.py  # Supported status codes
    │   └── mime_types.py    # Extension whitelist
    └── handlers/
        └── resources.py     # Reading files from the web root

=============================================================================
QUICK START
=============================================================================

    myOwnWebServer -webRoot=/var/www -webIP=127.0.0.1 -webPort=8080

or from Python:

    from myownwebserver import WebServer, ServerConfig

    server = WebServer(ServerConfig(web_root="/var/www", host="127.0.0.1", port=8080))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer, ServerState
from .config import ServerConfig, ConfigError

__all__ = ["WebServer", "ServerState", "ServerConfig", "ConfigError", "__version__"]
