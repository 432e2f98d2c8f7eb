"""
=============================================================================
HANDLERS PACKAGE
=============================================================================

Handlers do the work behind a validated request. The server has exactly
one: loading the requested file from the web root.

    from myownwebserver.handlers import ResourceLoader

    loader = ResourceLoader()
    payload = loader.load("/var/www/index.html", "text/html")

=============================================================================
"""

from .resources import ResourceLoader, ResourceLoadError

__all__ = [
    "ResourceLoader",
    "ResourceLoadError",
]
