"""HTTP server for Rootline."""

from rootline.server.app import RootlineServer, create_app

__all__ = [
    "RootlineServer",
    "create_app",
]
