"""HTTP server for clocktick callbacks."""

from clocktick.server.app import create_app
from clocktick.server.runner import ServerRunner

__all__ = [
    "ServerRunner",
    "create_app",
]
