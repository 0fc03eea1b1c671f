"""
Low-level transport components: the listening loop and the per-client
connection wrapper.
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Binds and accepts, one connection at a time
    "Connection",       # Wrapper for one client socket
    "ConnectionState",  # Per-connection lifecycle states
]
