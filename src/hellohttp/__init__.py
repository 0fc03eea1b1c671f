"""
=============================================================================
HELLOHTTP - A Minimal Single-Threaded HTTP/1.1 Server
=============================================================================

Raw sockets in, static responses out:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept ──► read once ──► request line ──► exact-match route ──►   │
    │   status line + CRLF CRLF + body ──► close ──► accept next          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One connection at a time, one request per connection, no response
headers. The peer learns the body has ended when the connection closes.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    hellohttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m hellohttp)
    ├── server.py            # HTTPServer: per-connection pipeline
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # Structured access log
    ├── core/
    │   ├── socket_server.py # Bind + sequential accept loop
    │   └── connection.py    # One client socket, closed on every path
    ├── http/
    │   ├── request.py       # Request line parsing
    │   ├── router.py        # Exact-match route table
    │   └── response.py      # STATUS CRLF CRLF BODY serialization
    └── handlers/
        ├── static.py        # Bodies from files
        └── memory.py        # Bodies from a dict, built-in pages

=============================================================================
QUICK START
=============================================================================

    from hellohttp import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(port=7878)).run()

    $ curl -i http://127.0.0.1:7878/
    HTTP/1.1 200 OK

    <!DOCTYPE html>...

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
