"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the hello server.

Everything the server needs to know at startup lives in one dataclass:
where to listen, how big the single read is, where response bodies come
from and how to log. The route table itself is built separately (see
http/router.py) because it is code-shaped rather than scalar-shaped.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m hellohttp --port 3000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 python -m hellohttp                        │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the hello server.

    NETWORK SETTINGS
    - host, port, backlog

    CONNECTION SETTINGS
    - buffer_size, timeout

    RESPONSE BODIES
    - static_dir, not_found_key

    LOGGING
    - log_level, log_format
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 7878
    """
    The port number to listen on. 0 asks the OS for a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections.
    Connections wait here while the single handler is busy.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONNECTION SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 512
    """
    Capacity of the one and only read per connection.
    Anything the client sends past this many bytes is never looked at.
    """

    timeout: Optional[float] = None
    """
    Socket timeout for reads and writes, in seconds.
    None = fully blocking: a silent client stalls the whole server.
    When set, an expired timeout is a connection-fatal read/write failure.
    """

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE BODIES
    # ─────────────────────────────────────────────────────────────────────

    static_dir: Optional[str] = None
    """
    Directory holding the response body files (hello.html, 404.html, ...).
    If unset, the built-in pages are served from memory.
    """

    not_found_key: str = "404.html"
    """
    Body key of the built-in fallback route.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    log_format: str = "text"
    """
    Access log format: 'text' (Apache style) or 'json'.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST         Server host (default: 127.0.0.1)
        HTTP_PORT         Server port (default: 7878)
        HTTP_BUFFER_SIZE  Read buffer capacity (default: 512)
        HTTP_TIMEOUT      Socket timeout in seconds (default: none)
        HTTP_STATIC_DIR   Body files directory (default: built-in pages)
        HTTP_LOG_LEVEL    Logging level (default: INFO)
        HTTP_LOG_FORMAT   Access log format (default: text)
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "7878")),
            buffer_size=int(os.getenv("HTTP_BUFFER_SIZE", "512")),
            timeout=float(timeout) if timeout else None,
            static_dir=os.getenv("HTTP_STATIC_DIR"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value stops the process before
        the socket is ever bound.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Unknown log format: {self.log_format}. "
                f"Expected one of {', '.join(LOG_FORMATS)}."
            )

        if not self.not_found_key:
            raise ValueError("not_found_key must not be empty")
