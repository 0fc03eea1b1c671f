"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket. A Connection is owned by
exactly one handler invocation and is closed when that invocation ends,
whether it finished normally or bailed out half way.

=============================================================================
ONE READ, NO REASSEMBLY
=============================================================================

TCP is a byte stream. A request may arrive in several chunks, so a
general HTTP server loops on recv() until it sees the blank line that
ends the headers. This server does not:

    ┌─────────────────────────────────────────────────────────────────┐
    │  recv(buffer_size)  ──►  whatever arrived first, up to N bytes   │
    └─────────────────────────────────────────────────────────────────┘

Only the request line matters, and the request line is nearly always in
the first segment. If it was cut short, the parser sees a truncated line
and the request falls through to the 404 route. That is accepted
behaviour, not an error.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ACCEPTED ──► READ ──► PARSED ──► ROUTED ──► BUILT ──► SENT ──┐
        │          │                              │        │      │
        └──────────┴──────────────────────────────┴────────┴──────┴──► CLOSED

Any failure jumps straight to CLOSED. Nothing is guaranteed to have
reached the client unless SENT was reached first.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)

# Total time close() spends draining unread client bytes
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Per-connection lifecycle states."""
    ACCEPTED = "accepted"  # Just returned by accept()
    READ = "read"          # Single read done
    PARSED = "parsed"      # Request line extracted (or found unrecognized)
    ROUTED = "routed"      # Response descriptor chosen
    BUILT = "built"        # Response bytes assembled
    SENT = "sent"          # All bytes handed to the OS
    CLOSED = "closed"      # Socket released


@dataclass
class Connection:
    """
    Represents one client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short random identifier used in log lines.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Capacity of the single read.
        timeout: Socket timeout in seconds, None for fully blocking I/O.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 512
    timeout: Optional[float] = None

    def __post_init__(self):
        # Accepted sockets may inherit the listener's polling timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Perform the one bounded read for this connection.

        Returns:
            Up to buffer_size bytes, or None if the client closed (or reset)
            the connection without sending anything.

        Raises:
            OSError: Any other socket failure, including an expired timeout.
        """
        try:
            data = self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return None

        if not data:
            return None

        self.state = ConnectionState.READ
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response.

        sendall() keeps writing until every byte is accepted by the kernel,
        so a True return means nothing is left buffered on our side.
        Partial writes are never retried.

        Returns:
            True if send succeeded, False if the connection failed.
        """
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.state = ConnectionState.SENT
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR): queued bytes go out, followed by FIN.
           The client sees end-of-body here, there is no Content-Length.
        2. Drain for at most DRAIN_TIMEOUT seconds so unread request bytes
           do not turn the close into a reset that could discard the
           response. A peer that keeps sending is cut off at the deadline.
        3. close(): release the file descriptor.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.2f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - the connection is closed on every path."""
        self.close()
        return False  # Don't suppress exceptions
