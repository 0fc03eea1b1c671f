"""
=============================================================================
REQUEST LINE PARSER
=============================================================================

Extracts method, target and version from the first line of whatever the
single read returned. Headers and body are never looked at.

=============================================================================
REQUEST LINE ANATOMY
=============================================================================

    GET /index.html HTTP/1.1\r\n
    ─┬─ ─────┬───── ────┬─── ─┬─
     │       │          │     │
   Method  Target    Version  CRLF terminator

=============================================================================
TOLERANCE RULES
=============================================================================

The buffer comes from one bounded recv(), so it can be anything from a
complete request to three stray bytes:

    b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"  → (GET, /, HTTP/1.1)
    b"GET / HTTP/1.1"                     → (GET, /, HTTP/1.1)  no CRLF: whole
                                            buffer is the candidate line
    b"GET"                                → None  (unrecognized)
    b"GET  / HTTP/1.1\r\n"                → None  (double space = 4 fields)
    b"\xff\xfe / HTTP/1.1\r\n"            → (b"\xff\xfe", /, HTTP/1.1)

Everything stays bytes. Nothing is decoded, so invalid UTF-8 cannot make
the parser fail; it only makes the request unlikely to match a route.

An unrecognized line is not an error. It is handed to the router as None,
and None matches no configured rule, which yields the 404 response.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


CRLF = b"\r\n"
SP = b" "


@dataclass(frozen=True)
class RequestLine:
    """
    The three fields of an HTTP request line, as raw bytes.

    Ephemeral: produced once per connection and consumed immediately by
    the router.
    """

    method: bytes
    target: bytes
    version: bytes

    @property
    def method_text(self) -> str:
        """Method for display. Undecodable bytes become U+FFFD."""
        return self.method.decode("utf-8", errors="replace")

    @property
    def target_text(self) -> str:
        """Target for display. Undecodable bytes become U+FFFD."""
        return self.target.decode("utf-8", errors="replace")

    @property
    def version_text(self) -> str:
        return self.version.decode("utf-8", errors="replace")

    def __str__(self) -> str:
        return f"{self.method_text} {self.target_text} {self.version_text}"


def parse_request_line(buffer: bytes) -> Optional[RequestLine]:
    """
    Parse the request line out of a raw read buffer.

    Args:
        buffer: Bytes from the connection's single read. Trailing NUL
                padding (as left by a fixed-size buffer) is ignored.

    Returns:
        RequestLine, or None if the line does not split into exactly
        three space-separated fields. Never raises.
    """
    data = bytes(buffer).rstrip(b"\x00")

    # Cut at the first CRLF; if the read stopped before one arrived,
    # the whole buffer is the candidate line.
    end = data.find(CRLF)
    line = data if end == -1 else data[:end]

    fields = line.split(SP)
    if len(fields) != 3:
        return None

    method, target, version = fields
    return RequestLine(method=method, target=target, version=version)
