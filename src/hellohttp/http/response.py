"""
=============================================================================
RESPONSE BUILDER
=============================================================================

Turns a ResponseDescriptor into the exact bytes written to the client.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n        ← Status line, copied verbatim
    \r\n                       ← Empty header block
    <h1>Hello!</h1>...         ← Body bytes, unmodified

No headers are emitted: no Content-Length, no Content-Type, no Date.
The client knows the body is over when the server closes the
connection, which it always does right after sending.

=============================================================================
BODY SOURCES
=============================================================================

The body is looked up by key in a BodySource: anything with a
get(key) -> bytes method that raises BodySourceError when it cannot
deliver. See handlers/ for the file-backed and in-memory sources.

A failed lookup is fatal for the connection: nothing is sent and the
connection is closed. We do not fall back to a different page.

=============================================================================
"""

from dataclasses import dataclass
from typing import Protocol

from .router import ResponseDescriptor


CRLF = b"\r\n"


class BodySourceError(LookupError):
    """
    Raised when a response body cannot be retrieved.

    Carries the key that failed so the handler can log it.
    """

    def __init__(self, key: str, reason: str = "not found"):
        super().__init__(f"Body '{key}' unavailable: {reason}")
        self.key = key
        self.reason = reason


class BodySource(Protocol):
    """Key → bytes lookup used to fill response bodies."""

    def get(self, key: str) -> bytes:
        """Return the body stored under key, or raise BodySourceError."""
        ...


@dataclass
class HTTPResponse:
    """
    A fully resolved response, ready to serialize.

    Attributes:
        status_line: e.g. "HTTP/1.1 200 OK"
        body: raw body bytes
    """

    status_line: str
    body: bytes = b""

    def to_bytes(self) -> bytes:
        """
        Serialize as STATUS-LINE CRLF CRLF BODY.

        The status line is ASCII on the wire; the body is passed through
        untouched.
        """
        return self.status_line.encode("latin-1") + CRLF + CRLF + self.body


class ResponseBuilder:
    """
    Builds responses from descriptors using one body source.

    Usage:
        builder = ResponseBuilder(MemoryBodySource({"hello.html": b"Hi"}))
        response = builder.build(ResponseDescriptor("HTTP/1.1 200 OK", "hello.html"))
        response.to_bytes()  # b"HTTP/1.1 200 OK\\r\\n\\r\\nHi"
    """

    def __init__(self, body_source: BodySource):
        self.body_source = body_source

    def build(self, descriptor: ResponseDescriptor) -> HTTPResponse:
        """
        Look up the body and pair it with the status line.

        Raises:
            BodySourceError: If the body cannot be retrieved.
        """
        try:
            body = self.body_source.get(descriptor.body_key)
        except BodySourceError:
            raise
        except OSError as e:
            raise BodySourceError(descriptor.body_key, str(e)) from e

        return HTTPResponse(status_line=descriptor.status_line, body=bytes(body))


def build_response(descriptor: ResponseDescriptor, body_source: BodySource) -> bytes:
    """Build and serialize in one step."""
    return ResponseBuilder(body_source).build(descriptor).to_bytes()
