"""
HTTP protocol pieces: request line parsing, routing and response
serialization.

    bytes ──► parse_request_line ──► Router.resolve ──► ResponseBuilder ──► bytes
"""

from .request import RequestLine, parse_request_line
from .router import (
    ResponseDescriptor,
    RouteRule,
    Router,
    NOT_FOUND,
    default_router,
)
from .response import (
    BodySource,
    BodySourceError,
    HTTPResponse,
    ResponseBuilder,
    build_response,
)

__all__ = [
    # Request
    "RequestLine",
    "parse_request_line",
    # Routing
    "ResponseDescriptor",
    "RouteRule",
    "Router",
    "NOT_FOUND",
    "default_router",
    # Response
    "BodySource",
    "BodySourceError",
    "HTTPResponse",
    "ResponseBuilder",
    "build_response",
]
