"""
=============================================================================
ROUTE RESOLVER
=============================================================================

Maps a parsed request line to the response that should be sent back.

=============================================================================
EXACT MATCHING ONLY
=============================================================================

A rule matches when the request's method AND target are byte-for-byte
equal to the rule's. There are no path parameters, no prefixes, no
wildcards and no regular expressions:

    Rule: GET /

    GET /            ✓
    GET /?x=1        ✗  (query strings are part of the target)
    GET /index.html  ✗
    get /            ✗  (methods are case-sensitive)
    HEAD /           ✗

=============================================================================
RESOLUTION ORDER
=============================================================================

    rules[0] ──► rules[1] ──► ... ──► rules[n-1] ──► default (404)
       │            │                     │
       └── first match wins ──────────────┘

Rules are expected to be disjoint, so order only matters if someone
registers the same (method, target) twice; the earlier one then shadows
the later one. resolve() never fails: the default descriptor catches
everything, including request lines the parser could not recognize.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

from .request import RequestLine


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseDescriptor:
    """
    What to send back: a literal status line and the key of the body.

    Example:
        ResponseDescriptor("HTTP/1.1 200 OK", "hello.html")
    """

    status_line: str
    body_key: str

    def __post_init__(self):
        # The status line goes on the wire as a single latin-1 line
        self.status_line.encode("latin-1")
        if "\r" in self.status_line or "\n" in self.status_line:
            raise ValueError(f"Status line must be a single line: {self.status_line!r}")


@dataclass(frozen=True)
class RouteRule:
    """An exact (method, target) pattern and the response it selects."""

    method: bytes
    target: bytes
    descriptor: ResponseDescriptor

    def matches(self, request_line: RequestLine) -> bool:
        return (
            request_line.method == self.method
            and request_line.target == self.target
        )

    def __str__(self) -> str:
        method = self.method.decode("utf-8", errors="replace")
        target = self.target.decode("utf-8", errors="replace")
        return (
            f"{method:7} {target:20} → "
            f"{self.descriptor.status_line} [{self.descriptor.body_key}]"
        )


NOT_FOUND = ResponseDescriptor("HTTP/1.1 404 NOT FOUND", "404.html")


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


class Router:
    """
    Ordered table of exact-match rules with a built-in fallback.

    Usage:
        router = Router()
        router.add_route("GET", "/", "HTTP/1.1 200 OK", "hello.html")

        router.resolve(parse_request_line(b"GET / HTTP/1.1\\r\\n"))
        # ResponseDescriptor("HTTP/1.1 200 OK", "hello.html")

        router.resolve(None)
        # ResponseDescriptor("HTTP/1.1 404 NOT FOUND", "404.html")
    """

    def __init__(
        self,
        rules: Iterable[RouteRule] = (),
        default: ResponseDescriptor = NOT_FOUND,
    ):
        self._rules: list[RouteRule] = list(rules)
        self._default = default

    @property
    def default(self) -> ResponseDescriptor:
        """The descriptor returned when nothing matches."""
        return self._default

    @property
    def routes(self) -> Tuple[RouteRule, ...]:
        """Configured rules in priority order."""
        return tuple(self._rules)

    def add_route(
        self,
        method: Union[str, bytes],
        target: Union[str, bytes],
        status_line: str,
        body_key: str,
    ) -> RouteRule:
        """
        Append a rule at the lowest priority.

        Args:
            method: Request method to match exactly, e.g. "GET".
            target: Request target to match exactly, e.g. "/".
            status_line: Literal status line to respond with.
            body_key: Key handed to the body source.

        Returns:
            The new rule.
        """
        rule = RouteRule(
            method=_to_bytes(method),
            target=_to_bytes(target),
            descriptor=ResponseDescriptor(status_line, body_key),
        )

        for existing in self._rules:
            if existing.method == rule.method and existing.target == rule.target:
                logger.warning(f"Route shadowed by an earlier rule: {rule}")
                break

        self._rules.append(rule)
        return rule

    def resolve(self, request_line: Optional[RequestLine]) -> ResponseDescriptor:
        """
        Pick the response descriptor for a request.

        Args:
            request_line: Parsed request line, or None if unrecognized.

        Returns:
            The first matching rule's descriptor, else the default.
        """
        if request_line is not None:
            for rule in self._rules:
                if rule.matches(request_line):
                    return rule.descriptor
        return self._default

    def describe(self) -> Iterator[str]:
        """Yield one readable line per rule, fallback last."""
        for rule in self._rules:
            yield str(rule)
        yield f"{'*':28} → {self._default.status_line} [{self._default.body_key}]"


def default_router(not_found_key: str = "404.html") -> Router:
    """
    The stock route table: the hello page at / and 404 for the rest.

    Args:
        not_found_key: Body key for the fallback response.
    """
    router = Router(default=ResponseDescriptor(NOT_FOUND.status_line, not_found_key))
    router.add_route("GET", "/", "HTTP/1.1 200 OK", "hello.html")
    return router
