"""
=============================================================================
HELLO SERVER
=============================================================================

Wires the listener, parser, router and response builder together and
handles each connection from first byte to close.

=============================================================================
PER-CONNECTION PIPELINE
=============================================================================

    ┌─────────┐   ┌────────┐   ┌─────────┐   ┌─────────┐   ┌───────┐   ┌───────┐
    │  read   │──►│ parse  │──►│ resolve │──►│  build  │──►│ write │──►│ close │
    │ (once)  │   │  line  │   │  route  │   │  bytes  │   │  all  │   │       │
    └────┬────┘   └────────┘   └─────────┘   └────┬────┘   └───┬───┘   └───────┘
         │                                        │            │           ▲
         └── read error / empty ──────────────────┴── body ────┴── send ───┘
                                                      lookup       failure
                                                      failure

Every failure is local to the connection: it is logged, the connection is
closed, and the listener moves on to the next client. An unparseable
request line is not a failure at all; it simply routes to 404.

=============================================================================
USAGE
=============================================================================

    from hellohttp import HTTPServer, ServerConfig
    from hellohttp.http import Router
    from hellohttp.handlers import StaticBodySource

    router = Router()
    router.add_route("GET", "/", "HTTP/1.1 200 OK", "hello.html")

    server = HTTPServer(
        ServerConfig(port=7878),
        router=router,
        body_source=StaticBodySource("./pages"),
    )
    server.run()  # Blocks until Ctrl+C

=============================================================================
"""

import logging
import time
from typing import Optional

from .access_log import AccessLogEntry, log_access
from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .handlers import MemoryBodySource, StaticBodySource
from .http import (
    BodySource,
    BodySourceError,
    ResponseBuilder,
    Router,
    default_router,
    parse_request_line,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Single-threaded static-response HTTP server.

    Args:
        config: Server configuration. Defaults to ServerConfig().
        router: Route table. Defaults to default_router().
        body_source: Where bodies come from. Defaults to the config's
                     static_dir if set, else the built-in pages.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        router: Optional[Router] = None,
        body_source: Optional[BodySource] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self._router = router or default_router(self.config.not_found_key)

        if body_source is None:
            if self.config.static_dir:
                body_source = StaticBodySource(self.config.static_dir)
            else:
                body_source = MemoryBodySource()
        self._body_source = body_source

        self._builder = ResponseBuilder(self._body_source)
        self._socket_server = SocketServer(self.config)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def body_source(self) -> BodySource:
        return self._body_source

    @property
    def socket_server(self) -> SocketServer:
        return self._socket_server

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Blocks until stop() is called or SIGINT/SIGTERM arrives.

        Raises:
            OSError: If the address cannot be bound.
            ValueError: If the host/port overrides leave the config invalid.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port
        self.config.validate()

        self._setup_logging()

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        logger.info(f"Serving bodies from {self._body_source!r}")
        for line in self._router.describe():
            logger.info(f"  {line}")

        try:
            self._socket_server.start(self.handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def stop(self):
        """Ask the accept loop to stop. Returns immediately."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("hellohttp").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection):
        """
        Serve one connection: read, parse, resolve, build, write, close.

        Runs on the listener's thread. Returns only once the connection is
        closed, and never raises for per-connection failures.
        """
        start_time = time.time()

        with conn:
            # ─────────────────────────────────────────────────────────────
            # READ (exactly once)
            # ─────────────────────────────────────────────────────────────
            try:
                raw = conn.read_request()
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            if raw is None:
                logger.debug(f"[{conn.id}] Client closed before sending a request")
                return

            # ─────────────────────────────────────────────────────────────
            # PARSE + ROUTE
            # ─────────────────────────────────────────────────────────────
            request_line = parse_request_line(raw)
            conn.state = ConnectionState.PARSED

            if request_line is None:
                logger.debug(f"[{conn.id}] Unrecognized request line: {raw[:64]!r}")

            descriptor = self._router.resolve(request_line)
            conn.state = ConnectionState.ROUTED

            # ─────────────────────────────────────────────────────────────
            # BUILD
            # ─────────────────────────────────────────────────────────────
            try:
                response = self._builder.build(descriptor)
            except BodySourceError as e:
                logger.error(f"[{conn.id}] {e}")
                return

            payload = response.to_bytes()
            conn.state = ConnectionState.BUILT

            # ─────────────────────────────────────────────────────────────
            # WRITE
            # ─────────────────────────────────────────────────────────────
            if not conn.send_response(payload):
                return

        log_access(
            AccessLogEntry.create(
                connection_id=conn.id,
                client_ip=conn.client_ip,
                request_line=request_line,
                status_line=response.status_line,
                body_size=len(response.body),
                duration_ms=(time.time() - start_time) * 1000,
            ),
            log_format=self.config.log_format,
        )


def create_app(
    config: Optional[ServerConfig] = None,
    router: Optional[Router] = None,
    body_source: Optional[BodySource] = None,
) -> HTTPServer:
    """Factory for HTTPServer instances."""
    return HTTPServer(config, router=router, body_source=body_source)
