"""
=============================================================================
HELLOHTTP CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:7878, built-in pages)
    python -m hellohttp

    # Serve hello.html / 404.html from a directory
    python -m hellohttp --static ./pages

    # Extra routes: METHOD TARGET STATUS-LINE BODY-KEY
    python -m hellohttp --static ./pages \\
        --route GET / "HTTP/1.1 200 OK" hello.html \\
        --route GET /about "HTTP/1.1 200 OK" about.html

Configuration is read from the environment first (see
ServerConfig.from_env) and then overridden by any flags given here.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .http import Router, ResponseDescriptor, NOT_FOUND, default_router
from .server import HTTPServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hellohttp",
        description="Minimal single-threaded HTTP server with exact-match static routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hellohttp                          # 127.0.0.1:7878, built-in pages
  python -m hellohttp --port 8080              # Custom port
  python -m hellohttp --static ./pages         # Bodies from files
  python -m hellohttp --route GET /about "HTTP/1.1 200 OK" about.html
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )

    parser.add_argument(
        "--buffer-size", "-b",
        type=int,
        default=defaults.buffer_size,
        help=f"Bytes read per connection (default: {defaults.buffer_size})",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help="Socket timeout in seconds (default: none, fully blocking)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # ROUTES AND BODIES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--static", "-s",
        default=defaults.static_dir,
        help="Directory to read response bodies from (default: built-in pages)",
    )

    parser.add_argument(
        "--route", "-r",
        nargs=4,
        action="append",
        metavar=("METHOD", "TARGET", "STATUS", "KEY"),
        help="Add an exact-match route; may be repeated, first match wins "
             "(default: GET / -> HTTP/1.1 200 OK hello.html)",
    )

    parser.add_argument(
        "--not-found",
        default=defaults.not_found_key,
        help=f"Body key for unmatched requests (default: {defaults.not_found_key})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})",
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"hellohttp {__version__}",
    )

    return parser


def build_router(routes, not_found_key: str) -> Router:
    """Router from --route arguments, or the stock one if none were given."""
    if not routes:
        return default_router(not_found_key)

    router = Router(default=ResponseDescriptor(NOT_FOUND.status_line, not_found_key))
    for method, target, status_line, body_key in routes:
        router.add_route(method, target, status_line, body_key)
    return router


def main(argv=None) -> int:
    """Main CLI entry point."""
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment configuration: {e}", file=sys.stderr)
        return 1

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        backlog=defaults.backlog,
        buffer_size=args.buffer_size,
        timeout=args.timeout,
        static_dir=args.static,
        not_found_key=args.not_found,
        log_level=args.log_level,
        log_format=args.log_format,
    )

    try:
        router = build_router(args.route, config.not_found_key)
        server = HTTPServer(config, router=router)
        server.run()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
