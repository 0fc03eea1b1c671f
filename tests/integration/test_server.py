"""
End-to-end tests over loopback TCP.
"""

import logging
import socket
import threading
import time

import pytest

from hellohttp import HTTPServer, ServerConfig
from hellohttp.core import Connection
from hellohttp.handlers import MemoryBodySource, StaticBodySource
from hellohttp.http import Router


class TestScenarios:
    """Request bytes in, response bytes out."""

    def test_matching_route(self, test_server, sample_get_request):
        response = test_server.request(sample_get_request)

        assert response == b"HTTP/1.1 200 OK\r\n\r\n<h1>Hi</h1>"

    def test_unmatched_route(self, test_server, sample_missing_request):
        response = test_server.request(sample_missing_request)

        assert response == b"HTTP/1.1 404 NOT FOUND\r\n\r\n<h1>Oops</h1>"

    def test_zero_bytes_gets_no_response(self, test_server):
        """Client closes its write side before sending: nothing comes back."""
        with test_server.connect() as client:
            client.shutdown(socket.SHUT_WR)
            assert test_server.recv_all(client) == b""

        # Server is still serving
        assert test_server.request(b"GET / HTTP/1.1\r\n\r\n").startswith(b"HTTP/1.1 200 OK")

    def test_truncated_request_line(self, test_server):
        """Three bytes, no CRLF: default route, no crash."""
        response = test_server.request(b"GET")

        assert response == b"HTTP/1.1 404 NOT FOUND\r\n\r\n<h1>Oops</h1>"

    def test_invalid_utf8(self, test_server):
        response = test_server.request(b"\xff\xfe\xfd /\xc3\x28 HTTP/1.1\r\n\r\n")

        assert response.startswith(b"HTTP/1.1 404 NOT FOUND\r\n\r\n")

    def test_idempotent(self, test_server, sample_get_request):
        """No state carries over between connections."""
        responses = {test_server.request(sample_get_request) for _ in range(5)}

        assert responses == {b"HTTP/1.1 200 OK\r\n\r\n<h1>Hi</h1>"}

    def test_framing(self, test_server, sample_get_request):
        response = test_server.request(sample_get_request)

        status, separator, body = response.partition(b"\r\n\r\n")
        assert separator == b"\r\n\r\n"
        assert b"\r\n" not in status
        assert body == b"<h1>Hi</h1>"

    def test_oversized_request_only_first_read_used(self, test_server):
        """Bytes beyond the buffer are never interpreted."""
        raw = b"GET / HTTP/1.1\r\n" + b"X-Padding: " + b"a" * 4096 + b"\r\n\r\n"

        assert test_server.request(raw) == b"HTTP/1.1 200 OK\r\n\r\n<h1>Hi</h1>"


class TestSequentialProcessing:

    def test_first_connection_blocks_second(self, test_server):
        """Connection 2 is not read until connection 1 has been answered and closed."""
        first = test_server.connect()
        second = test_server.connect()
        try:
            second.sendall(b"GET / HTTP/1.1\r\n\r\n")

            # The server is stuck reading the silent first connection
            second.settimeout(0.5)
            with pytest.raises(socket.timeout):
                second.recv(1024)

            first.sendall(b"GET /missing HTTP/1.1\r\n\r\n")
            assert test_server.recv_all(first).startswith(b"HTTP/1.1 404 NOT FOUND")
            first.close()

            second.settimeout(5.0)
            assert test_server.recv_all(second) == b"HTTP/1.1 200 OK\r\n\r\n<h1>Hi</h1>"
        finally:
            first.close()
            second.close()

    def test_trickling_client_does_not_hold_listener(self, test_server):
        """Bytes sent after the response stop being drained at the deadline."""
        first = test_server.connect()
        stop = threading.Event()

        def trickle():
            while not stop.is_set():
                try:
                    first.send(b"x")
                except OSError:
                    return
                time.sleep(0.1)

        try:
            first.sendall(b"GET / HTTP/1.1\r\n\r\n")
            sender = threading.Thread(target=trickle, daemon=True)
            sender.start()

            started = time.monotonic()
            response = test_server.request(b"GET / HTTP/1.1\r\n\r\n")
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            first.close()

        assert response == b"HTTP/1.1 200 OK\r\n\r\n<h1>Hi</h1>"
        assert elapsed < 1.5


class TestConnectionFailures:

    def test_missing_body_closes_without_response(self, config, caplog, start_server):
        router = Router()
        router.add_route("GET", "/", "HTTP/1.1 200 OK", "absent")
        server = HTTPServer(config, router=router, body_source=MemoryBodySource({"404.html": b"nf"}))

        test_srv = start_server(server)

        with caplog.at_level(logging.ERROR, logger="hellohttp.server"):
            assert test_srv.request(b"GET / HTTP/1.1\r\n\r\n") == b""

        assert "absent" in caplog.text

        # Listener survived
        assert test_srv.request(b"GET /x HTTP/1.1\r\n\r\n") == b"HTTP/1.1 404 NOT FOUND\r\n\r\nnf"

    def test_read_failure_closes_without_response(self, router, body_source, caplog):
        """An expired read timeout is fatal to the connection only."""
        server = HTTPServer(ServerConfig(port=0), router=router, body_source=body_source)
        server_side, client_side = socket.socketpair()
        client_side.settimeout(5.0)
        conn = Connection(socket=server_side, address=("127.0.0.1", 1), timeout=0.05)

        with caplog.at_level(logging.INFO, logger="hellohttp"):
            server.handle_connection(conn)

        assert conn.is_closed
        assert client_side.recv(1024) == b""
        assert "Read failed" in caplog.text
        assert not [r for r in caplog.records if r.name == "hellohttp.access"]
        client_side.close()

    def test_send_failure_aborts_without_access_entry(self, router, body_source, caplog):
        server = HTTPServer(ServerConfig(port=0), router=router, body_source=body_source)
        server_side, client_side = socket.socketpair()
        client_side.settimeout(5.0)
        client_side.sendall(b"GET / HTTP/1.1\r\n\r\n")

        class UnwritableConnection(Connection):
            def send_response(self, data: bytes) -> bool:
                return False

        conn = UnwritableConnection(socket=server_side, address=("127.0.0.1", 2), timeout=5.0)

        with caplog.at_level(logging.INFO, logger="hellohttp.access"):
            server.handle_connection(conn)

        assert conn.is_closed
        assert client_side.recv(1024) == b""
        assert not [r for r in caplog.records if r.name == "hellohttp.access"]
        client_side.close()

    def test_access_log_written(self, test_server, caplog):
        with caplog.at_level(logging.INFO, logger="hellohttp.access"):
            test_server.request(b"GET /nowhere HTTP/1.1\r\n\r\n")
            # The entry is logged after close, give the server a moment
            deadline = time.time() + 2.0
            while "/nowhere" not in caplog.text and time.time() < deadline:
                time.sleep(0.01)

        assert '"GET /nowhere" HTTP/1.1 404 NOT FOUND' in caplog.text


class TestStaticFiles:

    def test_serves_files_from_static_dir(self, tmp_path, start_server):
        (tmp_path / "hello.html").write_bytes(b"<p>from disk</p>")
        (tmp_path / "404.html").write_bytes(b"<p>not here</p>")

        config = ServerConfig(port=0, static_dir=str(tmp_path), log_level="WARNING")
        server = HTTPServer(config)
        assert isinstance(server.body_source, StaticBodySource)

        test_srv = start_server(server)

        assert test_srv.request(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\n<p>from disk</p>"
        assert test_srv.request(b"GET /a HTTP/1.1\r\n\r\n") == b"HTTP/1.1 404 NOT FOUND\r\n\r\n<p>not here</p>"

    def test_builtin_pages_by_default(self):
        server = HTTPServer(ServerConfig(port=0))

        assert isinstance(server.body_source, MemoryBodySource)
        assert "hello.html" in server.body_source
