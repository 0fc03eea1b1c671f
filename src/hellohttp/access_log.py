"""
=============================================================================
ACCESS LOG
=============================================================================

One structured entry per connection that got a response.

Entries go to the "hellohttp.access" logger so they can be routed or
silenced separately from the server's own diagnostics:

    logging.getLogger("hellohttp.access").setLevel(logging.WARNING)

Two output formats:

    text  127.0.0.1 - - [18/Oct/2026:10:00:00 +0000] "GET /" HTTP/1.1 200 OK 150 0.42ms
    json  {"connection_id": "1a2b3c4d", "client_ip": "127.0.0.1", ...}

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from typing import Optional

from .http.request import RequestLine


logger = logging.getLogger("hellohttp.access")


@dataclass
class AccessLogEntry:
    """
    Structured log entry for one handled connection.

    method/target are "-" when the request line was unrecognized.
    """

    connection_id: str
    client_ip: str
    method: str
    target: str
    status_line: str
    body_size: int
    duration_ms: float
    timestamp: str

    @classmethod
    def create(
        cls,
        connection_id: str,
        client_ip: str,
        request_line: Optional[RequestLine],
        status_line: str,
        body_size: int,
        duration_ms: float,
    ) -> "AccessLogEntry":
        return cls(
            connection_id=connection_id,
            client_ip=client_ip,
            method=request_line.method_text if request_line else "-",
            target=request_line.target_text if request_line else "-",
            status_line=status_line,
            body_size=body_size,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Apache-style single line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_line} '
            f'{self.body_size} {self.duration_ms:.2f}ms'
        )


def log_access(entry: AccessLogEntry, log_format: str = "text") -> None:
    """Emit an entry on the access logger at INFO."""
    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())
