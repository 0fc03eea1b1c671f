"""
=============================================================================
STATIC BODY SOURCE
=============================================================================

Serves response bodies from files in one directory.

    StaticBodySource("./pages").get("hello.html")
        → contents of ./pages/hello.html

Files are read on every call. Nothing is cached, so editing a page on
disk shows up on the very next request.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

Keys normally come from our own route table, but the table can be loaded
from the command line. A key like "../../etc/passwd" must not escape the
root directory:

    full_path = (root_dir / key).resolve()
    full_path.relative_to(root_dir)  # Raises if outside root!

Anything outside the root is refused with BodySourceError, the same as a
missing file.

=============================================================================
"""

import logging
from pathlib import Path

from ..http.response import BodySourceError


logger = logging.getLogger(__name__)


class StaticBodySource:
    """
    Key → file bytes, confined to root_dir.

    Args:
        root_dir: Directory containing the body files. Must exist.
    """

    def __init__(self, root_dir: str):
        self.root_dir = Path(root_dir).resolve()

        if not self.root_dir.is_dir():
            raise ValueError(f"Static root directory does not exist: {root_dir}")

    def resolve(self, key: str) -> Path:
        """
        Map a key to a path inside root_dir.

        Raises:
            BodySourceError: If the key escapes root_dir.
        """
        full_path = (self.root_dir / key.lstrip("/")).resolve()

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {key}")
            raise BodySourceError(key, "outside static root") from None

        return full_path

    def get(self, key: str) -> bytes:
        """
        Read the file for key.

        Raises:
            BodySourceError: Missing file, directory, traversal attempt or
                             any I/O error while reading.
        """
        path = self.resolve(key)

        if not path.is_file():
            raise BodySourceError(key, f"no such file: {path}")

        try:
            return path.read_bytes()
        except OSError as e:
            raise BodySourceError(key, str(e)) from e

    def __repr__(self) -> str:
        return f"StaticBodySource({str(self.root_dir)!r})"


def serve_static(root_dir: str) -> StaticBodySource:
    """Create a file-backed body source."""
    return StaticBodySource(root_dir)
