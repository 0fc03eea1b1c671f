"""
In-memory body source and the built-in pages.

Lets the server answer out of the box, without a pages directory, and
gives tests a body store they can fill with exactly the bytes they expect.
"""

from typing import Dict, Mapping, Optional, Union

from ..http.response import BodySourceError


HELLO_PAGE = b"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Hello!</title>
  </head>
  <body>
    <h1>Hello!</h1>
    <p>Hi from hellohttp</p>
  </body>
</html>
"""

NOT_FOUND_PAGE = b"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Hello!</title>
  </head>
  <body>
    <h1>Oops!</h1>
    <p>Sorry, I don't know what you're asking for.</p>
  </body>
</html>
"""

DEFAULT_PAGES: Mapping[str, bytes] = {
    "hello.html": HELLO_PAGE,
    "404.html": NOT_FOUND_PAGE,
}


class MemoryBodySource:
    """
    Key → bytes from a dict.

    str values are stored UTF-8 encoded.

    Usage:
        bodies = MemoryBodySource({"hello": "<h1>Hi</h1>"})
        bodies.get("hello")  # b"<h1>Hi</h1>"
    """

    def __init__(self, pages: Optional[Mapping[str, Union[str, bytes]]] = None):
        self._pages: Dict[str, bytes] = {}
        for key, body in (pages if pages is not None else DEFAULT_PAGES).items():
            self.put(key, body)

    def put(self, key: str, body: Union[str, bytes]) -> None:
        """Store body under key, replacing any previous value."""
        self._pages[key] = body.encode("utf-8") if isinstance(body, str) else bytes(body)

    def get(self, key: str) -> bytes:
        try:
            return self._pages[key]
        except KeyError:
            raise BodySourceError(key) from None

    def __contains__(self, key: str) -> bool:
        return key in self._pages

    def __repr__(self) -> str:
        return f"MemoryBodySource(keys={sorted(self._pages)})"
