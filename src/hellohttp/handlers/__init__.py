"""
=============================================================================
BODY SOURCES
=============================================================================

Response bodies are looked up by key. Two sources ship with the package:

1. StaticBodySource / serve_static()
   - Reads <root_dir>/<key> from disk on every request
   - Refuses keys that escape root_dir

2. MemoryBodySource
   - Dict-backed, defaults to the built-in hello and 404 pages
   - Used when no static directory is configured, and in tests

Anything else with a get(key) -> bytes method that raises BodySourceError
on failure works too.

=============================================================================
"""

from .static import StaticBodySource, serve_static
from .memory import MemoryBodySource, DEFAULT_PAGES

__all__ = [
    "StaticBodySource",
    "serve_static",
    "MemoryBodySource",
    "DEFAULT_PAGES",
]
