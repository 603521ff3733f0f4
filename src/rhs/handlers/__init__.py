"""
Request handlers.

    StaticFileHandler   Resolves request paths to files under the served
                        root, with a single index.html fallback.
"""

from .static import StaticFileHandler

__all__ = [
    "StaticFileHandler",
]
