"""
=============================================================================
STATIC FILE RESOLUTION
=============================================================================

Maps a request path to file contents under the served root.

=============================================================================
RESOLUTION
=============================================================================

The request path is appended to the root verbatim, no decoding and no
normalisation:

    root  = "/srv/www"
    path  = "/docs"
    file  = "/srv/www/docs"

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   attempt 1:  read /srv/www/docs                                     │
    │       ok   → ("200 OK", contents)                                    │
    │       fail ↓                                                         │
    │   attempt 2:  read /srv/www/docs/index.html                          │
    │       ok   → ("200 OK", contents)                                    │
    │       fail → ("404 Not Found", "404 Not Found\\nrhs/0.1")            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The index fallback happens at most once. Every kind of read failure
(missing, is a directory, permission denied) counts as "not found": there
is no 403 and no 500.

=============================================================================
SECURITY
=============================================================================

Because the path is concatenated verbatim, "/../../etc/passwd" would point
outside the root. Each candidate is resolved (following .. and symlinks)
and must still sit inside the root; if it doesn't, the read counts as a
failure and the request ends in 404 like any other missing file.

=============================================================================
"""

import os
import logging
from typing import Optional, Tuple

from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Resolves request paths to file contents.

    Usage:
        files = StaticFileHandler("/srv/www")
        status, body = files.resolve("/docs")
    """

    def __init__(self, root_dir: str, index_file: str = "index.html"):
        """
        Args:
            root_dir: Directory to serve. Request paths are appended to it
                      as-is, so it should not end with a separator.
            index_file: File tried once when the path itself can't be read.
        """
        self.root_dir = root_dir
        self.index_file = index_file
        self._real_root = os.path.realpath(root_dir)

    def resolve(self, request_path: str) -> Tuple[str, bytes]:
        """
        Resolve a raw request path against the root.

        Returns:
            (status line, body)
        """
        return self.read_file(self.root_dir + request_path)

    def read_file(self, file_path: str) -> Tuple[str, bytes]:
        """
        Read `file_path`, falling back to `file_path/index.html` once.

        Args:
            file_path: Root and request path already joined.

        Returns:
            ("200 OK", contents) or ("404 Not Found", error body).
        """
        candidates = (file_path, f"{file_path}/{self.index_file}")

        for trying_index, candidate in enumerate(candidates):
            contents = self._read(candidate)
            if contents is not None:
                if trying_index:
                    logger.debug(f"Served index fallback {candidate}")
                return HTTPStatus.OK.line, contents

        return HTTPStatus.NOT_FOUND.line, HTTPStatus.NOT_FOUND.error_body

    def _read(self, path: str) -> Optional[bytes]:
        """Contents of `path`, or None if it can't be served."""
        if not self._is_inside_root(path):
            logger.warning(f"Path traversal attempt: {path}")
            return None

        try:
            with open(path, "rb") as f:
                return f.read()
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            return None

    def _is_inside_root(self, path: str) -> bool:
        try:
            real = os.path.realpath(path)
            return os.path.commonpath([self._real_root, real]) == self._real_root
        except ValueError:
            # Embedded NUL, or different drives on Windows
            return False
