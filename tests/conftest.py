"""
pytest configuration and fixtures.
"""

import logging
import socket
import threading
from typing import Generator, List, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
SRC_DIR = str(Path(__file__).parent.parent / "src")
sys.path.insert(0, SRC_DIR)

from rhs import HTTPServer, ServerConfig
from rhs.core import Connection


class RecordingLog:
    """Log collaborator that keeps messages instead of printing them."""

    def __init__(self):
        self.records: List[Tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def done(self, message: str) -> None:
        self.records.append(("done", message))

    def messages(self, level: str) -> List[str]:
        return [message for kind, message in self.records if kind == level]


@pytest.fixture
def restore_rhs_logger():
    """Undo setup_logging() changes to the "rhs" logger."""
    logger = logging.getLogger("rhs")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def log() -> RecordingLog:
    return RecordingLog()


@pytest.fixture
def served_root(tmp_path: Path) -> Path:
    """
    A small site:

        index.html        "home"
        page.txt          "plain page"
        sub/index.html    "sub home"
        empty/            (no index.html)
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_text("home")
    (root / "page.txt").write_text("plain page")
    (root / "sub").mkdir()
    (root / "sub" / "index.html").write_text("sub home")
    (root / "empty").mkdir()
    return root


@pytest.fixture
def socket_pair() -> Generator[Tuple[Connection, socket.socket], None, None]:
    """A Connection on one end of a socketpair, the raw peer on the other."""
    server_side, client_side = socket.socketpair()
    conn = Connection(socket=server_side, address=("127.0.0.1", 54321))
    yield conn, client_side
    client_side.close()
    conn.close()


class ServerThread:
    """Runs an HTTPServer in a background thread on an OS-assigned port."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self.result = None
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.socket_server.address[1]

    def _run(self):
        self.result = self.server.run()

    def start(self):
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.socket_server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


def make_server(root: Path, log: RecordingLog, **kwargs) -> HTTPServer:
    config = ServerConfig.from_args(str(root), 0, **kwargs)
    config.validate()
    return HTTPServer(config, log)


@pytest.fixture
def running_server(served_root: Path, log: RecordingLog) -> Generator[ServerThread, None, None]:
    """A live server serving `served_root`."""
    server_thread = ServerThread(make_server(served_root, log))
    server_thread.start()

    yield server_thread

    server_thread.stop()


def send_raw(port: int, data: bytes, timeout: float = 5.0) -> bytes:
    """Send `data`, then read until the server closes the connection."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as sock:
        sock.sendall(data)
        return read_all(sock)


def read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def split_response(raw: bytes) -> Tuple[str, dict, bytes]:
    """Parse a response the way a client would: status, headers, body."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    status = lines[0].split(" ", 1)[1]
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return status, headers, body
