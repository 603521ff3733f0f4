"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The accept loop: owns the listening socket and hands each accepted client,
one at a time, to the connection handler.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Reserve 127.0.0.1:PORT
    3. listen()    Let the OS queue incoming connections
    4. accept()    Take the next queued client (a NEW socket)
    5. close()     Release the listening socket on shutdown

=============================================================================
ONE CLIENT AT A TIME
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   while running:                                                     │
    │       accept()  ──►  handler(conn)  ──►  (returns)  ──►  accept()   │
    │                       │                                              │
    │                       └── read, parse, resolve, write, close         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There are no worker threads. While the handler runs, further clients wait
in the kernel's backlog. A client that stalls mid-request stalls the whole
server unless a read timeout is configured.

Failures are contained at three levels:

    bind fails      → logged, start() returns False, nothing is served
    accept fails    → logged, loop continues
    handler raises  → logged, loop continues

=============================================================================
STOPPING
=============================================================================

shutdown() (or SIGINT/SIGTERM) clears the running flag and shuts down the
socket of the connection being handled, if any. A handler blocked in recv()
on a stalled client then sees end-of-stream and returns, so the loop can
exit without waiting for that client.

After the first signal the previous handlers are put back, so a second
Ctrl+C interrupts the process the usual way.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from ..log import Log
from .connection import Connection


logger = logging.getLogger(__name__)

# accept() wakes up this often to notice shutdown()
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Single-threaded TCP accept loop.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config, ConsoleLog())
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig, log: Log):
        self.config = config
        self.log = log

        self._socket: Optional[socket.socket] = None
        self._running = False

        # The connection currently being handled
        self._active: Optional[Connection] = None

        # Set once the listener is bound (or binding failed), so other
        # threads can wait for startup.
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port); the configured one before binding."""
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting right after a stop shouldn't hit TIME_WAIT.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Route SIGINT/SIGTERM to shutdown().

        Signal handlers can only be installed from the main thread; when the
        server runs in a background thread (tests, embedding) this is skipped.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.debug(f"Received {signal.Signals(signum).name}")
            self._restore_signals()
            self.shutdown()

        for sig in (signal.SIGINT, signal.SIGTERM):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]) -> bool:
        """
        Bind, then accept connections until shutdown() is called.

        Args:
            connection_handler: Called synchronously with each accepted
                                connection. The next accept() waits for it.

        Returns:
            False if the socket could not be bound, True after a clean stop.
        """
        host, port = self.config.host, self.config.port
        self._socket = self._create_socket()

        try:
            self._socket.bind((host, port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.debug(f"bind failed: {e}")
            self.log.error(f"could not bind to {host}:{port}")
            self._socket.close()
            self._socket = None
            self._ready_event.set()
            return False

        self._running = True
        self._setup_signals()

        self.log.done(f"serving `{self.config.directory}` on port `{self.address[1]}`")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()
        return True

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Poll tick: re-check self._running
                continue
            except OSError as e:
                if not self._running:
                    break  # Socket closed by shutdown()
                logger.debug(f"accept failed: {e}")
                self.log.error("could not accept connection")
                continue

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            )

            self._active = conn
            try:
                connection_handler(conn)
            except Exception as e:
                # One peer must never take the server down.
                logger.exception(f"[{conn.id}] Unhandled connection error")
                self.log.error(f"connection from {conn.peer} failed: {e}")
                conn.close()
            finally:
                self._active = None

    def shutdown(self):
        """
        Stop the accept loop.

        Idempotent, and safe to call from another thread or a signal handler.
        A connection in progress is cut off; an idle loop notices within
        ACCEPT_POLL_INTERVAL seconds.
        """
        self._running = False

        conn = self._active
        if conn is not None:
            logger.debug(f"[{conn.id}] Interrupted by shutdown")
            conn.interrupt()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.debug("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener is bound (or failed to bind)."""
        return self._ready_event.wait(timeout)
