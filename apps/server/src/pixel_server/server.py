"""Transform server: owns the listening socket and spawns one thread per session."""

from __future__ import annotations

import logging
import socket
import threading

from pixel_shared.tcp import FramedConnection

from .benchmark import BenchmarkSettings
from .config import ServerConfig
from .session import Session

logger = logging.getLogger(__name__)

ACCEPT_POLL = 1.0


class TransformServer:
    """Accepts connections until shutdown() and serves each on its own thread."""

    def __init__(self, config: ServerConfig, benchmark: BenchmarkSettings | None = None):
        self._config = config
        self._benchmark = benchmark or BenchmarkSettings.from_config(config)
        self._sock: socket.socket | None = None
        self._shutdown = threading.Event()
        self._stopped = threading.Event()
        self._stopped.set()

    def __enter__(self) -> "TransformServer":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
        self.close()

    @property
    def address(self) -> tuple[str, int]:
        if self._sock is None:
            raise RuntimeError("Server is not open")
        host, port = self._sock.getsockname()[:2]
        return host, port

    def open(self) -> socket.socket:
        """Bind and listen. Returns the listening socket."""
        if self._sock is not None:
            return self._sock
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self._config.host, self._config.port))
            sock.listen(self._config.backlog)
        except OSError:
            sock.close()
            raise
        sock.settimeout(ACCEPT_POLL)
        self._sock = sock
        self._shutdown.clear()
        logger.info("TCP Server listening on %s:%d", *self.address)
        return sock

    def serve_forever(self) -> None:
        """Accept loop. Returns after shutdown() is called."""
        sock = self.open()

        self._stopped.clear()
        try:
            while not self._shutdown.is_set():
                try:
                    conn, addr = sock.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if self._shutdown.is_set():
                        break
                    logger.error("Accept failed %s", e)
                    continue

                logger.info("New client connected: %s:%d", addr[0], addr[1])
                conn.settimeout(None)
                threading.Thread(
                    target=self._run_session,
                    args=(conn,),
                    name=f"session-{addr[0]}:{addr[1]}",
                    daemon=True,
                ).start()
        finally:
            self._stopped.set()
            logger.info("TCP Server shutting down")

    def _run_session(self, conn: socket.socket) -> None:
        Session(FramedConnection(conn), self._config, self._benchmark).run()

    def shutdown(self, timeout: float | None = None) -> None:
        """Stop the accept loop and wait for it to exit. Running sessions finish on their own."""
        self._shutdown.set()
        self._stopped.wait(timeout)

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
