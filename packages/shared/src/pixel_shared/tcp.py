"""
TCP Networking Utilities For the Transform Server and Client

Format:
    [request line: "<algorithm> <param>...\\n"]
    [length line: "<N>\\n" in decimal ASCII]
    [N bytes: binary payload]

The server answers with one length line and payload in the same format.
"""

from __future__ import annotations

import logging
import socket
from typing import Sequence

from .protocol import format_request_line

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10.0

MAX_LINE_LENGTH = 4096
MAX_PAYLOAD_SIZE = 512 * 1024 * 1024
RECV_CHUNK = 1 << 16


class TCPError(Exception):
    """Base Exception for TCP Operations."""
    pass


class ConnectionFailed(TCPError):
    """Raised when connection can't be established."""
    pass

class SendFailed(TCPError):
    """Raised when sending data fails."""
    pass

class RecvFailed(TCPError):
    """Raised when receiving data fails."""
    pass

class FrameError(TCPError):
    """Raised when a length header is invalid or a payload is cut short."""
    pass


def parse_length(line: bytes) -> int:
    """Parse a decimal length header (without its newline)."""
    text = line.strip()
    if not text or not text.isdigit():
        raise FrameError(f"Invalid length header: {line[:64]!r}")
    n = int(text)
    if n > MAX_PAYLOAD_SIZE:
        raise FrameError(f"Payload too large: {n} bytes")
    return n


def frame(data: bytes) -> bytes:
    return b"%d\n" % len(data) + data


class FramedConnection:
    """
    One duplex byte stream for one session.

    Reads go through a buffered reader so the request line and the length
    line can be split on newlines while payload bytes are read by count.
    """

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._reader = sock.makefile("rb")
        self.peer = _peer_name(sock)

    def __enter__(self) -> "FramedConnection":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        try:
            self._reader.close()
        finally:
            self._sock.close()

    def _send(self, data: bytes) -> None:
        try:
            self._sock.sendall(data)
        except OSError as e:
            raise SendFailed(f"Send to {self.peer} failed: {e}") from e

    def write_request_line(self, algorithm: str, params: Sequence[object]) -> None:
        self._send(format_request_line(algorithm, params))

    def write_framed_payload(self, data: bytes) -> None:
        """Write the length header and payload as a single unit."""
        self._send(frame(data))
        logger.debug("Sent %d byte frame to %s", len(data), self.peer)

    def _read_line(self) -> bytes:
        try:
            line = self._reader.readline(MAX_LINE_LENGTH + 1)
        except OSError as e:
            raise RecvFailed(f"Receive from {self.peer} failed: {e}") from e
        if not line:
            raise RecvFailed(f"Connection closed by {self.peer}")
        if not line.endswith(b"\n"):
            if len(line) > MAX_LINE_LENGTH:
                raise FrameError(f"Line longer than {MAX_LINE_LENGTH} bytes")
            raise FrameError(f"Connection closed mid-line after {len(line)} bytes")
        return line[:-1]

    def read_request_line(self) -> str:
        line = self._read_line()
        try:
            return line.decode("ascii").strip()
        except UnicodeDecodeError as e:
            raise FrameError(f"Request line is not ASCII: {line[:64]!r}") from e

    def recv_exact(self, n: int) -> bytes:
        chunks: list[bytes] = []
        received = 0
        while received < n:
            try:
                chunk = self._reader.read(min(n - received, RECV_CHUNK))
            except OSError as e:
                raise RecvFailed(f"Receive from {self.peer} failed: {e}") from e
            if not chunk:
                raise FrameError(f"Connection closed after {received}/{n} bytes")
            chunks.append(chunk)
            received += len(chunk)
        return b"".join(chunks)

    def read_framed_payload(self) -> bytes:
        n = parse_length(self._read_line())
        data = self.recv_exact(n)
        logger.debug("Received %d byte frame from %s", n, self.peer)
        return data


def _peer_name(sock: socket.socket) -> str:
    try:
        peer = sock.getpeername()
    except OSError:
        return "<unconnected>"
    if isinstance(peer, tuple):
        return f"{peer[0]}:{peer[1]}"
    return str(peer) or "<local>"


def open_connection(
    host: str,
    port: int,
    timeout: float | None = CONNECT_TIMEOUT,
) -> FramedConnection:
    """Dial the server. The timeout applies to connecting only."""
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except socket.timeout as e:
        raise ConnectionFailed(f"Timeout connecting to {host}:{port}") from e
    except OSError as e:
        raise ConnectionFailed(f"Failed to connect to {host}:{port}: {e}") from e
    sock.settimeout(None)
    return FramedConnection(sock)
