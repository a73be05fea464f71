"""
Shared networking and protocol types for the pixel transform service

The package is a dependency of both server and client:
- Server uses it to read framed requests and write framed results
- Client uses it to validate requests and talk to the server

Deployment:
    pip install pixel-offload
"""

from .protocol import (
    ALGORITHMS,
    Algorithm,
    ParameterError,
    ProtocolError,
    TransformRequest,
    format_request_line,
    normalize_algorithm,
    parse_request_line,
)
from .tcp import (
    MAX_PAYLOAD_SIZE,
    ConnectionFailed,
    FrameError,
    FramedConnection,
    RecvFailed,
    SendFailed,
    TCPError,
    open_connection,
)

__all__ = [
    # Protocol
    "ALGORITHMS",
    "Algorithm",
    "ProtocolError",
    "ParameterError",
    "TransformRequest",
    "format_request_line",
    "normalize_algorithm",
    "parse_request_line",
    # TCP
    "MAX_PAYLOAD_SIZE",
    "TCPError",
    "ConnectionFailed",
    "SendFailed",
    "RecvFailed",
    "FrameError",
    "FramedConnection",
    "open_connection",
]
