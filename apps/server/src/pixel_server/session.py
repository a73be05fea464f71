"""
One client connection, from request line to reply.

State machine:
    AWAIT_REQUEST_LINE -> RUN_BENCHMARK -> SEND_TEXT_RESULT -> CLOSED       ("test")
    AWAIT_REQUEST_LINE -> AWAIT_PAYLOAD -> DECODE -> TRANSFORM -> ENCODE
        -> SEND_RESULT -> CLOSED                                           (blur, downscale)
    AWAIT_REQUEST_LINE -> CLOSED                                           (unknown algorithm)

Any failure closes the connection without a reply. Nothing here is shared
with other sessions.
"""

from __future__ import annotations

import dataclasses
import enum
import logging

from pixel_engine import CodecError, TransformError, apply, decode, encode
from pixel_shared.protocol import ParameterError, TransformRequest, parse_request_line
from pixel_shared.tcp import FrameError, FramedConnection, TCPError

from .benchmark import BenchmarkSettings, run_benchmark
from .config import ServerConfig

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    AWAIT_REQUEST_LINE = "await_request_line"
    RUN_BENCHMARK = "run_benchmark"
    SEND_TEXT_RESULT = "send_text_result"
    AWAIT_PAYLOAD = "await_payload"
    DECODE = "decode"
    TRANSFORM = "transform"
    ENCODE = "encode"
    SEND_RESULT = "send_result"
    CLOSED = "closed"


class Session:
    """Serves exactly one request on one connection."""

    def __init__(
        self,
        conn: FramedConnection,
        config: ServerConfig,
        benchmark: BenchmarkSettings | None = None,
    ):
        self._conn = conn
        self._config = config
        self._benchmark = benchmark or BenchmarkSettings.from_config(config)
        self.state = SessionState.AWAIT_REQUEST_LINE
        self.replied = False

    def _enter(self, state: SessionState) -> None:
        logger.debug("%s: %s -> %s", self._conn.peer, self.state.name, state.name)
        self.state = state

    def run(self) -> bool:
        """Serve the connection and close it. Returns True if a reply was sent."""
        peer = self._conn.peer
        try:
            self._serve()
        except ParameterError as e:
            logger.warning("Rejected request from %s: %s", peer, e)
        except FrameError as e:
            logger.warning("Bad frame from %s: %s", peer, e)
        except (CodecError, TransformError) as e:
            logger.warning("Failed to process image from %s: %s", peer, e)
        except TCPError as e:
            logger.warning("Connection error from %s: %s", peer, e)
        except Exception:
            logger.exception("Unexpected error handling connection from %s", peer)
        finally:
            self._enter(SessionState.CLOSED)
            self._conn.close()
        return self.replied

    def _serve(self) -> None:
        line = self._conn.read_request_line()
        logger.info("Request from %s: %r", self._conn.peer, line)
        request = self._cap_workers(parse_request_line(line))

        if request.algorithm == "test":
            self._enter(SessionState.RUN_BENCHMARK)
            report = run_benchmark(self._benchmark)

            self._enter(SessionState.SEND_TEXT_RESULT)
            self._conn.write_framed_payload(report.encode("utf-8"))
            self.replied = True
            logger.info("Benchmark report sent to %s", self._conn.peer)
            return

        self._enter(SessionState.AWAIT_PAYLOAD)
        payload = self._conn.read_framed_payload()

        self._enter(SessionState.DECODE)
        source = decode(payload)

        self._enter(SessionState.TRANSFORM)
        result = apply(request, source)

        self._enter(SessionState.ENCODE)
        data = encode(result)

        self._enter(SessionState.SEND_RESULT)
        self._conn.write_framed_payload(data)
        self.replied = True
        logger.info(
            "%s %r -> %r sent to %s",
            request.algorithm, source, result, self._conn.peer,
        )

    def _cap_workers(self, request: TransformRequest) -> TransformRequest:
        limit = self._config.max_workers
        if limit > 0 and request.workers > limit:
            logger.info("Capping workers from %d to %d", request.workers, limit)
            return dataclasses.replace(request, workers=limit)
        return request
