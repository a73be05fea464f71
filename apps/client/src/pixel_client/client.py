"""Client side of the transform protocol."""

from __future__ import annotations

import logging
from pathlib import Path

from pixel_engine import apply, load_image, save_image
from pixel_shared.protocol import TransformRequest
from pixel_shared.tcp import FramedConnection, open_connection

from .config import ClientConfig

logger = logging.getLogger(__name__)


class TransformClient:
    """Opens one connection per request; the server closes it after replying."""

    def __init__(self, config: ClientConfig):
        self._config = config

    def _connect(self) -> FramedConnection:
        logger.debug("Connecting to %s:%d", self._config.host, self._config.port)
        return open_connection(
            self._config.host,
            self._config.port,
            timeout=self._config.connect_timeout,
        )

    def transform(self, request: TransformRequest, image: bytes) -> bytes:
        """Send encoded image bytes, return the encoded result."""
        if not request.has_payload:
            raise ValueError(f"{request.algorithm!r} carries no image")
        with self._connect() as conn:
            conn.write_request_line(request.algorithm, request.line_params())
            conn.write_framed_payload(image)
            result = conn.read_framed_payload()
        logger.info("Received %d bytes for %s", len(result), request.algorithm)
        return result

    def benchmark(self) -> str:
        """Ask the server to run its benchmark and return the report."""
        with self._connect() as conn:
            conn.write_request_line("test", [])
            report = conn.read_framed_payload()
        return report.decode("utf-8", errors="replace")

    def transform_file(
        self,
        request: TransformRequest,
        image_path: Path,
        output_path: Path,
    ) -> Path:
        """Send a local image file and save the processed result."""
        data = Path(image_path).read_bytes()
        result = self.transform(request, data)
        Path(output_path).write_bytes(result)
        logger.info("Saved %s", output_path)
        return Path(output_path)


def transform_local(request: TransformRequest, image_path: Path, output_path: Path) -> Path:
    """Run a transform in-process, without a server."""
    source = load_image(image_path)
    result = apply(request, source)
    save_image(result, output_path)
    logger.info("%s %r -> %r saved to %s", request.algorithm, source, result, output_path)
    return Path(output_path)
