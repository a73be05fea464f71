"""
Row-parallel pixel transforms.

Both transforms read an immutable source buffer and fill a freshly
allocated output array one row per job, so the result does not depend on
the worker count or the order rows finish in.
"""

from __future__ import annotations

import logging

import numpy as np

from pixel_shared.protocol import MAX_OUTPUT_PIXELS, TransformRequest

from .buffer import PixelBuffer
from .pool import BoundedWorkerPool

logger = logging.getLogger(__name__)


class TransformError(ValueError):
    """Raised when transform parameters are rejected."""
    pass


def blur(buffer: PixelBuffer, radius: int, workers: int = 1) -> PixelBuffer:
    """
    Box blur with a (2r+1) x (2r+1) window.

    Each output pixel is the truncated mean of the in-bounds pixels of its
    window, center included. Near the borders the window is clipped and the
    sample count shrinks; nothing is padded or wrapped. radius <= 0 returns
    a copy of the source.
    """
    src = buffer.pixels
    if radius <= 0:
        return PixelBuffer(src.copy())

    h, w = src.shape[:2]
    # A window wider than the image already covers all of it.
    radius = min(radius, max(w, h))
    out = PixelBuffer.allocate(w, h)

    xs = np.arange(w, dtype=np.int64)
    x0 = np.maximum(xs - radius, 0)
    x1 = np.minimum(xs + radius + 1, w)
    widths = x1 - x0

    def blur_row(y: int) -> None:
        y0 = max(0, y - radius)
        y1 = min(h, y + radius + 1)
        column_sums = src[y0:y1].sum(axis=0, dtype=np.int64)

        prefix = np.zeros((w + 1, 4), dtype=np.int64)
        np.cumsum(column_sums, axis=0, out=prefix[1:])

        sums = prefix[x1] - prefix[x0]
        counts = widths * (y1 - y0)
        out[y] = (sums // counts[:, None]).astype(np.uint8)

    BoundedWorkerPool(workers).run_rows(h, blur_row)
    return PixelBuffer(out)


def downscale(
    buffer: PixelBuffer,
    target_width: int,
    target_height: int,
    workers: int = 1,
) -> PixelBuffer:
    """
    Nearest-neighbor resize to target_width x target_height.

    Target pixel (x, y) copies source pixel
    (floor(x * src_w / target_w), floor(y * src_h / target_h)).
    """
    if target_width <= 0 or target_height <= 0:
        raise TransformError(
            f"Target size must be positive, got {target_width}x{target_height}"
        )

    if target_width * target_height > MAX_OUTPUT_PIXELS:
        raise TransformError(
            f"Target {target_width}x{target_height} exceeds {MAX_OUTPUT_PIXELS} pixels"
        )

    src = buffer.pixels
    src_h, src_w = src.shape[:2]
    if src_w == 0 or src_h == 0:
        raise TransformError(f"Cannot sample an empty {src_w}x{src_h} source")

    out = PixelBuffer.allocate(target_width, target_height)
    src_x = (np.arange(target_width, dtype=np.int64) * src_w) // target_width

    def downscale_row(y: int) -> None:
        out[y] = src[(y * src_h) // target_height, src_x]

    BoundedWorkerPool(workers).run_rows(target_height, downscale_row)
    return PixelBuffer(out)


def apply(request: TransformRequest, buffer: PixelBuffer) -> PixelBuffer:
    """Run the transform a request names."""
    if request.algorithm == "blur":
        (radius,) = request.params
        logger.debug("blur radius=%d workers=%d on %r", radius, request.workers, buffer)
        return blur(buffer, radius, request.workers)
    if request.algorithm == "downscale":
        width, height = request.params
        logger.debug("downscale %dx%d workers=%d on %r",
                     width, height, request.workers, buffer)
        return downscale(buffer, width, height, request.workers)
    raise TransformError(f"{request.algorithm!r} is not an image transform")
