"""
PNG encode/decode for pixel buffers.

Everything on the wire and at rest is PNG in RGBA mode, so a decoded
buffer round-trips through encode() without loss.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from .buffer import PixelBuffer

logger = logging.getLogger(__name__)


class CodecError(Exception):
    """Base Exception for image encoding and decoding."""
    pass


class DecodeError(CodecError):
    """Raised when bytes are not a readable image."""
    pass


class EncodeError(CodecError):
    """Raised when a buffer can't be written as PNG."""
    pass


def _to_buffer(img: Image.Image) -> PixelBuffer:
    # Animated images (APNG) decode to their default frame.
    if getattr(img, "n_frames", 1) > 1:
        img.seek(0)
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return PixelBuffer(np.array(img, dtype=np.uint8))


def decode(data: bytes) -> PixelBuffer:
    """Decode image bytes into an RGBA buffer."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return _to_buffer(img)
    except (UnidentifiedImageError, Image.DecompressionBombError,
            OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"Invalid image payload ({len(data)} bytes): {e}") from e


def encode(buffer: PixelBuffer) -> bytes:
    """Encode a buffer as RGBA PNG."""
    if buffer.width == 0 or buffer.height == 0:
        raise EncodeError(f"Cannot encode empty {buffer.width}x{buffer.height} image")
    img = Image.fromarray(buffer.pixels)
    out = io.BytesIO()
    try:
        img.save(out, format="PNG")
    except (OSError, ValueError) as e:
        raise EncodeError(f"PNG encoding failed: {e}") from e
    return out.getvalue()


def load_image(path: Path) -> PixelBuffer:
    """
    Load an image file.

    Raises OSError if the file can't be read and DecodeError if it isn't
    an image.
    """
    data = Path(path).read_bytes()
    buffer = decode(data)
    logger.debug("Loaded %s: %dx%d", path, buffer.width, buffer.height)
    return buffer


def save_image(buffer: PixelBuffer, path: Path) -> None:
    Path(path).write_bytes(encode(buffer))
    logger.debug("Saved %s: %dx%d", path, buffer.width, buffer.height)
