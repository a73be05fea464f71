"""
Pixel Transform Engine.

This package is the core image logic: an immutable RGBA buffer, a PNG
codec, a bounded row-job pool and the blur/downscale transforms built on it.
It is used by the server and by the client's local mode.

This package has no networking dependencies. It's pure image processing.

"""

from .buffer import PixelBuffer
from .codec import CodecError, DecodeError, EncodeError, decode, encode, load_image, save_image
from .pool import BoundedWorkerPool, run_rows
from .transforms import TransformError, apply, blur, downscale

__all__ = [
    "PixelBuffer",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "decode",
    "encode",
    "load_image",
    "save_image",
    "BoundedWorkerPool",
    "run_rows",
    "TransformError",
    "apply",
    "blur",
    "downscale",
]
