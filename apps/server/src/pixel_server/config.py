"""Configuration for the transform server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_BENCH_WORKERS: tuple[int, ...] = (1, 2, 4, 8, 16, 32, 64)


def _int_list(value: str) -> tuple[int, ...]:
    return tuple(int(v) for v in value.replace(",", " ").split())


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    backlog: int = 16
    max_workers: int = 256
    reference_image: Path = Path("test_image.png")
    bench_workers: tuple[int, ...] = DEFAULT_BENCH_WORKERS
    bench_repetitions: int = 3

    @classmethod
    def load(cls) -> ServerConfig:
        """Load from environment variables."""
        return cls(
            host=os.getenv("PIXEL_SERVER_HOST", "0.0.0.0"),
            port=int(os.getenv("PIXEL_SERVER_PORT", "8080")),
            max_workers=int(os.getenv("PIXEL_MAX_WORKERS", "256")),
            reference_image=Path(os.getenv("PIXEL_REFERENCE_IMAGE", "test_image.png")),
            bench_workers=_int_list(os.getenv("PIXEL_BENCH_WORKERS", "1,2,4,8,16,32,64")),
            bench_repetitions=int(os.getenv("PIXEL_BENCH_REPETITIONS", "3")),
        )
