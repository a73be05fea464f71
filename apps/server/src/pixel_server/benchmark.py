"""
In-memory benchmark of the transforms across worker counts.

The report is plain text and is sent back through the same framed response
path as an image.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from pixel_engine import CodecError, PixelBuffer, blur, downscale, load_image

from .config import DEFAULT_BENCH_WORKERS, ServerConfig

logger = logging.getLogger(__name__)

BLUR_RADIUS = 3
DOWNSCALE_SIZE = (256, 256)


@dataclass(frozen=True)
class BenchmarkSettings:
    reference_image: Path = Path("test_image.png")
    worker_counts: tuple[int, ...] = DEFAULT_BENCH_WORKERS
    repetitions: int = 3
    blur_radius: int = BLUR_RADIUS
    downscale_size: tuple[int, int] = DOWNSCALE_SIZE

    @classmethod
    def from_config(cls, config: ServerConfig) -> "BenchmarkSettings":
        return cls(
            reference_image=config.reference_image,
            worker_counts=config.bench_workers,
            repetitions=config.bench_repetitions,
        )


@dataclass(frozen=True)
class BenchmarkResult:
    task: str
    workers: int
    avg_ms: float

    def line(self) -> str:
        return f"Task: {self.task}, Workers: {self.workers:4d}, Avg Time: {self.avg_ms:.3f} ms"


def time_task(
    task: str,
    run: Callable[[int], PixelBuffer],
    worker_counts: tuple[int, ...],
    repetitions: int,
) -> list[BenchmarkResult]:
    """Average wall-clock time of run(workers) for each worker count."""
    repetitions = max(1, repetitions)
    results = []
    for workers in worker_counts:
        total = 0.0
        for _ in range(repetitions):
            start = time.perf_counter()
            run(workers)
            total += time.perf_counter() - start
        result = BenchmarkResult(task, workers, total / repetitions * 1000.0)
        logger.debug(result.line())
        results.append(result)
    return results


def run_benchmark(settings: BenchmarkSettings) -> str:
    """Run both tasks and return the text report."""
    path = settings.reference_image
    try:
        image = load_image(path)
    except (OSError, CodecError) as e:
        logger.error("Failed to load benchmark image %s: %s", path, e)
        return f"Failed to load {path}: {e}\n"

    width, height = settings.downscale_size
    lines = [f"[SERVER TEST] Loaded {path} ({image.width}x{image.height})."]

    lines += ["", "--- Testing Blur (in-memory) ---"]
    lines += [r.line() for r in time_task(
        "blur",
        lambda workers: blur(image, settings.blur_radius, workers),
        settings.worker_counts,
        settings.repetitions,
    )]

    lines += ["", "--- Testing Downscale (in-memory) ---"]
    lines += [r.line() for r in time_task(
        "downscale",
        lambda workers: downscale(image, width, height, workers),
        settings.worker_counts,
        settings.repetitions,
    )]

    return "\n".join(lines) + "\n"
