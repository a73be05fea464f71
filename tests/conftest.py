"""
Shared pytest fixtures for the pixel transform tests.
"""
import socket
import threading

import numpy as np
import pytest

from pixel_engine import PixelBuffer, save_image
from pixel_server import BenchmarkSettings, ServerConfig, TransformServer
from pixel_shared.tcp import FramedConnection


def random_buffer(width, height, seed=0):
    rng = np.random.default_rng(seed)
    return PixelBuffer(rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8))


@pytest.fixture()
def socketpair():
    """Yield a connected AF_UNIX socketpair and close both ends after the test."""
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


@pytest.fixture()
def framed_pair(socketpair):
    """Two FramedConnections talking to each other."""
    a, b = socketpair
    left, right = FramedConnection(a), FramedConnection(b)
    yield left, right
    left.close()
    right.close()


@pytest.fixture()
def make_buffer():
    """Factory for seeded random RGBA buffers."""
    return random_buffer


@pytest.fixture()
def noisy_image():
    return random_buffer(23, 17, seed=7)


@pytest.fixture()
def reference_image(tmp_path):
    path = tmp_path / "reference.png"
    save_image(random_buffer(32, 24, seed=3), path)
    return path


@pytest.fixture()
def bench_settings(reference_image):
    return BenchmarkSettings(
        reference_image=reference_image,
        worker_counts=(1, 2, 4),
        repetitions=1,
        blur_radius=1,
        downscale_size=(8, 8),
    )


@pytest.fixture()
def server_config():
    return ServerConfig(host="127.0.0.1", port=0, max_workers=16)


@pytest.fixture()
def running_server(server_config, bench_settings):
    """Serve on an ephemeral port in a background thread. Yields (host, port)."""
    server = TransformServer(server_config, bench_settings)
    server.open()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server.address
    finally:
        server.shutdown(timeout=5)
        server.close()
        thread.join(timeout=5)
