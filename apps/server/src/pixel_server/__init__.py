"""
This app is deployed on the transform server. It:
1. Accepts client connections over TCP
2. Reads one framed request per connection
3. Runs the transform on a bounded worker pool (using pixel-engine)
4. Sends the framed result back, or a benchmark report for "test"

Deployment:
    pip install pixel-offload
    pixel-server --port 8080 --reference-image test_image.png
"""

from .benchmark import BenchmarkSettings, run_benchmark
from .config import ServerConfig
from .server import TransformServer
from .session import Session, SessionState

__all__ = [
    "BenchmarkSettings",
    "run_benchmark",
    "ServerConfig",
    "TransformServer",
    "Session",
    "SessionState",
]
