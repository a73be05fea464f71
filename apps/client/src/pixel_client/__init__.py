"""
Thin client for the pixel transform server. It:
1. Validates the algorithm and parameters before dialing
2. Sends the request line and the framed image
3. Saves the framed result, or prints the server's benchmark report

Deployment:
    pip install pixel-offload
    pixel-client send photo.png blur 3 4
"""

from .client import TransformClient, transform_local
from .config import ClientConfig

__all__ = ["ClientConfig", "TransformClient", "transform_local"]
