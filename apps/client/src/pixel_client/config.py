"""Configuration for the transform client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ClientConfig:
    """Client configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    connect_timeout: float = 10.0
    output_path: Path = Path("output_processed.png")

    @classmethod
    def load(cls) -> ClientConfig:
        """Load from environment variables."""
        return cls(
            host=os.getenv("PIXEL_SERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("PIXEL_SERVER_PORT", "8080")),
            connect_timeout=float(os.getenv("PIXEL_CONNECT_TIMEOUT", "10.0")),
            output_path=Path(os.getenv("PIXEL_OUTPUT", "output_processed.png")),
        )
