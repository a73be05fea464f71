"""
Protocol definitions for the pixel transform service.

Message Flow:
    Client -> Server: request line "<algorithm> <param>...\\n"
    Client -> Server: framed PNG payload (blur / downscale only)
    Server -> Client: framed PNG payload, or framed UTF-8 report for "test"

A "test" request carries no payload frame. The server answers it straight
away with a text benchmark report.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Sequence

Algorithm = Literal["blur", "downscale", "test"]

ALGORITHMS: frozenset[str] = frozenset({"blur", "downscale", "test"})

# Tokens accepted on the wire for older clients.
ALIASES: dict[str, Algorithm] = {"gblur": "blur"}

# Required and optional (worker count) params per algorithm.
ARITY: dict[str, tuple[int, int]] = {
    "blur": (1, 1),
    "downscale": (2, 1),
    "test": (0, 0),
}

DEFAULT_WORKERS = 1

# Largest image a transform may produce (256 MiB of RGBA samples).
MAX_OUTPUT_PIXELS = 1 << 26

_INTEGER = re.compile(r"-?[0-9]+")


class ProtocolError(Exception):
    """Raised when a message fails validation."""
    pass


class ParameterError(ProtocolError):
    """Raised for unknown algorithms or bad parameter lists."""
    pass


def normalize_algorithm(name: str) -> Algorithm:
    name = ALIASES.get(name, name)
    if name not in ALGORITHMS:
        raise ParameterError(f"Unknown algorithm: {name!r}")
    return name  # type: ignore[return-value]


def _to_int(name: str, value: str) -> int:
    if not _INTEGER.fullmatch(value):
        raise ParameterError(f"<{name}> must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class TransformRequest:
    """A validated transform request."""
    algorithm: Algorithm
    params: tuple[int, ...] = field(default_factory=tuple)
    workers: int = DEFAULT_WORKERS

    @classmethod
    def from_args(
        cls,
        algorithm: str,
        params: Sequence[str | int],
    ) -> "TransformRequest":
        """
        Build a request from raw arguments (command line or request line).

        The trailing optional argument is the worker count; a missing or
        non-positive worker count falls back to 1.
        """
        algorithm = normalize_algorithm(algorithm)
        required, optional = ARITY[algorithm]
        if not required <= len(params) <= required + optional:
            if optional:
                expected = f"{required} or {required + optional}"
            else:
                expected = str(required)
            raise ParameterError(
                f"{algorithm} takes {expected} parameters, got {len(params)}"
            )

        names = _param_names(algorithm)
        values = tuple(_to_int(n, str(v)) for n, v in zip(names, params))

        workers = DEFAULT_WORKERS
        if len(values) > required:
            workers = values[required] if values[required] > 0 else DEFAULT_WORKERS
            values = values[:required]

        if algorithm == "downscale" and (values[0] <= 0 or values[1] <= 0):
            raise ParameterError(
                f"downscale target must be positive, got {values[0]}x{values[1]}"
            )
        if algorithm == "downscale" and values[0] * values[1] > MAX_OUTPUT_PIXELS:
            raise ParameterError(
                f"downscale target {values[0]}x{values[1]} exceeds {MAX_OUTPUT_PIXELS} pixels"
            )

        return cls(algorithm=algorithm, params=values, workers=workers)

    @property
    def has_payload(self) -> bool:
        """False for "test": no image frame follows its request line."""
        return self.algorithm != "test"

    def line_params(self) -> list[int]:
        if self.algorithm == "test":
            return []
        return [*self.params, self.workers]


def _param_names(algorithm: str) -> list[str]:
    if algorithm == "blur":
        return ["radius", "workers"]
    if algorithm == "downscale":
        return ["width", "height", "workers"]
    return []


def format_request_line(algorithm: str, params: Sequence[object]) -> bytes:
    parts = [algorithm, *(str(p) for p in params)]
    return (" ".join(parts) + "\n").encode("ascii")


def parse_request_line(line: str) -> TransformRequest:
    """Parse "<algorithm> <param>..." into a TransformRequest."""
    parts = line.split()
    if not parts:
        raise ParameterError("Empty request line")
    return TransformRequest.from_args(parts[0], parts[1:])
