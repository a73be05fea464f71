"""CLI for the transform server."""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path

import click

from .config import ServerConfig
from .server import TransformServer


@click.command()
@click.option("-h", "--host", default=None, help="Listen host")
@click.option("-p", "--port", default=None, type=int, help="Listen port (default 8080)")
@click.option("--reference-image", default=None, type=click.Path(path_type=Path),
              help="Image used by the 'test' benchmark")
@click.option("--max-workers", default=None, type=int,
              help="Upper bound on workers a request may ask for")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def cli(host: str | None, port: int | None, reference_image: Path | None,
        max_workers: int | None, verbose: bool) -> None:
    """Run the pixel transform server."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    overrides = {
        "host": host,
        "port": port,
        "reference_image": reference_image,
        "max_workers": max_workers,
    }
    config = dataclasses.replace(
        ServerConfig.load(),
        **{k: v for k, v in overrides.items() if v is not None},
    )

    server = TransformServer(config)
    try:
        server.open()
    except OSError as e:
        logging.error("Cannot listen on %s:%d: %s", config.host, config.port, e)
        sys.exit(1)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logging.info("Interrupted")
    finally:
        server.close()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
