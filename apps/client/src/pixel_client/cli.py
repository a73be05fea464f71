"""CLI for the transform client."""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from pixel_engine import CodecError, TransformError
from pixel_shared.protocol import ParameterError, TransformRequest
from pixel_shared.tcp import TCPError

from .client import TransformClient, transform_local
from .config import ClientConfig

USAGE_EXAMPLES = """
Examples:

  pixel-client send photo.png blur 3 4

  pixel-client send photo.png downscale 300 200 2

  pixel-client test

  pixel-client local blur photo.png blurred.png 3
"""


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _image_request(algorithm: str, params: tuple[str, ...]) -> TransformRequest:
    try:
        request = TransformRequest.from_args(algorithm, params)
    except ParameterError as e:
        _fail(str(e))
    if not request.has_payload:
        _fail("'test' takes no image, run `pixel-client test` instead")
    return request


@click.group(epilog=USAGE_EXAMPLES)
@click.option("--host", default=None, help="Server host")
@click.option("-p", "--port", default=None, type=int, help="Server port")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, host: str | None, port: int | None, verbose: bool) -> None:
    """Send images to a pixel transform server."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    config = ClientConfig.load()
    if host is not None:
        config = dataclasses.replace(config, host=host)
    if port is not None:
        config = dataclasses.replace(config, port=port)
    ctx.obj = config


@cli.command()
@click.argument("image", type=click.Path(path_type=Path))
@click.argument("algorithm")
@click.argument("params", nargs=-1)
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path),
              help="Where to save the processed image")
@click.pass_obj
def send(config: ClientConfig, image: Path, algorithm: str,
         params: tuple[str, ...], output: Path | None) -> None:
    """Transform IMAGE on the server: blur <radius> [workers] or downscale <w> <h> [workers]."""
    request = _image_request(algorithm, params)
    output = output or config.output_path

    try:
        TransformClient(config).transform_file(request, image, output)
    except TCPError as e:
        _fail(f"Server request failed: {e}")
    except OSError as e:
        _fail(f"File error: {e}")
    click.echo(f"Processed file received: {output}")


@cli.command()
@click.pass_obj
def test(config: ClientConfig) -> None:
    """Ask the server to run its performance benchmark."""
    try:
        report = TransformClient(config).benchmark()
    except TCPError as e:
        _fail(f"Server request failed: {e}")
    click.echo("=== SERVER TEST RESULTS ===")
    click.echo(report)


@cli.command()
@click.argument("algorithm")
@click.argument("input_path", metavar="INPUT", type=click.Path(path_type=Path))
@click.argument("output_path", metavar="OUTPUT", type=click.Path(path_type=Path))
@click.argument("params", nargs=-1)
def local(algorithm: str, input_path: Path, output_path: Path,
          params: tuple[str, ...]) -> None:
    """Run a transform in this process without contacting a server."""
    request = _image_request(algorithm, params)
    try:
        transform_local(request, input_path, output_path)
    except (CodecError, TransformError) as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"File error: {e}")
    click.echo(f"Saved: {output_path}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
