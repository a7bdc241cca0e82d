"""CLI entry point for aumai-dockerrecipe."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from .core import HistoryDecoder, RecipeSynthesizer, log_trace, save_recipe
from .engine import DockerEngine
from .exceptions import RecipeError
from .models import LayerRecord


@click.group()
@click.version_option()
@click.option(
    "--log-level",
    envvar="AUMAI_DOCKERRECIPE_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity.",
)
def main(log_level: str) -> None:
    """AumAI DockerRecipe: rebuild Dockerfiles from image metadata."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _emit_lines(lines: list[str], output: str | None) -> None:
    if output is None:
        for line in lines:
            click.echo(line)
        return
    save_recipe(output, lines)
    click.echo(f"Saved recipe: {output}")


@main.command("reverse")
@click.option("--image", required=True, help="Image name or id to reverse.")
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the recipe to this file instead of stdout.",
)
@click.option(
    "--base-url",
    default=None,
    help="Docker daemon URL (defaults to the Docker environment).",
)
def reverse_command(image: str, output: str | None, base_url: str | None) -> None:
    """Reconstruct a Dockerfile from an image's layer history."""
    decoder = HistoryDecoder(trace=log_trace)
    try:
        history = DockerEngine(base_url=base_url).fetch_history(image)
        _emit_lines(decoder.decode(history), output)
    except RecipeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@main.command("decode")
@click.option(
    "--history-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON array of history records, newest first.",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the recipe to this file instead of stdout.",
)
def decode_command(history_file: str, output: str | None) -> None:
    """Reconstruct a Dockerfile from a saved history JSON file."""
    try:
        raw = json.loads(Path(history_file).read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        click.echo(f"Error: cannot parse {history_file}: {exc}", err=True)
        sys.exit(1)

    if not isinstance(raw, list):
        click.echo("Error: history file must contain a JSON array.", err=True)
        sys.exit(1)

    try:
        history = [LayerRecord.model_validate(entry) for entry in raw]
    except ValidationError as exc:
        click.echo(f"Error: invalid history record: {exc}", err=True)
        sys.exit(1)

    decoder = HistoryDecoder(trace=log_trace)
    try:
        _emit_lines(decoder.decode(history), output)
    except RecipeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@main.command("generate")
@click.option("--image", required=True, help="Image whose config describes the runtime.")
@click.option(
    "--output-dir",
    required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Directory holding the captured 'files' tree; Dockerfile goes here.",
)
@click.option(
    "--base-url",
    default=None,
    help="Docker daemon URL (defaults to the Docker environment).",
)
def generate_command(image: str, output_dir: str, base_url: str | None) -> None:
    """Write a minimal from-scratch Dockerfile for a captured filesystem."""
    try:
        info = DockerEngine(base_url=base_url).fetch_runtime_info(image)
        dockerfile = RecipeSynthesizer().generate_from_info(output_dir, info)
    except RecipeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Generated: {dockerfile}")
    click.echo(f"  Workdir    : {info.working_dir or '(none)'}")
    click.echo(f"  Env vars   : {len(info.env)}")
    click.echo(f"  Ports      : {', '.join(sorted(info.exposed_ports)) or '(none)'}")


if __name__ == "__main__":
    main()
