"""CLI interface for vitessg.

Command-line tool for generating static bundles from Vite repositories.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from vitessg.config import Config
from vitessg.core.errors import SsgError


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover vitessg.toml)",
)
repos_dir_option = click.option(
    "--repos-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for repository checkouts (overrides config)",
)
out_dir_option = click.option(
    "--out-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for generated bundles (overrides config)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)


@click.group()
def cli() -> None:
    """vitessg - static bundles from Vite repositories."""


@cli.command()
@config_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    envvar="PORT",
    help="Port to bind to (overrides config, env: PORT)",
)
@repos_dir_option
@out_dir_option
@verbose_option
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    repos_dir: Path | None,
    out_dir: Path | None,
    verbose: bool,
) -> None:
    """Start the static generation API server."""
    from vitessg.server import run_server

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(
        host=host, port=port, repos_dir=repos_dir, out_dir=out_dir
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Repositories: {config.workspace.repos_dir}")
    click.echo(f"Output: {config.workspace.out_dir}")

    run_server(config)


@cli.command()
@click.argument("repo_url")
@click.option(
    "--route",
    "-r",
    "routes",
    multiple=True,
    help="Route to render (repeatable, default: /)",
)
@config_option
@repos_dir_option
@out_dir_option
@verbose_option
def build(
    repo_url: str,
    routes: tuple[str, ...],
    config_path: Path | None,
    repos_dir: Path | None,
    out_dir: Path | None,
    verbose: bool,
) -> None:
    """Generate a static bundle for REPO_URL."""
    from vitessg.runner import create_orchestrator, create_port_allocator

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(repos_dir=repos_dir, out_dir=out_dir)
    orchestrator = create_orchestrator(config, create_port_allocator(config))

    try:
        result = asyncio.run(orchestrator.run(repo_url, list(routes) or None))
    except SsgError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(
        click.style(
            f"Generated {len(result.documents)} pages and {result.assets} assets",
            fg="green",
        )
    )
    click.echo(str(result.out_path))
