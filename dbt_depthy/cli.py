"""Click CLI with depths, lookup, watch, and serve subcommands."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click

from dbt_depthy import __version__
from dbt_depthy.annotate import annotate, classify_depth
from dbt_depthy.config import load_config
from dbt_depthy.models import DepthTier
from dbt_depthy.service import DepthService

_TIER_COLORS = {
    DepthTier.LOW: "green",
    DepthTier.MEDIUM: "yellow",
    DepthTier.HIGH: "red",
}

_ROOT_ARGUMENT = click.argument(
    "project_root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)


def _load_service(project_root: Path) -> DepthService:
    service = DepthService(project_root, load_config(project_root))
    if not service.refresh():
        raise click.ClickException(service.last_error or "Could not load manifest")
    return service


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """dbt-depthy: Show how deep each dbt model sits in the DAG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_ROOT_ARGUMENT
@click.option("--json", "as_json", is_flag=True, help="Print the depth table as JSON")
def depths(project_root: Path, as_json: bool):
    """List every model with its depth, deepest first."""
    service = _load_service(project_root)
    table = service.table

    if as_json:
        click.echo(json.dumps(dict(table.items()), indent=2))
        return

    if table.model_count == 0:
        click.echo("No models found in manifest.")
        return

    click.echo(f"\n{table.model_count} model(s) from {service.manifest_path}\n")

    # Only the fully-qualified keys, so shared short names are not collapsed
    prefix = f"{service.config.participating_kind}."
    rows = sorted(
        ((key, depth) for key, depth in table.items() if key.startswith(prefix)),
        key=lambda row: (-row[1], row[0]),
    )
    for unique_id, depth in rows:
        tier = classify_depth(depth, service.config)
        click.echo(f"  {click.style(f'({depth})', fg=_TIER_COLORS[tier], bold=True):>16}  {unique_id}")

    click.echo(f"\nMax depth: {table.max_depth}")


@cli.command()
@click.argument("name")
@_ROOT_ARGUMENT
def lookup(name: str, project_root: Path):
    """Show the depth of a single model by name or unique id."""
    service = _load_service(project_root)
    result = annotate(name, service.table, service.config)
    if result is None:
        raise click.ClickException(f"Model not found: {name}")

    click.echo(click.style(result.label, fg=_TIER_COLORS[result.tier], bold=True) + f" {name}")
    click.echo(result.hover)


@cli.command()
@_ROOT_ARGUMENT
def watch(project_root: Path):
    """Recompute depths whenever manifest.json or dbt_project.yml changes."""
    from dbt_depthy.watch import watch_project

    service = DepthService(project_root, load_config(project_root))

    def report(ok: bool) -> None:
        if ok:
            table = service.table
            click.echo(f"Depths updated: {table.model_count} model(s), max depth {table.max_depth}")
        else:
            click.echo(click.style(f"Refresh failed: {service.last_error}", fg="red"), err=True)

    click.echo(f"Watching {project_root} (Ctrl+C to stop)")
    try:
        asyncio.run(watch_project(service, on_refresh=report))
    except KeyboardInterrupt:
        pass


@cli.command()
@_ROOT_ARGUMENT
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(project_root: Path, port: int, host: str):
    """Serve the depth table over HTTP for editor integrations."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for serve. "
            "Install with: pip install 'dbt-depthy[web]'"
        )

    from dbt_depthy.web import create_app

    click.echo(f"Starting dbt-depthy at http://{host}:{port}")
    uvicorn.run(create_app(project_root=project_root), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
