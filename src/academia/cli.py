"""CLI entry point for Academia.

Runs the REST API and exposes the seat-accounting maintenance operations.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from academia.config import Settings, load_settings
from academia.enrollment import EnrollmentService, OccupancyReport
from academia.exceptions import AcademiaError, ConfigError
from academia.logging import setup_logging
from academia.store import AcademiaStore


def _load(config_path: Path | None, db_path: str | None) -> Settings:
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    if db_path is not None:
        settings.db_path = db_path
    return settings


def _echo_occupancy(report: OccupancyReport) -> None:
    click.echo(f"Offering:  {report.offering_id}")
    click.echo(f"Status:    {report.status}")
    click.echo(
        f"Seats:     {report.enrolled_count}/{report.max_seats} "
        f"({report.occupancy_percentage}%, {report.available_seats} free)"
    )


config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML settings file",
)
db_option = click.option("--db", "db_path", default=None, help="SQLite database path")


@click.group()
@click.version_option(package_name="academia")
def main() -> None:
    """Academia - course offerings, enrollments and grades."""
    pass


@main.command()
@config_option
@db_option
@click.option("--host", default=None, help="Bind address (default: from settings)")
@click.option("--port", type=int, default=None, help="Port (default: from settings)")
def serve(config_path: Path | None, db_path: str | None, host: str | None, port: int | None) -> None:
    """Run the REST API."""
    import uvicorn  # noqa: PLC0415

    from academia.api import create_app  # noqa: PLC0415

    settings = _load(config_path, db_path)
    setup_logging(settings, include_server=True)

    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


@main.command()
@config_option
@db_option
@click.argument("offering_id")
def occupancy(config_path: Path | None, db_path: str | None, offering_id: str) -> None:
    """Show seat usage of an offering."""
    settings = _load(config_path, db_path)
    store = AcademiaStore(settings.db_path, busy_timeout=settings.busy_timeout)
    try:
        _echo_occupancy(EnrollmentService(store).get_offering_occupancy(offering_id))
    except AcademiaError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()


@main.command()
@config_option
@db_option
@click.argument("offering_id")
def reconcile(config_path: Path | None, db_path: str | None, offering_id: str) -> None:
    """Rebuild an offering's seat count from its enrollments."""
    settings = _load(config_path, db_path)
    setup_logging(settings, console=False)
    store = AcademiaStore(settings.db_path, busy_timeout=settings.busy_timeout)
    try:
        _echo_occupancy(EnrollmentService(store).reconcile_offering(offering_id))
    except AcademiaError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
