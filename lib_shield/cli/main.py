"""Main CLI interface for LibShield."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..config import DetectorConfig, EmptyRangePolicy
from ..core.factory import DriverFactory, default_registry
from ..errors import LibShieldError
from ..output.formatters import ConsoleFormatter, JSONFormatter
from ..store import build_database, open_store
from ..utils.logging import get_logger, setup_logging
from ..utils.performance import PerformanceMonitor

app = typer.Typer(
    name="lib-shield",
    help="Check installed library versions against an advisory database",
    add_completion=False
)

console = Console()
logger = get_logger("CLI")


def _resolve_database(database_path: Optional[Path], config: DetectorConfig) -> Path:
    path = database_path or config.database_path
    if path is None:
        console.print("[red]Error: No advisory database given (use --db or LIBSHIELD_DB_PATH)[/red]")
        raise typer.Exit(1)
    return path


@app.command()
def detect(
    hint: str = typer.Argument(
        ...,
        help="Manifest/lockfile name or ecosystem alias, e.g. composer.lock or pypi"
    ),
    package: str = typer.Argument(..., help="Package name"),
    version: str = typer.Argument(..., help="Installed version"),
    database_path: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Advisory database: SQLite file, fixture file or fixture directory"
    ),
    empty_range_policy: Optional[EmptyRangePolicy] = typer.Option(
        None,
        "--empty-range-policy",
        help="Outcome for advisories without any version ranges"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print results as JSON"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for JSON results"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
    performance: bool = typer.Option(
        False,
        "--performance",
        help="Show performance summary"
    ),
) -> None:
    """Detect vulnerabilities affecting one installed package."""
    config = DetectorConfig.from_env()
    if empty_range_policy is not None:
        config.empty_range_policy = empty_range_policy
    config.verbose = verbose or config.verbose

    setup_logging(level=logging.WARNING, verbose=config.verbose)
    db_path = _resolve_database(database_path, config)
    monitor = PerformanceMonitor(enabled=performance)

    try:
        with monitor.measure("open_store"):
            store = open_store(db_path)
            store.open()
        try:
            factory = DriverFactory(store, config)
            driver = factory.new_driver(hint)
            with monitor.measure("detect"):
                results = driver.detect(package, version)
        finally:
            store.close()
    except LibShieldError as e:
        logger.error(f"Detection failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if output:
        JSONFormatter(output).save_results(results)
        console.print(f"Results written to {output}")

    if as_json:
        typer.echo(JSONFormatter().dumps(results))
    else:
        ConsoleFormatter(console).format_detections(results, package, version, driver.ecosystem.value)

    if performance:
        monitor.print_summary()


@app.command("import")
def import_fixtures(
    database_path: Path = typer.Argument(..., help="SQLite database to create or update"),
    fixtures: List[Path] = typer.Argument(..., help="YAML/JSON fixture files or directories"),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Build a SQLite advisory database from fixture files."""
    setup_logging(level=logging.WARNING, verbose=verbose)
    try:
        count = build_database(database_path, fixtures)
    except LibShieldError as e:
        logger.error(f"Import failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Imported {count} advisories into {database_path}[/green]")


@app.command()
def buckets(
    database_path: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Advisory database: SQLite file, fixture file or fixture directory"
    ),
) -> None:
    """List the buckets of an advisory database."""
    config = DetectorConfig.from_env()
    setup_logging(level=logging.WARNING, verbose=config.verbose)
    db_path = _resolve_database(database_path, config)

    try:
        with open_store(db_path) as store:
            names = sorted(store.bucket_names())
    except LibShieldError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not names:
        console.print("[yellow]No buckets found[/yellow]")
        return

    table = Table(title=f"Buckets in {db_path}")
    table.add_column("Bucket", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


@app.command()
def info() -> None:
    """Show supported ecosystems and the hints that select them."""
    registry = default_registry()

    table = Table(title=f"LibShield {__version__}")
    table.add_column("Ecosystem", style="cyan")
    table.add_column("Files", style="green")
    table.add_column("Aliases")
    table.add_column("Legacy bucket", style="dim")

    for ecosystem in registry.supported_ecosystems():
        entry = registry.get(ecosystem)
        table.add_row(
            ecosystem.value,
            ", ".join(entry.file_names),
            ", ".join(entry.aliases),
            entry.legacy_bucket or "-",
        )
    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
