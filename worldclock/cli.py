"""Command-line interface for worldclock.

Usage:
    worldclock                 # live clock grid
    worldclock search <query>
    worldclock list
    worldclock add <query> [--index N]
    worldclock remove <name>...
    worldclock local
    worldclock cache info|clear
"""

from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger

from worldclock import __version__
from worldclock.core.clock import Clock, get_system_timezone, sort_by_utc_offset
from worldclock.core.config import Config
from worldclock.core.constants import SEARCH_LIMIT
from worldclock.core.errors import WorldClockError
from worldclock.core.logger import configure_logger
from worldclock.services.city_catalog import CityCatalog
from worldclock.services.geonames_fetcher import GeoNamesFetcher

# Create Typer app
app = typer.Typer(
    name="worldclock",
    help="Terminal world clock with a searchable city database",
    add_completion=False,
)

cache_app = typer.Typer(help="Manage the cached city database")
app.add_typer(cache_app, name="cache")


def _init_core(config_path: Optional[Path], console: bool = True):
    """Load configuration and create the (unloaded) city catalog."""
    configure_logger(console=console)

    try:
        config = Config(config_path)
    except (WorldClockError, ValueError) as e:
        typer.echo(f"❌ Error loading config: {e}", err=True)
        raise typer.Exit(1)

    catalog = CityCatalog(GeoNamesFetcher())
    return config, catalog


def _load_catalog(catalog: CityCatalog) -> None:
    """Load the city database on this thread, exiting on failure."""
    typer.echo("🔄 Loading city database...")
    load_error = catalog.load_synchronously()
    if load_error is not None:
        typer.echo(f"❌ Error loading city database: {load_error}", err=True)
        raise typer.Exit(1)


def _save_config(config: Config) -> None:
    try:
        config.save()
    except WorldClockError as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
):
    """Show a live grid of world clocks. Press 'a' to add, 'd' to delete, 'q' to quit."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config

    if ctx.invoked_subcommand is not None:
        return

    cfg, catalog = _init_core(config, console=False)

    from worldclock.ui.app_model import ClockAppModel
    from worldclock.ui.main_window import run_tui

    try:
        model = ClockAppModel(cfg, catalog, get_system_timezone())
    except ValueError as e:
        typer.echo(f"❌ Error creating clocks: {e}", err=True)
        raise typer.Exit(1)

    catalog.start_background_load()
    run_tui(model)
    logger.info("Goodbye!")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"worldclock v{__version__}")


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="City name or part of it (min 3 characters)"),
    limit: int = typer.Option(SEARCH_LIMIT, "--limit", "-l", help="Maximum number of results"),
):
    """Search the city database."""
    _, catalog = _init_core(ctx.obj["config_path"])
    _load_catalog(catalog)

    results = catalog.search(query, limit)
    if not results:
        typer.echo("ℹ️  No cities found")
        return

    typer.echo(f"📋 Results ({len(results)}):\n")
    for idx, city in enumerate(results, 1):
        typer.echo(f"  {idx:>3}. {city.name}, {city.country_code} ({city.timezone})")


@app.command("list")
def list_cities(ctx: typer.Context):
    """List configured cities with their current time."""
    config, _ = _init_core(ctx.obj["config_path"])

    try:
        clocks = sort_by_utc_offset([Clock(c["name"], c["timezone"]) for c in config.cities])
    except ValueError as e:
        typer.echo(f"❌ Error creating clocks: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"🕒 Configured cities ({len(clocks)}):\n")
    for clock in clocks:
        typer.echo(f"  {clock.name:<24} {clock.format_time()}  {clock.format_date_with_offset()}")


@app.command()
def add(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="City to search for"),
    index: int = typer.Option(1, "--index", "-i", help="Result number to add (from search)"),
):
    """Add a city from the database to the configuration."""
    config, catalog = _init_core(ctx.obj["config_path"])
    _load_catalog(catalog)

    results = catalog.search(query, SEARCH_LIMIT)
    if not results:
        typer.echo(f"❌ Error: No cities found for '{query}'", err=True)
        raise typer.Exit(1)
    if index < 1 or index > len(results):
        typer.echo(f"❌ Error: Result #{index} not found. Valid range: 1-{len(results)}", err=True)
        raise typer.Exit(1)

    city = results[index - 1]
    try:
        config.add_city(city.name, city.timezone)
    except ValueError as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)
    _save_config(config)

    typer.echo(f"✅ Added {city.name}, {city.country_code} ({city.timezone})")


@app.command()
def remove(
    ctx: typer.Context,
    names: List[str] = typer.Argument(..., help="Names of the cities to remove"),
):
    """Remove cities from the configuration."""
    config, _ = _init_core(ctx.obj["config_path"])
    system_timezone = get_system_timezone()

    for city in config.cities:
        if city["name"] in names and city["timezone"] == system_timezone:
            typer.echo(f"❌ Error: '{city['name']}' is protected (system timezone)", err=True)
            raise typer.Exit(1)

    try:
        removed = config.delete_cities(names)
    except ValueError as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)
    _save_config(config)

    typer.echo(f"✅ Removed {removed} {'city' if removed == 1 else 'cities'}")


@app.command()
def local(ctx: typer.Context):
    """Show the system timezone and its largest city."""
    _, catalog = _init_core(ctx.obj["config_path"])
    system_timezone = get_system_timezone()
    _load_catalog(catalog)

    city = catalog.find_best_for_timezone(system_timezone)
    if city is None:
        typer.echo(f"📍 System timezone: {system_timezone}")
        return
    typer.echo(f"📍 System timezone: {system_timezone} ({city.name}, {city.country_code})")


@cache_app.command("info")
def cache_info():
    """Show where the city database is cached."""
    configure_logger(console=True)
    fetcher = GeoNamesFetcher()
    typer.echo(f"Dataset URL: {fetcher.url}")
    typer.echo(f"Cache file: {fetcher.dataset_path}")
    if fetcher.is_cached():
        size_mb = fetcher.dataset_path.stat().st_size / 1024 / 1024
        typer.echo(f"Status: ✅ Cached ({size_mb:.1f} MB)")
    else:
        typer.echo("Status: ❌ Not downloaded")


@cache_app.command("clear")
def cache_clear():
    """Delete the cached city database so it is downloaded again."""
    configure_logger(console=True)
    if GeoNamesFetcher().clear_cache():
        typer.echo("✅ Cached city database removed")
    else:
        typer.echo("ℹ️  Nothing to remove")


if __name__ == "__main__":
    app()
