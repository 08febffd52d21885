"""Command line interface for the Bali rental listing pipeline."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .adapter import SourceAdapter
from .exceptions import ConfigError
from .settings import Settings
from .sites import get_source, load_sources
from .store import JsonListingStore
from .workflow import run_sources

app = typer.Typer(add_completion=False, help="Bali rental listing pipeline")

# Silence noisy HTTP client loggers only
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def _configure_logging(level: str, debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)


@app.command()
def run(
    source: str = typer.Argument("all", help="Source slug, or 'all'"),
    store: Optional[Path] = typer.Option(None, help="JSON listings store to upsert into"),
    out: Optional[Path] = typer.Option(None, help="Write the run report JSON to this file"),
    pretty: bool = typer.Option(False, help="Pretty-print JSON output"),
    delay: Optional[float] = typer.Option(None, help="Seconds to wait between sources"),
    idr_per_usd: Optional[float] = typer.Option(None, help="Rupiah per US dollar for price conversion"),
    sources_file: Optional[Path] = typer.Option(None, "--sources", help="Alternative sources YAML"),
    debug: bool = typer.Option(False, help="Enable verbose debug logging"),
) -> None:
    """Scrape one source or all of them and store the results."""

    settings = _settings()
    _configure_logging(settings.log_level, debug)

    try:
        configs = load_sources(sources_file)
        if source != "all":
            configs = [get_source(source, configs)]
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)

    result = run_sources(
        configs,
        JsonListingStore(store or settings.store_path),
        delay=settings.source_delay if delay is None else delay,
        timeout=settings.fetch_timeout,
        user_agent=settings.user_agent,
        idr_per_usd=idr_per_usd or settings.idr_per_usd,
    )

    for item in result.per_source_results:
        if item.error is None:
            typer.echo(f"{item.source_name}: {item.count} listing(s) [{item.status}] in {item.duration_ms} ms")
        else:
            typer.echo(f"{item.source_name}: FAILED in {item.duration_ms} ms: {item.error}")
    typer.echo(f"Total unique listings: {result.total_listings}")

    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(
            json.dumps(result.to_dict(include_listings=True), ensure_ascii=False, indent=2 if pretty else None),
            encoding="utf-8",
        )
        logging.info("Wrote run report to %s", out)

    if result.all_failed:
        raise typer.Exit(code=1)


@app.command()
def sources(
    sources_file: Optional[Path] = typer.Option(None, "--sources", help="Alternative sources YAML"),
) -> None:
    """List the configured sources."""

    try:
        configs = load_sources(sources_file)
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)

    for config in configs:
        mode = "rendered" if config.render else "static"
        typer.echo(f"{config.slug:<22} {config.display_name:<22} {mode:<9} {len(config.seeds)} seed(s)")


@app.command()
def check(
    source: str = typer.Argument(..., help="Source slug"),
    fixture: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved HTML page"),
    url: Optional[str] = typer.Option(None, help="Page URL the fixture was saved from"),
    sources_file: Optional[Path] = typer.Option(None, "--sources", help="Alternative sources YAML"),
    debug: bool = typer.Option(False, help="Enable verbose debug logging"),
) -> None:
    """Replay one source's extraction against a saved page."""

    settings = _settings()
    _configure_logging(settings.log_level, debug)
    try:
        config = get_source(source, load_sources(sources_file))
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)

    adapter = SourceAdapter(config, idr_per_usd=settings.idr_per_usd)
    page = adapter.extract(fixture.read_bytes(), url or config.seeds[0])

    typer.echo(f"Selector: {page.selector or '-'} (fallback: {'yes' if page.fallback_used else 'no'})")
    typer.echo(
        f"Containers: {page.containers}  candidates: {page.candidates}  "
        f"rejected: {sum(page.rejections.values())}  listings: {len(page.listings)}"
    )
    for listing in page.listings:
        price = f"${listing.price}" if listing.price is not None else "?"
        typer.echo(f"- {listing.title} | {listing.location} | {price} | {listing.listing_url}")

    if not page.listings:
        typer.echo("No listings extracted; selectors for this source may be stale.")
        raise typer.Exit(code=1)


@app.command()
def prune(
    store: Optional[Path] = typer.Option(None, help="JSON listings store"),
    days: int = typer.Option(30, min=1, help="Remove listings older than this many days"),
) -> None:
    """Drop stale listings from the store."""

    settings = _settings()
    _configure_logging(settings.log_level, False)
    removed = JsonListingStore(store or settings.store_path).prune(days)
    typer.echo(f"Removed {removed} stale listing(s)")


if __name__ == "__main__":  # pragma: no cover
    app()
