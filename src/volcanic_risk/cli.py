"""CLI interface using Typer."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from volcanic_risk import __version__
from volcanic_risk.aggregator import (
    REGIONS,
    assessment_query,
    fetch_assessment_events,
    get_fused_events,
    load_events_from_store,
)
from volcanic_risk.backfill import backfill_usgs
from volcanic_risk.catalog import VolcanoNotFoundError, all_volcanoes, find_volcano
from volcanic_risk.config import (
    ALL_SOURCES,
    OutputFormat,
    Region,
    RiskModelName,
    VolcanicRiskConfig,
)
from volcanic_risk.exporters import (
    export_assessments_json,
    export_geojson,
    export_json,
    export_markdown,
)
from volcanic_risk.scoring import assess_all_volcanoes, get_risk_model
from volcanic_risk.store import EventStore

app = typer.Typer(
    name="volcanic-risk",
    help="Multi-provider earthquake fusion and volcanic eruption risk scoring.",
    add_completion=False,
)
console = Console()

_CATEGORY_STYLES: dict[str, str] = {
    "CRITICAL": "bold red",
    "VERY_HIGH": "red",
    "HIGH": "dark_orange",
    "ELEVATED": "yellow",
    "MODERATE": "green",
    "LOW": "green",
    "BACKGROUND": "dim",
}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"volcanic-risk {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Volcanic Risk: fused earthquake catalogues and eruption risk scoring."""


@app.command()
def fetch(
    hours: Annotated[
        int,
        typer.Option("--hours", "-H", min=1, max=168, help="Hours of history to fetch."),
    ] = 24,
    min_magnitude: Annotated[
        float,
        typer.Option("--min-magnitude", "-m", help="Minimum earthquake magnitude."),
    ] = 1.0,
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", min=1, max=5000, help="Maximum fused events."),
    ] = 1000,
    region: Annotated[
        Region | None,
        typer.Option("--region", "-r", help="Regional bounding-box filter."),
    ] = None,
    providers: Annotated[
        list[str] | None,
        typer.Option("--provider", "-p", help="Provider to query (repeatable)."),
    ] = None,
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output file path."),
    ] = Path("earthquakes.json"),
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: json or geojson."),
    ] = "json",
    store: Annotated[
        Path | None,
        typer.Option("--store", help="SQLite event store to persist fused events."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Fetch, fuse and export earthquakes from every provider."""
    _configure_logging(verbose)
    if output_format == "markdown":
        console.print("[red]Markdown output is only available for 'assess'.[/red]")
        raise typer.Exit(code=1)
    unknown = sorted(set(providers or ()) - set(ALL_SOURCES))
    if unknown:
        console.print(f"[red]Unknown provider(s):[/red] {', '.join(unknown)}")
        raise typer.Exit(code=1)

    config = VolcanicRiskConfig(
        hours=hours,
        min_magnitude=min_magnitude,
        limit=limit,
        region=region,
        providers=providers or list(ALL_SOURCES),
        output_file=output,
        output_format=output_format,
        store_path=store,
    )
    event_store = EventStore(config.store_path) if config.store_path else None

    try:
        result = get_fused_events(config, store=event_store)
    except Exception as exc:
        console.print(f"[red]Fetch failed:[/red] {exc}")
        raise typer.Exit(code=1) from None

    if config.output_format == "geojson":
        export_geojson(result, config.output_file)
    else:
        export_json(result, config.output_file)

    console.print()
    table = Table(title="Earthquake Fusion Summary")
    table.add_column("Source", style="bold")
    table.add_column("Events", justify="right")
    for source in config.providers:
        table.add_row(source, str(result.stats.by_source.get(source, 0)))
    table.add_row("[dim]combined[/dim]", str(result.stats.combined))
    table.add_row("[bold]fused[/bold]", str(result.stats.after_dedup), end_section=True)
    console.print(table)

    largest = result.stats.largest_event
    if largest is not None:
        console.print(f"Largest: M{largest.magnitude:.1f} {largest.place} ({largest.source})")
    console.print(
        f"\n{config.output_format.upper()} written to [bold]{config.output_file}[/bold]"
    )
    console.print(f"Duplicates removed: {result.stats.duplicates_removed}")


@app.command()
def assess(
    volcano: Annotated[
        str | None,
        typer.Option("--volcano", help="Volcano id or slug. Omit to assess all."),
    ] = None,
    model: Annotated[
        RiskModelName,
        typer.Option("--model", help="Risk model: 'multifactor' or 'legacy'."),
    ] = "multifactor",
    days: Annotated[
        int,
        typer.Option("--days", "-d", min=1, max=1825, help="Days of seismicity to use."),
    ] = 90,
    min_magnitude: Annotated[
        float,
        typer.Option("--min-magnitude", "-m", help="Minimum earthquake magnitude."),
    ] = 2.0,
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output file path."),
    ] = Path("volcanic_risk_output.json"),
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: json or markdown."),
    ] = "json",
    store: Annotated[
        Path | None,
        typer.Option("--store", help="SQLite event store."),
    ] = None,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Score events already in --store without fetching."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Assess eruption risk for one volcano or every bundled volcano."""
    _configure_logging(verbose)
    if output_format == "geojson":
        console.print("[red]GeoJSON output is only available for 'fetch'.[/red]")
        raise typer.Exit(code=1)
    if offline and store is None:
        console.print("[red]--offline requires --store.[/red]")
        raise typer.Exit(code=1)

    try:
        volcanoes = [find_volcano(volcano)] if volcano else all_volcanoes()
    except VolcanoNotFoundError as exc:
        console.print(f"[red]{exc.args[0]}[/red]")
        raise typer.Exit(code=1) from None

    config = VolcanicRiskConfig(
        assessment_days=days,
        assessment_min_magnitude=min_magnitude,
        risk_model=model,
        output_file=output,
        output_format=output_format,
        store_path=store,
    )
    now = datetime.now(tz=timezone.utc)
    event_store = EventStore(config.store_path) if config.store_path else None

    try:
        if offline and event_store is not None:
            events = load_events_from_store(event_store, assessment_query(config, now))
        else:
            events = fetch_assessment_events(config, store=event_store, now=now).events
    except Exception as exc:
        console.print(f"[red]Fetch failed:[/red] {exc}")
        raise typer.Exit(code=1) from None

    assessments = assess_all_volcanoes(volcanoes, events, now, get_risk_model(config.risk_model))

    if config.output_format == "markdown":
        export_markdown(assessments, config.output_file, generated=now)
    else:
        export_assessments_json(assessments, config.output_file)

    console.print()
    table = Table(title=f"Volcanic Risk Assessment ({config.risk_model})")
    table.add_column("Volcano", style="bold")
    table.add_column("Status", style="dim")
    table.add_column("Category")
    table.add_column("P(30d)", justify="right")
    table.add_column("P(1yr)", justify="right", style="red")
    table.add_column("Confidence")
    table.add_column("Local", justify="right")

    for a in assessments:
        style = _CATEGORY_STYLES.get(a.category, "")
        table.add_row(
            a.volcano_name,
            a.status,
            f"[{style}]{a.category}[/{style}]" if style else a.category,
            f"{a.probability_30day:.1%}",
            f"{a.probability_1year:.1%}",
            a.confidence,
            str(a.statistics.local_count),
        )

    console.print(table)
    console.print(
        f"\n{config.output_format.upper()} written to [bold]{config.output_file}[/bold]"
    )
    console.print(f"Earthquakes analyzed: {len(events)}")


@app.command()
def backfill(
    store: Annotated[
        Path,
        typer.Option("--store", help="SQLite event store to fill."),
    ],
    start_year: Annotated[
        int,
        typer.Option("--start-year", min=1900, help="First year to backfill."),
    ] = 2000,
    end_year: Annotated[
        int | None,
        typer.Option("--end-year", help="Last year to backfill. Defaults to this year."),
    ] = None,
    min_magnitude: Annotated[
        float,
        typer.Option("--min-magnitude", "-m", help="Minimum earthquake magnitude."),
    ] = 2.5,
    region: Annotated[
        Region | None,
        typer.Option("--region", "-r", help="Regional bounding box."),
    ] = "philippines",
    delay: Annotated[
        float,
        typer.Option("--delay", min=0.0, help="Seconds between yearly requests."),
    ] = 1.0,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Load USGS history year by year into the event store."""
    _configure_logging(verbose)
    last_year = end_year if end_year is not None else datetime.now(tz=timezone.utc).year
    if last_year < start_year:
        console.print("[red]--end-year must not be before --start-year.[/red]")
        raise typer.Exit(code=1)

    event_store = EventStore(store)
    total = last_year - start_year + 1
    console.print(
        f"Backfilling [bold]{total}[/bold] years: {start_year} to {last_year}"
        f" (M{min_magnitude}+, {region or 'global'})\n"
    )

    with Progress(console=console) as progress:
        task = progress.add_task("Backfilling...", total=total)
        summary = backfill_usgs(
            event_store,
            start_year,
            last_year,
            min_magnitude=min_magnitude,
            bbox=REGIONS[region] if region else None,
            delay=delay,
            on_year=lambda year: progress.advance(task),
        )

    console.print(
        f"\n[green]Done![/green] {summary.fetched} fetched, {summary.stored} stored "
        f"over {summary.years} years."
    )
    if summary.failed_years:
        console.print(
            f"[yellow]Failed years:[/yellow] {', '.join(map(str, summary.failed_years))}"
        )
    console.print(f"Store now holds {event_store.count()} events: [bold]{store}[/bold]")
