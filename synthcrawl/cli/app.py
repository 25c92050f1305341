"""Synthcrawl CLI application using Typer."""

import json
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from synthcrawl import __version__
from synthcrawl.config import settings
from synthcrawl.core.induction import (
    SynthesisConfig,
    SynthesisOrchestrator,
    SynthesisResult,
    SynthesisStatus,
)
from synthcrawl.utils.exceptions import SynthCrawlError
from synthcrawl.utils.logging import configure_logging

app = typer.Typer(
    name="synthcrawl",
    help="Synthcrawl - learn per-site extraction rules from example pages",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"[bold cyan]Synthcrawl[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Synthcrawl - learn per-site extraction rules from example pages."""
    pass


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"\n[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code=1)


def load_bundle(path: Path) -> dict[str, Any]:
    """
    Load a bundle of already-fetched pages.

    Args:
        path: JSON file with "sites" and optional "extractors", "knowledge"
            and "attributes" keys

    Raises:
        typer.Exit: If the file is unreadable or not a bundle
    """
    try:
        bundle = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        fail(f"Cannot read bundle {path}: {e}")

    if not isinstance(bundle, dict) or not isinstance(bundle.get("sites"), dict):
        fail(f"Bundle {path} must be an object with a 'sites' mapping")
    return bundle


def result_to_json(result: SynthesisResult) -> dict[str, Any]:
    """Serializable view of a synthesis result."""
    return {
        "iterations": result.iterations,
        "knowledge": {attr: sorted(values) for attr, values in result.knowledge.items()},
        "extractors": result.site_extractors,
        "outcomes": {
            site_id: {
                "status": outcome.status.value,
                "missing": [list(pair) for pair in outcome.missing],
                "reason": outcome.reason,
            }
            for site_id, outcome in result.outcomes.items()
        },
    }


def render_result(result: SynthesisResult) -> None:
    """Print per-site outcomes as a table."""
    table = Table(title=f"Synthesis finished after {result.iterations} round(s)")
    table.add_column("Site", style="cyan")
    table.add_column("Status")
    table.add_column("Fragments")
    table.add_column("Missing", style="yellow")

    for site_id, outcome in sorted(result.outcomes.items()):
        status = (
            "[green]complete[/green]"
            if outcome.status is SynthesisStatus.COMPLETE
            else f"[red]stalled[/red] ({outcome.reason})"
        )
        fragments = "\n".join(
            f"{container or '<root>'} :: {attr} = {expr}"
            for container, attr_extractor in outcome.extractor.items()
            for attr, expr in attr_extractor.items()
            if expr
        )
        missing = "\n".join(
            f"{container or '<root>'} :: {attr}" for container, attr in outcome.missing
        )
        table.add_row(
            escape(site_id), status, escape(fragments) or "-", escape(missing) or "-"
        )

    console.print(table)


@app.command()
def synthesize(
    bundle_path: Annotated[
        Path,
        typer.Argument(help="JSON bundle with sites, pages and optional seeds"),
    ],
    attribute: Annotated[
        list[str] | None,
        typer.Option("--attribute", "-a", help="Attribute to learn (repeatable)"),
    ] = None,
    max_iterations: Annotated[
        int | None,
        typer.Option("--max-iterations", "-n", help="Maximum synthesis rounds"),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option("--threshold", "-t", help="Similarity threshold for known values"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the learned extractors as JSON"),
    ] = None,
) -> None:
    """
    Learn extractors for every site in a bundle.

    Examples:
        # Learn price and title with seeded knowledge from the bundle
        synthcrawl synthesize bundle.json -a price -a title

        # Save the learned extractors
        synthcrawl synthesize bundle.json -a price -o extractors.json
    """
    configure_logging()
    bundle = load_bundle(bundle_path)

    attributes = attribute or bundle.get("attributes") or []
    if not attributes:
        fail("No attributes given; pass --attribute or add 'attributes' to the bundle")

    try:
        config = SynthesisConfig.from_settings(settings)
        if max_iterations is not None:
            config = replace(config, max_iterations=max_iterations)
        if threshold is not None:
            config = replace(config, similarity_threshold=threshold)
    except ValueError as e:
        fail(str(e))

    console.print(
        Panel.fit(
            "[bold cyan]Synthcrawl[/bold cyan] - Wrapper Induction\n"
            f"Version {__version__}",
            border_style="cyan",
        )
    )
    console.print(f"  Sites: {len(bundle['sites'])}")
    console.print(f"  Attributes: {', '.join(attributes)}")
    console.print(f"  Max Iterations: {config.max_iterations}\n")

    orchestrator = SynthesisOrchestrator(config=config)
    try:
        result = orchestrator.synthesize(
            attributes,
            bundle["sites"],
            site_extractors=bundle.get("extractors"),
            knowledge=bundle.get("knowledge"),
        )
    except SynthCrawlError as e:
        fail(str(e))

    render_result(result)

    if output is not None:
        output.write_text(json.dumps(result_to_json(result), indent=2), encoding="utf-8")
        console.print(f"\n[green]Saved extractors to {output}[/green]")

    if result.stalled_sites:
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
