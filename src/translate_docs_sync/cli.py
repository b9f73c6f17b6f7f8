"""
CLI for translate-docs-sync.

Provides commands to synchronize translated documents, inspect the
translation cache and generate a configuration file.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from translate_docs_sync.cache import TranslationCache
from translate_docs_sync.config import (
    Settings,
    apply_overrides,
    create_default_config,
    load_config,
)
from translate_docs_sync.errors import TranslateDocsError
from translate_docs_sync.invoker import TranslationInvoker, create_invoker
from translate_docs_sync.pipeline import PairState, PipelineConfig, RunSummary, TranslationPipeline

app = typer.Typer(
    name="translate-docs",
    help="Incremental, segment-cached translation of documentation files.",
    add_completion=False,
)

console = Console()

STATE_STYLES = {
    PairState.FRESH: "green",
    PairState.INCREMENTAL: "green",
    PairState.UP_TO_DATE: "dim",
    PairState.DRY_RUN_NOTED: "cyan",
    PairState.SKIP_DISALLOWED: "yellow",
    PairState.SKIP_SAME_LANG: "dim",
}


def _display_config(
    settings: Settings, config_path: Path | None, invoker: TranslationInvoker
) -> None:
    """Display the configuration being used."""
    config_source = str(config_path) if config_path else "default (config.yaml or built-in)"

    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Key", style="cyan")
    config_table.add_column("Value", style="green")

    config_table.add_row("Config file", config_source)
    config_table.add_row("Project", settings.project.name)
    config_table.add_row("Root", str(settings.paths.root))
    config_table.add_row("Manifest", str(settings.paths.manifest))
    config_table.add_row("Metadata", str(settings.paths.metadata))
    config_table.add_row("Languages", ", ".join(settings.languages.allowed))
    config_table.add_row("Invoker", invoker.name)
    if settings.dry_run:
        config_table.add_row("Dry run", "yes", style="yellow")

    console.print(
        Panel(config_table, title="[bold blue]translate-docs[/bold blue]", border_style="blue")
    )


def get_settings(config_path: Path | None = None) -> Settings:
    """Load settings from config file or defaults, exiting on errors."""
    try:
        if config_path and not config_path.exists():
            console.print(f"[red]Config file not found: {config_path}[/red]")
            raise typer.Exit(1)
        return load_config(config_path)
    except TranslateDocsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None


def _print_summary(summary: RunSummary) -> None:
    """Print a table of pair outcomes."""
    if not summary.results:
        return

    table = Table(title="Translation Summary")
    table.add_column("Source", style="cyan")
    table.add_column("Pair")
    table.add_column("Target")
    table.add_column("State")
    table.add_column("Translated", justify="right")
    table.add_column("Reused", justify="right")

    for result in summary.results:
        style = STATE_STYLES.get(result.state, "white")
        table.add_row(
            result.source,
            f"{result.source_lang}→{result.target_lang}",
            result.target or "",
            f"[{style}]{result.state.value}[/{style}]",
            str(result.translated_segments),
            str(result.reused_segments),
        )

    console.print(table)


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    manifest: Path | None = typer.Option(None, "--manifest", "-m", help="Manifest CSV"),
    metadata: Path | None = typer.Option(None, "--metadata", help="Translation cache JSON"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root directory"),
    allow: str | None = typer.Option(
        None, "--allow", "-a", help="Comma separated allowed languages (e.g. en,ja)"
    ),
    invoker: str | None = typer.Option(
        None, "--invoker", "-i", help="Invoker: command (default) or echo"
    ),
    command: str | None = typer.Option(
        None, "--command", help="Translation command as a JSON array of strings"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Report what would be translated without writing"
    ),
) -> None:
    """Translate new and changed documents listed in the manifest."""
    settings = get_settings(config)

    try:
        settings = apply_overrides(
            settings,
            root=root,
            manifest=manifest,
            metadata=metadata,
            allowed=allow,
            invoker_type=invoker,
            command=command,
            dry_run=dry_run,
        )
        translation_invoker = create_invoker(
            settings.invoker.type,
            command=settings.invoker.command,
            timeout=settings.invoker.timeout_seconds,
        )
    except TranslateDocsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    _display_config(settings, config, translation_invoker)

    async def run_pipeline() -> RunSummary:
        pipeline = TranslationPipeline(
            PipelineConfig.from_settings(settings),
            translation_invoker,
            console=console,
        )
        return await pipeline.run()

    try:
        summary = asyncio.run(run_pipeline())
    except TranslateDocsError as e:
        console.print(f"[red]Failed: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    _print_summary(summary)
    if summary.skipped_rows:
        console.print(f"[yellow]Skipped {len(summary.skipped_rows)} manifest row(s)[/yellow]")
    console.print("\n[bold green]Done![/bold green]")


@app.command()
def status(
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    metadata: Path | None = typer.Option(None, "--metadata", help="Translation cache JSON"),
) -> None:
    """Show the entries recorded in the translation cache."""
    settings = get_settings(config)
    metadata_path = metadata or settings.paths.metadata

    try:
        cache = TranslationCache.load(metadata_path)
    except TranslateDocsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    if not len(cache):
        console.print("[yellow]No translations recorded[/yellow]")
        return

    table = Table(title=f"Translations ({metadata_path})")
    table.add_column("Source", style="cyan")
    table.add_column("Pair")
    table.add_column("Target")
    table.add_column("Segments", justify="right")
    table.add_column("Translated at", style="dim")

    for _, entry in cache.items():
        table.add_row(
            entry.source,
            f"{entry.source_lang}→{entry.target_lang}",
            entry.target,
            str(len(entry.segments)),
            entry.translated_at,
        )

    console.print(table)


@app.command()
def init(
    output_path: Path = typer.Option(
        Path("config.yaml"),
        "--output",
        "-o",
        help="Output path for config file",
    ),
) -> None:
    """Generate a default configuration file."""
    if output_path.exists():
        overwrite = typer.confirm(f"{output_path} already exists. Overwrite?")
        if not overwrite:
            raise typer.Abort()

    create_default_config(output_path)
    console.print(f"[green]Created config file: {output_path}[/green]")
    console.print("\nList documents in the manifest, then run:")
    console.print("  translate-docs run --config config.yaml --dry-run")


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
