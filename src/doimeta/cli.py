"""Command-line interface for the doimeta project."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import httpx
import structlog
import typer
from rich.console import Console
from rich.table import Table

from doimeta.errors import DoiMetaError
from doimeta.models import CitationRecord
from doimeta.services import (
    ConsoleNotifier,
    CrossrefFetcher,
    FrontMatterUpdater,
    UpdateOutcome,
    UpdateStatus,
    Vault,
    load_metadata_using_doi,
    merge,
    serialize,
)
from doimeta.settings import Settings, get_settings

console = Console()
app = typer.Typer(help="doimeta – fill note front matter from a DOI")
logger = structlog.get_logger(__name__)


def _configure_logging(level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=lambda *_: structlog.PrintLogger(sys.stderr),
    )


def _build_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.request_timeout)


@app.callback()
def main() -> None:
    """Look up DOIs on Crossref and write the citation into note front matter."""
    _configure_logging(get_settings().log_level)


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = get_settings()
    if json_output:
        typer.echo(settings.model_dump_json(indent=2))
        return
    table = Table(title="doimeta Settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def update(
    note: Path = typer.Argument(..., help="Markdown note, relative to the vault or absolute"),
    vault: Optional[Path] = typer.Option(None, help="Vault directory (defaults to DOIMETA_VAULT_DIR)"),
    dry_run: bool = typer.Option(False, help="Show the new front matter without writing it"),
) -> None:
    """Refresh a note's front matter from the DOI it declares."""
    settings = get_settings()
    library = Vault(vault or settings.vault_dir)
    logger.debug("cli.update", note=str(note), vault=str(library.root), dry_run=dry_run)
    if not library.resolve(note).is_file():
        raise typer.BadParameter(f"Note not found: {library.resolve(note)}")

    async def runner() -> UpdateOutcome:
        async with _build_client(settings) as client:
            updater = FrontMatterUpdater(CrossrefFetcher(client=client, settings=settings), settings)
            return await load_metadata_using_doi(
                note,
                cache=library,
                store=library,
                notifier=ConsoleNotifier(console),
                updater=updater,
                dry_run=dry_run,
            )

    try:
        outcome = asyncio.run(runner())
    except (DoiMetaError, httpx.HTTPError) as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    if outcome.status is UpdateStatus.BLOCK_NOT_FOUND:
        console.print(
            f"{library.resolve(note).name} has no leading front matter block.",
            style="yellow",
            markup=False,
        )
        return
    if not outcome.changed:
        raise typer.Exit(code=1)
    if dry_run and outcome.block is not None:
        typer.echo(serialize(outcome.block))


@app.command()
def fetch(
    doi: str = typer.Argument(..., help="DOI to look up"),
    json_output: bool = typer.Option(False, "--json", help="Print the citation record as JSON"),
    block: bool = typer.Option(False, "--block", help="Print the front matter block it would produce"),
) -> None:
    """Look up a DOI without touching any note."""
    settings = get_settings()

    async def runner() -> CitationRecord:
        async with _build_client(settings) as client:
            return await CrossrefFetcher(client=client, settings=settings).fetch(doi)

    try:
        citation = asyncio.run(runner())
    except (DoiMetaError, httpx.HTTPError) as exc:
        console.print(f"Error fetching metadata: {exc}", style="red", markup=False)
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(citation.model_dump_json(by_alias=True, exclude_none=True, indent=2))
        return
    if block:
        typer.echo(serialize(merge({settings.identifier_key: doi}, citation)))
        return
    _print_citation(citation)


def _print_citation(citation: CitationRecord) -> None:
    table = Table(title="Citation Preview")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("DOI", citation.doi or "—")
    table.add_row("Title", citation.first_title)
    table.add_row("Authors", citation.author_line or "—")
    table.add_row("Journal", citation.journal or "—")
    table.add_row("Year", str(citation.year) if citation.year is not None else "—")
    table.add_row("Volume", citation.volume or "—")
    table.add_row("Issue", citation.issue or "—")
    table.add_row("Pages", citation.page or "—")
    table.add_row("URL", citation.url or "—")
    console.print(table)


if __name__ == "__main__":
    app()
