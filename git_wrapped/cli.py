import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown

from git_wrapped.config import Settings
from git_wrapped.engine import analyze_many
from git_wrapped.fetchers.github import fetch_developer_document, fetch_repository_document
from git_wrapped.formatter import format_report
from git_wrapped.models import InvalidActivityDocument

load_dotenv()
app = typer.Typer()
console = Console()


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler(console=console)])


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/] {message}")
    raise typer.Exit(1)


def _emit(results: list, as_json: bool, output: Optional[Path]) -> None:
    if as_json:
        payload = [r.model_dump(mode="json", by_alias=True) for r in results]
        text = json.dumps(payload[0] if len(payload) == 1 else payload, indent=2, ensure_ascii=False)
    else:
        text = "\n\n---\n\n".join(format_report(r) for r in results)

    if output:
        output.write_text(text, encoding="utf-8")
        console.print(f"[bold green]✓[/] Report saved to [cyan]{output}[/]")
    elif as_json:
        console.print_json(text)
    else:
        console.print(Markdown(text))


@app.command()
def wrapped(
    usernames: List[str] = typer.Argument(help="GitHub usernames, with or without @"),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to wrap (default: WRAPPED_YEAR or current year)"),
    as_json: bool = typer.Option(False, "--json", help="Print the statistics as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save report to file instead of printing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine and API details"),
):
    """Wrap one or more developers' year on GitHub.

    The current streak counts back from the last day of the calendar, so
    trailing days without contributions, including the not-yet-lived days
    GitHub lists for the current year, leave it at 0.
    """
    _setup_logging(verbose)
    settings = Settings.from_env()
    year = year or settings.year

    documents = []
    try:
        for username in usernames:
            username = username.lstrip("@")
            with console.status(f"[bold green]Fetching @{username}'s {year} from GitHub..."):
                documents.append(fetch_developer_document(username, year, settings=settings))
        with console.status("[bold green]Crunching the numbers..."):
            results = analyze_many(documents, year)
    except (InvalidActivityDocument, RuntimeError) as exc:
        _fail(str(exc))

    _emit(results, as_json, output)


@app.command()
def project(
    repository: str = typer.Argument(help="Repository as OWNER/REPO"),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to wrap (default: WRAPPED_YEAR or current year)"),
    as_json: bool = typer.Option(False, "--json", help="Print the statistics as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save report to file instead of printing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine and API details"),
):
    """Wrap a repository's year on GitHub."""
    owner, _, name = repository.partition("/")
    if not owner or not name:
        _fail(f"repository must look like OWNER/REPO, got '{repository}'")

    _setup_logging(verbose)
    settings = Settings.from_env()
    year = year or settings.year

    try:
        with console.status(f"[bold green]Fetching {owner}/{name} from GitHub..."):
            document = fetch_repository_document(owner, name, year, settings=settings)
        results = analyze_many([document], year)
    except (InvalidActivityDocument, RuntimeError) as exc:
        _fail(str(exc))

    _emit(results, as_json, output)


@app.command()
def analyze(
    path: Path = typer.Argument(help="Saved activity document (JSON)", exists=True, dir_okay=False),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Reference year (default: WRAPPED_YEAR or current year)"),
    as_json: bool = typer.Option(False, "--json", help="Print the statistics as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save report to file instead of printing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine details"),
):
    """Analyze a saved activity document offline."""
    _setup_logging(verbose)
    year = year or Settings.from_env().year

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        _fail(f"not valid JSON in {path}: {exc}")

    documents = raw if isinstance(raw, list) else [raw]
    try:
        results = analyze_many(documents, year)
    except InvalidActivityDocument as exc:
        _fail(str(exc))

    _emit(results, as_json, output)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("git_wrapped.api.server:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
