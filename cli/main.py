"""HTML Link Parser CLI — entry-point for the fetch/extract pipeline.

Usage:
    python cli/main.py --help

Commands:
    links      fetch a page and list its links
    normalize  show how an address will be interpreted
    extract    list links in a local HTML file (no network)
    serve      run the HTTP API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from linkparser.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from concurrent.futures import TimeoutError as FutureTimeout
from typing import Optional

import typer

from cli.rendering import render_error, render_json, render_links, render_status
from linkparser.errors import InvalidUrlError
from linkparser.logging_setup import configure_logging
from linkparser.scraper.extractor import extract
from linkparser.scraper.fetcher import close_client
from linkparser.scraper.urls import normalize_input
from linkparser.session import LinkSession, OperationOutcome, load_links

app = typer.Typer(
    name="linkparser",
    help="Fetch an HTML page and list the links it contains.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log fetch progress to stderr."),
) -> None:
    configure_logging(level="INFO" if verbose else None)


def _invalid_url(exc: InvalidUrlError) -> typer.Exit:
    if exc.reason == "empty input":
        typer.echo("No address: enter a page address.", err=True)
    else:
        typer.echo(f"Invalid address: {exc.raw!r}.", err=True)
    return typer.Exit(code=1)


def _wait(session: LinkSession, url: str) -> OperationOutcome:
    """Run one operation, turning Ctrl+C into a cancellation."""
    op = session.start(url)
    typer.echo(f"Loading {op.target.url} …", err=True)
    try:
        while True:
            try:
                return op.result(timeout=0.1)
            except FutureTimeout:
                continue
    except KeyboardInterrupt:
        op.cancel()
        return op.result()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("links")
def links_cmd(
    url: str = typer.Argument(..., help="Page address, e.g. wikipedia.org"),
    html: bool = typer.Option(False, "--html", help="Also print the document text."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    open_index: Optional[int] = typer.Option(
        None, "--open", min=1, help="Open the N-th link (1-based) in the browser."
    ),
) -> None:
    """Fetch URL and print every absolute http/https link it contains."""
    try:
        with LinkSession(loader=load_links) as session:
            outcome = _wait(session, url)
    except InvalidUrlError as exc:
        raise _invalid_url(exc) from exc
    finally:
        close_client()

    if outcome.cancelled:
        typer.echo("Cancelled.", err=True)
        raise typer.Exit(code=130)
    if outcome.error is not None:
        typer.echo(render_error(outcome.error), err=True)
        raise typer.Exit(code=1)

    page = outcome.page
    if page is None:
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(render_json(page, include_html=html))
    else:
        if html:
            typer.echo(page.html)
            typer.echo("")
        if page.links:
            typer.echo(render_links(page.links, numbered=open_index is not None))
        typer.echo(render_status(page), err=True)

    if open_index is not None:
        if open_index > len(page.links):
            typer.echo(f"No link #{open_index}; the page has {len(page.links)}.", err=True)
            raise typer.Exit(code=1)
        typer.launch(page.links[open_index - 1])


@app.command("normalize")
def normalize_cmd(
    raw: str = typer.Argument(..., help="Address as a user would type it."),
) -> None:
    """Print the absolute URL an address resolves to."""
    try:
        target = normalize_input(raw)
    except InvalidUrlError as exc:
        raise _invalid_url(exc) from exc
    typer.echo(target.url)


@app.command("extract")
def extract_cmd(
    path: str = typer.Argument(..., help="HTML file to scan, or '-' for stdin."),
    base: str = typer.Option(..., "--base", help="URL the document was served from."),
) -> None:
    """List the links in a local HTML document without fetching anything."""
    try:
        target = normalize_input(base)
    except InvalidUrlError as exc:
        raise _invalid_url(exc) from exc

    if path == "-":
        text = sys.stdin.read()
    else:
        file_path = Path(path)
        if not file_path.is_file():
            typer.echo(f"File not found: {path}", err=True)
            raise typer.Exit(code=1)
        text = file_path.read_text(encoding="utf-8", errors="replace")

    found = extract(text, target)
    if found:
        typer.echo(render_links(found))
    typer.echo(f"Done: {len(found)} links found.", err=True)


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
) -> None:
    """Run the HTTP API under uvicorn."""
    import uvicorn  # noqa: PLC0415

    uvicorn.run("linkparser.api.app:app", host=host, port=port)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
