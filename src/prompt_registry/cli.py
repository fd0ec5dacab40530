"""
Prompt Registry CLI - Command-line interface.

Create, inspect and serve prompts from the terminal.
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from prompt_registry.config import RegistrySettings
from prompt_registry.core.exceptions import PromptRegistryError, format_exception
from prompt_registry.core.models import PromptWithCurrentVersion
from prompt_registry.logging_setup import configure_logging
from prompt_registry.registry.storage import PromptStore

app = typer.Typer(
    name="prompt-registry",
    help="Prompt Registry - versioned prompt storage",
    no_args_is_help=True,
)
console = Console()

DB_OPTION_HELP = "Database path (default: PR_DATABASE_PATH or ./data/prompts.db)"


def _settings() -> RegistrySettings:
    try:
        return RegistrySettings.from_env()
    except PromptRegistryError as e:
        console.print(f"[red]{escape(format_exception(e))}[/red]")
        raise typer.Exit(1)


@contextmanager
def _open_store(db: Optional[str]) -> Iterator[PromptStore]:
    """Open the store for one command; registry errors exit with status 1."""
    settings = _settings()
    try:
        with PromptStore(db or settings.database_path, busy_timeout=settings.busy_timeout) as store:
            yield store
    except PromptRegistryError as e:
        console.print(f"[red]Error: {escape(format_exception(e))}[/red]")
        raise typer.Exit(1)


def _read_content(content: Optional[str], file: Optional[Path]) -> str:
    if (content is None) == (file is None):
        raise typer.BadParameter("provide exactly one of --content or --file")
    if file is not None:
        return file.read_text(encoding="utf-8")
    return content


def _print_prompt(result: PromptWithCurrentVersion, heading: str) -> None:
    version = result.current_version
    console.print(
        Panel.fit(
            f"[bold blue]{heading}[/bold blue]\n"
            f"Slug: {escape(result.slug)}\n"
            f"Title: {escape(result.title)}\n"
            f"Version: {version.version_number}\n"
            f"Updated: {result.updated_at}",
        )
    )
    console.print(escape(version.content), highlight=False)


@app.callback()
def main_callback(
    log_level: str = typer.Option("warning", "--log-level", help="Logging level"),
):
    """Prompt Registry command line."""
    configure_logging(level=log_level)


@app.command()
def create(
    title: str = typer.Argument(..., help="Prompt title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Content of version 1"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="Read content from file"
    ),
    slug: Optional[str] = typer.Option(None, "--slug", "-s", help="Explicit slug"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description"),
    db: Optional[str] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """Create a prompt with its first version."""
    text = _read_content(content, file)
    with _open_store(db) as store:
        result = store.create_prompt(title, text, slug=slug, description=description)
    _print_prompt(result, "Prompt created")


@app.command("add-version")
def add_version(
    slug: str = typer.Argument(..., help="Prompt slug"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Version content"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="Read content from file"
    ),
    db: Optional[str] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """Append a new version to a prompt."""
    text = _read_content(content, file)
    with _open_store(db) as store:
        result = store.create_version(slug, text)
    _print_prompt(result, "Version created")


@app.command()
def show(
    slug: str = typer.Argument(..., help="Prompt slug"),
    version: Optional[int] = typer.Option(None, "--version", "-v", help="Specific version"),
    db: Optional[str] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """Show a prompt's current version, or one specific version."""
    with _open_store(db) as store:
        if version is None:
            _print_prompt(store.get_prompt(slug), "Prompt")
            return
        entry = store.get_version(slug, version)

    console.print(
        Panel.fit(
            f"[bold blue]Prompt Version[/bold blue]\n"
            f"Slug: {escape(slug)}\n"
            f"Version: {entry.version_number}\n"
            f"Created: {entry.created_at}",
        )
    )
    console.print(escape(entry.content), highlight=False)


@app.command("list")
def list_cmd(
    limit: int = typer.Option(100, "--limit", "-n", min=0, help="Maximum prompts to show"),
    offset: int = typer.Option(0, "--offset", min=0, help="Prompts to skip"),
    db: Optional[str] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """List prompts, most recently created first."""
    with _open_store(db) as store:
        prompts = store.list_prompts(limit=limit, offset=offset)

    if not prompts:
        console.print("[yellow]No prompts found[/yellow]")
        return

    table = Table(title=f"Prompts ({len(prompts)})")
    table.add_column("Slug", style="cyan")
    table.add_column("Title")
    table.add_column("Version", justify="right", style="green")
    table.add_column("Created", style="dim")

    for prompt in prompts:
        table.add_row(
            escape(prompt.slug),
            escape(prompt.title),
            str(prompt.current_version),
            prompt.created_at[:19].replace("T", " "),
        )

    console.print(table)


@app.command()
def versions(
    slug: str = typer.Argument(..., help="Prompt slug"),
    db: Optional[str] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """List every version of a prompt."""
    with _open_store(db) as store:
        entries = store.list_versions(slug)

    table = Table(title=f"Versions of {escape(slug)} ({len(entries)})")
    table.add_column("Version", justify="right", style="green")
    table.add_column("Created", style="dim")
    table.add_column("Content")

    for entry in entries:
        preview = entry.content.splitlines()[0] if entry.content.strip() else ""
        if len(preview) > 60:
            preview = preview[:57] + "..."
        table.add_row(
            str(entry.version_number),
            entry.created_at[:19].replace("T", " "),
            escape(preview),
        )

    console.print(table)


@app.command()
def stats(
    db: Optional[str] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """Show prompt and version counts."""
    with _open_store(db) as store:
        result = store.get_stats()

    console.print(Panel.fit("[bold blue]Registry Statistics[/bold blue]"))
    console.print(f"Total prompts: {result.total_prompts}")
    console.print(f"Total versions: {result.total_prompt_versions}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: PR_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default: PR_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
    db: Optional[str] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """Run the HTTP API."""
    import uvicorn

    from prompt_registry.api.app import create_app

    settings = _settings()
    if db:
        settings.database_path = db
    if host:
        settings.host = host
    if port:
        settings.port = port

    configure_logging(level=settings.log_level, fmt=settings.log_format)
    console.print(
        Panel.fit(
            f"[bold blue]Prompt Registry[/bold blue]\n"
            f"Listening: http://{settings.host}:{settings.port}\n"
            f"Database: {escape(settings.database_path)}",
        )
    )

    if reload:
        # The reloader re-imports the factory in a child process, which
        # reads its settings from the environment.
        os.environ["PR_DATABASE_PATH"] = settings.database_path
        uvicorn.run(
            "prompt_registry.api.app:create_app",
            factory=True,
            host=settings.host,
            port=settings.port,
            reload=True,
            log_config=None,
        )
        return

    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


@app.command()
def version():
    """Show Prompt Registry version."""
    from prompt_registry import __version__

    console.print(f"Prompt Registry v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
