"""Command line interface for devhelp."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.table import Table

from devhelp.config import AppConfig
from devhelp.dispatch import HelpDispatcher
from devhelp.errors import DevHelpError
from devhelp.fallback import RscriptHelp
from devhelp.index.storage import SQLiteRegistryStore
from devhelp.models import RenderStage, parse_expression
from devhelp.render.engine import RscriptEngine
from devhelp.render.preview import preview_from_command
from devhelp.render.renderer import DevelopmentRenderer
from devhelp.render.viewer import ConsoleViewer
from devhelp.web.app import app as web_app


console = Console()
app = typer.Typer(help="devhelp - documentation for packages loaded in development mode")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


@contextmanager
def _registry(config: AppConfig) -> Iterator[SQLiteRegistryStore]:
    resolved_db = config.resolve_registry_path(Path.cwd())
    _ensure_db_parent(resolved_db)
    store = SQLiteRegistryStore(resolved_db)
    try:
        yield store
    finally:
        store.close()


def _build_dispatcher(config: AppConfig, store: SQLiteRegistryStore) -> HelpDispatcher:
    renderer = DevelopmentRenderer(
        RscriptEngine(config.rscript),
        preview=preview_from_command(config.preview_command),
        viewer=ConsoleViewer(console),
        config=config,
    )
    fallback = RscriptHelp(config.rscript, help_type=config.help_type)
    return HelpDispatcher(store, renderer, fallback, config=config)


def _fail(exc: Exception) -> None:
    console.print(str(exc), style="red", markup=False, highlight=False)
    raise typer.Exit(code=1)


@app.command()
def load(
    path: Path = typer.Argument(..., help="Package source directory.", resolve_path=True),
    db: Path = typer.Option(None, "--db", help="Registry database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Register a package source directory as loaded in development mode."""
    _setup_logging(verbose)
    try:
        with _registry(AppConfig(registry_path=db)) as store:
            name = store.load_package(path)
            topics = store.list_topics(name)
    except (ValueError, DevHelpError) as exc:
        _fail(exc)
    console.print(f"Loaded [bold]{name}[/bold] ({len(topics)} topics)")


@app.command()
def unload(
    name: str = typer.Argument(..., help="Package name."),
    db: Path = typer.Option(None, "--db", help="Registry database path"),
) -> None:
    """Forget a development package."""
    try:
        with _registry(AppConfig(registry_path=db)) as store:
            removed = store.unload_package(name)
    except DevHelpError as exc:
        _fail(exc)

    if removed:
        console.print(f"Unloaded [bold]{name}[/bold]")
    else:
        console.print(f"[yellow]{name} is not loaded in development mode.[/yellow]")


@app.command()
def packages(
    db: Path = typer.Option(None, "--db", help="Registry database path"),
) -> None:
    """List development packages in load order."""
    try:
        with _registry(AppConfig(registry_path=db)) as store:
            names = store.list_dev_packages()
            rows = [
                (name, str(store.package_path(name)), str(len(store.list_topics(name))))
                for name in names
            ]
    except DevHelpError as exc:
        _fail(exc)

    if not rows:
        console.print("[yellow]No development packages loaded.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#")
    table.add_column("Package")
    table.add_column("Path")
    table.add_column("Topics")
    for position, row in enumerate(rows, start=1):
        table.add_row(str(position), *row)
    console.print(table)


@app.command()
def topics(
    name: str = typer.Argument(..., help="Package name."),
    db: Path = typer.Option(None, "--db", help="Registry database path"),
) -> None:
    """List the topics documented by a development package."""
    try:
        with _registry(AppConfig(registry_path=db)) as store:
            found = store.list_topics(name)
    except DevHelpError as exc:
        _fail(exc)

    if not found:
        console.print(f"[yellow]No topics for {name}.[/yellow]")
        return
    for topic in found:
        console.print(topic, markup=False, highlight=False)


@app.command("help")
def help_(
    topic: str = typer.Argument(..., help="Topic name, or a quoted string."),
    package: Optional[str] = typer.Option(None, "--package", "-p", help="Package to search"),
    stage: RenderStage = typer.Option(RenderStage.RENDER, help="Stage at which \\Sexpr macros run"),
    help_type: Optional[str] = typer.Option(
        None, "--type", "-t", envvar="DEVHELP_HELP_TYPE", help="text or html"
    ),
    db: Path = typer.Option(None, "--db", help="Registry database path"),
    rscript: str = typer.Option("Rscript", help="Rscript executable"),
    preview: Optional[str] = typer.Option(None, help="Preview command taking an Rd path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show help for a topic, preferring development packages."""
    _setup_logging(verbose)
    config = AppConfig(
        registry_path=db, help_type=help_type, stage=stage, rscript=rscript, preview_command=preview
    )
    try:
        with _registry(config) as store:
            _build_dispatcher(config, store).help(
                parse_expression(topic), parse_expression(package) if package is not None else None
            )
    except DevHelpError as exc:
        _fail(exc)


@app.command()
def ask(
    e1: str = typer.Argument(..., help="Expression, e.g. foo, 'foo(1)' or '?foo'."),
    e2: Optional[str] = typer.Argument(None, help="Topic when E1 is a documentation type."),
    stage: RenderStage = typer.Option(RenderStage.RENDER, help="Stage at which \\Sexpr macros run"),
    help_type: Optional[str] = typer.Option(
        None, "--type", "-t", envvar="DEVHELP_HELP_TYPE", help="text or html"
    ),
    db: Path = typer.Option(None, "--db", help="Registry database path"),
    rscript: str = typer.Option("Rscript", help="Rscript executable"),
    preview: Optional[str] = typer.Option(None, help="Preview command taking an Rd path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """The ? operator: ask E1 looks up ?E1, ask '?E1' searches with ??E1."""
    _setup_logging(verbose)
    config = AppConfig(
        registry_path=db, help_type=help_type, stage=stage, rscript=rscript, preview_command=preview
    )
    try:
        with _registry(config) as store:
            _build_dispatcher(config, store).question(
                parse_expression(e1), parse_expression(e2) if e2 is not None else None
            )
    except DevHelpError as exc:
        _fail(exc)


@app.command("dev-help")
def dev_help(
    topic: str = typer.Argument(..., help="Topic name."),
    stage: RenderStage = typer.Option(RenderStage.RENDER, help="Stage at which \\Sexpr macros run"),
    help_type: Optional[str] = typer.Option(
        None, "--type", "-t", envvar="DEVHELP_HELP_TYPE", help="text or html"
    ),
    db: Path = typer.Option(None, "--db", help="Registry database path"),
    rscript: str = typer.Option("Rscript", help="Rscript executable"),
    preview: Optional[str] = typer.Option(None, help="Preview command taking an Rd path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show development help for a topic, without falling back to installed packages."""
    _setup_logging(verbose)
    config = AppConfig(
        registry_path=db, help_type=help_type, stage=stage, rscript=rscript, preview_command=preview
    )
    try:
        with _registry(config) as store:
            _build_dispatcher(config, store).dev_help(topic)
    except DevHelpError as exc:
        _fail(exc)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="Registry database path"),
) -> None:
    """Serve development help as HTML."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = AppConfig(registry_path=db)
    resolved_db = config.resolve_registry_path(Path.cwd())
    if not resolved_db.exists():
        console.print("[yellow]Warning: registry not found, no development packages loaded.[/yellow]")

    web_app.state.config = config
    console.print(f"Serving development help on http://{host}:{port} (registry: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
