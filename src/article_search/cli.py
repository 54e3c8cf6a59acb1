"""Command-line entry points for browsing and refreshing the article cache."""

import os
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.text import Text

from .config import get_settings
from .connectivity import ConnectivityMonitor, tcp_probe
from .controller import InlineExecutor, SyncController, build_controller
from .display import ArticleListView
from .logging_config import configure_logging

app = typer.Typer(help="Fetch, cache and browse article search results.")

_WATCH_HELP = "[r] refresh  [c] clear cache  [t] toggle cache data  [q] quit"


def _one_shot_controller() -> SyncController:
    """Controller whose background work runs inline, already mirroring the cache."""
    controller = build_controller(get_settings(), executor=InlineExecutor())
    controller.open()
    controller.process_pending()
    return controller


@app.callback()
def setup(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override LOG_LEVEL for this run (e.g. DEBUG, WARNING).",
    ),
):
    """Configure logging before any command runs."""
    configure_logging(level=log_level.upper() if log_level else None)


@app.command("list")
def list_command(
    pager: bool = typer.Option(True, "--pager/--no-pager", help="Scroll long lists in a pager."),
):
    """Show the cached articles without touching the network."""
    controller = _one_shot_controller()
    view = ArticleListView(clear=False)
    if pager:
        view.show_paged(controller.state)
    else:
        view.render(controller.state)


@app.command("refresh")
def refresh_command(
    probe: bool = typer.Option(
        True,
        "--probe/--no-probe",
        help="Check connectivity first; --no-probe assumes the network is up.",
    ),
):
    """
    Fetch the latest search results, replace the cache with them, and show them.

    Offline runs leave the cache untouched and exit with status 1.
    """
    settings = get_settings()
    controller = build_controller(settings, executor=InlineExecutor())
    controller.open()
    if probe:
        connected = tcp_probe(settings.search_host, timeout=settings.connectivity_timeout)()
        # A connectivity-restored event carries the automatic refresh with it
        controller.on_connectivity_change(connected)
    else:
        controller.request_refresh()
    controller.process_pending()

    ArticleListView(clear=False).render(controller.state)
    if controller.state.offline:
        raise typer.Exit(code=1)


@app.command("clear-cache")
def clear_cache_command():
    """Delete every cached article."""
    controller = _one_shot_controller()
    controller.clear_cache()
    controller.process_pending()
    rprint("[green]Cache cleared.[/green]")


@app.command("cache")
def cache_command(
    value: Optional[str] = typer.Argument(
        None, help="'on' or 'off' to set the cache data preference; omit to show it."
    ),
):
    """Show or set the cache data preference."""
    controller = _one_shot_controller()
    if value is not None:
        normalized = value.lower()
        if normalized not in {"on", "off"}:
            raise typer.BadParameter("value must be 'on' or 'off'.")
        controller.set_cache_enabled(normalized == "on")
        controller.process_pending()
    state = "on" if controller.state.cache_enabled else "off"
    rprint(f"[cyan]Cache data: {state}[/cyan]")


@app.command("watch")
def watch_command():
    """
    Interactive view: refreshes when connectivity returns and on request.

    The list is redrawn on every change; keys are read line by line.
    """
    settings = get_settings()
    console = Console()
    controller = build_controller(settings)
    view = ArticleListView(console)

    def redraw(state):
        view.render(state)
        console.print(Text(_WATCH_HELP, style="dim"))

    controller.subscribe(redraw)
    monitor = ConnectivityMonitor.from_settings(settings, controller.on_connectivity_change)
    controller.start()
    monitor.start()
    try:
        while True:
            try:
                key = console.input().strip().lower()
            except EOFError:
                break
            if key == "q":
                break
            if key == "r":
                controller.request_refresh()
            elif key == "c":
                controller.clear_cache()
            elif key == "t":
                controller.set_cache_enabled(not controller.state.cache_enabled)
    except KeyboardInterrupt:
        pass
    finally:
        monitor.stop()
        controller.stop()


@app.command("serve")
def serve_command(
    host: str = typer.Option(os.getenv("ARTICLE_SEARCH_HOST", "127.0.0.1"), help="Bind address."),
    port: int = typer.Option(int(os.getenv("ARTICLE_SEARCH_PORT", "8000")), help="Bind port."),
):
    """Run the HTTP surface with uvicorn."""
    import uvicorn

    uvicorn.run("article_search.server:app", host=host, port=port)


def main():
    app()


if __name__ == "__main__":
    main()
