"""Rich rendering of the article list and its status banners."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .controller import SyncStatus, ViewState
from .models import DisplayArticle

_PLACEHOLDER = "-"


def build_table(articles: Iterable[DisplayArticle]) -> Table:
    """One row per article, in the order given."""
    table = Table(show_lines=True, expand=True, title="Articles")
    table.add_column("#", justify="right", style="dim", no_wrap=True)
    table.add_column("Headline", style="bold", ratio=3)
    table.add_column("Byline", style="cyan", ratio=2)
    table.add_column("Abstract", ratio=5)
    table.add_column("Image", style="blue", overflow="fold", ratio=2)
    for index, article in enumerate(articles, start=1):
        table.add_row(
            str(index),
            article.headline or _PLACEHOLDER,
            article.byline or _PLACEHOLDER,
            article.abstract or _PLACEHOLDER,
            article.media_image_url or _PLACEHOLDER,
        )
    return table


def status_line(state: ViewState) -> Text:
    if state.refreshing:
        return Text("Refreshing...", style="yellow")
    cache = "on" if state.cache_enabled else "off"
    label = {
        SyncStatus.IDLE: "Loading cache",
        SyncStatus.FETCHING: "Fetching",
        SyncStatus.CACHED: f"{len(state.articles)} article(s)",
    }[state.status]
    return Text(f"{label} | cache data: {cache}", style="dim")


def render_state(state: ViewState) -> RenderableType:
    """Full view for one snapshot: offline banner, status line, article table."""
    parts: list[RenderableType] = []
    if state.offline:
        parts.append(Panel(Text(state.notice or "You are offline", style="bold white"), style="red"))
    parts.append(status_line(state))
    if state.articles:
        parts.append(build_table(state.articles))
    else:
        parts.append(Text("No articles cached.", style="dim italic"))
    return Group(*parts)


class ArticleListView:
    """Redraws the whole view on every state change; no diffing."""

    def __init__(self, console: Optional[Console] = None, *, clear: bool = True) -> None:
        self.console = console or Console()
        self.clear = clear
        self.renders = 0

    def render(self, state: ViewState) -> None:
        if self.clear:
            self.console.clear()
        self.console.print(render_state(state))
        self.renders += 1

    def show_paged(self, state: ViewState) -> None:
        """Print through the console pager so long lists scroll."""
        with self.console.pager(styles=True):
            self.console.print(render_state(state))
