from rich.console import Console

from article_search.controller import OFFLINE_NOTICE, SyncStatus, ViewState
from article_search.display import ArticleListView, render_state, status_line
from article_search.models import DisplayArticle


def render_text(state: ViewState) -> str:
    console = Console(record=True, width=160, color_system=None)
    console.print(render_state(state))
    return console.export_text()


def test_render_lists_articles_in_order_with_placeholders():
    state = ViewState(
        articles=(
            DisplayArticle(headline="First story", byline="By A", abstract="One"),
            DisplayArticle(headline="Second story"),
        ),
        status=SyncStatus.CACHED,
    )

    text = render_text(state)

    assert text.index("First story") < text.index("Second story")
    assert "By A" in text
    assert "2 article(s)" in text
    assert OFFLINE_NOTICE not in text


def test_offline_banner_shown_only_when_offline():
    state = ViewState(offline=True, connected=False, notice=OFFLINE_NOTICE, status=SyncStatus.CACHED)

    text = render_text(state)

    assert OFFLINE_NOTICE in text
    assert "No articles cached." in text


def test_status_line_reports_refreshing_and_cache_preference():
    assert status_line(ViewState(refreshing=True)).plain == "Refreshing..."
    assert "cache data: off" in status_line(ViewState(status=SyncStatus.CACHED, cache_enabled=False)).plain


def test_view_redraws_fully_on_every_render():
    console = Console(record=True, width=120, color_system=None)
    view = ArticleListView(console, clear=False)

    view.render(ViewState(articles=(DisplayArticle(headline="Old"),), status=SyncStatus.CACHED))
    view.render(ViewState(articles=(DisplayArticle(headline="New"),), status=SyncStatus.CACHED))

    assert view.renders == 2
    text = console.export_text()
    assert text.count("Articles") == 2
    assert "New" in text
