import json

import pytest
from typer.testing import CliRunner

from article_search.cli import app
from article_search.client import SearchClient, parse_search_response
from article_search.models import ArticleEntity
from article_search.store import ArticleStore

from conftest import search_body

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("ARTICLE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SEARCH_API_KEY", "test-key")
    monkeypatch.setenv("LOG_OUTPUT", "file")
    monkeypatch.setenv("LOG_FILE_PATH", str(tmp_path / "logs" / "cli.log"))
    return tmp_path / "data"


def test_list_shows_cached_articles(data_dir):
    ArticleStore(data_dir / "articles.jsonl").insert_all([ArticleEntity(headline="Cached story")])

    result = runner.invoke(app, ["list", "--no-pager"])

    assert result.exit_code == 0, result.output
    assert "Cached story" in result.output


def test_refresh_without_probe_replaces_cache(data_dir, monkeypatch):
    monkeypatch.setattr(
        SearchClient, "fetch_articles", lambda self: parse_search_response(search_body(2))
    )

    result = runner.invoke(app, ["refresh", "--no-probe"])

    assert result.exit_code == 0, result.output
    assert "Headline 1" in result.output
    lines = (data_dir / "articles.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["headline"] for line in lines] == ["Headline 1", "Headline 2"]


def test_refresh_offline_exits_nonzero_and_keeps_cache(data_dir, monkeypatch):
    ArticleStore(data_dir / "articles.jsonl").insert_all([ArticleEntity(headline="Stale")])
    monkeypatch.setattr("article_search.cli.tcp_probe", lambda *args, **kwargs: (lambda: False))

    def unexpected_fetch(self):
        raise AssertionError("no fetch while offline")

    monkeypatch.setattr(SearchClient, "fetch_articles", unexpected_fetch)

    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 1
    assert "You are offline" in result.output
    assert "Stale" in result.output


def test_clear_cache_command(data_dir):
    store = ArticleStore(data_dir / "articles.jsonl")
    store.insert_all([ArticleEntity(headline="Gone soon")])

    result = runner.invoke(app, ["clear-cache"])

    assert result.exit_code == 0, result.output
    assert "Cache cleared." in result.output
    assert store.get_all() == []


def test_cache_preference_show_and_set(data_dir):
    shown = runner.invoke(app, ["cache"])
    assert "Cache data: on" in shown.output

    updated = runner.invoke(app, ["cache", "off"])
    assert updated.exit_code == 0, updated.output
    assert "Cache data: off" in updated.output
    prefs = json.loads((data_dir / "userPreferences.json").read_text(encoding="utf-8"))
    assert prefs == {"CACHE_DATA": False}


def test_cache_preference_rejects_unknown_value(data_dir):
    result = runner.invoke(app, ["cache", "maybe"])

    assert result.exit_code != 0
