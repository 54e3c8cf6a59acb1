import json
from pathlib import Path

import pytest
import requests

from article_search.controller import InlineExecutor, SyncController
from article_search.store import ArticleStore, PreferenceStore


def make_doc(index: int) -> dict:
    return {
        "headline": {"main": f"Headline {index}", "kicker": "ignored"},
        "abstract": f"Abstract {index}",
        "byline": {"original": f"By Reporter {index}", "person": []},
        "multimedia": [{"url": f"images/2024/01/0{index}/photo.jpg", "type": "image"}],
        "web_url": f"https://example.com/{index}",
    }


def search_body(count: int) -> str:
    return json.dumps(
        {
            "status": "OK",
            "copyright": "Copyright (c) The New York Times Company.",
            "response": {"docs": [make_doc(i) for i in range(1, count + 1)], "meta": {"hits": count}},
        }
    )


class FakeResponse:
    def __init__(self, status_code: int = 200, content: str | bytes = b""):
        self.status_code = status_code
        self.content = content.encode("utf-8") if isinstance(content, str) else content


class FakeSession:
    """Stands in for requests.Session; replays queued responses or errors."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class ScriptedFetch:
    """Fetch function returning (or raising) queued outcomes, counting calls."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def store(tmp_path: Path) -> ArticleStore:
    return ArticleStore(tmp_path / "articles.jsonl")


@pytest.fixture
def preferences(tmp_path: Path) -> PreferenceStore:
    return PreferenceStore(tmp_path / "userPreferences.json")


@pytest.fixture
def make_controller(store, preferences):
    def _make(fetch) -> SyncController:
        controller = SyncController(store, fetch, preferences, executor=InlineExecutor())
        controller.open()
        controller.process_pending()
        return controller

    return _make


@pytest.fixture
def connection_error():
    return requests.ConnectionError("network unreachable")
