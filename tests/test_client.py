import pytest
import requests

from article_search.client import SearchClient, parse_search_response
from article_search.config import Settings
from article_search.errors import ConfigError, FetchError, NetworkError, ParseError

from conftest import FakeResponse, FakeSession, search_body

URL = "https://api.example.com/svc/search/v2/articlesearch.json"


def make_client(session) -> SearchClient:
    return SearchClient("test-key", URL, timeout=5, session=session)


def test_fetch_articles_parses_docs_in_response_order():
    session = FakeSession(FakeResponse(200, search_body(2)))

    articles = make_client(session).fetch_articles()

    assert [a.headline_main for a in articles] == ["Headline 1", "Headline 2"]
    assert articles[1].byline_original == "By Reporter 2"
    assert articles[0].media_image_url == "https://www.nytimes.com/images/2024/01/01/photo.jpg"


def test_fetch_articles_sends_api_key_and_timeout():
    session = FakeSession(FakeResponse(200, search_body(0)))

    make_client(session).fetch_articles()

    call = session.calls[0]
    assert call["url"] == URL
    assert call["params"] == {"api-key": "test-key"}
    assert call["timeout"] == 5


def test_non_2xx_status_raises_network_error():
    session = FakeSession(FakeResponse(429, '{"fault": "rate limited"}'))

    with pytest.raises(NetworkError) as excinfo:
        make_client(session).fetch_articles()

    assert excinfo.value.status_code == 429


def test_transport_failure_raises_fetch_error():
    session = FakeSession(requests.Timeout("read timed out"))

    with pytest.raises(FetchError):
        make_client(session).fetch_articles()


def test_malformed_json_raises_parse_error():
    session = FakeSession(FakeResponse(200, "{not json"))

    with pytest.raises(ParseError):
        make_client(session).fetch_articles()


def test_parse_rejects_body_without_docs():
    with pytest.raises(ParseError):
        parse_search_response('{"status": "OK", "response": {"meta": {}}}')
    with pytest.raises(ParseError):
        parse_search_response("[1, 2, 3]")


def test_parse_accepts_docs_with_missing_fields():
    articles = parse_search_response('{"response": {"docs": [{}, {"abstract": "only"}]}}')

    assert len(articles) == 2
    assert articles[0].headline_main is None
    assert articles[1].abstract == "only"


def test_missing_api_key_is_a_config_error():
    settings = Settings(SEARCH_API_KEY=None)

    with pytest.raises(ConfigError):
        SearchClient.from_settings(settings, session=FakeSession())


def test_from_settings_uses_search_host():
    settings = Settings(SEARCH_API_KEY="k", SEARCH_HOST="search.example.org", SEARCH_TIMEOUT=7)
    client = SearchClient.from_settings(settings, session=FakeSession())

    assert client.url == "https://search.example.org/svc/search/v2/articlesearch.json"
    assert client.timeout == 7
