"""Remote fetch client for the article search endpoint."""

from __future__ import annotations

from typing import Dict, List, Optional

import requests
from pydantic import ValidationError

from .config import Settings
from .errors import ConfigError, NetworkError, ParseError
from .logging_config import get_logger
from .models import Article, SearchNewsResponse

logger = get_logger("article_search.client")

_DEFAULT_HEADERS: Dict[str, str] = {
    "Accept": "application/json",
    "User-Agent": "article-search/0.1 (+requests)",
}


def parse_search_response(body: str | bytes) -> List[Article]:
    """Decode a search response body into remote articles.

    Unknown keys are ignored and missing article fields stay ``None``. A body
    that is not JSON, or has no ``response.docs`` list, raises ParseError.
    """
    try:
        parsed = SearchNewsResponse.model_validate_json(body)
    except ValidationError as exc:
        raise ParseError(f"Undecodable search response: {exc.errors()[0]['msg']}") from exc
    docs = parsed.docs
    if docs is None:
        raise ParseError("Search response has no response.docs list.")
    return docs


class SearchClient:
    """Issues the single GET that backs a refresh."""

    def __init__(
        self,
        api_key: str,
        url: str,
        *,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ConfigError("SEARCH_API_KEY is required. Set it in the environment or .env file.")
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(_DEFAULT_HEADERS)

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[requests.Session] = None
    ) -> "SearchClient":
        return cls(
            settings.search_api_key or "",
            settings.search_url,
            timeout=settings.search_timeout,
            session=session,
        )

    def fetch_articles(self) -> List[Article]:
        logger.info("Fetching articles from %s", self.url)
        try:
            resp = self.session.get(
                self.url, params={"api-key": self.api_key}, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning("Search request error for %s: %s", self.url, type(exc).__name__)
            raise NetworkError(f"Search request failed: {type(exc).__name__}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("Search fetch failed (%s): %s", resp.status_code, self.url)
            raise NetworkError(
                f"Search request returned HTTP {resp.status_code}", status_code=resp.status_code
            )

        articles = parse_search_response(resp.content)
        logger.info("Fetched %d articles", len(articles))
        return articles
