"""Data models for the article search app.

Three shapes of the same article travel through the app:

- ``Article``: the remote form decoded from one search response.
- ``ArticleEntity``: the persisted record owned by the cache store.
- ``DisplayArticle``: the view form rendered by the display list.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

NYT_BASE_URL = "https://www.nytimes.com/"


class _Lenient(BaseModel):
    """Unknown keys are ignored so API additions never break decoding."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class HeadLine(_Lenient):
    main: Optional[str] = None


class Byline(_Lenient):
    original: Optional[str] = None


def _resolve_media_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        return url
    return NYT_BASE_URL + url.lstrip("/")


def media_image_url(multimedia: Any) -> Optional[str]:
    """
    Pick the image URL from a doc's ``multimedia`` field.

    Older responses carry a list of media objects with relative URLs; newer
    ones carry an object with ``default`` and ``thumbnail`` renditions.
    """
    if isinstance(multimedia, list):
        for media in multimedia:
            if isinstance(media, dict) and media.get("url"):
                return _resolve_media_url(str(media["url"]))
        return None
    if isinstance(multimedia, dict):
        for key in ("default", "thumbnail"):
            rendition = multimedia.get(key)
            if isinstance(rendition, dict) and rendition.get("url"):
                return _resolve_media_url(str(rendition["url"]))
    return None


class Article(_Lenient):
    """One search result doc in its remote form."""

    headline: Optional[HeadLine] = None
    abstract: Optional[str] = None
    byline: Optional[Byline] = None
    media_image_url: Optional[str] = Field(None, alias="mediaImageUrl")

    @model_validator(mode="before")
    @classmethod
    def _derive_media_image_url(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and not data.get("mediaImageUrl")
            and not data.get("media_image_url")
        ):
            data = dict(data)
            data["mediaImageUrl"] = media_image_url(data.get("multimedia"))
        return data

    @property
    def headline_main(self) -> Optional[str]:
        return self.headline.main if self.headline else None

    @property
    def byline_original(self) -> Optional[str]:
        return self.byline.original if self.byline else None

    def to_entity(self) -> "ArticleEntity":
        return ArticleEntity(
            headline=self.headline_main,
            abstract=self.abstract,
            byline=self.byline_original,
            media_image_url=self.media_image_url,
        )

    def to_display(self) -> "DisplayArticle":
        return DisplayArticle(
            headline=self.headline_main,
            abstract=self.abstract,
            byline=self.byline_original,
            media_image_url=self.media_image_url,
        )


class SearchResponse(_Lenient):
    docs: Optional[List[Article]] = None


class SearchNewsResponse(_Lenient):
    """Top-level envelope of an article search response."""

    response: Optional[SearchResponse] = None

    @property
    def docs(self) -> Optional[List[Article]]:
        return self.response.docs if self.response else None


class ArticleEntity(BaseModel):
    """Persisted form of an article; one JSON line per record in the cache."""

    model_config = ConfigDict(frozen=True)

    headline: Optional[str] = None
    abstract: Optional[str] = None
    byline: Optional[str] = None
    media_image_url: Optional[str] = None

    def to_display(self) -> "DisplayArticle":
        return DisplayArticle(**self.model_dump())


class DisplayArticle(BaseModel):
    """View form bound to the display list."""

    model_config = ConfigDict(frozen=True)

    headline: Optional[str] = None
    abstract: Optional[str] = None
    byline: Optional[str] = None
    media_image_url: Optional[str] = None
