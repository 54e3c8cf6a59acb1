"""Messages delivered to the sync controller's event queue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .models import ArticleEntity, DisplayArticle


# --- Inputs from the UI and the connectivity monitor ----------------------

@dataclass(frozen=True)
class RefreshRequested:
    trigger: str = "manual"


@dataclass(frozen=True)
class ClearCacheRequested:
    pass


@dataclass(frozen=True)
class CacheToggled:
    enabled: bool


@dataclass(frozen=True)
class ConnectivityChanged:
    connected: bool


# --- Results posted back by the store and background jobs -----------------

@dataclass(frozen=True)
class StoreChanged:
    entities: Tuple[ArticleEntity, ...]


@dataclass(frozen=True)
class FetchSucceeded:
    articles: Tuple[DisplayArticle, ...]


@dataclass(frozen=True)
class FetchFailed:
    error: Exception


@dataclass(frozen=True)
class CacheCleared:
    pass


@dataclass(frozen=True)
class ClearFailed:
    error: Exception


@dataclass(frozen=True)
class Shutdown:
    pass


Event = Union[
    RefreshRequested,
    ClearCacheRequested,
    CacheToggled,
    ConnectivityChanged,
    StoreChanged,
    FetchSucceeded,
    FetchFailed,
    CacheCleared,
    ClearFailed,
    Shutdown,
]
