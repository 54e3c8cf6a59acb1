"""Sync controller keeping the display, the cache and remote results in step.

The controller is a single-threaded state actor. UI actions, connectivity
readings, store emissions and background results all arrive as messages on
one queue, and only the thread draining that queue mutates the view state.
Network and storage work runs on an executor and posts its outcome back as a
message.

Drain the queue either on the caller's thread (``process_pending`` /
``run_until``) or on a dedicated actor thread (``start`` / ``stop``), never
both at once.
"""

from __future__ import annotations

import dataclasses
import queue
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .errors import ArticleSearchError, StorageError
from .events import (
    CacheCleared,
    CacheToggled,
    ClearCacheRequested,
    ClearFailed,
    ConnectivityChanged,
    Event,
    FetchFailed,
    FetchSucceeded,
    RefreshRequested,
    Shutdown,
    StoreChanged,
)
from .logging_config import get_logger
from .models import Article, DisplayArticle
from .store import CACHE_DATA_KEY, ArticleStore, PreferenceStore

logger = get_logger("article_search.controller")

OFFLINE_NOTICE = "You are offline"

FetchFn = Callable[[], List[Article]]
StateCallback = Callable[["ViewState"], None]


class SyncStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    CACHED = "cached"


@dataclass(frozen=True)
class ViewState:
    """Immutable snapshot handed to the rendering layer."""

    articles: Tuple[DisplayArticle, ...] = ()
    status: SyncStatus = SyncStatus.IDLE
    refreshing: bool = False
    connected: bool = True
    offline: bool = False
    cache_enabled: bool = True
    notice: Optional[str] = None


class InlineExecutor(Executor):
    """Runs submitted work immediately on the submitting thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:
            future.set_exception(exc)
        return future


class SyncController:
    def __init__(
        self,
        store: ArticleStore,
        fetch: FetchFn,
        preferences: PreferenceStore,
        *,
        executor: Optional[Executor] = None,
    ) -> None:
        self.store = store
        self.preferences = preferences
        self._fetch = fetch
        self._events: "queue.Queue[Event]" = queue.Queue()
        self._state = ViewState(
            cache_enabled=preferences.get_bool(CACHE_DATA_KEY, True)
        )
        self._subscribers: List[StateCallback] = []
        self._subscribers_guard = threading.Lock()
        self._opened = False
        self._unsubscribe_store: Optional[Callable[[], None]] = None
        self._actor: Optional[threading.Thread] = None
        self._owns_executor = executor is None
        # One worker keeps fetch/store/clear jobs strictly sequential
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="article-io"
        )

    # --- Public surface -----------------------------------------------------

    @property
    def state(self) -> ViewState:
        return self._state

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """Receive every new snapshot; returns an unsubscribe callable."""
        with self._subscribers_guard:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._subscribers_guard:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def post(self, event: Event) -> None:
        self._events.put(event)

    def request_refresh(self) -> None:
        self.post(RefreshRequested())

    def clear_cache(self) -> None:
        self.post(ClearCacheRequested())

    def set_cache_enabled(self, enabled: bool) -> None:
        self.post(CacheToggled(enabled))

    def on_connectivity_change(self, connected: bool) -> None:
        """Callback for ConnectivityMonitor; safe to call from any thread."""
        self.post(ConnectivityChanged(connected))

    def open(self) -> None:
        """Begin mirroring the cache: the store's live stream feeds the queue."""
        if self._opened:
            return
        self._opened = True
        self._executor.submit(self._attach_store)

    def process_pending(self) -> int:
        """Handle every queued event on the calling thread; returns the count."""
        handled = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return handled
            self._handle(event)
            handled += 1

    def run_until(
        self, predicate: Callable[[ViewState], bool], timeout: float = 30.0
    ) -> bool:
        """Handle events until ``predicate(state)`` holds or ``timeout`` passes."""
        deadline = time.monotonic() + timeout
        while not predicate(self._state):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            try:
                event = self._events.get(timeout=remaining)
            except queue.Empty:
                return False
            self._handle(event)
        return True

    def start(self) -> None:
        """Open the store stream and handle events on a dedicated actor thread."""
        if self._actor and self._actor.is_alive():
            return
        self.open()
        self._actor = threading.Thread(target=self._run, name="sync-actor", daemon=True)
        self._actor.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        if self._actor:
            self.post(Shutdown())
            self._actor.join(timeout)
            self._actor = None
        self.close()

    def close(self) -> None:
        self._opened = False
        if self._unsubscribe_store:
            self._unsubscribe_store()
            self._unsubscribe_store = None
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # --- Actor loop ---------------------------------------------------------

    def _run(self) -> None:
        while True:
            event = self._events.get()
            if isinstance(event, Shutdown):
                return
            try:
                self._handle(event)
            except Exception:
                logger.exception("Failed to handle %s", type(event).__name__)

    def _set_state(self, **changes) -> None:
        new_state = dataclasses.replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        with self._subscribers_guard:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(new_state)

    def _handle(self, event: Event) -> None:
        if isinstance(event, StoreChanged):
            self._on_store_changed(event)
        elif isinstance(event, RefreshRequested):
            self._on_refresh_requested(event)
        elif isinstance(event, FetchSucceeded):
            self._set_state(
                articles=event.articles,
                status=SyncStatus.CACHED,
                refreshing=False,
            )
        elif isinstance(event, FetchFailed):
            logger.error("Failed to fetch articles: %s", event.error)
            self._set_state(status=SyncStatus.CACHED, refreshing=False)
        elif isinstance(event, ClearCacheRequested):
            self._executor.submit(self._clear_job)
        elif isinstance(event, CacheCleared):
            logger.info("Cache cleared successfully")
            if self._state.refreshing:
                self._set_state(articles=())
            else:
                self._set_state(articles=(), status=SyncStatus.CACHED)
        elif isinstance(event, ClearFailed):
            logger.error("Failed to clear cache: %s", event.error)
        elif isinstance(event, CacheToggled):
            self._set_state(cache_enabled=event.enabled)
            self._executor.submit(self._save_cache_preference, event.enabled)
        elif isinstance(event, ConnectivityChanged):
            self._on_connectivity_changed(event)
        elif isinstance(event, Shutdown):
            pass
        else:
            raise TypeError(f"Unknown event: {event!r}")

    def _on_store_changed(self, event: StoreChanged) -> None:
        articles = tuple(entity.to_display() for entity in event.entities)
        if self._state.status is SyncStatus.FETCHING:
            self._set_state(articles=articles)
        else:
            self._set_state(articles=articles, status=SyncStatus.CACHED)

    def _on_refresh_requested(self, event: RefreshRequested) -> None:
        if not self._state.connected:
            logger.info("Refresh (%s) suppressed while offline", event.trigger)
            return
        if self._state.refreshing:
            logger.info("Refresh (%s) ignored; a fetch is already in flight", event.trigger)
            return
        self._set_state(status=SyncStatus.FETCHING, refreshing=True)
        self._executor.submit(self._fetch_job)

    def _on_connectivity_changed(self, event: ConnectivityChanged) -> None:
        if event.connected:
            self._set_state(connected=True, offline=False, notice=None)
            self._on_refresh_requested(RefreshRequested(trigger="connectivity"))
        else:
            self._set_state(connected=False, offline=True, notice=OFFLINE_NOTICE)

    # --- Background jobs ----------------------------------------------------

    def _attach_store(self) -> None:
        try:
            self._unsubscribe_store = self.store.subscribe(
                lambda entities: self.post(StoreChanged(tuple(entities)))
            )
        except StorageError as exc:
            logger.error("Failed to observe cache: %s", exc)

    def _fetch_job(self) -> None:
        try:
            articles = self._fetch()
            with self.store.replacing():
                self.store.delete_all()
                self.store.insert_all(article.to_entity() for article in articles)
        except ArticleSearchError as exc:
            self.post(FetchFailed(exc))
            return
        except Exception as exc:
            logger.exception("Unexpected error while refreshing articles")
            self.post(FetchFailed(exc))
            return
        self.post(FetchSucceeded(tuple(article.to_display() for article in articles)))

    def _clear_job(self) -> None:
        try:
            self.store.delete_all()
        except StorageError as exc:
            self.post(ClearFailed(exc))
            return
        self.post(CacheCleared())

    def _save_cache_preference(self, enabled: bool) -> None:
        try:
            self.preferences.put_bool(CACHE_DATA_KEY, enabled)
        except StorageError as exc:
            logger.error("Failed to save cache preference: %s", exc)


def build_fetch(settings, session=None) -> FetchFn:
    """Fetch function that creates the search client on first use.

    A missing API key surfaces as a failed fetch rather than a startup error,
    so cached articles stay browsable without one.
    """
    from .client import SearchClient

    client: Optional[SearchClient] = None

    def fetch() -> List[Article]:
        nonlocal client
        if client is None:
            client = SearchClient.from_settings(settings, session=session)
        return client.fetch_articles()

    return fetch


def build_controller(settings, *, executor: Optional[Executor] = None) -> SyncController:
    """Wire a controller to the cache files under the configured data dir."""
    from .store import articles_path, preferences_path

    data_dir = settings.resolved_data_dir()
    return SyncController(
        ArticleStore(articles_path(data_dir)),
        build_fetch(settings),
        PreferenceStore(preferences_path(data_dir)),
        executor=executor,
    )
