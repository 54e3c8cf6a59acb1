"""JSONL-backed article cache and the user preference file.

The article store is observable: subscribers receive the full record set as
soon as they subscribe and again after every change. Writes go through the
process-local path lock and are atomic at the file level.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from pydantic import ValidationError

from .errors import StorageError
from .file_lock import atomic_write_text, locked_path
from .logging_config import get_logger
from .models import ArticleEntity
from .schema import validate_records

logger = get_logger("article_search.store")

ARTICLES_FILENAME = "articles.jsonl"
PREFERENCES_NAME = "userPreferences"
CACHE_DATA_KEY = "CACHE_DATA"

Observer = Callable[[List[ArticleEntity]], None]


def articles_path(data_dir: Path) -> Path:
    return data_dir / ARTICLES_FILENAME


def preferences_path(data_dir: Path) -> Path:
    return data_dir / f"{PREFERENCES_NAME}.json"


class ArticleStore:
    """Cached article records, one JSON object per line, in insertion order."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._observers: List[Observer] = []
        self._observers_guard = Lock()
        self._staged: Optional[List[ArticleEntity]] = None

    # --- reads -------------------------------------------------------------

    def _read_unlocked(self) -> List[ArticleEntity]:
        if not self.path.exists():
            return []
        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise StorageError(f"Failed to read cache {self.path}: {exc}") from exc
        entities: List[ArticleEntity] = []
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                entities.append(ArticleEntity.model_validate_json(line))
            except ValidationError as exc:
                logger.warning("Skipping unreadable cache line %d in %s: %s", number, self.path, exc)
        return entities

    def get_all(self) -> List[ArticleEntity]:
        with locked_path(self.path):
            return self._read_unlocked()

    # --- observation -------------------------------------------------------

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` and deliver the current set to it right away.

        Returns a callable that removes the subscription.
        """
        with self._observers_guard:
            self._observers.append(observer)
        observer(self.get_all())

        def unsubscribe() -> None:
            with self._observers_guard:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        with locked_path(self.path):
            snapshot = self._read_unlocked()
        with self._observers_guard:
            observers = list(self._observers)
        for observer in observers:
            observer(list(snapshot))

    # --- writes ------------------------------------------------------------

    def _write_unlocked(self, entities: Iterable[ArticleEntity]) -> None:
        records = [entity.model_dump() for entity in entities]
        try:
            validate_records(records)
        except ValueError as exc:
            raise StorageError(str(exc)) from exc
        text = "".join(json.dumps(record, ensure_ascii=False) + "\n" for record in records)
        try:
            atomic_write_text(self.path, text)
        except OSError as exc:
            raise StorageError(f"Failed to write cache {self.path}: {exc}") from exc

    def insert_all(self, entities: Iterable[ArticleEntity]) -> None:
        """Append a batch of records after the existing ones."""
        batch = list(entities)
        with locked_path(self.path):
            if self._staged is not None:
                self._staged.extend(batch)
                return
            self._write_unlocked(self._read_unlocked() + batch)
        logger.debug("Inserted %d cached articles", len(batch))
        self._notify()

    def delete_all(self) -> None:
        with locked_path(self.path):
            if self._staged is not None:
                self._staged = []
                return
            self._write_unlocked([])
        logger.debug("Deleted all cached articles")
        self._notify()

    @contextmanager
    def replacing(self) -> Iterator["ArticleStore"]:
        """Apply delete_all + insert_all as a single write and a single emission.

        Inside the block both calls only change a staged copy of the records.
        A clean exit writes the staged set once and notifies observers once;
        if the block raises, the staged set is dropped, the file is left as it
        was and nobody is notified.
        """
        with locked_path(self.path):
            if self._staged is not None:
                yield self
                return
            self._staged = self._read_unlocked()
            try:
                yield self
                self._write_unlocked(self._staged)
            finally:
                self._staged = None
        logger.debug("Replaced cached articles")
        self._notify()


class PreferenceStore:
    """A named JSON preference file holding simple key/value settings."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load_unlocked(self) -> Dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load preferences %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get_bool(self, key: str, default: bool) -> bool:
        with locked_path(self.path):
            value = self._load_unlocked().get(key, default)
        return value if isinstance(value, bool) else default

    def put_bool(self, key: str, value: bool) -> None:
        with locked_path(self.path):
            data = self._load_unlocked()
            data[key] = bool(value)
            try:
                atomic_write_text(self.path, json.dumps(data, indent=2, sort_keys=True))
            except OSError as exc:
                raise StorageError(f"Failed to write preferences {self.path}: {exc}") from exc
