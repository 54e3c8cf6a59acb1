"""Process-local path locks and atomic writes for the cache files."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from threading import Lock, RLock
from typing import Iterator

_LOCKS: dict[str, RLock] = {}
_LOCKS_GUARD = Lock()


def _lock_for(path: Path) -> RLock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = RLock()
            _LOCKS[key] = lock
    return lock


@contextmanager
def locked_path(path: Path) -> Iterator[None]:
    """Serialize access to one path across every store instance in this process.

    The lock is reentrant so a grouped delete + insert can hold it throughout.
    """
    lock = _lock_for(path)
    with lock:
        yield


def atomic_write_text(path: Path, text: str) -> None:
    """Write via a sibling temp file so readers never see a half-written file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    os.replace(tmp_path, path)
