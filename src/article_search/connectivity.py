"""Connectivity monitor that reports connected/disconnected transitions.

A background thread runs a probe on a fixed interval. The first reading is
always reported; later readings only when they differ from the last one.
"""

from __future__ import annotations

import socket
import threading
from typing import Callable, Optional

from .logging_config import get_logger

logger = get_logger("article_search.connectivity")

Probe = Callable[[], bool]
ChangeCallback = Callable[[bool], None]


def tcp_probe(host: str, port: int = 443, timeout: float = 3.0) -> Probe:
    """Build a probe that succeeds when a TCP connection to host:port opens."""

    def probe() -> bool:
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError as exc:
            logger.debug("Connectivity probe to %s:%s failed: %s", host, port, exc)
            return False

    return probe


class ConnectivityMonitor:
    def __init__(
        self,
        on_change: ChangeCallback,
        probe: Probe,
        *,
        interval: float = 5.0,
    ) -> None:
        self._on_change = on_change
        self._probe = probe
        self.interval = interval
        self._last: Optional[bool] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._check_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings, on_change: ChangeCallback) -> "ConnectivityMonitor":
        """Probe the search host itself at the configured interval."""
        probe = tcp_probe(settings.search_host, timeout=settings.connectivity_timeout)
        return cls(on_change, probe, interval=settings.connectivity_interval)

    @property
    def connected(self) -> Optional[bool]:
        """Last reported state, or None before the first probe."""
        return self._last

    def _read(self) -> bool:
        try:
            return bool(self._probe())
        except Exception as exc:  # a broken probe reads as offline
            logger.debug("Connectivity probe raised %s", exc)
            return False

    def check_now(self) -> bool:
        """Probe once and report the result if it changed."""
        with self._check_lock:
            connected = self._read()
            if connected == self._last:
                return connected
            self._last = connected
        logger.info("Connectivity changed: %s", "online" if connected else "offline")
        self._on_change(connected)
        return connected

    def _run(self) -> None:
        while not self._stop.is_set():
            self.check_now()
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="connectivity-monitor", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Unregister: stop polling and wait for the probe thread to exit."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self) -> "ConnectivityMonitor":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
