"""Keeps the snapshot store warm for a fixed list of expensive aggregate views.

Inbound reads go through `CachePrimer.read`, which serves the snapshot when one
exists. A refresh marks its path "bypass once" before reading, so the read
recomputes the view instead of returning the snapshot it is about to replace.
The flag is cleared by the very next read of that path, whoever performs it.
"""

from __future__ import annotations

import json
import threading
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .cache import SnapshotStore
from .config import DEFAULT_REFRESH_SEC, PRIMED_RESOURCES
from .errors import NotFoundError, Result

View = Callable[[], Result]


class CachePrimer:
    """Read-through access to the snapshot store plus scheduled refreshes."""

    def __init__(
        self,
        store: SnapshotStore,
        resources: Iterable[Tuple[str, Optional[float]]] = PRIMED_RESOURCES,
        default_interval: float = DEFAULT_REFRESH_SEC,
    ) -> None:
        self.store = store
        self.resources: List[Tuple[str, float]] = [
            (path, interval or default_interval) for path, interval in resources
        ]
        self._views: Dict[str, View] = {}
        self._overrides: Set[str] = set()
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    def register(self, path: str, view: View) -> None:
        self._views[path] = view

    def bypass_once(self, path: str) -> None:
        with self._lock:
            self._overrides.add(path)

    def _consume_bypass(self, path: str) -> bool:
        with self._lock:
            if path in self._overrides:
                self._overrides.discard(path)
                return True
            return False

    def compute(self, path: str) -> Result:
        view = self._views.get(path)
        if view is None:
            return Result(error=NotFoundError(f"no view registered for {path}"))
        return view()

    def read(self, path: str) -> Result:
        if self._consume_bypass(path):
            return self.compute(path)
        snapshot = self.store.read(path)
        if snapshot is not None:
            return Result(value=snapshot)
        return self.compute(path)

    def refresh(self, path: str) -> bool:
        """Recompute `path` and store it; on failure the previous snapshot stays."""
        self.bypass_once(path)
        err, value = self.read(path)
        if err is not None:
            print(f"[error] updating cache entry for {path}: {err}")
            return False
        try:
            snapshot = json.loads(json.dumps(value))
        except (TypeError, ValueError) as exc:
            print(f"[error] updating cache entry for {path}: not JSON serializable ({exc})")
            return False
        self.store.write(path, snapshot)
        print(f"[cache] refreshed {path}")
        return True

    def refresh_all(self) -> int:
        return sum(1 for path, _ in self.resources if self.refresh(path))

    def start(self) -> None:
        """Refresh every resource now, then keep refreshing on daemon timers."""
        self._stopped.clear()
        for path, interval in self.resources:
            self.refresh(path)
            self._arm(path, interval)

    def _arm(self, path: str, interval: float) -> None:
        if self._stopped.is_set():
            return
        timer = threading.Timer(interval, self._tick, args=(path, interval))
        timer.daemon = True
        timer.name = f"primer:{path}"
        with self._lock:
            self._timers[path] = timer
        timer.start()

    def _tick(self, path: str, interval: float) -> None:
        try:
            self.refresh(path)
        finally:
            self._arm(path, interval)

    def stop(self) -> None:
        self._stopped.set()
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()


__all__ = ["CachePrimer", "View"]
