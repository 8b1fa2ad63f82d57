"""Human-readable progress notifications.

Listeners only observe; nothing in the pipeline reads the reporter back
except to expose the last message through the status endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    message: str
    completed: int | None = None
    total: int | None = None
    round_no: int | None = None

    @property
    def percent(self) -> int | None:
        if self.completed is None or not self.total:
            return None
        return round(self.completed * 100 / self.total)


Listener = Callable[[ProgressEvent], None]


class ProgressReporter:
    def __init__(self) -> None:
        self._lock = Lock()
        self._listeners: list[Listener] = []
        self._last: ProgressEvent | None = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""

        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    @property
    def last_message(self) -> str | None:
        return self._last.message if self._last else None

    def report(
        self,
        message: str,
        *,
        completed: int | None = None,
        total: int | None = None,
        round_no: int | None = None,
    ) -> None:
        event = ProgressEvent(message=message, completed=completed, total=total, round_no=round_no)
        with self._lock:
            self._last = event
            listeners = list(self._listeners)

        logger.info("%s", message)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Progress listener failed")
