"""Suppression of duplicate resolution requests.

CRM webhooks are delivered at least once, and a single edit can fire both
a creation and a property-change event. The deduplicator drops repeats of
the same subject inside a short window. It is an in-memory, per-process
guard, not a distributed lock.
"""

import threading
import time
from typing import Callable

from .config import get_settings
from .logging import get_context_logger

logger = get_context_logger(__name__)


def dedup_key(portal_id: str | int, subject_id: str | int) -> str:
    """Build the dedup key for a CRM object."""
    return f"{portal_id}:{subject_id}"


class RequestDeduplicator:
    """Remembers recently accepted keys.

    Args:
        window_seconds: How long an accepted key blocks repeats
            (default from settings)
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        window_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_seconds is None:
            window_seconds = get_settings().dedup_window_seconds
        self.window_seconds = window_seconds
        self._clock = clock
        self._markers: dict[str, float] = {}
        self._lock = threading.Lock()

    def should_process(self, key: str) -> bool:
        """Return True and mark the key, or False if it was seen recently.

        A rejected call does not refresh the marker, so the window is
        measured from the first accepted request.
        """
        with self._lock:
            now = self._clock()
            marked_at = self._markers.get(key)
            if marked_at is not None and now - marked_at < self.window_seconds:
                logger.info(
                    f"Skipping duplicate request {key}",
                    extra={"dedup_key": key, "age_seconds": now - marked_at},
                )
                return False

            self._prune(now)
            self._markers[key] = now
            return True

    def _prune(self, now: float) -> None:
        expired = [k for k, t in self._markers.items() if now - t >= self.window_seconds]
        for k in expired:
            del self._markers[k]

    def forget(self, key: str) -> None:
        with self._lock:
            self._markers.pop(key, None)

    def __len__(self) -> int:
        return len(self._markers)
