"""Debounced autosave.

One timer per draft. Every ``touch`` cancels the pending timer and arms
a new one; only the last timer in a burst of edits ever fires. Saving is
best effort: a failing write is logged and editing carries on.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from blogdesk.editor.services import DraftStorage
    from blogdesk.editor.store import DraftStore

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_DELAY = 2.0


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def _daemon_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class AutosaveScheduler:
    """Debounce over a snapshot callback.

    Args:
        save: Called with no arguments when the quiet period elapses.
        delay: Quiet period in seconds.
        timer_factory: Builds a startable, cancellable timer. Defaults to a
            daemon ``threading.Timer``.
    """

    def __init__(
        self,
        save: Callable[[], None],
        delay: float = DEFAULT_AUTOSAVE_DELAY,
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        self._save = save
        self.delay = delay
        self._timer_factory = timer_factory
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def touch(self) -> None:
        """Restart the quiet period."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._timer = self._timer_factory(self.delay, lambda: self._fire(generation))
            self._timer.start()

    def cancel(self) -> None:
        """Drop the pending save, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def flush(self) -> bool:
        """Run the pending save now. Returns True if a save was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._generation += 1
        self._run_save()
        return True

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled after it began running must not save.
            if generation != self._generation:
                return
            self._timer = None
        self._run_save()

    def _run_save(self) -> None:
        try:
            self._save()
        except OSError:
            logger.warning("Autosave failed; draft kept in memory only", exc_info=True)


def attach_autosave(
    store: DraftStore,
    storage: DraftStorage,
    delay: float = DEFAULT_AUTOSAVE_DELAY,
    timer_factory: TimerFactory = _daemon_timer,
) -> AutosaveScheduler:
    """Wire a scheduler so every store mutation re-arms it.

    On fire, the store is snapshotted and written to ``storage``, which
    stamps the snapshot with the save time.
    """
    scheduler = AutosaveScheduler(
        lambda: storage.save(store.snapshot()),
        delay=delay,
        timer_factory=timer_factory,
    )
    store.subscribe(scheduler.touch)
    return scheduler
