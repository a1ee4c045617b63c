"""Filesystem change notification for the listed directory.

``ChangeNotifier`` watches one directory at a time through ``watchdog`` and
collapses event bursts with ``Debouncer`` so one refresh callback runs per
quiet period. Watch setup failures only disable automatic refresh.
"""

from __future__ import annotations

import enum
import logging
import os
import threading
from collections.abc import Callable, Hashable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_WINDOW_MS = 150
REFRESH_EVENT_TYPES = frozenset({"created", "modified", "deleted", "moved"})

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


def _daemon_timer(interval: float, function: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


class Debouncer:
    """Per-key trailing-edge debounce on cancellable timers.

    ``trigger(key)`` cancels any pending timer for ``key`` and arms a new one;
    the callback runs once, ``window_ms`` after the last trigger.
    """

    def __init__(
        self,
        callback: Callable[[Hashable], None],
        window_ms: int = DEFAULT_DEBOUNCE_WINDOW_MS,
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        self.window_ms = max(0, int(window_ms))
        self._callback = callback
        self._timer_factory = timer_factory
        self._timers: dict[Hashable, threading.Timer] = {}
        self._lock = threading.Lock()

    def trigger(self, key: Hashable) -> None:
        timer: threading.Timer | None = None

        def fire() -> None:
            with self._lock:
                if self._timers.get(key) is not timer:
                    return
                del self._timers[key]
            self._callback(key)

        timer = self._timer_factory(self.window_ms / 1000.0, fire)
        with self._lock:
            previous = self._timers.pop(key, None)
            if previous is not None:
                previous.cancel()
            self._timers[key] = timer
        timer.start()

    def is_pending(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._timers

    def cancel(self, key: Hashable) -> None:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()


class WatchState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    PENDING_REFRESH = "pending_refresh"


class _DirectoryEventHandler(FileSystemEventHandler):
    """Forward raw watchdog events for one directory to the notifier."""

    def __init__(self, notifier: "ChangeNotifier", directory: str) -> None:
        super().__init__()
        self._notifier = notifier
        self._directory = directory

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in REFRESH_EVENT_TYPES:
            return
        self._notifier.notify(self._directory)


class ChangeNotifier:
    """Watch a single directory and signal debounced "directory changed" events."""

    def __init__(
        self,
        on_change: Callable[[str], None],
        debounce_window_ms: int = DEFAULT_DEBOUNCE_WINDOW_MS,
        *,
        observer_factory: Callable[[], Observer] = Observer,
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        self._on_change = on_change
        self._observer_factory = observer_factory
        self._debouncer = Debouncer(self._refresh, debounce_window_ms, timer_factory)
        self._lock = threading.Lock()
        self._observer: Observer | None = None
        self._directory: str | None = None
        self._state = WatchState.IDLE

    @property
    def directory(self) -> str | None:
        return self._directory

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def debounce_window_ms(self) -> int:
        return self._debouncer.window_ms

    def watch(self, directory: str | os.PathLike[str]) -> bool:
        """Tear down any previous watch and arm one on ``directory``.

        Returns ``False`` when the watch could not be established; the
        notifier then stays idle and no automatic refresh happens.
        """
        directory = os.path.abspath(os.fspath(directory))
        self.unwatch()
        if not os.path.isdir(directory):
            logger.warning("cannot watch %s: not a directory", directory)
            return False

        observer = self._observer_factory()
        try:
            observer.schedule(_DirectoryEventHandler(self, directory), directory, recursive=False)
            observer.start()
        except OSError as exc:
            logger.warning("cannot watch %s: %s", directory, exc)
            return False

        with self._lock:
            self._observer = observer
            self._directory = directory
            self._state = WatchState.ARMED
        logger.debug("watching %s", directory)
        return True

    def unwatch(self) -> None:
        with self._lock:
            observer = self._observer
            directory = self._directory
            self._observer = None
            self._directory = None
            self._state = WatchState.IDLE
        if directory is not None:
            self._debouncer.cancel(directory)
        if observer is not None:
            observer.stop()
            if observer.is_alive():
                observer.join(timeout=1.0)

    def notify(self, directory: str) -> None:
        """Record one raw event for ``directory`` and (re)start the quiet window."""
        with self._lock:
            if directory != self._directory:
                return
            self._state = WatchState.PENDING_REFRESH
        self._debouncer.trigger(directory)

    def _refresh(self, directory: Hashable) -> None:
        with self._lock:
            if directory != self._directory:
                return
            # An event may have re-armed the debouncer after this timer fired.
            if not self._debouncer.is_pending(directory):
                self._state = WatchState.ARMED
        self._on_change(str(directory))

    def close(self) -> None:
        self.unwatch()
        self._debouncer.cancel_all()


__all__ = [
    "DEFAULT_DEBOUNCE_WINDOW_MS",
    "REFRESH_EVENT_TYPES",
    "Debouncer",
    "WatchState",
    "ChangeNotifier",
]
