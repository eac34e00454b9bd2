"""Observer registration.

Components expose notifications as ``Signal`` attributes. Connecting returns
a ``Subscription`` that owns the registration; releasing it (explicitly or by
leaving a ``with`` block) is the only way to detach, so attach and detach
always pair up.

    sub = tracker.changed.connect(on_changed)
    ...
    sub.disconnect()

    with dialogue.completed.connect(on_done):
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Subscription:
    """Handle for one connected callback."""

    def __init__(self, signal: Signal, callback: Callable[..., Any]) -> None:
        self._signal = signal
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def disconnect(self) -> None:
        """Detach the callback. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._signal._remove(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.disconnect()


class Signal:
    """A named notification with any number of receivers."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subs: list[Subscription] = []

    def connect(self, callback: Callable[..., Any]) -> Subscription:
        sub = Subscription(self, callback)
        self._subs.append(sub)
        return sub

    @property
    def receivers(self) -> int:
        return len(self._subs)

    def emit(self, *args: Any) -> None:
        # Snapshot: receivers may disconnect (or connect) while we iterate.
        for sub in list(self._subs):
            if not sub.active:
                continue
            try:
                sub._callback(*args)
            except Exception:
                logger.exception("Receiver of %s failed", self.name)

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subs.remove(sub)
        except ValueError:
            pass

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, receivers={len(self._subs)})"
