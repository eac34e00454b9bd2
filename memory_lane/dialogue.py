"""Dialogue player — typewriter-style reveal of an ordered list of lines.

Runs on the current asyncio loop. Each line is revealed by a task that adds
one character, then awaits ``sleep(char_delay)``; that await is the only
suspension point and the task is cancelled to skip. A line therefore always
ends fully revealed, whether it ran to completion or was skipped.

Signals:
  started(total)
  line_shown(index, total)       a new line begins (0-based index)
  text_changed(text)             visible text grew
  line_completed(index, total)   the line is fully shown
  completed()                    cursor moved past the last line; once per start()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from memory_lane.events import Signal

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class EmptyDialogueError(ValueError):
    """Raised when starting a dialogue with no lines."""


class DialoguePlayer:
    def __init__(
        self,
        char_delay: float = 0.05,
        allow_skip: bool = True,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._char_delay = char_delay
        self._allow_skip = allow_skip
        self._sleep = sleep

        self._lines: list[str] = []
        self._cursor = 0
        self._visible = ""
        self._typing = False
        self._active = False
        self._task: asyncio.Task[None] | None = None

        self.started = Signal("dialogue.started")
        self.line_shown = Signal("dialogue.line_shown")
        self.text_changed = Signal("dialogue.text_changed")
        self.line_completed = Signal("dialogue.line_completed")
        self.completed = Signal("dialogue.completed")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_typing(self) -> bool:
        return self._typing

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def current_index(self) -> int:
        return self._cursor

    @property
    def total_lines(self) -> int:
        return len(self._lines)

    @property
    def visible_text(self) -> str:
        return self._visible

    @property
    def progress(self) -> float:
        if not self._lines:
            return 0.0
        return self._cursor / len(self._lines)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self, lines: Sequence[str]) -> None:
        lines = list(lines)
        if not lines:
            raise EmptyDialogueError("No dialogue lines provided")
        self._cancel_reveal()
        self._lines = lines
        self._cursor = 0
        self._active = True
        logger.info("Dialogue started: %d lines", len(lines))
        self.started.emit(len(lines))
        self._show_line()

    def advance(self) -> None:
        """Skip the line being typed, or move on to the next line / completion."""
        if not self._active:
            return
        if self._typing:
            if not self._allow_skip:
                return
            self._cancel_reveal()
            self._finish_line()
            return
        if self._cursor < len(self._lines):
            self._show_line()
        else:
            self._complete()

    def skip_all(self) -> None:
        if not self._active:
            return
        if self._typing:
            self._cancel_reveal()
            self._finish_line()
        self._cursor = len(self._lines)
        logger.debug("Dialogue skipped")
        self._complete()

    def stop(self) -> None:
        """Abandon the dialogue without completing it."""
        self._cancel_reveal()
        self._typing = False
        self._active = False

    async def wait_typing(self) -> None:
        """Wait until the line currently being typed is fully shown."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Reveal
    # ------------------------------------------------------------------

    def _show_line(self) -> None:
        index = self._cursor
        line = self._lines[index]
        self._typing = True
        self._visible = ""
        logger.debug("Line %d/%d: %r", index + 1, len(self._lines), line)
        self.line_shown.emit(index, len(self._lines))
        self._task = asyncio.get_running_loop().create_task(self._type_line(line))

    async def _type_line(self, line: str) -> None:
        me = asyncio.current_task()
        for i in range(1, len(line) + 1):
            if self._task is not me:
                return
            self._set_visible(line[:i])
            await self._sleep(self._char_delay)
        if self._task is me:
            self._finish_line()

    def _finish_line(self) -> None:
        index = self._cursor
        self._task = None
        self._typing = False
        self._set_visible(self._lines[index])
        self._cursor += 1
        self.line_completed.emit(index, len(self._lines))

    def _cancel_reveal(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def _set_visible(self, text: str) -> None:
        if text != self._visible:
            self._visible = text
            self.text_changed.emit(text)

    def _complete(self) -> None:
        self._active = False
        logger.info("Dialogue completed")
        self.completed.emit()
