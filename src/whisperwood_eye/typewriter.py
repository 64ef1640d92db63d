from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, List

from .types import MessageSession


class MessageHistory:
    """Completed lines, newest last. Holds at most `max_lines`; the oldest is dropped first."""

    def __init__(self, max_lines: int = 5) -> None:
        if max_lines < 1:
            raise ValueError(f"max_lines must be >= 1, got {max_lines}")
        self.max_lines = max_lines
        self._lines: Deque[str] = deque(maxlen=max_lines)

    def push(self, text: str) -> None:
        self._lines.append(text)

    def clear(self) -> None:
        self._lines.clear()

    def lines(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)


class Typewriter:
    """
    Reveals one message a character at a time.

    Each `tick` reveals at most one character once `type_speed_ms` has passed since the
    previous reveal, so a stalled loop catches up by a single character, not a burst.
    """

    def __init__(self, type_speed_ms: float = 250.0, transition_quiet_ms: float = 5000.0) -> None:
        self.type_speed_ms = type_speed_ms
        self.transition_quiet_ms = transition_quiet_ms
        self.session = MessageSession()
        self._last_advance_ms = 0.0

    @property
    def is_typing(self) -> bool:
        return self.session.is_typing

    @property
    def visible_text(self) -> str:
        return self.session.visible_text

    def start(self, rendered: str, now_ms: float, template: str = "") -> None:
        self.session = MessageSession(template=template, rendered=rendered, is_typing=True)
        self._last_advance_ms = now_ms

    def reset(self) -> None:
        self.session = MessageSession()

    def tick(self, now_ms: float) -> bool:
        s = self.session
        if not s.is_typing or now_ms - self._last_advance_ms <= self.type_speed_ms:
            return False

        revealed = False
        if s.revealed_count < len(s.rendered):
            s.revealed_count += 1
            revealed = True
        self._last_advance_ms = now_ms
        if s.revealed_count >= len(s.rendered):
            s.is_typing = False
            s.finished_at_ms = now_ms
        return revealed

    def ready_for_transition(self, now_ms: float) -> bool:
        s = self.session
        if not s.awaiting_transition:
            return False
        return now_ms - s.finished_at_ms > self.transition_quiet_ms
