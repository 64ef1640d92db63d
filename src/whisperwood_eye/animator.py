from __future__ import annotations

import logging
import random
from typing import Optional

from .types import AnimationState
from .utils import Timer, map_range

logger = logging.getLogger(__name__)

MAX_ALPHA = 255.0


def idle_fade_alpha(elapsed_ms: float, duration_ms: float) -> float:
    """Linear 0 -> 255 over the first half of the fade, 255 -> 0 over the second."""
    half = duration_ms / 2.0
    if elapsed_ms <= 0:
        return 0.0
    if elapsed_ms < half:
        return map_range(elapsed_ms, 0.0, half, 0.0, MAX_ALPHA)
    if elapsed_ms < duration_ms:
        return map_range(elapsed_ms, half, duration_ms, MAX_ALPHA, 0.0)
    return 0.0


def triangular(progress: float) -> float:
    return progress if progress < 0.5 else 1.0 - progress


def blink_bar_height(progress: float, frame_height: float) -> float:
    """Height of each eyelid bar: grows to half the frame at mid-blink, then shrinks."""
    return map_range(triangular(progress), 0.0, 0.5, 0.0, frame_height * 0.5)


class EyeAnimator:
    """
    Idle / Blinking / IdleFading state machine for the eye.

    Blinks mark the transition between messages while someone is present. With nobody
    around, the eye fades in and out once at a random moment every 10-20 seconds.
    """

    def __init__(
        self,
        now_ms: float,
        blink_duration_ms: float = 600.0,
        idle_eye_duration_ms: float = 1000.0,
        idle_delay_min_ms: float = 10000.0,
        idle_delay_max_ms: float = 20000.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.blink_duration_ms = blink_duration_ms
        self.idle_eye_duration_ms = idle_eye_duration_ms
        self.idle_delay_min_ms = idle_delay_min_ms
        self.idle_delay_max_ms = idle_delay_max_ms
        self.rng = rng if rng is not None else random.Random()

        self.state = AnimationState.IDLE
        self.show_eye = False
        self._blink: Optional[Timer] = None
        self._fade: Optional[Timer] = None
        self.next_idle_at_ms = self._schedule(now_ms)

    def _schedule(self, now_ms: float) -> float:
        return now_ms + self.rng.uniform(self.idle_delay_min_ms, self.idle_delay_max_ms)

    @property
    def is_blinking(self) -> bool:
        return self.state is AnimationState.BLINKING

    # Blinking

    def start_blink(self, now_ms: float) -> None:
        self._fade = None
        self._blink = Timer(now_ms, self.blink_duration_ms)
        self.state = AnimationState.BLINKING
        self.show_eye = True
        logger.debug("blink started")

    @property
    def blink_started_at_ms(self) -> Optional[float]:
        return self._blink.started_at_ms if self._blink is not None else None

    def blink_progress(self, now_ms: float) -> float:
        if self._blink is None:
            return 0.0
        return self._blink.progress(now_ms)

    def finish_blink(self) -> None:
        self._blink = None
        self.state = AnimationState.IDLE
        self.show_eye = False

    # Idle fading

    def maybe_start_idle_fade(self, now_ms: float) -> bool:
        if self.state is not AnimationState.IDLE or now_ms <= self.next_idle_at_ms:
            return False
        self._fade = Timer(now_ms, self.idle_eye_duration_ms)
        self.state = AnimationState.IDLE_FADING
        self.show_eye = False
        self.next_idle_at_ms = self._schedule(now_ms)
        return True

    def idle_alpha(self, now_ms: float) -> float:
        """Current fade alpha; leaves IdleFading once the fade has run its full duration."""
        if self.state is not AnimationState.IDLE_FADING or self._fade is None:
            return 0.0
        if self._fade.done(now_ms):
            self.cancel_idle_fade()
            return 0.0
        return idle_fade_alpha(self._fade.elapsed(now_ms), self._fade.duration_ms)

    def cancel_idle_fade(self) -> None:
        if self.state is AnimationState.IDLE_FADING:
            self.state = AnimationState.IDLE
        self._fade = None
