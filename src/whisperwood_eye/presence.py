from __future__ import annotations

import logging
from typing import Iterable, Optional

from .types import DetectionBatch, DetectionResult, PresenceEvent, PresenceState

logger = logging.getLogger(__name__)

PERSON_LABEL = "person"


def is_qualifying(result: DetectionResult, frame_width: float, near_fraction: float = 1.0 / 3.0) -> bool:
    """A person whose box is wider than `near_fraction` of the frame counts as near."""
    label = getattr(result, "label", None)
    width = getattr(result, "width", None)
    if label != PERSON_LABEL or width is None:
        return False
    try:
        return float(width) > float(frame_width) * near_fraction
    except (TypeError, ValueError):
        return False


def has_near_person(results: Optional[Iterable[DetectionResult]], frame_width: float, near_fraction: float) -> bool:
    if not results:
        return False
    return any(is_qualifying(r, frame_width, near_fraction) for r in results)


class PresenceTracker:
    """
    Turns per-frame detections into a "someone is near" flag with a trailing grace window.

    `update` returns STARTED on the first qualifying detection after absence and ENDED once
    nothing qualifying has been seen for more than `window_ms`.
    """

    def __init__(self, window_ms: float = 10000.0, display_grace_ms: float = 10000.0, near_fraction: float = 1.0 / 3.0):
        self.window_ms = window_ms
        self.display_grace_ms = display_grace_ms
        self.near_fraction = near_fraction
        self.state = PresenceState()

    @property
    def is_present(self) -> bool:
        return self.state.is_present

    def update(self, batch: DetectionBatch, now_ms: float) -> Optional[PresenceEvent]:
        if has_near_person(batch.results, batch.frame_width, self.near_fraction):
            self.state.last_seen_at_ms = now_ms
            if not self.state.is_present:
                self.state.is_present = True
                logger.info("presence started")
                return PresenceEvent.STARTED
            return None

        last_seen = self.state.last_seen_at_ms
        if self.state.is_present and last_seen is not None and now_ms - last_seen > self.window_ms:
            self.state.is_present = False
            logger.info("presence ended after %.0f ms without a sighting", now_ms - last_seen)
            return PresenceEvent.ENDED
        return None

    def display_active(self, now_ms: float) -> bool:
        if self.state.is_present:
            return True
        last_seen = self.state.last_seen_at_ms
        if last_seen is None:
            return False
        return now_ms - last_seen < self.display_grace_ms
