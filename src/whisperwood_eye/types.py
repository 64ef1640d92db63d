from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Tuple


Box2 = Tuple[int, int, int, int]  # (x_min, y_min, x_max, y_max)


@dataclass(frozen=True)
class DetectionResult:
    """A single detected object for one frame."""

    label: str
    width: float  # bounding box width in frame pixels
    score: Optional[float] = None
    bbox_px: Optional[Box2] = None


@dataclass(frozen=True)
class DetectionBatch:
    """All detections for one frame plus the geometry they were measured in."""

    results: List[DetectionResult]
    frame_width: int
    frame_height: int


class PresenceEvent(enum.Enum):
    STARTED = "started"
    ENDED = "ended"


class AnimationState(enum.Enum):
    IDLE = "idle"
    BLINKING = "blinking"
    IDLE_FADING = "idle_fading"


@dataclass
class PresenceState:
    is_present: bool = False
    last_seen_at_ms: Optional[float] = None


@dataclass
class MessageSession:
    """One message being typed out. `rendered` is the glitched text."""

    template: str = ""
    rendered: str = ""
    revealed_count: int = 0
    is_typing: bool = False
    finished_at_ms: Optional[float] = None

    @property
    def visible_text(self) -> str:
        return self.rendered[: self.revealed_count]

    @property
    def awaiting_transition(self) -> bool:
        return not self.is_typing and self.finished_at_ms is not None


@dataclass(frozen=True)
class Scene:
    """What the render loop should paint for one tick."""

    state: AnimationState
    blink_progress: float = 0.0
    eye_alpha: float = 0.0  # 0 means the eye is not drawn
    history: Tuple[str, ...] = ()
    current_line: str = ""
    show_text: bool = False
