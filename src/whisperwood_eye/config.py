from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Tuple


ColorBGR = Tuple[int, int, int]


@dataclass(frozen=True)
class InstallationConfig:
    """
    Tunables for the installation. All durations are in milliseconds.

    `presence_window_ms` governs when the presence tracker resets its message state,
    `display_grace_ms` governs how long text keeps being drawn after the last sighting.
    They are deliberately separate values.
    """

    # presence
    near_fraction: float = 1.0 / 3.0
    presence_window_ms: float = 10000.0
    display_grace_ms: float = 10000.0
    clear_history_on_presence_lost: bool = True

    # typing
    type_speed_ms: float = 250.0
    transition_quiet_ms: float = 5000.0
    history_size: int = 5

    # eye
    blink_duration_ms: float = 600.0
    idle_eye_duration_ms: float = 1000.0
    idle_delay_min_ms: float = 10000.0
    idle_delay_max_ms: float = 20000.0

    # drawing
    margin_px: int = 40
    line_height_px: int = 40
    text_height_px: int = 24
    text_color: ColorBGR = (70, 255, 0)
    sclera_color: ColorBGR = (128, 0, 128)
    pupil_color: ColorBGR = (70, 255, 0)
    eye_width_frac: float = 0.8
    eye_height_frac: float = 0.5

    def __post_init__(self) -> None:
        if not (0.0 < self.near_fraction <= 1.0):
            raise ValueError(f"near_fraction must be in (0, 1], got {self.near_fraction}")
        for name in (
            "presence_window_ms",
            "display_grace_ms",
            "type_speed_ms",
            "blink_duration_ms",
            "idle_eye_duration_ms",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.transition_quiet_ms < 0:
            raise ValueError(f"transition_quiet_ms must be >= 0, got {self.transition_quiet_ms}")
        if self.idle_delay_min_ms < 0 or self.idle_delay_max_ms < self.idle_delay_min_ms:
            raise ValueError(
                f"invalid idle delay range [{self.idle_delay_min_ms}, {self.idle_delay_max_ms})"
            )
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")

    def with_overrides(self, **changes) -> "InstallationConfig":
        return replace(self, **changes)


# "first" is the original tuning: slower typing, history kept across absences.
PRESETS: Dict[str, InstallationConfig] = {
    "first": InstallationConfig(
        type_speed_ms=400.0,
        clear_history_on_presence_lost=False,
        margin_px=20,
    ),
    "refined": InstallationConfig(),
}


def get_preset(name: str) -> InstallationConfig:
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{name}'. Available: {list(PRESETS.keys())}")
    return PRESETS[name]
