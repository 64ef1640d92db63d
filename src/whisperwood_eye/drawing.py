from __future__ import annotations

from typing import List, Sequence, Tuple

import cv2
import numpy as np

from .animator import blink_bar_height
from .config import InstallationConfig
from .types import AnimationState, Scene

FONT = cv2.FONT_HERSHEY_PLAIN
TEXT_THICKNESS = 1


def _blend_alpha(frame, overlay, alpha: float) -> None:
    """Blend `overlay` onto `frame` in place. `alpha` is 0..255."""
    a = float(np.clip(alpha / 255.0, 0.0, 1.0))
    if a <= 0.0:
        return
    cv2.addWeighted(overlay, a, frame, 1.0 - a, 0.0, dst=frame)


def eye_polygon(width: int, height: int, config: InstallationConfig) -> np.ndarray:
    cx = width / 2.0
    cy = height / 2.0
    w = width * config.eye_width_frac
    h = height * config.eye_height_frac
    pts = [
        (cx - w / 2, cy),
        (cx - w / 4, cy - h / 2),
        (cx + w / 4, cy - h / 2),
        (cx + w / 2, cy),
        (cx + w / 4, cy + h / 2),
        (cx - w / 4, cy + h / 2),
    ]
    return np.array([(int(round(x)), int(round(y))) for x, y in pts], dtype=np.int32)


def draw_eye(frame, config: InstallationConfig, alpha: float = 255.0):
    """Violet sclera hexagon (at 60% of `alpha`) with a green pupil ellipse."""
    if alpha <= 0:
        return frame
    height, width = frame.shape[:2]

    overlay = frame.copy()
    cv2.fillPoly(overlay, [eye_polygon(width, height, config)], config.sclera_color, lineType=cv2.LINE_AA)
    _blend_alpha(frame, overlay, min(alpha * 0.6, 255.0))

    w = width * config.eye_width_frac
    h = height * config.eye_height_frac
    center = (int(round(width / 2.0)), int(round(height / 2.0)))
    axes = (max(1, int(round(w * 0.05))), max(1, int(round(h * 0.3))))
    overlay = frame.copy()
    cv2.ellipse(overlay, center, axes, 0, 0, 360, config.pupil_color, -1, cv2.LINE_AA)
    _blend_alpha(frame, overlay, alpha)
    return frame


def draw_blink(frame, progress: float, config: InstallationConfig):
    """
    The full eye with two black lids: one sliding down from the top edge, one up from the
    bottom edge. They meet at the centre line at mid-blink, then retract.
    """

    draw_eye(frame, config)
    height, width = frame.shape[:2]
    bar = min(height, int(round(blink_bar_height(progress, height))))
    if bar <= 0:
        return frame
    cv2.rectangle(frame, (0, 0), (width - 1, bar - 1), (0, 0, 0), -1)
    cv2.rectangle(frame, (0, height - bar), (width - 1, height - 1), (0, 0, 0), -1)
    return frame


def font_scale(config: InstallationConfig) -> float:
    return cv2.getFontScaleFromHeight(FONT, config.text_height_px, TEXT_THICKNESS)


def wrap_text(text: str, max_width: int, scale: float) -> List[str]:
    """Greedy word wrap; a single word wider than `max_width` is broken by characters."""
    if not text:
        return []

    def fits(s: str) -> bool:
        return cv2.getTextSize(s, FONT, scale, TEXT_THICKNESS)[0][0] <= max_width

    lines: List[str] = []
    current = ""
    for word in text.split(" "):
        candidate = word if not current else f"{current} {word}"
        if fits(candidate):
            current = candidate
            continue
        if current:
            lines.append(current)
        current = ""
        for ch in word:
            if current and not fits(current + ch):
                lines.append(current)
                current = ""
            current += ch
    if current:
        lines.append(current)
    return lines


def _put_line(frame, text: str, top: int, config: InstallationConfig, scale: float) -> None:
    org = (config.margin_px, top + config.text_height_px)
    cv2.putText(frame, text, org, FONT, scale, config.text_color, TEXT_THICKNESS, cv2.LINE_AA)


def draw_messages(frame, history: Sequence[str], current: str, config: InstallationConfig):
    """
    Current line starts at the vertical centre; completed lines stack upward above it,
    newest closest to the baseline.
    """

    height, width = frame.shape[:2]
    baseline = height // 2
    max_width = max(1, width - 2 * config.margin_px)
    scale = font_scale(config)

    top = baseline
    for line in wrap_text(current, max_width, scale):
        _put_line(frame, line, top, config, scale)
        top += config.line_height_px

    top = baseline
    for entry in reversed(list(history)):
        block = wrap_text(entry, max_width, scale)
        top -= len(block) * config.line_height_px
        for i, line in enumerate(block):
            _put_line(frame, line, top + i * config.line_height_px, config, scale)
    return frame


def render_scene(frame, scene: Scene, config: InstallationConfig):
    frame[:] = 0
    if scene.state is AnimationState.BLINKING:
        return draw_blink(frame, scene.blink_progress, config)
    if scene.show_text:
        draw_messages(frame, scene.history, scene.current_line, config)
    if scene.eye_alpha > 0:
        draw_eye(frame, config, scene.eye_alpha)
    return frame


def new_canvas(size: Tuple[int, int]) -> np.ndarray:
    width, height = size
    return np.zeros((max(1, height), max(1, width), 3), dtype=np.uint8)


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    """Outlined HUD text for the debug views."""
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame
