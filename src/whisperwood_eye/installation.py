from __future__ import annotations

import logging
import queue
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .animator import EyeAnimator, MAX_ALPHA
from .config import InstallationConfig
from .messages import MESSAGES, MessageGenerator
from .presence import PresenceTracker
from .types import AnimationState, DetectionBatch, PresenceEvent, Scene
from .typewriter import MessageHistory, Typewriter

logger = logging.getLogger(__name__)


@dataclass
class InstallationState:
    """Everything the render loop mutates. Only the render thread touches it."""

    presence: PresenceTracker
    typewriter: Typewriter
    history: MessageHistory
    animator: EyeAnimator
    generator: MessageGenerator

    @classmethod
    def create(
        cls,
        config: InstallationConfig,
        now_ms: float,
        rng: Optional[random.Random] = None,
        pool: Sequence[str] = MESSAGES,
    ) -> "InstallationState":
        rng = rng if rng is not None else random.Random()
        return cls(
            presence=PresenceTracker(
                window_ms=config.presence_window_ms,
                display_grace_ms=config.display_grace_ms,
                near_fraction=config.near_fraction,
            ),
            typewriter=Typewriter(
                type_speed_ms=config.type_speed_ms,
                transition_quiet_ms=config.transition_quiet_ms,
            ),
            history=MessageHistory(config.history_size),
            animator=EyeAnimator(
                now_ms,
                blink_duration_ms=config.blink_duration_ms,
                idle_eye_duration_ms=config.idle_eye_duration_ms,
                idle_delay_min_ms=config.idle_delay_min_ms,
                idle_delay_max_ms=config.idle_delay_max_ms,
                rng=rng,
            ),
            generator=MessageGenerator(pool, rng),
        )


class Installation:
    """
    The per-tick update of the installation.

    Detection batches arrive on `detections` from the detection thread; `update` drains
    them before touching any other state, so presence changes and rendering never
    interleave. `update` returns a `Scene` for the drawing code to paint.
    """

    def __init__(
        self,
        config: Optional[InstallationConfig] = None,
        now_ms: float = 0.0,
        rng: Optional[random.Random] = None,
        pool: Sequence[str] = MESSAGES,
    ) -> None:
        self.config = config if config is not None else InstallationConfig()
        self.state = InstallationState.create(self.config, now_ms, rng=rng, pool=pool)
        self.detections: "queue.Queue[DetectionBatch]" = queue.Queue()

    def submit(self, batch: DetectionBatch) -> None:
        self.detections.put(batch)

    def drain_detections(self, now_ms: float) -> int:
        n = 0
        while True:
            try:
                batch = self.detections.get_nowait()
            except queue.Empty:
                return n
            self.apply_detections(batch, now_ms)
            n += 1

    def apply_detections(self, batch: DetectionBatch, now_ms: float) -> Optional[PresenceEvent]:
        event = self.state.presence.update(batch, now_ms)
        if event is PresenceEvent.STARTED:
            self.start_new_message(now_ms)
        elif event is PresenceEvent.ENDED:
            self._on_presence_lost()
        return event

    def start_new_message(self, now_ms: float) -> None:
        template, rendered = self.state.generator.generate()
        self.state.typewriter.start(rendered, now_ms, template=template)
        logger.debug("new message: %r", rendered)

    def _on_presence_lost(self) -> None:
        # Resetting the session also drops any pending transition.
        self.state.typewriter.reset()
        if self.config.clear_history_on_presence_lost:
            self.state.history.clear()

    def update(self, now_ms: float) -> Scene:
        self.drain_detections(now_ms)
        st = self.state
        animator = st.animator

        if animator.is_blinking:
            progress = animator.blink_progress(now_ms)
            if progress >= 1.0:
                animator.finish_blink()
                self._commit_and_advance(now_ms)
            return Scene(state=AnimationState.BLINKING, blink_progress=progress, eye_alpha=MAX_ALPHA)

        if st.presence.display_active(now_ms):
            animator.cancel_idle_fade()
            st.typewriter.tick(now_ms)
            show_text = not animator.show_eye
            if st.typewriter.ready_for_transition(now_ms) and not animator.is_blinking:
                animator.start_blink(now_ms)
            return Scene(
                state=animator.state,
                eye_alpha=MAX_ALPHA if animator.show_eye else 0.0,
                history=tuple(st.history),
                current_line=st.typewriter.visible_text,
                show_text=show_text,
            )

        if self.config.clear_history_on_presence_lost:
            st.history.clear()
            st.typewriter.reset()

        animator.maybe_start_idle_fade(now_ms)
        alpha = animator.idle_alpha(now_ms)
        return Scene(state=animator.state, eye_alpha=alpha)

    def _commit_and_advance(self, now_ms: float) -> None:
        st = self.state
        session = st.typewriter.session
        if not session.awaiting_transition:
            return
        st.history.push(session.rendered)
        self.start_new_message(now_ms)
