import random

import pytest

from whisperwood_eye.config import InstallationConfig
from whisperwood_eye.installation import Installation
from whisperwood_eye.types import AnimationState, DetectionBatch, DetectionResult

STEP = 11.0


def near():
    return DetectionBatch([DetectionResult("person", 900.0)], 1280, 720)


def empty():
    return DetectionBatch([], 1280, 720)


def make(**overrides):
    config = InstallationConfig(type_speed_ms=10.0).with_overrides(**overrides)
    return Installation(config, now_ms=0.0, rng=random.Random(3), pool=("you are seen", "the forest listens"))


def step(inst, t, batch=near):
    inst.submit(batch())
    return inst.update(t)


def finish_typing(inst, t):
    while inst.state.typewriter.is_typing:
        t += STEP
        step(inst, t)
    return t


def complete_cycle(inst, t):
    """Type the current message, wait out the quiet period and blink to the next one."""
    finish_typing(inst, t)
    session = inst.state.typewriter.session
    rendered = session.rendered
    t = session.finished_at_ms + 5001
    step(inst, t)
    assert inst.state.animator.is_blinking
    t += 600
    scene = step(inst, t)
    assert scene.state is AnimationState.BLINKING
    assert scene.blink_progress == 1.0
    assert not inst.state.animator.is_blinking
    return t, rendered


def test_presence_starts_a_message_immediately():
    inst = make()
    scene = step(inst, 100)
    tw = inst.state.typewriter
    assert inst.state.presence.is_present
    assert tw.is_typing
    assert tw.session.revealed_count == 0
    assert scene.show_text
    assert scene.current_line == ""


def test_blink_waits_for_quiet_period_after_typing():
    inst = make()
    step(inst, 100)
    finish_typing(inst, 100)
    finished = inst.state.typewriter.session.finished_at_ms

    step(inst, finished + 4999)
    assert not inst.state.animator.is_blinking

    scene = step(inst, finished + 5001)
    assert inst.state.animator.is_blinking
    assert scene.eye_alpha == 255


def test_blink_commits_message_and_starts_next():
    inst = make()
    step(inst, 100)
    t, rendered = complete_cycle(inst, 100)
    assert inst.state.history.lines() == [rendered]
    tw = inst.state.typewriter
    assert tw.is_typing
    assert tw.session.revealed_count == 0

    scene = step(inst, t + 1)
    assert scene.show_text
    assert scene.history == (rendered,)


def test_history_holds_last_five_messages():
    inst = make()
    step(inst, 100)
    t = 100.0
    committed = []
    for _ in range(6):
        t, rendered = complete_cycle(inst, t)
        committed.append(rendered)
    assert len(inst.state.history) == 5
    assert inst.state.history.lines() == committed[1:]


def test_no_blink_while_still_typing():
    inst = make()
    step(inst, 100)
    assert inst.state.typewriter.is_typing
    step(inst, 100 + 5001)
    assert not inst.state.animator.is_blinking


def test_running_blink_is_not_restarted():
    inst = make()
    step(inst, 100)
    finish_typing(inst, 100)
    finished = inst.state.typewriter.session.finished_at_ms
    step(inst, finished + 5001)
    animator = inst.state.animator
    started = animator.blink_started_at_ms
    assert started == finished + 5001

    # typing finished and the quiet period long over: the start conditions still hold
    for dt in (100, 300, 599):
        scene = step(inst, started + dt)
        assert animator.blink_started_at_ms == started
        assert scene.blink_progress == pytest.approx(dt / 600)
    assert len(inst.state.history) == 0

    step(inst, started + 600)
    assert not animator.is_blinking
    assert animator.blink_started_at_ms is None
    assert len(inst.state.history) == 1
    assert inst.state.typewriter.is_typing


def test_presence_lost_clears_message_and_history():
    inst = make()
    step(inst, 100)
    t, _ = complete_cycle(inst, 100)
    assert len(inst.state.history) == 1

    scene = step(inst, t + 10001, batch=empty)
    assert not inst.state.presence.is_present
    assert len(inst.state.history) == 0
    assert inst.state.typewriter.visible_text == ""
    assert not inst.state.typewriter.is_typing
    assert not scene.show_text


def test_history_survives_absence_when_configured():
    inst = make(clear_history_on_presence_lost=False)
    step(inst, 100)
    t, rendered = complete_cycle(inst, 100)

    step(inst, t + 10001, batch=empty)
    assert not inst.state.presence.is_present
    assert inst.state.history.lines() == [rendered]
    assert not inst.state.typewriter.is_typing

    # back again: a fresh message starts below the kept history
    scene = step(inst, t + 20000)
    assert inst.state.typewriter.is_typing
    assert scene.history == (rendered,)


def test_pending_transition_cancelled_when_presence_lost():
    inst = make()
    step(inst, 100)
    t = finish_typing(inst, 100)
    step(inst, t + 10001, batch=empty)
    # nobody around: no blink, only the idle eye logic runs
    step(inst, t + 20000, batch=empty)
    assert not inst.state.animator.is_blinking
    assert len(inst.state.history) == 0


def test_idle_fade_when_nobody_present():
    inst = make()
    due = inst.state.animator.next_idle_at_ms
    assert 10000 <= due < 20000

    scene = step(inst, due + 1, batch=empty)
    assert scene.state is AnimationState.IDLE_FADING
    assert scene.eye_alpha == 0

    scene = step(inst, due + 501, batch=empty)
    assert scene.eye_alpha == 255

    scene = step(inst, due + 1001, batch=empty)
    assert scene.state is AnimationState.IDLE
    assert scene.eye_alpha == 0
    assert inst.state.animator.next_idle_at_ms >= due + 1 + 10000


def test_presence_interrupts_idle_fade():
    inst = make()
    due = inst.state.animator.next_idle_at_ms
    step(inst, due + 1, batch=empty)
    scene = step(inst, due + 100)
    assert scene.state is AnimationState.IDLE
    assert scene.show_text
    assert inst.state.typewriter.is_typing


def test_drain_applies_every_queued_batch():
    inst = make()
    inst.submit(empty())
    inst.submit(near())
    inst.submit(near())
    assert inst.drain_detections(10) == 3
    assert inst.detections.empty()
    assert inst.state.presence.is_present
