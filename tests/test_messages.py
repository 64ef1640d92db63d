import random

import pytest

from whisperwood_eye.messages import MESSAGES, MessageGenerator, glitch


class ScriptedRng:
    """randint() answers from a fixed script; choice() picks the first item."""

    def __init__(self, ints):
        self.ints = list(ints)

    def randint(self, lo, hi):
        v = self.ints.pop(0)
        assert lo <= v <= hi
        return v

    def choice(self, seq):
        return seq[0]


def _is_subsequence(needle: str, haystack: str) -> bool:
    it = iter(haystack)
    return all(ch in it for ch in needle)


def test_glitch_with_forced_runs():
    # run 2 -> 'X', run 3 -> 'Y', run 4 never completes
    rng = ScriptedRng([2, ord("X"), 3, ord("Y"), 4])
    out = glitch("hi there", rng)
    assert out == "hiX thYere"
    assert out[:2] + out[3:6] + out[7:] == "hi there"
    assert not rng.ints


def test_glitch_preserves_template_order():
    for seed in range(50):
        rng = random.Random(seed)
        template = rng.choice(MESSAGES)
        out = glitch(template, rng)
        assert len(out) >= len(template)
        assert _is_subsequence(template, out)
        # at most one injection per two template characters
        assert len(out) - len(template) <= len(template) // 2


def test_glitch_injects_printable_ascii_only():
    rng = random.Random(1)
    template = "a" * 200
    out = glitch(template, rng)
    injected = [ch for ch in out if ch != "a"]
    assert injected
    assert all(33 <= ord(ch) <= 125 for ch in injected)


def test_glitch_empty_template():
    assert glitch("", random.Random(0)) == ""


def test_generator_picks_from_pool_and_glitches_fresh():
    gen = MessageGenerator(("the forest listens",), random.Random(5))
    template, rendered = gen.generate()
    assert template == "the forest listens"
    assert _is_subsequence(template, rendered)
    assert len(rendered) > len(template)


def test_generator_is_reproducible_with_seed():
    a = MessageGenerator(rng=random.Random(42))
    b = MessageGenerator(rng=random.Random(42))
    assert [a.generate() for _ in range(5)] == [b.generate() for _ in range(5)]


def test_generator_rejects_empty_pool():
    with pytest.raises(ValueError):
        MessageGenerator(())


def test_pool_is_ascii():
    assert 40 <= len(MESSAGES) <= 50
    for m in MESSAGES:
        assert all(ord(ch) < 128 for ch in m), m
