from __future__ import annotations

import time
from dataclasses import dataclass


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def clamp_int(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def map_range(v: float, in_lo: float, in_hi: float, out_lo: float, out_hi: float) -> float:
    """Linear re-map of `v` from [in_lo, in_hi] to [out_lo, out_hi] (no clamping)."""
    if in_hi == in_lo:
        return out_lo
    return out_lo + (v - in_lo) * (out_hi - out_lo) / (in_hi - in_lo)


@dataclass(frozen=True)
class Timer:
    """A span of wall-clock time started at `started_at_ms` lasting `duration_ms`."""

    started_at_ms: float
    duration_ms: float

    def elapsed(self, now_ms: float) -> float:
        return now_ms - self.started_at_ms

    def progress(self, now_ms: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return clamp(self.elapsed(now_ms) / self.duration_ms, 0.0, 1.0)

    def done(self, now_ms: float) -> bool:
        return self.elapsed(now_ms) >= self.duration_ms


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0
