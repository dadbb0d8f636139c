from __future__ import annotations

"""
Falloff curves for the pointer interaction field.

A curve maps a normalized distance t in [0, 1] (0 at the pointer, 1 at the
interaction radius) to a non-negative weight that does not increase with t.
Inputs outside [0, 1] are clamped.
"""

from typing import Protocol, Sequence

import numpy as np


class FalloffCurve(Protocol):
    def evaluate(self, t: float) -> float: ...


def _clamp01(t: float) -> float:
    return min(max(float(t), 0.0), 1.0)


class LinearFalloff:
    def evaluate(self, t: float) -> float:
        return 1.0 - _clamp01(t)


class SmoothFalloff:
    """Ease-in/ease-out: 1 - smoothstep(t)."""

    def evaluate(self, t: float) -> float:
        t = _clamp01(t)
        return 1.0 - t * t * (3.0 - 2.0 * t)


class SampledCurve:
    """
    Externally authored response curve given as (t, value) samples,
    evaluated by piecewise-linear interpolation.
    """

    def __init__(self, ts: Sequence[float], values: Sequence[float]):
        ts = np.asarray(ts, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if ts.ndim != 1 or ts.shape != values.shape or ts.size < 2:
            raise ValueError("SampledCurve needs matching 1D sample arrays with at least 2 points")
        if not (np.all(np.isfinite(ts)) and np.all(np.isfinite(values))):
            raise ValueError("SampledCurve samples must be finite")
        if np.any(np.diff(ts) <= 0.0):
            raise ValueError("SampledCurve sample positions must be strictly increasing")
        if np.any(np.diff(values) > 0.0) or np.any(values < 0.0):
            raise ValueError("SampledCurve values must be non-negative and non-increasing")
        self.ts = ts
        self.values = values

    def evaluate(self, t: float) -> float:
        return float(np.interp(_clamp01(t), self.ts, self.values))


def make_falloff_curve(name: str) -> FalloffCurve:
    if name == "linear":
        return LinearFalloff()
    if name == "smooth":
        return SmoothFalloff()
    raise ValueError(f"unknown falloff curve: {name!r}")
