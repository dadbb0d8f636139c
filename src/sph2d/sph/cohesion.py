from __future__ import annotations

import numpy as np


def cohesion_falloff(q: float, min_q: float, max_q: float) -> float:
    """
    Band weight for a normalized separation q = d / h.

    Zero outside [min_q, max_q]. Inside, with t = (q - min_q) / (max_q - min_q),
    the weight is (1 - t)^2: strongest just outside the repulsive core and
    fading towards the outer edge of the band.
    """
    if q < min_q or q > max_q:
        return 0.0
    t = (q - min_q) / (max_q - min_q)
    return (1.0 - t) * (1.0 - t)


def cohesion_pair_force(
    direction: np.ndarray,
    d: float,
    h: float,
    strength: float,
    min_q: float,
    max_q: float,
) -> np.ndarray:
    """Surface-tension-like attraction on i towards j (dir points from j to i)."""
    w = cohesion_falloff(d / h, min_q, max_q)
    if w == 0.0:
        return np.zeros((2,), dtype=np.float64)
    return -direction * float(strength) * w
