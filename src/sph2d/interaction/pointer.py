from __future__ import annotations

from enum import Enum

import numpy as np

from sph2d.interaction.curves import FalloffCurve, LinearFalloff

LIFT_AXIS = np.array([0.0, 1.0], dtype=np.float64)


class InteractionMode(Enum):
    NONE = "none"
    ATTRACT = "attract"
    REPEL = "repel"
    LIFT = "lift"


class InteractionForceModule:
    """
    Pointer-driven force field.

    Every active particle within `radius` of the target gets a weight
    w = curve.evaluate(d / radius). ATTRACT pulls it towards the target,
    REPEL pushes it away (both scaled by `strength`), LIFT pushes it along +y
    (scaled by `lift_strength`). Radial and lift modes never combine: the mode
    is a single value. Outside the radius the contribution is zero.
    """

    def __init__(
        self,
        radius: float,
        strength: float,
        lift_strength: float,
        curve: FalloffCurve | None = None,
    ):
        self.radius = float(radius)
        if not self.radius > 0.0:
            raise ValueError("radius must be > 0")
        self.strength = float(strength)
        self.lift_strength = float(lift_strength)
        self.curve = curve if curve is not None else LinearFalloff()

    def forces(
        self,
        pos: np.ndarray,
        active: np.ndarray,
        target: np.ndarray,
        mode: InteractionMode,
    ) -> np.ndarray:
        out = np.zeros_like(pos, dtype=np.float64)
        if mode is InteractionMode.NONE:
            return out

        target = np.asarray(target, dtype=np.float64)
        to_target = target[None, :] - pos
        dist = np.hypot(to_target[:, 0], to_target[:, 1])

        inside = np.flatnonzero(active & (dist <= self.radius))
        for i in inside:
            w = self.curve.evaluate(dist[i] / self.radius)

            if mode is InteractionMode.LIFT:
                out[i] = self.lift_strength * w * LIFT_AXIS
                continue

            if dist[i] <= 0.0:
                continue
            direction = to_target[i] / dist[i]
            sign = 1.0 if mode is InteractionMode.ATTRACT else -1.0
            out[i] = sign * self.strength * w * direction

        return out


def interaction_mode_from_name(name: str) -> InteractionMode:
    try:
        return InteractionMode(str(name).lower())
    except ValueError:
        raise ValueError(f"unknown interaction mode: {name!r}") from None
