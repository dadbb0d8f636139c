from __future__ import annotations

import numpy as np


def ghost_spacing_for(ghost_spacing: float, h: float) -> float:
    """Effective perimeter spacing: never denser than half a smoothing radius."""
    return max(float(ghost_spacing), 0.5 * float(h))


def generate_ghost_particles(
    center: np.ndarray,
    half_extents: np.ndarray,
    spacing: float,
) -> np.ndarray:
    """
    Sample the container perimeter with static ghost particles.

    Bottom and top rows run the full width starting at the left corner; left
    and right columns skip the corner rows so corners are not doubled.
    Positions are world space (center + local offset).
    """
    spacing = float(spacing)
    if not spacing > 0.0:
        raise ValueError("spacing must be > 0")

    hw, hh = float(half_extents[0]), float(half_extents[1])

    xs = np.arange(-hw, hw + 1e-4, spacing, dtype=np.float64)
    ys = np.arange(-hh + spacing, hh - spacing + 1e-4, spacing, dtype=np.float64)

    pts = [
        np.stack([xs, np.full_like(xs, -hh)], axis=1),
        np.stack([xs, np.full_like(xs, hh)], axis=1),
        np.stack([np.full_like(ys, -hw), ys], axis=1),
        np.stack([np.full_like(ys, hw), ys], axis=1),
    ]

    local = np.concatenate(pts, axis=0)
    return local + np.asarray(center, dtype=np.float64)[None, :]


class GhostBoundary:
    """
    Cached ghost samples for the current container.

    refresh() regenerates the whole set whenever the container center, its
    half extents or the effective spacing differ from the cached key; the
    array is never patched in place.
    """

    def __init__(self):
        self.positions = np.zeros((0, 2), dtype=np.float64)
        self.generation = 0
        self._key: tuple[float, float, float, float, float] | None = None

    @property
    def count(self) -> int:
        return int(self.positions.shape[0])

    def refresh(self, center: np.ndarray, half_extents: np.ndarray, ghost_spacing: float, h: float) -> bool:
        spacing = ghost_spacing_for(ghost_spacing, h)
        key = (
            float(center[0]),
            float(center[1]),
            float(half_extents[0]),
            float(half_extents[1]),
            spacing,
        )
        if key == self._key:
            return False

        self.positions = generate_ghost_particles(center, half_extents, spacing)
        self.positions.setflags(write=False)
        self._key = key
        self.generation += 1
        return True

    def clear(self) -> None:
        self.positions = np.zeros((0, 2), dtype=np.float64)
        self._key = None
