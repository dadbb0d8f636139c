from __future__ import annotations

import numpy as np


def wall_repulsion_forces(
    pos: np.ndarray,
    active: np.ndarray,
    center: np.ndarray,
    half_extents: np.ndarray,
    strength: float,
    distance: float,
) -> np.ndarray:
    """
    Soft wall repulsion from the four container edges.

    For each edge, dist is the distance from the particle to that edge
    (negative once the particle is outside). Within `distance` of an edge the
    particle is pushed along the inward normal with magnitude

        strength (1 - dist / distance)

    Contributions of the four edges add up. Inactive slots get zero.
    """
    strength = float(strength)
    distance = float(distance)

    local = pos - np.asarray(center, dtype=np.float64)[None, :]
    hw, hh = float(half_extents[0]), float(half_extents[1])

    forces = np.zeros_like(pos, dtype=np.float64)

    # (axis, distance to edge, inward normal sign)
    edges = [
        (0, local[:, 0] + hw, 1.0),   # left
        (0, hw - local[:, 0], -1.0),  # right
        (1, local[:, 1] + hh, 1.0),   # bottom
        (1, hh - local[:, 1], -1.0),  # top
    ]
    for axis, dist, normal in edges:
        near = dist < distance
        forces[near, axis] += normal * strength * (1.0 - dist[near] / distance)

    forces[~active] = 0.0
    return forces
