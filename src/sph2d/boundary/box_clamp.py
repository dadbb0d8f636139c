from __future__ import annotations

import numpy as np


def clamp_to_box(
    store,
    center: np.ndarray,
    half_extents: np.ndarray,
    particle_radius: float,
    bounce: float,
) -> int:
    """
    Hard axis-aligned box constraint, applied after external integration.

    For every active particle whose local coordinate on an axis exceeds
    half_extent - radius, that axis is clamped onto the limit and the matching
    velocity component becomes -bounce * v. Corrected values are written back
    to the store; untouched particles are not written.

    Returns the number of corrected particles.
    """
    center = np.asarray(center, dtype=np.float64)
    # a box narrower than one particle collapses onto its center line
    limit = np.maximum(np.asarray(half_extents, dtype=np.float64) - float(particle_radius), 0.0)
    bounce = float(bounce)

    positions = np.asarray(store.get_positions(), dtype=np.float64)
    velocities = np.asarray(store.get_velocities(), dtype=np.float64)
    active = np.asarray(store.get_active(), dtype=np.bool_)

    local = positions - center[None, :]
    outside = (np.abs(local) > limit[None, :]) & active[:, None]

    changed = 0
    for i in np.flatnonzero(outside.any(axis=1)):
        p = local[i].copy()
        v = velocities[i].copy()
        for axis in (0, 1):
            if outside[i, axis]:
                p[axis] = limit[axis] * np.sign(p[axis])
                v[axis] = -v[axis] * bounce

        store.set_position(int(i), center + p)
        store.set_velocity(int(i), v)
        changed += 1

    return changed
