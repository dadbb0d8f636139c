from __future__ import annotations

"""
Pairwise SPH force accumulation.

For every unordered active pair (i, j), i < j, with predicted separation d in
(0, h) the pressure, viscosity and optional cohesion terms are summed, the sum
is clamped in magnitude and then added to slot i and subtracted from slot j of
a shared ForceBuffer.

Concurrency:
- The phase fans out over primary indices i. A worker for i also writes slot j,
  and several primaries can target the same j at once, so every write goes
  through ForceBuffer.add(), which holds that slot's lock for the in-place add
  only.
- Neighbor candidates are symmetric (j is a candidate of i iff i is a
  candidate of j), so handling only j > i visits each pair exactly once.
"""

import threading

import numpy as np

from sph2d.core.config import SolverConfig
from sph2d.core.state import ParticleState
from sph2d.neighbors.spatial_hash import SpatialHash
from sph2d.parallel.pool import WorkerPool
from sph2d.sph.cohesion import cohesion_pair_force
from sph2d.sph.kernels import KernelConstants
from sph2d.sph.pressure import pressure_pair_force
from sph2d.sph.viscosity import viscosity_pair_force


class ForceBuffer:
    """Fixed arena of per-particle force slots, each guarded by its own lock."""

    def __init__(self, n: int):
        self.f = np.zeros((n, 2), dtype=np.float64)
        self._locks = [threading.Lock() for _ in range(n)]

    @property
    def n(self) -> int:
        return int(self.f.shape[0])

    def zero(self) -> None:
        self.f.fill(0.0)

    def add(self, i: int, force: np.ndarray) -> None:
        with self._locks[i]:
            self.f[i] += force

    def add_field(self, forces: np.ndarray) -> None:
        """Add a whole (N, 2) field. Only called between barriers."""
        self.f += forces

    def emit(self, sink, active: np.ndarray) -> None:
        # one call per active particle, with its net force
        for i in np.flatnonzero(active):
            sink.apply_force(int(i), self.f[i].copy())


def clamp_magnitude(f: np.ndarray, max_magnitude: float) -> np.ndarray:
    mag = float(np.hypot(f[0], f[1]))
    if mag > max_magnitude:
        return f * (float(max_magnitude) / mag)
    return f


def pair_force(
    state: ParticleState,
    i: int,
    j: int,
    k: KernelConstants,
    cfg: SolverConfig,
) -> np.ndarray | None:
    """
    Clamped net force on i from j, or None when the pair does not interact
    (coincident predicted positions or separation >= h).

    The force on j is the negation of the returned vector.
    """
    delta = state.pred[i] - state.pred[j]
    d = float(np.hypot(delta[0], delta[1]))
    if d <= 0.0 or d >= k.h:
        return None

    direction = delta / d

    f = pressure_pair_force(
        direction,
        d,
        p_i=float(state.p[i]),
        p_j=float(state.p[j]),
        rho_i=float(state.rho[i]),
        rho_j=float(state.rho[j]),
        mass=cfg.particle_mass,
        k=k,
    )
    f = f + viscosity_pair_force(
        state.vel[i],
        state.vel[j],
        d,
        rho_j=float(state.rho[j]),
        mass=cfg.particle_mass,
        mu=cfg.viscosity,
        k=k,
    )

    if cfg.use_cohesion:
        f = f + cohesion_pair_force(
            direction,
            d,
            h=k.h,
            strength=cfg.cohesion_strength,
            min_q=cfg.cohesion_min_q,
            max_q=cfg.cohesion_max_q,
        )

    return clamp_magnitude(f, cfg.max_force_clamp)


def accumulate_pair_forces(
    state: ParticleState,
    neighbor_search: SpatialHash,
    k: KernelConstants,
    cfg: SolverConfig,
    buffer: ForceBuffer,
    pool: WorkerPool | None = None,
) -> None:
    """
    Zero the buffer and accumulate every pairwise force into it.

    Requires rho and p of all particles to be final (pressure barrier passed).
    """
    buffer.zero()
    active = state.active

    def forces_of(i: int) -> None:
        if not active[i]:
            return

        for j in neighbor_search.query(state.pred[i]):
            if j <= i:
                continue

            f = pair_force(state, i, j, k, cfg)
            if f is None:
                continue

            buffer.add(i, f)
            buffer.add(j, -f)

    if pool is None:
        for i in range(state.n):
            forces_of(i)
    else:
        pool.parallel_for(state.n, forces_of)
