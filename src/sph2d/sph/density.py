from __future__ import annotations

import numpy as np

from sph2d.core.state import ParticleState
from sph2d.neighbors.spatial_hash import SpatialHash
from sph2d.parallel.pool import WorkerPool
from sph2d.sph.kernels import KernelConstants, poly6_W

DENSITY_FLOOR_FRACTION = 0.5


def compute_density_summation(
    state: ParticleState,
    neighbor_search: SpatialHash,
    k: KernelConstants,
    mass: float,
    rest_density: float,
    ghosts: np.ndarray | None = None,
    pool: WorkerPool | None = None,
) -> np.ndarray:
    """
    Density reconstruction via poly6 summation on predicted positions:

        rho_i = sum_j m poly6 (h^2 - r_ij^2)^3 + sum_g m poly6 (h^2 - r_ig^2)^3

    j runs over active fluid candidates (self included), g over all ghost
    boundary samples. The result is floored at 0.5 rest_density so that
    isolated particles and thin surface layers never produce vanishing
    denominators downstream.

    Inactive slots get rest_density.

    Each worker writes only rho[i], so the fan-out needs no locking.
    """
    n = state.n
    mass = float(mass)
    h2 = k.h * k.h
    floor = DENSITY_FLOOR_FRACTION * float(rest_density)

    rho = np.full((n,), float(rest_density), dtype=np.float64)
    pred = state.pred
    active = state.active
    has_ghosts = ghosts is not None and ghosts.shape[0] > 0

    def density_of(i: int) -> None:
        if not active[i]:
            return

        pi = pred[i]
        rho_i = 0.0

        for j in neighbor_search.query(pi):
            d = pi - pred[j]
            r2 = float(d[0] * d[0] + d[1] * d[1])
            if r2 >= h2:
                continue
            rho_i += mass * poly6_W(r2, k)

        if has_ghosts:
            dg = ghosts - pi[None, :]
            r2g = np.einsum("ij,ij->i", dg, dg)
            rho_i += mass * float(np.sum(poly6_W(r2g, k)))

        rho[i] = max(rho_i, floor)

    if pool is None:
        for i in range(n):
            density_of(i)
    else:
        pool.parallel_for(n, density_of)

    return rho


def calibrate_rest_density(
    positions: np.ndarray,
    active: np.ndarray,
    k: KernelConstants,
    mass: float,
    fallback: float,
) -> float:
    """
    Average initial fluid density over all active particles.

    Uses the current positions, a full pairwise sum (self included) and no
    floor or ghost contribution, so the measured value reflects the spawned
    packing only. With no active particles the fallback is returned.
    """
    ids = np.flatnonzero(active)
    if ids.size == 0:
        return float(fallback)

    pts = np.asarray(positions, dtype=np.float64)[ids]
    total = 0.0
    # one row at a time keeps memory O(N)
    for pi in pts:
        d = pts - pi[None, :]
        r2 = np.einsum("ij,ij->i", d, d)
        total += float(np.sum(poly6_W(r2, k)))

    return float(mass) * total / ids.size
