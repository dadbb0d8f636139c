from __future__ import annotations

"""
Observability: per-step diagnostics ("vital signs") for a fluid run.

What this module does:
- Defines a structured `StepDiagnostics` snapshot for one simulation step.
- Computes statistics for velocity, density, pressure and neighbor counts.

How it works:
- Statistics cover ACTIVE particles only; removed slots are excluded.
- Neighbor counts re-filter the candidate sets of the step's neighbor search
  by the true predicted distance (< h, self excluded), i.e. the particles that
  actually contributed to density and pairwise forces.

Constraints:
- Strictly read-only: the particle state is never modified here.
"""

from dataclasses import dataclass

import numpy as np

from sph2d.core.state import ParticleState


@dataclass(frozen=True)
class StepDiagnostics:
    step: int
    dt: float
    n_active: int
    n_ghost: int

    v_max: float

    rho_min: float
    rho_mean: float
    rho_max: float

    rho_rel_err_mean: float

    p_min: float
    p_mean: float
    p_max: float

    neigh_min: int
    neigh_mean: float
    neigh_max: int


def count_neighbors(state: ParticleState, neighbor_search, h: float) -> np.ndarray:
    ids = state.active_indices
    h2 = float(h) * float(h)
    counts = np.zeros((ids.size,), dtype=np.int64)

    for k, i in enumerate(ids):
        pi = state.pred[i]
        cand = np.asarray(neighbor_search.query(pi), dtype=np.int64)
        if cand.size == 0:
            continue
        d = state.pred[cand] - pi[None, :]
        r2 = np.einsum("ij,ij->i", d, d)
        counts[k] = int(np.count_nonzero((r2 < h2) & (cand != i)))

    return counts


def compute_step_diagnostics(
    step: int,
    dt: float,
    state: ParticleState,
    rest_density: float,
    neighbor_search,
    h: float,
    n_ghost: int = 0,
) -> StepDiagnostics:
    """
    Compute diagnostics for a finished step without mutating the state.

    Args:
        step: 1-based step index for logging.
        dt: full step duration (all substeps).
        state: solver state after the last substep.
        rest_density: rest density in effect for the step.
        neighbor_search: neighbor search of the last substep.
        h: smoothing radius of the step.
        n_ghost: number of ghost boundary samples in use.
    """
    ids = state.active_indices
    if ids.size == 0:
        # nothing to reduce over
        zeros = (0.0, 0.0, 0.0)
        rho_stats = p_stats = zeros
        neigh_stats = (0, 0.0, 0)
        v_max = 0.0
        rel_err = 0.0
    else:
        rho = state.rho[ids]
        rho_stats = _min_mean_max(rho)
        p_stats = _min_mean_max(state.p[ids])
        counts = count_neighbors(state, neighbor_search, h)
        neigh_stats = (int(counts.min()), float(counts.mean()), int(counts.max()))
        v_max = float(np.hypot(state.vel[ids, 0], state.vel[ids, 1]).max())
        rel_err = float(np.mean(rho / float(rest_density) - 1.0))

    return StepDiagnostics(
        step=int(step),
        dt=float(dt),
        n_active=int(ids.size),
        n_ghost=int(n_ghost),
        v_max=v_max,
        rho_min=rho_stats[0],
        rho_mean=rho_stats[1],
        rho_max=rho_stats[2],
        rho_rel_err_mean=rel_err,
        p_min=p_stats[0],
        p_mean=p_stats[1],
        p_max=p_stats[2],
        neigh_min=neigh_stats[0],
        neigh_mean=neigh_stats[1],
        neigh_max=neigh_stats[2],
    )


def _min_mean_max(values: np.ndarray) -> tuple[float, float, float]:
    return float(values.min()), float(values.mean()), float(values.max())


def format_diagnostics(diag: StepDiagnostics) -> str:
    return (
        f"[STEP {diag.step:04d}] dt={diag.dt:.3e} "
        f"active={diag.n_active} ghosts={diag.n_ghost} "
        f"|v|max={diag.v_max:.3e} "
        f"rho(min/avg/max)={diag.rho_min:.3f}/{diag.rho_mean:.3f}/{diag.rho_max:.3f} "
        f"err% (avg)={100.0 * diag.rho_rel_err_mean:.2f} "
        f"p(min/avg/max)={diag.p_min:.2f}/{diag.p_mean:.2f}/{diag.p_max:.2f} "
        f"neigh(min/avg/max)={diag.neigh_min}/{diag.neigh_mean:.1f}/{diag.neigh_max}"
    )
