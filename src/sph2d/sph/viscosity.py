from __future__ import annotations

import numpy as np

from sph2d.sph.kernels import KernelConstants, visc_laplacian
from sph2d.sph.pressure import DENOM_EPS


def viscosity_pair_force(
    v_i: np.ndarray,
    v_j: np.ndarray,
    d: float,
    rho_j: float,
    mass: float,
    mu: float,
    k: KernelConstants,
) -> np.ndarray:
    """
    Explicit viscosity force on i from j using the viscosity-kernel Laplacian:

        f = mu m (v_j - v_i) visc_lap (h - d) / max(rho_j, eps)

    The same vector is subtracted from j by the accumulator, which keeps the
    pair momentum-conserving even though only rho_j enters the denominator.
    """
    lap = visc_laplacian(d, k)
    return float(mu) * float(mass) * (v_j - v_i) * lap / max(rho_j, DENOM_EPS)
