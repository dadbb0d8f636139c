from __future__ import annotations

import numpy as np

from sph2d.sph.kernels import KernelConstants, spiky_grad_magnitude

DENOM_EPS = 1e-6


def pressure_state_equation_linear(rho: np.ndarray, rest_density: float, stiffness: float) -> np.ndarray:
    """
    One-sided linear state equation of the weakly-compressible model:

        p_i = k max(rho_i - rho0, 0)

    Under-dense regions get zero pressure rather than tension.
    """
    rest_density = float(rest_density)
    stiffness = float(stiffness)
    return stiffness * np.maximum(rho - rest_density, 0.0)


def pressure_pair_force(
    direction: np.ndarray,
    d: float,
    p_i: float,
    p_j: float,
    rho_i: float,
    rho_j: float,
    mass: float,
    k: KernelConstants,
) -> np.ndarray:
    """
    Symmetric spiky-gradient pressure force on i from j:

        f = -m ((p_i + p_j) / (2 max(rho_i rho_j, eps))) spiky_grad (h - d)^2 dir

    dir = (x_i - x_j) / d. The scalar factor is symmetric in (i, j), so
    swapping the pair only flips the direction.
    """
    scalar = (p_i + p_j) / (2.0 * max(rho_i * rho_j, DENOM_EPS))
    return -float(mass) * scalar * spiky_grad_magnitude(d, k) * direction
