from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class KernelConstants:
    """
    Normalization constants of the three 2D SPH kernels for a smoothing radius h.

        poly6      = 4 / (pi h^8)          density estimation
        spiky_grad = -30 / (pi h^5)        pressure gradient
        visc_lap   = 20 / (3 pi h^5)       viscosity Laplacian

    A pure function of h: the solver recomputes it at the start of every step
    and never mutates it mid-step.
    """

    h: float
    poly6: float
    spiky_grad: float
    visc_lap: float


def kernel_constants(h: float) -> KernelConstants:
    h = float(h)
    if not h > 0.0:
        raise ValueError("h must be > 0")

    return KernelConstants(
        h=h,
        poly6=4.0 / (np.pi * h ** 8),
        spiky_grad=-30.0 / (np.pi * h ** 5),
        visc_lap=20.0 / (3.0 * np.pi * h ** 5),
    )


def poly6_W(r2, k: KernelConstants):
    """
    Poly6 weight poly6 * (h^2 - r^2)^3 for r^2 < h^2, zero otherwise.

    Accepts a scalar squared distance or a numpy array of them.
    """
    h2 = k.h * k.h
    if np.ndim(r2) == 0:
        r2 = float(r2)
        if r2 >= h2:
            return 0.0
        term = h2 - r2
        return k.poly6 * term * term * term

    r2 = np.asarray(r2, dtype=np.float64)
    term = np.where(r2 < h2, h2 - r2, 0.0)
    return k.poly6 * term * term * term


def spiky_grad_magnitude(d: float, k: KernelConstants) -> float:
    # signed: spiky_grad is negative, the pressure term flips it back
    return k.spiky_grad * (k.h - d) * (k.h - d)


def visc_laplacian(d: float, k: KernelConstants) -> float:
    return k.visc_lap * (k.h - d)
