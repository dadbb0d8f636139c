from __future__ import annotations

from dataclasses import dataclass
import numpy as np


@dataclass(slots=True)
class ParticleState:
    """
    Solver-side particle storage, one slot per spawned particle.

    pos/vel are a snapshot of the external store taken at the start of each
    substep. pred holds the explicit Euler look-ahead used for neighbor
    search, density and pairwise forces. rho/p are owned by the solver and
    read by visualization through the simulation accessors.

    Removed particles keep their slot with active=False; every phase skips
    them and their rho/p stay at (rest density, 0).
    """

    pos: np.ndarray          # (N, 2)
    vel: np.ndarray          # (N, 2)
    pred: np.ndarray         # (N, 2)

    rho: np.ndarray          # (N,)
    p: np.ndarray            # (N,)

    active: np.ndarray       # (N,) bool

    @property
    def n(self) -> int:
        return int(self.pos.shape[0])

    @property
    def active_indices(self) -> np.ndarray:
        return np.flatnonzero(self.active)

    @property
    def n_active(self) -> int:
        return int(np.count_nonzero(self.active))

    @classmethod
    def empty(cls, n: int, rest_density: float) -> "ParticleState":
        return cls(
            pos=np.zeros((n, 2), dtype=np.float64),
            vel=np.zeros((n, 2), dtype=np.float64),
            pred=np.zeros((n, 2), dtype=np.float64),
            rho=np.full((n,), float(rest_density), dtype=np.float64),
            p=np.zeros((n,), dtype=np.float64),
            active=np.ones((n,), dtype=np.bool_),
        )

    def load_snapshot(self, positions: np.ndarray, velocities: np.ndarray, active: np.ndarray) -> None:
        self.pos[:] = positions
        self.vel[:] = velocities
        self.active[:] = active

    def predict(self, dt: float) -> None:
        # p + v dt; inactive slots are never read through pred
        self.pred[:] = self.pos + float(dt) * self.vel

    def validate(self) -> None:
        n = self.n
        if self.pos.shape != (n, 2):
            raise ValueError(f"pos shape {self.pos.shape} != (N, 2) = ({n},2)")

        for name, arr, shape in [
            ("vel", self.vel, (n, 2)),
            ("pred", self.pred, (n, 2)),
            ("rho", self.rho, (n,)),
            ("p", self.p, (n,)),
            ("active", self.active, (n,)),
        ]:
            if arr.shape != shape:
                raise ValueError(f"{name} shape {arr.shape} != {shape}")

        if self.active.dtype != np.bool_:
            raise ValueError("active must be a bool array")

        if not np.isfinite(self.pos[self.active]).all():
            raise ValueError("pos contains NaN/Inf")
