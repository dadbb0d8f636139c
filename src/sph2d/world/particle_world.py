from __future__ import annotations

"""
Minimal in-memory particle world used to drive the solver outside a host
engine (command line runs, tests).

It plays three collaborator roles at once:
- ParticleStore: authoritative positions/velocities/active flags,
- ForceSink: accumulates forces applied during a substep,
- Integrator: semi-implicit Euler with gravity and linear damping.

Not a rigid-body engine: no collisions, no rotation.
"""

import numpy as np


class ParticleWorld:
    def __init__(
        self,
        positions: np.ndarray,
        velocities: np.ndarray | None = None,
        mass: float = 1.0,
        gravity=(0.0, -9.81),
        damping: float = 1.0,
        gravity_transition_speed: float = 10.0,
    ):
        positions = np.asarray(positions, dtype=np.float64)
        if positions.ndim != 2 or positions.shape[1] != 2:
            raise ValueError(f"positions must have shape (N, 2), got {positions.shape}")
        n = positions.shape[0]

        if velocities is None:
            velocities = np.zeros((n, 2), dtype=np.float64)
        velocities = np.asarray(velocities, dtype=np.float64)
        if velocities.shape != (n, 2):
            raise ValueError(f"velocities shape {velocities.shape} != ({n}, 2)")

        if not float(mass) > 0.0:
            raise ValueError("mass must be > 0")
        if float(damping) < 0.0:
            raise ValueError("damping must be >= 0")

        self.pos = positions.copy()
        self.vel = velocities.copy()
        self.active = np.ones((n,), dtype=np.bool_)
        self.forces = np.zeros((n, 2), dtype=np.float64)

        self.mass = float(mass)
        self.damping = float(damping)
        self.gravity_target = np.asarray(gravity, dtype=np.float64)
        self.gravity = self.gravity_target.copy()
        self.gravity_transition_speed = float(gravity_transition_speed)

        self.time = 0.0
        self.advance_calls = 0

    @property
    def n(self) -> int:
        return int(self.pos.shape[0])

    # --- ParticleStore
    def get_positions(self) -> np.ndarray:
        return self.pos

    def get_velocities(self) -> np.ndarray:
        return self.vel

    def get_active(self) -> np.ndarray:
        return self.active

    def set_position(self, i: int, position: np.ndarray) -> None:
        self.pos[i] = position

    def set_velocity(self, i: int, velocity: np.ndarray) -> None:
        self.vel[i] = velocity

    def remove(self, i: int) -> None:
        """Deactivate a particle; its slot is kept but never simulated again."""
        self.active[i] = False
        self.vel[i] = 0.0
        self.forces[i] = 0.0

    # --- ForceSink
    def apply_force(self, i: int, force: np.ndarray) -> None:
        if self.active[i]:
            self.forces[i] += force

    # --- Integrator
    def advance(self, dt: float) -> None:
        """
        Semi-implicit Euler:
            v += dt (F / m + g)
            v *= 1 / (1 + damping dt)
            x += dt v
        Applied forces are consumed.
        """
        dt = float(dt)
        ids = np.flatnonzero(self.active)

        acc = self.forces[ids] / self.mass + self.gravity[None, :]
        self.vel[ids] += dt * acc
        self.vel[ids] *= 1.0 / (1.0 + self.damping * dt)
        self.pos[ids] += dt * self.vel[ids]

        self.forces.fill(0.0)
        self.time += dt
        self.advance_calls += 1

    # --- frame bookkeeping
    def set_gravity(self, gravity) -> None:
        self.gravity_target = np.asarray(gravity, dtype=np.float64)

    def update_gravity(self, frame_dt: float) -> None:
        """Move gravity towards its target with t = 1 - exp(-speed dt)."""
        if np.allclose(self.gravity, self.gravity_target):
            self.gravity = self.gravity_target.copy()
            return
        t = 1.0 - np.exp(-self.gravity_transition_speed * float(frame_dt))
        self.gravity = self.gravity + (self.gravity_target - self.gravity) * t
