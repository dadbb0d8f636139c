from __future__ import annotations

"""
Collaborator protocols consumed by the solver.

The solver never owns particle transforms: it reads a snapshot from a
ParticleStore, hands net forces to a ForceSink, lets an Integrator advance the
world, and only writes back positions/velocities through the box clamp.
"""

from typing import Protocol, Tuple

import numpy as np

from sph2d.interaction.pointer import InteractionMode


class ParticleStore(Protocol):
    def get_positions(self) -> np.ndarray: ...

    def get_velocities(self) -> np.ndarray: ...

    def get_active(self) -> np.ndarray: ...

    def set_position(self, i: int, position: np.ndarray) -> None: ...

    def set_velocity(self, i: int, velocity: np.ndarray) -> None: ...


class ForceSink(Protocol):
    def apply_force(self, i: int, force: np.ndarray) -> None: ...


class Integrator(Protocol):
    def advance(self, dt: float) -> None: ...


class BoundsProvider(Protocol):
    def get_center_and_half_extents(self) -> Tuple[np.ndarray, np.ndarray]: ...


class PointerProvider(Protocol):
    def get_pointer_world_position(self) -> np.ndarray: ...

    def get_active_mode(self) -> InteractionMode: ...


class PauseSignalSource(Protocol):
    def consume_toggle(self) -> bool: ...

    def consume_step_request(self) -> bool: ...


DEFAULT_CENTER = np.array([0.0, 0.0], dtype=np.float64)
DEFAULT_HALF_EXTENTS = np.array([3.0, 1.5], dtype=np.float64)


def read_bounds(provider: BoundsProvider | None) -> Tuple[np.ndarray, np.ndarray]:
    """Current container bounds, or the default region when there is no provider."""
    if provider is None:
        return DEFAULT_CENTER.copy(), DEFAULT_HALF_EXTENTS.copy()

    center, half = provider.get_center_and_half_extents()
    return np.asarray(center, dtype=np.float64), np.asarray(half, dtype=np.float64)
