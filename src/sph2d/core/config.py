from __future__ import annotations

import math
from dataclasses import dataclass, fields

FALLOFF_CURVES = ("linear", "smooth")


@dataclass(frozen=True)
class SolverConfig:
    """
    Configuration surface of the weakly-compressible 2D SPH solver.

    The simulation reads this once at the start of every step, so a new
    instance (dataclasses.replace) may be swapped in between steps.
    validate() is the only gate: an invalid configuration is a fatal
    precondition violation and the solver refuses to start or continue.
    """

    # Kernel / material
    smoothing_radius: float = 0.4     # h
    rest_density: float = 1.0         # rho0
    particle_mass: float = 1.0        # m
    stiffness: float = 50.0           # k, p = k max(rho - rho0, 0)
    viscosity: float = 0.1            # mu
    max_force_clamp: float = 200.0
    auto_rest_density: bool = True

    # Cohesion band, as fractions q = d / h
    use_cohesion: bool = False
    cohesion_strength: float = 2.0
    cohesion_min_q: float = 0.35
    cohesion_max_q: float = 0.9

    # Soft walls
    use_wall_repulsion: bool = True
    wall_repulsion_strength: float = 40.0
    wall_repulsion_distance: float = 0.3

    # Hard box clamp, applied after external integration
    use_box_bounds: bool = True
    bounds_bounce_factor: float = 1.0
    particle_radius: float = 0.09

    # Stepping / neighbor search
    substeps: int = 1
    use_spatial_hash: bool = True

    # Static density-only boundary samples
    use_ghost_boundary: bool = True
    ghost_spacing: float = 0.25

    # Pointer interaction
    interaction_radius: float = 1.5
    interaction_strength: float = 30.0
    lift_strength: float = 20.0
    interaction_falloff: str = "linear"

    # Worker pool size (None: one per CPU)
    max_workers: int | None = None

    debug: bool = False

    def validate(self) -> None:
        positive = [
            ("smoothing_radius", self.smoothing_radius),
            ("rest_density", self.rest_density),
            ("particle_mass", self.particle_mass),
            ("max_force_clamp", self.max_force_clamp),
            ("interaction_radius", self.interaction_radius),
        ]
        for name, value in positive:
            if not _finite_positive(value):
                raise ValueError(f"{name} must be finite and > 0, got {value!r}")

        non_negative = [
            ("stiffness", self.stiffness),
            ("viscosity", self.viscosity),
            ("cohesion_strength", self.cohesion_strength),
            ("wall_repulsion_strength", self.wall_repulsion_strength),
            ("bounds_bounce_factor", self.bounds_bounce_factor),
            ("particle_radius", self.particle_radius),
            ("interaction_strength", self.interaction_strength),
            ("lift_strength", self.lift_strength),
        ]
        for name, value in non_negative:
            if not (math.isfinite(float(value)) and float(value) >= 0.0):
                raise ValueError(f"{name} must be finite and >= 0, got {value!r}")

        if not 0.0 <= self.cohesion_min_q < self.cohesion_max_q <= 1.0:
            raise ValueError(
                "cohesion band must satisfy 0 <= cohesion_min_q < cohesion_max_q <= 1, "
                f"got [{self.cohesion_min_q!r}, {self.cohesion_max_q!r}]"
            )

        if self.use_wall_repulsion and not _finite_positive(self.wall_repulsion_distance):
            raise ValueError("wall_repulsion_distance must be finite and > 0 when wall repulsion is enabled")

        if self.use_ghost_boundary and not _finite_positive(self.ghost_spacing):
            raise ValueError("ghost_spacing must be finite and > 0 when the ghost boundary is enabled")

        if not float(self.substeps).is_integer() or self.substeps < 1:
            raise ValueError(f"substeps must be an integer >= 1, got {self.substeps!r}")

        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1 or None, got {self.max_workers!r}")

        if self.interaction_falloff not in FALLOFF_CURVES:
            raise ValueError(f"unknown interaction_falloff: {self.interaction_falloff!r}")


def _finite_positive(value: float) -> bool:
    return math.isfinite(float(value)) and float(value) > 0.0


def solver_config_from_scene(scene: dict) -> SolverConfig:
    """
    Build a SolverConfig from the "solver" section of a JSON scene.

    Keys are the SolverConfig field names; missing keys keep their defaults.
    """
    section = dict(scene.get("solver", {}))
    known = {f.name for f in fields(SolverConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"unknown solver keys: {unknown}")

    cfg = SolverConfig(**section)
    cfg.validate()
    return cfg
