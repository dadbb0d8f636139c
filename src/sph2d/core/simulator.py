from __future__ import annotations

import numpy as np

from sph2d.boundary.box_clamp import clamp_to_box
from sph2d.boundary.ghosts import GhostBoundary
from sph2d.boundary.walls import wall_repulsion_forces
from sph2d.core.config import SolverConfig
from sph2d.core.interfaces import (
    BoundsProvider,
    ForceSink,
    Integrator,
    ParticleStore,
    PointerProvider,
    read_bounds,
)
from sph2d.core.state import ParticleState
from sph2d.interaction.curves import FalloffCurve, make_falloff_curve
from sph2d.interaction.pointer import InteractionForceModule, InteractionMode
from sph2d.neighbors.spatial_hash import make_neighbor_search
from sph2d.parallel.pool import WorkerPool
from sph2d.sph.density import compute_density_summation
from sph2d.sph.forces import ForceBuffer, accumulate_pair_forces
from sph2d.sph.kernels import KernelConstants, kernel_constants
from sph2d.sph.pressure import pressure_state_equation_linear


class SimulationStepper:
    """
    Advances the fluid by one fixed timestep, optionally split into equal
    substeps.

    Per substep, strictly in this order:
      1) snapshot positions/velocities/active flags from the store
      2) predicted positions x + v dt_sub
      3) neighbor search rebuilt on the predicted positions
      4) density (fluid + ghost), barrier
      5) pressure from the one-sided state equation, barrier
      6) pairwise pressure/viscosity/cohesion forces, barrier
      7) wall repulsion and pointer forces added to the same buffer
      8) net forces handed to the sink, integrator advanced by dt_sub
      9) optional hard box clamp written back to the store

    Configuration and container bounds are read once at the start of each
    step. Nothing neighbor-related survives from one substep to the next.
    """

    def __init__(
        self,
        config: SolverConfig,
        store: ParticleStore,
        sink: ForceSink,
        integrator: Integrator,
        bounds_provider: BoundsProvider | None = None,
        pointer: PointerProvider | None = None,
        pool: WorkerPool | None = None,
        falloff: FalloffCurve | None = None,
    ):
        config.validate()
        self.config = config
        self.store = store
        self.sink = sink
        self.integrator = integrator
        self.bounds_provider = bounds_provider
        self.pointer = pointer
        # overrides cfg.interaction_falloff when set
        self.falloff = falloff

        self._owns_pool = pool is None
        self.pool = pool if pool is not None else WorkerPool(config.max_workers)

        self.state: ParticleState | None = None
        self.buffer: ForceBuffer | None = None
        self.ghosts = GhostBoundary()
        self.neighbor_search = None
        self.kernel: KernelConstants | None = None
        self.steps_done = 0

    def ensure_capacity(self, n: int) -> ParticleState:
        if self.state is None or self.state.n != n:
            self.state = ParticleState.empty(n, rest_density=self.config.rest_density)
            self.buffer = ForceBuffer(n)
        return self.state

    def refresh_ghosts(self, center: np.ndarray, half_extents: np.ndarray) -> np.ndarray | None:
        cfg = self.config
        if not cfg.use_ghost_boundary:
            self.ghosts.clear()
            return None
        self.ghosts.refresh(center, half_extents, cfg.ghost_spacing, cfg.smoothing_radius)
        return self.ghosts.positions

    def perform_step(self, dt: float, substeps: int | None = None) -> int:
        dt = float(dt)
        if not dt > 0.0:
            raise ValueError(f"dt must be > 0, got {dt!r}")

        cfg = self.config
        cfg.validate()

        n_sub = int(cfg.substeps if substeps is None else substeps)
        if n_sub < 1:
            raise ValueError(f"substeps must be >= 1, got {n_sub!r}")

        k = kernel_constants(cfg.smoothing_radius)
        self.kernel = k

        center, half = read_bounds(self.bounds_provider)
        ghosts = self.refresh_ghosts(center, half)

        interaction = InteractionForceModule(
            radius=cfg.interaction_radius,
            strength=cfg.interaction_strength,
            lift_strength=cfg.lift_strength,
            curve=self.falloff if self.falloff is not None else make_falloff_curve(cfg.interaction_falloff),
        )

        dt_sub = dt / n_sub
        for _ in range(n_sub):
            self._substep(cfg, k, center, half, ghosts, interaction, dt_sub)

        self.steps_done += 1

        if cfg.debug:
            state = self.state
            ids = state.active_indices
            rho = state.rho[ids] if ids.size else np.zeros((1,))
            p = state.p[ids] if ids.size else np.zeros((1,))
            print(
                f"[SPH2D] step={self.steps_done} dt={dt:.3e} substeps={n_sub} "
                f"active={ids.size} ghosts={self.ghosts.count} "
                f"rho(min/max)={float(rho.min()):.3f}/{float(rho.max()):.3f} "
                f"p(max)={float(p.max()):.3f}"
            )

        return n_sub

    def _substep(
        self,
        cfg: SolverConfig,
        k: KernelConstants,
        center: np.ndarray,
        half: np.ndarray,
        ghosts: np.ndarray | None,
        interaction: InteractionForceModule,
        dt_sub: float,
    ) -> None:
        positions = np.asarray(self.store.get_positions(), dtype=np.float64)
        velocities = np.asarray(self.store.get_velocities(), dtype=np.float64)
        active = np.asarray(self.store.get_active(), dtype=np.bool_)

        state = self.ensure_capacity(positions.shape[0])
        buffer = self.buffer
        state.load_snapshot(positions, velocities, active)
        state.predict(dt_sub)

        ns = make_neighbor_search(k.h, cfg.use_spatial_hash)
        ns.build(state.pred, state.active)
        self.neighbor_search = ns

        state.rho[:] = compute_density_summation(
            state=state,
            neighbor_search=ns,
            k=k,
            mass=cfg.particle_mass,
            rest_density=cfg.rest_density,
            ghosts=ghosts,
            pool=self.pool,
        )

        state.p[:] = pressure_state_equation_linear(state.rho, cfg.rest_density, cfg.stiffness)
        state.p[~state.active] = 0.0

        accumulate_pair_forces(state, ns, k, cfg, buffer, pool=self.pool)

        if cfg.use_wall_repulsion:
            buffer.add_field(
                wall_repulsion_forces(
                    state.pos,
                    state.active,
                    center,
                    half,
                    strength=cfg.wall_repulsion_strength,
                    distance=cfg.wall_repulsion_distance,
                )
            )

        if self.pointer is not None:
            mode = self.pointer.get_active_mode()
            if mode is not InteractionMode.NONE:
                target = self.pointer.get_pointer_world_position()
                buffer.add_field(interaction.forces(state.pos, state.active, target, mode))

        buffer.emit(self.sink, state.active)
        self.integrator.advance(dt_sub)

        if cfg.use_box_bounds:
            clamp_to_box(self.store, center, half, cfg.particle_radius, cfg.bounds_bounce_factor)

    def close(self) -> None:
        if self._owns_pool:
            self.pool.close()
