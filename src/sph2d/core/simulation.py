from __future__ import annotations

from dataclasses import replace

import numpy as np

from sph2d.core.config import SolverConfig
from sph2d.core.diagnostics import StepDiagnostics, compute_step_diagnostics
from sph2d.core.interfaces import (
    BoundsProvider,
    ForceSink,
    Integrator,
    ParticleStore,
    PauseSignalSource,
    PointerProvider,
    read_bounds,
)
from sph2d.core.pause import PauseController, TickAction
from sph2d.core.simulator import SimulationStepper
from sph2d.interaction.curves import FalloffCurve
from sph2d.parallel.pool import WorkerPool
from sph2d.sph.density import calibrate_rest_density
from sph2d.sph.kernels import kernel_constants


class FluidSimulation:
    """
    Host-facing entry points of the fluid solver.

    - initialize(): validate configuration, build ghosts, calibrate rest density.
    - on_frame(dt): per-visual-frame bookkeeping (pause signals, ghost refresh
      after container resizes). Never advances the fluid.
    - on_physics_tick(dt): per-fixed-tick driver; asks the PauseController
      whether to advance, single-step or skip.

    The configuration may be replaced between ticks (`sim.config = ...`);
    it is read at the start of each step. max_workers is fixed at
    construction because the worker pool is created once.
    """

    def __init__(
        self,
        config: SolverConfig,
        store: ParticleStore,
        sink: ForceSink,
        integrator: Integrator,
        bounds_provider: BoundsProvider | None = None,
        pointer: PointerProvider | None = None,
        pause_signals: PauseSignalSource | None = None,
        pool: WorkerPool | None = None,
        paused: bool = False,
        falloff: FalloffCurve | None = None,
    ):
        self.stepper = SimulationStepper(
            config,
            store=store,
            sink=sink,
            integrator=integrator,
            bounds_provider=bounds_provider,
            pointer=pointer,
            pool=pool,
            falloff=falloff,
        )
        self.store = store
        self.pause = PauseController(paused=paused)
        self.pause_signals = pause_signals
        self.initialized = False
        self.last_diagnostics: StepDiagnostics | None = None

    @property
    def config(self) -> SolverConfig:
        return self.stepper.config

    @config.setter
    def config(self, cfg: SolverConfig) -> None:
        cfg.validate()
        if cfg.max_workers != self.stepper.config.max_workers:
            raise ValueError("max_workers cannot change after construction")
        self.stepper.config = cfg

    def initialize(self) -> None:
        cfg = self.config
        cfg.validate()

        positions = np.asarray(self.store.get_positions(), dtype=np.float64)
        active = np.asarray(self.store.get_active(), dtype=np.bool_)

        if cfg.auto_rest_density:
            k = kernel_constants(cfg.smoothing_radius)
            rho0 = calibrate_rest_density(positions, active, k, cfg.particle_mass, fallback=cfg.rest_density)
            cfg = replace(cfg, rest_density=rho0)
            self.stepper.config = cfg

        center, half = read_bounds(self.stepper.bounds_provider)
        self.stepper.refresh_ghosts(center, half)

        self.stepper.ensure_capacity(positions.shape[0])
        self.initialized = True

        if cfg.debug:
            print(
                f"[SPH2D] initialized n={positions.shape[0]} rest_density={cfg.rest_density:.4f} "
                f"ghosts={self.stepper.ghosts.count}"
            )

    def on_frame(self, dt: float) -> None:
        if self.pause_signals is not None:
            if self.pause_signals.consume_toggle():
                self.pause.toggle()
            if self.pause_signals.consume_step_request():
                self.pause.request_step()

        if self.initialized:
            center, half = read_bounds(self.stepper.bounds_provider)
            self.stepper.refresh_ghosts(center, half)

    def on_physics_tick(self, dt: float) -> bool:
        """Returns True when the fluid was advanced this tick."""
        if not self.initialized:
            raise RuntimeError("FluidSimulation.initialize() must run before the first physics tick")

        action = self.pause.next_action()
        if action is TickAction.ADVANCE:
            self.perform_step(dt)
            return True
        if action is TickAction.SINGLE_STEP:
            self.perform_step(dt, substeps=1)
            return True
        return False

    def perform_step(self, dt: float, substeps: int | None = None) -> int:
        n_sub = self.stepper.perform_step(dt, substeps=substeps)

        stepper = self.stepper
        self.last_diagnostics = compute_step_diagnostics(
            step=stepper.steps_done,
            dt=dt,
            state=stepper.state,
            rest_density=stepper.config.rest_density,
            neighbor_search=stepper.neighbor_search,
            h=stepper.kernel.h,
            n_ghost=stepper.ghosts.count,
        )
        return n_sub

    def get_density(self, i: int) -> float:
        return float(self._state().rho[i])

    def get_pressure(self, i: int) -> float:
        return float(self._state().p[i])

    def get_velocity(self, i: int) -> np.ndarray:
        return np.array(self.store.get_velocities()[i], dtype=np.float64)

    def active_particle_count(self) -> int:
        return int(np.count_nonzero(self.store.get_active()))

    def _state(self):
        if self.stepper.state is None:
            raise RuntimeError("simulation is not initialized")
        return self.stepper.state

    def close(self) -> None:
        self.stepper.close()
