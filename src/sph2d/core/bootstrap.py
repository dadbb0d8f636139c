"""
Bootstrap / CLI entry point for the 2D fluid solver.

What this file does:
- Loads a JSON scene configuration.
- Builds the reference world (in-memory store, force sink, integrator) and
  the resizable container.
- Runs the fluid through FluidSimulation's frame/physics-tick entry points.
- Logs per-step diagnostics (rho/p/v/neighbors).
- Optionally exports CSV snapshots for analysis.

Scene sections:
  meta        name, seed
  container   width, height, center, transition_speed, spawn_area_fraction,
              resize: {"at_step": int, "width": float, "height": float}
  particles   layout (random|perimeter|block), count, diameter, margin, ...
  world       gravity, damping, gravity_transition_speed,
              gravity_change: {"at_step": int, "gravity": [gx, gy]}
  solver      SolverConfig fields
  interaction mode (none|attract|repel|lift), target [x, y],
              falloff_samples: {"t": [...], "value": [...]}
  time        dt, steps, log_every
  export      csv: {enable, every, dir}
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from sph2d.core.config import solver_config_from_scene
from sph2d.core.diagnostics import format_diagnostics
from sph2d.core.simulation import FluidSimulation
from sph2d.core.state_builder import build_scene_world
from sph2d.interaction.curves import SampledCurve
from sph2d.interaction.pointer import interaction_mode_from_name
from sph2d.io.csv_export import export_particles_csv
from sph2d.world.controls import StaticPointer


def run_scene(scene: dict) -> FluidSimulation:
    cfg = solver_config_from_scene(scene)
    world, container = build_scene_world(scene)

    inter = scene.get("interaction", {})
    pointer = StaticPointer(
        position=inter.get("target", [0.0, 0.0]),
        mode=interaction_mode_from_name(inter.get("mode", "none")),
    )
    samples = inter.get("falloff_samples")
    falloff = SampledCurve(samples["t"], samples["value"]) if samples is not None else None

    sim = FluidSimulation(
        cfg,
        store=world,
        sink=world,
        integrator=world,
        bounds_provider=container,
        pointer=pointer,
        falloff=falloff,
    )
    sim.initialize()
    print(
        f"[BOOT] particles={world.n} rest_density={sim.config.rest_density:.4f} "
        f"ghosts={sim.stepper.ghosts.count} workers={sim.stepper.pool.max_workers}"
    )

    time_cfg = scene.get("time", {})
    dt = float(time_cfg.get("dt", 0.02))
    steps = int(time_cfg.get("steps", 50))
    log_every = int(time_cfg.get("log_every", 10))

    resize = scene.get("container", {}).get("resize")
    gravity_change = scene.get("world", {}).get("gravity_change")

    export_cfg = scene.get("export", {})
    csv_cfg = export_cfg.get("csv", {})
    csv_enabled = bool(csv_cfg.get("enable", False))
    csv_every = int(csv_cfg.get("every", 10))
    csv_dir = Path(csv_cfg.get("dir", "out/csv"))

    # -------------------------------------------------------------------------
    # Main loop: one visual frame and one physics tick per step.
    # Frame bookkeeping (gravity/container transitions, pause signals, ghost
    # refresh) happens before the tick, as a host engine would order them.
    # -------------------------------------------------------------------------
    try:
        for s in range(steps):
            if resize is not None and s == int(resize.get("at_step", 0)):
                container.resize(float(resize["width"]), float(resize["height"]))
            if gravity_change is not None and s == int(gravity_change.get("at_step", 0)):
                world.set_gravity(gravity_change["gravity"])

            container.update(dt)
            world.update_gravity(dt)
            sim.on_frame(dt)

            if not sim.on_physics_tick(dt):
                continue

            diag = sim.last_diagnostics
            if (s == 0) or ((s + 1) % max(1, log_every) == 0):
                print(format_diagnostics(diag))

            if csv_enabled and ((s + 1) % max(1, csv_every) == 0):
                export_particles_csv(csv_dir / f"particles_step_{diag.step:04d}.csv", sim.stepper.state)
    finally:
        sim.close()

    return sim


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python -m sph2d.core.bootstrap <scene.json>")
        return 2

    scene_path = Path(sys.argv[1]).resolve()
    if not scene_path.exists():
        print("[ERROR] scene file not found")
        return 1

    with scene_path.open("r", encoding="utf-8") as f:
        scene = json.load(f)

    print(f"[BOOT] scene={scene.get('meta', {}).get('name', scene_path.stem)}")
    run_scene(scene)
    print("[BOOT] done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
