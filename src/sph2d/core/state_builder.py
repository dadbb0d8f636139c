from __future__ import annotations

import numpy as np

from sph2d.world.container import Container
from sph2d.world.particle_world import ParticleWorld


def _grid_points_2d(pmin: np.ndarray, pmax: np.ndarray, spacing: float) -> np.ndarray:
    xs = np.arange(pmin[0], pmax[0] + 1e-12, spacing, dtype=np.float64)
    ys = np.arange(pmin[1], pmax[1] + 1e-12, spacing, dtype=np.float64)
    X, Y = np.meshgrid(xs, ys, indexing="xy")
    return np.stack([X.ravel(), Y.ravel()], axis=1)


def spawn_random_non_overlapping(
    rng: np.random.Generator,
    bounds: tuple[float, float, float, float],
    count: int,
    radius: float,
    max_attempts: int = 50,
) -> np.ndarray:
    """
    Rejection-sample `count` centers in (min_x, max_x, min_y, max_y) so that no
    two discs of `radius` overlap. A particle that finds no free spot within
    `max_attempts` is placed at an unchecked random point.
    """
    min_x, max_x, min_y, max_y = bounds
    min_dist2 = (2.0 * radius) ** 2

    placed = np.zeros((count, 2), dtype=np.float64)
    for i in range(count):
        chosen = None
        for _ in range(max_attempts):
            cand = np.array([rng.uniform(min_x, max_x), rng.uniform(min_y, max_y)])
            if i == 0:
                chosen = cand
                break
            d = placed[:i] - cand[None, :]
            if np.all(np.einsum("ij,ij->i", d, d) >= min_dist2):
                chosen = cand
                break
        if chosen is None:
            chosen = np.array([rng.uniform(min_x, max_x), rng.uniform(min_y, max_y)])
        placed[i] = chosen

    return placed


def spawn_on_perimeter(
    bounds: tuple[float, float, float, float],
    count: int,
    radius: float,
) -> np.ndarray:
    """
    Distribute centers along the rectangle perimeter, counter-clockwise from
    the bottom-left corner, at max(2 radius, perimeter / count) spacing.
    Wraps around when the perimeter is too short for `count` particles.
    """
    min_x, max_x, min_y, max_y = bounds
    width = max_x - min_x
    height = max_y - min_y
    perimeter = 2.0 * (width + height)
    spacing = max(2.0 * radius, perimeter / max(count, 1))

    out = np.zeros((count, 2), dtype=np.float64)
    for i in range(count):
        s = (i * spacing) % perimeter
        if s < width:
            out[i] = (min_x + s, min_y)
        elif s < width + height:
            out[i] = (max_x, min_y + (s - width))
        elif s < 2.0 * width + height:
            out[i] = (max_x - (s - width - height), max_y)
        else:
            out[i] = (min_x, max_y - (s - 2.0 * width - height))
    return out


def build_container(scene: dict) -> Container:
    c = scene.get("container", {})
    return Container(
        width=float(c.get("width", 6.0)),
        height=float(c.get("height", 3.0)),
        center=c.get("center", [0.0, 0.0]),
        transition_speed=float(c.get("transition_speed", 4.0)),
        spawn_area_fraction=float(c.get("spawn_area_fraction", 0.5)),
    )


def spawn_positions(scene: dict, container: Container) -> np.ndarray:
    particles = scene.get("particles", {})
    layout = str(particles.get("layout", "random")).lower()
    count = int(particles.get("count", 50))
    radius = 0.5 * float(particles.get("diameter", 0.18))
    margin = float(particles.get("margin", 0.01))

    if count < 0:
        raise ValueError("particles.count must be >= 0")

    if layout == "random":
        min_x, max_x, min_y, max_y = container.central_spawn_bounds()
        pad = radius + margin
        bounds = (min_x + pad, max_x - pad, min_y + pad, max_y - pad)
        if bounds[0] > bounds[1] or bounds[2] > bounds[3]:
            raise ValueError("spawn region is smaller than one particle")
        seed = int(scene.get("meta", {}).get("seed", 0))
        rng = np.random.default_rng(seed)
        return spawn_random_non_overlapping(
            rng,
            bounds,
            count,
            radius,
            max_attempts=int(particles.get("max_attempts", 50)),
        )

    if layout == "perimeter":
        # centers lie on the frame line
        return spawn_on_perimeter(container.frame_bounds(), count, radius)

    if layout == "block":
        pmin = np.array(particles["min"], dtype=np.float64)
        pmax = np.array(particles["max"], dtype=np.float64)
        spacing = float(particles["spacing"])
        if spacing <= 0:
            raise ValueError("spacing must be > 0")
        return _grid_points_2d(pmin, pmax, spacing)

    raise ValueError(f"unsupported particle layout: {layout!r}")


def build_scene_world(scene: dict) -> tuple[ParticleWorld, Container]:
    """
    Build the reference world (store + force sink + integrator) and its
    container from a JSON scene.
    """
    container = build_container(scene)
    pos = spawn_positions(scene, container)

    particles = scene.get("particles", {})
    v0 = np.array(particles.get("initial_velocity", [0.0, 0.0]), dtype=np.float64)
    vel = np.repeat(v0[None, :], pos.shape[0], axis=0)

    w = scene.get("world", {})
    world = ParticleWorld(
        positions=pos,
        velocities=vel,
        mass=float(scene.get("solver", {}).get("particle_mass", 1.0)),
        gravity=w.get("gravity", [0.0, -9.81]),
        damping=float(w.get("damping", 1.0)),
        gravity_transition_speed=float(w.get("gravity_transition_speed", 10.0)),
    )
    return world, container
