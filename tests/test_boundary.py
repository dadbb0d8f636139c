import numpy as np
import pytest

from sph2d.boundary.box_clamp import clamp_to_box
from sph2d.boundary.ghosts import GhostBoundary, generate_ghost_particles, ghost_spacing_for
from sph2d.boundary.walls import wall_repulsion_forces
from sph2d.world.particle_world import ParticleWorld


CENTER = np.array([0.0, 0.0])
HALF = np.array([3.0, 1.5])


def test_clamp_projects_onto_box_and_reflects_velocity():
    """
    Particle at (3.2, 0.1) moving (2, 0.5) in a box of half extents (3, 1.5)
    with radius 0.09 and bounce 0.5 ends at x = 2.91 with velocity (-1, 0.5).
    """
    world = ParticleWorld(np.array([[3.2, 0.1]]), velocities=np.array([[2.0, 0.5]]))

    changed = clamp_to_box(world, CENTER, HALF, particle_radius=0.09, bounce=0.5)

    assert changed == 1
    assert np.allclose(world.pos[0], [2.91, 0.1])
    assert np.allclose(world.vel[0], [-1.0, 0.5])


def test_clamp_handles_both_axes_and_offset_center():
    center = np.array([10.0, -4.0])
    world = ParticleWorld(np.array([[5.0, 0.0]]), velocities=np.array([[-1.0, 3.0]]))

    clamp_to_box(world, center, HALF, particle_radius=0.0, bounce=1.0)

    assert np.allclose(world.pos[0], [7.0, -2.5])
    assert np.allclose(world.vel[0], [1.0, -3.0])


def test_clamp_leaves_inside_and_inactive_particles_untouched():
    world = ParticleWorld(
        np.array([[0.5, 0.5], [9.0, 9.0]]),
        velocities=np.array([[1.0, 1.0], [0.0, 0.0]]),
    )
    world.active[1] = False

    changed = clamp_to_box(world, CENTER, HALF, particle_radius=0.09, bounce=1.0)

    assert changed == 0
    assert np.array_equal(world.pos, [[0.5, 0.5], [9.0, 9.0]])
    assert np.array_equal(world.vel[0], [1.0, 1.0])


def test_wall_repulsion_near_right_wall():
    pos = np.array([[2.9, 0.0], [0.0, 0.0]])
    active = np.array([True, True])

    f = wall_repulsion_forces(pos, active, CENTER, HALF, strength=40.0, distance=0.3)

    assert np.isclose(f[0, 0], -40.0 * (1.0 - 0.1 / 0.3))
    assert f[0, 1] == 0.0
    assert np.array_equal(f[1], [0.0, 0.0])


def test_wall_repulsion_adds_up_in_corners_and_skips_inactive():
    pos = np.array([[-2.8, -1.3], [-2.8, -1.3]])
    active = np.array([True, False])

    f = wall_repulsion_forces(pos, active, CENTER, HALF, strength=40.0, distance=0.3)

    assert f[0, 0] > 0.0
    assert f[0, 1] > 0.0
    assert np.array_equal(f[1], [0.0, 0.0])


def test_wall_repulsion_grows_past_the_wall():
    pos = np.array([[2.95, 0.0], [3.1, 0.0]])
    f = wall_repulsion_forces(pos, np.array([True, True]), CENTER, HALF, strength=40.0, distance=0.3)

    assert f[1, 0] < f[0, 0] < 0.0


def test_default_container_has_72_ghosts_on_the_perimeter():
    ghosts = generate_ghost_particles(CENTER, HALF, ghost_spacing_for(0.25, 0.4))

    assert ghosts.shape == (72, 2)

    on_vertical = np.isclose(np.abs(ghosts[:, 0]), 3.0)
    on_horizontal = np.isclose(np.abs(ghosts[:, 1]), 1.5)
    assert np.all(on_vertical | on_horizontal)

    # corners appear once
    assert len({(round(x, 9), round(y, 9)) for x, y in ghosts}) == 72


def test_ghost_spacing_never_below_half_radius():
    assert ghost_spacing_for(0.25, 0.4) == 0.25
    assert ghost_spacing_for(0.1, 0.8) == 0.4


def test_ghost_generation_rejects_non_positive_spacing():
    with pytest.raises(ValueError):
        generate_ghost_particles(CENTER, HALF, 0.0)


def test_ghost_boundary_regenerates_only_on_change():
    gb = GhostBoundary()

    assert gb.refresh(CENTER, HALF, 0.25, 0.4)
    assert gb.generation == 1
    assert gb.count == 72

    assert not gb.refresh(CENTER, HALF, 0.25, 0.4)
    assert gb.generation == 1

    assert gb.refresh(CENTER, np.array([2.0, 1.5]), 0.25, 0.4)
    assert gb.generation == 2
    assert gb.count < 72


def test_ghost_positions_follow_center_and_are_read_only():
    gb = GhostBoundary()
    center = np.array([1.0, -2.0])
    gb.refresh(center, HALF, 0.25, 0.4)

    assert np.isclose(gb.positions[:, 0].min(), -2.0)
    assert np.isclose(gb.positions[:, 1].max(), -0.5)

    with pytest.raises(ValueError):
        gb.positions[0, 0] = 0.0

    gb.clear()
    assert gb.count == 0


def test_clamp_in_box_narrower_than_a_particle_collapses_to_center_line():
    half = np.array([0.05, 1.5])
    world = ParticleWorld(
        np.array([[0.03, 0.0], [-0.5, 0.2]]),
        velocities=np.array([[1.0, 0.0], [-2.0, 0.0]]),
    )

    changed = clamp_to_box(world, CENTER, half, particle_radius=0.09, bounce=1.0)

    assert changed == 2
    assert np.allclose(world.pos[:, 0], 0.0)
    assert np.all(np.abs(world.pos[:, 0]) <= half[0])
    assert np.allclose(world.vel[:, 0], [-1.0, 2.0])
