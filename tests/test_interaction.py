import numpy as np
import pytest

from sph2d.interaction.curves import LinearFalloff, SampledCurve, SmoothFalloff, make_falloff_curve
from sph2d.interaction.pointer import InteractionForceModule, InteractionMode, interaction_mode_from_name


ACTIVE2 = np.array([True, True])


@pytest.mark.parametrize("curve", [LinearFalloff(), SmoothFalloff()])
def test_lift_vanishes_at_the_interaction_radius(curve):
    """
    Particle exactly at the radius (d = 1.5, radius 1.5): falloff(1) = 0,
    so the lift force is zero for both stock curves.
    """
    module = InteractionForceModule(radius=1.5, strength=30.0, lift_strength=20.0, curve=curve)
    pos = np.array([[1.5, 0.0]])

    f = module.forces(pos, np.array([True]), target=np.array([0.0, 0.0]), mode=InteractionMode.LIFT)

    assert np.allclose(f, 0.0)


def test_lift_pushes_upwards_only():
    module = InteractionForceModule(radius=1.5, strength=30.0, lift_strength=20.0)
    pos = np.array([[0.75, 0.0], [0.0, 0.0]])

    f = module.forces(pos, ACTIVE2, target=np.array([0.0, 0.0]), mode=InteractionMode.LIFT)

    assert np.allclose(f[:, 0], 0.0)
    assert np.isclose(f[0, 1], 10.0)
    assert np.isclose(f[1, 1], 20.0)


def test_attract_and_repel_point_along_the_target_axis():
    module = InteractionForceModule(radius=1.5, strength=30.0, lift_strength=20.0)
    pos = np.array([[1.0, 0.0], [0.0, -0.5]])
    target = np.array([0.0, 0.0])

    attract = module.forces(pos, ACTIVE2, target, InteractionMode.ATTRACT)
    repel = module.forces(pos, ACTIVE2, target, InteractionMode.REPEL)

    assert attract[0, 0] < 0.0 and attract[0, 1] == 0.0
    assert attract[1, 1] > 0.0 and attract[1, 0] == 0.0
    assert np.allclose(repel, -attract)
    assert np.isclose(np.linalg.norm(attract[0]), 30.0 * (1.0 - 1.0 / 1.5))


def test_no_force_outside_radius_or_without_mode():
    module = InteractionForceModule(radius=1.0, strength=30.0, lift_strength=20.0)
    pos = np.array([[2.0, 0.0], [0.5, 0.0]])
    target = np.array([0.0, 0.0])

    f = module.forces(pos, ACTIVE2, target, InteractionMode.REPEL)
    assert np.array_equal(f[0], [0.0, 0.0])
    assert f[1, 0] > 0.0

    assert np.array_equal(module.forces(pos, ACTIVE2, target, InteractionMode.NONE), np.zeros((2, 2)))


def test_radial_modes_skip_particle_on_the_target_and_inactive_slots():
    module = InteractionForceModule(radius=1.0, strength=30.0, lift_strength=20.0)
    pos = np.array([[0.0, 0.0], [0.2, 0.0]])

    f = module.forces(pos, np.array([True, False]), np.array([0.0, 0.0]), InteractionMode.ATTRACT)

    assert np.all(np.isfinite(f))
    assert np.array_equal(f, np.zeros((2, 2)))


def test_module_rejects_non_positive_radius():
    with pytest.raises(ValueError):
        InteractionForceModule(radius=0.0, strength=1.0, lift_strength=1.0)


def test_stock_curves_are_monotone_non_negative_and_clamped():
    ts = np.linspace(0.0, 1.0, 41)
    for curve in (LinearFalloff(), SmoothFalloff()):
        w = np.array([curve.evaluate(t) for t in ts])
        assert w[0] == 1.0
        assert w[-1] == 0.0
        assert np.all(w >= 0.0)
        assert np.all(np.diff(w) <= 0.0)
        assert curve.evaluate(-0.5) == 1.0
        assert curve.evaluate(2.0) == 0.0


def test_sampled_curve_interpolates_samples():
    curve = SampledCurve([0.0, 0.5, 1.0], [1.0, 0.2, 0.0])

    assert np.isclose(curve.evaluate(0.25), 0.6)
    assert np.isclose(curve.evaluate(0.75), 0.1)
    assert curve.evaluate(3.0) == 0.0


def test_sampled_curve_rejects_bad_samples():
    with pytest.raises(ValueError):
        SampledCurve([0.0], [1.0])
    with pytest.raises(ValueError):
        SampledCurve([0.0, 1.0], [1.0, 0.5, 0.0])
    with pytest.raises(ValueError):
        SampledCurve([0.0, 0.0, 1.0], [1.0, 0.5, 0.0])


def test_lookup_by_name():
    assert isinstance(make_falloff_curve("smooth"), SmoothFalloff)
    assert interaction_mode_from_name("Lift") is InteractionMode.LIFT

    with pytest.raises(ValueError):
        make_falloff_curve("cubic")
    with pytest.raises(ValueError):
        interaction_mode_from_name("vortex")


def test_sampled_curve_rejects_rising_negative_or_non_finite_values():
    with pytest.raises(ValueError):
        SampledCurve([0.0, 0.5, 1.0], [0.5, 1.0, 0.0])
    with pytest.raises(ValueError):
        SampledCurve([0.0, 1.0], [1.0, -0.1])
    with pytest.raises(ValueError):
        SampledCurve([0.0, float("nan")], [1.0, 0.0])


def test_module_uses_the_given_curve():
    flat = SampledCurve([0.0, 1.0], [1.0, 1.0])
    module = InteractionForceModule(radius=1.5, strength=30.0, lift_strength=20.0, curve=flat)

    f = module.forces(np.array([[0.75, 0.0]]), np.array([True]), np.array([0.0, 0.0]), InteractionMode.ATTRACT)

    assert np.allclose(f[0], [-30.0, 0.0])
