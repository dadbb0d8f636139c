import numpy as np
import pytest

from sph2d.sph.kernels import kernel_constants, poly6_W, spiky_grad_magnitude, visc_laplacian


def test_kernel_constants_match_closed_forms():
    h = 0.4
    k = kernel_constants(h)

    assert np.isclose(k.poly6, 4.0 / (np.pi * h ** 8), rtol=1e-14)
    assert np.isclose(k.spiky_grad, -30.0 / (np.pi * h ** 5), rtol=1e-14)
    assert np.isclose(k.visc_lap, 20.0 / (3.0 * np.pi * h ** 5), rtol=1e-14)


def test_kernel_constants_are_bitwise_idempotent():
    a = kernel_constants(0.37)
    b = kernel_constants(0.37)

    assert a == b
    assert a.poly6 == b.poly6
    assert a.spiky_grad == b.spiky_grad
    assert a.visc_lap == b.visc_lap


@pytest.mark.parametrize("h", [0.0, -0.4, float("nan")])
def test_kernel_constants_reject_non_positive_radius(h):
    with pytest.raises(ValueError):
        kernel_constants(h)


def test_poly6_support_is_compact():
    """
    poly6 (h^2 - r^2)^3 is positive inside the support and exactly zero
    at and beyond r = h.
    """
    h = 0.4
    k = kernel_constants(h)

    assert poly6_W((0.5 * h) ** 2, k) > 0.0
    assert poly6_W(h * h, k) == 0.0
    assert poly6_W((1.01 * h) ** 2, k) == 0.0


def test_poly6_vectorized_matches_scalar():
    k = kernel_constants(0.4)
    r2 = np.array([0.0, 0.01, 0.05, 0.159, 0.16, 0.5])

    w = poly6_W(r2, k)
    expected = np.array([poly6_W(float(x), k) for x in r2])

    assert np.allclose(w, expected, rtol=0.0, atol=1e-12)
    assert np.all(w >= 0.0)


def test_gradient_and_laplacian_vanish_at_support_edge():
    k = kernel_constants(0.4)

    assert spiky_grad_magnitude(0.4, k) == 0.0
    assert visc_laplacian(0.4, k) == 0.0
    # spiky gradient constant is negative, so the magnitude factor is too
    assert spiky_grad_magnitude(0.1, k) < 0.0
    assert visc_laplacian(0.1, k) > 0.0
