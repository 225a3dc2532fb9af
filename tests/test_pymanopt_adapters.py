import numpy as np
import pytest
from pymanopt.manifolds import Euclidean, Sphere

from geocg.core.costs import grad_rayleigh_quotient, rayleigh_quotient
from geocg.optim import ConjugateGradient
from geocg.optim._pymanopt_adapters import PymanoptGeodesic, PymanoptMetric


def test_metric_matches_manifold_inner_product():
    manifold = Sphere(5)
    rng = np.random.default_rng(0)
    x = rng.standard_normal(5)
    x /= np.linalg.norm(x)
    u = manifold.projection(x, rng.standard_normal(5))

    ip = PymanoptMetric(manifold)(x)
    assert ip.norm2(u) == pytest.approx(np.linalg.norm(u) ** 2)


def test_euclidean_first_step():
    cg = ConjugateGradient(PymanoptGeodesic(Euclidean(2)), max_steps=10)
    x = cg.optimize(np.array([3.0, 4.0]), lambda x: float(x @ x), lambda x: 2.0 * x)

    np.testing.assert_allclose(x, [0.0, 0.0], atol=1e-15)
    assert cg.n == 1


def test_geodesic_at_zero_is_identity():
    geo = PymanoptGeodesic(Sphere(3))
    x = np.array([1.0, 0.0, 0.0])
    v = np.array([0.0, 1.0, 0.0])
    geo.set(x, v)

    assert geo(0.0) is x
    assert geo.parallel_translate(v, 0.0) is v
    np.testing.assert_allclose(geo(np.pi / 2), [0.0, 1.0, 0.0], atol=1e-15)


@pytest.mark.parametrize("use_retraction", [False, True])
def test_rayleigh_quotient_on_pymanopt_sphere(use_retraction):
    rng = np.random.default_rng(4)
    A = np.diag([1.0, 2.0, 3.0, 5.0, 8.0])
    x0 = rng.standard_normal(5)
    x0 /= np.linalg.norm(x0)

    geo = PymanoptGeodesic(Sphere(5), use_retraction=use_retraction)
    cg = ConjugateGradient(geo, scheme="PR+", max_steps=300)
    x = cg.optimize(
        x0, lambda x: rayleigh_quotient(x, A), lambda x: grad_rayleigh_quotient(x, A)
    )

    assert np.linalg.norm(x) == pytest.approx(1.0)
    assert rayleigh_quotient(x, A) == pytest.approx(1.0, abs=1e-6)
