import numpy as np
import pytest

from geocg.core.euclidean import EuclideanGeodesic, EuclideanInnerProduct
from geocg.core.sphere import PRODUCT_SPHERE, SphereGeodesic


def _complex_point(n: int, d: int, rng: np.random.Generator) -> np.ndarray:
    Z = rng.standard_normal((n, d)) + 1j * rng.standard_normal((n, d))
    return Z / np.linalg.norm(Z, axis=1, keepdims=True)


@pytest.fixture(params=["real", "complex"])
def point_and_tangents(request):
    rng = np.random.default_rng(7)
    if request.param == "real":
        X = PRODUCT_SPHERE.random_point((6, 4), rng=rng)
    else:
        X = _complex_point(6, 4, rng)
    V = PRODUCT_SPHERE.random_tangent(X, rng=rng, unit=False)
    U = PRODUCT_SPHERE.random_tangent(X, rng=rng, unit=False)
    return X, V, U


def test_project_tangent():
    """Projection onto the tangent space should satisfy Re⟨x_i,ξ_i⟩ = 0."""
    rng = np.random.default_rng(5)
    X = PRODUCT_SPHERE.random_point((6, 3), rng=rng)
    ambient = rng.standard_normal(X.shape)

    proj = PRODUCT_SPHERE.project_to_tangent(X, ambient)

    assert proj.shape == X.shape
    radial = np.sum(X * proj, axis=1)
    np.testing.assert_allclose(radial, 0.0, atol=1e-12)

    # radial direction projects to zero
    np.testing.assert_allclose(
        PRODUCT_SPHERE.project_to_tangent(X, X.copy()), 0.0, atol=1e-12
    )


def test_project_shape_mismatch():
    X = PRODUCT_SPHERE.random_point((3, 3), rng=np.random.default_rng(0))
    with pytest.raises(ValueError):
        PRODUCT_SPHERE.project_to_tangent(X, np.zeros((3, 2)))


def test_exp_stays_on_sphere(point_and_tangents):
    X, V, _ = point_and_tangents
    for t in (0.1, 1.0, 3.0):
        Y = PRODUCT_SPHERE.exp(X, t * V)
        np.testing.assert_allclose(np.linalg.norm(Y, axis=1), 1.0, atol=1e-12)


def test_exp_tiny_tangent_is_first_order():
    X = PRODUCT_SPHERE.random_point(5, rng=np.random.default_rng(1))
    xi = 1e-14 * PRODUCT_SPHERE.random_tangent(X, rng=np.random.default_rng(2))
    np.testing.assert_allclose(PRODUCT_SPHERE.exp(X, xi), X + xi, atol=1e-15)


def test_geodesic_at_zero(point_and_tangents):
    X, V, U = point_and_tangents
    geo = SphereGeodesic()
    geo.set(X, V)

    np.testing.assert_array_equal(geo(0.0), X)
    np.testing.assert_array_equal(geo.parallel_translate(U, 0.0), U)


def test_transport_tangent_and_norm(point_and_tangents):
    """Parallel transport preserves tangency at the target and the tangent norm."""
    X, V, U = point_and_tangents
    geo = SphereGeodesic()
    geo.set(X, V)

    for t in (0.05, 0.7, 2.5):
        Y = geo(t)
        W = geo.parallel_translate(U, t)

        radial = np.real(np.sum(Y.conj() * W, axis=1))
        np.testing.assert_allclose(radial, 0.0, atol=1e-12)
        np.testing.assert_allclose(
            np.linalg.norm(W), np.linalg.norm(U), rtol=1e-10, atol=1e-12
        )


def test_transport_preserves_inner_products(point_and_tangents):
    X, V, U = point_and_tangents
    geo = SphereGeodesic()
    geo.set(X, V)
    ip = geo.metric(X)

    t = 1.3
    before = ip(U, V)
    after = geo.metric(geo(t))(geo.parallel_translate(U, t), geo.parallel_translate(V, t))

    assert after == pytest.approx(before, rel=1e-10, abs=1e-12)


def test_transported_velocity_is_curve_tangent(point_and_tangents):
    """Γ_t v must equal γ'(t): geodesics parallel-transport their own velocity."""
    X, V, _ = point_and_tangents
    geo = SphereGeodesic()
    geo.set(X, V)

    t, h = 0.8, 1e-6
    fd = (geo(t + h) - geo(t - h)) / (2 * h)
    np.testing.assert_allclose(geo.parallel_translate(V, t), fd, atol=1e-7)


def test_transport_roundtrip(point_and_tangents):
    """Transport forth, then back along the reversed geodesic, is the identity."""
    X, V, U = point_and_tangents
    t = 0.9
    geo = SphereGeodesic()
    geo.set(X, V)
    Y = geo(t)
    W = geo.parallel_translate(U, t)

    back = SphereGeodesic()
    back.set(Y, -geo.parallel_translate(V, t))

    np.testing.assert_allclose(back(t), X, atol=1e-10)
    np.testing.assert_allclose(back.parallel_translate(W, t), U, atol=1e-10)


def test_euclidean_geodesic_and_metric():
    rng = np.random.default_rng(3)
    x, v, u = rng.standard_normal((3, 5))
    geo = EuclideanGeodesic()
    geo.set(x, v)

    np.testing.assert_array_equal(geo(0.0), x)
    np.testing.assert_allclose(geo(2.5), x + 2.5 * v)
    assert geo.parallel_translate(u, 1.7) is u

    ip = geo.metric(x)
    assert isinstance(ip, EuclideanInnerProduct)
    assert ip(u, v) == pytest.approx(ip(v, u))
    assert ip.norm2(v) == pytest.approx(float(v @ v))


def test_euclidean_inner_product_complex():
    u = np.array([1 + 1j, 2.0])
    v = np.array([1j, 1.0])
    # Re(conj(1+i)·i + 2·1) = Re(i + 1 + 2)
    assert EuclideanInnerProduct()(u, v) == pytest.approx(3.0)


def test_exp_renormalizes_rows():
    """A direction with a small radial part still lands on the sphere."""
    rng = np.random.default_rng(4)
    X = PRODUCT_SPHERE.random_point((5, 3), rng=rng)
    V = PRODUCT_SPHERE.random_tangent(X, rng=rng) + 1e-3 * X

    for t in (0.5, 10.0, 1e4):
        Y = PRODUCT_SPHERE.exp(X, t * V)
        np.testing.assert_allclose(np.linalg.norm(Y, axis=1), 1.0, atol=1e-14)


def test_geodesic_discards_radial_velocity():
    X = PRODUCT_SPHERE.random_point((4, 3), rng=np.random.default_rng(6))
    V = PRODUCT_SPHERE.random_tangent(X, rng=np.random.default_rng(7))
    geo = SphereGeodesic()
    geo.set(X, V + 1e-6 * X)

    np.testing.assert_allclose(geo.velocity, V, atol=1e-15)
