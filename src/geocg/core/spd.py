"""
Symmetric positive-definite matrices with the affine-invariant metric.

At P ∈ SPD(d) the metric is

    ⟨U, V⟩_P = tr(P⁻¹ U P⁻¹ V),

so unlike the flat and spherical cases the inner product genuinely depends
on the base point. Geodesics and parallel transport have closed forms:

    γ(t)  = P^{1/2} expm(t·W) P^{1/2},            W = P^{-1/2} V P^{-1/2}
    Γ_t U = E U Eᵀ,   E = P^{1/2} expm(t·W/2) P^{-1/2}.

Matrix functions are evaluated through a symmetric eigendecomposition.

Reference: S. Sra, R. Hosseini, "Conic geometric optimisation on the
manifold of positive definite matrices", SIAM J. Optim. 25 (2015).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from geocg.core._types import Float64Array, Point, Vector

__all__ = [
    "SPDManifold",
    "SPD",
    "AffineInvariantInnerProduct",
    "AffineInvariantMetric",
    "SPDGeodesic",
]


def _sym(A: np.ndarray) -> Float64Array:
    out: Float64Array = 0.5 * (A + A.T)
    return out


def _eig_apply(
    eigvals: np.ndarray, eigvecs: np.ndarray, fn: Callable[[np.ndarray], np.ndarray]
) -> Float64Array:
    """Rebuild Q·diag(fn(λ))·Qᵀ from a symmetric eigendecomposition."""
    out: Float64Array = (eigvecs * fn(eigvals)) @ eigvecs.T
    return out


@dataclass(frozen=True, slots=True)
class SPDManifold:
    """
    Helpers for points of SPD(d).

    Parameters
    ----------
    eps : float
        Lower clip on eigenvalues when taking square roots of a base point.
    """

    eps: float = 1e-300

    def sqrt_pair(self, P: Point) -> tuple[Float64Array, Float64Array]:
        """Return ``(P^{1/2}, P^{-1/2})``."""
        lam, Q = np.linalg.eigh(_sym(P))
        lam = np.maximum(lam, self.eps)
        root = np.sqrt(lam)
        return _eig_apply(lam, Q, lambda _: root), _eig_apply(lam, Q, lambda _: 1.0 / root)

    def project_to_tangent(self, P: Point, arr: np.ndarray) -> Float64Array:
        """Tangent space of SPD(d) is the symmetric matrices: take the symmetric part."""
        if arr.shape != P.shape:
            raise ValueError("Tangent array shape mismatch.")
        return _sym(arr)

    def riemannian_gradient(self, P: Point, egrad: np.ndarray) -> Float64Array:
        """
        Convert a Euclidean gradient into the affine‑invariant Riemannian one.

        grad f(P) = P · sym(∇f(P)) · P
        """
        return _sym(P @ self.project_to_tangent(P, egrad) @ P)

    def random_point(
        self, d: int, rng: np.random.Generator | None = None, *, cond: float = 10.0
    ) -> Float64Array:
        """
        Random SPD matrix with eigenvalues log-uniform in ``[1, cond]``.

        Raises
        ------
        ValueError
            If ``d`` is not positive or ``cond < 1``.
        """
        if d <= 0:
            raise ValueError("d must be a positive integer.")
        if cond < 1.0:
            raise ValueError("cond must be at least one.")
        rng = rng or np.random.default_rng()
        Q, _ = np.linalg.qr(rng.standard_normal((d, d)))
        lam = np.exp(rng.uniform(0.0, np.log(cond), size=d))
        return _sym((Q * lam) @ Q.T)

    def random_tangent(
        self, P: Point, rng: np.random.Generator | None = None, *, unit: bool = True
    ) -> Float64Array:
        """Random symmetric tangent at ``P``; unit length under the metric at ``P`` if ``unit``."""
        rng = rng or np.random.default_rng()
        U = _sym(rng.standard_normal(P.shape))
        if unit:
            nrm = np.sqrt(AffineInvariantInnerProduct(P).norm2(U))
            if nrm > 0:
                U = U / nrm
        return U


# Default policy instance for general use
SPD = SPDManifold()


class AffineInvariantInnerProduct:
    """⟨U, V⟩_P = tr(P⁻¹ U P⁻¹ V), with P⁻¹ cached at construction."""

    __slots__ = ("point", "_P_inv")

    def __init__(self, point: Point):
        self.point = point
        self._P_inv = np.linalg.inv(point)

    def __call__(self, u: Vector, v: Vector) -> float:
        a = self._P_inv @ u
        b = self._P_inv @ v
        # tr(AB) without forming the product
        return float(np.sum(a * b.T))

    def norm2(self, v: Vector) -> float:
        return self(v, v)


class AffineInvariantMetric:
    """Metric factory for SPD(d); each call inverts the base point once."""

    def __call__(self, point: Point) -> AffineInvariantInnerProduct:
        return AffineInvariantInnerProduct(point)


class SPDGeodesic:
    """
    Affine‑invariant geodesic on SPD(d).

    :meth:`set` caches P^{±1/2} and the eigendecomposition of the whitened
    velocity W, so each evaluation of the curve or of the transport only
    costs a few matrix products.

    A non-finite velocity is accepted without raising; the curve is then
    undefined for ``t != 0`` but ``γ(0)`` and transport at ``t = 0`` still
    return their exact values.
    """

    def __init__(self, geom: SPDManifold | None = None):
        self.geom = SPD if geom is None else geom
        self.metric = AffineInvariantMetric()
        self.point: Point = np.zeros((0, 0))
        self.velocity: Vector = np.zeros((0, 0))

    def set(self, point: Point, velocity: Vector) -> None:
        self.point = np.asarray(point)
        self.velocity = np.asarray(velocity)

        self._sqrt, self._isqrt = self.geom.sqrt_pair(self.point)
        W = self._isqrt @ self.velocity @ self._isqrt
        if np.all(np.isfinite(W)):
            self._lam, self._Q = np.linalg.eigh(_sym(W))
        else:
            d = W.shape[0]
            self._lam, self._Q = np.full(d, np.nan), np.full((d, d), np.nan)

    def __call__(self, t: float) -> Point:
        if t == 0.0:
            return self.point
        E = _eig_apply(self._lam, self._Q, lambda lam: np.exp(t * lam))
        return _sym(self._sqrt @ E @ self._sqrt)

    def parallel_translate(self, vector: Vector, t: float) -> Vector:
        if t == 0.0:
            return vector
        half = _eig_apply(self._lam, self._Q, lambda lam: np.exp(0.5 * t * lam))
        E = self._sqrt @ half @ self._isqrt
        return _sym(E @ vector @ E.T)
