"""
Reference cost functions with analytic Riemannian gradients.

Each cost ``f`` comes with ``grad_f`` returning the Riemannian gradient for
the geometry the cost is meant for:

=====================  ===================================  ==============
cost                   formula                              geometry
=====================  ===================================  ==============
``quadratic``          (x − c)ᵀ A (x − c)                   Euclidean
``rayleigh_quotient``  xᵀ A x                               unit sphere
``logdet_trace``       tr(A P) − log det P                  SPD
``frame_potential``    Σ_{i<j} |⟨f_i, f_j⟩|^{2p}              product sphere
=====================  ===================================  ==============

Matrix parameters may be given as nested lists (as they come out of a YAML
config); they are converted with :func:`numpy.asarray`.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from geocg.core._types import Float64Array, Point, Vector
from geocg.core.sphere import PRODUCT_SPHERE

__all__ = [
    "quadratic",
    "grad_quadratic",
    "rayleigh_quotient",
    "grad_rayleigh_quotient",
    "logdet_trace",
    "grad_logdet_trace",
    "frame_potential",
    "grad_frame_potential",
]


def _square(A: ArrayLike, n: int) -> Float64Array:
    M: Float64Array = np.asarray(A, dtype=np.float64)
    if M.shape != (n, n):
        raise ValueError(f"Matrix shape {M.shape} incompatible with dimension {n}.")
    return M


def quadratic(x: Point, A: ArrayLike, c: ArrayLike | None = None) -> float:
    """
    Quadratic form f(x) = (x − c)ᵀ A (x − c).

    Parameters
    ----------
    x : numpy.ndarray
        Point of shape ``(n,)``.
    A : array_like
        ``(n, n)`` matrix; f is convex when A is positive definite.
    c : array_like, optional
        Centre (minimizer when A is positive definite). Defaults to 0.

    Raises
    ------
    ValueError
        If ``A`` is not ``(n, n)``.
    """
    M = _square(A, x.shape[0])
    r = x if c is None else x - np.asarray(c, dtype=np.float64)
    return float(r @ M @ r)


def grad_quadratic(x: Point, A: ArrayLike, c: ArrayLike | None = None) -> Vector:
    """Gradient (A + Aᵀ)(x − c) of :func:`quadratic`."""
    M = _square(A, x.shape[0])
    r = x if c is None else x - np.asarray(c, dtype=np.float64)
    out: Vector = (M + M.T) @ r
    return out


def rayleigh_quotient(x: Point, A: ArrayLike) -> float:
    """
    Rayleigh quotient xᵀ A x on the unit sphere.

    Its minimum over the sphere is the smallest eigenvalue of sym(A), attained
    at the matching eigenvector.
    """
    M = _square(A, x.shape[0])
    return float(x @ M @ x)


def grad_rayleigh_quotient(x: Point, A: ArrayLike) -> Vector:
    """Riemannian gradient on the sphere: tangent projection of (A + Aᵀ) x."""
    M = _square(A, x.shape[0])
    return PRODUCT_SPHERE.project_to_tangent(x, (M + M.T) @ x)


def logdet_trace(P: Point, A: ArrayLike) -> float:
    """
    f(P) = tr(A P) − log det P on SPD(d).

    Geodesically convex; for SPD ``A`` the unique minimizer is A⁻¹. Returns
    ``inf`` outside the SPD cone.
    """
    M = _square(A, P.shape[0])
    sign, logdet = np.linalg.slogdet(P)
    if sign <= 0:
        return float(np.inf)
    return float(np.sum(M * P.T) - logdet)


def grad_logdet_trace(P: Point, A: ArrayLike) -> Vector:
    """
    Affine-invariant Riemannian gradient of :func:`logdet_trace`.

    The Euclidean gradient is sym(A) − P⁻¹, hence grad f(P) = P sym(A) P − P.
    """
    M = _square(A, P.shape[0])
    S = 0.5 * (M + M.T)
    out: Vector = 0.5 * ((P @ S @ P) + (P @ S @ P).T) - P
    return out


def _gram(F: Point) -> np.ndarray:
    rows = F.reshape(1, -1) if F.ndim == 1 else F
    return rows.conj() @ rows.T


def frame_potential(F: Point, p: float = 2.0) -> float:
    """
    p‑frame potential: Φ_p(F) = Σ_{i<j} |⟨f_i, f_j⟩|^{2p}.

    Parameters
    ----------
    F : numpy.ndarray
        Unit rows ``(n, d)`` (real or complex), a point of the product sphere.
    p : float, optional
        Positive exponent (default 2.0).

    Raises
    ------
    ValueError
        If ``p`` is not positive.
    """
    if p <= 0:
        raise ValueError("Exponent p must be positive.")
    g = np.abs(_gram(F)) ** (2 * p)
    iu = np.triu_indices(g.shape[0], k=1)
    return float(g[iu].sum())


def grad_frame_potential(F: Point, p: float = 2.0) -> Vector:
    """
    Riemannian gradient of :func:`frame_potential` on the product sphere.

    With g_kj = ⟨f_k, f_j⟩ the Euclidean gradient under Re tr(Uᴴ V) is

        G_k = 2p · Σ_{j≠k} |g_kj|^{2p−2} · conj(g_kj) · f_j,

    which is then projected row-wise onto the tangent space.
    """
    if p <= 0:
        raise ValueError("Exponent p must be positive.")
    g = _gram(F)
    W = np.abs(g) ** (2 * p - 2) * g.conj()
    np.fill_diagonal(W, 0.0)
    G = 2 * p * (W @ F)

    return PRODUCT_SPHERE.project_to_tangent(F, G)
