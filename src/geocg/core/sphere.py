from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from geocg.core._types import Point, Vector
from geocg.core.euclidean import EuclideanMetric

__all__ = ["ProductSphere", "PRODUCT_SPHERE", "SphereGeodesic"]


@dataclass(frozen=True, slots=True)
class ProductSphere:
    """
    Policy object for geometry on a product of unit spheres (S^{d−1})ⁿ.

    A point is an array of shape ``(n, d)`` whose rows have unit norm, or a
    single unit vector of shape ``(d,)``. Entries may be real or complex; a
    complex row is treated as a point of the real sphere S^{2d−1}.

    Metric
    ------
    Induced from the ambient space: ⟨U, V⟩ = Re tr(Uᴴ V).

    Parameters
    ----------
    eps : float
        Rows with tangent norm below ``eps`` are treated as stationary
        (first‑order Taylor branch in :meth:`exp`, identity transport).
    """

    eps: float = 1e-12

    @staticmethod
    def _rows(arr: np.ndarray) -> np.ndarray:
        return arr.reshape(1, -1) if arr.ndim == 1 else arr

    def project_to_tangent(self, point: Point, arr: np.ndarray) -> Vector:
        """
        Orthogonally project an ambient array onto the tangent space at ``point``.

        Each row loses its component along the base row, so that
        Re⟨x_i, ξ_i⟩ = 0 afterwards.

        Parameters
        ----------
        point : numpy.ndarray
            Base point, shape ``(n, d)`` or ``(d,)``.
        arr : numpy.ndarray
            Ambient array of the same shape. It does **not** need to be
            tangent already.

        Returns
        -------
        numpy.ndarray
            Tangent array with the same shape as ``point``.

        Raises
        ------
        ValueError
            If ``arr.shape`` does not match ``point.shape``.
        """
        if arr.shape != point.shape:
            raise ValueError("Tangent array shape mismatch.")

        x = self._rows(point)
        a = self._rows(arr)
        radial = np.real(np.sum(x.conj() * a, axis=1, keepdims=True))
        out = a - radial * x

        return out.reshape(point.shape)

    def exp(self, point: Point, tang: Vector) -> Point:
        """
        Exponential map, row by row along great circles:

            x_i′ = cos(‖ξ_i‖)·x_i + (sin(‖ξ_i‖)/‖ξ_i‖)·ξ_i.

        Rows with ``‖ξ_i‖ < eps`` use cos≈1 − ‖ξ‖²/2, sin/‖ξ‖≈1. Every
        output row is normalised to unit length.

        Raises
        ------
        ValueError
            If ``tang.shape`` does not match ``point.shape``.
        """
        if tang.shape != point.shape:
            raise ValueError("Tangent array shape mismatch.")

        x = self._rows(point)
        xi = self._rows(tang)
        norms = np.linalg.norm(xi, axis=1, keepdims=True)
        small = norms < self.eps
        safe = np.where(small, 1.0, norms)

        scale_cos = np.where(small, 1.0 - 0.5 * norms**2, np.cos(norms))
        scale_sin = np.where(small, 1.0, np.sin(norms) / safe)

        out = scale_cos * x + scale_sin * xi
        # pull rows back onto the unit sphere
        out = out / np.linalg.norm(out, axis=1, keepdims=True)

        return out.reshape(point.shape)

    def transport_along(
        self, point: Point, direction: Vector, vec: Vector, t: float
    ) -> Vector:
        """
        Exact parallel transport of ``vec`` along ``t ↦ exp(point, t·direction)``.

        With u_i = v_i/‖v_i‖ and θ_i = t‖v_i‖ the component of ``vec`` along
        the direction of motion rotates into the plane spanned by x_i and u_i:

            w_i′ = w_i + ((cos θ_i − 1)·u_i − sin θ_i·x_i)·Re⟨u_i, w_i⟩.

        Rows whose direction is (numerically) zero are left unchanged.
        """
        if vec.shape != point.shape or direction.shape != point.shape:
            raise ValueError("Tangent array shape mismatch.")

        x = self._rows(point)
        v = self._rows(direction)
        w = self._rows(vec)

        speed = np.linalg.norm(v, axis=1, keepdims=True)
        moving = speed >= self.eps
        u = np.where(moving, v / np.where(moving, speed, 1.0), 0.0)
        theta = t * speed

        along = np.real(np.sum(u.conj() * w, axis=1, keepdims=True))
        out = w + ((np.cos(theta) - 1.0) * u - np.sin(theta) * x) * along

        return out.reshape(point.shape)

    def random_point(
        self,
        shape: int | tuple[int, ...],
        rng: np.random.Generator | None = None,
    ) -> Point:
        """
        Draw a point with i.i.d. Gaussian rows normalized to unit length.

        Parameters
        ----------
        shape : int | tuple[int, ...]
            ``d`` for a single sphere or ``(n, d)`` for a product.
        rng : numpy.random.Generator | None
            Optional generator for reproducibility.
        """
        rng = rng or np.random.default_rng()
        Z = rng.standard_normal(shape)
        rows = self._rows(Z)
        rows /= np.linalg.norm(rows, axis=1, keepdims=True)

        return rows.reshape(Z.shape)

    def random_tangent(
        self,
        point: Point,
        rng: np.random.Generator | None = None,
        *,
        unit: bool = True,
    ) -> Vector:
        """
        Draw a random tangent array at ``point``.

        Sampling: i.i.d. normal in ambient (complex normal if ``point`` is
        complex), then projected to the tangent space. If ``unit=True``, the
        result is normalized to Frobenius norm 1.
        """
        rng = rng or np.random.default_rng()
        Z = rng.standard_normal(point.shape)
        if np.iscomplexobj(point):
            Z = Z + 1j * rng.standard_normal(point.shape)
        U = self.project_to_tangent(point, Z)

        if unit:
            nrm = np.linalg.norm(U)
            if nrm > 0:
                U = U / nrm

        return U


# Default policy instance for general use
PRODUCT_SPHERE = ProductSphere()


class SphereGeodesic:
    """
    Great‑circle geodesic on a product of spheres, driven by a :class:`ProductSphere`.

    :meth:`set` projects the velocity onto the tangent space at the point, so
    a small radial component left by rounding is discarded.
    """

    def __init__(self, geom: ProductSphere | None = None):
        self.geom = PRODUCT_SPHERE if geom is None else geom
        self.metric = EuclideanMetric()
        self.point: Point = np.zeros(0)
        self.velocity: Vector = np.zeros(0)

    def set(self, point: Point, velocity: Vector) -> None:
        self.point = np.asarray(point)
        self.velocity = self.geom.project_to_tangent(self.point, np.asarray(velocity))

    def __call__(self, t: float) -> Point:
        if t == 0.0:
            return self.point
        return self.geom.exp(self.point, t * self.velocity)

    def parallel_translate(self, vector: Vector, t: float) -> Vector:
        if t == 0.0:
            return vector
        return self.geom.transport_along(self.point, self.velocity, vector, t)
