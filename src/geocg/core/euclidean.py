"""
Flat geometry: straight lines, identity transport, Frobenius metric.

With these pieces :class:`geocg.optim.ConjugateGradient` reduces to the
classical linear-space nonlinear conjugate gradient method.
"""

from __future__ import annotations

import numpy as np

from geocg.core._types import Float64Array, Point, Vector

__all__ = [
    "EuclideanInnerProduct",
    "EuclideanMetric",
    "EuclideanGeodesic",
    "random_point",
]


class EuclideanInnerProduct:
    """
    Real part of the Frobenius inner product: ⟨U, V⟩ = Re tr(Uᴴ V).

    The base point is kept only for API symmetry with curved metrics.
    """

    __slots__ = ("point",)

    def __init__(self, point: Point | None = None):
        self.point = point

    def __call__(self, u: Vector, v: Vector) -> float:
        return float(np.real(np.sum(np.conj(u) * v)))

    def norm2(self, v: Vector) -> float:
        return self(v, v)


class EuclideanMetric:
    """Point-independent metric returning :class:`EuclideanInnerProduct`."""

    def __call__(self, point: Point) -> EuclideanInnerProduct:
        return EuclideanInnerProduct(point)


class EuclideanGeodesic:
    """
    Straight line ``γ(t) = x + t·v``.

    Parallel transport along a straight line is the identity.
    """

    def __init__(self) -> None:
        self.metric = EuclideanMetric()
        self.point: Point = np.zeros(0)
        self.velocity: Vector = np.zeros(0)

    def set(self, point: Point, velocity: Vector) -> None:
        self.point = np.asarray(point)
        self.velocity = np.asarray(velocity)

    def __call__(self, t: float) -> Point:
        if t == 0.0:
            return self.point
        return self.point + t * self.velocity

    def parallel_translate(self, vector: Vector, t: float) -> Vector:
        return vector


def random_point(
    shape: int | tuple[int, ...], rng: np.random.Generator | None = None
) -> Float64Array:
    """Standard normal point of the given ``shape``."""
    rng = rng or np.random.default_rng()
    out: Float64Array = rng.standard_normal(shape)
    return out
