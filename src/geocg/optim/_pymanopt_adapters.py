from __future__ import annotations

import numpy as np
from pymanopt.manifolds.manifold import Manifold

from geocg.core._types import Point, Vector

__all__ = ["PymanoptInnerProduct", "PymanoptMetric", "PymanoptGeodesic"]


class PymanoptInnerProduct:
    """
    Inner product of a Pymanopt manifold frozen at one point.

    Delegates to :meth:`pymanopt.manifolds.manifold.Manifold.inner_product`.
    """

    __slots__ = ("manifold", "point")

    def __init__(self, manifold: Manifold, point: Point):
        self.manifold = manifold
        self.point = point

    def __call__(self, u: Vector, v: Vector) -> float:
        return float(self.manifold.inner_product(self.point, u, v))

    def norm2(self, v: Vector) -> float:
        return self(v, v)


class PymanoptMetric:
    """Metric factory over any Pymanopt manifold."""

    def __init__(self, manifold: Manifold):
        self.manifold = manifold

    def __call__(self, point: Point) -> PymanoptInnerProduct:
        return PymanoptInnerProduct(self.manifold, point)


class PymanoptGeodesic:
    """
    Geodesic capability backed by a Pymanopt manifold.

    The curve is ``t ↦ exp(x, t·v)`` (or ``retraction(x, t·v)`` when
    ``use_retraction=True``, for manifolds without a closed‑form exponential),
    and vectors are carried with ``manifold.transport``. Pymanopt transports
    are usually projection‑based vector transports, so isometry holds only
    approximately.
    """

    def __init__(self, manifold: Manifold, *, use_retraction: bool = False):
        self.manifold = manifold
        self.metric = PymanoptMetric(manifold)
        self._move = manifold.retraction if use_retraction else manifold.exp
        self.point: Point = np.zeros(0)
        self.velocity: Vector = np.zeros(0)

    def set(self, point: Point, velocity: Vector) -> None:
        self.point = point
        self.velocity = velocity

    def __call__(self, t: float) -> Point:
        if t == 0.0:
            return self.point
        return self._move(self.point, t * self.velocity)

    def parallel_translate(self, vector: Vector, t: float) -> Vector:
        if t == 0.0:
            return vector
        return self.manifold.transport(self.point, self(t), vector)
