"""
Geometry capabilities consumed by the Riemannian optimizers.

Design
------
The optimizer is generic over three small structural interfaces
(``typing.Protocol``), so any object with the right methods plugs in:

    class InnerProduct(Protocol):
        def __call__(self, u, v) -> float: ...
        def norm2(self, v) -> float: ...

    class Metric(Protocol):
        def __call__(self, point) -> InnerProduct: ...

    class Geodesic(Protocol):
        point, velocity, metric
        def set(self, point, velocity) -> None: ...
        def __call__(self, t) -> Point: ...
        def parallel_translate(self, vector, t) -> Vector: ...

Concrete implementations live in :mod:`geocg.core.euclidean`,
:mod:`geocg.core.sphere`, :mod:`geocg.core.spd` and
:mod:`geocg.optim._pymanopt_adapters`.
"""

from __future__ import annotations

from typing import Protocol

from geocg.core._types import Point, Vector

__all__ = ["InnerProduct", "Metric", "Geodesic"]


class InnerProduct(Protocol):
    """Metric tensor evaluated at one fixed point.

    Must be symmetric bilinear and deterministic for a given point, and
    satisfy ``norm2(v) == self(v, v)``. Degenerate metrics are not guarded
    against: callers dividing by the result must tolerate ``±inf``/``nan``.
    """

    def __call__(self, u: Vector, v: Vector) -> float:
        """Return ⟨u, v⟩ at the bound point."""
        ...

    def norm2(self, v: Vector) -> float:
        """Return ‖v‖² = ⟨v, v⟩ at the bound point."""
        ...


class Metric(Protocol):
    """Factory producing the :class:`InnerProduct` valid at a point."""

    def __call__(self, point: Point) -> InnerProduct: ...


class Geodesic(Protocol):
    """Geodesic curve through ``point`` with initial tangent ``velocity``.

    Invariants
    ----------
    * ``geodesic(0)`` equals the point passed to :meth:`set`.
    * ``parallel_translate(v, 0)`` is the identity.
    * Transport preserves ‖v‖ under :attr:`metric` up to round-off.

    Evaluating the curve before the first :meth:`set` is undefined.
    """

    point: Point
    velocity: Vector
    metric: Metric

    def set(self, point: Point, velocity: Vector) -> None:
        """Rebind the curve to start at ``point`` with tangent ``velocity``."""
        ...

    def __call__(self, t: float) -> Point:
        """Point reached after parameter ``t``."""
        ...

    def parallel_translate(self, vector: Vector, t: float) -> Vector:
        """Carry ``vector`` (tangent at :attr:`point`) to the tangent space at ``t``."""
        ...
