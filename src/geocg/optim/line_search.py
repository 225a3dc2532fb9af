"""
One-dimensional line searches along a geodesic.

A line search receives the restriction of the cost to the current geodesic,
φ(t) = cost(γ(t)), together with its derivative φ'(t), and returns a step
size ``alpha``. A return value ``alpha <= 0`` is the sentinel for "no
improving step found" and is the optimizer's only termination signal
besides its step cap.

Interface
---------
    class LineSearch(Protocol):
        alpha: float
        def reset(self) -> None: ...
        def search(self, value, derivative) -> float: ...

Two implementations are provided:

- SecantLineSearch
    Derivative-aware bracket-and-zoom. Expands the trial step until the
    derivative changes sign or sufficient decrease fails, then locates the
    root of φ' with regula falsi (Illinois variant) falling back to
    bisection. Exact on quadratics, where φ' is linear.

- BacktrackingLineSearch
    Armijo backtracking: shrink the trial step until sufficient decrease
    holds. Uses φ'(0) only.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["LineSearch", "SecantLineSearch", "BacktrackingLineSearch"]

ScalarFn = Callable[[float], float]


class LineSearch(Protocol):
    """Minimal interface for a line search."""

    alpha: float
    """Step size chosen by the most recent :meth:`search` (``0.0`` on failure)."""

    def reset(self) -> None:
        """Forget step-size memory carried over from previous searches."""
        ...

    def search(self, value: ScalarFn, derivative: ScalarFn) -> float:
        """Return a step ``alpha > 0`` that decreases ``value``, or ``0.0``."""
        ...


def _finite(*xs: float) -> bool:
    return all(math.isfinite(x) for x in xs)


@dataclass
class SecantLineSearch:
    """Derivative-aware line search aiming at a stationary point of φ.

    Parameters
    ----------
    initial_step : float
        First trial step after :meth:`reset`.
    c1 : float
        Sufficient-decrease constant: a trial ``t`` is admissible only if
        φ(t) ≤ φ(0) + c1·t·φ'(0).
    gtol : float
        Accept ``t`` as soon as |φ'(t)| ≤ gtol·|φ'(0)|.
    expansion : float
        Growth factor of the trial step while bracketing.
    max_expansions : int
        Bracketing budget. If φ' is still negative after this many
        expansions the largest admissible trial is returned.
    max_iter : int
        Zoom budget.
    max_step : float
        Upper bound on any trial step, including the remembered one.
    xtol : float
        Relative bracket width below which the zoom stops.
    reuse_step : bool
        Start each search at the previously accepted step instead of
        ``initial_step``.

    Raises
    ------
    ValueError
        If a constant is out of range.
    """

    initial_step: float = 1.0
    c1: float = 1e-4
    gtol: float = 1e-10
    expansion: float = 2.0
    max_expansions: int = 60
    max_iter: int = 100
    max_step: float = 1e6
    xtol: float = 1e-14
    reuse_step: bool = True

    alpha: float = field(default=0.0, init=False)
    value: float = field(default=math.nan, init=False)
    n_evals: int = field(default=0, init=False)
    _last_step: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.initial_step <= 0:
            raise ValueError("initial_step must be positive.")
        if not 0 < self.c1 < 1:
            raise ValueError("c1 must be in (0, 1).")
        if self.gtol < 0:
            raise ValueError("gtol must be non-negative.")
        if self.expansion <= 1:
            raise ValueError("expansion must be greater than one.")
        if self.max_expansions < 1 or self.max_iter < 1:
            raise ValueError("max_expansions and max_iter must be positive.")
        if not self.max_step > 0:
            raise ValueError("max_step must be positive.")

    def reset(self) -> None:
        self.alpha = 0.0
        self.value = math.nan
        self.n_evals = 0
        self._last_step = 0.0

    def search(self, value: ScalarFn, derivative: ScalarFn) -> float:
        self.alpha = 0.0
        self.value = math.nan

        f0, d0 = self._eval(value, derivative, 0.0)
        if not _finite(f0, d0) or d0 >= 0.0:
            return self.alpha

        use_last = self.reuse_step and self._last_step > 0.0
        t = min(self._last_step if use_last else self.initial_step, self.max_step)
        lo, f_lo, d_lo = 0.0, f0, d0

        for _ in range(self.max_expansions):
            f_t, d_t = self._eval(value, derivative, t)
            admissible = (
                _finite(f_t, d_t) and f_t <= f0 + self.c1 * t * d0 and f_t < f_lo
            )
            if admissible and abs(d_t) <= self.gtol * abs(d0):
                break
            if not admissible or d_t >= 0.0:
                t, f_t = self._zoom(value, derivative, f0, d0, lo, f_lo, d_lo, t, d_t)
                break
            lo, f_lo, d_lo = t, f_t, d_t
            if t >= self.max_step:
                break
            t = min(t * self.expansion, self.max_step)
        else:
            # still descending at the end of the budget: keep the furthest point
            t, f_t = lo, f_lo

        if t <= 0.0 or not f_t < f0:
            return self.alpha

        self.alpha, self.value, self._last_step = t, f_t, t
        return t

    def _eval(self, value: ScalarFn, derivative: ScalarFn, t: float) -> tuple[float, float]:
        self.n_evals += 1
        return float(value(t)), float(derivative(t))

    def _zoom(
        self,
        value: ScalarFn,
        derivative: ScalarFn,
        f0: float,
        d0: float,
        lo: float,
        f_lo: float,
        d_lo: float,
        hi: float,
        d_hi: float,
    ) -> tuple[float, float]:
        """Shrink ``[lo, hi]`` around a root of φ'; ``lo`` is always admissible.

        Returns the accepted ``(t, φ(t))`` or, when the budget runs out, the
        admissible endpoint ``(lo, φ(lo))``.
        """
        # Illinois bookkeeping: g_* are the (possibly halved) secant weights
        g_lo, g_hi = d_lo, d_hi if math.isfinite(d_hi) else math.nan
        side = 0

        for _ in range(self.max_iter):
            if abs(hi - lo) <= self.xtol * max(1.0, abs(hi)):
                break

            t = 0.5 * (lo + hi)
            if g_lo < 0.0 <= g_hi:
                secant = hi - g_hi * (hi - lo) / (g_hi - g_lo)
                if lo < secant < hi:
                    t = secant

            f_t, d_t = self._eval(value, derivative, t)
            if not _finite(f_t, d_t) or f_t > f0 + self.c1 * t * d0 or f_t >= f_lo:
                hi, g_hi = t, d_t if _finite(f_t, d_t) else math.nan
                if side == 1:
                    g_lo *= 0.5
                side = 1
                continue

            if abs(d_t) <= self.gtol * abs(d0):
                return t, f_t

            if d_t < 0.0:
                lo, f_lo, g_lo = t, f_t, d_t
                if side == -1:
                    g_hi *= 0.5
                side = -1
            else:
                hi, g_hi = t, d_t
                if side == 1:
                    g_lo *= 0.5
                side = 1

        return lo, f_lo


@dataclass
class BacktrackingLineSearch:
    """Armijo backtracking line search.

    Starting from ``initial_step`` (or, with ``adaptive=True``, from twice the
    previous accepted step) the trial step is multiplied by ``contraction``
    until φ(t) ≤ φ(0) + c1·t·φ'(0). The first trial never exceeds
    ``max_step``.

    Raises
    ------
    ValueError
        If a constant is out of range.
    """

    initial_step: float = 1.0
    c1: float = 1e-4
    contraction: float = 0.5
    max_iter: int = 50
    max_step: float = 1e6
    adaptive: bool = True

    alpha: float = field(default=0.0, init=False)
    value: float = field(default=math.nan, init=False)
    n_evals: int = field(default=0, init=False)
    _last_step: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.initial_step <= 0:
            raise ValueError("initial_step must be positive.")
        if not 0 < self.c1 < 1:
            raise ValueError("c1 must be in (0, 1).")
        if not 0 < self.contraction < 1:
            raise ValueError("contraction must be in (0, 1).")
        if self.max_iter < 1:
            raise ValueError("max_iter must be positive.")
        if not self.max_step > 0:
            raise ValueError("max_step must be positive.")

    def reset(self) -> None:
        self.alpha = 0.0
        self.value = math.nan
        self.n_evals = 0
        self._last_step = 0.0

    def search(self, value: ScalarFn, derivative: ScalarFn) -> float:
        self.alpha = 0.0
        self.value = math.nan

        f0 = float(value(0.0))
        d0 = float(derivative(0.0))
        self.n_evals += 1
        if not _finite(f0, d0) or d0 >= 0.0:
            return self.alpha

        t = self.initial_step
        if self.adaptive and self._last_step > 0.0:
            t = 2.0 * self._last_step
        t = min(t, self.max_step)

        for _ in range(self.max_iter):
            f_t = float(value(t))
            self.n_evals += 1
            if math.isfinite(f_t) and f_t <= f0 + self.c1 * t * d0 and f_t < f0:
                self.alpha, self.value, self._last_step = t, f_t, t
                return t
            t *= self.contraction

        return self.alpha
