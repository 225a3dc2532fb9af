"""
Conjugate gradient on Riemannian manifolds.

Seeks a local minimum of a smooth cost S : M → ℝ by stepping along geodesics
in the direction given by a conjugate-gradient scheme. Each iteration

1. evaluates the (Riemannian) gradient g at the current point x,
2. forms d = −g + β·Td₋, where Td₋ is the previous direction parallel
   transported along the previous geodesic to x and β comes from the
   selected :mod:`~geocg.optim.schemes` formula,
3. line-searches φ(t) = S(γ(t)) along the geodesic γ through x with
   initial velocity d, using φ'(t) = ⟨grad S(γ(t)), Γ_t d⟩_{γ(t)},
4. moves to γ(α) if the line search found an improving step α > 0.

There is no gradient-norm or cost-change stopping test: a run ends when the
line search reports no improving step or after ``max_steps`` iterations.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np

from geocg.core._types import Point, Vector
from geocg.core.geometry import Geodesic, Metric
from geocg.optim.line_search import LineSearch, SecantLineSearch
from geocg.optim.schemes import BetaScheme, HestenesStiefel, get_scheme

__all__ = ["CGState", "ConjugateGradient", "minimize"]


@dataclass
class CGState:
    """
    Mutable run state of one :meth:`ConjugateGradient.optimize` call.

    Attributes
    ----------
    x, last_x :
        Current and previous point.
    grad, last_grad :
        Gradients at ``x`` and ``last_x``.
    velocity :
        Current search direction (tangent at ``x``).
    pt_last_vel :
        Previous direction transported into the tangent space at ``x``.
    n :
        Iteration index; after a run, the number of successful steps.
    """

    x: Point
    last_x: Point | None = None
    grad: Vector | None = None
    last_grad: Vector | None = None
    velocity: Vector | None = None
    pt_last_vel: Vector | None = None
    n: int = 0


class ConjugateGradient:
    """
    Riemannian conjugate gradient driver.

    Parameters
    ----------
    geodesic :
        Geodesic capability of the manifold (see :class:`geocg.core.Geodesic`).
        The instance is owned and rebound by the optimizer.
    metric :
        Metric used for β and for the line-search derivative. Defaults to
        ``geodesic.metric``.
    scheme :
        A :class:`~geocg.optim.schemes.BetaScheme` instance or a name accepted
        by :func:`~geocg.optim.schemes.get_scheme`. Default Hestenes–Stiefel.
    line_search :
        Line search instance; defaults to a fresh :class:`SecantLineSearch`.
    max_steps :
        Hard cap on the number of iterations (non-negative).
    log_every :
        Print progress every ``log_every`` successful steps (0 = silent).

    Raises
    ------
    ValueError
        If ``max_steps`` or ``log_every`` is negative, or the scheme name is
        unknown.
    """

    def __init__(
        self,
        geodesic: Geodesic,
        metric: Metric | None = None,
        scheme: BetaScheme | str | None = None,
        line_search: LineSearch | None = None,
        max_steps: int = 1000,
        log_every: int = 0,
    ):
        if max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {max_steps}")
        if log_every < 0:
            raise ValueError(f"log_every must be non-negative, got {log_every}")

        self.geodesic = geodesic
        self.metric: Metric = geodesic.metric if metric is None else metric
        if scheme is None:
            scheme = HestenesStiefel()
        elif isinstance(scheme, str):
            scheme = get_scheme(scheme)
        self.scheme: BetaScheme = scheme
        self.line_search: LineSearch = (
            SecantLineSearch() if line_search is None else line_search
        )
        self.max_steps = max_steps
        self.log_every = log_every
        self.state: CGState | None = None

    @property
    def n(self) -> int:
        """Iteration counter of the current (or last) run."""
        return 0 if self.state is None else self.state.n

    @property
    def x(self) -> Point | None:
        """Current point of the run, or ``None`` before the first reset."""
        return None if self.state is None else self.state.x

    def reset(self, initial: Point) -> CGState:
        """Seed a fresh run at ``initial`` and clear the line-search memory."""
        self.state = CGState(x=initial)
        self.line_search.reset()
        return self.state

    def step(
        self,
        cost: Callable[[Point], float],
        gradient: Callable[[Point], Vector],
    ) -> bool:
        """
        Perform one CG iteration from the current state.

        Returns
        -------
        bool
            ``True`` if the point moved, ``False`` if the line search found
            no improving step (the point is then left unchanged).

        Raises
        ------
        RuntimeError
            If called before :meth:`reset` / :meth:`optimize`.
        """
        st = self.state
        if st is None:
            raise RuntimeError("step() called before reset(); use optimize().")
        geo = self.geodesic

        st.last_grad, st.grad = st.grad, gradient(st.x)

        velocity = -st.grad
        if st.n > 0:
            # the geodesic is still bound to the previous step here
            alpha = self.line_search.alpha
            st.pt_last_vel = geo.parallel_translate(geo.velocity, alpha)
            pt_last_grad = geo.parallel_translate(st.last_grad, alpha)
            beta = self.scheme.compute_beta(
                st.grad,
                st.last_grad,
                pt_last_grad,
                st.pt_last_vel,
                self.metric(st.x),
                self.metric(st.last_x),
            )
            with np.errstate(invalid="ignore", over="ignore"):
                velocity = velocity + beta * st.pt_last_vel
        st.velocity = velocity

        geo.set(st.x, velocity)

        def value(t: float) -> float:
            return cost(geo(t))

        def derivative(t: float) -> float:
            xt = geo(t)
            return self.metric(xt)(gradient(xt), geo.parallel_translate(geo.velocity, t))

        alpha = self.line_search.search(value, derivative)
        if not alpha > 0.0:
            return False

        st.last_x, st.x = st.x, geo(alpha)
        return True

    def optimize(
        self,
        initial: Point,
        cost: Callable[[Point], float],
        gradient: Callable[[Point], Vector],
        callback: Callable[[CGState], Any] | None = None,
    ) -> Point:
        """
        Run CG from ``initial`` until the line search stalls or ``max_steps``
        iterations have been taken.

        Parameters
        ----------
        initial :
            Starting point (not modified).
        cost :
            Real-valued cost S(x). Must be side-effect free; it is evaluated
            at many trial points per step.
        gradient :
            Riemannian gradient of ``cost`` (a tangent vector at x).
        callback :
            Called with the run state after every successful step.

        Returns
        -------
        Point
            The last point reached.
        """
        st = self.reset(initial)
        t0 = time.perf_counter()

        while st.n < self.max_steps:
            if not self.step(cost, gradient):
                break
            st.n += 1

            if callback is not None:
                callback(st)
            if self.log_every and st.n % self.log_every == 0:
                print(
                    f"iter {st.n:4d}   cost {getattr(self.line_search, 'value', np.nan):12.6e}"
                    f"   alpha {self.line_search.alpha:10.3e}"
                )

        if self.log_every:
            reason = "max steps reached" if st.n >= self.max_steps else "no improving step"
            print(
                f"Finished {st.n} steps ({reason}) in {time.perf_counter()-t0:.3f}s"
                f" → cost {float(cost(st.x)):.6e}"
            )

        return st.x


def minimize(
    initial: Point,
    cost: Callable[[Point], float],
    gradient: Callable[[Point], Vector],
    geodesic: Geodesic,
    scheme: BetaScheme | str | None = None,
    max_steps: int = 1000,
    **line_search_kw: Any,
) -> Point:
    """
    One‑shot Riemannian conjugate‑gradient minimization.

    Parameters
    ----------
    initial :
        Starting point on the manifold.
    cost, gradient :
        Cost and Riemannian gradient callables.
    geodesic :
        Geodesic capability of the manifold.
    scheme :
        β formula (instance or name); Hestenes–Stiefel by default.
    max_steps :
        Maximum number of CG iterations (must be positive).
    **line_search_kw :
        Forwarded to :class:`~geocg.optim.line_search.SecantLineSearch`.
        ``log_every`` (default 0) can be passed here as well.

    Returns
    -------
    Point
        Final point, whose cost is no worse than the input's.

    Raises
    ------
    ValueError
        If ``max_steps`` is not positive.
    """
    if max_steps <= 0:
        raise ValueError("max_steps must be positive.")

    log_every = line_search_kw.pop("log_every", 0)
    cg = ConjugateGradient(
        geodesic,
        scheme=scheme,
        line_search=SecantLineSearch(**line_search_kw),
        max_steps=max_steps,
        log_every=log_every,
    )
    return cg.optimize(initial, cost, gradient)
