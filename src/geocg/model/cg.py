from __future__ import annotations

import importlib
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from geocg.core._types import Point, Vector
from geocg.core.euclidean import EuclideanGeodesic
from geocg.core.euclidean import random_point as euclidean_random_point
from geocg.core.geometry import Geodesic
from geocg.core.spd import SPD, SPDGeodesic
from geocg.core.sphere import PRODUCT_SPHERE, SphereGeodesic
from geocg.model.api import CallCounter, Result
from geocg.optim.conjugate_gradient import ConjugateGradient
from geocg.optim.line_search import SecantLineSearch
from geocg.optim.schemes import get_scheme

__all__ = ["CGModel", "GEOMETRIES", "load_callable"]


def _spd_random_point(shape: tuple[int, ...], rng: np.random.Generator) -> Point:
    if len(shape) != 2 or shape[0] != shape[1]:
        raise ValueError(f"SPD points must have a square shape, got {shape}")
    return SPD.random_point(shape[0], rng=rng)


# name -> (geodesic factory, random initial point sampler)
GEOMETRIES: dict[
    str,
    tuple[Callable[[], Geodesic], Callable[[tuple[int, ...], np.random.Generator], Point]],
] = {
    "euclidean": (EuclideanGeodesic, lambda s, rng: euclidean_random_point(s, rng=rng)),
    "sphere": (SphereGeodesic, lambda s, rng: PRODUCT_SPHERE.random_point(s, rng=rng)),
    "spd": (SPDGeodesic, _spd_random_point),
}


def load_callable(spec: dict[str, Any], default_kwargs: dict[str, Any] | None = None) -> Callable[..., Any]:
    """
    Resolve ``{"import": "pkg.module:func", "kwargs": {...}}`` into a callable.

    ``kwargs`` are bound with :func:`functools.partial`; when the entry has no
    ``kwargs`` of its own, ``default_kwargs`` is used instead.

    Raises
    ------
    TypeError
        If the entry is not a mapping with an ``import`` string.
    ValueError
        If the import string lacks the ``module:function`` separator.
    """
    if not isinstance(spec, dict) or not isinstance(spec.get("import"), str):
        raise TypeError("Callable entries need an 'import: module:function' string.")
    mod_name, sep, func_name = spec["import"].partition(":")
    if not sep or not func_name:
        raise ValueError(f"Malformed import string {spec['import']!r}")
    mod = importlib.import_module(mod_name)
    func = getattr(mod, func_name)

    kwargs = spec.get("kwargs", default_kwargs) or {}
    return partial(func, **kwargs)


@dataclass(frozen=True, slots=True)
class CGModel:
    """
    Configured Riemannian CG run.

    A thin driver around :class:`~geocg.optim.ConjugateGradient` that picks a
    geometry by name, draws seeded random starts and, with ``restarts > 1``,
    re-runs from fresh seeds keeping the lowest cost.
    """

    cost_func: Callable[[Point], float]
    grad_func: Callable[[Point], Vector]
    geometry: str
    shape: tuple[int, ...]
    seed: int = 0
    scheme: str = "hestenes-stiefel"
    restart: bool = False
    max_steps: int = 1000
    restarts: int = 1
    log_every: int = 0
    line_search: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.geometry not in GEOMETRIES:
            raise ValueError(
                f"Unknown geometry {self.geometry!r}; choose from {sorted(GEOMETRIES)}"
            )
        if self.max_steps <= 0:
            raise ValueError("max_steps must be positive.")
        if self.restarts < 1:
            raise ValueError("restarts must be at least one.")
        # fail early on a bad scheme name
        get_scheme(self.scheme, restart=self.restart)

    @classmethod
    def from_config(cls, path: str | Path) -> CGModel:
        cfg = yaml.safe_load(Path(path).read_text())
        if not isinstance(cfg, dict) or not isinstance(cfg.get("init"), dict):
            raise TypeError(f"{path}: expected a mapping with an 'init' section")
        init = dict(cfg["init"])

        ecfg = init.pop("cost")
        init["cost_func"] = load_callable(ecfg)
        init["grad_func"] = load_callable(init.pop("grad"), ecfg.get("kwargs"))

        shape = init.pop("shape")
        init["shape"] = (shape,) if isinstance(shape, int) else tuple(shape)

        return cls(**init)

    def build(self) -> ConjugateGradient:
        """Fresh optimizer instance for one run."""
        make_geodesic, _ = GEOMETRIES[self.geometry]
        return ConjugateGradient(
            make_geodesic(),
            scheme=get_scheme(self.scheme, restart=self.restart),
            line_search=SecantLineSearch(**self.line_search),
            max_steps=self.max_steps,
            log_every=self.log_every,
        )

    def run(self, initial: Point | None = None) -> Result:
        """
        Optimize from ``initial`` (or from seeded random points).

        With an explicit ``initial`` a single run is made regardless of
        ``restarts``.
        """
        _, sample = GEOMETRIES[self.geometry]
        cost = CallCounter(self.cost_func)
        grad = CallCounter(self.grad_func)

        best: tuple[float, Point, int] | None = None
        seed = self.seed
        n_runs = 1 if initial is not None else self.restarts

        t0 = time.perf_counter()
        for _ in range(n_runs):
            if initial is None:
                x0 = sample(self.shape, np.random.default_rng(seed))
            else:
                x0 = initial

            cg = self.build()
            x = cg.optimize(x0, cost, grad)
            E = float(self.cost_func(x))

            if best is None or E < best[0]:
                best = (E, x, cg.n)

            seed += 1
        dt = time.perf_counter() - t0

        assert best is not None
        best_E, best_x, steps = best

        return Result(
            point=best_x,
            cost=best_E,
            steps=steps,
            wall_time_s=dt,
            extras={
                "scheme": self.scheme + ("+" if self.restart else ""),
                "runs": n_runs,
                "cost_evals": cost.n_calls,
                "grad_evals": grad.n_calls,
            },
        )
