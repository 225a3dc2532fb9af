"""
Conjugate-direction update formulas.

Each scheme returns the coefficient β that blends the transported previous
search direction Td₋ into the new one, d = −g + β·Td₋. All inner products
are taken with the metric at the current point x, except Fletcher–Reeves'
denominator which uses the metric at the previous point x₋. Tg₋ denotes the
previous gradient parallel-transported to x.

    FletcherReeves      ‖g‖² / ‖g₋‖²_{x₋}
    PolakRibiere        ⟨g, g − Tg₋⟩ / ‖Tg₋‖²
    HestenesStiefel     ⟨g, g − Tg₋⟩ / ⟨Td₋, g − Tg₋⟩
    ConjugateDescent    −‖g‖² / ⟨Td₋, Tg₋⟩
    DaiYuan             ‖g‖² / ⟨Td₋, g − Tg₋⟩

Divisions follow IEEE semantics: a vanishing denominator yields ``±inf`` or
``nan`` rather than an exception, and the resulting non-finite direction
makes the next line search fail.
"""

from __future__ import annotations

import math
from typing import Protocol

import numpy as np

from geocg.core._types import Vector
from geocg.core.geometry import InnerProduct

__all__ = [
    "BetaScheme",
    "FletcherReeves",
    "PolakRibiere",
    "HestenesStiefel",
    "ConjugateDescent",
    "DaiYuan",
    "Restarted",
    "SCHEMES",
    "get_scheme",
]


class BetaScheme(Protocol):
    name: str

    def compute_beta(
        self,
        grad: Vector,
        last_grad: Vector,
        pt_last_grad: Vector,
        pt_last_vel: Vector,
        inner: InnerProduct,
        last_inner: InnerProduct,
    ) -> float: ...


def _ratio(num: float, den: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(num, den))


class FletcherReeves:
    name = "fletcher-reeves"

    def compute_beta(self, grad, last_grad, pt_last_grad, pt_last_vel, inner, last_inner):
        return _ratio(inner.norm2(grad), last_inner.norm2(last_grad))


class PolakRibiere:
    name = "polak-ribiere"

    def compute_beta(self, grad, last_grad, pt_last_grad, pt_last_vel, inner, last_inner):
        return _ratio(inner(grad, grad - pt_last_grad), inner.norm2(pt_last_grad))


class HestenesStiefel:
    name = "hestenes-stiefel"

    def compute_beta(self, grad, last_grad, pt_last_grad, pt_last_vel, inner, last_inner):
        diff = grad - pt_last_grad
        return _ratio(inner(grad, diff), inner(pt_last_vel, diff))


class ConjugateDescent:
    name = "conjugate-descent"

    def compute_beta(self, grad, last_grad, pt_last_grad, pt_last_vel, inner, last_inner):
        return _ratio(-inner.norm2(grad), inner(pt_last_vel, pt_last_grad))


class DaiYuan:
    name = "dai-yuan"

    def compute_beta(self, grad, last_grad, pt_last_grad, pt_last_vel, inner, last_inner):
        return _ratio(inner.norm2(grad), inner(pt_last_vel, grad - pt_last_grad))


class Restarted:
    """
    Opt-in restart to steepest descent around another scheme.

    Replaces β by 0 whenever the wrapped scheme returns a negative or
    non-finite value (e.g. ``Restarted(PolakRibiere())`` is PR+). Not used
    unless requested explicitly.
    """

    def __init__(self, scheme: BetaScheme):
        self.scheme = scheme
        self.name = f"{scheme.name}+"

    def compute_beta(self, grad, last_grad, pt_last_grad, pt_last_vel, inner, last_inner):
        beta = self.scheme.compute_beta(
            grad, last_grad, pt_last_grad, pt_last_vel, inner, last_inner
        )
        if not math.isfinite(beta) or beta < 0.0:
            return 0.0
        return beta


SCHEMES: dict[str, type[BetaScheme]] = {
    "fletcher-reeves": FletcherReeves,
    "polak-ribiere": PolakRibiere,
    "hestenes-stiefel": HestenesStiefel,
    "conjugate-descent": ConjugateDescent,
    "dai-yuan": DaiYuan,
}

_ALIASES = {
    "fr": "fletcher-reeves",
    "pr": "polak-ribiere",
    "prp": "polak-ribiere",
    "hs": "hestenes-stiefel",
    "cd": "conjugate-descent",
    "dy": "dai-yuan",
}


def get_scheme(name: str, *, restart: bool = False) -> BetaScheme:
    """
    Instantiate a scheme by name.

    Parameters
    ----------
    name : str
        Full name (``"hestenes-stiefel"``, underscores and case ignored) or
        short alias (``"HS"``, ``"FR"``, ``"PR"``, ``"CD"``, ``"DY"``).
        A trailing ``"+"`` implies ``restart=True``.
    restart : bool, keyword-only
        Wrap the scheme in :class:`Restarted`.

    Raises
    ------
    TypeError
        If ``name`` is not a string.
    ValueError
        If ``name`` is unknown.
    """
    if not isinstance(name, str):
        raise TypeError(f"scheme name must be a string, got {type(name).__name__}")

    key = name.strip().lower().replace("_", "-").replace(" ", "-")
    if key.endswith("+"):
        key, restart = key[:-1], True
    key = _ALIASES.get(key, key)
    if key not in SCHEMES:
        raise ValueError(f"Unknown CG scheme {name!r}; choose from {sorted(SCHEMES)}")

    scheme = SCHEMES[key]()
    return Restarted(scheme) if restart else scheme
