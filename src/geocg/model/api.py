from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import update_wrapper
from typing import Any, Generic, ParamSpec, TypeVar

from geocg.core._types import Point

__all__ = ["Result", "CallCounter"]

P = ParamSpec("P")
R = TypeVar("R")


@dataclass
class Result:
    point: Point
    cost: float
    steps: int
    wall_time_s: float
    extras: dict[str, Any] = field(default_factory=dict)


class CallCounter(Generic[P, R]):
    """
    Callable wrapper counting invocations of a cost or gradient.

    The wrapped function's name and docstring are preserved.
    """

    def __init__(self, fn: Callable[P, R]) -> None:
        self._fn = fn
        self.n_calls: int = 0
        update_wrapper(self, fn)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R:
        self.n_calls += 1
        return self._fn(*args, **kwargs)
