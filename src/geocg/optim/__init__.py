from .conjugate_gradient import CGState, ConjugateGradient, minimize
from .line_search import BacktrackingLineSearch, LineSearch, SecantLineSearch
from .schemes import (
    BetaScheme,
    ConjugateDescent,
    DaiYuan,
    FletcherReeves,
    HestenesStiefel,
    PolakRibiere,
    Restarted,
    get_scheme,
)

__all__: list[str] = [
    "CGState",
    "ConjugateGradient",
    "minimize",
    "LineSearch",
    "SecantLineSearch",
    "BacktrackingLineSearch",
    "BetaScheme",
    "FletcherReeves",
    "PolakRibiere",
    "HestenesStiefel",
    "ConjugateDescent",
    "DaiYuan",
    "Restarted",
    "get_scheme",
]
