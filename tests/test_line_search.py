import math

import pytest

from geocg.optim.line_search import BacktrackingLineSearch, SecantLineSearch


def _recording(fn, log):
    def wrapped(t):
        log.append(t)
        return fn(t)

    return wrapped


def test_expands_to_exact_quadratic_minimum():
    ls = SecantLineSearch()
    alpha = ls.search(lambda t: (t - 2.0) ** 2, lambda t: 2.0 * (t - 2.0))
    assert alpha == pytest.approx(2.0)
    assert ls.alpha == alpha
    assert ls.value == pytest.approx(0.0)


def test_secant_is_exact_on_quadratics():
    ls = SecantLineSearch()
    alpha = ls.search(lambda t: (t - 0.3) ** 2, lambda t: 2.0 * (t - 0.3))
    assert alpha == pytest.approx(0.3, abs=1e-15)


def test_zoom_on_non_quadratic():
    ls = SecantLineSearch()
    alpha = ls.search(lambda t: -math.sin(t), lambda t: -math.cos(t))
    assert alpha == pytest.approx(math.pi / 2, abs=1e-8)


@pytest.mark.parametrize(
    "derivative",
    [lambda t: 1.0, lambda t: 0.0, lambda t: math.nan],
    ids=["ascent", "flat", "nan"],
)
def test_no_descent_returns_sentinel(derivative):
    ls = SecantLineSearch()
    alpha = ls.search(lambda t: 1.0 + t, derivative)
    assert alpha <= 0.0
    assert ls.alpha == 0.0


def test_no_improvement_returns_sentinel():
    # claims descent at 0 but the cost rises everywhere else
    ls = SecantLineSearch(max_iter=20)
    alpha = ls.search(lambda t: 0.0 if t == 0.0 else 1.0, lambda t: -1.0)
    assert alpha == 0.0


def test_unbounded_direction_stops_after_budget():
    ls = SecantLineSearch(max_expansions=5)
    alpha = ls.search(lambda t: -t, lambda t: -1.0)
    assert alpha == 16.0


def test_step_memory_and_reset():
    ls = SecantLineSearch(initial_step=1.0)
    ls.search(lambda t: (t - 2.0) ** 2, lambda t: 2.0 * (t - 2.0))

    log: list[float] = []
    ls.search(_recording(lambda t: (t - 2.0) ** 2, log), lambda t: 2.0 * (t - 2.0))
    assert log[1] == pytest.approx(2.0)  # starts from the remembered step

    ls.reset()
    assert ls.alpha == 0.0
    log.clear()
    ls.search(_recording(lambda t: (t - 2.0) ** 2, log), lambda t: 2.0 * (t - 2.0))
    assert log[1] == 1.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"initial_step": 0.0},
        {"c1": 0.0},
        {"c1": 1.0},
        {"gtol": -1.0},
        {"expansion": 1.0},
        {"max_iter": 0},
        {"max_step": 0.0},
    ],
)
def test_secant_validation(kwargs):
    with pytest.raises(ValueError):
        SecantLineSearch(**kwargs)


def test_backtracking_armijo():
    ls = BacktrackingLineSearch(adaptive=False)
    alpha = ls.search(lambda t: (t - 0.3) ** 2, lambda t: 2.0 * (t - 0.3))
    assert alpha == 0.5
    assert ls.value == pytest.approx(0.04)


def test_backtracking_failure_and_validation():
    ls = BacktrackingLineSearch(max_iter=10)
    assert ls.search(lambda t: 1.0 + t, lambda t: -1.0) == 0.0
    with pytest.raises(ValueError):
        BacktrackingLineSearch(contraction=1.5)


def test_slowly_varying_periodic_cost_hits_step_cap():
    # φ(t) = cos(ωt + δ) keeps descending for ~3e7 units of t
    omega, delta = 1e-7, 1e-3
    ls = SecantLineSearch()
    alpha = ls.search(
        lambda t: math.cos(omega * t + delta),
        lambda t: -omega * math.sin(omega * t + delta),
    )
    assert alpha == ls.max_step
    assert ls.value < math.cos(delta)


def test_step_cap_bounds_remembered_step():
    ls = SecantLineSearch(initial_step=5.0, max_step=2.0)

    def phi(t):
        return math.cos(t + 1e-9)

    def dphi(t):
        return -math.sin(t + 1e-9)

    assert ls.search(phi, dphi) == 2.0

    log: list[float] = []
    assert ls.search(_recording(phi, log), dphi) <= 2.0
    assert max(log) <= 2.0


def test_backtracking_step_cap():
    ls = BacktrackingLineSearch(initial_step=10.0, max_step=0.5, adaptive=False)
    alpha = ls.search(lambda t: (t - 0.3) ** 2, lambda t: 2.0 * (t - 0.3))
    assert alpha == 0.5
    with pytest.raises(ValueError):
        BacktrackingLineSearch(max_step=0.0)
