"""Hypergeometric richness and binomial concordance p-values.

Let ``k`` be the sample successes, ``n`` the sample size, ``m`` the population
successes and ``N`` the population size. Binomial coefficients are computed in
log space from a table of log-factorials so that genome-scale populations do
not overflow.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.special import betainc

DOUBLE_PRECISION_TOLERANCE = 1e-10

# above the ~20k-25k genes of a human genome
MAX_PRECALCULATED_LOG_SUM = 60000

PROBABILITY_CORRECT = 0.5


class MathError(ArithmeticError):
    """Raised when a statistic is requested outside its domain."""


def _build_log_sum_table(size: int) -> np.ndarray:
    table = np.zeros(size + 1)
    table[1:] = np.cumsum(np.log(np.arange(1, size + 1, dtype=float)))
    table.setflags(write=False)
    return table


# element i holds log(1) + ... + log(i); written once at import, read-only after
_LOG_SUM = _build_log_sum_table(MAX_PRECALCULATED_LOG_SUM)


def _check_counts(**counts: int) -> None:
    for name, value in counts.items():
        if value < 0:
            raise MathError(f"{name} must not be negative: {value}")


def log_sum(n: int) -> float:
    """Return ``log(n!)``, the sum of ``log(i)`` for ``i`` in ``1..n``."""
    _check_counts(n=n)
    if n <= MAX_PRECALCULATED_LOG_SUM:
        return float(_LOG_SUM[n])
    extra = np.log(np.arange(MAX_PRECALCULATED_LOG_SUM + 1, n + 1, dtype=float)).sum()
    return float(_LOG_SUM[MAX_PRECALCULATED_LOG_SUM] + extra)


def log_binomial_coefficient(n: int, k: int) -> float:
    """``log(n choose k)``."""
    _check_counts(n=n, k=k)
    if n < k:
        raise MathError(f"n must be greater than k to calculate (n choose k): n={n}, k={k}")
    return log_sum(n) - log_sum(k) - log_sum(n - k)


def binomial_coefficient(n: int, k: int) -> int:
    log_coefficient = log_binomial_coefficient(n, k)
    if log_coefficient > math.log(np.iinfo(np.int64).max):
        raise MathError(
            f"Binomial coefficient exceeds int64. Log value is {log_coefficient}"
        )
    return int(round(math.exp(log_coefficient)))


def hypergeometric_probability(k: int, n: int, m: int, N: int) -> float:
    """Probability of exactly ``k`` successes when drawing ``n`` of ``N`` with ``m`` successes."""
    _check_counts(k=k, n=n, m=m, N=N)
    if k > n:
        raise MathError(f"sample successes exceed sample size: k={k}, n={n}")
    m_c_k = log_binomial_coefficient(m, k)
    rest = log_binomial_coefficient(N - m, n - k)
    total = log_binomial_coefficient(N, n)
    return math.exp(m_c_k + rest - total)


def cumulative_hypergeometric_probability(k: int, n: int, m: int, N: int) -> float:
    """Probability of ``k`` or fewer successes."""
    _check_counts(k=k, n=n, m=m, N=N)
    if k > n:
        raise MathError(f"sample successes exceed sample size: k={k}, n={n}")
    return sum(hypergeometric_probability(i, n, m, N) for i in range(0, k + 1))


def cumulative_hypergeometric_probability_from_right(k: int, n: int, m: int, N: int) -> float:
    """Probability of ``k`` or more successes.

    Summing from ``i = n`` down to ``k`` keeps at least ten significant digits
    for tiny tail probabilities, where ``1 - P(X < k)`` would cancel to zero.
    """
    _check_counts(k=k, n=n, m=m, N=N)
    if k > n:
        raise MathError(f"sample successes exceed sample size: k={k}, n={n}")
    p = 0.0
    for i in range(n, k - 1, -1):
        # more successes than the population holds is impossible
        if m >= i:
            p += hypergeometric_probability(i, n, m, N)
    return p


def richness(k: int, n: int, m: int, N: int) -> float:
    """Chance of observing ``k`` or more state changes among ``n`` measured downstreams."""
    _check_counts(k=k, n=n, m=m, N=N)
    if k > n:
        raise MathError(f"sample successes exceed sample size: k={k}, n={n}")
    if k == 0:
        return 1.0
    return cumulative_hypergeometric_probability_from_right(k, n, m, N)


def concordance(correct: int, contra: int) -> float:
    """One-sided p-value for ``correct`` agreements against ``contra`` disagreements.

    Evaluates the regularized incomplete beta ``I_0.5(correct, contra + 1)``.
    """
    if correct < 0 or contra < 0:
        raise MathError(
            f"correct count and contra count must not be negative: {correct}, {contra}"
        )
    if correct == 0:
        return 1.0
    try:
        p = float(betainc(correct, contra + 1.0, PROBABILITY_CORRECT))
    except Exception as e:
        raise MathError(f"Error calculating binomial distribution: {correct}, {contra}") from e
    if not math.isfinite(p):
        raise MathError(f"Error calculating binomial distribution: {correct}, {contra}")
    return p
