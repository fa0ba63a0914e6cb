"""
Poisson Math Module

Factorial and Poisson probability helpers shared by every scoring model.
"""

import functools
import math


@functools.lru_cache(maxsize=None)
def _factorial(n: int) -> int:
    return math.prod(range(2, n + 1))


def factorial(n: int) -> int:
    """
    Calculate n! with memoization.

    Args:
        n: Non-negative integer

    Returns:
        n! as an exact integer

    Raises:
        ValueError: If n is negative or not an integer
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValueError(f"Factorial is only defined for integers, got {n!r}")
    if n < 0:
        raise ValueError(f"Factorial is not defined for negative numbers, got {n}")
    return _factorial(n)


def cache_size() -> int:
    """Number of memoized factorial entries."""
    return _factorial.cache_info().currsize


def poisson_pmf(k: int, lam: float) -> float:
    """
    Calculate Poisson probability.

    P(X = k) = (λ^k * e^(-λ)) / k!

    Args:
        k: Number of occurrences
        lam: Expected value (λ)

    Returns:
        Probability of exactly ``k`` occurrences. 0.0 when λ <= 0, k < 0
        or k is not an integer.
    """
    if lam <= 0 or k < 0:
        return 0.0
    if isinstance(k, float):
        if not k.is_integer():
            return 0.0
        k = int(k)
    elif not isinstance(k, int):
        return 0.0

    return (math.pow(lam, k) * math.exp(-lam)) / factorial(k)


def poisson_vector(lam: float, max_goals: int) -> list[float]:
    """Poisson probabilities for 0..max_goals goals."""
    return [poisson_pmf(k, lam) for k in range(max_goals + 1)]


def point_mass_vector(max_goals: int) -> list[float]:
    """Distribution with all mass on zero goals (λ = 0 limit)."""
    probs = [0.0] * (max_goals + 1)
    probs[0] = 1.0
    return probs
