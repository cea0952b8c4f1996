"""
Composite midpoint quadrature on a finite interval.

    int_a^b f(x) dx  ~  h * sum_{i=0}^{N-1} f(a + (i + 1/2) h),   h = (b - a) / N

Accurate to O(h^2) for the smooth, monotonically decaying kernels used
by the asymptotic multipliers. No adaptive refinement.
"""

from typing import Callable

import numpy as np

DEFAULT_SUBDIVISIONS = 5000


def midpoints(a: float, b: float, N: int = DEFAULT_SUBDIVISIONS) -> np.ndarray:
    """Midpoints of N equal subintervals of [a, b]."""
    h = (b - a) / N
    return a + (np.arange(N) + 0.5) * h


def integrate(f: Callable[[float], float], a: float, b: float,
              N: int = DEFAULT_SUBDIVISIONS, vectorized: bool = False) -> float:
    """
    Approximate the integral of f over [a, b] with the midpoint rule.

    Parameters:
        f: Scalar function of one real variable. With vectorized=True it
           must accept and return numpy arrays.
        a, b: Integration bounds, a < b.
        N: Number of equal subintervals, N > 0.
        vectorized: Evaluate f once on the full midpoint grid.

    Returns:
        Midpoint-rule estimate of the integral.
    """
    if not a < b:
        raise ValueError(f"a < b must be true, got a={a}, b={b}")
    if N <= 0:
        raise ValueError(f"N > 0 must be true, got N={N}")

    x = midpoints(a, b, N)
    if vectorized:
        fx = np.asarray(f(x), dtype=float)
    else:
        fx = np.fromiter((f(xi) for xi in x), dtype=float, count=N)
    return float(fx.sum() * (b - a) / N)
