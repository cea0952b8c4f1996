"""
Special Functions
=================

normal_cdf:
    N(x) = 0.5 * (1 + erf(x / sqrt(2)))

q_pochhammer:
    (a; q)_n = prod_{k=0}^{n-1} (1 - a q^k),    |q| < 1

    Evaluated as exp(sum log|1 - a q^k|) so that the geometric decay of
    q^k does not underflow the running product. When n is omitted the
    infinite product is truncated at the first index whose remaining
    contribution is below the tolerance:

        n = ceil( log(0.5 * eps * (1 - |q|) / |a|) / log|q| ),  eps = 1e-8

Author: Jose Orlando Bobadilla Fuentes | CQF
"""

import math
from typing import Optional, Union

import numpy as np
from scipy.special import erf

ZERO_TOL = 1e-12
TRUNCATION_EPS = 1e-8


def normal_cdf(x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """Standard normal cumulative distribution function."""
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def truncation_order(a: float, q: float, eps: float = TRUNCATION_EPS) -> int:
    """Number of factors needed to approximate (a; q)_inf within eps."""
    abs_q = abs(q)
    if abs_q < ZERO_TOL:
        return 1
    nd = math.log(0.5 * eps * (1.0 - abs_q) / abs(a)) / math.log(abs_q)
    return max(int(math.ceil(nd)), 0)


def q_pochhammer(a: float, q: float, n: Optional[int] = None) -> float:
    """
    q-Pochhammer symbol (a; q)_n, or the truncated (a; q)_inf when n is None.

    Parameters:
        a: Scale of the product terms.
        q: Ratio, |q| < 1.
        n: Number of factors. None selects the truncation order automatically.

    Returns:
        The product as a float. Empty products (n = 0, or a ~ 0) equal 1.
    """
    if not abs(q) < 1.0:
        raise ValueError(f"abs(q) < 1 must be true, got q={q}")

    if abs(a) < ZERO_TOL:
        return 1.0

    n_to_use = truncation_order(a, q) if n is None else n
    if n_to_use <= 0:
        return 1.0

    factors = 1.0 - a * np.power(q, np.arange(n_to_use, dtype=float))
    if np.any(factors == 0.0):
        return 0.0
    sign = -1.0 if np.count_nonzero(factors < 0.0) % 2 else 1.0
    # large |a| overflows to inf, which the multiplier integrands map to 0
    with np.errstate(over="ignore"):
        return sign * float(np.exp(np.sum(np.log(np.abs(factors)))))
