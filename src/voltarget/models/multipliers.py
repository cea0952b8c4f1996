"""
Asymptotic Multipliers of the Volatility-Target Index
======================================================

As the rebalancing frequency grows, the volatility-target index behaves
like a Black-Scholes asset whose volatility and repo rate are scaled by
two functions of the variance decay lambda:

    U(lambda) = sqrt(2 / (pi * (1 - lambda))) * int_0^20 dt / sqrt((-t^2; lambda)_inf)
    V(lambda) = 1 / (2 * (1 - lambda))         * int_0^20 dt / sqrt((-t;   lambda)_inf)

    limit volatility = sigma* * sqrt(V(lambda))
    limit repo rate  = U(lambda) * sigma* / sigma * q

The integrands decay fast enough that truncating at 20 is negligible
for lambda in [0.7, 0.99].

Both multipliers are bracketed by elementary bounds (l = 1 / lambda):

    sqrt(l^1.2 ln l / (l - 1))  <=  U  <=  sqrt(l^1.25 ln l / (l - 1)) / (1 - exp(-2 pi^2 / ln l))
    l^1.45 ln l / (l - 1)       <=  V  <=  l^1.5 ln l / (l - 1)

Author: Jose Orlando Bobadilla Fuentes | CQF
"""

import math
from typing import Tuple

from voltarget.models.black_scholes import BlackScholesEngine, MarketModel
from voltarget.models.volatility_target import VolTargetConfig
from voltarget.utils.integration import integrate
from voltarget.utils.special_functions import q_pochhammer

INTEGRATION_UPPER = 20.0


def _check_lambda(lamb: float) -> None:
    if not 0.0 < lamb < 1.0:
        raise ValueError(f"0.0 < lamb < 1.0 must be true (lamb={lamb})")


def multiplier_u(lamb: float) -> float:
    """Repo-rate multiplier U(lambda)."""
    _check_lambda(lamb)

    def f(t):
        return 1.0 / math.sqrt(q_pochhammer(-t * t, lamb))

    return math.sqrt(2.0 / math.pi / (1.0 - lamb)) * integrate(f, 0.0, INTEGRATION_UPPER)


def multiplier_v(lamb: float) -> float:
    """Variance multiplier V(lambda)."""
    _check_lambda(lamb)

    def f(t):
        return 1.0 / math.sqrt(q_pochhammer(-t, lamb))

    return 0.5 / (1.0 - lamb) * integrate(f, 0.0, INTEGRATION_UPPER)


def multiplier_u_bounds(lamb: float) -> Tuple[float, float]:
    """(lower, upper) bounds on U(lambda)."""
    _check_lambda(lamb)
    one_by_lamb = 1.0 / lamb
    log_l = math.log(one_by_lamb)
    upper = (math.sqrt(one_by_lamb ** 1.25 * log_l / (one_by_lamb - 1.0))
             / (1.0 - math.exp(-2.0 * math.pi ** 2 / log_l)))
    lower = math.sqrt(one_by_lamb ** 1.2 * log_l / (one_by_lamb - 1.0))
    return lower, upper


def multiplier_v_bounds(lamb: float) -> Tuple[float, float]:
    """(lower, upper) bounds on V(lambda)."""
    _check_lambda(lamb)
    one_by_lamb = 1.0 / lamb
    log_l = math.log(one_by_lamb)
    upper = one_by_lamb ** 1.5 * log_l / (one_by_lamb - 1.0)
    lower = one_by_lamb ** 1.45 * log_l / (one_by_lamb - 1.0)
    return lower, upper


# ---------------------------------------------------------------------------
# Limiting Black-Scholes model of the index
# ---------------------------------------------------------------------------
def limit_volatility(config: VolTargetConfig) -> float:
    return config.target_volatility * math.sqrt(multiplier_v(config.lamb))


def limit_repo_rate(market: MarketModel, config: VolTargetConfig) -> float:
    return multiplier_u(config.lamb) * config.target_volatility / market.volatility * market.repo_rate


def limit_engine(market: MarketModel, config: VolTargetConfig) -> BlackScholesEngine:
    """Black-Scholes engine approximating the index as N -> inf."""
    return BlackScholesEngine.create(
        discount_rate=market.discount_rate,
        repo_rate=limit_repo_rate(market, config),
        volatility=limit_volatility(config),
        init_level=config.init_level,
    )


def limit_vega(market: MarketModel, config: VolTargetConfig) -> float:
    """
    Sensitivity of the ATM index call to the underlier's volatility in the
    limit model. Only the repo rate depends on sigma, hence
        dC/dsigma = (limit_repo / sigma) * rho_q
    with rho_q the (sign-flipped) repo sensitivity of the limit engine.
    """
    engine = limit_engine(market, config)
    rho = engine.call_rho(config.init_level, config.tenor)
    return engine.repo_rate / market.volatility * rho
