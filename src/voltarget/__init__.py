"""
Volatility-Target Asymptotics
=============================
Black-Scholes engine, volatility-target index simulation, and the
asymptotic multipliers U(lambda), V(lambda) that describe the index in
the high-frequency limit.

Author: Jose Orlando Bobadilla Fuentes, CQF
"""

from voltarget.config import DEFAULT_RNG_SEED, ValidationSettings
from voltarget.models.black_scholes import BlackScholesEngine, MarketModel
from voltarget.models.volatility_target import VolatilityTargetEngine, VolTargetConfig
from voltarget.models.multipliers import (
    multiplier_u, multiplier_v, multiplier_u_bounds, multiplier_v_bounds,
    limit_volatility, limit_repo_rate, limit_engine, limit_vega,
)
from voltarget.utils.integration import integrate
from voltarget.utils.random_numbers import StandardNormalGenerator
from voltarget.utils.special_functions import normal_cdf, q_pochhammer

__version__ = "1.0.0"
__author__ = "Jose Orlando Bobadilla Fuentes"

__all__ = [
    "DEFAULT_RNG_SEED", "ValidationSettings",
    "BlackScholesEngine", "MarketModel",
    "VolatilityTargetEngine", "VolTargetConfig",
    "multiplier_u", "multiplier_v", "multiplier_u_bounds", "multiplier_v_bounds",
    "limit_volatility", "limit_repo_rate", "limit_engine", "limit_vega",
    "integrate", "StandardNormalGenerator", "normal_cdf", "q_pochhammer",
]
