"""
Volatility-Target Index Engine
===============================

A volatility-target index re-levers a risky asset S so that its realized
volatility tracks a target sigma*. On a uniform rebalancing grid
dt = T / N the index level L and the variance estimate v evolve as

    ret_i = S_i / S_{i-1} - 1
    w_i   = sigma* / sqrt(v_{i-1})                       (leverage)
    L_i   = L_{i-1} * (1 + (1 - w_i) * r * dt + w_i * ret_i)
    v_i   = lambda * v_{i-1} + (1 - lambda) * ret_i^2 / dt

starting from L_0 and v_0. The unlevered fraction (1 - w) accrues at the
discount rate; the levered fraction takes the realized return. The
variance estimator is an exponentially-weighted moving average whose
memory grows as lambda -> 1.

Even though S follows plain GBM, the feedback between realized returns
and leverage makes the terminal level path dependent. Its limiting
distribution as N -> inf and lambda -> 1 is characterized by the
multipliers in `voltarget.models.multipliers`.

Author: Jose Orlando Bobadilla Fuentes | CQF
"""

import math
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from voltarget.config import DEFAULT_RNG_SEED, default_batch_size
from voltarget.models.black_scholes import BlackScholesEngine, MarketModel
from voltarget.utils.helpers import get_logger, timeit
from voltarget.utils.random_numbers import StandardNormalGenerator

log = get_logger(__name__)


@dataclass(frozen=True)
class VolTargetConfig:
    """
    Attributes:
        lamb: Decay of the variance estimator, 0 < lamb < 1
        num_time_steps: Rebalancing steps N over the tenor, N > 1
        target_volatility: Target volatility sigma* (> 0)
        tenor: Horizon T in years (> 0)
        init_var: Initial variance estimate v0 (> 0)
        init_level: Initial index level L0 (> 0)
    """
    lamb: float
    num_time_steps: int
    target_volatility: float
    tenor: float
    init_var: float
    init_level: float = 1.0

    def __post_init__(self):
        if not 0.0 < self.lamb < 1.0:
            raise ValueError(f"0.0 < lamb < 1.0 must be true (lamb={self.lamb})")
        if not self.num_time_steps > 1:
            raise ValueError(
                f"num_time_steps > 1 must be true (num_time_steps={self.num_time_steps})")
        if not self.target_volatility > 0.0:
            raise ValueError(
                f"target_volatility must be positive, got {self.target_volatility}")
        if not self.tenor > 0.0:
            raise ValueError(f"tenor must be positive, got {self.tenor}")
        if not self.init_var > 1e-12:
            raise ValueError(f"init_var must be positive, got {self.init_var}")
        if not self.init_level > 1e-12:
            raise ValueError(f"init_level must be positive, got {self.init_level}")

    @property
    def rebalance_time_step(self) -> float:
        return self.tenor / self.num_time_steps


_VAR_UNDERFLOW = ("variance estimate must stay positive; it underflowed to 0 "
                  "(lamb too small for num_time_steps on a flat path)")


def _resolve_batch_size(batch_size: Optional[int], num_time_steps: int) -> int:
    if batch_size is None:
        return default_batch_size(num_time_steps)
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return batch_size


def _simulate_batch(args) -> np.ndarray:
    """Worker entry point: (engine, num_samples, seed, batch_size) -> levels."""
    engine, num_samples, seed, batch_size = args
    return engine.simulate_levels(num_samples, seed=seed, batch_size=batch_size)


class VolatilityTargetEngine:
    """
    Terminal levels of a volatility-target index on GBM paths.

    The Black-Scholes engine describing the underlier is held by
    reference and never modified; several strategies can share it.

    Usage:
        >>> sde = BlackScholesEngine.create(0.05, 0.02, 0.5)
        >>> cfg = VolTargetConfig(lamb=0.97, num_time_steps=1000,
        ...                       target_volatility=0.2, tenor=1.0, init_var=0.02)
        >>> vt = VolatilityTargetEngine(sde, cfg)
        >>> levels = vt.simulate_levels(num_samples=10000)
    """

    def __init__(self, sde: Union[BlackScholesEngine, MarketModel], config: VolTargetConfig):
        if isinstance(sde, MarketModel):
            sde = BlackScholesEngine(sde)
        self.sde = sde
        self.config = config

    def __repr__(self) -> str:
        c = self.config
        return (f"VolatilityTargetEngine(lamb={c.lamb}, N={c.num_time_steps}, "
                f"target_vol={c.target_volatility}, T={c.tenor}, sde={self.sde!r})")

    @property
    def lamb(self) -> float:
        return self.config.lamb

    @property
    def num_time_steps(self) -> int:
        return self.config.num_time_steps

    @property
    def target_volatility(self) -> float:
        return self.config.target_volatility

    @property
    def tenor(self) -> float:
        return self.config.tenor

    @property
    def init_var(self) -> float:
        return self.config.init_var

    @property
    def init_level(self) -> float:
        return self.config.init_level

    @property
    def rebalance_time_step(self) -> float:
        return self.config.rebalance_time_step

    def time_increments(self) -> np.ndarray:
        return np.full(self.num_time_steps, self.rebalance_time_step)

    # ------------------------------------------------------------------
    # Level recursion
    # ------------------------------------------------------------------
    def compute_level(self, stock_path: Sequence[float]) -> float:
        """
        Terminal index level along one price path of length N + 1.
        Requires the variance estimate to stay positive; a flat path with
        lamb**N below the float range underflows it and raises ValueError.
        """
        if len(stock_path) != self.num_time_steps + 1:
            raise ValueError(
                f"stock_path size should be num_time_steps + 1 = {self.num_time_steps + 1}, "
                f"got {len(stock_path)}")
        c = self.config
        r = self.sde.discount_rate
        dt = c.rebalance_time_step
        level = c.init_level
        var = c.init_var
        prev = float(stock_path[0])
        for s in stock_path[1:]:
            s = float(s)
            ret = s / prev - 1.0
            if not var > 0.0:
                raise ValueError(_VAR_UNDERFLOW)
            w = c.target_volatility / math.sqrt(var)
            level *= 1.0 + (1.0 - w) * r * dt + w * ret
            var = c.lamb * var + (1.0 - c.lamb) * ret * ret / dt
            prev = s
        return level

    def compute_levels(self, stock_paths: np.ndarray) -> np.ndarray:
        """
        Vectorized compute_level over a batch of paths, shape (n_paths, N + 1).
        The recursion runs over time; each step updates every path at once.
        """
        stock_paths = np.asarray(stock_paths, dtype=float)
        if stock_paths.ndim != 2 or stock_paths.shape[1] != self.num_time_steps + 1:
            raise ValueError(
                f"stock_paths must have shape (n_paths, {self.num_time_steps + 1}), "
                f"got {stock_paths.shape}")
        c = self.config
        r = self.sde.discount_rate
        dt = c.rebalance_time_step
        n_paths = stock_paths.shape[0]

        # time-major so each step reads a contiguous row
        rets = np.ascontiguousarray((stock_paths[:, 1:] / stock_paths[:, :-1] - 1.0).T)
        level = np.full(n_paths, c.init_level)
        var = np.full(n_paths, c.init_var)
        for ret in rets:
            if not np.all(var > 0.0):
                raise ValueError(_VAR_UNDERFLOW)
            w = c.target_volatility / np.sqrt(var)
            level *= 1.0 + (1.0 - w) * r * dt + w * ret
            var = c.lamb * var + (1.0 - c.lamb) * ret * ret / dt
        return level

    # ------------------------------------------------------------------
    # Monte Carlo
    # ------------------------------------------------------------------
    @timeit
    def simulate_levels(self, num_samples: int, seed: int = DEFAULT_RNG_SEED,
                        batch_size: Optional[int] = None) -> np.ndarray:
        """
        Terminal index levels over `num_samples` simulated price paths.

        One generator is seeded once and drawn N normals per path, in path
        order. Paths are built in batches of `batch_size` rows to bound
        memory; the batching does not change the result.

        Parameters:
            num_samples: Number of paths
            seed: Generator seed
            batch_size: Paths per batch (default from MAX_BATCH_ELEMENTS)

        Returns:
            Array of terminal levels, length num_samples
        """
        if num_samples < 0:
            raise ValueError(f"num_samples must be non-negative, got {num_samples}")
        n = self.num_time_steps
        batch = _resolve_batch_size(batch_size, n)
        log.debug("Simulating %d VT levels: lamb=%.4f, N=%d, batch=%d, seed=%d",
                  num_samples, self.lamb, n, batch, seed)

        rng = StandardNormalGenerator(seed)
        dtimes = self.time_increments()
        levels = np.empty(num_samples)
        for start in range(0, num_samples, batch):
            rows = min(batch, num_samples - start)
            paths = self.sde.simulate_paths(dtimes, rng.draw_matrix(rows, n))
            levels[start:start + rows] = self.compute_levels(paths)
        return levels

    @timeit
    def simulate_levels_parallel(self, num_samples: int, seed: int = DEFAULT_RNG_SEED,
                                 n_workers: int = 1,
                                 batch_size: Optional[int] = None) -> np.ndarray:
        """
        Process-parallel Monte Carlo. Batch k (of `batch_size` paths) owns a
        generator seeded with seed + k, so the output depends on
        (num_samples, seed, batch_size) but not on n_workers.
        """
        if num_samples < 0:
            raise ValueError(f"num_samples must be non-negative, got {num_samples}")
        if n_workers <= 0:
            raise ValueError(f"n_workers must be positive, got {n_workers}")
        batch = _resolve_batch_size(batch_size, self.num_time_steps)
        tasks = [
            (self, min(batch, num_samples - start), seed + k, batch)
            for k, start in enumerate(range(0, num_samples, batch))
        ]
        log.debug("Dispatching %d batches to %d workers", len(tasks), n_workers)
        if not tasks:
            return np.empty(0)

        if n_workers == 1:
            results = [_simulate_batch(t) for t in tasks]
        else:
            with ProcessPoolExecutor(max_workers=n_workers) as executor:
                results = list(executor.map(_simulate_batch, tasks))
        return np.concatenate(results)
