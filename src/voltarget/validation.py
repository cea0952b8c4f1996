"""
Validation Scenarios for the Volatility-Target Asymptotics
===========================================================

Each scenario sweeps rebalancing frequency N and variance decay lambda,
runs the Monte Carlo engine, and tabulates the simulated statistic next
to its asymptotic prediction:

    multiplier_u_bounds               U(lambda) against its analytic bounds
    multiplier_v_bounds               V(lambda) against its analytic bounds
    vt_volatility                     realized vol  vs  sigma* sqrt(V(lambda))
    vt_volatility_simultaneous_limit  realized vol  vs  sigma*   (v0 = sigma^2)
    vt_volatility_limit_along_path_1  realized vol along lambda = 1 - 1/N^2
    vt_volatility_limit_along_path_2  realized vol along lambda = 1 - ln N / sqrt(N)
    vt_pricing                        MC ATM call on the index vs limit BS price
    vt_vega                           MC bump-and-revalue vega vs limit vega

Every scenario returns a pandas DataFrame (one row per configuration)
and, when an output directory is given, writes it as <name>.csv.
"""

import os
from typing import Callable, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from voltarget.config import ValidationSettings
from voltarget.models.black_scholes import BlackScholesEngine
from voltarget.models.multipliers import (
    limit_engine, limit_vega, limit_volatility,
    multiplier_u, multiplier_u_bounds, multiplier_v, multiplier_v_bounds,
)
from voltarget.models.volatility_target import VolatilityTargetEngine, VolTargetConfig
from voltarget.utils.helpers import get_logger, sample_std

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def lambda_grid(start: float, step: float, extras: Iterable[float] = ()) -> List[float]:
    """start, start + step, ... strictly below 1, followed by extra points above the grid."""
    grid = [round(x, 10) for x in np.arange(start, 1.0 - 1e-9, step)]
    for x in extras:
        if grid[-1] < x:
            grid.append(x)
    return grid


def _market(settings: ValidationSettings, volatility: Optional[float] = None) -> BlackScholesEngine:
    return BlackScholesEngine.create(
        discount_rate=settings.discount_rate,
        repo_rate=settings.repo_rate,
        volatility=settings.volatility if volatility is None else volatility,
        init_level=settings.init_stock_level,
    )


def _config(settings: ValidationSettings, lamb: float, num_steps: int,
            init_var: Optional[float] = None) -> VolTargetConfig:
    return VolTargetConfig(
        lamb=lamb,
        num_time_steps=num_steps,
        target_volatility=settings.target_volatility,
        tenor=settings.tenor,
        init_var=settings.init_var if init_var is None else init_var,
        init_level=settings.init_vt_level,
    )


def _simulate(vt: VolatilityTargetEngine, settings: ValidationSettings) -> np.ndarray:
    if settings.n_workers > 1:
        return vt.simulate_levels_parallel(settings.num_samples, seed=settings.seed,
                                           n_workers=settings.n_workers)
    return vt.simulate_levels(settings.num_samples, seed=settings.seed)


def realized_volatility(levels: np.ndarray, init_level: float, tenor: float) -> float:
    """Annualized standard deviation of log(L_T / L_0)."""
    return sample_std(np.log(levels / init_level)) / np.sqrt(tenor)


def atm_call_price(levels: np.ndarray, init_level: float,
                   discount_rate: float, tenor: float) -> float:
    """Discounted Monte Carlo price of the at-the-money call on the index."""
    payoff = np.maximum(levels - init_level, 0.0)
    return float(np.exp(-discount_rate * tenor) * payoff.mean())


def _save(df: pd.DataFrame, name: str, output_dir: Optional[str]) -> pd.DataFrame:
    if output_dir is not None:
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, f"{name}.csv")
        df.to_csv(path, index=False)
        log.info("Results saved to %s", path)
    return df


# ---------------------------------------------------------------------------
# Multiplier bounds
# ---------------------------------------------------------------------------
def run_multiplier_u_bounds(settings: ValidationSettings,
                            output_dir: Optional[str] = None) -> pd.DataFrame:
    rows = []
    for lamb in lambda_grid(0.70, 0.02):
        lower, upper = multiplier_u_bounds(lamb)
        val = multiplier_u(lamb)
        log.info("lambda=%.2f, U=%.6f, upper_bound=%.6f, lower_bound=%.6f",
                 lamb, val, upper, lower)
        rows.append({"lambda": lamb, "U": val, "upper_bound": upper, "lower_bound": lower})
    return _save(pd.DataFrame(rows), "multiplier_u_bounds", output_dir)


def run_multiplier_v_bounds(settings: ValidationSettings,
                            output_dir: Optional[str] = None) -> pd.DataFrame:
    rows = []
    for lamb in lambda_grid(0.70, 0.02):
        lower, upper = multiplier_v_bounds(lamb)
        val = multiplier_v(lamb)
        log.info("lambda=%.2f, V=%.6f, upper_bound=%.6f, lower_bound=%.6f",
                 lamb, val, upper, lower)
        rows.append({"lambda": lamb, "V": val, "upper_bound": upper, "lower_bound": lower})
    return _save(pd.DataFrame(rows), "multiplier_v_bounds", output_dir)


# ---------------------------------------------------------------------------
# Realized volatility of the index
# ---------------------------------------------------------------------------
def run_vt_volatility(settings: ValidationSettings,
                      output_dir: Optional[str] = None) -> pd.DataFrame:
    sde = _market(settings)
    rows = []
    for num_steps in settings.num_time_steps:
        for lamb in lambda_grid(0.70, 0.05, extras=(0.97,)):
            vt = VolatilityTargetEngine(sde, _config(settings, lamb, num_steps))
            vol = realized_volatility(_simulate(vt, settings), vt.init_level, vt.tenor)
            limit_vol = limit_volatility(vt.config)
            log.info("N=%d, lamb=%.4f, vt_vol=%.6f, limit_vol=%.6f",
                     num_steps, lamb, vol, limit_vol)
            rows.append({"N": num_steps, "lambda": lamb, "vt_vol": vol, "limit_vol": limit_vol})
    return _save(pd.DataFrame(rows), "vt_volatility", output_dir)


def run_vt_volatility_simultaneous_limit(settings: ValidationSettings,
                                         output_dir: Optional[str] = None) -> pd.DataFrame:
    """Starting from the true variance, the index vol should approach the target."""
    sde = _market(settings)
    init_var = settings.volatility ** 2
    rows = []
    for num_steps in settings.num_time_steps:
        for lamb in lambda_grid(0.70, 0.05, extras=(0.97, 0.99)):
            vt = VolatilityTargetEngine(sde, _config(settings, lamb, num_steps, init_var))
            vol = realized_volatility(_simulate(vt, settings), vt.init_level, vt.tenor)
            log.info("N=%d, lamb=%.4f, vt_vol=%.6f, target_vol=%.6f",
                     num_steps, lamb, vol, settings.target_volatility)
            rows.append({"N": num_steps, "lambda": lamb, "vt_vol": vol,
                         "target_vol": settings.target_volatility})
    return _save(pd.DataFrame(rows), "vt_volatility_simultaneous_limit", output_dir)


def _volatility_along_path(settings: ValidationSettings, name: str,
                           lamb_of_n: Callable[[int], float],
                           output_dir: Optional[str]) -> pd.DataFrame:
    sde = _market(settings)
    rows = []
    for num_steps in settings.num_time_steps:
        lamb = lamb_of_n(num_steps)
        vt = VolatilityTargetEngine(sde, _config(settings, lamb, num_steps))
        vol = realized_volatility(_simulate(vt, settings), vt.init_level, vt.tenor)
        log.info("N=%d, lamb=%.10f, v0=%.4f, stock_vol=%.4f, target_vol=%.4f, vt_vol=%.6f",
                 num_steps, lamb, settings.init_var, settings.volatility,
                 settings.target_volatility, vol)
        rows.append({"N": num_steps, "lambda": lamb, "v0": settings.init_var,
                     "stock_vol": settings.volatility,
                     "target_vol": settings.target_volatility, "vt_vol": vol})
    return _save(pd.DataFrame(rows), name, output_dir)


def run_vt_volatility_limit_along_path_1(settings: ValidationSettings,
                                         output_dir: Optional[str] = None) -> pd.DataFrame:
    """lambda = 1 - 1/N^2: memory grows faster than the rebalancing frequency."""
    return _volatility_along_path(
        settings, "vt_volatility_limit_along_path_1",
        lambda n: 1.0 - 1.0 / (n * n), output_dir)


def run_vt_volatility_limit_along_path_2(settings: ValidationSettings,
                                         output_dir: Optional[str] = None) -> pd.DataFrame:
    """lambda = 1 - ln(N)/sqrt(N): memory grows slower than the rebalancing frequency."""
    return _volatility_along_path(
        settings, "vt_volatility_limit_along_path_2",
        lambda n: 1.0 - np.log(n) / np.sqrt(n), output_dir)


# ---------------------------------------------------------------------------
# Pricing and vega
# ---------------------------------------------------------------------------
def run_vt_pricing(settings: ValidationSettings,
                   output_dir: Optional[str] = None) -> pd.DataFrame:
    sde = _market(settings)
    rows = []
    for num_steps in settings.num_time_steps:
        for lamb in lambda_grid(0.70, 0.05, extras=(0.97,)):
            vt = VolatilityTargetEngine(sde, _config(settings, lamb, num_steps))
            mc_price = atm_call_price(_simulate(vt, settings), vt.init_level,
                                      settings.discount_rate, vt.tenor)
            limit_bs = limit_engine(sde.market, vt.config)
            bs_price = limit_bs.call_price(vt.init_level, vt.tenor)
            log.info("N=%d, lamb=%.4f, mc_vt_price=%.6f, bs_limit_price=%.6f",
                     num_steps, lamb, mc_price, bs_price)
            rows.append({"N": num_steps, "lambda": lamb,
                         "mc_vt_price": mc_price, "bs_limit_price": bs_price})
    return _save(pd.DataFrame(rows), "vt_pricing", output_dir)


def run_vt_vega(settings: ValidationSettings,
                 output_dir: Optional[str] = None) -> pd.DataFrame:
    """Bump-and-revalue with common random numbers (same seed for both runs)."""
    vol_bump = 0.001
    sde = _market(settings)
    sde_bumped = _market(settings, volatility=settings.volatility + vol_bump)
    rows = []
    for num_steps in settings.num_time_steps:
        for lamb in lambda_grid(0.70, 0.05, extras=(0.97,)):
            cfg = _config(settings, lamb, num_steps)
            vt = VolatilityTargetEngine(sde, cfg)
            vt_bumped = VolatilityTargetEngine(sde_bumped, cfg)
            price = atm_call_price(_simulate(vt, settings), cfg.init_level,
                                   settings.discount_rate, cfg.tenor)
            price_bumped = atm_call_price(_simulate(vt_bumped, settings), cfg.init_level,
                                          settings.discount_rate, cfg.tenor)
            mc_vega = (price_bumped - price) / vol_bump
            bs_vega = limit_vega(sde.market, cfg)
            log.info("N=%d, lamb=%.4f, mc_vt_vega=%.6f, bs_limit_vega=%.6f",
                     num_steps, lamb, mc_vega, bs_vega)
            rows.append({"N": num_steps, "lambda": lamb,
                         "mc_vt_vega": mc_vega, "bs_limit_vega": bs_vega})
    return _save(pd.DataFrame(rows), "vt_vega", output_dir)


SCENARIOS: Dict[str, Callable[..., pd.DataFrame]] = {
    "multiplier_u_bounds": run_multiplier_u_bounds,
    "multiplier_v_bounds": run_multiplier_v_bounds,
    "vt_volatility": run_vt_volatility,
    "vt_volatility_simultaneous_limit": run_vt_volatility_simultaneous_limit,
    "vt_volatility_limit_along_path_1": run_vt_volatility_limit_along_path_1,
    "vt_volatility_limit_along_path_2": run_vt_volatility_limit_along_path_2,
    "vt_pricing": run_vt_pricing,
    "vt_vega": run_vt_vega,
}


def run_all(settings: ValidationSettings, names: Optional[Iterable[str]] = None,
            output_dir: Optional[str] = None) -> Dict[str, pd.DataFrame]:
    """
    Run the selected scenarios in order. The first failure aborts the batch.
    """
    names = list(SCENARIOS) if names is None else list(names)
    unknown = [n for n in names if n not in SCENARIOS]
    if unknown:
        raise ValueError(f"Unknown scenarios: {unknown}. Available: {list(SCENARIOS)}")

    out = settings.output_dir if output_dir is None else output_dir
    results = {}
    for name in names:
        log.info("Running %s...", name)
        try:
            results[name] = SCENARIOS[name](settings, output_dir=out)
        except Exception:
            log.exception("Scenario %s failed; aborting batch", name)
            raise
    return results
