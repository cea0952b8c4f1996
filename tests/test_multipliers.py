"""
Unit Tests -- Asymptotic Multipliers and the Limit Model
=========================================================

Author: Jose Orlando Bobadilla Fuentes, CQF
"""

import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / "src"))

from voltarget.models.black_scholes     import MarketModel
from voltarget.models.multipliers       import (
    limit_engine, limit_repo_rate, limit_vega, limit_volatility,
    multiplier_u, multiplier_u_bounds, multiplier_v, multiplier_v_bounds,
)
from voltarget.models.volatility_target import VolTargetConfig


@pytest.fixture
def market():
    return MarketModel(discount_rate=0.05, repo_rate=0.02, volatility=0.5)


@pytest.fixture
def config():
    return VolTargetConfig(lamb=0.95, num_time_steps=1000, target_volatility=0.2,
                           tenor=1.0, init_var=0.02)


class TestMultipliers:

    @pytest.mark.parametrize("fn", [multiplier_u, multiplier_v,
                                    multiplier_u_bounds, multiplier_v_bounds])
    @pytest.mark.parametrize("lamb", [0.0, 1.0, 1.5, -0.2])
    def test_lambda_domain(self, fn, lamb):
        with pytest.raises(ValueError):
            fn(lamb)

    @pytest.mark.parametrize("lamb", [0.7, 0.8, 0.9, 0.98])
    def test_bounds_ordered(self, lamb):
        for lower, upper in (multiplier_u_bounds(lamb), multiplier_v_bounds(lamb)):
            assert 0 < lower < upper

    @pytest.mark.parametrize("lamb", [0.95, 0.98])
    def test_u_within_bounds(self, lamb):
        lower, upper = multiplier_u_bounds(lamb)
        assert lower * 0.99 <= multiplier_u(lamb) <= upper * 1.01

    @pytest.mark.parametrize("lamb", [0.95, 0.98])
    def test_v_within_bounds(self, lamb):
        lower, upper = multiplier_v_bounds(lamb)
        assert lower * 0.99 <= multiplier_v(lamb) <= upper * 1.01

    def test_v_decreases_towards_one(self):
        v = [multiplier_v(lamb) for lamb in (0.8, 0.9, 0.98)]
        assert v[0] > v[1] > v[2] > 1.0

    def test_long_memory_limit(self):
        assert multiplier_v(0.99) == pytest.approx(1.0, abs=0.02)
        assert multiplier_u(0.99) == pytest.approx(1.0, abs=0.02)


class TestLimitModel:

    def test_limit_volatility(self, config):
        assert limit_volatility(config) == pytest.approx(0.2 * math.sqrt(multiplier_v(0.95)))

    def test_limit_repo_rate(self, market, config):
        expected = multiplier_u(0.95) * 0.2 / 0.5 * 0.02
        assert limit_repo_rate(market, config) == pytest.approx(expected)

    def test_limit_engine_parameters(self, market, config):
        engine = limit_engine(market, config)
        assert engine.discount_rate == 0.05
        assert engine.init_level == config.init_level
        assert engine.volatility == pytest.approx(limit_volatility(config))
        assert engine.repo_rate == pytest.approx(limit_repo_rate(market, config))

    def test_limit_vega(self, market, config):
        engine = limit_engine(market, config)
        expected = engine.repo_rate / 0.5 * engine.call_rho(1.0, 1.0)
        assert limit_vega(market, config) == pytest.approx(expected, rel=1e-12)
        assert limit_vega(market, config) > 0

    def test_zero_repo_has_no_vega(self, config):
        flat = MarketModel(discount_rate=0.05, repo_rate=0.0, volatility=0.5)
        assert limit_repo_rate(flat, config) == 0.0
        with pytest.raises(ValueError):
            limit_vega(flat, config)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
