"""
Unit Tests for the Black-Scholes Engine
========================================

Validates pricing, finite-difference Greeks, path simulation and
boundary conditions.

Author: Jose Orlando Bobadilla Fuentes | CQF
"""

import pytest
import numpy as np
from scipy.stats import norm
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from voltarget.models.black_scholes import BlackScholesEngine, MarketModel, VOL_BUMP
from voltarget.utils.random_numbers import StandardNormalGenerator


@pytest.fixture
def engine():
    return BlackScholesEngine.create(discount_rate=0.05, repo_rate=0.0,
                                     volatility=0.20, init_level=100.0)

@pytest.fixture
def carry_engine():
    return BlackScholesEngine.create(discount_rate=0.05, repo_rate=0.02,
                                     volatility=0.50, init_level=1.0)


class TestPricing:
    def test_call_known_value(self, engine):
        assert abs(engine.call_price(100.0, 1.0) - 10.4506) < 0.01

    def test_put_known_value(self, engine):
        assert abs(engine.put_price(100.0, 1.0) - 5.5735) < 0.01

    @pytest.mark.parametrize("K,T", [(0.5, 0.1), (1.0, 1.0), (1.3, 2.5), (3.0, 0.01)])
    def test_put_call_parity(self, carry_engine, K, T):
        lhs = carry_engine.call_price(K, T) - carry_engine.put_price(K, T)
        rhs = np.exp(-0.02 * T) - K * np.exp(-0.05 * T)
        np.testing.assert_allclose(lhs, rhs, atol=1e-12)

    def test_parity_check_report(self, carry_engine):
        assert carry_engine.put_call_parity_check(1.1, 0.75)["parity_holds"]

    def test_deep_itm_call(self, engine):
        price = engine.call_price(50.0, 0.01)
        assert abs(price - (100 - 50 * np.exp(-0.05 * 0.01))) < 1e-8

    def test_deep_otm_put(self, engine):
        assert engine.put_price(50.0, 0.25) < 1e-8

    def test_forward_and_discount(self, carry_engine):
        np.testing.assert_allclose(carry_engine.forward(2.0), np.exp(0.03 * 2.0))
        np.testing.assert_allclose(carry_engine.discount_factor(2.0), np.exp(-0.1))

    @pytest.mark.parametrize("K,T", [(0.0, 1.0), (-1.0, 1.0), (1.0, 0.0), (1.0, -0.5)])
    def test_invalid_contract(self, carry_engine, K, T):
        with pytest.raises(ValueError):
            carry_engine.call_price(K, T)
        with pytest.raises(ValueError):
            carry_engine.put_price(K, T)


class TestGreeks:
    def test_vega_close_to_analytic(self, carry_engine):
        S, K, T, r, q, s = 1.0, 1.0, 1.0, 0.05, 0.02, 0.50
        d1 = (np.log(S / K) + (r - q + 0.5 * s ** 2) * T) / (s * np.sqrt(T))
        analytic = S * np.exp(-q * T) * norm.pdf(d1) * np.sqrt(T)
        np.testing.assert_allclose(carry_engine.vega(K, T), analytic, rtol=1e-3)

    def test_vega_is_forward_difference(self, carry_engine):
        bumped = carry_engine.bumped(volatility=0.50 + VOL_BUMP)
        expected = (bumped.call_price(1.2, 0.5) - carry_engine.call_price(1.2, 0.5)) / VOL_BUMP
        assert carry_engine.vega(1.2, 0.5) == pytest.approx(expected, rel=1e-14)

    def test_call_rho_close_to_analytic(self, carry_engine):
        """-dC/dq = T * S * exp(-qT) * N(d1)."""
        S, K, T, r, q, s = 1.0, 0.9, 2.0, 0.05, 0.02, 0.50
        d1 = (np.log(S / K) + (r - q + 0.5 * s ** 2) * T) / (s * np.sqrt(T))
        analytic = T * S * np.exp(-q * T) * norm.cdf(d1)
        np.testing.assert_allclose(carry_engine.call_rho(K, T), analytic, rtol=1e-3)

    def test_put_rho_uses_bumped_call(self, carry_engine):
        dq = 0.01 * 0.02
        bumped = carry_engine.bumped(repo_rate=0.02 + dq)
        expected = (carry_engine.put_price(1.0, 1.0) - bumped.call_price(1.0, 1.0)) / dq
        assert carry_engine.put_rho(1.0, 1.0) == pytest.approx(expected, rel=1e-12)

    def test_rho_requires_nonzero_repo(self, engine):
        with pytest.raises(ValueError):
            engine.call_rho(100.0, 1.0)
        with pytest.raises(ValueError):
            engine.put_rho(100.0, 1.0)

    def test_vega_positive(self, engine):
        assert engine.vega(100.0, 1.0) > 0


class TestSimulation:
    def test_zero_shocks_follow_drift(self, carry_engine):
        dts = np.array([0.1, 0.25, 0.05, 0.6])
        path = carry_engine.simulate_path(dts, np.zeros(4))
        expected = np.exp((0.05 - 0.02 - 0.5 * 0.25) * np.concatenate([[0.0], np.cumsum(dts)]))
        np.testing.assert_allclose(path, expected, rtol=1e-14)

    def test_path_shape_and_start(self, carry_engine):
        path = carry_engine.simulate_path([0.01] * 10, StandardNormalGenerator(1).draw(10))
        assert path.shape == (11,)
        assert path[0] == 1.0
        assert np.all(path > 0)

    def test_single_step_transition(self, carry_engine):
        path = carry_engine.simulate_path([0.5], [1.3])
        expected = np.exp((0.03 - 0.125) * 0.5 + 0.5 * np.sqrt(0.5) * 1.3)
        np.testing.assert_allclose(path[1], expected, rtol=1e-14)

    def test_length_mismatch(self, carry_engine):
        with pytest.raises(ValueError, match="same size"):
            carry_engine.simulate_path([0.1, 0.1], [0.0])

    def test_nonpositive_dt(self, carry_engine):
        with pytest.raises(ValueError):
            carry_engine.simulate_path([0.1, 0.0], [0.0, 0.0])

    def test_batch_matches_single_paths(self, carry_engine):
        dts = np.full(20, 0.05)
        Z = StandardNormalGenerator(3).draw_matrix(5, 20)
        paths = carry_engine.simulate_paths(dts, Z)
        assert paths.shape == (5, 21)
        for row, z in zip(paths, Z):
            np.testing.assert_allclose(row, carry_engine.simulate_path(dts, z), rtol=1e-14)

    def test_terminal_levels_reproducible(self, carry_engine):
        dts = [0.25] * 4
        a = carry_engine.simulate_terminal_levels(dts, 100, seed=11)
        b = carry_engine.simulate_terminal_levels(dts, 100, seed=11)
        np.testing.assert_array_equal(a, b)
        assert not np.array_equal(a, carry_engine.simulate_terminal_levels(dts, 100, seed=12))

    def test_terminal_levels_use_one_generator(self, carry_engine):
        dts = [0.1] * 3
        rng = StandardNormalGenerator(5)
        manual = [carry_engine.simulate_path(dts, rng.draw(3))[-1] for _ in range(6)]
        np.testing.assert_allclose(carry_engine.simulate_terminal_levels(dts, 6, seed=5), manual)

    def test_expected_terminal_value(self, engine):
        """E[S_T] = S0 * exp((r - q) * T)."""
        levels = engine.simulate_terminal_levels([1.0], 20_000, seed=42)
        se = levels.std() / np.sqrt(levels.size)
        assert abs(levels.mean() - 100.0 * np.exp(0.05)) < 4 * se


class TestValidation:
    def test_negative_spot(self):
        with pytest.raises(ValueError):
            MarketModel(discount_rate=0.05, repo_rate=0.0, volatility=0.2, init_level=-100)

    def test_negative_vol(self):
        with pytest.raises(ValueError):
            MarketModel(discount_rate=0.05, repo_rate=0.0, volatility=-0.20)

    def test_zero_vol(self):
        with pytest.raises(ValueError):
            BlackScholesEngine.create(0.05, 0.0, 0.0)

    def test_market_is_immutable(self, carry_engine):
        with pytest.raises(Exception):
            carry_engine.market.volatility = 0.3

    def test_bumped_leaves_original(self, carry_engine):
        bumped = carry_engine.bumped(volatility=0.6)
        assert bumped.volatility == 0.6
        assert carry_engine.volatility == 0.5


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
