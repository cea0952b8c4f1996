from voltarget.models.black_scholes import BlackScholesEngine, MarketModel
from voltarget.models.volatility_target import VolatilityTargetEngine, VolTargetConfig

__all__ = ["BlackScholesEngine", "MarketModel", "VolatilityTargetEngine", "VolTargetConfig"]
