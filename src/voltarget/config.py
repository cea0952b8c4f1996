"""
config.py
---------
Centralised configuration for the volatility-target validation runs.
Defaults can be overridden through environment variables, making the
same scenarios reproducible on a laptop (small samples) and on a
research box (full samples).
"""

import os
from dataclasses import dataclass, field
from typing import Tuple


DEFAULT_RNG_SEED = 202504

# Upper bound on the number of path points held in memory per batch.
MAX_BATCH_ELEMENTS = 2_000_000


def default_batch_size(num_time_steps: int) -> int:
    """Rows per path batch so that a batch holds at most MAX_BATCH_ELEMENTS points."""
    return max(1, MAX_BATCH_ELEMENTS // (num_time_steps + 1))


@dataclass
class ValidationSettings:
    """Monte Carlo sizes, seeds and output locations for the validation scenarios."""
    num_samples: int   = int(os.getenv("VT_NUM_SAMPLES", "100000"))
    seed: int          = int(os.getenv("VT_SEED", str(DEFAULT_RNG_SEED)))
    output_dir: str    = os.getenv("VT_OUTPUT_DIR", "outputs/tables")
    n_workers: int     = int(os.getenv("VT_N_WORKERS", "1"))
    log_level: str     = os.getenv("VT_LOG_LEVEL", "INFO")

    # Base market / strategy parameters shared by every scenario
    discount_rate: float     = 0.05
    carry: float             = 0.03          # discount_rate - repo_rate
    volatility: float        = 0.5
    target_volatility: float = 0.2
    tenor: float             = 1.0
    init_var: float          = 0.02
    init_stock_level: float  = 1.0
    init_vt_level: float     = 1.0

    num_time_steps: Tuple[int, ...] = field(
        default_factory=lambda: (1000, 2000, 5000, 10000, 50000))

    def __post_init__(self):
        if self.num_samples <= 0:
            raise ValueError(f"num_samples must be positive, got {self.num_samples}")
        if self.n_workers <= 0:
            raise ValueError(f"n_workers must be positive, got {self.n_workers}")

    @property
    def repo_rate(self) -> float:
        return self.discount_rate - self.carry
