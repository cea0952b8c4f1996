"""
conftest.py
-----------
Pytest configuration: puts src/ on the import path and registers the
`slow` marker used by the full Monte Carlo convergence checks.

Run the quick suite with:  pytest tests/ -m "not slow"
"""

import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / "src"))


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long-running Monte Carlo convergence test")
