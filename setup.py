"""
Setup configuration for the Volatility-Target Asymptotics engine.

References:
    Black, F., & Scholes, M. (1973). The Pricing of Options and Corporate
    Liabilities. Journal of Political Economy, 81(3), 637-654.
    Gasper, G., & Rahman, M. (2004). Basic Hypergeometric Series.
    Cambridge University Press.
"""
from setuptools import setup, find_packages

setup(
    name="voltarget-asymptotics",
    version="1.0.0",
    description="Volatility-targeting index simulation with asymptotic "
                "multipliers and Monte Carlo validation",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=["numpy>=1.24.0", "scipy>=1.10.0", "pandas>=2.0.0",
                      "matplotlib>=3.7.0"],
    extras_require={
        "dev": ["pytest>=7.4.0", "black", "flake8"],
    },
)
