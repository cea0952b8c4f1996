"""
Publication-quality figures for the volatility-target validation tables.

Figures generated:
    01_multiplier_bounds.png      - U and V against their analytic bounds
    02_vt_vol_convergence.png     - Realized index vol vs limit vol across N
    03_vt_pricing.png             - MC ATM call vs limit Black-Scholes price
    04_vt_vega.png                - MC vega vs limit vega

Author: Jose Orlando Bobadilla Fuentes, CQF
"""
import os
from typing import Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

NAVY = "#1a1a2e"; TEAL = "#16697a"; CORAL = "#db6400"
GOLD = "#c5a880"; SLATE = "#4a4e69"
COLORS = [NAVY, TEAL, CORAL, GOLD, SLATE, "#2d6a4f", "#e07a5f"]

plt.rcParams.update({
    "figure.facecolor": "white", "axes.facecolor": "white",
    "axes.grid": True, "grid.alpha": 0.3, "grid.linestyle": "--",
    "savefig.facecolor": "white",
})

def _wm(fig):
    fig.text(0.99, 0.01, "J. Bobadilla | CQF", fontsize=7,
             color="gray", alpha=0.5, ha="right", va="bottom")

def _sv(fig, output_dir, name):
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, name)
    fig.savefig(path, dpi=150, bbox_inches="tight"); plt.close(fig); return path


def plot_multiplier_bounds(u_table: pd.DataFrame, v_table: pd.DataFrame,
                           output_dir: str = "outputs/figures") -> str:
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))
    for ax, df, col in [(ax1, u_table, "U"), (ax2, v_table, "V")]:
        ax.plot(df["lambda"], df[col], "o-", color=TEAL, lw=2, label=col)
        ax.fill_between(df["lambda"], df["lower_bound"], df["upper_bound"],
                        alpha=0.2, color=GOLD, label="Analytic bounds")
        ax.set_xlabel(r"Decay $\lambda$")
        ax.set_ylabel(f"{col}($\\lambda$)")
        ax.set_title(f"Multiplier {col} and Bounds")
        ax.legend()
    fig.suptitle("Asymptotic Multipliers", fontsize=15, fontweight="bold", y=1.02)
    fig.tight_layout()
    _wm(fig)
    return _sv(fig, output_dir, "01_multiplier_bounds.png")


def plot_vol_convergence(vol_table: pd.DataFrame,
                         output_dir: str = "outputs/figures") -> str:
    """Realized index vol per lambda as N grows; dashed lines are the limits."""
    fig, ax = plt.subplots(figsize=(11, 6))
    for i, (lamb, grp) in enumerate(vol_table.groupby("lambda")):
        c = COLORS[i % len(COLORS)]
        ax.semilogx(grp["N"], grp["vt_vol"], "o-", color=c, lw=2,
                    label=f"$\\lambda$={lamb:.2f}")
        ax.axhline(grp["limit_vol"].iloc[0], color=c, ls="--", lw=1, alpha=0.7)
    ax.set_xlabel("Rebalancing steps N")
    ax.set_ylabel("Annualized vol of log(L_T / L_0)")
    ax.set_title("Index Volatility Convergence to $\\sigma^* \\sqrt{V(\\lambda)}$")
    ax.legend(ncol=2, fontsize=9)
    _wm(fig)
    return _sv(fig, output_dir, "02_vt_vol_convergence.png")


def _plot_mc_vs_limit(table: pd.DataFrame, mc_col: str, limit_col: str,
                      title: str, ylabel: str, output_dir: str, name: str) -> str:
    n_max = table["N"].max()
    last = table[table["N"] == n_max]
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))
    ax1.plot(last["lambda"], last[mc_col], "o-", color=TEAL, lw=2, label=f"Monte Carlo (N={n_max})")
    ax1.plot(last["lambda"], last[limit_col], "s--", color=CORAL, lw=2, label="Limit Black-Scholes")
    ax1.set_xlabel(r"Decay $\lambda$")
    ax1.set_ylabel(ylabel)
    ax1.set_title(title)
    ax1.legend()

    err = (table[mc_col] - table[limit_col]).abs()
    for i, (lamb, grp) in enumerate(table.assign(err=err).groupby("lambda")):
        ax2.loglog(grp["N"], grp["err"], "o-", color=COLORS[i % len(COLORS)],
                   lw=1.5, label=f"$\\lambda$={lamb:.2f}")
    ax2.set_xlabel("Rebalancing steps N")
    ax2.set_ylabel("|MC - limit|")
    ax2.set_title("Approximation Error")
    ax2.legend(ncol=2, fontsize=8)
    fig.tight_layout()
    _wm(fig)
    return _sv(fig, output_dir, name)


def plot_pricing(pricing_table: pd.DataFrame, output_dir: str = "outputs/figures") -> str:
    return _plot_mc_vs_limit(pricing_table, "mc_vt_price", "bs_limit_price",
                             "ATM Call on the Index", "Price", output_dir,
                             "03_vt_pricing.png")


def plot_vega(vega_table: pd.DataFrame, output_dir: str = "outputs/figures") -> str:
    return _plot_mc_vs_limit(vega_table, "mc_vt_vega", "bs_limit_vega",
                             "Index Call Vega w.r.t. Underlier Vol", "Vega", output_dir,
                             "04_vt_vega.png")


def generate_all_figures(results: Dict[str, pd.DataFrame],
                         output_dir: str = "outputs/figures") -> List[str]:
    """Plot whichever scenario tables are present in `results`."""
    files = []
    if "multiplier_u_bounds" in results and "multiplier_v_bounds" in results:
        files.append(plot_multiplier_bounds(results["multiplier_u_bounds"],
                                            results["multiplier_v_bounds"], output_dir))
    if "vt_volatility" in results:
        files.append(plot_vol_convergence(results["vt_volatility"], output_dir))
    if "vt_pricing" in results:
        files.append(plot_pricing(results["vt_pricing"], output_dir))
    if "vt_vega" in results:
        files.append(plot_vega(results["vt_vega"], output_dir))
    return files
