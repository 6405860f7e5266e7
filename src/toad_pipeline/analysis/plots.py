"""Visualization functions for the toad pilot study.

Provides rhythm plots with fitted cosine overlays, survival curves,
grouped means with Tukey letters and regression plots.
"""

from __future__ import annotations

import math

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..cleaner import order_conditions
from .pub_plots import add_panel_label, despine, format_p_value, get_condition_colors
from .rhythm import CosineFit, format_rhythm_status, predict_curve

# =============================================================================
# Helper Functions
# =============================================================================


def _get_or_create_axes(
    ax: Axes | None,
    figsize: tuple[float, float] = (8, 5),
) -> Axes:
    """Get existing axes or create new figure with axes."""
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    return ax


def _fits_for_signal(fits: list[CosineFit], signal) -> dict:
    return {fit.condition: fit for fit in fits if fit.signal == signal}


# =============================================================================
# Rhythm Visualizations
# =============================================================================


def plot_rhythm(
    summary: pd.DataFrame,
    fits: list[CosineFit],
    signal: str,
    ax: Axes | None = None,
    show_fit: bool = True,
    ylabel: str = "Mean ± SE",
    figsize: tuple[float, float] = (8, 5),
) -> Axes:
    """Plot timepoint means per condition with the fitted cosine overlaid.

    Args:
        summary: Output of summarize_timepoints()
        fits: Output of fit_rhythms()
        signal: Signal to plot
        ax: Matplotlib axes. If None, creates new figure.
        show_fit: Draw the fitted curve for groups with a successful fit
        ylabel: Y-axis label
        figsize: Figure size if creating new figure.

    Returns:
        Matplotlib Axes object.
    """
    ax = _get_or_create_axes(ax, figsize=figsize)

    data = summary[summary["signal"] == signal] if len(summary) else summary
    if len(data) == 0:
        ax.set_title(f"{signal} (no data)")
        return ax

    conditions = order_conditions(data["condition"])
    colors = get_condition_colors(conditions)
    signal_fits = _fits_for_signal(fits, signal)

    for condition in conditions:
        points = data[data["condition"] == condition].sort_values("zt")
        color = colors[condition]
        fit = signal_fits.get(condition)

        label = str(condition)
        if fit is not None:
            label = f"{condition} ({format_rhythm_status(fit)})"

        ax.errorbar(
            points["zt"],
            points["mean"],
            yerr=points["se"].fillna(0),
            fmt="o",
            color=color,
            capsize=3,
            label=label,
        )

        if show_fit and fit is not None and fit.succeeded:
            grid = np.linspace(points["zt"].min(), points["zt"].max(), 200)
            linestyle = "-" if fit.is_rhythmic else "--"
            ax.plot(grid, predict_curve(fit, grid), color=color, linestyle=linestyle, alpha=0.8)

    ax.set_xlabel("Zeitgeber time (h)")
    ax.set_ylabel(ylabel)
    ax.set_title(str(signal))
    ax.legend(loc="best")

    return ax


def plot_rhythm_grid(
    summary: pd.DataFrame,
    fits: list[CosineFit],
    ncols: int = 2,
    ylabel: str = "Mean ± SE",
    panel_size: tuple[float, float] = (5, 3.5),
) -> Figure:
    """One rhythm panel per signal.

    Returns:
        Matplotlib Figure object.
    """
    signals = sorted(summary["signal"].dropna().unique(), key=str) if len(summary) else []
    n_panels = max(len(signals), 1)
    ncols = min(ncols, n_panels)
    nrows = math.ceil(n_panels / ncols)

    fig, axes = plt.subplots(
        nrows,
        ncols,
        figsize=(panel_size[0] * ncols, panel_size[1] * nrows),
        squeeze=False,
    )
    flat_axes = axes.flatten()

    if not signals:
        flat_axes[0].set_title("Rhythms (no data)")

    for i, (ax, signal) in enumerate(zip(flat_axes, signals, strict=False)):
        plot_rhythm(summary, fits, signal, ax=ax, ylabel=ylabel)
        if len(signals) > 1:
            add_panel_label(ax, chr(65 + i))  # A, B, C, ...

    for ax in flat_axes[len(signals) :]:
        if signals:
            ax.set_visible(False)

    fig.tight_layout()
    return fig


# =============================================================================
# Survival Visualizations
# =============================================================================


def plot_survival_curves(
    fitters: dict,
    ax: Axes | None = None,
    logrank: dict | None = None,
    show_ci: bool = True,
    figsize: tuple[float, float] = (8, 5),
) -> Axes:
    """Plot Kaplan-Meier curves per condition.

    Args:
        fitters: Output of fit_kaplan_meier()
        ax: Matplotlib axes. If None, creates new figure.
        logrank: Optional logrank_multivariate() result shown in the title
        show_ci: Draw confidence bands
        figsize: Figure size if creating new figure.

    Returns:
        Matplotlib Axes object.
    """
    ax = _get_or_create_axes(ax, figsize=figsize)

    if not fitters:
        ax.set_title("Survival (no data)")
        return ax

    colors = get_condition_colors(list(fitters))
    for condition, kmf in fitters.items():
        kmf.plot_survival_function(ax=ax, ci_show=show_ci, color=colors[condition])

    title = "Kaplan-Meier survival"
    if logrank is not None:
        title += f" (log-rank {format_p_value(logrank.get('p_value', np.nan))})"

    ax.set_xlabel("Days")
    ax.set_ylabel("Survival probability")
    ax.set_ylim(0, 1.05)
    ax.set_title(title)

    return ax


# =============================================================================
# Group Comparisons
# =============================================================================


def plot_group_means(
    df: pd.DataFrame,
    value_col: str,
    group_col: str,
    letters: dict[str, str] | None = None,
    ax: Axes | None = None,
    ylabel: str | None = None,
    figsize: tuple[float, float] = (6, 5),
) -> Axes:
    """Bar plot of mean ± SE per group with optional Tukey letters.

    Args:
        df: Input DataFrame
        value_col: Column with the measured value
        group_col: Grouping column
        letters: Output of tukey_letters(); drawn above each bar
        ax: Matplotlib axes. If None, creates new figure.
        ylabel: Y-axis label (default: value_col)
        figsize: Figure size if creating new figure.

    Returns:
        Matplotlib Axes object.
    """
    ax = _get_or_create_axes(ax, figsize=figsize)

    if value_col not in df.columns or group_col not in df.columns or len(df) == 0:
        ax.set_title(f"{value_col} (no data)")
        return ax

    groups = order_conditions(df[group_col])
    stats = df.groupby(group_col)[value_col].agg(["mean", "std", "count"])
    stats = stats.reindex(groups)
    se = (stats["std"] / np.sqrt(stats["count"])).fillna(0)

    colors = get_condition_colors(groups)
    x = np.arange(len(groups))
    ax.bar(
        x,
        stats["mean"],
        yerr=se,
        capsize=4,
        color=[colors[g] for g in groups],
        alpha=0.8,
        edgecolor="black",
        linewidth=0.5,
    )

    if letters:
        offset = 0.03 * np.nanmax(np.abs(stats["mean"] + se)) if len(stats) else 0
        for i, group in enumerate(groups):
            label = letters.get(str(group), "")
            top = stats["mean"].iloc[i] + se.iloc[i]
            ax.text(i, top + offset, label, ha="center", va="bottom", fontweight="bold")

    ax.set_xticks(x)
    ax.set_xticklabels([str(g) for g in groups])
    ax.set_xlabel(group_col)
    ax.set_ylabel(ylabel or value_col)
    ax.set_title(f"{ylabel or value_col} by {group_col}")
    despine(ax)

    return ax


def plot_regression(
    df: pd.DataFrame,
    value_col: str,
    predictor_col: str,
    result: dict | None = None,
    ax: Axes | None = None,
    figsize: tuple[float, float] = (6, 5),
) -> Axes:
    """Scatter plot with the fitted regression line.

    Args:
        df: Input DataFrame
        value_col: Dependent variable
        predictor_col: Numeric predictor
        result: Output of regress_on_wavelength(); if given, draws the line
        ax: Matplotlib axes. If None, creates new figure.
        figsize: Figure size if creating new figure.

    Returns:
        Matplotlib Axes object.
    """
    ax = _get_or_create_axes(ax, figsize=figsize)

    if value_col not in df.columns or predictor_col not in df.columns:
        ax.set_title(f"{value_col} vs {predictor_col} (no data)")
        return ax

    data = df[[predictor_col, value_col]].dropna()
    if len(data) == 0:
        ax.set_title(f"{value_col} vs {predictor_col} (no data)")
        return ax

    ax.scatter(data[predictor_col], data[value_col], alpha=0.6, color="#1F77B4", edgecolor="white")

    title = f"{value_col} vs {predictor_col}"
    if result is not None and not np.isnan(result.get("slope", np.nan)):
        x = np.linspace(data[predictor_col].min(), data[predictor_col].max(), 100)
        ax.plot(x, result["intercept"] + result["slope"] * x, color="#D62728")
        title += f" (slope {format_p_value(result['slope_p_value'])})"

    ax.set_xlabel(predictor_col)
    ax.set_ylabel(value_col)
    ax.set_title(title)
    despine(ax)

    return ax
