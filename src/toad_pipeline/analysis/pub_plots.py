"""Publication-quality plotting utilities for the pilot study report.

Provides consistent styling, figure sizing, and export utilities for
generating report figures.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

# =============================================================================
# Publication Style Configuration
# =============================================================================

PUB_STYLE: dict = {
    # Font settings
    "font.family": "sans-serif",
    "font.sans-serif": ["Arial", "Helvetica", "DejaVu Sans"],
    "font.size": 10,
    # Axes labels and titles
    "axes.labelsize": 11,
    "axes.titlesize": 12,
    "axes.titleweight": "bold",
    # Tick labels
    "xtick.labelsize": 9,
    "ytick.labelsize": 9,
    # Legend
    "legend.fontsize": 8,
    "legend.framealpha": 0.8,
    # Figure
    "figure.dpi": 150,
    "figure.facecolor": "white",
    # Saving
    "savefig.dpi": 300,
    "savefig.facecolor": "white",
    "savefig.bbox": "tight",
    # Axes appearance
    "axes.linewidth": 1.0,
    "axes.spines.top": False,
    "axes.spines.right": False,
    "axes.grid": False,
    # Lines
    "lines.linewidth": 1.5,
    "lines.markersize": 5,
}

# Light condition colors, matched to the lamp where one exists
CONDITION_COLORS: dict[str, str] = {
    "White": "#7F7F7F",
    "Blue": "#1F77B4",
    "Green": "#2CA02C",
    "Red": "#D62728",
    "Dark": "#000000",
}

# Fallback palette for conditions without an assigned color
CATEGORY_COLORS: list[str] = [
    "#FF7F0E",  # Orange
    "#9467BD",  # Purple
    "#8C564B",  # Brown
    "#E377C2",  # Pink
    "#BCBD22",  # Olive
    "#17BECF",  # Cyan
]

# Figure sizes (width, height) in inches
FIGURE_SIZES: dict[str, tuple[float, float]] = {
    "single_column": (3.5, 3.0),
    "double_column": (7.0, 3.5),
    "half_page": (7.0, 5.0),
    "full_page": (7.0, 9.0),
    "square": (5.0, 5.0),
    "wide": (10.0, 4.0),
}


def get_condition_colors(conditions: list) -> dict:
    """Map each condition to a color, falling back to CATEGORY_COLORS."""
    colors = {}
    fallback = 0
    for condition in conditions:
        if condition in CONDITION_COLORS:
            colors[condition] = CONDITION_COLORS[condition]
        else:
            colors[condition] = CATEGORY_COLORS[fallback % len(CATEGORY_COLORS)]
            fallback += 1
    return colors


# =============================================================================
# Style Context Manager
# =============================================================================


@contextmanager
def apply_publication_style():
    """Context manager to temporarily apply publication styling.

    Usage:
        with apply_publication_style():
            fig, ax = plt.subplots()
            # ... create plot ...
            fig.savefig("figure.png")
    """
    original_params = {key: plt.rcParams.get(key) for key in PUB_STYLE}
    try:
        plt.rcParams.update(PUB_STYLE)
        yield
    finally:
        for key, value in original_params.items():
            if value is not None:
                plt.rcParams[key] = value


# =============================================================================
# Figure Factory
# =============================================================================


def create_figure(
    layout: str = "single_column",
    nrows: int = 1,
    ncols: int = 1,
    **kwargs,
) -> tuple[Figure, np.ndarray | Axes]:
    """Create a figure with publication-ready sizing.

    Args:
        layout: One of "single_column", "double_column", "half_page",
                "full_page", "square", "wide"
        nrows: Number of subplot rows
        ncols: Number of subplot columns
        **kwargs: Additional arguments passed to plt.subplots

    Returns:
        Tuple of (Figure, Axes or array of Axes)
    """
    figsize = kwargs.pop("figsize", FIGURE_SIZES.get(layout, FIGURE_SIZES["single_column"]))
    fig, axes = plt.subplots(nrows=nrows, ncols=ncols, figsize=figsize, **kwargs)
    return fig, axes


# =============================================================================
# Figure Export
# =============================================================================


def save_figure(
    fig: Figure,
    path: str | Path,
    formats: list[str] | tuple[str, ...] | None = None,
    close: bool = True,
) -> list[Path]:
    """Save figure in one or more formats.

    Args:
        fig: Matplotlib Figure object
        path: Base path (without extension)
        formats: List of formats to save (default: ["png", "pdf"])
        close: Whether to close the figure after saving

    Returns:
        List of saved file paths
    """
    if formats is None:
        formats = ["png", "pdf"]

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    saved_paths = []
    for fmt in formats:
        save_path = path.with_suffix(f".{fmt}")
        fig.savefig(save_path, format=fmt, dpi=300, bbox_inches="tight")
        saved_paths.append(save_path)

    if close:
        plt.close(fig)

    return saved_paths


# =============================================================================
# Annotations
# =============================================================================


def format_p_value(p_value: float) -> str:
    """Format p-value for display.

    Args:
        p_value: The p-value

    Returns:
        Formatted string
    """
    if p_value is None or np.isnan(p_value):
        return "p = n/a"
    if p_value < 0.001:
        return "p < 0.001"
    if p_value < 0.01:
        return f"p = {p_value:.3f}"
    return f"p = {p_value:.2f}"


def add_panel_label(
    ax: Axes,
    label: str,
    x: float = -0.1,
    y: float = 1.1,
) -> None:
    """Add a panel label (A, B, C, etc.) to a subplot."""
    ax.text(
        x,
        y,
        label,
        transform=ax.transAxes,
        fontsize=14,
        fontweight="bold",
        va="top",
        ha="right",
    )


def despine(ax: Axes, top: bool = True, right: bool = True) -> None:
    """Remove spines from axes."""
    if top:
        ax.spines["top"].set_visible(False)
    if right:
        ax.spines["right"].set_visible(False)
