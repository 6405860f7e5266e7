"""Cosinor rhythm fitting for circadian time series.

Replicate measurements are summarized per (signal, condition, timepoint),
then every (signal, condition) group of timepoint means is fitted with a
24-hour cosine

    mean(t) = amplitude * cos(2 * pi * (t - phase) / 24) + offset

by unweighted nonlinear least squares. A group is called rhythmic when the
95% confidence interval of the amplitude (estimate +/- 1.96 * SE) excludes
zero. Groups that cannot be fitted are classified instead of raising, so a
full set of results is always returned.

Example:
    from toad_pipeline.analysis.rhythm import (
        fit_rhythms,
        rhythms_to_frame,
        summarize_timepoints,
    )

    summary = summarize_timepoints(observations)
    fits = fit_rhythms(summary)
    table = rhythms_to_frame(fits)
"""

from __future__ import annotations

import warnings
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.optimize import OptimizeWarning, curve_fit
from tqdm import tqdm

from ..cleaner import order_conditions
from ..constants import (
    AMPLITUDE_DECIMALS,
    CI_Z,
    CLASSIFICATION_LABELS,
    FIT_FAILED,
    INITIAL_AMPLITUDE,
    INITIAL_PHASE,
    INSUFFICIENT_DATA,
    MAX_ITERATIONS,
    MIN_TIMEPOINTS,
    NON_RHYTHMIC,
    PERIOD_HOURS,
    PHASE_DECIMALS,
    RHYTHMIC,
)

SUMMARY_COLUMNS = ["signal", "condition", "zt", "mean", "sd", "n", "se"]

RHYTHM_COLUMNS = [
    "signal",
    "condition",
    "amplitude",
    "phase",
    "offset",
    "ci_lower",
    "ci_upper",
    "classification",
]


@dataclass(frozen=True)
class CosineFit:
    """Cosine fit of one (signal, condition) group.

    Numeric fields hold unrounded values and are NaN unless the fit
    succeeded. Use to_record() for the display-rounded record.
    """

    signal: str
    condition: str
    amplitude: float
    phase: float
    offset: float
    amplitude_se: float
    ci_lower: float
    ci_upper: float
    classification: str
    n_points: int

    @property
    def succeeded(self) -> bool:
        return self.classification in (RHYTHMIC, NON_RHYTHMIC)

    @property
    def is_rhythmic(self) -> bool:
        return self.classification == RHYTHMIC

    def to_record(self, rounded: bool = True) -> dict:
        """Flat record for tables.

        Args:
            rounded: If True, round amplitude, offset and CI bounds to 4
                decimals and phase to 2. If False, return raw values plus
                amplitude_se and n_points.
        """
        if not rounded:
            return {
                "signal": self.signal,
                "condition": self.condition,
                "amplitude": self.amplitude,
                "phase": self.phase,
                "offset": self.offset,
                "ci_lower": self.ci_lower,
                "ci_upper": self.ci_upper,
                "classification": self.classification,
                "amplitude_se": self.amplitude_se,
                "n_points": self.n_points,
            }

        return {
            "signal": self.signal,
            "condition": self.condition,
            "amplitude": round(self.amplitude, AMPLITUDE_DECIMALS),
            "phase": round(self.phase, PHASE_DECIMALS),
            "offset": round(self.offset, AMPLITUDE_DECIMALS),
            "ci_lower": round(self.ci_lower, AMPLITUDE_DECIMALS),
            "ci_upper": round(self.ci_upper, AMPLITUDE_DECIMALS),
            "classification": self.classification,
        }


# =============================================================================
# Summarization
# =============================================================================


def summarize_timepoints(df: pd.DataFrame, value_col: str = "value") -> pd.DataFrame:
    """Aggregate replicate observations per (signal, condition, zt).

    Args:
        df: Observation table with columns signal, condition, zt and value_col
            (see toad_pipeline.cleaner.to_observations)
        value_col: Column with the measured value

    Returns:
        DataFrame with columns signal, condition, zt, mean, sd, n, se.
        Missing values are excluded from mean, sd and n; se is NaN when n < 2.
    """
    if len(df) == 0:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    summary = (
        df.groupby(["signal", "condition", "zt"], sort=True, observed=True)[value_col]
        .agg(["mean", "std", "count"])
        .reset_index()
        .rename(columns={"std": "sd", "count": "n"})
    )
    summary["se"] = summary["sd"] / np.sqrt(summary["n"])

    return summary[SUMMARY_COLUMNS]


# =============================================================================
# Cosine Model
# =============================================================================


def cosine_model(
    t: np.ndarray | float,
    amplitude: float,
    phase: float,
    offset: float,
) -> np.ndarray | float:
    """24-hour cosine with the given amplitude, phase (hours) and offset."""
    return amplitude * np.cos(2 * np.pi * (np.asarray(t) - phase) / PERIOD_HOURS) + offset


def classify_amplitude_ci(ci_lower: float, ci_upper: float) -> str:
    """Rhythmic when the amplitude CI lies entirely above or below zero."""
    if ci_lower > 0 or ci_upper < 0:
        return RHYTHMIC
    return NON_RHYTHMIC


def _empty_fit(signal, condition, classification: str, n_points: int) -> CosineFit:
    return CosineFit(
        signal=signal,
        condition=condition,
        amplitude=np.nan,
        phase=np.nan,
        offset=np.nan,
        amplitude_se=np.nan,
        ci_lower=np.nan,
        ci_upper=np.nan,
        classification=classification,
        n_points=n_points,
    )


def _solve(times: np.ndarray, means: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    # Unestimable covariance comes back as inf and is classified by the caller
    p0 = [INITIAL_AMPLITUDE, INITIAL_PHASE, float(np.mean(means))]
    with warnings.catch_warnings(), np.errstate(all="ignore"):
        warnings.simplefilter("ignore", OptimizeWarning)
        params, pcov = curve_fit(
            cosine_model,
            times,
            means,
            p0=p0,
            maxfev=MAX_ITERATIONS * (len(p0) + 1),
        )
    return params, pcov


def fit_group(
    group: pd.DataFrame,
    signal: str | None = None,
    condition: str | None = None,
) -> CosineFit:
    """Fit the cosine model to one group of summary points.

    Args:
        group: Summary rows (columns zt and mean) for one signal/condition
        signal: Signal identifier. If None, taken from the group.
        condition: Condition label. If None, taken from the group.

    Returns:
        CosineFit. Never raises for numerical problems: fewer than 3
        timepoints gives insufficient_data, a solver failure or a
        non-finite estimate gives fit_failed.
    """
    if signal is None and "signal" in group.columns and len(group) > 0:
        signal = group["signal"].iloc[0]
    if condition is None and "condition" in group.columns and len(group) > 0:
        condition = group["condition"].iloc[0]

    points = group.dropna(subset=["zt", "mean"]).sort_values("zt")
    n_points = len(points)

    if n_points < MIN_TIMEPOINTS:
        return _empty_fit(signal, condition, INSUFFICIENT_DATA, n_points)

    times = points["zt"].to_numpy(dtype=float)
    means = points["mean"].to_numpy(dtype=float)

    try:
        params, pcov = _solve(times, means)
    except (RuntimeError, ValueError, FloatingPointError, np.linalg.LinAlgError):
        return _empty_fit(signal, condition, FIT_FAILED, n_points)

    amplitude, phase, offset = (float(p) for p in params)
    variance = float(pcov[0, 0])
    amplitude_se = np.sqrt(variance) if variance >= 0 else np.nan

    if not (np.all(np.isfinite(params)) and np.isfinite(amplitude_se)):
        return _empty_fit(signal, condition, FIT_FAILED, n_points)

    ci_lower = amplitude - CI_Z * amplitude_se
    ci_upper = amplitude + CI_Z * amplitude_se

    return CosineFit(
        signal=signal,
        condition=condition,
        amplitude=amplitude,
        phase=phase,
        offset=offset,
        amplitude_se=float(amplitude_se),
        ci_lower=ci_lower,
        ci_upper=ci_upper,
        classification=classify_amplitude_ci(ci_lower, ci_upper),
        n_points=n_points,
    )


def _fit_task(task: tuple) -> CosineFit:
    signal, condition, group = task
    return fit_group(group, signal, condition)


# =============================================================================
# All Groups
# =============================================================================


def fit_rhythms(
    summary: pd.DataFrame,
    condition_order: list[str] | None = None,
    n_jobs: int | None = None,
    progress: bool = False,
) -> list[CosineFit]:
    """Fit every (signal, condition) group of a timepoint summary.

    Groups are enumerated as signals (sorted) x conditions (fixed order,
    see order_conditions); combinations without any summary rows are
    skipped. Each group is fitted independently.

    Args:
        summary: Output of summarize_timepoints()
        condition_order: Preferred condition order. If None, uses CONDITION_ORDER.
        n_jobs: If > 1, fit groups in a process pool with this many workers
        progress: If True, show progress bar

    Returns:
        List of CosineFit in deterministic signal/condition order
    """
    if len(summary) == 0:
        return []

    signals = sorted(summary["signal"].dropna().unique(), key=str)
    conditions = order_conditions(summary["condition"], condition_order)
    groups = dict(tuple(summary.groupby(["signal", "condition"], sort=False, observed=True)))

    tasks = [
        (signal, condition, groups[(signal, condition)])
        for signal in signals
        for condition in conditions
        if (signal, condition) in groups
    ]

    if n_jobs is not None and n_jobs > 1 and len(tasks) > 1:
        with ProcessPoolExecutor(max_workers=n_jobs) as executor:
            results = executor.map(_fit_task, tasks)
            return list(tqdm(results, total=len(tasks), desc="Fitting rhythms", disable=not progress))

    iterator = tqdm(tasks, desc="Fitting rhythms", disable=not progress)
    return [_fit_task(task) for task in iterator]


def fit_observation_rhythms(
    observations: pd.DataFrame,
    condition_order: list[str] | None = None,
    n_jobs: int | None = None,
) -> tuple[pd.DataFrame, list[CosineFit]]:
    """Summarize observations and fit every group.

    Returns:
        Tuple of (timepoint summary, list of CosineFit)
    """
    summary = summarize_timepoints(observations)
    fits = fit_rhythms(summary, condition_order=condition_order, n_jobs=n_jobs)
    return summary, fits


# =============================================================================
# Reporting Helpers
# =============================================================================


def rhythms_to_frame(fits: list[CosineFit], rounded: bool = True) -> pd.DataFrame:
    """Flatten fits into a table, one row per group."""
    records = [fit.to_record(rounded=rounded) for fit in fits]
    if not records:
        columns = RHYTHM_COLUMNS if rounded else RHYTHM_COLUMNS + ["amplitude_se", "n_points"]
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(records)


def format_rhythm_status(fit: CosineFit) -> str:
    """Human-readable classification, e.g. "Fit error" or "Too few points"."""
    return CLASSIFICATION_LABELS[fit.classification]


def count_classifications(fits: list[CosineFit]) -> dict[str, int]:
    """Number of groups per classification (all four keys present)."""
    counts = dict.fromkeys(CLASSIFICATION_LABELS, 0)
    for fit in fits:
        counts[fit.classification] += 1
    return counts


def predict_curve(fit: CosineFit, times: np.ndarray | list) -> np.ndarray:
    """Evaluate a fitted curve; all-NaN when the fit did not succeed."""
    times = np.asarray(times, dtype=float)
    if not fit.succeeded:
        return np.full_like(times, np.nan)
    return cosine_model(times, fit.amplitude, fit.phase, fit.offset)
