"""Survival analysis across light conditions.

Kaplan-Meier estimates and log-rank tests via lifelines.
"""

from __future__ import annotations

from itertools import combinations

import numpy as np
import pandas as pd
from lifelines import KaplanMeierFitter
from lifelines.statistics import logrank_test, multivariate_logrank_test

from ..cleaner import normalize_event_column, order_conditions
from ..constants import ALPHA, CONDITION_COL, DURATION_COL, EVENT_COL

LOGRANK_COLUMNS = ["group1", "group2", "test_statistic", "p_value", "significant"]
SURVIVAL_SUMMARY_COLUMNS = ["condition", "n", "events", "median_survival", "survival_at_end"]


def prepare_survival_data(
    df: pd.DataFrame,
    duration_col: str = DURATION_COL,
    event_col: str = EVENT_COL,
    group_col: str = CONDITION_COL,
) -> pd.DataFrame:
    """Clean a survival table for lifelines.

    Args:
        df: Input DataFrame
        duration_col: Column with follow-up time (days)
        event_col: Column with the death indicator
        group_col: Column with the light condition

    Returns:
        DataFrame with columns duration, event (0/1 int) and group; rows
        with a missing or negative duration, unknown event or missing
        group are dropped.
    """
    required = [duration_col, event_col, group_col]
    if any(col not in df.columns for col in required):
        return pd.DataFrame(columns=["duration", "event", "group"])

    data = pd.DataFrame(
        {
            "duration": pd.to_numeric(df[duration_col], errors="coerce"),
            "event": normalize_event_column(df[event_col]),
            "group": df[group_col],
        }
    ).dropna()

    data = data[data["duration"] >= 0].copy()
    data["event"] = data["event"].astype(int)

    return data.reset_index(drop=True)


def fit_kaplan_meier(
    df: pd.DataFrame,
    duration_col: str = DURATION_COL,
    event_col: str = EVENT_COL,
    group_col: str = CONDITION_COL,
    condition_order: list[str] | None = None,
) -> dict[str, KaplanMeierFitter]:
    """Fit one Kaplan-Meier curve per light condition.

    Returns:
        Dict mapping condition label to its fitted KaplanMeierFitter,
        in fixed condition order
    """
    data = prepare_survival_data(df, duration_col, event_col, group_col)

    fitters = {}
    for condition in order_conditions(data["group"], condition_order):
        subset = data[data["group"] == condition]
        kmf = KaplanMeierFitter()
        kmf.fit(subset["duration"], event_observed=subset["event"], label=str(condition))
        fitters[condition] = kmf

    return fitters


def survival_summary(fitters: dict[str, KaplanMeierFitter]) -> pd.DataFrame:
    """Per-condition counts, median survival and final survival probability."""
    rows = []
    for condition, kmf in fitters.items():
        durations = kmf.durations
        events = kmf.event_observed
        survival = kmf.survival_function_.iloc[:, 0]
        rows.append(
            {
                "condition": condition,
                "n": len(durations),
                "events": int(np.sum(events)),
                "median_survival": float(kmf.median_survival_time_),
                "survival_at_end": float(survival.iloc[-1]) if len(survival) else np.nan,
            }
        )

    return pd.DataFrame(rows, columns=SURVIVAL_SUMMARY_COLUMNS)


def logrank_pairwise(
    df: pd.DataFrame,
    duration_col: str = DURATION_COL,
    event_col: str = EVENT_COL,
    group_col: str = CONDITION_COL,
    condition_order: list[str] | None = None,
    alpha: float = ALPHA,
) -> pd.DataFrame:
    """Log-rank test for every pair of conditions.

    Returns:
        DataFrame with columns group1, group2, test_statistic, p_value,
        significant. p-values are not adjusted for multiple comparisons.
    """
    data = prepare_survival_data(df, duration_col, event_col, group_col)
    conditions = order_conditions(data["group"], condition_order)

    rows = []
    for g1, g2 in combinations(conditions, 2):
        d1 = data[data["group"] == g1]
        d2 = data[data["group"] == g2]
        if d1.empty or d2.empty:
            continue

        result = logrank_test(
            d1["duration"],
            d2["duration"],
            event_observed_A=d1["event"],
            event_observed_B=d2["event"],
        )
        rows.append(
            {
                "group1": g1,
                "group2": g2,
                "test_statistic": float(result.test_statistic),
                "p_value": float(result.p_value),
                "significant": bool(result.p_value < alpha),
            }
        )

    return pd.DataFrame(rows, columns=LOGRANK_COLUMNS)


def logrank_multivariate(
    df: pd.DataFrame,
    duration_col: str = DURATION_COL,
    event_col: str = EVENT_COL,
    group_col: str = CONDITION_COL,
    alpha: float = ALPHA,
) -> dict:
    """Overall log-rank test across all conditions.

    Returns:
        Dict with test_statistic, p_value, dof, n_groups, significant
    """
    data = prepare_survival_data(df, duration_col, event_col, group_col)
    n_groups = data["group"].nunique()

    if n_groups < 2:
        return {
            "test_statistic": np.nan,
            "p_value": np.nan,
            "dof": np.nan,
            "n_groups": n_groups,
            "significant": False,
        }

    result = multivariate_logrank_test(data["duration"], data["group"], data["event"])

    return {
        "test_statistic": float(result.test_statistic),
        "p_value": float(result.p_value),
        "dof": n_groups - 1,
        "n_groups": n_groups,
        "significant": bool(result.p_value < alpha),
    }
