"""Data cleaning functions for toad pilot study tables."""

from collections.abc import Iterable

import numpy as np
import pandas as pd

from .constants import (
    COLUMN_ALIASES,
    CONDITION_COL,
    CONDITION_ORDER,
    PERIOD_HOURS,
    SIGNAL_COL,
    TIME_COL,
)

# Strings accepted as "event observed" / "censored" in survival sheets
EVENT_TRUE = {"1", "yes", "y", "true", "dead", "died", "death"}
EVENT_FALSE = {"0", "no", "n", "false", "alive", "censored"}


def standardize_columns(
    df: pd.DataFrame,
    aliases: dict[str, str] | None = None,
) -> pd.DataFrame:
    """Normalize column headers to lower snake case and apply known aliases.

    Args:
        df: Raw DataFrame as read from disk
        aliases: Mapping of normalized header -> canonical name.
            If None, uses COLUMN_ALIASES.

    Returns:
        DataFrame with renamed columns

    Examples:
        >>> standardize_columns(pd.DataFrame(columns=["Gene ID", "ZT"])).columns.tolist()
        ['gene', 'zt']
    """
    aliases = COLUMN_ALIASES if aliases is None else aliases

    renamed = {}
    for col in df.columns:
        name = str(col).strip().lower()
        name = name.replace(" ", "_").replace("-", "_").replace("(", "").replace(")", "")
        name = name.replace("/", "_")
        renamed[col] = aliases.get(name, name)

    return df.rename(columns=renamed)


def validate_columns(df: pd.DataFrame, required: list[str], dataset: str = "table") -> None:
    """Raise ValueError if any required column is missing.

    Args:
        df: DataFrame to check
        required: Column names that must be present
        dataset: Dataset name used in the error message
    """
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(
            f"{dataset} data is missing required columns {missing}; found: {list(df.columns)}"
        )


def fix_decimal_separator(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Convert European decimal format (comma) to standard format (dot).

    Args:
        df: Input DataFrame
        columns: List of columns to convert

    Returns:
        DataFrame with corrected numeric columns
    """
    df = df.copy()

    for col in columns:
        if col in df.columns and not pd.api.types.is_numeric_dtype(df[col]):
            df[col] = df[col].astype(str).str.replace(",", ".", regex=False)
            df[col] = pd.to_numeric(df[col], errors="coerce")

    return df


def coerce_numeric(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Convert columns to numeric, turning unparseable cells into NaN."""
    df = fix_decimal_separator(df, columns)
    for col in columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def normalize_event_column(series: pd.Series) -> pd.Series:
    """Map survival event markers to 1 (died) / 0 (censored).

    Accepts numbers, booleans and common yes/no strings. Anything
    unrecognised becomes NaN.
    """

    def _convert(value):
        if pd.isna(value):
            return np.nan
        if isinstance(value, bool | np.bool_):
            return int(value)
        text = str(value).strip().lower()
        if text in EVENT_TRUE:
            return 1
        if text in EVENT_FALSE:
            return 0
        try:
            number = float(text)
        except ValueError:
            return np.nan
        if number in (0.0, 1.0):
            return int(number)
        return np.nan

    return series.map(_convert).astype(float)


def wrap_zeitgeber_time(
    zt: pd.Series | np.ndarray | list,
    wrap_before: float | None = None,
    period: float = PERIOD_HOURS,
) -> pd.Series | np.ndarray:
    """Shift early timepoints by one period so a rhythm stays continuous.

    With ``wrap_before=12`` the window 0-12 becomes 24-36, so samples
    taken after the light/dark transition at ZT12 and through the next
    morning form one contiguous span (12-36).

    Args:
        zt: Timepoints in hours
        wrap_before: Timepoints strictly below this value get ``period``
            added. If None, timepoints are returned unchanged.
        period: Period length in hours

    Returns:
        Wrapped timepoints (Series if a Series was given, else ndarray)
    """
    if isinstance(zt, pd.Series):
        values = zt.astype(float)
        if wrap_before is None:
            return values
        return values.where(values >= wrap_before, values + period)

    values = np.asarray(zt, dtype=float)
    if wrap_before is None:
        return values
    return np.where(values < wrap_before, values + period, values)


def order_conditions(
    labels: Iterable,
    order: list[str] | None = None,
) -> list:
    """Sort condition labels: fixed order first, then any others sorted.

    Args:
        labels: Condition labels (duplicates and NaN are dropped)
        order: Preferred order. If None, uses CONDITION_ORDER.

    Returns:
        Ordered list of unique labels
    """
    order = CONDITION_ORDER if order is None else order
    unique = {label for label in labels if not pd.isna(label)}

    known = [label for label in order if label in unique]
    others = sorted((label for label in unique if label not in order), key=str)
    return known + others


def to_observations(
    df: pd.DataFrame,
    value_col: str,
    condition_col: str = CONDITION_COL,
    time_col: str = TIME_COL,
    signal_col: str | None = SIGNAL_COL,
    signal: str | None = None,
) -> pd.DataFrame:
    """Reshape a dataset into a tidy Observation table.

    Args:
        df: Input DataFrame
        value_col: Column with the measured value
        condition_col: Column with the light condition label
        time_col: Column with the timepoint in hours
        signal_col: Column with the signal (gene) identifier. Ignored when
            ``signal`` is given.
        signal: Constant signal identifier for single-signal data
            (e.g. corticosterone)

    Returns:
        DataFrame with columns signal, condition, zt, value. Rows without a
        condition or timepoint are dropped; missing values are kept.
    """
    if signal is not None:
        signals = pd.Series(signal, index=df.index)
    elif signal_col is not None and signal_col in df.columns:
        signals = df[signal_col].astype(str)
    else:
        raise ValueError(f"Signal column '{signal_col}' not found and no constant signal given")

    obs = pd.DataFrame(
        {
            "signal": signals,
            "condition": df[condition_col],
            "zt": pd.to_numeric(df[time_col], errors="coerce"),
            "value": pd.to_numeric(df[value_col], errors="coerce"),
        }
    )

    obs = obs.dropna(subset=["condition", "zt"])
    return obs.reset_index(drop=True)
