"""Statistical tests for the toad pilot data.

Linear regression, two-way ANOVA and Tukey post-hoc comparisons wrap
statsmodels; descriptive helpers follow the same dict / DataFrame result
conventions so that a test that cannot be computed returns NaN values
instead of raising.
"""

from __future__ import annotations

import string
from itertools import combinations

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats
from statsmodels.formula.api import ols
from statsmodels.stats.anova import anova_lm
from statsmodels.stats.multicomp import pairwise_tukeyhsd

from ..cleaner import order_conditions
from ..constants import ALPHA

ANOVA_COLUMNS = ["source", "sum_sq", "df", "F", "p_value", "significant"]
TUKEY_COLUMNS = ["group1", "group2", "mean_diff", "p_adj", "ci_lower", "ci_upper", "reject"]
COEFFICIENT_COLUMNS = ["estimate", "std_error", "t_value", "p_value", "ci_lower", "ci_upper"]

# =============================================================================
# Descriptive Statistics
# =============================================================================


def describe_by_group(
    df: pd.DataFrame,
    value_col: str,
    group_cols: str | list[str],
) -> pd.DataFrame:
    """Summary statistics of a value per group.

    Args:
        df: Input DataFrame
        value_col: Column with the measured value
        group_cols: Column or columns to group by

    Returns:
        DataFrame with group columns plus count, mean, sd, se, ci_lower,
        ci_upper (t-based 95% CI of the mean), min, max. Missing values are
        excluded.
    """
    if isinstance(group_cols, str):
        group_cols = [group_cols]

    if value_col not in df.columns or any(col not in df.columns for col in group_cols):
        return pd.DataFrame()

    if len(df) == 0:
        return pd.DataFrame()

    result = (
        df.groupby(group_cols, observed=True)[value_col]
        .agg(["count", "mean", "std", "min", "max"])
        .rename(columns={"std": "sd"})
        .reset_index()
    )
    result["se"] = result["sd"] / np.sqrt(result["count"])

    intervals = df.groupby(group_cols, observed=True)[value_col].apply(compute_confidence_interval)
    result["ci_lower"] = [interval[0] for interval in intervals]
    result["ci_upper"] = [interval[1] for interval in intervals]

    return result[[*group_cols, "count", "mean", "sd", "se", "ci_lower", "ci_upper", "min", "max"]]


def compute_confidence_interval(
    values: np.ndarray | pd.Series | list,
    confidence: float = 0.95,
) -> tuple[float, float]:
    """Compute t-based confidence interval for the mean.

    Args:
        values: Sample values
        confidence: Confidence level (default 0.95 for 95% CI)

    Returns:
        Tuple of (lower_bound, upper_bound)
    """
    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]

    if len(values) < 2:
        return (np.nan, np.nan)

    n = len(values)
    mean = np.mean(values)
    se = scipy_stats.sem(values)

    h = se * scipy_stats.t.ppf((1 + confidence) / 2, n - 1)

    return (mean - h, mean + h)


def normality_test(
    values: np.ndarray | pd.Series | list,
) -> dict:
    """Test for normality using Shapiro-Wilk test.

    Args:
        values: Sample values

    Returns:
        Dict with W_statistic, p_value, is_normal
    """
    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]

    if len(values) < 3:
        return {
            "W_statistic": np.nan,
            "p_value": np.nan,
            "is_normal": False,
        }

    result = scipy_stats.shapiro(values)

    return {
        "W_statistic": result.statistic,
        "p_value": result.pvalue,
        "is_normal": result.pvalue >= ALPHA,
    }


def significance_stars(p_value: float) -> str:
    """Star code for a p-value ("***", "**", "*", "n.s.")."""
    if p_value is None or np.isnan(p_value):
        return ""
    if p_value < 0.001:
        return "***"
    if p_value < 0.01:
        return "**"
    if p_value < 0.05:
        return "*"
    return "n.s."


# =============================================================================
# Linear Models
# =============================================================================


def _empty_linear_result(n_obs: int) -> dict:
    return {
        "coefficients": pd.DataFrame(columns=COEFFICIENT_COLUMNS),
        "r_squared": np.nan,
        "adj_r_squared": np.nan,
        "f_statistic": np.nan,
        "f_pvalue": np.nan,
        "n_obs": n_obs,
    }


def fit_linear_model(df: pd.DataFrame, formula: str) -> dict:
    """Fit an ordinary least squares model from a formula.

    Args:
        df: Input DataFrame
        formula: Patsy formula, e.g. "activity ~ wavelength_nm"

    Returns:
        Dict with: coefficients (DataFrame indexed by term), r_squared,
        adj_r_squared, f_statistic, f_pvalue, n_obs. Values are NaN when
        the model has no residual degrees of freedom.
    """
    if len(df) == 0:
        return _empty_linear_result(0)

    model = ols(formula, data=df).fit()

    if model.df_resid < 1:
        return _empty_linear_result(int(model.nobs))

    ci = model.conf_int()
    coefficients = pd.DataFrame(
        {
            "estimate": model.params,
            "std_error": model.bse,
            "t_value": model.tvalues,
            "p_value": model.pvalues,
            "ci_lower": ci[0],
            "ci_upper": ci[1],
        }
    )

    return {
        "coefficients": coefficients,
        "r_squared": model.rsquared,
        "adj_r_squared": model.rsquared_adj,
        "f_statistic": model.fvalue,
        "f_pvalue": model.f_pvalue,
        "n_obs": int(model.nobs),
    }


def regress_on_wavelength(
    df: pd.DataFrame,
    value_col: str,
    predictor_col: str,
) -> dict:
    """Simple linear regression of a value on a numeric predictor.

    Args:
        df: Input DataFrame
        value_col: Dependent variable (e.g. activity)
        predictor_col: Numeric predictor (e.g. wavelength in nm)

    Returns:
        fit_linear_model() result plus slope, slope_se, slope_p_value,
        intercept and significant.
    """
    if value_col not in df.columns or predictor_col not in df.columns:
        data = pd.DataFrame(columns=["y", "x"])
    else:
        data = pd.DataFrame(
            {
                "y": pd.to_numeric(df[value_col], errors="coerce"),
                "x": pd.to_numeric(df[predictor_col], errors="coerce"),
            }
        ).dropna()

    if len(data) < 3 or data["x"].nunique() < 2:
        result = _empty_linear_result(len(data))
        result.update(
            {
                "slope": np.nan,
                "slope_se": np.nan,
                "slope_p_value": np.nan,
                "intercept": np.nan,
                "significant": False,
            }
        )
        return result

    result = fit_linear_model(data, "y ~ x")
    coefficients = result["coefficients"]

    if coefficients.empty:
        slope = slope_se = slope_p = intercept = np.nan
    else:
        slope = coefficients.loc["x", "estimate"]
        slope_se = coefficients.loc["x", "std_error"]
        slope_p = coefficients.loc["x", "p_value"]
        intercept = coefficients.loc["Intercept", "estimate"]
        result["coefficients"] = coefficients.rename(index={"x": predictor_col})

    result.update(
        {
            "slope": slope,
            "slope_se": slope_se,
            "slope_p_value": slope_p,
            "intercept": intercept,
            "significant": bool(slope_p < ALPHA) if not np.isnan(slope_p) else False,
        }
    )
    return result


# =============================================================================
# ANOVA
# =============================================================================


def two_way_anova(
    df: pd.DataFrame,
    value_col: str,
    factor_a: str,
    factor_b: str,
    typ: int = 2,
    interaction: bool = True,
) -> pd.DataFrame:
    """Two-way ANOVA with both factors treated as categorical.

    Args:
        df: Input DataFrame
        value_col: Dependent variable
        factor_a: First factor (e.g. wavelength)
        factor_b: Second factor (e.g. zt)
        typ: Sum-of-squares type passed to anova_lm
        interaction: Include the factor_a x factor_b interaction term

    Returns:
        DataFrame with columns source, sum_sq, df, F, p_value, significant.
        Sources are named after the factors ("a", "b", "a:b", "Residual").
        Empty when either factor has fewer than two levels or the design
        cannot be fitted.
    """
    required = [value_col, factor_a, factor_b]
    if any(col not in df.columns for col in required):
        return pd.DataFrame(columns=ANOVA_COLUMNS)

    data = pd.DataFrame(
        {
            "y": pd.to_numeric(df[value_col], errors="coerce"),
            "a": df[factor_a].astype(str).where(df[factor_a].notna()),
            "b": df[factor_b].astype(str).where(df[factor_b].notna()),
        }
    ).dropna()

    if data["a"].nunique() < 2 or data["b"].nunique() < 2:
        return pd.DataFrame(columns=ANOVA_COLUMNS)

    formula = "y ~ C(a) * C(b)" if interaction else "y ~ C(a) + C(b)"

    try:
        model = ols(formula, data=data).fit()
        table = anova_lm(model, typ=typ)
    except (ValueError, np.linalg.LinAlgError):
        return pd.DataFrame(columns=ANOVA_COLUMNS)

    names = {
        "C(a)": factor_a,
        "C(b)": factor_b,
        "C(a):C(b)": f"{factor_a}:{factor_b}",
        "Residual": "Residual",
    }

    result = pd.DataFrame(
        {
            "source": [names.get(idx, idx) for idx in table.index],
            "sum_sq": table["sum_sq"].to_numpy(),
            "df": table["df"].to_numpy(),
            "F": table["F"].to_numpy(),
            "p_value": table["PR(>F)"].to_numpy(),
        }
    )
    result["significant"] = result["p_value"] < ALPHA

    return result


# =============================================================================
# Post-hoc Comparisons
# =============================================================================


def tukey_hsd(
    df: pd.DataFrame,
    value_col: str,
    group_col: str,
    alpha: float = ALPHA,
) -> pd.DataFrame:
    """Tukey's HSD pairwise comparisons between groups.

    Args:
        df: Input DataFrame
        value_col: Dependent variable
        group_col: Grouping column (labels are compared as strings)
        alpha: Family-wise significance level

    Returns:
        DataFrame with columns group1, group2, mean_diff, p_adj,
        ci_lower, ci_upper, reject. Empty for fewer than two groups.
    """
    if value_col not in df.columns or group_col not in df.columns:
        return pd.DataFrame(columns=TUKEY_COLUMNS)

    data = pd.DataFrame(
        {
            "y": pd.to_numeric(df[value_col], errors="coerce"),
            "group": df[group_col].astype(str).where(df[group_col].notna()),
        }
    ).dropna()

    if data["group"].nunique() < 2:
        return pd.DataFrame(columns=TUKEY_COLUMNS)

    result = pairwise_tukeyhsd(
        endog=data["y"].to_numpy(dtype=float),
        groups=data["group"].to_numpy(),
        alpha=alpha,
    )

    # statsmodels orders the pairs as the upper triangle of groupsunique
    groups = [str(g) for g in result.groupsunique]
    rows = []
    for k, (i, j) in enumerate(combinations(range(len(groups)), 2)):
        rows.append(
            {
                "group1": groups[i],
                "group2": groups[j],
                "mean_diff": float(result.meandiffs[k]),
                "p_adj": float(result.pvalues[k]),
                "ci_lower": float(result.confint[k, 0]),
                "ci_upper": float(result.confint[k, 1]),
                "reject": bool(result.reject[k]),
            }
        )

    return pd.DataFrame(rows, columns=TUKEY_COLUMNS)


def _absorb(columns: list[set]) -> list[set]:
    """Drop duplicate letter columns and columns contained in another."""
    unique = []
    for col in columns:
        if col not in unique:
            unique.append(col)
    return [col for col in unique if not any(col < other for other in unique)]


def compact_letter_display(
    tukey_df: pd.DataFrame,
    groups: list[str],
    means: dict[str, float] | None = None,
) -> dict[str, str]:
    """Assign grouping letters from pairwise comparisons.

    Groups sharing a letter are not significantly different. Uses the
    insert-and-absorb procedure: start with one letter shared by all
    groups, split it for every significant pair, then drop redundant
    letters.

    Args:
        tukey_df: Output of tukey_hsd()
        groups: Group labels to label
        means: Optional group means; if given, groups are ranked by
            descending mean so "a" marks the highest group

    Returns:
        Dict mapping group label to its letters (e.g. {"Blue": "ab"})
    """
    groups = [str(g) for g in groups]
    if means is not None:
        groups = sorted(groups, key=lambda g: -means.get(g, -np.inf))

    if not groups:
        return {}

    columns = [set(groups)]

    if not tukey_df.empty:
        significant = tukey_df[tukey_df["reject"].astype(bool)]
        for _, row in significant.iterrows():
            a, b = str(row["group1"]), str(row["group2"])
            split = []
            for col in columns:
                if a in col and b in col:
                    split.append(col - {b})
                    split.append(col - {a})
                else:
                    split.append(col)
            columns = _absorb(split)

    position = {g: i for i, g in enumerate(groups)}
    columns = sorted(
        (col for col in columns if col),
        key=lambda col: sorted(position[g] for g in col if g in position),
    )

    letters = {g: "" for g in groups}
    for letter, col in zip(string.ascii_lowercase, columns, strict=False):
        for g in groups:
            if g in col:
                letters[g] += letter

    return letters


def tukey_letters(
    df: pd.DataFrame,
    value_col: str,
    group_col: str,
    alpha: float = ALPHA,
) -> dict[str, str]:
    """Tukey HSD followed by compact letter display.

    Returns:
        Dict mapping group label (as string) to letters. A single group
        gets "a"; no groups gives an empty dict.
    """
    if value_col not in df.columns or group_col not in df.columns:
        return {}

    data = df[[value_col, group_col]].dropna()
    if data.empty:
        return {}

    groups = [str(g) for g in order_conditions(data[group_col].astype(str))]
    means = data.groupby(data[group_col].astype(str))[value_col].mean().to_dict()

    if len(groups) < 2:
        return {g: "a" for g in groups}

    comparisons = tukey_hsd(data, value_col, group_col, alpha=alpha)
    return compact_letter_display(comparisons, groups, means=means)
