"""Report driver for the light-wavelength pilot study.

Runs every analysis available for the loaded datasets and writes tables,
figures and a plain-text markdown summary.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
from tqdm import tqdm

from ..cleaner import to_observations, wrap_zeitgeber_time
from ..constants import (
    ACTIVITY_COL,
    CONDITION_COL,
    CORT_COL,
    CORTICOSTERONE_SIGNAL,
    DAY_COL,
    EXPRESSION_COL,
    SIGNAL_COL,
    TIME_COL,
    WAVELENGTH_NM_COL,
)
from ..loader import load_datasets
from ..utils import TABLE_FORMATS, get_data_summary, save_table
from .plots import (
    plot_group_means,
    plot_regression,
    plot_rhythm_grid,
    plot_survival_curves,
)
from .pub_plots import apply_publication_style, format_p_value, save_figure
from .rhythm import count_classifications, fit_observation_rhythms, rhythms_to_frame
from .stats import (
    describe_by_group,
    normality_test,
    regress_on_wavelength,
    tukey_hsd,
    tukey_letters,
    two_way_anova,
)
from .survival import (
    fit_kaplan_meier,
    logrank_multivariate,
    logrank_pairwise,
    survival_summary,
)

# =============================================================================
# Per-dataset Analyses
# =============================================================================


def analyze_rhythms(
    observations: pd.DataFrame,
    condition_order: list[str] | None = None,
    n_jobs: int | None = None,
) -> dict:
    """Summarize and fit every (signal, condition) group.

    Returns:
        Dict with summary, fits, table (display-rounded) and counts per
        classification
    """
    summary, fits = fit_observation_rhythms(
        observations, condition_order=condition_order, n_jobs=n_jobs
    )
    return {
        "summary": summary,
        "fits": fits,
        "table": rhythms_to_frame(fits),
        "counts": count_classifications(fits),
    }


def analyze_behavior(df: pd.DataFrame) -> dict:
    """Activity by light condition.

    Regression on wavelength (nm) when that column is present, two-way
    ANOVA wavelength x day when days are recorded. Descriptives, Shapiro-Wilk
    normality per condition and Tukey letters are always computed.
    """
    result = {
        "descriptives": describe_by_group(df, ACTIVITY_COL, CONDITION_COL),
        "tukey": tukey_hsd(df, ACTIVITY_COL, CONDITION_COL),
        "letters": tukey_letters(df, ACTIVITY_COL, CONDITION_COL),
        "normality": pd.DataFrame(
            [
                {CONDITION_COL: condition, **normality_test(group[ACTIVITY_COL])}
                for condition, group in df.groupby(CONDITION_COL)
            ]
        ),
    }

    if WAVELENGTH_NM_COL in df.columns:
        result["regression"] = regress_on_wavelength(df, ACTIVITY_COL, WAVELENGTH_NM_COL)

    if DAY_COL in df.columns:
        result["anova"] = two_way_anova(df, ACTIVITY_COL, CONDITION_COL, DAY_COL)

    return result


def analyze_survival(df: pd.DataFrame) -> dict:
    """Kaplan-Meier curves and log-rank tests by light condition."""
    fitters = fit_kaplan_meier(df)
    return {
        "fitters": fitters,
        "summary": survival_summary(fitters),
        "pairwise": logrank_pairwise(df),
        "overall": logrank_multivariate(df),
    }


def _anova_by_signal(df: pd.DataFrame, value_col: str, signal_col: str | None) -> pd.DataFrame:
    """Two-way ANOVA wavelength x zt, per signal when a signal column is given."""
    if signal_col is None:
        return two_way_anova(df, value_col, CONDITION_COL, TIME_COL)

    tables = []
    for signal in sorted(df[signal_col].dropna().astype(str).unique()):
        table = two_way_anova(
            df[df[signal_col].astype(str) == signal], value_col, CONDITION_COL, TIME_COL
        )
        if table.empty:
            continue
        table.insert(0, "signal", signal)
        tables.append(table)

    if not tables:
        return pd.DataFrame()
    return pd.concat(tables, ignore_index=True)


def analyze_gene_expression(
    df: pd.DataFrame,
    wrap_before: float | None = None,
    n_jobs: int | None = None,
) -> dict:
    """Clock gene rhythms per wavelength plus wavelength x ZT ANOVA per gene."""
    df = df.copy()
    df[TIME_COL] = wrap_zeitgeber_time(df[TIME_COL], wrap_before)

    observations = to_observations(df, EXPRESSION_COL, signal_col=SIGNAL_COL)
    result = analyze_rhythms(observations, n_jobs=n_jobs)
    result["anova"] = _anova_by_signal(df, EXPRESSION_COL, SIGNAL_COL)
    result["letters"] = {
        str(signal): tukey_letters(group, EXPRESSION_COL, CONDITION_COL)
        for signal, group in df.groupby(SIGNAL_COL)
    }
    return result


def analyze_corticosterone(
    df: pd.DataFrame,
    wrap_before: float | None = None,
    n_jobs: int | None = None,
) -> dict:
    """Corticosterone rhythm per wavelength plus wavelength x ZT ANOVA."""
    df = df.copy()
    df[TIME_COL] = wrap_zeitgeber_time(df[TIME_COL], wrap_before)

    observations = to_observations(df, CORT_COL, signal=CORTICOSTERONE_SIGNAL)
    result = analyze_rhythms(observations, n_jobs=n_jobs)
    result["anova"] = _anova_by_signal(df, CORT_COL, None)
    result["letters"] = tukey_letters(df, CORT_COL, CONDITION_COL)
    return result


# =============================================================================
# Output Writers
# =============================================================================


def _write_tables(
    name: str,
    result: dict,
    tables_dir: Path,
    table_format: str = "csv",
) -> list[Path]:
    written = []

    for key in ("table", "summary", "anova", "tukey", "descriptives", "normality", "pairwise"):
        table = result.get(key)
        if isinstance(table, pd.DataFrame) and not table.empty:
            written.append(save_table(table, tables_dir / f"{name}_{key}", table_format))

    regression = result.get("regression")
    if regression is not None and not regression["coefficients"].empty:
        coefficients = regression["coefficients"].reset_index(names="term")
        written.append(save_table(coefficients, tables_dir / f"{name}_regression", table_format))

    return written


def _write_figures(
    name: str,
    df: pd.DataFrame,
    result: dict,
    figures_dir: Path,
    formats: list[str] | tuple[str, ...],
) -> list[Path]:
    written = []

    with apply_publication_style():
        if "fits" in result:
            ylabel = "Corticosterone" if name == "corticosterone" else "Relative expression"
            fig = plot_rhythm_grid(result["summary"], result["fits"], ylabel=ylabel)
            written.extend(save_figure(fig, figures_dir / f"{name}_rhythms", formats))

        if name == "behavior":
            fig, ax = plt.subplots(figsize=(6, 5))
            plot_group_means(df, ACTIVITY_COL, CONDITION_COL, letters=result["letters"], ax=ax)
            written.extend(save_figure(fig, figures_dir / "behavior_activity", formats))

            if "regression" in result:
                fig, ax = plt.subplots(figsize=(6, 5))
                plot_regression(df, ACTIVITY_COL, WAVELENGTH_NM_COL, result["regression"], ax=ax)
                written.extend(save_figure(fig, figures_dir / "behavior_regression", formats))

        if name == "survival":
            fig, ax = plt.subplots(figsize=(7, 5))
            plot_survival_curves(result["fitters"], ax=ax, logrank=result["overall"])
            written.extend(save_figure(fig, figures_dir / "survival_curves", formats))

    return written


def _section(title: str, body: str) -> str:
    return f"## {title}\n\n```\n{body}\n```\n"


def write_markdown_summary(results: dict, output_path: str | Path) -> Path:
    """Write a markdown summary of every analysis result.

    Args:
        results: Dict dataset name -> analysis result
        output_path: Path of the markdown file

    Returns:
        Path of the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    parts = ["# Light wavelength pilot study report\n"]

    for name, result in results.items():
        if "table" in result:
            parts.append(_section(f"{name}: rhythmicity", result["table"].to_string(index=False)))
            counts = ", ".join(f"{k}={v}" for k, v in result["counts"].items())
            parts.append(f"Classification counts: {counts}\n")

        anova = result.get("anova")
        if isinstance(anova, pd.DataFrame) and not anova.empty:
            parts.append(_section(f"{name}: two-way ANOVA", anova.to_string(index=False)))

        letters = result.get("letters")
        if letters:
            parts.append(_section(f"{name}: Tukey grouping letters", str(letters)))

        regression = result.get("regression")
        if regression is not None:
            line = (
                f"slope = {regression['slope']:.4g}, "
                f"{format_p_value(regression['slope_p_value'])}, "
                f"R² = {regression['r_squared']:.3f}, n = {regression['n_obs']}"
            )
            parts.append(_section(f"{name}: linear regression", line))

        if "overall" in result:
            overall = result["overall"]
            parts.append(_section(f"{name}: Kaplan-Meier", result["summary"].to_string(index=False)))
            parts.append(
                f"Log-rank (all groups): chi2 = {overall['test_statistic']:.3f}, "
                f"{format_p_value(overall['p_value'])}\n"
            )
            if not result["pairwise"].empty:
                parts.append(
                    _section(f"{name}: pairwise log-rank", result["pairwise"].to_string(index=False))
                )

    output_path.write_text("\n".join(parts), encoding="utf-8")
    return output_path


# =============================================================================
# Report Driver
# =============================================================================


def run_analysis(
    name: str,
    df: pd.DataFrame,
    wrap_before: float | None = None,
    n_jobs: int | None = None,
) -> dict:
    """Dispatch one dataset to its analysis."""
    if name == "behavior":
        return analyze_behavior(df)
    if name == "survival":
        return analyze_survival(df)
    if name == "gene_expression":
        return analyze_gene_expression(df, wrap_before=wrap_before, n_jobs=n_jobs)
    if name == "corticosterone":
        return analyze_corticosterone(df, wrap_before=wrap_before, n_jobs=n_jobs)

    raise ValueError(f"Unknown dataset: {name}")


def generate_report(
    data_dir: str | Path,
    output_dir: str | Path,
    wrap_before: float | None = None,
    n_jobs: int | None = None,
    make_plots: bool = True,
    formats: list[str] | tuple[str, ...] = ("png",),
    table_format: str = "csv",
    progress: bool = True,
) -> dict:
    """Load all datasets, run every analysis and write the report.

    Args:
        data_dir: Directory with the data files
        output_dir: Directory for tables/, figures/ and report.md
        wrap_before: Timepoints below this value are shifted by 24 h
            before rhythm fitting (see wrap_zeitgeber_time)
        n_jobs: Worker processes for rhythm fitting (None = sequential)
        make_plots: Write figures
        formats: Figure formats
        table_format: "csv" or "parquet" for the tables
        progress: Show progress bars and section headers

    Returns:
        Dict dataset name -> analysis result. A dataset whose analysis
        fails is reported and left out.

    Raises:
        ValueError: If table_format is not supported
    """
    if table_format not in TABLE_FORMATS:
        raise ValueError(f"Unsupported table format: {table_format}. Use one of {TABLE_FORMATS}")

    output_dir = Path(output_dir)
    tables_dir = output_dir / "tables"
    figures_dir = output_dir / "figures"

    datasets = load_datasets(data_dir, progress=progress)

    if progress:
        for name, info in get_data_summary(datasets).items():
            print(f"  {name}: {info['rows']} rows")

    results = {}
    for name, df in datasets.items():
        if progress:
            print("\n" + "=" * 60)
            print(f"ANALYZING {name.upper()}")
            print("=" * 60)

        try:
            result = run_analysis(name, df, wrap_before=wrap_before, n_jobs=n_jobs)
        except Exception as e:
            tqdm.write(f"Warning: {name} analysis failed: {e}")
            continue

        results[name] = result
        written = _write_tables(name, result, tables_dir, table_format)

        if make_plots:
            written.extend(_write_figures(name, df, result, figures_dir, formats))

        if progress:
            print(f"Wrote {len(written)} files for {name}")

    write_markdown_summary(results, output_dir / "report.md")

    return results
