"""Data loading functions for toad pilot study tables."""

from pathlib import Path

import pandas as pd
from tqdm import tqdm

from .cleaner import coerce_numeric, normalize_event_column, standardize_columns, validate_columns
from .constants import (
    ACTIVITY_COL,
    CORT_COL,
    DATASET_FILES,
    DAY_COL,
    DURATION_COL,
    EVENT_COL,
    EXPRESSION_COL,
    REQUIRED_COLUMNS,
    SUPPORTED_EXTENSIONS,
    TIME_COL,
    WAVELENGTH_NM_COL,
)


def load_table(filepath: str | Path, sheet_name: str | int = 0) -> pd.DataFrame:
    """Load a single table from CSV, TSV or Excel.

    Args:
        filepath: Path to the file
        sheet_name: Sheet to read for Excel files

    Returns:
        Raw DataFrame

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is not supported
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    suffix = filepath.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(filepath)
    if suffix in (".tsv", ".txt"):
        return pd.read_csv(filepath, sep="\t")
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(filepath, sheet_name=sheet_name)

    raise ValueError(
        f"Unsupported file type: {filepath.suffix}. Use one of {', '.join(SUPPORTED_EXTENSIONS)}"
    )


def find_dataset_file(data_dir: str | Path, stem: str) -> Path | None:
    """Find the first file named ``stem`` with a supported extension.

    Args:
        data_dir: Directory to search
        stem: File name without extension

    Returns:
        Path to the file, or None if no candidate exists

    Raises:
        FileNotFoundError: If directory doesn't exist
    """
    data_dir = Path(data_dir)

    if not data_dir.exists():
        raise FileNotFoundError(f"Directory not found: {data_dir}")

    for ext in SUPPORTED_EXTENSIONS:
        candidate = data_dir / f"{stem}{ext}"
        if candidate.exists():
            return candidate
    return None


def _prepare(df: pd.DataFrame, dataset: str, numeric_cols: list[str]) -> pd.DataFrame:
    """Standardize, validate and coerce a freshly loaded table."""
    df = standardize_columns(df)
    validate_columns(df, REQUIRED_COLUMNS[dataset], dataset)

    if len(df) == 0:
        raise ValueError(f"{dataset} data is empty")

    return coerce_numeric(df, numeric_cols)


def load_behavior(filepath: str | Path) -> pd.DataFrame:
    """Load the behaviour table (activity per toad and light condition)."""
    df = load_table(filepath)
    return _prepare(df, "behavior", [ACTIVITY_COL, WAVELENGTH_NM_COL, DAY_COL])


def load_survival(filepath: str | Path) -> pd.DataFrame:
    """Load the survival table.

    The event column is normalised to 1 (died) / 0 (censored).
    """
    df = load_table(filepath)
    df = _prepare(df, "survival", [DURATION_COL])
    df[EVENT_COL] = normalize_event_column(df[EVENT_COL])
    return df


def load_gene_expression(filepath: str | Path) -> pd.DataFrame:
    """Load the clock gene expression table (one row per replicate)."""
    df = load_table(filepath)
    return _prepare(df, "gene_expression", [TIME_COL, EXPRESSION_COL])


def load_corticosterone(filepath: str | Path) -> pd.DataFrame:
    """Load the corticosterone table (one row per sample)."""
    df = load_table(filepath)
    return _prepare(df, "corticosterone", [TIME_COL, CORT_COL])


LOADERS = {
    "behavior": load_behavior,
    "survival": load_survival,
    "gene_expression": load_gene_expression,
    "corticosterone": load_corticosterone,
}


def load_datasets(
    data_dir: str | Path,
    file_stems: dict[str, str] | None = None,
    progress: bool = True,
) -> dict[str, pd.DataFrame]:
    """Load every dataset found in a directory.

    Datasets without a matching file are skipped; files that fail to load
    are reported and skipped.

    Args:
        data_dir: Directory containing the data files
        file_stems: Mapping dataset name -> file stem. If None, uses DATASET_FILES.
        progress: If True, show progress bar

    Returns:
        Dict mapping dataset name to its cleaned DataFrame

    Raises:
        FileNotFoundError: If directory doesn't exist
        ValueError: If no dataset could be loaded
    """
    data_dir = Path(data_dir)
    file_stems = DATASET_FILES if file_stems is None else file_stems

    datasets = {}
    iterator = tqdm(file_stems.items(), desc="Loading datasets", disable=not progress)

    for name, stem in iterator:
        filepath = find_dataset_file(data_dir, stem)
        if filepath is None:
            tqdm.write(f"Warning: No {name} file found in {data_dir}")
            continue

        try:
            datasets[name] = LOADERS[name](filepath)
        except Exception as e:
            tqdm.write(f"Warning: Failed to load {filepath.name}: {e}")
            continue

    if not datasets:
        raise ValueError(f"No datasets could be loaded from {data_dir}")

    return datasets
