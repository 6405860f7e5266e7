"""Utility functions for the toad data pipeline."""

from pathlib import Path

import pandas as pd

from .cleaner import order_conditions
from .constants import CONDITION_COL, DATASET_FILES, SIGNAL_COL, TIME_COL
from .loader import find_dataset_file

TABLE_FORMATS = ("csv", "parquet")


def save_parquet(
    df: pd.DataFrame,
    output_path: str | Path,
    compression: str = "snappy",
) -> None:
    """Save DataFrame to Parquet format.

    Args:
        df: DataFrame to save
        output_path: Path to output Parquet file
        compression: Compression codec (default: 'snappy')
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, compression=compression, index=False)


def load_parquet(filepath: str | Path) -> pd.DataFrame:
    """Load DataFrame from Parquet file."""
    return pd.read_parquet(filepath)


def save_table(
    df: pd.DataFrame,
    output_path: str | Path,
    output_format: str = "csv",
) -> Path:
    """Save a results table as CSV or Parquet.

    Args:
        df: DataFrame to save
        output_path: Path without extension (the extension is replaced)
        output_format: One of TABLE_FORMATS

    Returns:
        Path of the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_format == "parquet":
        output_path = output_path.with_suffix(".parquet")
        save_parquet(df, output_path)
    elif output_format == "csv":
        output_path = output_path.with_suffix(".csv")
        df.to_csv(output_path, index=False)
    else:
        raise ValueError(f"Unsupported output format: {output_format}")

    return output_path


def list_datasets(
    data_dir: str | Path,
    file_stems: dict[str, str] | None = None,
) -> list[dict]:
    """List the dataset files present in a directory.

    Args:
        data_dir: Directory containing data files
        file_stems: Mapping dataset name -> file stem. If None, uses DATASET_FILES.

    Returns:
        List of dicts with dataset, filepath and file_size_kb
    """
    file_stems = DATASET_FILES if file_stems is None else file_stems

    found = []
    for name, stem in file_stems.items():
        filepath = find_dataset_file(data_dir, stem)
        if filepath is None:
            continue
        found.append(
            {
                "dataset": name,
                "filepath": filepath,
                "file_size_kb": filepath.stat().st_size / 1024,
            }
        )

    return found


def get_data_summary(datasets: dict[str, pd.DataFrame]) -> dict:
    """Summarize loaded datasets.

    Args:
        datasets: Dict from load_datasets()

    Returns:
        Dict keyed by dataset name with:
        - rows: Number of rows
        - conditions: Ordered light conditions present
        - signals: Sorted signal identifiers (gene data only)
        - timepoints: Sorted unique timepoints (rhythm data only)
    """
    summary = {}

    for name, df in datasets.items():
        info = {"rows": len(df)}
        if CONDITION_COL in df.columns:
            info["conditions"] = order_conditions(df[CONDITION_COL])
        if SIGNAL_COL in df.columns:
            info["signals"] = sorted(df[SIGNAL_COL].dropna().astype(str).unique())
        if TIME_COL in df.columns:
            info["timepoints"] = sorted(df[TIME_COL].dropna().unique().tolist())
        summary[name] = info

    return summary
