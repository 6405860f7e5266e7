"""Toad light-wavelength pilot study pipeline.

A toolkit for loading and analyzing the pilot study tables: behaviour,
survival, clock gene expression and corticosterone.

Example usage:
    from toad_pipeline import (
        load_datasets,
        load_gene_expression,
        to_observations,
        wrap_zeitgeber_time,
    )

    # Load every dataset found in a directory
    datasets = load_datasets("data/")

    # Or load a single table
    df = load_gene_expression("data/gene_expression.csv")

    # Keep the night continuous: ZT0-12 becomes ZT24-36
    df["zt"] = wrap_zeitgeber_time(df["zt"], wrap_before=12)

    # Tidy observations for rhythm fitting
    observations = to_observations(df, "expression")

For analysis functions, see the analysis subpackage:
    from toad_pipeline.analysis import (
        fit_rhythms,
        summarize_timepoints,
        generate_report,
    )
"""

from .cleaner import (
    coerce_numeric,
    fix_decimal_separator,
    normalize_event_column,
    order_conditions,
    standardize_columns,
    to_observations,
    validate_columns,
    wrap_zeitgeber_time,
)
from .constants import (
    CLASSIFICATION_LABELS,
    CONDITION_ORDER,
    FIT_FAILED,
    INSUFFICIENT_DATA,
    NON_RHYTHMIC,
    RHYTHMIC,
)
from .loader import (
    find_dataset_file,
    load_behavior,
    load_corticosterone,
    load_datasets,
    load_gene_expression,
    load_survival,
    load_table,
)
from .utils import (
    get_data_summary,
    list_datasets,
    load_parquet,
    save_parquet,
    save_table,
)

__version__ = "0.1.0"

__all__ = [
    # Constants
    "CONDITION_ORDER",
    "CLASSIFICATION_LABELS",
    "RHYTHMIC",
    "NON_RHYTHMIC",
    "FIT_FAILED",
    "INSUFFICIENT_DATA",
    # Cleaner
    "standardize_columns",
    "validate_columns",
    "fix_decimal_separator",
    "coerce_numeric",
    "normalize_event_column",
    "wrap_zeitgeber_time",
    "order_conditions",
    "to_observations",
    # Loader
    "load_table",
    "find_dataset_file",
    "load_behavior",
    "load_survival",
    "load_gene_expression",
    "load_corticosterone",
    "load_datasets",
    # Utils
    "save_parquet",
    "load_parquet",
    "save_table",
    "list_datasets",
    "get_data_summary",
]
