#!/usr/bin/env python3
"""Generate the light-wavelength pilot study report.

Loads the behaviour, survival, gene expression and corticosterone tables
from a data directory and writes tables, figures and report.md.

Usage:
    python scripts/run_report.py                          # data/ -> output/
    python scripts/run_report.py --data-dir raw --output-dir out
    python scripts/run_report.py --wrap-before 12         # ZT0-12 -> ZT24-36
    python scripts/run_report.py --n-jobs 4 --no-plots
    python scripts/run_report.py --table-format parquet
"""

import argparse
from pathlib import Path

from toad_pipeline import list_datasets
from toad_pipeline.analysis import generate_report
from toad_pipeline.utils import TABLE_FORMATS


def main():
    parser = argparse.ArgumentParser(
        description="Statistical report for the toad light-wavelength pilot study"
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("data"),
        help="Directory with the data files (default: data)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory for tables, figures and report.md (default: output)",
    )
    parser.add_argument(
        "--wrap-before",
        type=float,
        default=None,
        help="Shift timepoints below this ZT by 24 h before rhythm fitting",
    )
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=None,
        help="Worker processes for rhythm fitting (default: sequential)",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip figure generation",
    )
    parser.add_argument(
        "--formats",
        nargs="+",
        default=["png"],
        help="Figure formats (default: png)",
    )
    parser.add_argument(
        "--table-format",
        choices=TABLE_FORMATS,
        default="csv",
        help="Format of the result tables (default: csv)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Hide progress bars and section headers",
    )

    args = parser.parse_args()
    progress = not args.quiet

    if progress:
        print("=" * 60)
        print("Toad Light-Wavelength Pilot Study Report")
        print("=" * 60)
        print(f"Data: {args.data_dir}")
        print(f"Output: {args.output_dir}")
        for info in list_datasets(args.data_dir):
            print(f"  {info['dataset']}: {info['filepath'].name} ({info['file_size_kb']:.1f} KB)")

    results = generate_report(
        args.data_dir,
        args.output_dir,
        wrap_before=args.wrap_before,
        n_jobs=args.n_jobs,
        make_plots=not args.no_plots,
        formats=args.formats,
        table_format=args.table_format,
        progress=progress,
    )

    if progress:
        print(f"\nReport written to {args.output_dir / 'report.md'} ({len(results)} analyses)")


if __name__ == "__main__":
    main()
