"""Tests for the utils module."""

import pandas as pd
import pytest

from toad_pipeline.utils import get_data_summary, list_datasets, load_parquet, save_parquet, save_table


class TestParquet:
    """Tests for save_parquet and load_parquet."""

    def test_save_and_load(self, tmp_path, behavior_df):
        """Saved table loads back unchanged."""
        path = tmp_path / "nested" / "behavior.parquet"
        save_parquet(behavior_df, path)

        result = load_parquet(path)

        pd.testing.assert_frame_equal(result, behavior_df)


class TestSaveTable:
    """Tests for save_table function."""

    def test_csv(self, tmp_path, behavior_df):
        """CSV output gets a .csv suffix."""
        path = save_table(behavior_df, tmp_path / "tables" / "behavior")
        assert path.suffix == ".csv"
        assert len(pd.read_csv(path)) == len(behavior_df)

    def test_parquet(self, tmp_path, behavior_df):
        path = save_table(behavior_df, tmp_path / "behavior", output_format="parquet")
        assert path.suffix == ".parquet"
        assert path.exists()

    def test_unknown_format(self, tmp_path, behavior_df):
        """Raise ValueError for unsupported format."""
        with pytest.raises(ValueError, match="Unsupported output format"):
            save_table(behavior_df, tmp_path / "behavior", output_format="json")


class TestListDatasets:
    """Tests for list_datasets function."""

    def test_lists_present_files(self, tmp_path, create_data_dir):
        """Only present datasets are listed."""
        data_dir = create_data_dir(tmp_path / "data", datasets=("behavior", "survival"))

        found = list_datasets(data_dir)

        assert [f["dataset"] for f in found] == ["behavior", "survival"]
        assert all(f["file_size_kb"] > 0 for f in found)


class TestGetDataSummary:
    """Tests for get_data_summary function."""

    def test_summary(self, gene_expression_df, behavior_df):
        """Summary lists rows, conditions, signals and timepoints."""
        summary = get_data_summary({"gene_expression": gene_expression_df, "behavior": behavior_df})

        genes = summary["gene_expression"]
        assert genes["rows"] == len(gene_expression_df)
        assert genes["conditions"] == ["Blue", "Red"]
        assert genes["signals"] == ["bmal1", "per1"]
        assert genes["timepoints"] == [0, 4, 8, 12, 16, 20]

        assert summary["behavior"]["conditions"] == ["Blue", "Green", "Red"]
        assert "signals" not in summary["behavior"]
