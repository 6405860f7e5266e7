"""Tests for the cleaner module."""

import numpy as np
import pandas as pd
import pytest

from toad_pipeline.cleaner import (
    coerce_numeric,
    fix_decimal_separator,
    normalize_event_column,
    order_conditions,
    standardize_columns,
    to_observations,
    validate_columns,
    wrap_zeitgeber_time,
)


class TestStandardizeColumns:
    """Tests for standardize_columns function."""

    def test_lab_headers(self):
        """Lab export headers map to canonical names."""
        df = pd.DataFrame(columns=["Treatment", "Survival days", "Dead", "Gene ID", "Zeitgeber-Time"])
        result = standardize_columns(df)
        assert list(result.columns) == ["wavelength", "days", "died", "gene", "zt"]

    def test_unknown_headers_snake_cased(self):
        """Unknown headers are lower snake case."""
        df = pd.DataFrame(columns=["Body Mass (g)"])
        assert list(standardize_columns(df).columns) == ["body_mass_g"]

    def test_custom_aliases(self):
        """Custom alias mapping replaces the default."""
        df = pd.DataFrame(columns=["Light"])
        result = standardize_columns(df, aliases={"light": "lamp"})
        assert list(result.columns) == ["lamp"]


class TestValidateColumns:
    """Tests for validate_columns function."""

    def test_passes(self):
        """No error when all columns present."""
        validate_columns(pd.DataFrame(columns=["a", "b"]), ["a"])

    def test_missing_raises(self):
        """Missing columns are named in the error."""
        with pytest.raises(ValueError, match="survival data is missing required columns"):
            validate_columns(pd.DataFrame(columns=["a"]), ["a", "died"], "survival")


class TestFixDecimalSeparator:
    """Tests for fix_decimal_separator function."""

    def test_comma_to_dot(self):
        """Convert comma decimals to dot."""
        df = pd.DataFrame({"value": ["1,5", "2,25", "3,0"]})
        result = fix_decimal_separator(df, ["value"])
        assert result["value"].tolist() == [1.5, 2.25, 3.0]

    def test_numeric_untouched(self):
        """Numeric columns are left as they are."""
        df = pd.DataFrame({"value": [1.5, 2.0]})
        result = fix_decimal_separator(df, ["value"])
        assert result["value"].tolist() == [1.5, 2.0]

    def test_missing_column_ignored(self):
        """Columns not in the DataFrame are skipped."""
        df = pd.DataFrame({"value": ["1,5"]})
        result = fix_decimal_separator(df, ["other"])
        assert result["value"].tolist() == ["1,5"]


class TestCoerceNumeric:
    """Tests for coerce_numeric function."""

    def test_bad_values_become_nan(self):
        """Unparseable cells become NaN."""
        df = pd.DataFrame({"cort": ["4,2", "n.d.", "7"]})
        result = coerce_numeric(df, ["cort"])
        assert result["cort"].iloc[0] == pytest.approx(4.2)
        assert np.isnan(result["cort"].iloc[1])
        assert result["cort"].iloc[2] == 7.0


class TestNormalizeEventColumn:
    """Tests for normalize_event_column function."""

    def test_strings(self):
        """yes/no style markers map to 1/0."""
        series = pd.Series(["yes", "No", "DEAD", "alive", "censored"])
        assert normalize_event_column(series).tolist() == [1.0, 0.0, 1.0, 0.0, 0.0]

    def test_numbers_and_booleans(self):
        """Numeric and boolean markers are accepted."""
        series = pd.Series([1, 0, True, False, "1.0"], dtype=object)
        assert normalize_event_column(series).tolist() == [1.0, 0.0, 1.0, 0.0, 1.0]

    def test_unknown_is_nan(self):
        """Unrecognised markers and missing values become NaN."""
        result = normalize_event_column(pd.Series(["maybe", 2, None], dtype=object))
        assert result.isna().all()


class TestWrapZeitgeberTime:
    """Tests for wrap_zeitgeber_time function."""

    def test_no_wrap(self):
        """None returns timepoints unchanged."""
        result = wrap_zeitgeber_time([0, 12, 20])
        np.testing.assert_array_equal(result, [0.0, 12.0, 20.0])

    def test_wrap_array(self):
        """Timepoints below the threshold gain 24 h."""
        result = wrap_zeitgeber_time([0, 6, 12, 18], wrap_before=12)
        np.testing.assert_array_equal(result, [24.0, 30.0, 12.0, 18.0])

    def test_wrap_series_keeps_index(self):
        """A Series comes back as a Series with the same index."""
        series = pd.Series([2, 14], index=[10, 11])
        result = wrap_zeitgeber_time(series, wrap_before=12)
        assert isinstance(result, pd.Series)
        assert result.to_dict() == {10: 26.0, 11: 14.0}

    def test_custom_period(self):
        result = wrap_zeitgeber_time([1, 5], wrap_before=4, period=12)
        np.testing.assert_array_equal(result, [13.0, 5.0])


class TestOrderConditions:
    """Tests for order_conditions function."""

    def test_fixed_order(self):
        """Known labels follow the reporting order."""
        assert order_conditions(["Red", "Blue", "White", "Red"]) == ["White", "Blue", "Red"]

    def test_unknown_labels_appended_sorted(self):
        """Unknown labels come after known ones, sorted."""
        assert order_conditions(["UV", "Green", "Amber", np.nan]) == ["Green", "Amber", "UV"]

    def test_custom_order(self):
        assert order_conditions(["a", "b", "c"], order=["c", "a"]) == ["c", "a", "b"]


class TestToObservations:
    """Tests for to_observations function."""

    def test_gene_table(self, gene_expression_df):
        """Gene rows become signal/condition/zt/value rows."""
        obs = to_observations(gene_expression_df, "expression")
        assert list(obs.columns) == ["signal", "condition", "zt", "value"]
        assert len(obs) == len(gene_expression_df)
        assert set(obs["signal"]) == {"per1", "bmal1"}

    def test_constant_signal(self, corticosterone_df):
        """Single-signal data gets a constant identifier."""
        obs = to_observations(corticosterone_df, "cort", signal="corticosterone")
        assert (obs["signal"] == "corticosterone").all()

    def test_drops_rows_without_condition_or_time(self):
        """Rows missing condition or timepoint are dropped; missing values kept."""
        df = pd.DataFrame(
            {
                "gene": ["per1"] * 4,
                "wavelength": ["Blue", None, "Blue", "Blue"],
                "zt": [0, 4, None, 8],
                "expression": [1.0, 2.0, 3.0, None],
            }
        )
        obs = to_observations(df, "expression")
        assert obs["zt"].tolist() == [0.0, 8.0]
        assert np.isnan(obs["value"].iloc[1])

    def test_missing_signal_column(self):
        """No signal column and no constant raises."""
        df = pd.DataFrame({"wavelength": ["Blue"], "zt": [0], "cort": [1.0]})
        with pytest.raises(ValueError, match="Signal column"):
            to_observations(df, "cort")
