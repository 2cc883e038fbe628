import numpy as np
import pandas as pd
import pytest

from loan_eda.summary import (
    categorical_cardinality,
    dtype_overview,
    imbalance_ratio,
    missing_fractions,
    missing_summary,
    summary_table,
    target_distribution,
)


@pytest.fixture
def holes() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "full": [1.0, 2.0, 3.0, 4.0, 5.0],
            "one_gap": [1.0, np.nan, 3.0, 4.0, 5.0],
            "three_gaps": [np.nan, np.nan, 3.0, np.nan, 5.0],
            "text": ["a", None, "b", "b", "a"],
        }
    )


def test_missing_fraction_is_count_over_rows(holes):
    summary = missing_summary(holes)
    for col in holes.columns:
        expected = holes[col].isna().sum() / len(holes)
        assert summary.loc[col, "missing_fraction"] == pytest.approx(expected)
        assert summary.loc[col, "completion_rate"] == pytest.approx(1 - expected)
        assert summary.loc[col, "missing_count"] == holes[col].isna().sum()


def test_missing_summary_moments_numeric_only(holes):
    summary = missing_summary(holes)
    assert summary.loc["one_gap", "mean"] == pytest.approx(13 / 4)
    assert summary.loc["full", "std"] == pytest.approx(holes["full"].std())
    assert np.isnan(summary.loc["text", "mean"])
    assert np.isnan(summary.loc["text", "std"])


def test_missing_summary_sorted_descending_and_stable(holes):
    summary = missing_summary(holes)
    assert list(summary.index) == ["three_gaps", "one_gap", "text", "full"]


def test_summary_table_truncates(holes):
    assert len(summary_table(holes, 2)) == 2
    assert len(summary_table(holes, 50)) == 4
    with pytest.raises(ValueError):
        summary_table(holes, 0)


def test_missing_fractions_excludes_complete_columns(holes):
    frac = missing_fractions(holes)
    assert "full" not in frac.index
    assert list(frac.index) == ["three_gaps", "one_gap", "text"]
    assert frac["three_gaps"] == pytest.approx(0.6)
    assert frac["one_gap"] == pytest.approx(0.2)


def test_missing_fractions_empty_when_complete():
    df = pd.DataFrame({"a": [1, 2], "b": ["x", "y"]})
    assert missing_fractions(df).empty


def test_target_distribution_proportions():
    df = pd.DataFrame({"TARGET": [0] * 92 + [1] * 8})
    dist = target_distribution(df)
    assert dist.loc[0, "count"] == 92
    assert dist.loc[1, "count"] == 8
    assert dist.loc[0, "proportion"] == pytest.approx(0.92)
    assert dist.loc[1, "proportion"] == pytest.approx(0.08)
    assert dist["proportion"].sum() == pytest.approx(1.0)
    assert imbalance_ratio(dist) == pytest.approx(11.5)


def test_target_distribution_ignores_missing_labels():
    df = pd.DataFrame({"TARGET": [0, 0, 1, np.nan]})
    dist = target_distribution(df)
    assert dist["count"].sum() == 3
    assert dist["proportion"].sum() == pytest.approx(1.0)


def test_target_distribution_requires_column():
    with pytest.raises(KeyError, match="TARGET"):
        target_distribution(pd.DataFrame({"x": [1]}))


def test_imbalance_ratio_single_class():
    dist = target_distribution(pd.DataFrame({"TARGET": [0, 0]}))
    assert imbalance_ratio(dist) == float("inf")


def test_overview_helpers(applications):
    overview = dtype_overview(applications)
    assert overview.sum() == applications.shape[1]
    card = categorical_cardinality(applications)
    assert card["OCCUPATION_TYPE"] == 4
    assert card["NAME_CONTRACT_TYPE"] == 2


def test_summary_does_not_mutate(applications):
    before = applications.copy()
    missing_summary(applications)
    missing_fractions(applications)
    target_distribution(applications)
    pd.testing.assert_frame_equal(applications, before)


def test_missing_summary_keeps_caller_column_index(applications):
    summary = missing_summary(applications)
    assert summary.index.name == "column"
    assert applications.columns.name is None


def test_id_columns_left_out_of_moments(applications):
    summary = missing_summary(applications, id_cols=["SK_ID_CURR"])
    assert np.isnan(summary.loc["SK_ID_CURR", "mean"])
    assert summary.loc["SK_ID_CURR", "missing_count"] == 0
    assert summary.loc["AMT_CREDIT", "mean"] == pytest.approx(applications["AMT_CREDIT"].mean())
    table = summary_table(applications, 50, id_cols=["SK_ID_CURR"])
    assert np.isnan(table.loc["SK_ID_CURR", "std"])
