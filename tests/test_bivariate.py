import numpy as np
import pandas as pd
import pytest

from loan_eda.bivariate import (
    age_years,
    chi_square_test,
    default_rate_by_category,
    numeric_by_target,
    point_biserial,
    with_age,
)


def test_age_years_from_days_birth():
    df = pd.DataFrame({"DAYS_BIRTH": [-365 * 30, -365 * 45]})
    assert age_years(df).tolist() == [30.0, 45.0]
    assert "AGE_YEARS" not in df.columns
    assert "AGE_YEARS" in with_age(df).columns


def test_numeric_by_target_groups():
    df = pd.DataFrame({"TARGET": [0, 0, 1, 1], "AMT_CREDIT": [10.0, 30.0, 100.0, 200.0]})
    out = numeric_by_target(df, ["AMT_CREDIT"])
    assert out.loc[0, ("mean", "AMT_CREDIT")] == 20.0
    assert out.loc[1, ("median", "AMT_CREDIT")] == 150.0


def test_point_biserial_sign(applications):
    # defaulters were given lower scores in the fixture
    res = point_biserial(applications, "EXT_SOURCE_2")
    assert res["r"] < 0
    assert res["n"] == applications["EXT_SOURCE_2"].notna().sum()


def test_point_biserial_needs_both_classes():
    df = pd.DataFrame({"TARGET": [0, 0, 0], "EXT_SOURCE_2": [0.1, 0.2, 0.3]})
    with pytest.raises(ValueError):
        point_biserial(df, "EXT_SOURCE_2")


def test_chi_square_detects_association():
    df = pd.DataFrame(
        {
            "OCCUPATION_TYPE": ["A"] * 100 + ["B"] * 100,
            "TARGET": [1] * 60 + [0] * 40 + [0] * 95 + [1] * 5,
        }
    )
    res = chi_square_test(df, "OCCUPATION_TYPE")
    assert res["significant"]
    assert res["dof"] == 1
    assert res["association"] in {"moderate", "strong"}
    assert 0.0 <= res["cramers_v"] <= 1.0


def test_chi_square_degenerate_table():
    df = pd.DataFrame({"OCCUPATION_TYPE": ["A", "A"], "TARGET": [0, 1]})
    with pytest.raises(ValueError, match="degenerate"):
        chi_square_test(df, "OCCUPATION_TYPE")


def test_default_rate_by_category():
    df = pd.DataFrame(
        {
            "OCCUPATION_TYPE": ["A", "A", "B", "B", "B", None, "C"],
            "TARGET": [1, 0, 0, 0, 1, 1, 0],
        }
    )
    rates = default_rate_by_category(df, "OCCUPATION_TYPE")
    assert list(rates.index) == ["Missing", "A", "B", "C"]
    assert rates.loc["A", "default_rate"] == pytest.approx(0.5)
    assert rates.loc["B", "count"] == 3

    filtered = default_rate_by_category(df, "OCCUPATION_TYPE", min_count=2)
    assert set(filtered.index) == {"A", "B"}
    assert df["OCCUPATION_TYPE"].isna().sum() == 1


def test_missing_column_raises():
    with pytest.raises(KeyError):
        numeric_by_target(pd.DataFrame({"TARGET": [0]}), ["AMT_CREDIT"])
