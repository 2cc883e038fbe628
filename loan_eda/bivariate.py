"""Relationships between individual application columns and the default flag.

The helpers mirror what a reader checks right after the class balance: how
numeric columns shift between defaulters and non-defaulters, how strongly a
score correlates with the target, and how the default rate varies across the
levels of a categorical column (chi-square, Cramér's V).
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd
from scipy.stats import chi2_contingency, pointbiserialr

DAYS_PER_YEAR = 365


def _require(df: pd.DataFrame, *columns: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found in dataframe: {missing}")


def age_years(df: pd.DataFrame, column: str = "DAYS_BIRTH") -> pd.Series:
    """Applicant age in years; ``DAYS_BIRTH`` counts backwards from the application."""
    _require(df, column)
    return (-df[column] / DAYS_PER_YEAR).rename("AGE_YEARS")


def with_age(df: pd.DataFrame, column: str = "DAYS_BIRTH") -> pd.DataFrame:
    out = df.copy()
    out["AGE_YEARS"] = age_years(df, column)
    return out


def numeric_by_target(df: pd.DataFrame, columns: Sequence[str], target: str = "TARGET") -> pd.DataFrame:
    _require(df, target, *columns)
    grouped = df.groupby(target)[list(columns)]
    out = pd.concat({"mean": grouped.mean(), "median": grouped.median()}, axis=1)
    return out.sort_index()


def point_biserial(df: pd.DataFrame, column: str, target: str = "TARGET") -> dict[str, Any]:
    _require(df, column, target)
    pair = df[[column, target]].dropna()
    if len(pair) < 3 or pair[target].nunique() < 2:
        raise ValueError(f"Not enough paired observations to correlate '{column}' with '{target}'.")
    r, p_value = pointbiserialr(pair[target], pair[column])
    return {"r": float(r), "p_value": float(p_value), "n": int(len(pair))}


def chi_square_test(df: pd.DataFrame, column: str, target: str = "TARGET") -> dict[str, Any]:
    """Run chi-square test between a categorical column and the target."""

    _require(df, column, target)
    contingency = pd.crosstab(df[column], df[target])
    if contingency.shape[0] < 2 or contingency.shape[1] < 2:
        raise ValueError(f"Contingency table for '{column}' is degenerate: {contingency.shape}")
    chi2, p_value, dof, expected = chi2_contingency(contingency)
    n = contingency.to_numpy().sum()
    r, c = contingency.shape
    denom = min(r - 1, c - 1)
    cramers_v = float(np.sqrt(chi2 / (n * denom))) if denom > 0 else 0.0

    if cramers_v >= 0.5:
        association = "strong"
    elif cramers_v >= 0.3:
        association = "moderate"
    elif cramers_v >= 0.1:
        association = "weak"
    else:
        association = "negligible"

    return {
        "chi2": float(chi2),
        "p_value": float(p_value),
        "dof": int(dof),
        "significant": bool(p_value < 0.05),
        "cramers_v": cramers_v,
        "association": association,
    }


def default_rate_by_category(
    df: pd.DataFrame,
    column: str,
    target: str = "TARGET",
    min_count: int = 1,
) -> pd.DataFrame:
    """Row count and mean target per category, highest default rate first."""

    _require(df, column, target)
    frame = df[[column, target]].copy()
    frame[column] = frame[column].astype(object).where(frame[column].notna(), "Missing")
    grouped = frame.groupby(column)[target].agg(["count", "mean"])
    grouped = grouped.rename(columns={"mean": "default_rate"})
    grouped = grouped[grouped["count"] >= min_count]
    return grouped.sort_values(["default_rate", "count"], ascending=[False, False], kind="mergesort")
