"""Column-level summary statistics for the application table.

Every helper here reads the frame it is given and returns a new table; the
input is never modified. Missing values follow pandas defaults (``NaN`` and
``None`` both count as missing, and are skipped by ``mean``/``std``).
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd


def missing_summary(df: pd.DataFrame, id_cols: Sequence[str] = ()) -> pd.DataFrame:
    """Per-column missing count, completion rate, dtype and numeric moments.

    Identifier columns in ``id_cols`` get counts but no mean/std. Rows are
    ordered by ``missing_fraction`` (descending); ties keep the original
    column order.
    """

    n_rows = len(df)
    missing = df.isna().sum()
    fraction = missing / n_rows if n_rows else missing.astype(float)
    numeric = df.select_dtypes(include="number").drop(columns=list(id_cols), errors="ignore")

    out = pd.DataFrame(
        {
            "missing_count": missing.astype(int),
            "missing_fraction": fraction,
            "completion_rate": 1.0 - fraction,
            "dtype": df.dtypes.astype(str),
            "mean": numeric.mean().reindex(df.columns),
            "std": numeric.std(ddof=1).reindex(df.columns),
        },
        index=df.columns.rename("column"),
    )
    return out.sort_values("missing_fraction", ascending=False, kind="mergesort")


def summary_table(df: pd.DataFrame, n_rows: int = 20, id_cols: Sequence[str] = ()) -> pd.DataFrame:
    if n_rows <= 0:
        raise ValueError("n_rows must be positive.")
    return missing_summary(df, id_cols).head(n_rows)


def missing_fractions(df: pd.DataFrame) -> pd.Series:
    """Missing fraction of each column that has at least one missing entry."""

    if len(df) == 0:
        return pd.Series(dtype=float, name="missing_fraction")
    frac = df.isna().mean()
    frac = frac[frac > 0].sort_values(ascending=False, kind="mergesort")
    return frac.rename("missing_fraction")


def target_distribution(df: pd.DataFrame, target: str = "TARGET") -> pd.DataFrame:
    if target not in df.columns:
        raise KeyError(f"Target column '{target}' not found in dataframe")
    counts = df[target].value_counts(dropna=True).sort_index()
    out = counts.rename("count").to_frame()
    out["proportion"] = out["count"] / out["count"].sum()
    out.index.name = target
    return out


def imbalance_ratio(dist: pd.DataFrame) -> float:
    """Majority class count divided by minority class count."""
    counts = dist["count"]
    if len(counts) < 2 or counts.min() == 0:
        return float("inf")
    return float(counts.max() / counts.min())


def dtype_overview(df: pd.DataFrame) -> pd.Series:
    return df.dtypes.astype(str).value_counts().sort_index().rename("n_columns")


def categorical_cardinality(df: pd.DataFrame) -> pd.Series:
    cats = df.select_dtypes(exclude=["number", "bool", "datetime", "timedelta"])
    return cats.nunique(dropna=True).sort_values(ascending=False, kind="mergesort").rename("n_unique")
