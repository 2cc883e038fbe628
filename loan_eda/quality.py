"""Data-quality checks: percentile outliers and illogical sign values.

Checks only count and return offending rows; nothing is corrected or imputed.

Percentile thresholds use ``Series.quantile`` with linear interpolation by
default: for ``n`` non-missing values sorted ascending, the threshold sits at
fractional rank ``(n - 1) * q`` between the two neighbouring values. A row is
an outlier only when its value is strictly greater than the threshold.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

import pandas as pd

from .config import Config

INTERPOLATIONS = ("linear", "lower", "higher", "midpoint", "nearest")


def _column(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        raise KeyError(f"Column '{column}' not found in dataframe")
    return df[column]


def percentile_threshold(series: pd.Series, q: float = 0.99, interpolation: str = "linear") -> float:
    if not 0.0 <= q <= 1.0:
        raise ValueError("q must be within [0, 1].")
    if interpolation not in INTERPOLATIONS:
        raise ValueError(f"interpolation must be one of {INTERPOLATIONS}")
    values = pd.to_numeric(series, errors="coerce").dropna()
    if values.empty:
        raise ValueError(f"No numeric values in '{series.name}' to compute a percentile.")
    return float(values.quantile(q, interpolation=interpolation))


def outliers_above(
    df: pd.DataFrame,
    column: str,
    q: float = 0.99,
    interpolation: str = "linear",
) -> tuple[pd.DataFrame, float]:
    """Rows whose ``column`` strictly exceeds its ``q``-th percentile, plus the threshold."""

    values = pd.to_numeric(_column(df, column), errors="coerce")
    threshold = percentile_threshold(values, q, interpolation=interpolation)
    return df.loc[values > threshold], threshold


def employment_anomalies(df: pd.DataFrame, column: str = "DAYS_EMPLOYED") -> pd.DataFrame:
    """Rows whose employment duration is positive (a future start date)."""
    values = pd.to_numeric(_column(df, column), errors="coerce")
    return df.loc[values > 0]


@dataclass
class QualityReport:
    quantile: float
    interpolation: str
    income_threshold: float
    income_outliers: int
    credit_threshold: float
    credit_outliers: int
    employment_anomalies: int
    anomaly_values: list = field(default_factory=list)
    anomaly_default_rate: float | None = None
    normal_default_rate: float | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    def to_frame(self) -> pd.DataFrame:
        rows = [
            ("Income above percentile", self.income_threshold, self.income_outliers),
            ("Credit above percentile", self.credit_threshold, self.credit_outliers),
            ("Positive employment days", 0.0, self.employment_anomalies),
        ]
        return pd.DataFrame(rows, columns=["check", "threshold", "rows_flagged"]).set_index("check")


def _mean_or_none(series: pd.Series) -> float | None:
    series = series.dropna()
    return float(series.mean()) if len(series) else None


def quality_report(df: pd.DataFrame, cfg: Config | None = None) -> QualityReport:
    cfg = cfg or Config()
    q, interp = cfg.outlier_quantile, cfg.quantile_interpolation

    income_rows, income_thr = outliers_above(df, cfg.income_col, q, interp)
    credit_rows, credit_thr = outliers_above(df, cfg.credit_col, q, interp)
    anomalies = employment_anomalies(df, cfg.employed_col)

    anomaly_rate = normal_rate = None
    if cfg.target_col in df.columns:
        flagged = pd.to_numeric(df[cfg.employed_col], errors="coerce").gt(0).to_numpy()
        anomaly_rate = _mean_or_none(df.loc[flagged, cfg.target_col])
        normal_rate = _mean_or_none(df.loc[~flagged, cfg.target_col])

    return QualityReport(
        quantile=q,
        interpolation=interp,
        income_threshold=income_thr,
        income_outliers=int(len(income_rows)),
        credit_threshold=credit_thr,
        credit_outliers=int(len(credit_rows)),
        employment_anomalies=int(len(anomalies)),
        anomaly_values=sorted(anomalies[cfg.employed_col].unique().tolist()),
        anomaly_default_rate=anomaly_rate,
        normal_default_rate=normal_rate,
    )
