"""Figures for the application EDA report.

Each helper renders one PNG from an already-computed table (or the raw frame
for distribution plots), saves it, closes the figure and returns the path.
Degenerate inputs raise ``ValueError`` so callers can skip the figure.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Union

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

sns.set_style("whitegrid")
sns.set_context("notebook")

PathLike = Union[str, Path]

TARGET_LABELS = {0: "Repaid (0)", 1: "Default (1)"}
TARGET_PALETTE = {0: "#4c9f70", 1: "#d1495b"}


def _ensure_output_path(out_path: PathLike) -> Path:
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _ensure_features(df: pd.DataFrame, features: Sequence[str]) -> list[str]:
    if not features:
        raise ValueError("`features` must contain at least one column name.")
    missing = [col for col in features if col not in df.columns]
    if missing:
        raise ValueError(f"Missing features in dataframe: {missing}")
    return list(features)


def _save(fig, out_file: Path, dpi: int) -> Path:
    fig.tight_layout()
    fig.savefig(out_file, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return out_file


def missingness_bar(
    fractions: pd.Series,
    out_path: PathLike,
    top_n: int | None = None,
    dpi: int = 200,
) -> Path:
    """Horizontal bars of missing fraction per column, most incomplete on top."""

    fractions = fractions[fractions > 0].sort_values(ascending=False, kind="mergesort")
    if fractions.empty:
        raise ValueError("No column has missing values.")
    if top_n:
        fractions = fractions.head(top_n)

    out_file = _ensure_output_path(out_path)
    height = max(3.0, 0.25 * len(fractions) + 1)
    fig, ax = plt.subplots(figsize=(9, height))
    ax.barh(fractions.index.astype(str), fractions.values * 100, color="#5b8def")
    ax.invert_yaxis()
    ax.set_xlabel("Missing (%)")
    ax.set_xlim(0, 100)
    ax.set_title(f"Missing values by column ({len(fractions)} shown)")
    for idx, value in enumerate(fractions.values * 100):
        ax.text(value + 0.5, idx, f"{value:.1f}%", va="center", fontsize=7)
    return _save(fig, out_file, dpi)


def target_bar(dist: pd.DataFrame, out_path: PathLike, dpi: int = 200) -> Path:
    """Class counts with percentage labels, from ``summary.target_distribution``."""

    if dist.empty:
        raise ValueError("Target distribution is empty.")

    out_file = _ensure_output_path(out_path)
    labels = [TARGET_LABELS.get(k, str(k)) for k in dist.index]
    colors = [TARGET_PALETTE.get(k, "#888888") for k in dist.index]

    fig, ax = plt.subplots(figsize=(6, 4.5))
    ax.bar(labels, dist["count"].values, color=colors)
    ax.set_ylabel("Applications")
    ax.set_title("Target distribution")
    top = dist["count"].max()
    for idx, (count, prop) in enumerate(zip(dist["count"].values, dist["proportion"].values)):
        ax.text(idx, count + top * 0.01, f"{count:,}\n{prop:.1%}", ha="center", va="bottom")
    ax.set_ylim(0, top * 1.15)
    return _save(fig, out_file, dpi)


def uses_log_scale(df: pd.DataFrame, features: Sequence[str], log_scale: bool = True) -> bool:
    """Whether ``box_by_target`` draws a log axis: every non-missing value must be positive."""
    return log_scale and all((df[f].dropna() > 0).all() for f in features)


def box_by_target(
    df: pd.DataFrame,
    features: Sequence[str],
    out_path: PathLike,
    target: str = "TARGET",
    log_scale: bool = True,
    dpi: int = 200,
) -> Path:
    """One box plot per feature, split by target class.

    The value axis is logarithmic for all panels or none, see ``uses_log_scale``.
    """

    features = _ensure_features(df, features)
    if target not in df.columns:
        raise ValueError(f"Missing target column: {target}")

    data = df[features + [target]].dropna(subset=[target])
    log_axis = uses_log_scale(data, features, log_scale)
    out_file = _ensure_output_path(out_path)
    fig, axes = plt.subplots(1, len(features), figsize=(5.5 * len(features), 4.5))
    if len(features) == 1:
        axes = [axes]

    for ax, feature in zip(axes, features):
        sns.boxplot(
            data=data,
            x=target,
            y=feature,
            hue=target,
            palette=TARGET_PALETTE,
            legend=False,
            showfliers=True,
            fliersize=1.5,
            ax=ax,
        )
        if log_axis:
            ax.set_yscale("log")
        ax.set_title(f"{feature} by {target}")
        ax.set_xlabel(target)
    return _save(fig, out_file, dpi)


def density_by_target(
    df: pd.DataFrame,
    features: Sequence[str],
    out_path: PathLike,
    target: str = "TARGET",
    dpi: int = 200,
) -> Path:
    """Per-class kernel density of each feature, each class normalised separately."""

    features = _ensure_features(df, features)
    if target not in df.columns:
        raise ValueError(f"Missing target column: {target}")

    flat = [f for f in features if df[f].nunique(dropna=True) < 2]
    if flat:
        raise ValueError(f"Features with fewer than two distinct values: {flat}")

    out_file = _ensure_output_path(out_path)
    fig, axes = plt.subplots(1, len(features), figsize=(6 * len(features), 4.5))
    if len(features) == 1:
        axes = [axes]

    for ax, feature in zip(axes, features):
        data = df[[feature, target]].dropna()
        sns.kdeplot(
            data=data,
            x=feature,
            hue=target,
            palette=TARGET_PALETTE,
            common_norm=False,
            fill=True,
            alpha=0.3,
            ax=ax,
        )
        ax.set_title(f"Density of {feature} by {target}")
    return _save(fig, out_file, dpi)


def category_rate_bar(
    rates: pd.DataFrame,
    out_path: PathLike,
    column: str,
    overall_rate: float | None = None,
    dpi: int = 200,
) -> Path:
    """Default rate per category from ``bivariate.default_rate_by_category``."""

    if rates.empty:
        raise ValueError(f"No categories of '{column}' to plot.")

    out_file = _ensure_output_path(out_path)
    height = max(3.0, 0.3 * len(rates) + 1)
    fig, ax = plt.subplots(figsize=(9, height))
    sns.barplot(
        x=rates["default_rate"].values * 100,
        y=rates.index.astype(str),
        color="#d1495b",
        orient="h",
        ax=ax,
    )
    if overall_rate is not None:
        ax.axvline(overall_rate * 100, color="black", linestyle="--", linewidth=1, label="Overall")
        ax.legend(loc="lower right")
    ax.set_xlabel("Default rate (%)")
    ax.set_ylabel(column)
    ax.set_title(f"Default rate by {column}")
    return _save(fig, out_file, dpi)
