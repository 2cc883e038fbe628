"""Run every EDA stage once and render the results to a single HTML page.

``build_report`` is the only entry point the CLI needs: it computes the
summary tables, quality checks and bivariate statistics, saves the figures
and writes ``report.html`` plus a ``summary.json`` with every number shown.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import numpy as np
import pandas as pd

from .bivariate import (
    chi_square_test,
    default_rate_by_category,
    numeric_by_target,
    point_biserial,
    with_age,
)
from .config import Config
from .io_utils import save_json
from .plotting import (
    box_by_target,
    category_rate_bar,
    density_by_target,
    missingness_bar,
    target_bar,
    uses_log_scale,
)
from .quality import QualityReport, quality_report
from .summary import (
    categorical_cardinality,
    dtype_overview,
    imbalance_ratio,
    missing_fractions,
    summary_table,
    target_distribution,
)

PathLike = Union[str, Path]

_CSS = (
    "body{font-family:Arial, sans-serif;max-width:1100px;margin:24px auto;padding:0 12px;color:#1f2933;}"
    ".card{margin:16px 0;padding:12px 16px;border:1px solid #e5e7eb;border-radius:10px;}"
    "img{max-width:100%;height:auto;border:1px solid #e5e7eb;border-radius:8px;}"
    "table{border-collapse:collapse;font-size:13px;margin:8px 0;}"
    "th,td{border:1px solid #e5e7eb;padding:4px 8px;text-align:right;}"
    "th{background:#f3f4f6;}"
    ".note{color:#6b7280;font-size:12px;}"
)


@dataclass
class ReportResult:
    out_dir: Path
    html_path: Path
    json_path: Path
    figures: dict[str, Path] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    tables: dict[str, pd.DataFrame] = field(default_factory=dict)
    quality: QualityReport | None = None
    stats: dict[str, Any] = field(default_factory=dict)


def _table_html(df: pd.DataFrame, float_format: str = "{:,.4f}") -> str:
    return df.to_html(float_format=float_format.format, na_rep="–", border=0)


def _commentary(result: ReportResult, cfg: Config, n_rows: int) -> dict[str, str]:
    notes: dict[str, str] = {}
    missing = result.tables["missing_fractions"]
    if len(missing):
        over_half = int((missing > 0.5).sum())
        notes["missing"] = (
            f"{len(missing)} columns contain missing values; {over_half} of them are more "
            f"than half empty. The most incomplete column is {missing.index[0]} "
            f"({missing.iloc[0]:.1%} missing)."
        )
    else:
        notes["missing"] = "No column contains missing values."

    dist = result.tables["target"]
    ratio = result.stats["imbalance_ratio"]
    if 1 in dist.index and np.isfinite(ratio):
        notes["target"] = (
            f"{dist.loc[1, 'proportion']:.1%} of {n_rows:,} applications ended in default "
            f"(imbalance ratio {ratio:.1f}:1). Accuracy alone is a "
            "poor yardstick for this label; AUC is used downstream."
        )
    elif len(dist) == 1:
        notes["target"] = f"Every labelled application has {cfg.target_col} = {dist.index[0]}."

    corr = result.stats.get("point_biserial")
    if corr:
        direction = "lower" if corr["r"] < 0 else "higher"
        notes["score"] = (
            f"{cfg.score_col} correlates with {cfg.target_col} at r = {corr['r']:.3f} "
            f"(n = {corr['n']:,}): defaulters tend to have {direction} scores."
        )

    chi = result.stats.get("chi_square")
    if chi:
        notes["category"] = (
            f"{cfg.category_col} vs {cfg.target_col}: chi2 = {chi['chi2']:.1f}, "
            f"p = {chi['p_value']:.3g}, Cramér's V = {chi['cramers_v']:.3f} ({chi['association']})."
        )

    q = result.quality
    if q is not None:
        text = (
            f"{q.income_outliers:,} rows exceed the {q.quantile:.0%} income threshold "
            f"({q.income_threshold:,.0f}) and {q.credit_outliers:,} exceed the credit threshold "
            f"({q.credit_threshold:,.0f}). {q.employment_anomalies:,} rows have a positive "
            f"{cfg.employed_col}, which cannot describe a past employment start."
        )
        if q.anomaly_values:
            text += f" Distinct anomalous values: {', '.join(str(v) for v in q.anomaly_values[:5])}."
        if q.anomaly_default_rate is not None and q.normal_default_rate is not None:
            text += (
                f" Default rate is {q.anomaly_default_rate:.1%} among anomalous rows versus "
                f"{q.normal_default_rate:.1%} elsewhere."
            )
        notes["quality"] = text
    return notes


def _figure_block(result: ReportResult, key: str, caption: str) -> list[str]:
    if key in result.figures:
        name = result.figures[key].name
        return [f"<img src='{html.escape(name)}' alt='{html.escape(caption)}'>",
                f"<p class='note'>{html.escape(caption)}</p>"]
    reason = result.skipped.get(key, "not generated")
    return [f"<p class='note'>Figure skipped: {html.escape(reason)}</p>"]


def render_html(result: ReportResult, cfg: Config, n_rows: int, n_cols: int, title: str) -> Path:
    notes = _commentary(result, cfg, n_rows)
    t = result.tables

    box_caption = "Amounts by target" + (" (log scale)" if result.stats.get("box_log_scale") else "")

    def para(key):
        return f"<p>{html.escape(notes[key])}</p>" if key in notes else ""

    parts = [
        "<!doctype html><meta charset='utf-8'>",
        f"<title>{html.escape(title)}</title>",
        f"<style>{_CSS}</style>",
        f"<h1>{html.escape(title)}</h1>",
        f"<p>{n_rows:,} rows × {n_cols} columns.</p>",
        "<div class='card'><h2>Column types</h2>",
        _table_html(t["dtypes"].to_frame()),
        "</div>",
        "<div class='card'><h2>Summary statistics</h2>",
        f"<p class='note'>First {len(t['summary'])} columns by missing fraction.</p>",
        _table_html(t["summary"]),
        "</div>",
        "<div class='card'><h2>Missing values</h2>",
        para("missing"),
        *_figure_block(result, "missingness", "Share of missing entries per column"),
        "</div>",
        "<div class='card'><h2>Target distribution</h2>",
        _table_html(t["target"]),
        para("target"),
        *_figure_block(result, "target", f"{cfg.target_col} class counts"),
        "</div>",
        "<div class='card'><h2>Bivariate relationships</h2>",
        _table_html(t["numeric_by_target"], "{:,.2f}"),
        *_figure_block(result, "box", box_caption),
        para("score"),
        *_figure_block(result, "density", "Score and age densities by target"),
        para("category"),
        _table_html(t["category_rates"]) if "category_rates" in t else "",
        *_figure_block(result, "category", f"Default rate by {cfg.category_col}"),
        "</div>",
        "<div class='card'><h2>Data quality</h2>",
        _table_html(t["quality"], "{:,.2f}") if "quality" in t else "",
        para("quality"),
        "<p class='note'>Values are reported, not corrected.</p>",
        "</div>",
    ]
    if "categorical_cardinality" in t and len(t["categorical_cardinality"]):
        parts += [
            "<div class='card'><h2>Categorical cardinality</h2>",
            _table_html(t["categorical_cardinality"].to_frame()),
            "</div>",
        ]

    out_file = result.out_dir / "report.html"
    out_file.write_text("\n".join(p for p in parts if p), encoding="utf-8")
    return out_file


def _try_figure(result: ReportResult, key: str, fn, *args, **kwargs) -> None:
    try:
        result.figures[key] = fn(*args, **kwargs)
    except ValueError as exc:
        result.skipped[key] = str(exc)
        print(f"[report] {key} figure skipped: {exc}")


def build_report(
    df: pd.DataFrame,
    cfg: Config | None = None,
    out_dir: PathLike = "reports",
    title: str = "Loan application EDA",
) -> ReportResult:
    cfg = cfg or Config()
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    result = ReportResult(out_dir=out, html_path=out / "report.html", json_path=out / "summary.json")
    target = cfg.target_col

    print("[summary] computing column statistics…")
    result.tables["dtypes"] = dtype_overview(df)
    result.tables["summary"] = summary_table(df, cfg.summary_rows, id_cols=[cfg.id_col])
    result.tables["missing_fractions"] = missing_fractions(df)
    result.tables["categorical_cardinality"] = categorical_cardinality(df)
    result.tables["target"] = target_distribution(df, target)
    result.stats["imbalance_ratio"] = imbalance_ratio(result.tables["target"])

    print("[quality] running outlier and sign checks…")
    result.quality = quality_report(df, cfg)
    result.tables["quality"] = result.quality.to_frame()

    print("[bivariate] relating key columns to the target…")
    enriched = with_age(df, cfg.birth_col)
    result.tables["numeric_by_target"] = numeric_by_target(
        enriched, list(cfg.box_features) + [cfg.score_col, "AGE_YEARS"], target
    )
    try:
        result.stats["point_biserial"] = point_biserial(df, cfg.score_col, target)
    except ValueError as exc:
        print(f"[bivariate] correlation skipped: {exc}")
    try:
        result.stats["chi_square"] = chi_square_test(df, cfg.category_col, target)
    except ValueError as exc:
        print(f"[bivariate] chi-square skipped: {exc}")
    result.tables["category_rates"] = default_rate_by_category(
        df, cfg.category_col, target, min_count=cfg.category_min_count
    )

    print("[plots] rendering figures…")
    _try_figure(result, "missingness", missingness_bar,
                result.tables["missing_fractions"], out / "missingness.png",
                top_n=cfg.missing_top_n, dpi=cfg.dpi)
    _try_figure(result, "target", target_bar, result.tables["target"], out / "target.png", dpi=cfg.dpi)
    result.stats["box_log_scale"] = uses_log_scale(df.dropna(subset=[target]), list(cfg.box_features))
    _try_figure(result, "box", box_by_target, df, list(cfg.box_features), out / "box_by_target.png",
                target=target, dpi=cfg.dpi)
    _try_figure(result, "density", density_by_target, enriched, list(cfg.density_features),
                out / "density_by_target.png", target=target, dpi=cfg.dpi)
    overall = float(df[target].mean()) if df[target].notna().any() else None
    _try_figure(result, "category", category_rate_bar, result.tables["category_rates"],
                out / "category_rates.png", column=cfg.category_col, overall_rate=overall, dpi=cfg.dpi)

    render_html(result, cfg, n_rows=len(df), n_cols=df.shape[1], title=title)
    save_json(result.json_path, {
        "shape": list(df.shape),
        "summary": result.tables["summary"],
        "missing_fractions": result.tables["missing_fractions"],
        "target": result.tables["target"],
        "imbalance_ratio": result.stats["imbalance_ratio"],
        "numeric_by_target": {
            stat: result.tables["numeric_by_target"][stat] for stat in ("mean", "median")
        },
        "point_biserial": result.stats.get("point_biserial"),
        "chi_square": result.stats.get("chi_square"),
        "category_rates": result.tables["category_rates"],
        "quality": result.quality.to_dict(),
        "figures": {k: p.name for k, p in result.figures.items()},
        "skipped": result.skipped,
    })

    saved = [result.html_path, result.json_path] + list(result.figures.values())
    print("[report] saved: " + ", ".join(str(p) for p in saved))
    return result
