import argparse
from dataclasses import replace
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pandas as pd

from loan_eda.config import Config
from loan_eda.data import cache_path_for, load_data
from loan_eda.io_utils import artdir, run_id_from_cfg, save_json, save_parquet
from loan_eda.quality import quality_report
from loan_eda.report import build_report
from loan_eda.summary import imbalance_ratio, summary_table, target_distribution


def _config_from_args(args) -> Config:
    cfg = Config()
    overrides = {}
    if getattr(args, "data", None):
        overrides["data_path"] = args.data
    if getattr(args, "rows", None) is not None:
        if args.rows <= 0:
            raise ValueError("--rows must be positive.")
        overrides["summary_rows"] = args.rows
    if getattr(args, "quantile", None) is not None:
        if not 0.0 < args.quantile < 1.0:
            raise ValueError("--quantile must be between 0 and 1.")
        overrides["outlier_quantile"] = args.quantile
    if getattr(args, "out_dir", None):
        overrides["out_dir"] = args.out_dir
    return replace(cfg, **overrides)


def _run_dir(cfg: Config, tag: str | None) -> Path:
    return artdir(run_id_from_cfg(cfg, tag=tag), root=cfg.out_dir)


def _cache_path(cfg: Config) -> Path | None:
    return cache_path_for(cfg.data_path, Path(cfg.out_dir) / cfg.cache_dir)


def _load_frame(cfg: Config) -> pd.DataFrame:
    cache = _cache_path(cfg)
    if cache is not None and cache.exists():
        print(f"[load] reading cached table {cache}")
    else:
        print(f"[load] reading {cfg.data_path}…")
    return load_data(cfg.data_path, cache_path=cache, required=cfg.required_columns())


def cmd_prepare(args):
    cfg = _config_from_args(args)

    print(f"[prepare] loading {cfg.data_path}…")
    df = load_data(cfg.data_path, required=cfg.required_columns())
    print(f"[prepare] {df.shape[0]:,} rows × {df.shape[1]} columns")
    cache = _cache_path(cfg)
    save_parquet(cache, df)
    print(f"[prepare] saved: {cache}")


def cmd_summary(args):
    cfg = _config_from_args(args)
    df = _load_frame(cfg)

    print(f"[summary] shape: {df.shape}")
    with pd.option_context("display.max_columns", 10, "display.width", 140):
        print(summary_table(df, cfg.summary_rows, id_cols=[cfg.id_col]))
        dist = target_distribution(df, cfg.target_col)
        print(f"\n[summary] {cfg.target_col} distribution:")
        print(dist)
    print(f"[summary] imbalance ratio: {imbalance_ratio(dist):.2f}:1")


def cmd_quality(args):
    cfg = _config_from_args(args)
    A = _run_dir(cfg, args.tag)
    df = _load_frame(cfg)

    print(f"[quality] checking outliers above the {cfg.outlier_quantile:.0%} percentile…")
    report = quality_report(df, cfg)
    print(report.to_frame())
    if report.anomaly_values:
        print(f"[quality] anomalous {cfg.employed_col} values: {report.anomaly_values}")
    save_json(A / "quality.json", report.to_dict())
    print(f"[quality] saved: {A / 'quality.json'}")


def cmd_report(args):
    cfg = _config_from_args(args)
    A = _run_dir(cfg, args.tag)
    df = _load_frame(cfg)

    print(f"[report] building EDA report under {A}…")
    result = build_report(df, cfg, out_dir=A, title=args.title)
    if result.skipped:
        print("[report] skipped figures: " + ", ".join(sorted(result.skipped)))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Exploratory analysis of loan applications")
    sub = p.add_subparsers(dest="cmd", required=True)

    def common(sp):
        sp.add_argument("--data", default=None, help="Path to application_train.csv")
        sp.add_argument("--tag", default=None, help="Optional run tag")
        sp.add_argument("--out-dir", default=None, help="Root folder for run outputs")

    sp = sub.add_parser("prepare", help="Load + validate the CSV and cache it as parquet")
    common(sp)
    sp.set_defaults(fn=cmd_prepare)

    sp = sub.add_parser("summary", help="Print column statistics and the target distribution")
    common(sp)
    sp.add_argument("--rows", type=int, default=None, help="Rows of the summary table to show")
    sp.set_defaults(fn=cmd_summary)

    sp = sub.add_parser("quality", help="Count percentile outliers and illogical values")
    common(sp)
    sp.add_argument("--quantile", type=float, default=None, help="Outlier percentile (default 0.99)")
    sp.set_defaults(fn=cmd_quality)

    sp = sub.add_parser("report", help="Run every stage and write report.html")
    common(sp)
    sp.add_argument("--rows", type=int, default=None, help="Rows of the summary table to show")
    sp.add_argument("--quantile", type=float, default=None, help="Outlier percentile (default 0.99)")
    sp.add_argument("--title", default="Loan application EDA")
    sp.set_defaults(fn=cmd_report)

    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    args.fn(args)


if __name__ == "__main__":
    main()
