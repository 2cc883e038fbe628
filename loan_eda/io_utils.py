from __future__ import annotations
from dataclasses import asdict
from pathlib import Path
from typing import Any
import json, hashlib, numpy as np, pandas as pd

ART_ROOT = Path("reports")

def run_id_from_cfg(cfg, tag: str | None = None) -> str:
    """Stable run identifier derived from the configuration (and an optional tag)."""
    blob = json.dumps(asdict(cfg), sort_keys=True)
    h = hashlib.md5(blob.encode()).hexdigest()[:8]
    return f"{h}{('-' + tag) if tag else ''}"

def artdir(run_id: str, root: str | Path | None = None) -> Path:
    p = Path(root or ART_ROOT) / run_id
    p.mkdir(parents=True, exist_ok=True)
    return p

def _sanitize(value: Any):
    """Turn pandas/numpy containers and scalars into plain JSON types (NaN and +/-inf -> null)."""
    if isinstance(value, pd.DataFrame):
        return _sanitize(value.to_dict(orient="index"))
    if isinstance(value, pd.Series):
        return _sanitize(value.to_dict())
    if isinstance(value, np.ndarray):
        return _sanitize(value.tolist())
    if isinstance(value, dict):
        return {str(k): _sanitize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_sanitize(v) for v in value)
    if isinstance(value, Path):
        return str(value)
    if hasattr(value, "item"):
        value = value.item()  # np.float64, np.int64, np.bool_
    if isinstance(value, float) and not np.isfinite(value):
        return None
    return value

def save_json(path: Path, obj):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(_sanitize(obj), indent=2, sort_keys=True))

def load_json(path: Path): return json.loads(path.read_text())

def save_parquet(path: Path, df: pd.DataFrame):
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=False)

def load_parquet(path: Path) -> pd.DataFrame:
    return pd.read_parquet(path)
