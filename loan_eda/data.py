import hashlib
import os
from pathlib import Path
from typing import Iterable

import pandas as pd


def load_local_csv(path='data/raw/application_train.csv'):
    if os.path.exists(path):
        df = pd.read_csv(path, low_memory=False)
        return df
    return None


def cache_path_for(path, cache_dir) -> Path | None:
    """Parquet cache location for ``path``, keyed on its absolute path, mtime and size.

    Rewriting the CSV yields a new key, so an old cache is never picked up.
    Returns ``None`` when the CSV does not exist.
    """
    if not os.path.exists(path):
        return None
    st = os.stat(path)
    blob = f"{os.path.abspath(path)}|{st.st_mtime_ns}|{st.st_size}"
    h = hashlib.md5(blob.encode()).hexdigest()[:12]
    return Path(cache_dir) / f"{Path(path).stem}-{h}.parquet"


def validate_columns(df: pd.DataFrame, required: Iterable[str]) -> pd.DataFrame:
    """Fail fast when the table is empty or lacks a column the stages rely on."""
    if df.empty:
        raise ValueError("Loaded table has no rows.")
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")
    return df


def load_data(path='data/raw/application_train.csv', cache_path=None, required=()):
    if cache_path is not None and os.path.exists(cache_path):
        df = pd.read_parquet(cache_path)
    else:
        df = load_local_csv(path)
    if df is None:
        raise FileNotFoundError(f"Application data not found at {path}")
    return validate_columns(df, required)
