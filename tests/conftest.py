import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from loan_eda.config import Config

OCCUPATIONS = ["Laborers", "Sales staff", "Core staff", "Drivers"]


@pytest.fixture
def applications() -> pd.DataFrame:
    """Small deterministic stand-in for application_train.csv."""
    rng = np.random.default_rng(0)
    n = 200
    target = np.zeros(n, dtype=int)
    target[::10] = 1  # 20 defaults

    days_employed = -rng.integers(100, 10_000, size=n)
    days_employed[[3, 50, 120]] = 365243

    ext = rng.uniform(0.0, 1.0, size=n) - 0.5 * target
    ext[::25] = np.nan

    occupation = np.array([OCCUPATIONS[i % len(OCCUPATIONS)] for i in range(n)], dtype=object)
    occupation[::7] = None

    return pd.DataFrame(
        {
            "SK_ID_CURR": np.arange(100_000, 100_000 + n),
            "TARGET": target,
            "NAME_CONTRACT_TYPE": np.where(np.arange(n) % 5 == 0, "Revolving loans", "Cash loans"),
            "AMT_INCOME_TOTAL": rng.lognormal(11.8, 0.5, size=n).round(1),
            "AMT_CREDIT": rng.lognormal(13.0, 0.6, size=n).round(1),
            "EXT_SOURCE_2": ext,
            "DAYS_BIRTH": -rng.integers(21 * 365, 69 * 365, size=n),
            "DAYS_EMPLOYED": days_employed,
            "OCCUPATION_TYPE": occupation,
        }
    )


@pytest.fixture
def small_cfg() -> Config:
    return Config(category_min_count=1, dpi=60, missing_top_n=10)
