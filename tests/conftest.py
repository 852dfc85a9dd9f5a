import numpy as np
import pandas as pd
import pytest

from bank_marketing.config import TARGET_COL
from bank_marketing.data_io import partition


def make_bank_frame(n_rows: int = 200, positive_rate: float = 0.3, seed: int = 0) -> pd.DataFrame:
    """Small bank-marketing-shaped table; "duration" carries most of the signal."""
    rng = np.random.RandomState(seed)
    y = rng.rand(n_rows) < positive_rate

    df = pd.DataFrame(
        {
            "age": rng.randint(18, 90, n_rows),
            "job": rng.choice(["admin.", "technician", "services", "management", "retired"], n_rows),
            "marital": rng.choice(["married", "single", "divorced"], n_rows),
            "education": rng.choice(["primary", "secondary", "tertiary", "unknown"], n_rows),
            "default": rng.choice(["no", "yes"], n_rows, p=[0.95, 0.05]),
            "balance": rng.normal(1500, 800, n_rows).round().astype(int),
            "housing": rng.choice(["no", "yes"], n_rows),
            "loan": rng.choice(["no", "yes"], n_rows, p=[0.8, 0.2]),
            "contact": rng.choice(["cellular", "telephone", "unknown"], n_rows),
            "day": rng.randint(1, 32, n_rows),
            "month": rng.choice(["jan", "feb", "may", "jun", "aug", "nov"], n_rows),
            "duration": np.where(y, rng.randint(300, 900, n_rows), rng.randint(20, 400, n_rows)),
            "campaign": rng.randint(1, 8, n_rows),
            "pdays": rng.choice([-1, 30, 90, 180], n_rows),
            "previous": rng.randint(0, 4, n_rows),
            "poutcome": rng.choice(["unknown", "failure", "success", "other"], n_rows),
        }
    )
    df[TARGET_COL] = np.where(y, "yes", "no")
    return df


@pytest.fixture
def bank_df() -> pd.DataFrame:
    return make_bank_frame()


@pytest.fixture
def train_test(bank_df):
    return partition(bank_df, train_fraction=0.7, seed=42)
