"""
Data loading, basic validation and the train/test partition.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from .config import TARGET_COL, CATEGORICAL_COLS, NUMERIC_COLS, LABELS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureSchema:
    """
    A lightweight schema to record what features the pipeline expects.
    Useful when scoring new data later.
    """
    target: str
    labels: List[str]
    categorical_cols: List[str]
    numeric_cols: List[str]


def load_bank_csv(csv_path: Path) -> pd.DataFrame:
    """
    Load the bank marketing CSV into a DataFrame.

    Both the comma separated export (target column "deposit") and the
    semicolon separated UCI file (target column "y") are accepted.
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {csv_path}")

    df = pd.read_csv(csv_path)
    if df.shape[1] == 1 and ";" in df.columns[0]:
        df = pd.read_csv(csv_path, sep=";")

    if TARGET_COL not in df.columns and "y" in df.columns:
        df = df.rename(columns={"y": TARGET_COL})

    # Basic sanity checks
    required = set([TARGET_COL] + CATEGORICAL_COLS + NUMERIC_COLS)
    missing = sorted(list(required - set(df.columns)))
    if missing:
        raise ValueError(
            "CSV is missing required columns.\n"
            f"Missing: {missing}\n"
            f"Found: {sorted(df.columns.tolist())}"
        )

    df[TARGET_COL] = df[TARGET_COL].astype(str).str.strip().str.lower()
    unexpected = sorted(set(df[TARGET_COL].unique()) - set(LABELS))
    if unexpected:
        raise ValueError(f"Unexpected values in '{TARGET_COL}': {unexpected}")

    logger.info("Loaded %d rows x %d columns from %s", len(df), df.shape[1], csv_path)
    return df


def split_features_target(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Split dataframe into X (features) and y (target).
    """
    y = df[TARGET_COL]
    X = df.drop(columns=[TARGET_COL])
    return X, y


def class_counts(y: pd.Series) -> Dict[str, int]:
    """
    Count rows per label, always reporting both labels.
    """
    counts = y.value_counts()
    return {label: int(counts.get(label, 0)) for label in LABELS}


def partition(
    df: pd.DataFrame,
    train_fraction: float,
    seed: int,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split rows into disjoint train and test sets.

    Row positions are shuffled with a seeded permutation; the first
    round(train_fraction * N) positions form the training set and the rest
    the test set. The same seed always gives the same split. For very small
    tables one side may be empty; strategies then fail on it individually.
    """
    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
    n = len(df)
    if n == 0:
        raise ValueError("Cannot partition an empty dataset")

    order = np.random.RandomState(seed).permutation(n)
    n_train = int(round(train_fraction * n))

    train = df.iloc[order[:n_train]]
    test = df.iloc[order[n_train:]]
    logger.info("Partitioned %d rows -> train=%d, test=%d (seed=%d)", n, len(train), len(test), seed)
    return train, test


def get_feature_schema() -> FeatureSchema:
    """
    Return the expected schema for this dataset.
    """
    return FeatureSchema(
        target=TARGET_COL,
        labels=list(LABELS),
        categorical_cols=CATEGORICAL_COLS,
        numeric_cols=NUMERIC_COLS,
    )


def save_schema(schema: FeatureSchema, out_path: Path) -> None:
    """
    Save schema as JSON.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(schema.__dict__, f, indent=2)
