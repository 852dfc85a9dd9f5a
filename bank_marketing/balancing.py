"""
Class-balancing strategies applied to the training set before fitting:
- None / HyperparameterTuned: training rows are used as-is
- Upsample: replicate minority rows until classes match
- Downsample: drop majority rows until classes match
- SyntheticOversample: smoothed bootstrap (ROSE-style) to a target size
- Hybrid: downsample to the midpoint, then smoothed bootstrap to 50/50

Every strategy works on a DataFrame holding the predictors and the target
column, and never sees the test set.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from imblearn.over_sampling import RandomOverSampler
from imblearn.under_sampling import RandomUnderSampler
from sklearn.utils import resample

from .config import TARGET_COL, POSITIVE_LABEL, NEGATIVE_LABEL
from .data_io import class_counts, split_features_target
from .errors import InsufficientDataError

logger = logging.getLogger(__name__)


class BalancingStrategy(Enum):
    """
    The six strategies, declared in canonical report order.
    """
    NONE = "None"
    UPSAMPLE = "Upsample"
    DOWNSAMPLE = "Downsample"
    SYNTHETIC = "SyntheticOversample"
    HYBRID = "Hybrid"
    TUNED = "HyperparameterTuned"

    @property
    def order(self) -> int:
        return list(BalancingStrategy).index(self)


def _check_both_classes(df: pd.DataFrame, stage: str) -> Dict[str, int]:
    counts = class_counts(df[TARGET_COL])
    empty = [label for label, n in counts.items() if n == 0]
    if empty:
        raise InsufficientDataError(
            f"{stage}: no rows for class(es) {empty} (counts={counts})"
        )
    return counts


def _majority_minority(counts: Dict[str, int]) -> Tuple[str, str]:
    if counts[POSITIVE_LABEL] > counts[NEGATIVE_LABEL]:
        return POSITIVE_LABEL, NEGATIVE_LABEL
    return NEGATIVE_LABEL, POSITIVE_LABEL


def _rejoin(X: pd.DataFrame, y: pd.Series) -> pd.DataFrame:
    out = pd.DataFrame(X).reset_index(drop=True)
    out[TARGET_COL] = pd.Series(y).reset_index(drop=True).values
    return out


def upsample(df: pd.DataFrame, seed: int) -> pd.DataFrame:
    """
    Sample minority rows with replacement until both classes have the
    majority count. Result size is 2 x majority count.
    """
    _check_both_classes(df, "upsample input")
    X, y = split_features_target(df)
    sampler = RandomOverSampler(sampling_strategy="auto", random_state=seed)
    X_res, y_res = sampler.fit_resample(X, y)
    out = _rejoin(X_res, y_res)
    _check_both_classes(out, "upsample output")
    return out


def downsample(df: pd.DataFrame, seed: int, n_majority: Optional[int] = None) -> pd.DataFrame:
    """
    Sample majority rows without replacement down to `n_majority`
    (default: the minority count). Minority rows are kept as they are.
    """
    counts = _check_both_classes(df, "downsample input")
    majority, minority = _majority_minority(counts)
    if n_majority is None:
        n_majority = counts[minority]
    if not 0 < n_majority <= counts[majority]:
        raise InsufficientDataError(
            f"downsample: cannot keep {n_majority} of {counts[majority]} '{majority}' rows"
        )

    X, y = split_features_target(df)
    sampler = RandomUnderSampler(
        sampling_strategy={majority: n_majority},
        random_state=seed,
    )
    X_res, y_res = sampler.fit_resample(X, y)
    out = _rejoin(X_res, y_res)
    _check_both_classes(out, "downsample output")
    return out


def _kernel_bandwidth(n_rows: int, n_dims: int, shrink: float) -> float:
    # Silverman-style rule of thumb for a Gaussian product kernel
    return shrink * (4.0 / ((n_dims + 2) * n_rows)) ** (1.0 / (n_dims + 4))


def smoothed_bootstrap(
    df: pd.DataFrame,
    n_samples: int,
    p: float = 0.5,
    seed: int = 42,
    shrink: float = 1.0,
) -> pd.DataFrame:
    """
    Generate a fully synthetic training set of `n_samples` rows.

    round(n_samples * p) rows are positive, the rest negative. For each class,
    rows are drawn with replacement from that class and their numeric
    predictors are perturbed with Gaussian kernel noise scaled by the class
    standard deviation, so synthetic rows are near, but not copies of, the
    originals. Categorical predictors are carried over from the drawn row.
    """
    if not 0.0 < p < 1.0:
        raise ValueError(f"p must be in (0, 1), got {p}")
    if n_samples < 2:
        raise ValueError(f"n_samples must be at least 2, got {n_samples}")
    _check_both_classes(df, "smoothed bootstrap input")

    rng = np.random.RandomState(seed)
    n_pos = int(round(n_samples * p))
    targets = {POSITIVE_LABEL: n_pos, NEGATIVE_LABEL: n_samples - n_pos}

    numeric = [c for c in df.select_dtypes(include="number").columns if c != TARGET_COL]
    parts = []
    for label, n_target in targets.items():
        if n_target == 0:
            continue
        rows = df[df[TARGET_COL] == label]
        drawn = resample(rows, replace=True, n_samples=n_target, random_state=rng)
        drawn = drawn.reset_index(drop=True).astype({c: float for c in numeric})

        if numeric:
            values = rows[numeric].astype(float)
            scale = values.std(ddof=1).fillna(0.0).to_numpy()
            h = _kernel_bandwidth(len(rows), len(numeric), shrink)
            noise = rng.standard_normal((n_target, len(numeric))) * h * scale
            drawn[numeric] = drawn[numeric].to_numpy() + noise
        parts.append(drawn)

    out = pd.concat(parts, ignore_index=True)
    out = out.sample(frac=1.0, random_state=rng).reset_index(drop=True)
    _check_both_classes(out, "smoothed bootstrap output")
    return out


def hybrid(df: pd.DataFrame, seed: int) -> pd.DataFrame:
    """
    Two stages:
    (a) downsample the majority class to floor((n_majority + n_minority) / 2),
        keeping every minority row;
    (b) smoothed bootstrap of the stage (a) rows to 2 x that target at 50/50.
    """
    counts = _check_both_classes(df, "hybrid input")
    target = (counts[POSITIVE_LABEL] + counts[NEGATIVE_LABEL]) // 2
    stage_a = downsample(df, seed=seed, n_majority=target)
    return smoothed_bootstrap(stage_a, n_samples=2 * target, p=0.5, seed=seed + 1)


def balance(df: pd.DataFrame, strategy: BalancingStrategy, seed: int) -> pd.DataFrame:
    """
    Apply one balancing strategy to the training rows.
    """
    if strategy in (BalancingStrategy.NONE, BalancingStrategy.TUNED):
        _check_both_classes(df, strategy.value)
        out = df
    elif strategy is BalancingStrategy.UPSAMPLE:
        out = upsample(df, seed=seed)
    elif strategy is BalancingStrategy.DOWNSAMPLE:
        out = downsample(df, seed=seed)
    elif strategy is BalancingStrategy.SYNTHETIC:
        out = smoothed_bootstrap(df, n_samples=len(df), p=0.5, seed=seed)
    elif strategy is BalancingStrategy.HYBRID:
        out = hybrid(df, seed=seed)
    else:
        raise ValueError(f"Unknown balancing strategy: {strategy}")

    logger.info(
        "%s: %d rows %s -> %d rows %s",
        strategy.value, len(df), class_counts(df[TARGET_COL]),
        len(out), class_counts(out[TARGET_COL]),
    )
    return out
