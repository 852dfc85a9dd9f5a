"""
Modeling utilities:
- Build preprocessing + decision-tree pipelines
- Map the relative complexity parameter (cp) onto sklearn's ccp_alpha
- Cross-validated search over cp
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder
from sklearn.tree import DecisionTreeClassifier

from .config import (
    CATEGORICAL_COLS,
    CP_GRID,
    CV_FOLDS,
    DEFAULT_CP,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MIN_BUCKET,
    DEFAULT_MIN_SPLIT,
    NUMERIC_COLS,
    POSITIVE_LABEL,
)
from .data_io import split_features_target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeParams:
    """
    Stopping and pruning rules for a single classification tree.
    cp is relative: a split has to reduce the root-node impurity by at least
    cp (as a fraction) to survive pruning.
    """
    cp: float = DEFAULT_CP
    min_samples_split: int = DEFAULT_MIN_SPLIT
    min_samples_leaf: int = DEFAULT_MIN_BUCKET
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass(frozen=True)
class TuningResult:
    best_cp: float
    cv_error: float
    model: Pipeline


def build_preprocessor() -> ColumnTransformer:
    """
    Create a ColumnTransformer that:
    - imputes missing values
    - one-hot encodes categoricals

    Trees are insensitive to monotone rescaling, so numerics are not scaled.
    """
    numeric_pipe = Pipeline(
        steps=[
            ("imputer", SimpleImputer(strategy="median")),
        ]
    )

    categorical_pipe = Pipeline(
        steps=[
            ("imputer", SimpleImputer(strategy="most_frequent")),
            ("onehot", OneHotEncoder(handle_unknown="ignore")),
        ]
    )

    preprocessor = ColumnTransformer(
        transformers=[
            ("num", numeric_pipe, NUMERIC_COLS),
            ("cat", categorical_pipe, CATEGORICAL_COLS),
        ],
        remainder="drop",  # drop any column not explicitly listed
    )

    return preprocessor


def root_gini(y: pd.Series) -> float:
    """
    Gini impurity of the root node (all training rows).
    """
    p = y.value_counts(normalize=True).to_numpy()
    return float(1.0 - np.sum(p ** 2))


def cp_to_ccp_alpha(cp: float, y: pd.Series) -> float:
    return float(cp * root_gini(y))


def build_pipeline(params: TreeParams, ccp_alpha: float, random_state: int = 42) -> Pipeline:
    """
    Build (preprocessor -> decision tree) pipeline.
    """
    tree = DecisionTreeClassifier(
        criterion="gini",
        min_samples_split=params.min_samples_split,
        min_samples_leaf=params.min_samples_leaf,
        max_depth=params.max_depth,
        ccp_alpha=ccp_alpha,
        random_state=random_state,
    )
    return Pipeline(steps=[("preprocess", build_preprocessor()), ("model", tree)])


def train_tree(df: pd.DataFrame, params: TreeParams, random_state: int = 42) -> Pipeline:
    """
    Fit one tree on a (possibly balanced) training table.
    """
    X, y = split_features_target(df)
    pipe = build_pipeline(params, ccp_alpha=cp_to_ccp_alpha(params.cp, y), random_state=random_state)
    pipe.fit(X, y)
    logger.info(
        "Fitted tree: cp=%.4g, depth=%d, leaves=%d",
        params.cp,
        pipe.named_steps["model"].get_depth(),
        pipe.named_steps["model"].get_n_leaves(),
    )
    return pipe


def tune_complexity(
    df: pd.DataFrame,
    params: TreeParams,
    cp_grid: Sequence[float] = CP_GRID,
    folds: int = CV_FOLDS,
    random_state: int = 42,
) -> TuningResult:
    """
    Pick cp by k-fold cross-validation (minimum classification error), then
    refit one tree with it on all rows.
    """
    X, y = split_features_target(df)
    cp_grid = np.asarray(cp_grid, dtype=float)
    scale = root_gini(y)

    pipe = build_pipeline(params, ccp_alpha=0.0, random_state=random_state)
    cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=random_state)
    search = GridSearchCV(
        estimator=pipe,
        param_grid={"model__ccp_alpha": list(cp_grid * scale)},
        scoring="accuracy",
        cv=cv,
        refit=True,
        n_jobs=-1,
        verbose=0,
    )
    search.fit(X, y)

    best_cp = float(cp_grid[search.best_index_])
    cv_error = float(1.0 - search.best_score_)
    logger.info("Cross-validated cp=%.4g (cv error=%.4f, %d folds)", best_cp, cv_error, folds)

    model = search.best_estimator_
    return TuningResult(best_cp=best_cp, cv_error=cv_error, model=model)


def get_positive_class_proba(model: BaseEstimator, X) -> np.ndarray:
    """
    Return P(deposit == "yes") per row, located by class label.
    """
    if not hasattr(model, "predict_proba"):
        raise TypeError("Model does not support probability prediction.")
    classes = list(model.classes_)
    if POSITIVE_LABEL not in classes:
        raise ValueError(f"Model was not trained with a '{POSITIVE_LABEL}' class: {classes}")
    return model.predict_proba(X)[:, classes.index(POSITIVE_LABEL)]
