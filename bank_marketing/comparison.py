"""
One parametrized pipeline per balancing strategy, and the comparison table.

    balance(train) -> fit tree (or cross-validate cp) -> score test
    -> confusion matrix -> accuracy/sensitivity/specificity/profit

Every strategy trains on a derivative of the same training rows and is
scored on the same untouched test rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.pipeline import Pipeline

from .balancing import BalancingStrategy, balance
from .config import CP_GRID, CV_FOLDS, EconomicConfig, TARGET_COL
from .data_io import class_counts, split_features_target
from .errors import BankMarketingError
from .evaluation import (
    ConfusionMatrix,
    EconomicMetrics,
    build_confusion_matrix,
    classify,
    evaluate,
)
from .modeling import TreeParams, get_positive_class_proba, train_tree, tune_complexity

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "Balancing",
    "Accuracy",
    "Sensitivity",
    "Specificity",
    "ContactsMade",
    "TP",
    "TotalProfit",
]


@dataclass(frozen=True)
class StrategySpec:
    """
    Configuration of one pipeline run: which balancing to apply, with which
    seed, and the tree rules to fit with.
    """
    strategy: BalancingStrategy
    seed: int = 42
    params: TreeParams = field(default_factory=TreeParams)

    @property
    def name(self) -> str:
        return self.strategy.value


@dataclass(frozen=True)
class StrategyResult:
    name: str
    strategy: BalancingStrategy
    accuracy: float
    sensitivity: float
    specificity: float
    contacts_made: int
    tp: int
    total_profit: float
    confusion: ConfusionMatrix
    train_rows: int
    train_class_counts: Dict[str, int]
    cp: float
    model: Optional[Pipeline] = field(default=None, repr=False, compare=False)

    def as_row(self) -> Dict[str, object]:
        return {
            "Balancing": self.name,
            "Accuracy": self.accuracy,
            "Sensitivity": self.sensitivity,
            "Specificity": self.specificity,
            "ContactsMade": self.contacts_made,
            "TP": self.tp,
            "TotalProfit": self.total_profit,
        }


@dataclass(frozen=True)
class StrategyFailure:
    name: str
    strategy: BalancingStrategy
    error: str


Outcome = Union[StrategyResult, StrategyFailure]


@dataclass(frozen=True)
class ComparisonTable:
    """Successful strategies ranked by profit, plus the ones that failed."""
    ranked: List[StrategyResult]
    failed: List[StrategyFailure]

    @property
    def best(self) -> Optional[StrategyResult]:
        return self.ranked[0] if self.ranked else None

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([r.as_row() for r in self.ranked], columns=REPORT_COLUMNS)


def default_strategies(seed: int = 42, params: Optional[TreeParams] = None) -> List[StrategySpec]:
    """
    The six strategies in canonical order. Each spec seeds its own random draws.
    """
    params = params or TreeParams()
    return [StrategySpec(strategy=s, seed=seed, params=params) for s in BalancingStrategy]


def fit_strategy_model(
    spec: StrategySpec,
    train: pd.DataFrame,
) -> Tuple[Pipeline, pd.DataFrame, float]:
    """
    Balance the training rows for this strategy and fit its tree.
    Returns (model, balanced rows, cp used).
    """
    balanced = balance(train, spec.strategy, seed=spec.seed)

    if spec.strategy is BalancingStrategy.TUNED:
        tuning = tune_complexity(
            balanced,
            params=spec.params,
            cp_grid=CP_GRID,
            folds=CV_FOLDS,
            random_state=spec.seed,
        )
        return tuning.model, balanced, tuning.best_cp

    model = train_tree(balanced, spec.params, random_state=spec.seed)
    return model, balanced, spec.params.cp


def score_model(
    model: Pipeline,
    test: pd.DataFrame,
    config: EconomicConfig,
) -> Tuple[ConfusionMatrix, EconomicMetrics]:
    """
    Score the held-out rows and evaluate them; returns (confusion, metrics).
    """
    X_test, y_test = split_features_target(test)
    # an empty test set still reaches evaluate(), which reports it as undefined
    y_prob = get_positive_class_proba(model, X_test) if len(X_test) else np.empty(0)
    predictions = classify(y_prob, threshold=config.threshold)
    cm = build_confusion_matrix(predictions, y_test.to_numpy())
    return cm, evaluate(cm, config)


def run_strategy(
    spec: StrategySpec,
    train: pd.DataFrame,
    test: pd.DataFrame,
    config: EconomicConfig,
) -> StrategyResult:
    model, balanced, cp = fit_strategy_model(spec, train)
    cm, metrics = score_model(model, test, config)

    logger.info(
        "%s: accuracy=%.4f sensitivity=%.4f specificity=%.4f contacts=%d TP=%d profit=%.0f",
        spec.name, metrics.accuracy, metrics.sensitivity, metrics.specificity,
        metrics.contacts_made, cm.tp, metrics.total_profit,
    )
    return StrategyResult(
        name=spec.name,
        strategy=spec.strategy,
        accuracy=metrics.accuracy,
        sensitivity=metrics.sensitivity,
        specificity=metrics.specificity,
        contacts_made=metrics.contacts_made,
        tp=cm.tp,
        total_profit=metrics.total_profit,
        confusion=cm,
        train_rows=len(balanced),
        train_class_counts=class_counts(balanced[TARGET_COL]),
        cp=cp,
        model=model,
    )


def run_all(
    specs: Sequence[StrategySpec],
    train: pd.DataFrame,
    test: pd.DataFrame,
    config: EconomicConfig,
) -> List[Outcome]:
    """
    Run every strategy; a failing strategy is recorded and the rest go on.
    """
    outcomes: List[Outcome] = []
    for spec in specs:
        try:
            outcomes.append(run_strategy(spec, train, test, config))
        except BankMarketingError as exc:
            logger.error("%s failed: %s: %s", spec.name, type(exc).__name__, exc)
            outcomes.append(
                StrategyFailure(
                    name=spec.name,
                    strategy=spec.strategy,
                    error=f"{type(exc).__name__}: {exc}",
                )
            )
    return outcomes


def compare(outcomes: Sequence[Outcome]) -> ComparisonTable:
    """
    Rank results by TotalProfit (descending); ties keep canonical strategy order.
    """
    results = [o for o in outcomes if isinstance(o, StrategyResult)]
    failed = [o for o in outcomes if isinstance(o, StrategyFailure)]
    ranked = sorted(results, key=lambda r: (-r.total_profit, r.strategy.order))
    return ComparisonTable(ranked=ranked, failed=failed)
