"""
Evaluation utilities:
- Turn P(yes) scores into contact decisions at a threshold
- Build the confusion matrix against the held-out labels
- Compute accuracy / sensitivity / specificity and campaign profit
- Plot confusion matrices and the profit comparison
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from .config import EconomicConfig, LABELS, NEGATIVE_LABEL, POSITIVE_LABEL
from .errors import LabelMismatchError, UndefinedMetricError


@dataclass(frozen=True)
class ConfusionMatrix:
    """Counts relative to the positive class "yes"."""
    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    def as_dict(self) -> Dict[str, int]:
        return {"TP": self.tp, "FP": self.fp, "TN": self.tn, "FN": self.fn}


@dataclass(frozen=True)
class EconomicMetrics:
    accuracy: float
    sensitivity: float
    specificity: float
    contacts_made: int
    total_profit: float


def _savefig(fig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=200)
    plt.close(fig)


def classify(y_prob: np.ndarray, threshold: float = 0.5) -> np.ndarray:
    """
    Predict "yes" only when the score is strictly above the threshold.
    A score exactly at the threshold predicts "no".
    """
    y_prob = np.asarray(y_prob, dtype=float)
    return np.where(y_prob > threshold, POSITIVE_LABEL, NEGATIVE_LABEL)


def build_confusion_matrix(predictions: Sequence[str], true_labels: Sequence[str]) -> ConfusionMatrix:
    """
    Cross-tabulate predicted vs. actual labels with "yes" as positive class.
    """
    y_pred = np.asarray(predictions, dtype=object)
    y_true = np.asarray(true_labels, dtype=object)
    if len(y_pred) != len(y_true):
        raise LabelMismatchError(
            f"{len(y_pred)} predictions for {len(y_true)} true labels"
        )

    unknown = sorted(set(y_pred.tolist()).union(y_true.tolist()) - set(LABELS), key=str)
    if unknown:
        raise LabelMismatchError(f"Unexpected label values: {unknown}")
    if len(y_true) == 0:
        return ConfusionMatrix(tp=0, fp=0, tn=0, fn=0)

    # Fixed label order -> rows/cols are (no, yes)
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=list(LABELS)).ravel()
    return ConfusionMatrix(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))


def _rate(numerator: int, denominator: int, name: str) -> float:
    if denominator == 0:
        raise UndefinedMetricError(f"{name} is undefined: zero denominator")
    return numerator / denominator


def accuracy(cm: ConfusionMatrix) -> float:
    return _rate(cm.tp + cm.tn, cm.total, "Accuracy")


def sensitivity(cm: ConfusionMatrix) -> float:
    """True-positive rate, TP / (TP + FN)."""
    return _rate(cm.tp, cm.tp + cm.fn, "Sensitivity")


def specificity(cm: ConfusionMatrix) -> float:
    """True-negative rate, TN / (TN + FP)."""
    return _rate(cm.tn, cm.tn + cm.fp, "Specificity")


def evaluate(cm: ConfusionMatrix, config: EconomicConfig) -> EconomicMetrics:
    """
    Classification metrics plus campaign profit.

    Every predicted "yes" is contacted (cost), and only true positives
    convert into a sale (revenue). Missed sales and correct rejections carry
    neither cost nor revenue.
    """
    contacts = cm.tp + cm.fp
    profit = config.revenue_per_sale * cm.tp - config.cost_per_contact * contacts
    return EconomicMetrics(
        accuracy=accuracy(cm),
        sensitivity=sensitivity(cm),
        specificity=specificity(cm),
        contacts_made=contacts,
        total_profit=float(profit),
    )


def plot_confusion(cm: ConfusionMatrix, title: str, out_path: Path) -> None:
    cells = np.array([[cm.tn, cm.fp], [cm.fn, cm.tp]])

    fig = plt.figure(figsize=(5.5, 4.8))
    plt.imshow(cells, aspect="auto")
    plt.title(title)
    plt.xticks([0, 1], [f"Pred {NEGATIVE_LABEL}", f"Pred {POSITIVE_LABEL}"])
    plt.yticks([0, 1], [f"True {NEGATIVE_LABEL}", f"True {POSITIVE_LABEL}"])
    plt.colorbar()

    # Add counts as text
    for (i, j), val in np.ndenumerate(cells):
        plt.text(j, i, str(val), ha="center", va="center")

    _savefig(fig, out_path)


def plot_profit(table: pd.DataFrame, out_path: Path) -> None:
    """
    Bar chart of TotalProfit per balancing strategy, highest first.
    """
    ordered = table.sort_values("TotalProfit", ascending=False, kind="mergesort")

    fig = plt.figure(figsize=(8, 4.5))
    plt.bar(ordered["Balancing"], ordered["TotalProfit"])
    plt.axhline(0.0, linestyle="--", linewidth=0.8)
    plt.title("Total profit on the test set by balancing strategy")
    plt.ylabel("Total profit")
    plt.xticks(rotation=30, ha="right")
    _savefig(fig, out_path)


def save_json(obj: Dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)
