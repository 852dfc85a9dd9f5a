"""
Exploratory data analysis (EDA) utilities.

Two business-friendly plots of the full dataset:
- Class balance (subscribed vs. not)
- Subscription rate by categorical fields
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import matplotlib.pyplot as plt
import pandas as pd

from .config import TARGET_COL, CATEGORICAL_COLS, LABELS, POSITIVE_LABEL


def _savefig(fig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=200)
    plt.close(fig)


def plot_class_balance(df: pd.DataFrame, out_path: Path) -> None:
    """
    Plot subscribed vs. not subscribed counts.
    """
    counts = df[TARGET_COL].value_counts().reindex(list(LABELS), fill_value=0)

    fig = plt.figure(figsize=(6, 4))
    plt.bar([f"{TARGET_COL} = {label}" for label in counts.index], counts.values)
    plt.title("Class Balance (term deposit subscription)")
    plt.ylabel("Number of clients")
    _savefig(fig, out_path)


def plot_subscription_by_categorical(df: pd.DataFrame, cat_cols: List[str], out_path: Path) -> None:
    """
    Plot subscription rate by each categorical column.
    """
    subscribed = (df[TARGET_COL] == POSITIVE_LABEL).astype(float)
    n = len(cat_cols)
    fig = plt.figure(figsize=(8, 3.5 * n))

    for i, col in enumerate(cat_cols, start=1):
        ax = plt.subplot(n, 1, i)
        rates = subscribed.groupby(df[col]).mean().sort_values(ascending=False)
        ax.bar(rates.index.astype(str), rates.values)
        ax.set_title(f"Subscription rate by {col}")
        ax.set_ylabel("Subscription rate")
        ax.set_ylim(0, max(0.05, rates.max() * 1.15))
        ax.tick_params(axis="x", rotation=45)

    _savefig(fig, out_path)


def run_eda(df: pd.DataFrame, figures_dir: Path) -> None:
    """
    Generate all EDA plots to the figures directory.
    """
    plot_class_balance(df, figures_dir / "class_balance.png")
    plot_subscription_by_categorical(df, CATEGORICAL_COLS, figures_dir / "subscription_by_category.png")
