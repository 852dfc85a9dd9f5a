"""
Train one decision tree per class-balancing strategy and compare them.

Run:
  python scripts/compare_strategies.py --csv data/raw/bank.csv

This script will:
- Load data
- Run EDA and save plots
- Split train/test once (seeded)
- For each of the six balancing strategies: balance the training rows,
  fit a tree (the tuned strategy cross-validates cp), score the test rows
- Rank strategies by campaign profit and save the table + figures
- Save the most profitable model to models/best_model.joblib
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from joblib import dump

from bank_marketing.config import (
    COST_PER_CONTACT,
    DEFAULT_RAW_CSV,
    FIGURES_DIR,
    MODELS_DIR,
    RANDOM_STATE,
    REPORTS_DIR,
    REVENUE_PER_SALE,
    THRESHOLD,
    TRAIN_FRACTION,
    EconomicConfig,
)
from bank_marketing.comparison import compare, default_strategies, run_all
from bank_marketing.data_io import get_feature_schema, load_bank_csv, partition, save_schema
from bank_marketing.eda import run_eda
from bank_marketing.evaluation import plot_confusion, plot_profit, save_json


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--csv",
        type=str,
        default=str(DEFAULT_RAW_CSV),
        help="Path to bank.csv (raw). Default: data/raw/bank.csv",
    )
    parser.add_argument("--random_state", type=int, default=RANDOM_STATE)
    parser.add_argument("--train_fraction", type=float, default=TRAIN_FRACTION)
    parser.add_argument("--cost", type=float, default=COST_PER_CONTACT, help="Cost per contact")
    parser.add_argument("--revenue", type=float, default=REVENUE_PER_SALE, help="Revenue per sale")
    parser.add_argument("--threshold", type=float, default=THRESHOLD)
    parser.add_argument("--no-plots", action="store_true", help="Skip EDA and result figures")
    parser.add_argument("--log-level", type=str, default="INFO")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = EconomicConfig(
        cost_per_contact=args.cost,
        revenue_per_sale=args.revenue,
        threshold=args.threshold,
    )

    # -------------------------
    # 1) Load data
    # -------------------------
    df = load_bank_csv(Path(args.csv))

    # Save schema for documentation
    save_schema(get_feature_schema(), MODELS_DIR / "feature_schema.json")

    # -------------------------
    # 2) EDA (save figures)
    # -------------------------
    if not args.no_plots:
        run_eda(df, FIGURES_DIR)

    # -------------------------
    # 3) Split data (once, shared by every strategy)
    # -------------------------
    train, test = partition(df, train_fraction=args.train_fraction, seed=args.random_state)

    # -------------------------
    # 4) Run the six strategies
    # -------------------------
    specs = default_strategies(seed=args.random_state)
    outcomes = run_all(specs, train, test, config)
    table = compare(outcomes)

    # -------------------------
    # 5) Save comparison
    # -------------------------
    frame = table.to_frame()
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    frame.to_csv(REPORTS_DIR / "comparison.csv", index=False)

    report = {
        "config": {
            "csv": str(args.csv),
            "random_state": args.random_state,
            "train_fraction": args.train_fraction,
            "train_rows": len(train),
            "test_rows": len(test),
            "cost_per_contact": config.cost_per_contact,
            "revenue_per_sale": config.revenue_per_sale,
            "threshold": config.threshold,
        },
        "ranked": [
            {
                **r.as_row(),
                "confusion": r.confusion.as_dict(),
                "train_rows": r.train_rows,
                "train_class_counts": r.train_class_counts,
                "cp": r.cp,
            }
            for r in table.ranked
        ],
        "failed": [{"Balancing": f.name, "error": f.error} for f in table.failed],
    }
    save_json(report, REPORTS_DIR / "comparison.json")

    if not args.no_plots:
        for r in table.ranked:
            plot_confusion(
                r.confusion,
                title=f"{r.name} (threshold={config.threshold:.2f})",
                out_path=FIGURES_DIR / f"confusion_{r.strategy.name.lower()}.png",
            )
        if not frame.empty:
            plot_profit(frame, FIGURES_DIR / "profit_by_strategy.png")

    # -------------------------
    # 6) Save the most profitable model
    # -------------------------
    best = table.best
    if best is not None:
        MODELS_DIR.mkdir(parents=True, exist_ok=True)
        dump(best.model, MODELS_DIR / "best_model.joblib")

    print("\nComparison complete.")
    print(frame.to_string(index=False))
    for f in table.failed:
        print(f"FAILED {f.name}: {f.error}")
    if best is not None:
        print(f"Most profitable: {best.name} (profit={best.total_profit:,.0f})")
        print(f"Saved model -> {MODELS_DIR / 'best_model.joblib'}")
    print(f"Saved table -> {REPORTS_DIR / 'comparison.csv'}")
    print(f"Saved figures -> {FIGURES_DIR}")


if __name__ == "__main__":
    main()
