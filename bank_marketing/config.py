from dataclasses import dataclass
from pathlib import Path

import numpy as np

# Project root = folder containing this file's parent (bank_marketing/) parent.
PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Data
DATA_DIR = PROJECT_ROOT / "data"
RAW_DATA_DIR = DATA_DIR / "raw"

# Outputs
MODELS_DIR = PROJECT_ROOT / "models"
REPORTS_DIR = PROJECT_ROOT / "reports"
FIGURES_DIR = REPORTS_DIR / "figures"

# Dataset file name
DEFAULT_RAW_CSV = RAW_DATA_DIR / "bank.csv"

# Target label: did the client subscribe a term deposit?
TARGET_COL = "deposit"
POSITIVE_LABEL = "yes"
NEGATIVE_LABEL = "no"
LABELS = (NEGATIVE_LABEL, POSITIVE_LABEL)

CATEGORICAL_COLS = [
    "job",
    "marital",
    "education",
    "default",
    "housing",
    "loan",
    "contact",
    "month",
    "poutcome",
]

NUMERIC_COLS = [
    "age",
    "balance",
    "day",
    "duration",
    "campaign",
    "pdays",
    "previous",
]

# Experiment defaults
TRAIN_FRACTION = 0.7
RANDOM_STATE = 42

# Campaign economics
COST_PER_CONTACT = 100.0
REVENUE_PER_SALE = 3000.0
THRESHOLD = 0.5

# Tree defaults (same meaning as recursive partitioning's rpart.control)
DEFAULT_CP = 0.01
DEFAULT_MIN_SPLIT = 20
DEFAULT_MIN_BUCKET = 7
DEFAULT_MAX_DEPTH = 30

# Cross-validated complexity search
CV_FOLDS = 5
CP_GRID = np.linspace(0.0005, 0.05, 20)


@dataclass(frozen=True)
class EconomicConfig:
    """
    Campaign economics used to turn a confusion matrix into profit.
    Every predicted "yes" costs one contact; every true "yes" earns one sale.
    """
    cost_per_contact: float = COST_PER_CONTACT
    revenue_per_sale: float = REVENUE_PER_SALE
    threshold: float = THRESHOLD

    def __post_init__(self):
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {self.threshold}")
        if self.cost_per_contact < 0 or self.revenue_per_sale < 0:
            raise ValueError("cost_per_contact and revenue_per_sale must be non-negative")
