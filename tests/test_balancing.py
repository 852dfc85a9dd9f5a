import pandas as pd
import pytest

from bank_marketing.balancing import (
    BalancingStrategy,
    balance,
    downsample,
    hybrid,
    smoothed_bootstrap,
    upsample,
)
from bank_marketing.config import CATEGORICAL_COLS, TARGET_COL
from bank_marketing.data_io import class_counts
from bank_marketing.errors import InsufficientDataError


def test_upsample_equalizes_and_keeps_majority(bank_df):
    before = class_counts(bank_df[TARGET_COL])
    out = upsample(bank_df, seed=1)
    after = class_counts(out[TARGET_COL])

    assert after["yes"] == after["no"]
    assert after["no"] == before["no"]
    assert len(out) == 2 * before["no"]


def test_downsample_equalizes_and_keeps_minority(bank_df):
    before = class_counts(bank_df[TARGET_COL])
    out = downsample(bank_df, seed=1)
    after = class_counts(out[TARGET_COL])

    assert after["yes"] == after["no"] == before["yes"]
    assert len(out) == 2 * before["yes"]


def test_downsample_to_explicit_target(bank_df):
    before = class_counts(bank_df[TARGET_COL])
    out = downsample(bank_df, seed=1, n_majority=before["yes"] + 5)

    assert class_counts(out[TARGET_COL]) == {"no": before["yes"] + 5, "yes": before["yes"]}


def test_downsample_rejects_target_above_majority(bank_df):
    before = class_counts(bank_df[TARGET_COL])
    with pytest.raises(InsufficientDataError):
        downsample(bank_df, seed=1, n_majority=before["no"] + 1)


def test_hybrid_size_and_ratio(bank_df):
    before = class_counts(bank_df[TARGET_COL])
    target = (before["yes"] + before["no"]) // 2
    out = hybrid(bank_df, seed=3)
    after = class_counts(out[TARGET_COL])

    assert len(out) == 2 * target
    assert after["yes"] == after["no"] == target


def test_smoothed_bootstrap_size_and_labels(bank_df):
    out = smoothed_bootstrap(bank_df, n_samples=101, p=0.5, seed=5)
    after = class_counts(out[TARGET_COL])

    assert len(out) == 101
    assert after["yes"] == round(101 * 0.5)
    assert after["no"] == 101 - after["yes"]


def test_smoothed_bootstrap_jitters_numerics_and_keeps_categories(bank_df):
    out = smoothed_bootstrap(bank_df, n_samples=len(bank_df), p=0.5, seed=5)

    # synthetic rows are near, not equal to, original rows
    original = set(bank_df["duration"].astype(float))
    assert (~out["duration"].isin(original)).mean() > 0.9

    for col in CATEGORICAL_COLS:
        assert set(out[col]).issubset(set(bank_df[col]))


def test_smoothed_bootstrap_is_seeded(bank_df):
    a = smoothed_bootstrap(bank_df, n_samples=80, p=0.5, seed=9)
    b = smoothed_bootstrap(bank_df, n_samples=80, p=0.5, seed=9)

    pd.testing.assert_frame_equal(a, b)


@pytest.mark.parametrize("p", [0.0, 1.0])
def test_smoothed_bootstrap_rejects_degenerate_ratio(bank_df, p):
    with pytest.raises(ValueError):
        smoothed_bootstrap(bank_df, n_samples=50, p=p, seed=1)


@pytest.mark.parametrize("strategy", [BalancingStrategy.NONE, BalancingStrategy.TUNED])
def test_identity_strategies_leave_rows_untouched(bank_df, strategy):
    out = balance(bank_df, strategy, seed=1)

    pd.testing.assert_frame_equal(out, bank_df)


@pytest.mark.parametrize("strategy", list(BalancingStrategy))
def test_every_strategy_rejects_single_class_input(bank_df, strategy):
    only_no = bank_df[bank_df[TARGET_COL] == "no"]

    with pytest.raises(InsufficientDataError):
        balance(only_no, strategy, seed=1)


def test_strategy_order_is_canonical():
    assert [s.value for s in sorted(BalancingStrategy, key=lambda s: s.order)] == [
        "None",
        "Upsample",
        "Downsample",
        "SyntheticOversample",
        "Hybrid",
        "HyperparameterTuned",
    ]
