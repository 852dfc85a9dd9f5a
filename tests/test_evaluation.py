import numpy as np
import pandas as pd
import pytest

from bank_marketing.config import EconomicConfig
from bank_marketing.errors import LabelMismatchError, UndefinedMetricError
from bank_marketing.evaluation import (
    ConfusionMatrix,
    accuracy,
    build_confusion_matrix,
    classify,
    evaluate,
    plot_confusion,
    plot_profit,
    sensitivity,
    specificity,
)


def test_classify_tie_at_threshold_predicts_no():
    preds = classify(np.array([0.5, 0.5000001, 0.4999999, 1.0, 0.0]), threshold=0.5)

    assert preds.tolist() == ["no", "yes", "no", "yes", "no"]


def test_build_confusion_matrix_counts():
    preds = ["yes", "yes", "no", "no", "yes", "no"]
    truth = ["yes", "no", "no", "yes", "yes", "no"]

    cm = build_confusion_matrix(preds, truth)

    assert cm == ConfusionMatrix(tp=2, fp=1, tn=2, fn=1)
    assert cm.total == len(truth)


def test_build_confusion_matrix_conserves_rows():
    rng = np.random.RandomState(0)
    truth = rng.choice(["yes", "no"], 500)
    preds = classify(rng.rand(500))

    assert build_confusion_matrix(preds, truth).total == 500


def test_build_confusion_matrix_length_mismatch():
    with pytest.raises(LabelMismatchError):
        build_confusion_matrix(["yes", "no"], ["yes"])


def test_build_confusion_matrix_unknown_label():
    with pytest.raises(LabelMismatchError, match="maybe"):
        build_confusion_matrix(["yes", "maybe"], ["yes", "no"])


def test_profit_formula():
    cm = ConfusionMatrix(tp=40, fp=10, tn=100, fn=5)

    metrics = evaluate(cm, EconomicConfig(cost_per_contact=100, revenue_per_sale=3000))

    assert metrics.contacts_made == 50
    assert metrics.total_profit == 3000 * 40 - 100 * 50 == 115000
    assert metrics.accuracy == pytest.approx(140 / 155)
    assert metrics.sensitivity == pytest.approx(40 / 45)
    assert metrics.specificity == pytest.approx(100 / 110)


def test_profit_can_be_negative():
    cm = ConfusionMatrix(tp=1, fp=99, tn=0, fn=0)

    metrics = evaluate(cm, EconomicConfig())

    assert metrics.total_profit == 3000 * 1 - 100 * 100


def test_sensitivity_undefined_without_positives():
    cm = ConfusionMatrix(tp=0, fp=3, tn=7, fn=0)

    with pytest.raises(UndefinedMetricError):
        sensitivity(cm)
    with pytest.raises(UndefinedMetricError):
        evaluate(cm, EconomicConfig())


def test_specificity_undefined_without_negatives():
    cm = ConfusionMatrix(tp=4, fp=0, tn=0, fn=1)

    with pytest.raises(UndefinedMetricError):
        specificity(cm)


def test_accuracy_undefined_on_empty_matrix():
    with pytest.raises(UndefinedMetricError):
        accuracy(ConfusionMatrix(tp=0, fp=0, tn=0, fn=0))


@pytest.mark.parametrize(
    "kwargs",
    [{"threshold": 1.5}, {"threshold": -0.1}, {"cost_per_contact": -1}],
)
def test_economic_config_validation(kwargs):
    with pytest.raises(ValueError):
        EconomicConfig(**kwargs)


def test_plots_are_written(tmp_path):
    cm = ConfusionMatrix(tp=4, fp=1, tn=6, fn=2)
    table = pd.DataFrame({"Balancing": ["None", "Upsample"], "TotalProfit": [500.0, 1200.0]})

    plot_confusion(cm, "None", tmp_path / "cm.png")
    plot_profit(table, tmp_path / "profit.png")

    assert (tmp_path / "cm.png").exists()
    assert (tmp_path / "profit.png").exists()
