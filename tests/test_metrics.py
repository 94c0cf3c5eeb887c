"""Tests for classification metrics."""

import numpy as np
import pytest

from stat_tutorials.core.metrics import (
    accuracy_score,
    classification_report,
    cohen_kappa,
    compute_all_metrics,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
)

Y_TRUE = [1, 1, 0, 0, 1]
Y_PRED = [1, 0, 0, 1, 1]


class TestMetrics:
    """Tests for the metric functions on a small hand-checked example."""

    def test_confusion_matrix(self):
        np.testing.assert_array_equal(confusion_matrix(Y_TRUE, Y_PRED), [[1, 1], [1, 2]])

    def test_label_order(self):
        cm = confusion_matrix(["a", "b", "b"], ["a", "a", "b"], labels=["b", "a"])
        np.testing.assert_array_equal(cm, [[1, 1], [0, 1]])

    def test_accuracy(self):
        assert accuracy_score(Y_TRUE, Y_PRED) == pytest.approx(0.6)

    def test_binary_scores(self):
        assert precision_score(Y_TRUE, Y_PRED) == pytest.approx(2 / 3)
        assert recall_score(Y_TRUE, Y_PRED) == pytest.approx(2 / 3)
        assert f1_score(Y_TRUE, Y_PRED) == pytest.approx(2 / 3)

    def test_macro_and_per_class(self):
        assert precision_score(Y_TRUE, Y_PRED, average="macro") == pytest.approx((0.5 + 2 / 3) / 2)
        np.testing.assert_allclose(recall_score(Y_TRUE, Y_PRED, average=None), [0.5, 2 / 3])

    def test_kappa(self):
        assert cohen_kappa(Y_TRUE, Y_PRED) == pytest.approx(0.08 / 0.48)

    def test_perfect_kappa(self):
        assert cohen_kappa([0, 1, 1], [0, 1, 1]) == pytest.approx(1.0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            accuracy_score([1, 0], [1])

    def test_report(self):
        report = classification_report(Y_TRUE, Y_PRED)
        assert list(report.index) == ["0", "1", "macro avg", "weighted avg"]
        assert report.loc["1", "support"] == 3
        assert report.loc["macro avg", "support"] == 5

    def test_compute_all(self):
        metrics = compute_all_metrics(Y_TRUE, Y_PRED)
        assert metrics["accuracy"] == pytest.approx(0.6)
        assert metrics["balanced_accuracy"] == pytest.approx((0.5 + 2 / 3) / 2)
        assert set(metrics) == {
            "accuracy",
            "balanced_accuracy",
            "kappa",
            "precision_macro",
            "recall_macro",
            "f1_macro",
        }
