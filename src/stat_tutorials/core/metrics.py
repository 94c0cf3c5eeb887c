#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Classification metrics for evaluating the text classifiers.

- Confusion matrix (rows = actual, columns = predicted)
- Accuracy, balanced accuracy and Cohen's kappa
- Precision / recall / F1 per class or averaged (binary, macro, weighted)
- Per-class report as a DataFrame

Works for binary and multiclass labels of any hashable type.
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Union


def _check(y_true, y_pred):
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")
    return y_true, y_pred


def _labels(y_true, y_pred, labels):
    if labels is None:
        labels = sorted(set(y_true.tolist()) | set(y_pred.tolist()))
    return list(labels)


def confusion_matrix(y_true, y_pred, labels: Optional[List] = None) -> np.ndarray:
    """
    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        labels: Label order for rows/columns (default: sorted union)

    Returns:
        Integer matrix, cm[i, j] = count of actual labels[i] predicted as labels[j]
    """
    y_true, y_pred = _check(y_true, y_pred)
    labels = _labels(y_true, y_pred, labels)
    index = {label: i for i, label in enumerate(labels)}

    cm = np.zeros((len(labels), len(labels)), dtype=int)
    for t, p in zip(y_true.tolist(), y_pred.tolist()):
        if t in index and p in index:
            cm[index[t], index[p]] += 1
    return cm


def accuracy_score(y_true, y_pred) -> float:
    y_true, y_pred = _check(y_true, y_pred)
    if len(y_true) == 0:
        return 0.0
    return float(np.mean(y_true == y_pred))


def _per_class(cm: np.ndarray):
    tp = np.diag(cm).astype(float)
    predicted = cm.sum(axis=0).astype(float)
    actual = cm.sum(axis=1).astype(float)
    with np.errstate(divide="ignore", invalid="ignore"):
        precision = np.where(predicted > 0, tp / predicted, 0.0)
        recall = np.where(actual > 0, tp / actual, 0.0)
        denom = precision + recall
        f1 = np.where(denom > 0, 2 * precision * recall / denom, 0.0)
    return precision, recall, f1, actual


def _average(values: np.ndarray, support: np.ndarray, average, labels, pos_label):
    if average is None:
        return values
    if average == "binary":
        if len(labels) != 2:
            raise ValueError("binary averaging requires exactly 2 classes")
        idx = labels.index(pos_label) if pos_label is not None else 1
        return float(values[idx])
    if average == "macro":
        return float(np.mean(values))
    if average == "weighted":
        if support.sum() == 0:
            return 0.0
        return float(np.average(values, weights=support))
    raise ValueError(f"Unknown averaging strategy: {average}")


def precision_score(
    y_true, y_pred, average: Optional[str] = "binary", labels=None, pos_label=None
) -> Union[float, np.ndarray]:
    y_true, y_pred = _check(y_true, y_pred)
    labels = _labels(y_true, y_pred, labels)
    precision, _, _, support = _per_class(confusion_matrix(y_true, y_pred, labels))
    return _average(precision, support, average, labels, pos_label)


def recall_score(
    y_true, y_pred, average: Optional[str] = "binary", labels=None, pos_label=None
) -> Union[float, np.ndarray]:
    y_true, y_pred = _check(y_true, y_pred)
    labels = _labels(y_true, y_pred, labels)
    _, recall, _, support = _per_class(confusion_matrix(y_true, y_pred, labels))
    return _average(recall, support, average, labels, pos_label)


def f1_score(
    y_true, y_pred, average: Optional[str] = "binary", labels=None, pos_label=None
) -> Union[float, np.ndarray]:
    y_true, y_pred = _check(y_true, y_pred)
    labels = _labels(y_true, y_pred, labels)
    _, _, f1, support = _per_class(confusion_matrix(y_true, y_pred, labels))
    return _average(f1, support, average, labels, pos_label)


def cohen_kappa(y_true, y_pred, labels=None) -> float:
    """Agreement between actual and predicted labels beyond chance."""
    cm = confusion_matrix(y_true, y_pred, labels).astype(float)
    n = cm.sum()
    if n == 0:
        return 0.0
    observed = np.trace(cm) / n
    expected = float(np.sum(cm.sum(axis=0) * cm.sum(axis=1))) / n**2
    if expected == 1.0:
        return 1.0 if observed == 1.0 else 0.0
    return float((observed - expected) / (1 - expected))


def classification_report(y_true, y_pred, labels=None) -> pd.DataFrame:
    """Per-class precision, recall, F1 and support, plus macro and weighted rows."""
    y_true, y_pred = _check(y_true, y_pred)
    labels = _labels(y_true, y_pred, labels)
    precision, recall, f1, support = _per_class(confusion_matrix(y_true, y_pred, labels))

    report = pd.DataFrame(
        {"precision": precision, "recall": recall, "f1": f1, "support": support.astype(int)},
        index=[str(label) for label in labels],
    )
    total = int(support.sum())
    report.loc["macro avg"] = [precision.mean(), recall.mean(), f1.mean(), total]
    if total:
        report.loc["weighted avg"] = [
            np.average(precision, weights=support),
            np.average(recall, weights=support),
            np.average(f1, weights=support),
            total,
        ]
    report["support"] = report["support"].astype(int)
    return report


def compute_all_metrics(y_true, y_pred, labels=None) -> Dict[str, float]:
    return {
        "accuracy": accuracy_score(y_true, y_pred),
        "balanced_accuracy": recall_score(y_true, y_pred, average="macro", labels=labels),
        "kappa": cohen_kappa(y_true, y_pred, labels),
        "precision_macro": precision_score(y_true, y_pred, average="macro", labels=labels),
        "recall_macro": recall_score(y_true, y_pred, average="macro", labels=labels),
        "f1_macro": f1_score(y_true, y_pred, average="macro", labels=labels),
    }
