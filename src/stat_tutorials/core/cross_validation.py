# cross_validation.py
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .metrics import accuracy_score, f1_score


def stratified_kfold_indices(y, k: int, seed: int = 42) -> List[Tuple[List[int], List[int]]]:
    """Label-stratified k folds; every index lands in exactly one validation fold."""
    y = np.asarray(y)
    if k < 2:
        raise ValueError("k must be at least 2")
    if k > len(y):
        raise ValueError(f"k={k} is larger than the number of samples ({len(y)})")

    rng = np.random.RandomState(seed)
    val_splits: List[List[int]] = [[] for _ in range(k)]
    # deal each shuffled label bucket round-robin so folds keep the class balance
    offset = 0
    for label in sorted(set(y.tolist()), key=str):
        bucket = np.flatnonzero(y == label)
        rng.shuffle(bucket)
        for pos, idx in enumerate(bucket):
            val_splits[(pos + offset) % k].append(int(idx))
        offset += len(bucket)

    all_idx = np.arange(len(y))
    out = []
    for val_idx in val_splits:
        val_idx = sorted(val_idx)
        train_idx = np.setdiff1d(all_idx, val_idx).tolist()
        out.append((train_idx, val_idx))
    return out


def cross_validate(
    factory: Callable[[Dict[str, Any]], Any],
    params: Dict[str, Any],
    dfm,
    y,
    k: int = 5,
    seed: int = 42,
    prepare: Optional[Callable[[Any], Any]] = None,
) -> Dict[str, Any]:
    """
    Refit a text classifier on each fold and score it on the held-out part.

    Args:
        factory: params -> unfitted classifier with fit(dfm, y) / predict(dfm)
        params: Classifier parameters
        dfm: DocumentFeatureMatrix with one row per label
        y: Labels
        k: Number of folds
        seed: Fold assignment seed
        prepare: Optional dfm -> dfm step (e.g. vocabulary trimming) applied
            to each training fold; validation documents are matched to the
            resulting vocabulary by the classifier

    Returns:
        Per-fold scores plus mean and standard deviation of accuracy and macro F1
    """
    y = np.asarray(y)
    folds = []
    for fi, (tr_idx, va_idx) in enumerate(stratified_kfold_indices(y, k, seed), 1):
        train_dfm = dfm.subset(tr_idx)
        if prepare is not None:
            train_dfm = prepare(train_dfm)
        est = factory(params)
        est.fit(train_dfm, y[tr_idx])
        pred = est.predict(dfm.subset(va_idx))
        acc = accuracy_score(y[va_idx], pred)
        f1 = f1_score(y[va_idx], pred, average="macro")
        folds.append(
            {
                "fold": fi,
                "n_val": len(va_idx),
                "n_features": int(train_dfm.n_features),
                "accuracy": acc,
                "f1_macro": f1,
            }
        )

    accs = np.array([f["accuracy"] for f in folds])
    f1s = np.array([f["f1_macro"] for f in folds])
    return {
        "folds": folds,
        "mean_accuracy": float(accs.mean()),
        "std_accuracy": float(accs.std()),
        "mean_f1": float(f1s.mean()),
        "std_f1": float(f1s.std()),
    }
