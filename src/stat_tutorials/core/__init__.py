# Shared building blocks: configuration, data, formulas, metrics, CV splits

from .config import DATA_SOURCES, TUTORIAL_NAMES, TutorialConfig
from .data import (
    load_csv,
    load_jsonl,
    load_bundled,
    load_statsmodels_dataset,
    load_source,
    require_columns,
    normalize_text,
    train_test_split_rows,
    stratified_sample,
    group_summary,
    to_wide,
    simulate_sleepstudy,
)
from .formula import MixedFormula, RandomTerm, parse_mixed_formula
from .metrics import (
    accuracy_score,
    precision_score,
    recall_score,
    f1_score,
    cohen_kappa,
    confusion_matrix,
    classification_report,
    compute_all_metrics,
)
from .cross_validation import stratified_kfold_indices, cross_validate

__all__ = [
    "DATA_SOURCES",
    "TUTORIAL_NAMES",
    "TutorialConfig",
    "load_csv",
    "load_jsonl",
    "load_bundled",
    "load_statsmodels_dataset",
    "load_source",
    "require_columns",
    "normalize_text",
    "train_test_split_rows",
    "stratified_sample",
    "group_summary",
    "to_wide",
    "simulate_sleepstudy",
    "MixedFormula",
    "RandomTerm",
    "parse_mixed_formula",
    "accuracy_score",
    "precision_score",
    "recall_score",
    "f1_score",
    "cohen_kappa",
    "confusion_matrix",
    "classification_report",
    "compute_all_metrics",
    "stratified_kfold_indices",
    "cross_validate",
]
