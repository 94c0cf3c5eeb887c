#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Supervised text classification of movie reviews.

reviews (JSON-lines) -> normalised text -> document-feature matrix ->
stratified train/test split -> naive Bayes (with a logistic regression
comparison) -> confusion matrix, metrics, most predictive words, k-fold
cross-validation on the whole corpus.
"""
from typing import Any, Dict

import pandas as pd

from ..core.config import TutorialConfig
from ..core.cross_validation import cross_validate
from ..core.data import load_source, normalize_text, require_columns, train_test_split_rows
from ..core.metrics import classification_report, compute_all_metrics, confusion_matrix
from ..models.models_registry import get_classifier_factory
from ..models.text import DocumentFeatureMatrix
from .narration import show, step
from .visualization import export_table, plot_confusion_matrix, plot_top_features

CLASSIFIERS = ("nb", "logreg")
LABEL_COL = "sentiment"


def build_dfm(df: pd.DataFrame) -> DocumentFeatureMatrix:
    docvars = df.drop(columns=["text", "clean_text"], errors="ignore")
    docnames = df["id"].astype(str).tolist() if "id" in df.columns else None
    return DocumentFeatureMatrix.from_texts(df["clean_text"], docvars=docvars, docnames=docnames)


def run(config: TutorialConfig) -> Dict[str, Any]:
    out = config.output_dir("textclass")

    step(1, "Loading and preparing reviews")
    reviews = load_source(config.source("reviews"))
    require_columns(reviews, ["text", LABEL_COL])
    reviews = reviews.dropna(subset=["text", LABEL_COL]).reset_index(drop=True)
    reviews["clean_text"] = reviews["text"].map(normalize_text)
    print(f"[data] rows={len(reviews)}, balance={reviews[LABEL_COL].value_counts().to_dict()}")

    train, test = train_test_split_rows(
        reviews, train_fraction=config.train_fraction, random_state=config.random_state, stratify=LABEL_COL
    )
    train_dfm = build_dfm(train).trim(min_docfreq=2)
    test_dfm = build_dfm(test)
    print(f"[data] train={len(train)}, test={len(test)}, features={train_dfm.n_features}")
    show(train_dfm.top_features(10).to_frame("count"), "Most frequent training features")

    step(2, "Training and evaluating classifiers")
    y_train = train[LABEL_COL].to_numpy()
    y_test = test[LABEL_COL].to_numpy()
    labels = sorted(reviews[LABEL_COL].unique())

    results: Dict[str, Any] = {}
    summary_rows = []
    for name in CLASSIFIERS:
        factory, params = get_classifier_factory(name)
        model = factory(params).fit(train_dfm, y_train)
        pred = model.predict(test_dfm)
        metrics = compute_all_metrics(y_test, pred, labels=labels)
        cm = confusion_matrix(y_test, pred, labels=labels)
        report = classification_report(y_test, pred, labels=labels)
        top = model.top_features(10)

        print(f"\n[model] {name}: accuracy={metrics['accuracy']:.3f}, f1_macro={metrics['f1_macro']:.3f}")
        show(pd.DataFrame(cm, index=labels, columns=labels), "Confusion matrix (rows = actual)")
        export_table(report.reset_index().rename(columns={"index": "class"}), out, f"{name}_report")
        export_table(top, out, f"{name}_top_features")
        plot_confusion_matrix(cm, labels, out / f"{name}_confusion_matrix.png", title=f"{name} confusion matrix")
        plot_top_features(top, out / f"{name}_top_features.png", title=f"{name}: most predictive words")

        summary_rows.append({"model": name, **metrics})
        results[name] = {
            "params": params,
            "metrics": metrics,
            "confusion_matrix": cm.tolist(),
            "top_features": top.to_dict(orient="records"),
        }

    step(3, "Cross-validation on the full corpus")
    k = 3 if config.fast else 5
    full_dfm = build_dfm(reviews)
    y_all = reviews[LABEL_COL].to_numpy()
    for name in CLASSIFIERS:
        factory, params = get_classifier_factory(name)
        cv = cross_validate(
            factory,
            params,
            full_dfm,
            y_all,
            k=k,
            seed=config.random_state,
            prepare=lambda d: d.trim(min_docfreq=2),
        )
        print(f"[cv] {name}: accuracy={cv['mean_accuracy']:.3f} ± {cv['std_accuracy']:.3f}, f1={cv['mean_f1']:.3f}")
        results[name]["cross_validation"] = cv
        for row in summary_rows:
            if row["model"] == name:
                row["cv_accuracy"] = cv["mean_accuracy"]

    summary = pd.DataFrame(summary_rows)
    show(summary.set_index("model"), "Summary")
    export_table(summary, out, "model_summary")
    print(f"[saved] tables and figures in {out}")

    results["n_train"] = int(len(train))
    results["n_test"] = int(len(test))
    results["n_features"] = int(train_dfm.n_features)
    return results
