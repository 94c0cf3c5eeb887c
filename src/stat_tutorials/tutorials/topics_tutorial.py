#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Structural topic model of movie reviews.

reviews -> trimmed document-feature matrix -> K-topic model with genre and
rating as prevalence covariates -> topic labels (prob / FREX / lift / score),
expected topic proportions, covariate effects on prevalence, the most
representative review per topic.
"""
from typing import Any, Dict

from ..core.config import TutorialConfig
from ..core.data import load_source, normalize_text, require_columns
from ..models.text import DocumentFeatureMatrix
from ..models.topics import StructuralTopicModel
from .narration import show, step
from .visualization import export_table, plot_coefficients, plot_topic_prevalence

PREVALENCE = "~ genre + rating"
MAX_ITER = {"fast": 20, "full": 100}


def run(config: TutorialConfig) -> Dict[str, Any]:
    out = config.output_dir("topics")

    step(1, "Loading reviews and building the document-feature matrix")
    reviews = load_source(config.source("reviews"))
    require_columns(reviews, ["text", "genre", "rating"])
    reviews = reviews.dropna(subset=["text"]).reset_index(drop=True)
    texts = reviews["text"].astype(str).tolist()
    docnames = reviews["id"].astype(str).tolist() if "id" in reviews.columns else None
    dfm = DocumentFeatureMatrix.from_texts(
        [normalize_text(t) for t in texts],
        docvars=reviews.drop(columns=["text"]),
        docnames=docnames,
    )
    trimmed = dfm.trim(min_termfreq=2, min_docfreq=2, max_docfreq=0.5)
    # trimming can leave a short review with no terms at all
    keep = [i for i, n in enumerate(trimmed.doc_lengths()) if n > 0]
    if len(keep) < trimmed.n_docs:
        print(f"[data] dropping {trimmed.n_docs - len(keep)} documents left empty after trimming")
        trimmed = trimmed.subset(keep)
        texts = [texts[i] for i in keep]
    print(f"[data] documents={trimmed.n_docs}, features={dfm.n_features} -> {trimmed.n_features} after trimming")

    step(2, f"Fitting a {config.n_topics}-topic model with prevalence {PREVALENCE!r}")
    model = StructuralTopicModel(
        n_topics=config.n_topics,
        prevalence=PREVALENCE,
        max_iter=MAX_ITER["fast" if config.fast else "full"],
        random_state=config.random_state,
    ).fit(trimmed)
    labels = model.label_topics(n=7)
    show(labels, "Topic labels")
    export_table(labels.reset_index().rename(columns={"index": "topic"}), out, "topic_labels")

    proportions = model.topic_proportions()
    show(proportions.to_frame(), "Expected topic proportions")
    plot_topic_prevalence(proportions, labels["prob"], out / "topic_proportions.png")

    by_genre = model.prevalence_by("genre")
    show(by_genre, "Mean topic proportions by genre")
    export_table(by_genre.reset_index(), out, "prevalence_by_genre")

    step(3, "Covariate effects on topic prevalence")
    effects = model.estimate_effect()
    show(effects.set_index(["topic", "term"]), "Effects (OLS on topic proportions)")
    export_table(effects, out, "topic_effects")
    rating = effects[effects["term"] == "rating"].set_index("topic")
    plot_coefficients(rating, out / "rating_effect.png", title="Effect of rating on topic prevalence", drop_intercept=False)

    step(4, "Representative documents and topic correlations")
    thoughts = []
    for k, topic in enumerate(model.topic_names):
        best = model.find_thoughts(texts, topic=k, n=1).iloc[0]
        print(f"[{topic}] ({best['proportion']:.2f}) {best['text'][:100]}")
        thoughts.append({"topic": topic, **best.to_dict()})
    corr = model.topic_correlation()
    show(corr, "Topic correlations")
    export_table(corr.reset_index().rename(columns={"index": "topic"}), out, "topic_correlation")
    print(f"[saved] tables and figures in {out}")

    return {
        "n_docs": int(trimmed.n_docs),
        "n_features": int(trimmed.n_features),
        "labels": labels.reset_index().rename(columns={"index": "topic"}).to_dict(orient="records"),
        "proportions": {k: float(v) for k, v in proportions.items()},
        "effects": effects.to_dict(orient="records"),
        "thoughts": thoughts,
    }
