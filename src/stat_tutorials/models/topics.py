#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Structural topic model workflow on a document-feature matrix.

Topic inference is delegated to scikit-learn's LatentDirichletAllocation
(variational Bayes). Document metadata enter through the prevalence formula:
estimate_effect() regresses each topic's document proportions on the
covariates, which is how covariate effects on topic prevalence are reported.

Reported quantities:
- topic_word (beta): K x V word distributions, rows sum to 1
- doc_topic (theta): D x K topic proportions, rows sum to 1
- topic labels by highest probability, FREX, lift and score
- representative documents, topic correlations, covariate effects
"""

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from scipy.stats import rankdata
from sklearn.decomposition import LatentDirichletAllocation

from .linear import coefficient_table
from .text import DocumentFeatureMatrix

PROPORTION_COL = "topic_proportion"


class StructuralTopicModel:
    """
    Topic model with optional document-level prevalence covariates.

    Args:
        n_topics: Number of topics K
        prevalence: One-sided formula over docvars, e.g. ``"~ genre + rating"``
        max_iter: Variational EM iterations
        random_state: Seed for the topic initialisation
        doc_topic_prior / topic_word_prior: Dirichlet priors (default 1/K)
    """

    def __init__(
        self,
        n_topics: int = 4,
        prevalence: Optional[str] = None,
        max_iter: int = 50,
        random_state: int = 42,
        doc_topic_prior: Optional[float] = None,
        topic_word_prior: Optional[float] = None,
    ):
        if n_topics < 2:
            raise ValueError("n_topics must be at least 2")
        self.n_topics = n_topics
        self.prevalence = prevalence
        self.max_iter = max_iter
        self.random_state = random_state
        self.doc_topic_prior = doc_topic_prior
        self.topic_word_prior = topic_word_prior

        self.lda = None
        self.features: List[str] = []
        self.docnames: List[str] = []
        self.docvars = pd.DataFrame()
        self.theta = None
        self.beta = None
        self.word_freq = None

    @property
    def topic_names(self) -> List[str]:
        return [f"Topic {k + 1}" for k in range(self.n_topics)]

    def _check_fitted(self):
        if self.theta is None:
            raise RuntimeError("Topic model is not fitted yet")

    def fit(self, dfm: DocumentFeatureMatrix) -> "StructuralTopicModel":
        lengths = dfm.doc_lengths()
        if (lengths == 0).any():
            empty = [dfm.docnames[i] for i in np.flatnonzero(lengths == 0)]
            raise ValueError(f"Documents without any terms: {empty[:5]}")
        if self.prevalence is not None:
            missing = [c for c in _formula_columns(self.prevalence) if c not in dfm.docvars.columns]
            if missing:
                raise ValueError(f"Prevalence covariates missing from docvars: {missing}")

        self.lda = LatentDirichletAllocation(
            n_components=self.n_topics,
            learning_method="batch",
            max_iter=self.max_iter,
            random_state=self.random_state,
            doc_topic_prior=self.doc_topic_prior,
            topic_word_prior=self.topic_word_prior,
        )
        theta = self.lda.fit_transform(dfm.matrix)
        self.theta = theta / theta.sum(axis=1, keepdims=True)
        components = self.lda.components_
        self.beta = components / components.sum(axis=1, keepdims=True)

        counts = dfm.term_frequencies().astype(float)
        self.word_freq = counts / counts.sum()
        self.features = list(dfm.features)
        self.docnames = list(dfm.docnames)
        self.docvars = dfm.docvars.copy()
        return self

    @property
    def topic_word(self) -> pd.DataFrame:
        self._check_fitted()
        return pd.DataFrame(self.beta, index=self.topic_names, columns=self.features)

    @property
    def doc_topic(self) -> pd.DataFrame:
        self._check_fitted()
        return pd.DataFrame(self.theta, index=self.docnames, columns=self.topic_names)

    def topic_proportions(self) -> pd.Series:
        """Expected share of the corpus assigned to each topic."""
        self._check_fitted()
        return pd.Series(self.theta.mean(axis=0), index=self.topic_names, name="proportion")

    def frex(self, weight: float = 0.5) -> np.ndarray:
        """Harmonic mean of within-topic ECDF ranks of exclusivity and frequency."""
        self._check_fitted()
        exclusivity = self.beta / self.beta.sum(axis=0, keepdims=True)
        v = self.beta.shape[1]
        excl_rank = rankdata(exclusivity, method="max", axis=1) / v
        freq_rank = rankdata(self.beta, method="max", axis=1) / v
        return 1.0 / (weight / excl_rank + (1 - weight) / freq_rank)

    def label_topics(self, n: int = 7, frex_weight: float = 0.5) -> pd.DataFrame:
        self._check_fitted()
        log_beta = np.log(self.beta)
        measures = {
            "prob": self.beta,
            "frex": self.frex(frex_weight),
            "lift": self.beta / self.word_freq[None, :],
            "score": self.beta * (log_beta - log_beta.mean(axis=0, keepdims=True)),
        }
        features = np.asarray(self.features)
        table = {}
        for name, values in measures.items():
            order = np.argsort(-values, axis=1, kind="stable")[:, :n]
            table[name] = [", ".join(features[row]) for row in order]
        return pd.DataFrame(table, index=self.topic_names)

    def top_words(self, topic: int, n: int = 10) -> pd.Series:
        """Highest-probability words of a topic (0-based index)."""
        return self.topic_word.iloc[topic].sort_values(ascending=False, kind="mergesort").head(n)

    def find_thoughts(self, texts: Sequence[str], topic: int, n: int = 3) -> pd.DataFrame:
        """Documents with the highest proportion of ``topic`` (0-based index)."""
        self._check_fitted()
        if len(texts) != len(self.docnames):
            raise ValueError(f"{len(texts)} texts for {len(self.docnames)} documents")
        order = np.argsort(-self.theta[:, topic], kind="stable")[:n]
        return pd.DataFrame(
            {
                "document": [self.docnames[i] for i in order],
                "proportion": self.theta[order, topic],
                "text": [texts[i] for i in order],
            }
        )

    def topic_correlation(self) -> pd.DataFrame:
        self._check_fitted()
        return pd.DataFrame(
            np.corrcoef(self.theta, rowvar=False), index=self.topic_names, columns=self.topic_names
        )

    def prevalence_by(self, covariate: str) -> pd.DataFrame:
        """Mean topic proportions per level of a categorical docvar."""
        self._check_fitted()
        if covariate not in self.docvars.columns:
            raise ValueError(f"Unknown docvar: {covariate!r}")
        frame = pd.DataFrame(self.theta, columns=self.topic_names)
        frame[covariate] = self.docvars[covariate].values
        return frame.groupby(covariate).mean()

    def estimate_effect(
        self,
        formula: Optional[str] = None,
        topics: Optional[Sequence[int]] = None,
        conf_level: float = 0.95,
    ) -> pd.DataFrame:
        """
        Regress topic proportions on document metadata, one OLS fit per topic.

        Args:
            formula: One-sided formula, defaults to the prevalence formula
            topics: 0-based topic indices, default all
            conf_level: Confidence level of the coefficient intervals

        Returns:
            Long coefficient table with a ``topic`` column
        """
        self._check_fitted()
        formula = formula or self.prevalence
        if not formula:
            raise ValueError("No covariate formula given and the model has no prevalence formula")
        rhs = formula.split("~", 1)[-1].strip()
        topics = range(self.n_topics) if topics is None else topics

        data = self.docvars.copy()
        tables = []
        for k in topics:
            data[PROPORTION_COL] = self.theta[:, k]
            result = smf.ols(f"{PROPORTION_COL} ~ {rhs}", data=data).fit()
            table = coefficient_table(result, conf_level).reset_index()
            table.insert(0, "topic", self.topic_names[k])
            tables.append(table)
        return pd.concat(tables, ignore_index=True)


def _formula_columns(formula: str) -> List[str]:
    rhs = formula.split("~", 1)[-1]
    names = []
    for term in rhs.replace("*", "+").replace(":", "+").split("+"):
        term = term.strip()
        if term.startswith("C(") and term.endswith(")"):
            term = term[2:-1].split(",")[0].strip()
        if term and term not in ("0", "1", "-1") and term.isidentifier():
            names.append(term)
    return names
