# naive_bayes.py
from typing import Any, Dict

import numpy as np
import pandas as pd
from sklearn.naive_bayes import BernoulliNB, MultinomialNB

from .text import DocumentFeatureMatrix

PRIORS = ("uniform", "docfreq", "termfreq")
DISTRIBUTIONS = ("multinomial", "bernoulli")


class NaiveBayesTextClassifier:
    """Bag-of-words naive Bayes on a DocumentFeatureMatrix.

    params:
      - smoothing:    additive (Laplace) smoothing of word counts
      - prior:        uniform | docfreq (share of training documents) |
                      termfreq (share of training tokens)
      - distribution: multinomial (counts) | bernoulli (presence/absence)

    Test documents are matched to the training vocabulary before scoring, so
    words never seen in training are ignored.
    """

    def __init__(self, smoothing: float = 1.0, prior: str = "uniform", distribution: str = "multinomial"):
        if prior not in PRIORS:
            raise ValueError(f"Unknown prior: {prior!r}. Choose from {PRIORS}")
        if distribution not in DISTRIBUTIONS:
            raise ValueError(f"Unknown distribution: {distribution!r}. Choose from {DISTRIBUTIONS}")
        self.smoothing = smoothing
        self.prior = prior
        self.distribution = distribution
        self.model = None
        self.features = None

    def _class_prior(self, dfm: DocumentFeatureMatrix, y: np.ndarray, classes: np.ndarray):
        if self.prior == "uniform":
            return np.full(len(classes), 1.0 / len(classes))
        if self.prior == "docfreq":
            return np.array([np.mean(y == c) for c in classes])
        lengths = dfm.doc_lengths()
        totals = np.array([lengths[y == c].sum() for c in classes], dtype=float)
        return totals / totals.sum()

    def fit(self, dfm: DocumentFeatureMatrix, y):
        y = np.asarray(y)
        if len(y) != dfm.n_docs:
            raise ValueError(f"{len(y)} labels for {dfm.n_docs} documents")
        classes = np.unique(y)
        if len(classes) < 2:
            raise ValueError("Need at least two classes to train a classifier")
        prior = self._class_prior(dfm, y, classes)
        if self.distribution == "multinomial":
            cls = MultinomialNB(alpha=self.smoothing, class_prior=prior)
        else:
            cls = BernoulliNB(alpha=self.smoothing, binarize=0.0, class_prior=prior)
        cls.fit(dfm.matrix, y)
        self.model = cls
        self.features = list(dfm.features)
        return self

    def _matrix(self, dfm: DocumentFeatureMatrix):
        if self.model is None:
            raise RuntimeError("Classifier is not fitted yet")
        return dfm.match(self.features).matrix

    @property
    def classes_(self):
        if self.model is None:
            raise RuntimeError("Classifier is not fitted yet")
        return self.model.classes_

    def predict(self, dfm: DocumentFeatureMatrix) -> np.ndarray:
        X = self._matrix(dfm)
        return self.model.predict(X)

    def predict_proba(self, dfm: DocumentFeatureMatrix) -> pd.DataFrame:
        X = self._matrix(dfm)
        proba = self.model.predict_proba(X)
        return pd.DataFrame(proba, index=dfm.docnames, columns=self.classes_)

    def feature_scores(self) -> pd.DataFrame:
        """P(class | word): posterior class probability of a document made of that word alone."""
        if self.model is None:
            raise RuntimeError("Classifier is not fitted yet")
        log_joint = self.model.feature_log_prob_ + self.model.class_log_prior_[:, None]
        log_joint -= log_joint.max(axis=0, keepdims=True)
        joint = np.exp(log_joint)
        posterior = joint / joint.sum(axis=0, keepdims=True)
        return pd.DataFrame(posterior.T, index=self.features, columns=self.classes_)

    def top_features(self, n: int = 10) -> pd.DataFrame:
        """Most class-indicative words, long format: class, feature, score."""
        scores = self.feature_scores()
        rows = []
        for c in scores.columns:
            top = scores[c].sort_values(ascending=False, kind="mergesort").head(n)
            rows.extend({"class": c, "feature": f, "score": float(s)} for f, s in top.items())
        return pd.DataFrame(rows)


def create_nb_factory():
    def factory(params: Dict[str, Any]):
        return NaiveBayesTextClassifier(**params)

    return factory
