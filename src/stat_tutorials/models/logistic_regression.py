# logistic_regression.py
from typing import Any, Dict

import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import TfidfTransformer
from sklearn.linear_model import LogisticRegression

from .text import DocumentFeatureMatrix


class LogisticTextClassifier:
    """Weighted DFM + logistic regression, used as a comparison for naive Bayes.

    params:
      - weighting: count | prop | boolean | tfidf, applied after matching
      - C, solver, max_iter: LogisticRegression parameters
    """

    def __init__(self, weighting: str = "tfidf", C: float = 1.0, solver: str = "liblinear", max_iter: int = 500):
        self.weighting = weighting
        self.C = C
        self.solver = solver
        self.max_iter = max_iter
        self.model = None
        self.features = None
        self.tfidf = None

    def _matrix(self, dfm: DocumentFeatureMatrix):
        if self.features is not None:
            dfm = dfm.match(self.features)
        return dfm.weight(self.weighting, transformer=self.tfidf).matrix

    def fit(self, dfm: DocumentFeatureMatrix, y):
        y = np.asarray(y)
        if len(y) != dfm.n_docs:
            raise ValueError(f"{len(y)} labels for {dfm.n_docs} documents")
        self.features = None
        self.tfidf = None
        if self.weighting == "tfidf":
            # IDF weights come from the training documents only
            self.tfidf = TfidfTransformer(norm=None, smooth_idf=True).fit(dfm.matrix.astype(float))
        X = self._matrix(dfm)
        cls = LogisticRegression(C=self.C, solver=self.solver, max_iter=self.max_iter)
        cls.fit(X, y)
        self.model = cls
        self.features = list(dfm.features)
        return self

    @property
    def classes_(self):
        if self.model is None:
            raise RuntimeError("Classifier is not fitted yet")
        return self.model.classes_

    def predict(self, dfm: DocumentFeatureMatrix) -> np.ndarray:
        if self.model is None:
            raise RuntimeError("Classifier is not fitted yet")
        return self.model.predict(self._matrix(dfm))

    def predict_proba(self, dfm: DocumentFeatureMatrix) -> pd.DataFrame:
        if self.model is None:
            raise RuntimeError("Classifier is not fitted yet")
        proba = self.model.predict_proba(self._matrix(dfm))
        return pd.DataFrame(proba, index=dfm.docnames, columns=self.classes_)

    def top_features(self, n: int = 10) -> pd.DataFrame:
        """Largest positive and negative coefficients (binary problems)."""
        if self.model is None:
            raise RuntimeError("Classifier is not fitted yet")
        coef = pd.Series(self.model.coef_[0], index=self.features)
        neg, pos = self.classes_[0], self.classes_[-1]
        rows = [
            {"class": pos, "feature": f, "score": float(s)}
            for f, s in coef.sort_values(ascending=False, kind="mergesort").head(n).items()
        ]
        rows += [
            {"class": neg, "feature": f, "score": float(s)}
            for f, s in coef.sort_values(ascending=True, kind="mergesort").head(n).items()
        ]
        return pd.DataFrame(rows)


def create_lr_factory():
    def factory(params: Dict[str, Any]):
        return LogisticTextClassifier(**params)

    return factory
