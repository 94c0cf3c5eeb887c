# text.py
"""
Document-feature matrix (DFM): sparse term counts with their feature names,
document names and document-level variables kept in step.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer, TfidfTransformer

WEIGHTS = ("count", "prop", "boolean", "tfidf")


@dataclass
class DocumentFeatureMatrix:
    matrix: sparse.csr_matrix
    features: List[str]
    docnames: List[str]
    docvars: pd.DataFrame = field(default_factory=pd.DataFrame)

    def __post_init__(self):
        self.matrix = sparse.csr_matrix(self.matrix)
        n_docs, n_feats = self.matrix.shape
        if len(self.features) != n_feats:
            raise ValueError(f"{len(self.features)} feature names for {n_feats} columns")
        if len(self.docnames) != n_docs:
            raise ValueError(f"{len(self.docnames)} document names for {n_docs} rows")
        if self.docvars.empty:
            self.docvars = pd.DataFrame(index=range(n_docs))
        elif len(self.docvars) != n_docs:
            raise ValueError(f"docvars has {len(self.docvars)} rows for {n_docs} documents")
        self.docvars = self.docvars.reset_index(drop=True)

    @classmethod
    def from_texts(
        cls,
        texts: Sequence[str],
        docvars: Optional[pd.DataFrame] = None,
        docnames: Optional[Sequence[str]] = None,
        lowercase: bool = True,
        remove_stopwords: bool = True,
        ngram_range=(1, 1),
        min_token_length: int = 2,
    ) -> "DocumentFeatureMatrix":
        """Tokenise raw texts into a term-count matrix."""
        texts = [str(t) for t in texts]
        vectorizer = CountVectorizer(
            lowercase=lowercase,
            stop_words="english" if remove_stopwords else None,
            ngram_range=tuple(ngram_range),
            token_pattern=rf"(?u)\b[^\W\d_]{{{min_token_length},}}\b",
        )
        X = vectorizer.fit_transform(texts)
        names = list(docnames) if docnames is not None else [f"text{i + 1}" for i in range(len(texts))]
        return cls(
            matrix=X.tocsr(),
            features=vectorizer.get_feature_names_out().tolist(),
            docnames=names,
            docvars=docvars.copy() if docvars is not None else pd.DataFrame(),
        )

    @property
    def shape(self):
        return self.matrix.shape

    @property
    def n_docs(self) -> int:
        return self.matrix.shape[0]

    @property
    def n_features(self) -> int:
        return self.matrix.shape[1]

    def _with(self, matrix, features=None, rows=None) -> "DocumentFeatureMatrix":
        docnames = self.docnames if rows is None else [self.docnames[i] for i in rows]
        docvars = self.docvars if rows is None else self.docvars.iloc[rows]
        return DocumentFeatureMatrix(
            matrix=matrix,
            features=list(self.features if features is None else features),
            docnames=list(docnames),
            docvars=docvars.copy(),
        )

    def term_frequencies(self) -> np.ndarray:
        return np.asarray(self.matrix.sum(axis=0)).ravel()

    def doc_frequencies(self) -> np.ndarray:
        return np.asarray((self.matrix > 0).sum(axis=0)).ravel()

    def doc_lengths(self) -> np.ndarray:
        return np.asarray(self.matrix.sum(axis=1)).ravel()

    def trim(
        self,
        min_termfreq: int = 1,
        min_docfreq: int = 1,
        max_docfreq: Optional[float] = None,
    ) -> "DocumentFeatureMatrix":
        """
        Drop rare (and optionally very common) features.

        max_docfreq below 1 is read as a share of documents, otherwise as a count.
        """
        keep = (self.term_frequencies() >= min_termfreq) & (self.doc_frequencies() >= min_docfreq)
        if max_docfreq is not None:
            limit = max_docfreq * self.n_docs if max_docfreq < 1 else max_docfreq
            keep &= self.doc_frequencies() <= limit
        cols = np.flatnonzero(keep)
        return self._with(self.matrix[:, cols], [self.features[i] for i in cols])

    def match(self, features: Sequence[str]) -> "DocumentFeatureMatrix":
        """Re-index columns to ``features``; unseen features become zero columns."""
        position = {f: i for i, f in enumerate(self.features)}
        src, dst = [], []
        for j, f in enumerate(features):
            i = position.get(f)
            if i is not None:
                src.append(i)
                dst.append(j)
        selector = sparse.csr_matrix(
            (np.ones(len(src), dtype=self.matrix.dtype), (src, dst)),
            shape=(self.n_features, len(features)),
        )
        return self._with(self.matrix @ selector, features)

    def weight(self, scheme: str = "count", transformer=None) -> "DocumentFeatureMatrix":
        """
        Re-weight the counts.

        ``transformer`` is an already fitted ``TfidfTransformer`` whose IDF
        weights are applied instead of learning new ones from this matrix.
        """
        if scheme not in WEIGHTS:
            raise ValueError(f"Unknown weighting scheme: {scheme!r}. Choose from {WEIGHTS}")
        X = self.matrix.astype(float)
        if scheme == "prop":
            lengths = self.doc_lengths().astype(float)
            lengths[lengths == 0] = 1.0
            X = sparse.diags(1.0 / lengths) @ X
        elif scheme == "boolean":
            X = (X > 0).astype(float)
        elif scheme == "tfidf":
            if transformer is None:
                transformer = TfidfTransformer(norm=None, smooth_idf=True).fit(X)
            X = transformer.transform(X)
        return self._with(sparse.csr_matrix(X))

    def subset(self, rows: Iterable) -> "DocumentFeatureMatrix":
        """Keep the given rows: integer positions or a boolean mask."""
        rows = np.asarray(list(rows) if not isinstance(rows, np.ndarray) else rows)
        if rows.dtype == bool:
            rows = np.flatnonzero(rows)
        rows = rows.astype(int).tolist()
        return self._with(self.matrix[rows], rows=rows)

    def group(self, by: str) -> "DocumentFeatureMatrix":
        """Sum documents sharing a value of the docvar ``by``."""
        if by not in self.docvars.columns:
            raise ValueError(f"Unknown docvar: {by!r}")
        codes, levels = pd.factorize(self.docvars[by], sort=True)
        indicator = sparse.csr_matrix(
            (np.ones(self.n_docs), (codes, np.arange(self.n_docs))),
            shape=(len(levels), self.n_docs),
        )
        return DocumentFeatureMatrix(
            matrix=indicator @ self.matrix,
            features=list(self.features),
            docnames=[str(v) for v in levels],
            docvars=pd.DataFrame({by: list(levels)}),
        )

    def top_features(self, n: int = 10) -> pd.Series:
        freq = pd.Series(self.term_frequencies(), index=self.features)
        return freq.sort_values(ascending=False, kind="mergesort").head(n)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.matrix.toarray(), index=self.docnames, columns=self.features)
