"""Tests for the document-feature matrix."""

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

from stat_tutorials.models.text import DocumentFeatureMatrix


class TestDocumentFeatureMatrix:
    """Tests for building and manipulating a DFM."""

    def test_from_texts(self, corpus_dfm):
        assert corpus_dfm.n_docs == 12
        assert corpus_dfm.docnames[0] == "d00"
        assert corpus_dfm.docvars.loc[0, "sentiment"] == "pos"

    def test_stopwords_removed(self, corpus_dfm):
        assert "and" not in corpus_dfm.features
        assert "great" in corpus_dfm.features

    def test_default_docnames(self):
        dfm = DocumentFeatureMatrix.from_texts(["one text", "another text"])
        assert dfm.docnames == ["text1", "text2"]

    def test_frequencies(self, corpus_dfm):
        tf = dict(zip(corpus_dfm.features, corpus_dfm.term_frequencies()))
        df = dict(zip(corpus_dfm.features, corpus_dfm.doc_frequencies()))
        assert tf["great"] == 6
        assert df["brilliant"] == 4

    def test_trim_min_docfreq(self, corpus_dfm):
        trimmed = corpus_dfm.trim(min_docfreq=6)
        assert trimmed.features == ["awful", "great", "story"]
        assert trimmed.n_docs == corpus_dfm.n_docs

    def test_trim_max_docfreq(self, corpus_dfm):
        trimmed = corpus_dfm.trim(max_docfreq=0.4)
        assert not {"great", "awful", "story", "wonderful", "terrible"} & set(trimmed.features)

    def test_match(self, corpus_dfm):
        """Unknown features become zero columns in the requested order."""
        matched = corpus_dfm.match(["great", "zzz"])
        assert matched.features == ["great", "zzz"]
        assert matched.shape == (12, 2)
        np.testing.assert_array_equal(matched.term_frequencies(), [6, 0])

    def test_weights(self, corpus_dfm):
        prop = corpus_dfm.weight("prop")
        np.testing.assert_allclose(prop.doc_lengths(), 1.0)
        assert corpus_dfm.weight("boolean").matrix.max() == 1
        assert corpus_dfm.weight("tfidf").shape == corpus_dfm.shape

    def test_unknown_weight(self, corpus_dfm):
        with pytest.raises(ValueError):
            corpus_dfm.weight("bm25")

    def test_subset(self, corpus_dfm):
        sub = corpus_dfm.subset([0, 11])
        assert sub.docnames == ["d00", "d11"]
        assert sub.docvars["sentiment"].tolist() == ["pos", "neg"]
        mask = np.array([i < 3 for i in range(12)])
        assert corpus_dfm.subset(mask).n_docs == 3

    def test_group(self, corpus_dfm):
        grouped = corpus_dfm.group("sentiment")
        assert grouped.docnames == ["neg", "pos"]
        great = grouped.features.index("great")
        np.testing.assert_array_equal(grouped.matrix[:, great].toarray().ravel(), [0, 6])

    def test_top_features(self, corpus_dfm):
        assert set(corpus_dfm.top_features(3).index) == {"awful", "great", "story"}

    def test_to_frame(self, corpus_dfm):
        frame = corpus_dfm.to_frame()
        assert frame.shape == corpus_dfm.shape
        assert frame.loc["d00", "great"] == 1

    def test_dimension_checks(self):
        with pytest.raises(ValueError):
            DocumentFeatureMatrix(sparse.csr_matrix(np.ones((2, 2))), ["a"], ["d1", "d2"])
        with pytest.raises(ValueError):
            DocumentFeatureMatrix(
                sparse.csr_matrix(np.ones((2, 2))), ["a", "b"], ["d1", "d2"], pd.DataFrame({"x": [1]})
            )
