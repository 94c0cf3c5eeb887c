"""Tests for the structural topic model workflow."""

import numpy as np
import pytest

from stat_tutorials.models.text import DocumentFeatureMatrix
from stat_tutorials.models.topics import StructuralTopicModel


@pytest.fixture
def fitted(corpus_dfm):
    return StructuralTopicModel(n_topics=2, prevalence="~ rating", max_iter=20, random_state=0).fit(corpus_dfm)


class TestStructuralTopicModel:
    """Tests for fitting and summarising a topic model."""

    def test_distributions_normalised(self, fitted, corpus_dfm):
        np.testing.assert_allclose(fitted.topic_word.sum(axis=1), 1.0)
        np.testing.assert_allclose(fitted.doc_topic.sum(axis=1), 1.0)
        assert fitted.doc_topic.shape == (corpus_dfm.n_docs, 2)
        assert list(fitted.doc_topic.index) == corpus_dfm.docnames
        assert fitted.topic_proportions().sum() == pytest.approx(1.0)

    def test_label_topics(self, fitted):
        labels = fitted.label_topics(n=3)
        assert list(labels.columns) == ["prob", "frex", "lift", "score"]
        assert list(labels.index) == ["Topic 1", "Topic 2"]
        assert all(len(cell.split(", ")) == 3 for cell in labels.values.ravel())

    def test_frex_range(self, fitted, corpus_dfm):
        frex = fitted.frex()
        assert frex.shape == (2, corpus_dfm.n_features)
        assert (frex > 0).all() and (frex <= 1).all()

    def test_top_words(self, fitted):
        top = fitted.top_words(0, n=5)
        assert len(top) == 5
        assert top.is_monotonic_decreasing

    def test_find_thoughts(self, fitted, corpus):
        thoughts = fitted.find_thoughts(corpus["text"].tolist(), topic=1, n=3)
        assert len(thoughts) == 3
        assert thoughts["proportion"].is_monotonic_decreasing
        assert thoughts.loc[0, "text"] in corpus["text"].tolist()

    def test_find_thoughts_length_mismatch(self, fitted):
        with pytest.raises(ValueError):
            fitted.find_thoughts(["only one"], topic=0)

    def test_correlation(self, fitted):
        np.testing.assert_allclose(np.diag(fitted.topic_correlation()), 1.0)

    def test_prevalence_by(self, fitted):
        by_genre = fitted.prevalence_by("genre")
        assert list(by_genre.index) == ["comedy", "drama"]
        np.testing.assert_allclose(by_genre.sum(axis=1), 1.0)

    def test_estimate_effect(self, fitted):
        effects = fitted.estimate_effect()
        assert effects["topic"].tolist() == ["Topic 1", "Topic 1", "Topic 2", "Topic 2"]
        assert effects["term"].tolist() == ["Intercept", "rating"] * 2
        # proportions sum to one, so the rating slopes cancel out
        slopes = effects.loc[effects["term"] == "rating", "estimate"]
        assert slopes.sum() == pytest.approx(0.0, abs=1e-8)

    def test_estimate_effect_single_topic(self, fitted):
        effects = fitted.estimate_effect("~ genre", topics=[1])
        assert set(effects["topic"]) == {"Topic 2"}
        assert "genre[T.drama]" in effects["term"].tolist()


class TestTopicModelErrors:
    """Tests for invalid input."""

    def test_too_few_topics(self):
        with pytest.raises(ValueError):
            StructuralTopicModel(n_topics=1)

    def test_missing_prevalence_column(self, corpus_dfm):
        with pytest.raises(ValueError):
            StructuralTopicModel(n_topics=2, prevalence="~ year").fit(corpus_dfm)

    def test_empty_document(self):
        dfm = DocumentFeatureMatrix.from_texts(["the and of", "great film here", "awful film there"])
        with pytest.raises(ValueError):
            StructuralTopicModel(n_topics=2).fit(dfm)

    def test_not_fitted(self):
        with pytest.raises(RuntimeError):
            StructuralTopicModel(n_topics=2).topic_proportions()
