"""Tests for stratified k-fold splitting and cross-validation."""

import numpy as np
import pytest

from stat_tutorials.core.cross_validation import cross_validate, stratified_kfold_indices
from stat_tutorials.models.naive_bayes import create_nb_factory


class TestStratifiedKFold:
    """Tests for stratified_kfold_indices."""

    def test_partition(self):
        """Every index lands in exactly one validation fold."""
        y = np.array([0] * 10 + [1] * 5)
        folds = stratified_kfold_indices(y, k=5, seed=0)
        val = sorted(i for _, v in folds for i in v)
        assert val == list(range(15))
        for train, v in folds:
            assert set(train).isdisjoint(v)
            assert len(train) + len(v) == 15

    def test_balance(self):
        y = np.array([0] * 10 + [1] * 5)
        for _, v in stratified_kfold_indices(y, k=5, seed=0):
            assert sorted(y[v].tolist()) == [0, 0, 1]

    def test_reproducible(self):
        y = np.array([0, 1] * 6)
        assert stratified_kfold_indices(y, 3, seed=4) == stratified_kfold_indices(y, 3, seed=4)

    @pytest.mark.parametrize("k", [1, 20])
    def test_invalid_k(self, k):
        with pytest.raises(ValueError):
            stratified_kfold_indices(np.zeros(10), k)


class TestCrossValidate:
    """Tests for cross_validate with a naive Bayes classifier."""

    def test_scores(self, corpus, corpus_dfm):
        res = cross_validate(create_nb_factory(), {}, corpus_dfm, corpus["sentiment"], k=3, seed=0)
        assert len(res["folds"]) == 3
        assert sum(f["n_val"] for f in res["folds"]) == len(corpus)
        assert 0.0 <= res["mean_accuracy"] <= 1.0
        # sentiment words are disjoint between the classes
        assert res["mean_accuracy"] == pytest.approx(1.0)

    def test_prepare_sees_training_fold_only(self, corpus, corpus_dfm):
        """The preparation step runs on each training fold, never on the full matrix."""
        seen = []

        def trim(dfm):
            seen.append(dfm.n_docs)
            return dfm.trim(min_docfreq=2)

        res = cross_validate(create_nb_factory(), {}, corpus_dfm, corpus["sentiment"], k=3, seed=0, prepare=trim)
        assert seen == [8, 8, 8]
        folds = stratified_kfold_indices(corpus["sentiment"].to_numpy(), 3, seed=0)
        expected = [corpus_dfm.subset(tr).trim(min_docfreq=2).n_features for tr, _ in folds]
        assert [f["n_features"] for f in res["folds"]] == expected
        assert max(expected) < corpus_dfm.n_features
