"""Shared pytest fixtures for all tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from stat_tutorials.core.config import TutorialConfig
from stat_tutorials.core.data import load_bundled, simulate_sleepstudy
from stat_tutorials.models.text import DocumentFeatureMatrix

POSITIVE = [
    "great film with brilliant acting and a wonderful story",
    "wonderful cast, great script, brilliant direction",
    "a brilliant and moving story, great performances",
    "loved it, wonderful music and great acting",
    "great fun, brilliant jokes and a wonderful ending",
    "superb film, great story and wonderful characters",
]
NEGATIVE = [
    "boring film with awful acting and a terrible story",
    "terrible script, awful direction, boring plot",
    "an awful and dull story, terrible performances",
    "hated it, boring music and awful acting",
    "dull jokes, terrible pacing and an awful ending",
    "awful film, boring story and terrible characters",
]


@pytest.fixture
def sleep() -> pd.DataFrame:
    """R's sleep data: extra hours of sleep, two drugs, ten patients."""
    return load_bundled("sleep")


@pytest.fixture
def plant_growth() -> pd.DataFrame:
    """R's PlantGrowth data: weight under ctrl, trt1 and trt2."""
    return load_bundled("plant_growth")


@pytest.fixture
def sleepstudy() -> pd.DataFrame:
    return simulate_sleepstudy(random_state=1)


@pytest.fixture
def corpus() -> pd.DataFrame:
    """Twelve short reviews, six per sentiment."""
    texts = POSITIVE + NEGATIVE
    return pd.DataFrame(
        {
            "id": [f"d{i:02d}" for i in range(len(texts))],
            "text": texts,
            "sentiment": ["pos"] * len(POSITIVE) + ["neg"] * len(NEGATIVE),
            "genre": ["drama", "comedy"] * (len(texts) // 2),
            "rating": np.r_[np.full(len(POSITIVE), 8), np.full(len(NEGATIVE), 3)],
        }
    )


@pytest.fixture
def corpus_dfm(corpus) -> DocumentFeatureMatrix:
    return DocumentFeatureMatrix.from_texts(
        corpus["text"],
        docvars=corpus[["sentiment", "genre", "rating"]],
        docnames=corpus["id"],
    )


@pytest.fixture
def config(tmp_path) -> TutorialConfig:
    """Fast configuration writing into a temporary results directory."""
    return TutorialConfig(results_dir=tmp_path / "results", fast=True)
