"""Tests for dataset loading and reshaping."""

import gzip
import json

import pandas as pd
import pytest

from stat_tutorials.core.config import DATA_SOURCES, TutorialConfig
from stat_tutorials.core.data import (
    group_summary,
    load_bundled,
    load_source,
    normalize_text,
    require_columns,
    simulate_sleepstudy,
    stratified_sample,
    to_wide,
    train_test_split_rows,
)


class TestLoading:
    """Tests for load_source and friends."""

    def test_bundled_sleep(self):
        """Bundled sleep data has 20 rows and the expected columns."""
        df = load_source("bundled:sleep")
        assert len(df) == 20
        assert {"extra", "group", "ID"} <= set(df.columns)

    def test_bundled_reviews(self):
        """Bundled reviews are balanced JSON-lines records."""
        df = load_bundled("reviews")
        assert len(df) == 60
        assert df["sentiment"].value_counts().to_dict() == {"pos": 30, "neg": 30}

    def test_statsmodels_dataset(self):
        df = load_source("statsmodels:spector")
        assert len(df) == 32
        assert {"GRADE", "GPA", "TUCE", "PSI"} <= set(df.columns)

    def test_local_csv(self, tmp_path):
        path = tmp_path / "t.csv"
        pd.DataFrame({"a": [1, 2]}).to_csv(path, index=False)
        assert load_source(str(path))["a"].tolist() == [1, 2]

    def test_local_gzip_jsonl(self, tmp_path):
        """gzip compression is inferred from the suffix."""
        path = tmp_path / "docs.jsonl.gz"
        with gzip.open(path, "wt", encoding="utf-8") as f:
            for i in range(3):
                f.write(json.dumps({"id": i, "text": f"doc {i}"}) + "\n")
        df = load_source(str(path))
        assert df["id"].tolist() == [0, 1, 2]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_source(str(tmp_path / "nope.csv"))

    def test_unknown_bundled(self):
        with pytest.raises(ValueError):
            load_source("bundled:unknown")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            load_source("data.parquet")

    def test_simulated_source(self):
        """simulate:<name> draws the dataset with the given seed."""
        df = load_source("simulate:sleepstudy", random_state=3)
        assert df.equals(simulate_sleepstudy(random_state=3))
        with pytest.raises(ValueError, match="Unknown simulated dataset"):
            load_source("simulate:cbpp")


class TestConfig:
    """Tests for TutorialConfig."""

    def test_default_sources(self):
        cfg = TutorialConfig()
        assert cfg.source("sleep") == DATA_SOURCES["sleep"]

    def test_override_source(self):
        cfg = TutorialConfig(sleep_source="my.csv")
        assert cfg.source("sleep") == "my.csv"

    def test_sleepstudy_defaults_to_simulation(self):
        assert TutorialConfig().source("sleepstudy") == "simulate:sleepstudy"
        assert TutorialConfig(sleepstudy_source="sleepstudy.csv").source("sleepstudy") == "sleepstudy.csv"

    def test_invalid_fraction(self):
        with pytest.raises(ValueError):
            TutorialConfig(train_fraction=1.5)

    def test_output_dir_created(self, tmp_path):
        cfg = TutorialConfig(results_dir=tmp_path)
        assert cfg.output_dir("glm").is_dir()


class TestReshaping:
    """Tests for splitting, sampling and summarising."""

    def test_require_columns(self):
        with pytest.raises(ValueError, match="missing"):
            require_columns(pd.DataFrame({"a": [1]}), ["a", "missing"])

    def test_split_is_partition(self, corpus):
        train, test = train_test_split_rows(corpus, 0.5, random_state=3, stratify="sentiment")
        assert len(train) + len(test) == len(corpus)
        assert set(train.index).isdisjoint(test.index)
        assert train["sentiment"].value_counts().to_dict() == {"pos": 3, "neg": 3}

    def test_split_reproducible(self, corpus):
        a, _ = train_test_split_rows(corpus, 0.5, random_state=7)
        b, _ = train_test_split_rows(corpus, 0.5, random_state=7)
        assert a.index.tolist() == b.index.tolist()

    def test_split_with_duplicate_index(self):
        """Rows sharing an index label still land in exactly one part."""
        half = pd.DataFrame({"x": range(10), "label": ["a", "b"] * 5})
        df = pd.concat([half, half.assign(x=half["x"] + 10)])
        for stratify in (None, "label"):
            train, test = train_test_split_rows(df, 0.5, random_state=1, stratify=stratify)
            assert len(train) == 10
            assert len(test) == 10
            assert sorted(train["x"].tolist() + test["x"].tolist()) == list(range(20))

    def test_stratified_sample(self, corpus):
        df = stratified_sample(corpus, "sentiment", n_per_class=2)
        assert df["sentiment"].value_counts().to_dict() == {"pos": 2, "neg": 2}

    def test_group_summary(self, sleep):
        summary = group_summary(sleep, "extra", "group").set_index("group")
        assert summary.loc[1, "mean"] == pytest.approx(0.75)
        assert summary.loc[2, "mean"] == pytest.approx(2.33)
        assert summary.loc[1, "n"] == 10

    def test_to_wide(self, sleep):
        wide = to_wide(sleep, index="ID", columns="group", values="extra")
        assert list(wide.columns) == ["ID", "1", "2"]
        assert len(wide) == 10

    def test_normalize_text(self):
        assert normalize_text("Great <b>film</b>!<br />  See http://x.org") == "great film ! see <url>"

    def test_simulate_sleepstudy(self):
        df = simulate_sleepstudy(n_subjects=5, n_days=4, random_state=0)
        assert len(df) == 20
        assert df["Subject"].nunique() == 5
        assert df.equals(simulate_sleepstudy(n_subjects=5, n_days=4, random_state=0))
