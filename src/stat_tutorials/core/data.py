#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Dataset loading and reshaping helpers shared by the tutorials.

Sources:
- CSV from a local path or an http(s) URL
- JSON-lines (optionally gzip-compressed) from a local path or URL
- sample datasets bundled inside the package (stat_tutorials/data)
- offline datasets shipped with statsmodels

Reshaping helpers cover the few table operations the tutorials need:
random train/test splits, stratified samples, grouped summaries and pivots.
"""
from __future__ import annotations
import html, importlib, re, unicodedata
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

BUNDLED_DATASETS: Dict[str, str] = {
    "sleep": "sleep.csv",
    "plant_growth": "plant_growth.csv",
    "reviews": "reviews.jsonl.gz",
}

TAG_RE = re.compile(r"<[^>]+>")
URL_RE = re.compile(r"(https?://\S+|www\.\S+)")
EMAIL_RE = re.compile(r"\b[\w\.-]+@[\w\.-]+\.\w+\b")


def _is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def _check_local(source) -> None:
    if not _is_url(str(source)) and not Path(source).exists():
        raise FileNotFoundError(f"Data file not found: {source}")


def load_csv(source, **kwargs) -> pd.DataFrame:
    """Read a CSV table from a local path or an http(s) URL."""
    _check_local(source)
    return pd.read_csv(source, **kwargs)


def load_jsonl(source, **kwargs) -> pd.DataFrame:
    """Read JSON-lines; gzip is inferred from a ``.gz`` suffix."""
    _check_local(source)
    kwargs.setdefault("compression", "infer")
    return pd.read_json(source, lines=True, **kwargs)


def load_bundled(name: str) -> pd.DataFrame:
    if name not in BUNDLED_DATASETS:
        raise ValueError(
            f"Unknown bundled dataset: {name!r}. Available: {sorted(BUNDLED_DATASETS)}"
        )
    path = DATA_DIR / BUNDLED_DATASETS[name]
    if path.suffix == ".gz" or path.suffix == ".jsonl":
        return load_jsonl(path)
    return load_csv(path)


def load_statsmodels_dataset(name: str) -> pd.DataFrame:
    """Load one of the datasets statsmodels ships offline (e.g. spector, cpunish)."""
    try:
        module = importlib.import_module(f"statsmodels.datasets.{name}")
    except ImportError:
        raise ValueError(f"Unknown statsmodels dataset: {name!r}") from None
    return module.load_pandas().data.copy()


def load_source(source: str, random_state: int = 42) -> pd.DataFrame:
    """
    Load a table from a source string.

    Accepted forms:
        bundled:<name>       dataset shipped with this package
        statsmodels:<name>   offline statsmodels dataset
        simulate:<name>      simulated dataset drawn with ``random_state``
        <path or URL>.csv
        <path or URL>.jsonl / .jsonl.gz / .json.gz
    """
    source = str(source)
    if source.startswith("bundled:"):
        return load_bundled(source.split(":", 1)[1])
    if source.startswith("statsmodels:"):
        return load_statsmodels_dataset(source.split(":", 1)[1])
    if source.startswith("simulate:"):
        name = source.split(":", 1)[1]
        if name not in SIMULATORS:
            raise ValueError(f"Unknown simulated dataset: {name!r}. Choose from {sorted(SIMULATORS)}")
        return SIMULATORS[name](random_state=random_state)

    lowered = source.lower().split("?", 1)[0]
    if lowered.endswith((".jsonl", ".jsonl.gz", ".json.gz", ".ndjson")):
        return load_jsonl(source)
    if lowered.endswith((".csv", ".csv.gz")):
        return load_csv(source)
    raise ValueError(f"Cannot infer format of data source: {source}")


def require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def strip_control_chars(s: str) -> str:
    return "".join(ch for ch in s if ch.isprintable())


def normalize_text(text: str) -> str:
    s = str(text)
    s = html.unescape(s).replace("<br />", " ")
    s = TAG_RE.sub(" ", s)
    s = unicodedata.normalize("NFKC", s)
    s = URL_RE.sub(" <URL> ", s)
    s = EMAIL_RE.sub(" <EMAIL> ", s)
    s = s.lower()
    s = strip_control_chars(s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def train_test_split_rows(
    df: pd.DataFrame,
    train_fraction: float = 0.7,
    random_state: int = 42,
    stratify: Optional[str] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split a table into train/test partitions by random row sampling.

    Args:
        df: Table to split
        train_fraction: Share of rows (per stratum when stratifying) used for training
        random_state: Seed; the same seed reproduces the same split
        stratify: Optional column whose class balance is kept in both parts

    Returns:
        (train, test) with the original index preserved
    """
    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
    rng = np.random.RandomState(random_state)
    if stratify is None:
        buckets = [np.arange(len(df))]
    else:
        require_columns(df, [stratify])
        labels = df[stratify].to_numpy()
        buckets = [np.flatnonzero(labels == label) for label in pd.unique(labels)]

    # split by position; index labels may repeat
    in_train = np.zeros(len(df), dtype=bool)
    for pos in buckets:
        n_train = int(round(train_fraction * len(pos)))
        in_train[rng.permutation(pos)[:n_train]] = True
    return df.iloc[np.flatnonzero(in_train)], df.iloc[np.flatnonzero(~in_train)]


def stratified_sample(
    df: pd.DataFrame,
    label_col: str,
    n_per_class: int | None = None,
    frac: float | None = None,
    random_state: int = 42,
) -> pd.DataFrame:
    if (n_per_class is None) == (frac is None):
        raise ValueError("choose n_per_class OR frac")
    parts = []
    for _, g in df.groupby(label_col, sort=False):
        if n_per_class is not None:
            parts.append(
                g.sample(n=min(n_per_class, len(g)), random_state=random_state)
            )
        else:
            parts.append(g.sample(frac=frac, random_state=random_state))
    return (
        pd.concat(parts)
        .sample(frac=1.0, random_state=random_state)
        .reset_index(drop=True)
    )


def group_summary(df: pd.DataFrame, value: str, by: str | List[str]) -> pd.DataFrame:
    """Per-group n, mean, sd and standard error of ``value``."""
    by = [by] if isinstance(by, str) else list(by)
    require_columns(df, [value, *by])
    out = df.groupby(by, observed=True)[value].agg(["count", "mean", "std"])
    out = out.rename(columns={"count": "n", "std": "sd"})
    out["se"] = out["sd"] / np.sqrt(out["n"])
    return out.reset_index()


def to_wide(df: pd.DataFrame, index: str, columns: str, values: str) -> pd.DataFrame:
    require_columns(df, [index, columns, values])
    wide = df.pivot(index=index, columns=columns, values=values)
    wide.columns = [str(c) for c in wide.columns]
    return wide.reset_index()


def simulate_sleepstudy(
    n_subjects: int = 18,
    n_days: int = 10,
    random_state: int = 42,
    intercept: float = 251.4,
    slope: float = 10.5,
    sd_intercept: float = 24.7,
    sd_slope: float = 5.9,
    sd_residual: float = 25.6,
) -> pd.DataFrame:
    """
    Simulate a sleep-deprivation panel: mean reaction time (ms) per subject and day.

    Each subject gets its own baseline and its own per-day slowdown drawn around
    the population values, so the data carry both random intercepts and slopes.
    """
    rng = np.random.RandomState(random_state)
    u0 = rng.normal(0.0, sd_intercept, n_subjects)
    u1 = rng.normal(0.0, sd_slope, n_subjects)
    rows = []
    for s in range(n_subjects):
        for day in range(n_days):
            reaction = (
                intercept + u0[s] + (slope + u1[s]) * day + rng.normal(0.0, sd_residual)
            )
            rows.append({"Subject": f"S{s + 1:02d}", "Days": day, "Reaction": reaction})
    return pd.DataFrame(rows)


SIMULATORS = {"sleepstudy": simulate_sleepstudy}
