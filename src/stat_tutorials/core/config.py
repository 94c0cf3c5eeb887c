# config.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

# ---------------- Default data sources ----------------
# "bundled:<name>" -> file shipped in stat_tutorials/data
# "statsmodels:<name>" -> offline dataset shipped with statsmodels
# "simulate:<name>" -> dataset simulated from the run's random_state
# anything else is a local path or an http(s) URL

DATA_SOURCES: Dict[str, str] = {
    "glm": "statsmodels:spector",
    "count": "statsmodels:cpunish",
    "sleep": "bundled:sleep",
    "plants": "bundled:plant_growth",
    "reviews": "bundled:reviews",
    "sleepstudy": "simulate:sleepstudy",
}

TUTORIAL_NAMES = ("basic_stats", "glm", "multilevel", "textclass", "topics")


@dataclass
class TutorialConfig:
    """Settings shared by every tutorial run.

    Source fields left as None fall back to DATA_SOURCES.
    """

    results_dir: Path = Path("results")
    random_state: int = 42
    conf_level: float = 0.95
    train_fraction: float = 0.7
    n_topics: int = 4
    fast: bool = False
    glm_source: Optional[str] = None
    count_source: Optional[str] = None
    sleep_source: Optional[str] = None
    plants_source: Optional[str] = None
    reviews_source: Optional[str] = None
    sleepstudy_source: Optional[str] = None

    def __post_init__(self):
        self.results_dir = Path(self.results_dir)
        if not 0.0 < self.train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {self.train_fraction}")
        if not 0.0 < self.conf_level < 1.0:
            raise ValueError(f"conf_level must be in (0, 1), got {self.conf_level}")
        if self.n_topics < 2:
            raise ValueError("n_topics must be at least 2")

    def source(self, name: str) -> str:
        override = getattr(self, f"{name}_source", None)
        if override:
            return override
        try:
            return DATA_SOURCES[name]
        except KeyError:
            raise ValueError(f"Unknown data source: {name}") from None

    def output_dir(self, tutorial: str) -> Path:
        out = self.results_dir / tutorial
        out.mkdir(parents=True, exist_ok=True)
        return out
