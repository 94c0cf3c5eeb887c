#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Run a selection of tutorials one after another and collect their results.

Tutorials share no state: each reads its own data, writes its own tables
and figures under <results_dir>/<tutorial>/ and returns a JSON-serialisable
dictionary. The pipeline only sequences them and writes the combined
summary to tutorial_results_<timestamp>.json.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np

from ..core.config import DATA_SOURCES, TUTORIAL_NAMES, TutorialConfig
from . import basic_stats_tutorial, glm_tutorial, multilevel_tutorial, textclass_tutorial, topics_tutorial

TUTORIALS: Dict[str, Callable[[TutorialConfig], Dict[str, Any]]] = {
    "basic_stats": basic_stats_tutorial.run,
    "glm": glm_tutorial.run,
    "multilevel": multilevel_tutorial.run,
    "textclass": textclass_tutorial.run,
    "topics": topics_tutorial.run,
}


def _json_safe(obj):
    """Replace NaN and infinite floats with None; JSON has no token for them."""
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(v) for v in obj]
    if isinstance(obj, (float, np.floating)):
        return float(obj) if np.isfinite(obj) else None
    if isinstance(obj, np.integer):
        return int(obj)
    return obj


class TutorialPipeline:
    """
    Sequence tutorials and save their combined results.

    Args:
        config: Shared settings (results directory, seed, data sources)
        tutorials: Names from TUTORIAL_NAMES, default all of them
    """

    def __init__(self, config: Optional[TutorialConfig] = None, tutorials: Optional[Sequence[str]] = None):
        self.config = config or TutorialConfig()
        names = list(tutorials) if tutorials else list(TUTORIAL_NAMES)
        unknown = [n for n in names if n not in TUTORIALS]
        if unknown:
            raise ValueError(f"Unknown tutorials: {unknown}. Choose from {list(TUTORIAL_NAMES)}")
        self.tutorials = names
        self.results: Dict[str, Any] = {}

    def run(self) -> Dict[str, Any]:
        self.config.results_dir.mkdir(parents=True, exist_ok=True)
        for name in self.tutorials:
            print("\n" + "#" * 60)
            print(f"TUTORIAL: {name}")
            print("#" * 60)
            self.results[name] = TUTORIALS[name](self.config)
        return self.results

    def save_results(self) -> Path:
        results_path = (
            self.config.results_dir
            / f"tutorial_results_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        )
        payload = {
            "config": {
                "tutorials": self.tutorials,
                "random_state": self.config.random_state,
                "conf_level": self.config.conf_level,
                "fast": self.config.fast,
                "sources": {name: self.config.source(name) for name in DATA_SOURCES},
            },
            "results": self.results,
        }
        with open(results_path, "w", encoding="utf-8") as f:
            json.dump(_json_safe(payload), f, indent=2, ensure_ascii=False, allow_nan=False, default=str)
        print(f"\nResults saved to: {results_path}")
        return results_path

    def run_complete_pipeline(self) -> Dict[str, Any]:
        self.run()
        self.save_results()
        print("\n" + "=" * 60)
        print("ALL TUTORIALS COMPLETED")
        print("=" * 60)
        return self.results
