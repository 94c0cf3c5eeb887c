#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Command-line runner for the statistics tutorials.

- Run one tutorial or all of them.
- Tables (CSV / Markdown / HTML) and figures land in <results-dir>/<tutorial>/.
- A combined tutorial_results_<timestamp>.json is written to <results-dir>.
- Data sources default to bundled / statsmodels datasets; any of them can be
  pointed at a local file or an http(s) URL.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from stat_tutorials.core.config import TUTORIAL_NAMES, TutorialConfig
from stat_tutorials.tutorials.pipeline import TutorialPipeline


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Run the statistics tutorials")
    ap.add_argument("--tutorial", choices=[*TUTORIAL_NAMES, "all"], default="all")
    ap.add_argument("--results-dir", type=Path, default=Path("results"))
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--fast", action="store_true", help="Fewer topic-model iterations and CV folds")
    ap.add_argument("--n-topics", type=int, default=4)
    ap.add_argument("--train-fraction", type=float, default=0.7)
    ap.add_argument("--conf-level", type=float, default=0.95)

    # Optional data overrides: bundled:<name>, statsmodels:<name>, simulate:<name>, a path or a URL
    ap.add_argument("--reviews-source", default=None, help="Reviews JSON-lines (may be .gz)")
    ap.add_argument("--sleep-source", default=None, help="CSV with extra, group, ID")
    ap.add_argument("--plants-source", default=None, help="CSV with weight, group")
    ap.add_argument("--glm-source", default=None, help="CSV with GRADE, GPA, TUCE, PSI")
    ap.add_argument("--count-source", default=None, help="CSV in the cpunish layout")
    ap.add_argument("--sleepstudy-source", default=None, help="CSV with Reaction, Days, Subject (default: simulated)")
    return ap


def config_from_args(args: argparse.Namespace) -> TutorialConfig:
    return TutorialConfig(
        results_dir=args.results_dir,
        random_state=args.seed,
        conf_level=args.conf_level,
        train_fraction=args.train_fraction,
        n_topics=args.n_topics,
        fast=args.fast,
        glm_source=args.glm_source,
        count_source=args.count_source,
        sleep_source=args.sleep_source,
        plants_source=args.plants_source,
        reviews_source=args.reviews_source,
        sleepstudy_source=args.sleepstudy_source,
    )


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    tutorials = list(TUTORIAL_NAMES) if args.tutorial == "all" else [args.tutorial]
    print(f"[config] tutorials={tutorials}, results_dir={config.results_dir}, seed={config.random_state}, fast={config.fast}")
    TutorialPipeline(config, tutorials).run_complete_pipeline()


if __name__ == "__main__":
    main()
