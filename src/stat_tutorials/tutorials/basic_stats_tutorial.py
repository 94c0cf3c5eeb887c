#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Basic inferential statistics.

sleep:       extra hours of sleep under two drugs, the same ten patients
             in both groups -> Welch two-sample t-test (ignoring the pairing)
             and the paired t-test, with effect sizes and assumption checks.
PlantGrowth: dried plant weight under a control and two treatments ->
             one-way ANOVA, Tukey HSD, Holm-adjusted pairwise t-tests and
             the same model written as a linear regression.
"""
from typing import Any, Dict

import pandas as pd

from ..core.config import TutorialConfig
from ..core.data import group_summary, load_source, require_columns, to_wide
from ..models.inference import (
    anova,
    check_normality,
    cohens_d,
    levene_test,
    pairwise_t_tests,
    t_test_formula,
    tukey_hsd,
)
from ..models.linear import fit_lm
from .narration import show, step
from .visualization import export_table, plot_group_boxplot


def run_sleep(config: TutorialConfig, out) -> Dict[str, Any]:
    step(1, "t-tests on the sleep data")
    sleep = load_source(config.source("sleep"))
    require_columns(sleep, ["extra", "group", "ID"])
    sleep["group"] = sleep["group"].astype(str)
    summary = group_summary(sleep, "extra", "group")
    show(summary, "Extra sleep by drug")
    export_table(summary, out, "sleep_summary")
    plot_group_boxplot(sleep, "extra", "group", out / "sleep_boxplot.png", title="Extra sleep (hours) by drug")

    welch = t_test_formula(sleep, "extra", "group", conf_level=config.conf_level)
    paired = t_test_formula(sleep, "extra", "group", paired=True, id_col="ID", conf_level=config.conf_level)
    tests = pd.DataFrame([welch.to_dict(), paired.to_dict()])
    show(tests.set_index("method"), "t-tests (group 1 minus group 2)")
    export_table(tests, out, "sleep_t_tests")

    wide = to_wide(sleep, index="ID", columns="group", values="extra")
    levels = sorted(sleep["group"].unique())
    a, b = wide[levels[0]], wide[levels[1]]
    effect = {"cohens_d": cohens_d(a, b), "cohens_d_paired": cohens_d(a, b, paired=True)}
    normality = check_normality(a - b)
    print(f"[note] Cohen's d = {effect['cohens_d']:.3f} (independent), {effect['cohens_d_paired']:.3f} (paired)")
    print(f"[note] Shapiro-Wilk on paired differences: W={normality['statistic']:.3f}, p={normality['p_value']:.3f}")
    return {
        "summary": summary.to_dict(orient="records"),
        "welch": welch.to_dict(),
        "paired": paired.to_dict(),
        "effect_sizes": effect,
        "normality_of_differences": normality,
    }


def run_plants(config: TutorialConfig, out) -> Dict[str, Any]:
    step(2, "One-way ANOVA on PlantGrowth")
    plants = load_source(config.source("plants"))
    require_columns(plants, ["weight", "group"])
    summary = group_summary(plants, "weight", "group")
    show(summary, "Weight by group")
    export_table(summary, out, "plant_summary")
    plot_group_boxplot(plants, "weight", "group", out / "plant_boxplot.png", title="Dried weight by treatment")

    levene = levene_test(plants, "weight", "group")
    print(f"[note] Levene test for equal variances: F={levene['statistic']:.3f}, p={levene['p_value']:.3f}")
    table = anova(plants, "weight ~ C(group)")
    show(table, "ANOVA")
    export_table(table.reset_index(), out, "plant_anova")

    step(3, "Post-hoc comparisons")
    tukey = tukey_hsd(plants, "weight", "group", alpha=1 - config.conf_level)
    show(tukey, "Tukey HSD")
    export_table(tukey, out, "plant_tukey")
    pairwise = pairwise_t_tests(plants, "weight", "group", p_adjust="holm")
    show(pairwise, "Pairwise t-tests (pooled SD, Holm)")
    export_table(pairwise, out, "plant_pairwise")

    step(4, "The same model as a linear regression")
    lm = fit_lm("weight ~ C(group)", plants, conf_level=config.conf_level)
    show(lm.coefficients, "Treatment contrasts against ctrl")
    export_table(lm.coefficients.reset_index(), out, "plant_lm")
    fs = lm.fit_statistics
    print(f"[model] F={fs['f_statistic']:.3f} on {fs['df_model']:.0f} and {fs['df_resid']:.0f} df, p={fs['f_pvalue']:.4f}, R2={fs['r_squared']:.3f}")

    return {
        "summary": summary.to_dict(orient="records"),
        "levene": levene,
        "anova": table.reset_index().to_dict(orient="records"),
        "tukey": tukey.to_dict(orient="records"),
        "pairwise": pairwise.to_dict(orient="records"),
        "lm": lm.to_dict(),
    }


def run(config: TutorialConfig) -> Dict[str, Any]:
    out = config.output_dir("basic_stats")
    results = {"sleep": run_sleep(config, out), "plants": run_plants(config, out)}
    print(f"[saved] tables and figures in {out}")
    return results
