#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Multilevel models: reaction time under sleep deprivation.

Each subject is measured on ten consecutive days. The tutorial contrasts
  - complete pooling (one OLS line for everybody)
  - a random intercept per subject
  - random intercepts and slopes per subject
then reads off variance components, the intra-class correlation and the
per-subject deviations, and finishes with a binomial multilevel model for
a "slow reaction" indicator.
"""
from typing import Any, Dict

import numpy as np
from scipy import stats

from ..core.config import TutorialConfig
from ..core.data import group_summary, load_source, require_columns
from ..models.linear import fit_lm
from ..models.mixed import fit_glmer, fit_lmer
from .narration import show, step
from .visualization import export_table, plot_caterpillar, plot_trajectories, regression_table

POOLED_FORMULA = "Reaction ~ Days"
INTERCEPT_FORMULA = "Reaction ~ Days + (1 | Subject)"
SLOPE_FORMULA = "Reaction ~ Days + (Days | Subject)"
SLOW_FORMULA = "slow ~ Days + (1 | Subject)"


def likelihood_ratio(reduced, full, df: int) -> Dict[str, float]:
    """LR test of two ML-fitted mixed models; conservative for variances on the boundary."""
    lr = 2.0 * (full.fit_statistics["loglik"] - reduced.fit_statistics["loglik"])
    return {"lr_stat": float(lr), "df": df, "p_value": float(stats.chi2.sf(max(lr, 0.0), df))}


def run(config: TutorialConfig) -> Dict[str, Any]:
    out = config.output_dir("multilevel")

    step(1, "Loading the sleep-deprivation panel")
    data = load_source(config.source("sleepstudy"), random_state=config.random_state)
    require_columns(data, ["Reaction", "Days", "Subject"])
    print(f"[data] rows={len(data)}, subjects={data['Subject'].nunique()}, days={data['Days'].nunique()}")
    by_day = group_summary(data, "Reaction", "Days")
    show(by_day, "Mean reaction time by day")
    export_table(by_day, out, "reaction_by_day")
    plot_trajectories(data, "Days", "Reaction", "Subject", out / "trajectories.png", title="Reaction time per subject")

    step(2, "Pooled OLS vs random intercept vs random slope")
    pooled = fit_lm(POOLED_FORMULA, data, conf_level=config.conf_level)
    intercept = fit_lmer(INTERCEPT_FORMULA, data, conf_level=config.conf_level)
    slope = fit_lmer(SLOPE_FORMULA, data, conf_level=config.conf_level)
    table = regression_table({"Pooled OLS": pooled, "Random intercept": intercept, "Random slope": slope})
    show(table.set_index("term"), "Fixed effects (std. errors)")
    export_table(table, out, "fixed_effects")
    print(
        f"[note] Days effect: pooled se={pooled.coefficients.loc['Days', 'std_err']:.3f}, "
        f"random-slope se={slope.fixed_effects.loc['Days', 'std_err']:.3f}"
    )

    step(3, "Variance components and intra-class correlation")
    show(intercept.variance_components, "Random intercept model")
    show(slope.variance_components, "Random slope model")
    export_table(slope.variance_components, out, "variance_components")
    icc = intercept.icc()
    print(f"[model] ICC (random intercept model) = {icc:.3f}")
    if "re_correlation" in slope.fit_statistics:
        print(f"[model] intercept/slope correlation = {slope.fit_statistics['re_correlation']:.3f}")

    # ML refits, REML likelihoods are not comparable across random structures
    lr = likelihood_ratio(
        fit_lmer(INTERCEPT_FORMULA, data, reml=False),
        fit_lmer(SLOPE_FORMULA, data, reml=False),
        df=2,
    )
    print(f"[model] random slope LR test: chi2={lr['lr_stat']:.2f}, df={lr['df']}, p={lr['p_value']:.4g}")

    plot_caterpillar(slope.random_effects, out / "caterpillar.png", title="Subject deviations (random slope model)")
    export_table(slope.random_effects.reset_index(), out, "random_effects")

    step(4, "Binomial multilevel model for slow reactions")
    data["slow"] = (data["Reaction"] > data["Reaction"].median()).astype(int)
    print(f"[data] slow reactions: {int(data['slow'].sum())} of {len(data)}")
    glmm = fit_glmer(SLOW_FORMULA, data, family="binomial", conf_level=config.conf_level)
    show(glmm.fixed_effects, "Fixed effects (log-odds, variational Bayes)")
    show(glmm.variance_components, "Variance components")
    export_table(glmm.fixed_effects.reset_index(), out, "glmer_fixed_effects")
    odds_per_day = float(np.exp(glmm.fixed_effects.loc["Days", "estimate"]))
    glmm_icc = glmm.icc()
    print(f"[model] odds ratio per day = {odds_per_day:.3f}, latent-scale ICC = {glmm_icc:.3f}")

    print(f"[saved] tables and figures in {out}")
    return {
        "pooled": pooled.to_dict(),
        "random_intercept": intercept.to_dict(),
        "random_slope": slope.to_dict(),
        "icc": float(icc),
        "slope_lr_test": lr,
        "glmer": glmm.to_dict(),
        "glmer_odds_ratio_per_day": odds_per_day,
        "glmer_icc": float(glmm_icc),
    }
