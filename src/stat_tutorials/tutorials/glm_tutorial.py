#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Generalized linear models.

Part 1 (spector): does a new teaching method (PSI) raise the chance of a
grade improvement, controlling for GPA and a pre-test score (TUCE)?
  - linear probability model (OLS on a 0/1 outcome)
  - logistic and probit regression
  - odds ratios and predicted probabilities over GPA
  - likelihood-ratio test against a GPA-only model

Part 2 (cpunish): Poisson regression of execution counts per US state with
rate ratios and a check for overdispersion.
"""
from typing import Any, Dict

import numpy as np
import pandas as pd

from ..core.config import TutorialConfig
from ..core.data import load_source, require_columns
from ..models.linear import compare_models, fit_glm, fit_lm
from .narration import show, step
from .visualization import export_table, plot_coefficients, plot_fitted_curves, regression_table

BINARY_FORMULA = "GRADE ~ GPA + TUCE + PSI"
REDUCED_FORMULA = "GRADE ~ GPA"
COUNT_FORMULA = "EXECUTIONS ~ log_income + PERPOVERTY + PERBLACK + log_violent_crime + SOUTH + DEGREE"


def probability_curves(data: pd.DataFrame, models: Dict[str, Any], n_points: int = 50) -> Dict[str, pd.DataFrame]:
    """Predicted P(GRADE = 1) over the GPA range, TUCE at its mean, for PSI = 0 and 1."""
    grid = np.linspace(data["GPA"].min(), data["GPA"].max(), n_points)
    curves = {}
    for psi in (0, 1):
        new = pd.DataFrame({"GPA": grid, "TUCE": data["TUCE"].mean(), "PSI": float(psi)})
        for name, model in models.items():
            curves[f"{name}, PSI={psi}"] = pd.DataFrame({"GPA": grid, "fitted": model.predict(new)})
    return curves


def run_binary(config: TutorialConfig, out) -> Dict[str, Any]:
    step(1, "Binary outcome: loading the spector data")
    df = load_source(config.source("glm"))
    require_columns(df, ["GRADE", "GPA", "TUCE", "PSI"])
    df["GRADE"] = df["GRADE"].astype(int)
    print(f"[data] rows={len(df)}, balance={df['GRADE'].value_counts().to_dict()}")
    show(df.head(), "Sample data")

    step(2, "Linear probability model vs logistic and probit regression")
    lpm = fit_lm(BINARY_FORMULA, df, conf_level=config.conf_level)
    logit = fit_glm(BINARY_FORMULA, df, family="binomial", conf_level=config.conf_level)
    probit = fit_glm(BINARY_FORMULA, df, family="binomial", link="probit", conf_level=config.conf_level)
    models = {"LPM (OLS)": lpm, "Logit": logit, "Probit": probit}
    table = regression_table(models)
    show(table.set_index("term"), "Coefficients (std. errors)")
    export_table(table, out, "binary_models")

    odds = logit.exponentiated()
    show(odds, "Odds ratios (logit)")
    export_table(odds.reset_index(), out, "odds_ratios")
    plot_coefficients(logit.coefficients, out / "logit_coefficients.png", title="Logistic regression (log-odds)")

    fitted_lpm = lpm.predict(df)
    outside = int(((fitted_lpm < 0) | (fitted_lpm > 1)).sum())
    print(f"[note] LPM fitted values outside [0, 1]: {outside} of {len(df)}")

    curves = probability_curves(df, {"LPM": lpm, "Logit": logit})
    plot_fitted_curves(df, "GPA", "GRADE", curves, out / "predicted_probabilities.png", title="P(grade improves) by GPA")

    step(3, "Likelihood-ratio test: does PSI/TUCE add to GPA?")
    reduced = fit_glm(REDUCED_FORMULA, df, family="binomial", conf_level=config.conf_level)
    lr = compare_models([reduced, logit])
    show(lr, "Likelihood-ratio test")
    export_table(lr, out, "logit_lr_test")

    return {
        "lpm": lpm.to_dict(),
        "logit": logit.to_dict(),
        "probit": probit.to_dict(),
        "odds_ratios": odds.reset_index().to_dict(orient="records"),
        "lpm_out_of_range": outside,
        "lr_test": lr.to_dict(orient="records"),
    }


def run_count(config: TutorialConfig, out) -> Dict[str, Any]:
    step(4, "Count outcome: Poisson regression on the cpunish data")
    df = load_source(config.source("count"))
    require_columns(df, ["EXECUTIONS", "INCOME", "PERPOVERTY", "PERBLACK", "VC100k96", "SOUTH", "DEGREE"])
    df["log_income"] = np.log(df["INCOME"])
    df["log_violent_crime"] = np.log(df["VC100k96"])
    print(f"[data] rows={len(df)}, mean executions={df['EXECUTIONS'].mean():.2f}, var={df['EXECUTIONS'].var():.2f}")

    poisson = fit_glm(COUNT_FORMULA, df, family="poisson", conf_level=config.conf_level)
    show(poisson.coefficients, "Poisson coefficients (log scale)")
    rate_ratios = poisson.exponentiated()
    show(rate_ratios, "Rate ratios")
    export_table(poisson.coefficients.reset_index(), out, "poisson_coefficients")
    export_table(rate_ratios.reset_index(), out, "rate_ratios")

    fs = poisson.fit_statistics
    dispersion = fs["pearson_chi2"] / fs["df_resid"]
    print(f"[note] Pearson dispersion = {dispersion:.2f} (values well above 1 suggest overdispersion)")
    return {
        "poisson": poisson.to_dict(),
        "rate_ratios": rate_ratios.reset_index().to_dict(orient="records"),
        "dispersion": float(dispersion),
    }


def run(config: TutorialConfig) -> Dict[str, Any]:
    out = config.output_dir("glm")
    results = {"binary": run_binary(config, out), "count": run_count(config, out)}
    print(f"[saved] tables and figures in {out}")
    return results
