# linear.py
"""
Ordinary and generalized linear models.

Thin wrappers around statsmodels' formula API that turn a fitted result into
a tidy coefficient table plus a dictionary of fit statistics, so every
tutorial prints and exports models in the same layout.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from scipy import stats

FAMILIES = {
    "gaussian": sm.families.Gaussian,
    "binomial": sm.families.Binomial,
    "poisson": sm.families.Poisson,
    "gamma": sm.families.Gamma,
    "inverse_gaussian": sm.families.InverseGaussian,
    "negative_binomial": sm.families.NegativeBinomial,
}

LINKS = {
    "identity": sm.families.links.Identity,
    "log": sm.families.links.Log,
    "logit": sm.families.links.Logit,
    "probit": sm.families.links.Probit,
    "cloglog": sm.families.links.CLogLog,
    "inverse": sm.families.links.InversePower,
}

COEF_COLUMNS = ["estimate", "std_err", "statistic", "p_value", "conf_low", "conf_high"]


def coefficient_table(result, conf_level: float = 0.95) -> pd.DataFrame:
    ci = result.conf_int(alpha=1 - conf_level)
    table = pd.DataFrame(
        {
            "estimate": result.params,
            "std_err": result.bse,
            "statistic": result.tvalues,
            "p_value": result.pvalues,
            "conf_low": ci.iloc[:, 0],
            "conf_high": ci.iloc[:, 1],
        }
    )
    table.index.name = "term"
    return table


@dataclass
class ModelSummary:
    """Fitted (G)LM: coefficient table, fit statistics and the raw statsmodels result."""

    formula: str
    family: str
    link: str
    coefficients: pd.DataFrame
    fit_statistics: Dict[str, float]
    conf_level: float = 0.95
    result: Any = field(default=None, repr=False)

    def exponentiated(self) -> pd.DataFrame:
        """exp() of estimates and CI bounds: odds ratios (logit) or rate ratios (log)."""
        out = self.coefficients[["estimate", "conf_low", "conf_high", "p_value"]].copy()
        for col in ("estimate", "conf_low", "conf_high"):
            out[col] = np.exp(out[col])
        return out

    def predict(self, new_data: pd.DataFrame) -> np.ndarray:
        """Predictions on the response scale (probabilities, counts, means)."""
        return np.asarray(self.result.predict(new_data))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formula": self.formula,
            "family": self.family,
            "link": self.link,
            "coefficients": self.coefficients.reset_index().to_dict(orient="records"),
            "fit_statistics": self.fit_statistics,
        }


def fit_lm(formula: str, data: pd.DataFrame, conf_level: float = 0.95) -> ModelSummary:
    """Ordinary least squares, the equivalent of R's ``lm``."""
    result = smf.ols(formula, data=data).fit()
    fit_stats = {
        "nobs": int(result.nobs),
        "df_model": float(result.df_model),
        "df_resid": float(result.df_resid),
        "r_squared": float(result.rsquared),
        "adj_r_squared": float(result.rsquared_adj),
        "f_statistic": float(result.fvalue),
        "f_pvalue": float(result.f_pvalue),
        "sigma": float(np.sqrt(result.scale)),
        "loglik": float(result.llf),
        "aic": float(result.aic),
        "bic": float(result.bic),
    }
    return ModelSummary(
        formula=formula,
        family="gaussian",
        link="identity",
        coefficients=coefficient_table(result, conf_level),
        fit_statistics=fit_stats,
        conf_level=conf_level,
        result=result,
    )


def make_family(family: str, link: Optional[str] = None):
    try:
        family_cls = FAMILIES[family]
    except KeyError:
        raise ValueError(f"Unknown family: {family!r}. Choose from {sorted(FAMILIES)}") from None
    if link is None:
        return family_cls()
    try:
        link_obj = LINKS[link]()
    except KeyError:
        raise ValueError(f"Unknown link: {link!r}. Choose from {sorted(LINKS)}") from None
    return family_cls(link=link_obj)


def fit_glm(
    formula: str,
    data: pd.DataFrame,
    family: str = "binomial",
    link: Optional[str] = None,
    conf_level: float = 0.95,
) -> ModelSummary:
    """Generalized linear model, the equivalent of R's ``glm``."""
    fam = make_family(family, link)
    result = smf.glm(formula, data=data, family=fam).fit()
    llnull = float(result.llnull)
    fit_stats = {
        "nobs": int(result.nobs),
        "df_model": float(result.df_model),
        "df_resid": float(result.df_resid),
        "loglik": float(result.llf),
        "aic": float(result.aic),
        "bic": float(result.bic_llf),
        "deviance": float(result.deviance),
        "null_deviance": float(result.null_deviance),
        "pearson_chi2": float(result.pearson_chi2),
        "pseudo_r_squared": 1.0 - float(result.llf) / llnull if llnull != 0 else float("nan"),
    }
    return ModelSummary(
        formula=formula,
        family=family,
        link=link or type(fam.link).__name__.lower(),
        coefficients=coefficient_table(result, conf_level),
        fit_statistics=fit_stats,
        conf_level=conf_level,
        result=result,
    )


def compare_models(models: List[ModelSummary]) -> pd.DataFrame:
    """
    Likelihood-ratio tests between nested models fitted to the same rows.

    Models are ordered from fewest to most parameters; each row is tested
    against the row above it.
    """
    if len(models) < 2:
        raise ValueError("compare_models needs at least two models")
    nobs = {m.fit_statistics["nobs"] for m in models}
    if len(nobs) != 1:
        raise ValueError(f"Models were fitted to different numbers of rows: {sorted(nobs)}")

    ordered = sorted(models, key=lambda m: -m.fit_statistics["df_resid"])
    rows = []
    prev = None
    for m in ordered:
        fs = m.fit_statistics
        row = {
            "formula": m.formula,
            "df_resid": fs["df_resid"],
            "loglik": fs["loglik"],
            "aic": fs["aic"],
            "lr_stat": np.nan,
            "df": np.nan,
            "p_value": np.nan,
        }
        if prev is not None:
            df = prev.fit_statistics["df_resid"] - fs["df_resid"]
            lr = 2.0 * (fs["loglik"] - prev.fit_statistics["loglik"])
            row.update(
                lr_stat=lr,
                df=df,
                p_value=float(stats.chi2.sf(lr, df)) if df > 0 else np.nan,
            )
        rows.append(row)
        prev = m
    return pd.DataFrame(rows)
