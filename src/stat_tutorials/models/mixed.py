# mixed.py
"""
Multilevel (mixed-effects) models from lme4-style formulas.

fit_lmer  -> statsmodels MixedLM (REML by default), one grouping factor,
             random intercept and/or correlated random slopes.
fit_glmer -> statsmodels Bayesian mixed GLM fitted by variational Bayes,
             binomial or Poisson response, any number of grouping factors,
             independent random terms.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from scipy import stats
from statsmodels.genmod.bayes_mixed_glm import BinomialBayesMixedGLM, PoissonBayesMixedGLM

from ..core.data import require_columns
from ..core.formula import RandomTerm, parse_mixed_formula

GLMER_FAMILIES = {
    "binomial": BinomialBayesMixedGLM,
    "poisson": PoissonBayesMixedGLM,
}

INTERCEPT = "(Intercept)"
LEVEL_RE = re.compile(r"\[(.*?)\]")


@dataclass
class MixedModelResult:
    formula: str
    family: str
    method: str
    fixed_effects: pd.DataFrame
    variance_components: pd.DataFrame
    random_effects: pd.DataFrame
    fit_statistics: Dict[str, Any]
    result: Any = field(default=None, repr=False)

    def icc(self, group: Optional[str] = None) -> float:
        """
        Intra-class correlation of the random intercept.

        Share of the (latent) variance at the intercept that is due to the
        grouping factor. For binomial models the level-1 variance is pi^2 / 3
        (logistic latent scale); Poisson models have no such constant.
        """
        vc = self.variance_components
        rows = vc[(vc["term"] == INTERCEPT) & (vc["group"] != "Residual")]
        if group is not None:
            rows = rows[rows["group"] == group]
        if rows.empty:
            raise ValueError("Model has no random intercept")
        between = float(rows["variance"].sum())

        if self.family == "gaussian":
            within = float(vc.loc[vc["group"] == "Residual", "variance"].iloc[0])
        elif self.family == "binomial":
            within = np.pi**2 / 3
        else:
            raise ValueError(f"ICC is not defined for family {self.family!r}")
        return between / (between + within)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formula": self.formula,
            "family": self.family,
            "method": self.method,
            "fixed_effects": self.fixed_effects.reset_index().to_dict(orient="records"),
            "variance_components": self.variance_components.to_dict(orient="records"),
            "fit_statistics": self.fit_statistics,
        }


def _merge_terms(terms, group: str) -> RandomTerm:
    merged = RandomTerm(group=group, intercept=False, slopes=[])
    for t in terms:
        merged.intercept = merged.intercept or t.intercept
        merged.slopes.extend(s for s in t.slopes if s not in merged.slopes)
    return merged


def _re_name(name: str) -> str:
    return INTERCEPT if name in ("Group", "Intercept") else name


def fit_lmer(
    formula: str,
    data: pd.DataFrame,
    reml: bool = True,
    conf_level: float = 0.95,
) -> MixedModelResult:
    """
    Linear mixed model, the equivalent of ``lme4::lmer``.

    Args:
        formula: e.g. ``"Reaction ~ Days + (Days | Subject)"``
        data: Long-format table
        reml: Restricted maximum likelihood (True) or ML (False)
        conf_level: Confidence level of the fixed-effect intervals

    Returns:
        MixedModelResult with fixed effects, variance components and
        per-group conditional modes
    """
    mf = parse_mixed_formula(formula)
    if len(mf.groups) != 1:
        raise ValueError(
            f"fit_lmer supports one grouping factor, got {mf.groups}; use fit_glmer "
            "for several independent grouping factors"
        )
    group = mf.groups[0]
    term = _merge_terms(mf.random, group)
    require_columns(data, [mf.response, group, *term.slopes])

    model = smf.mixedlm(mf.fixed, data, groups=data[group], re_formula=term.re_formula())
    result = model.fit(reml=reml)

    fe_names = list(result.fe_params.index)
    ci = result.conf_int(alpha=1 - conf_level).loc[fe_names]
    fixed = pd.DataFrame(
        {
            "estimate": result.fe_params,
            "std_err": result.bse_fe,
            "statistic": result.tvalues[fe_names],
            "p_value": result.pvalues[fe_names],
            "conf_low": ci.iloc[:, 0],
            "conf_high": ci.iloc[:, 1],
        }
    )
    fixed.index.name = "term"

    cov_re = result.cov_re.rename(index=_re_name, columns=_re_name)
    vc_rows = [
        {
            "group": group,
            "term": name,
            "variance": float(cov_re.loc[name, name]),
            "std_dev": float(np.sqrt(cov_re.loc[name, name])),
        }
        for name in cov_re.index
    ]
    vc_rows.append(
        {
            "group": "Residual",
            "term": "",
            "variance": float(result.scale),
            "std_dev": float(np.sqrt(result.scale)),
        }
    )

    ranef = pd.DataFrame.from_dict(result.random_effects, orient="index")
    ranef = ranef.rename(columns=_re_name)
    ranef.index.name = group

    fit_stats = {
        "nobs": int(result.nobs),
        "n_groups": int(len(result.random_effects)),
        "loglik": float(result.llf),
        "aic": float(result.aic) if np.isfinite(result.aic) else None,
        "bic": float(result.bic) if np.isfinite(result.bic) else None,
        "converged": bool(result.converged),
    }
    if INTERCEPT in cov_re.index and len(cov_re) > 1:
        sd = np.sqrt(np.diag(cov_re.values))
        corr = cov_re.values / np.outer(sd, sd)
        slope = [n for n in cov_re.index if n != INTERCEPT][0]
        fit_stats["re_correlation"] = float(
            corr[list(cov_re.index).index(INTERCEPT), list(cov_re.index).index(slope)]
        )

    return MixedModelResult(
        formula=formula,
        family="gaussian",
        method="REML" if reml else "ML",
        fixed_effects=fixed,
        variance_components=pd.DataFrame(vc_rows),
        random_effects=ranef,
        fit_statistics=fit_stats,
        result=result,
    )


def fit_glmer(
    formula: str,
    data: pd.DataFrame,
    family: str = "binomial",
    conf_level: float = 0.95,
) -> MixedModelResult:
    """
    Generalized linear mixed model, the counterpart of ``lme4::glmer``.

    Estimates are posterior means and standard deviations from a variational
    Bayes fit; the z statistics, p-values and intervals use a normal
    approximation to the posterior. Random terms are independent of each other.
    """
    try:
        model_cls = GLMER_FAMILIES[family]
    except KeyError:
        raise ValueError(f"Unknown glmer family: {family!r}. Choose from {sorted(GLMER_FAMILIES)}") from None

    mf = parse_mixed_formula(formula)
    needed = [mf.response] + mf.groups + [s for t in mf.random for s in t.slopes]
    require_columns(data, needed)

    vc_formulas: Dict[str, str] = {}
    for t in mf.random:
        vc_formulas.update(t.vc_formulas())

    model = model_cls.from_formula(mf.fixed, vc_formulas, data)
    result = model.fit_vb()

    z_crit = stats.norm.ppf(0.5 + conf_level / 2)
    mean = np.asarray(result.fe_mean)
    sd = np.asarray(result.fe_sd)
    z = mean / sd
    fixed = pd.DataFrame(
        {
            "estimate": mean,
            "std_err": sd,
            "statistic": z,
            "p_value": 2 * stats.norm.sf(np.abs(z)),
            "conf_low": mean - z_crit * sd,
            "conf_high": mean + z_crit * sd,
        },
        index=pd.Index(list(model.fep_names), name="term"),
    )

    vc_rows = []
    ranef_cols: Dict[str, pd.Series] = {}
    for i, name in enumerate(model.vcp_names):
        group, _, slope = name.partition(":")
        term = slope or INTERCEPT
        # vcp_mean holds log standard deviations
        sd_i = float(np.exp(result.vcp_mean[i]))
        vc_rows.append({"group": group, "term": term, "variance": sd_i**2, "std_dev": sd_i})

        # posterior means of the random effects belonging to this component
        ix = np.flatnonzero(np.asarray(model.ident) == i)
        levels = [LEVEL_RE.search(str(model.vc_names[j])).group(1) for j in ix]
        ranef_cols[f"{group}:{term}" if len(mf.groups) > 1 else term] = pd.Series(
            np.asarray(result.vc_mean)[ix], index=levels
        )

    ranef = pd.DataFrame(ranef_cols)
    if len(mf.groups) == 1:
        ranef.index.name = mf.groups[0]

    fit_stats = {
        "nobs": int(len(model.endog)),
        "n_groups": {g: int(data[g].nunique()) for g in mf.groups},
    }

    return MixedModelResult(
        formula=formula,
        family=family,
        method="VB",
        fixed_effects=fixed,
        variance_components=pd.DataFrame(vc_rows),
        random_effects=ranef,
        fit_statistics=fit_stats,
        result=result,
    )
