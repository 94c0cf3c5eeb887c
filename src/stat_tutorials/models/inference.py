# inference.py
"""
Basic inferential statistics: t-tests, ANOVA and post-hoc comparisons.

Test statistics come from scipy / statsmodels; this module adds the pieces
R prints alongside them (degrees of freedom, confidence interval of the
estimate, effect sizes) and returns everything as plain tables.
"""
from dataclasses import asdict, dataclass
from itertools import combinations
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from scipy import stats
from statsmodels.stats.multicomp import pairwise_tukeyhsd
from statsmodels.stats.multitest import multipletests

from ..core.data import require_columns

ALTERNATIVES = ("two-sided", "less", "greater")

P_ADJUST = {
    "holm": "holm",
    "bonferroni": "bonferroni",
    "hochberg": "simes-hochberg",
    "bh": "fdr_bh",
    "fdr": "fdr_bh",
    "by": "fdr_by",
}


@dataclass
class TestResult:
    method: str
    statistic: float
    df: float
    p_value: float
    estimate: float
    conf_low: float
    conf_high: float
    alternative: str = "two-sided"
    conf_level: float = 0.95

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _conf_int(estimate, se, df, alternative, conf_level):
    if alternative == "two-sided":
        crit = stats.t.ppf(0.5 + conf_level / 2, df)
        return estimate - crit * se, estimate + crit * se
    crit = stats.t.ppf(conf_level, df)
    if alternative == "less":
        return -np.inf, estimate + crit * se
    return estimate - crit * se, np.inf


def t_test(
    x,
    y=None,
    paired: bool = False,
    equal_var: bool = False,
    mu: float = 0.0,
    alternative: str = "two-sided",
    conf_level: float = 0.95,
) -> TestResult:
    """
    One-sample, paired, Welch or Student two-sample t-test.

    The estimate is mean(x) (one-sample), mean(x - y) (paired) or
    mean(x) - mean(y) (two-sample); the interval is for that estimate.
    """
    if alternative not in ALTERNATIVES:
        raise ValueError(f"alternative must be one of {ALTERNATIVES}")
    x = np.asarray(x, dtype=float)

    if paired:
        if y is None:
            raise ValueError("A paired t-test needs both x and y")
        y = np.asarray(y, dtype=float)
        if len(x) != len(y):
            raise ValueError("Paired samples must have the same length")
        d = x - y
        if len(d) < 2:
            raise ValueError("Not enough observations")
        res = stats.ttest_rel(x, y, alternative=alternative) if mu == 0 else stats.ttest_1samp(d, mu, alternative=alternative)
        estimate, se, df = d.mean(), d.std(ddof=1) / np.sqrt(len(d)), len(d) - 1
        method = "Paired t-test"
    elif y is None:
        if len(x) < 2:
            raise ValueError("Not enough observations")
        res = stats.ttest_1samp(x, mu, alternative=alternative)
        estimate, se, df = x.mean(), x.std(ddof=1) / np.sqrt(len(x)), len(x) - 1
        method = "One Sample t-test"
    else:
        y = np.asarray(y, dtype=float)
        nx, ny = len(x), len(y)
        if nx < 2 or ny < 2:
            raise ValueError("Not enough observations")
        vx, vy = x.var(ddof=1), y.var(ddof=1)
        estimate = x.mean() - y.mean()
        if equal_var:
            df = nx + ny - 2
            pooled = ((nx - 1) * vx + (ny - 1) * vy) / df
            se = np.sqrt(pooled * (1 / nx + 1 / ny))
            method = "Two Sample t-test"
        else:
            sx, sy = vx / nx, vy / ny
            se = np.sqrt(sx + sy)
            df = (sx + sy) ** 2 / (sx**2 / (nx - 1) + sy**2 / (ny - 1))
            method = "Welch Two Sample t-test"
        if mu == 0:
            res = stats.ttest_ind(x, y, equal_var=equal_var, alternative=alternative)
        else:
            res = stats.ttest_ind(x - mu, y, equal_var=equal_var, alternative=alternative)

    low, high = _conf_int(estimate, se, df, alternative, conf_level)
    return TestResult(
        method=method,
        statistic=float(res.statistic),
        df=float(df),
        p_value=float(res.pvalue),
        estimate=float(estimate),
        conf_low=float(low),
        conf_high=float(high),
        alternative=alternative,
        conf_level=conf_level,
    )


def t_test_formula(
    data: pd.DataFrame,
    response: str,
    group: str,
    paired: bool = False,
    id_col: Optional[str] = None,
    **kwargs,
) -> TestResult:
    """
    t-test of ``response`` between the two levels of ``group`` (first level minus second).

    For paired tests rows are matched on ``id_col`` when given, otherwise by order.
    """
    require_columns(data, [response, group] + ([id_col] if id_col else []))
    levels = sorted(data[group].dropna().unique())
    if len(levels) != 2:
        raise ValueError(f"{group!r} must have exactly two levels, found {len(levels)}")
    a = data[data[group] == levels[0]]
    b = data[data[group] == levels[1]]
    if paired and id_col:
        merged = a[[id_col, response]].merge(b[[id_col, response]], on=id_col, suffixes=("_x", "_y"))
        if len(merged) != len(a) or len(merged) != len(b):
            raise ValueError(f"Rows of the two groups do not pair up one-to-one on {id_col!r}")
        return t_test(merged[f"{response}_x"], merged[f"{response}_y"], paired=True, **kwargs)
    return t_test(a[response], b[response], paired=paired, **kwargs)


def cohens_d(x, y=None, paired: bool = False) -> float:
    x = np.asarray(x, dtype=float)
    if y is None:
        return float(x.mean() / x.std(ddof=1))
    y = np.asarray(y, dtype=float)
    if paired:
        d = x - y
        return float(d.mean() / d.std(ddof=1))
    nx, ny = len(x), len(y)
    pooled_std = np.sqrt(((nx - 1) * x.var(ddof=1) + (ny - 1) * y.var(ddof=1)) / (nx + ny - 2))
    return float((x.mean() - y.mean()) / pooled_std)


def check_normality(x, alpha: float = 0.05) -> Dict[str, Any]:
    """Shapiro-Wilk test; ``normal`` is True when normality is not rejected."""
    x = np.asarray(x, dtype=float)
    if len(x) < 3:
        raise ValueError("Shapiro-Wilk needs at least 3 observations")
    stat, p = stats.shapiro(x)
    return {"statistic": float(stat), "p_value": float(p), "normal": bool(p > alpha)}


def levene_test(data: pd.DataFrame, response: str, group: str) -> Dict[str, float]:
    """Brown-Forsythe / Levene test (median-centred) for equal group variances."""
    require_columns(data, [response, group])
    samples = [g[response].values for _, g in data.groupby(group)]
    stat, p = stats.levene(*samples, center="median")
    return {"statistic": float(stat), "p_value": float(p)}


def anova(data: pd.DataFrame, formula: str, typ: int = 2) -> pd.DataFrame:
    """
    ANOVA table of a linear model with eta squared effect sizes.

    Columns: df, sum_sq, mean_sq, f_value, p_value, eta_sq, partial_eta_sq.
    """
    result = smf.ols(formula, data=data).fit()
    table = sm.stats.anova_lm(result, typ=typ)
    table = table.rename(columns={"F": "f_value", "PR(>F)": "p_value"})
    table["mean_sq"] = table["sum_sq"] / table["df"]
    ss_resid = float(table.loc["Residual", "sum_sq"])
    table["eta_sq"] = table["sum_sq"] / table["sum_sq"].sum()
    table["partial_eta_sq"] = table["sum_sq"] / (table["sum_sq"] + ss_resid)
    table.loc["Residual", ["eta_sq", "partial_eta_sq"]] = np.nan
    table.index.name = "term"
    return table[["df", "sum_sq", "mean_sq", "f_value", "p_value", "eta_sq", "partial_eta_sq"]]


def tukey_hsd(data: pd.DataFrame, response: str, group: str, alpha: float = 0.05) -> pd.DataFrame:
    """Tukey honest significant differences; ``diff`` is group2 minus group1."""
    require_columns(data, [response, group])
    res = pairwise_tukeyhsd(endog=data[response].values, groups=data[group].astype(str).values, alpha=alpha)
    pairs = list(combinations(res.groupsunique, 2))
    return pd.DataFrame(
        {
            "group1": [p[0] for p in pairs],
            "group2": [p[1] for p in pairs],
            "diff": np.asarray(res.meandiffs),
            "lower": np.asarray(res.confint)[:, 0],
            "upper": np.asarray(res.confint)[:, 1],
            "p_adj": np.asarray(res.pvalues),
            "reject": np.asarray(res.reject, dtype=bool),
        }
    )


def pairwise_t_tests(
    data: pd.DataFrame,
    response: str,
    group: str,
    p_adjust: str = "holm",
    pooled_sd: bool = True,
) -> pd.DataFrame:
    """
    All pairwise t-tests between levels of ``group`` with p-value adjustment.

    With ``pooled_sd`` the standard deviation is pooled over all groups
    (df = N - k), otherwise each pair gets a Welch test.
    """
    require_columns(data, [response, group])
    grouped = {str(k): g[response].to_numpy(dtype=float) for k, g in data.groupby(group)}
    levels = sorted(grouped)
    if len(levels) < 2:
        raise ValueError(f"{group!r} needs at least two levels")

    if pooled_sd:
        n_total = sum(len(v) for v in grouped.values())
        df = n_total - len(levels)
        sp = np.sqrt(sum((len(v) - 1) * v.var(ddof=1) for v in grouped.values()) / df)

    rows = []
    for a, b in combinations(levels, 2):
        xa, xb = grouped[a], grouped[b]
        if pooled_sd:
            t = (xb.mean() - xa.mean()) / (sp * np.sqrt(1 / len(xa) + 1 / len(xb)))
            p = 2 * stats.t.sf(abs(t), df)
        else:
            t, p = stats.ttest_ind(xb, xa, equal_var=False)
        rows.append({"group1": a, "group2": b, "diff": xb.mean() - xa.mean(), "statistic": float(t), "p_value": float(p)})

    table = pd.DataFrame(rows)
    method = p_adjust.lower()
    if method == "none":
        table["p_adj"] = table["p_value"]
    else:
        if method not in P_ADJUST:
            raise ValueError(f"Unknown p_adjust: {p_adjust!r}. Choose from {sorted(P_ADJUST) + ['none']}")
        table["p_adj"] = multipletests(table["p_value"].values, method=P_ADJUST[method])[1]
    return table
