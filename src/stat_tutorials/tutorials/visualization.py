# visualization.py
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

STARS = ((0.001, "***"), (0.01, "**"), (0.05, "*"), (0.1, "."))
INTERCEPT_NAMES = ("Intercept", "(Intercept)")


def significance_stars(p: float) -> str:
    if p is None or not np.isfinite(p):
        return ""
    for cutoff, mark in STARS:
        if p < cutoff:
            return mark
    return ""


def _save(fig, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=200, bbox_inches="tight")
    plt.close(fig)
    return path


def export_table(df: pd.DataFrame, save_dir: Path, stem: str, index: bool = False, floatfmt: str = ".4f") -> Dict[str, Path]:
    """Write one table as <stem>.csv, <stem>.md and <stem>.html."""
    save_dir = Path(save_dir)
    save_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        "csv": save_dir / f"{stem}.csv",
        "md": save_dir / f"{stem}.md",
        "html": save_dir / f"{stem}.html",
    }
    df.to_csv(paths["csv"], index=index)
    paths["md"].write_text(df.to_markdown(index=index, floatfmt=floatfmt), encoding="utf-8")
    paths["html"].write_text(
        df.to_html(index=index, float_format=lambda v: format(v, floatfmt), na_rep=""),
        encoding="utf-8",
    )
    return paths


def _coefficients(model: Any) -> pd.DataFrame:
    if isinstance(model, pd.DataFrame):
        return model
    if hasattr(model, "coefficients"):
        return model.coefficients
    return model.fixed_effects


def regression_table(models: Dict[str, Any], digits: int = 3) -> pd.DataFrame:
    """
    Side-by-side coefficient table, one column per model.

    Cells read ``estimate<stars> (std_err)``; terms missing from a model are
    left blank. Fit statistics (N, log-likelihood, AIC) are appended when
    the model carries them.

    Args:
        models: Display name -> ModelSummary, MixedModelResult or coefficient table
        digits: Decimal places

    Returns:
        DataFrame with a ``term`` column followed by one column per model
    """
    terms: list = []
    columns = {}
    for name, model in models.items():
        coef = _coefficients(model)
        for term in coef.index:
            if term not in terms:
                terms.append(term)
        columns[name] = {
            term: f"{row.estimate:.{digits}f}{significance_stars(row.p_value)} ({row.std_err:.{digits}f})"
            for term, row in coef.iterrows()
        }
    table = pd.DataFrame(columns, index=terms).fillna("")

    stat_rows = {"N": "nobs", "Log-likelihood": "loglik", "AIC": "aic"}
    extra = {}
    for label, key in stat_rows.items():
        values = {}
        for name, model in models.items():
            value = getattr(model, "fit_statistics", {}).get(key)
            if value is not None:
                values[name] = str(value) if key == "nobs" else f"{value:.{digits - 1}f}"
        if values:
            extra[label] = values
    if extra:
        table = pd.concat([table, pd.DataFrame(extra).T.reindex(columns=table.columns).fillna("")])
    table.index.name = "term"
    return table.reset_index()


def plot_coefficients(coef: pd.DataFrame, save_path: Path, title: str = "Coefficients", drop_intercept: bool = True) -> Path:
    """Point estimates with confidence intervals, one row per term."""
    coef = coef.drop(index=[t for t in INTERCEPT_NAMES if t in coef.index]) if drop_intercept else coef
    y = np.arange(len(coef))
    fig, ax = plt.subplots(figsize=(7, 0.5 * len(coef) + 1.5))
    ax.errorbar(
        coef["estimate"],
        y,
        xerr=[coef["estimate"] - coef["conf_low"], coef["conf_high"] - coef["estimate"]],
        fmt="o",
        capsize=4,
    )
    ax.axvline(0, color="grey", linestyle="--", linewidth=1)
    ax.set_yticks(y)
    ax.set_yticklabels([str(t) for t in coef.index])
    ax.set_xlabel("Estimate")
    ax.set_title(title)
    return _save(fig, save_path)


def plot_caterpillar(ranef: pd.DataFrame, save_path: Path, title: str = "Random effects") -> Path:
    """Sorted per-group conditional modes, one panel per random term."""
    n = ranef.shape[1]
    fig, axes = plt.subplots(1, n, figsize=(4 * n, 0.25 * len(ranef) + 2), squeeze=False)
    for ax, col in zip(axes[0], ranef.columns):
        values = ranef[col].sort_values()
        ax.scatter(values.values, np.arange(len(values)), s=15)
        ax.axvline(0, color="grey", linestyle="--", linewidth=1)
        ax.set_yticks(np.arange(len(values)))
        ax.set_yticklabels([str(ix) for ix in values.index], fontsize=7)
        ax.set_title(str(col))
    fig.suptitle(title)
    return _save(fig, save_path)


def plot_confusion_matrix(cm: np.ndarray, labels: Sequence, save_path: Path, title: str = "Confusion Matrix") -> Path:
    fig, ax = plt.subplots(figsize=(5, 4))
    sns.heatmap(
        np.asarray(cm).astype(int),
        annot=True,
        fmt="d",
        cmap="Blues",
        ax=ax,
        cbar=True,
        square=True,
        xticklabels=[str(label) for label in labels],
        yticklabels=[str(label) for label in labels],
    )
    ax.set_title(title)
    ax.set_xlabel("Predicted")
    ax.set_ylabel("Actual")
    return _save(fig, save_path)


def plot_top_features(top: pd.DataFrame, save_path: Path, title: str = "Most predictive words") -> Path:
    """Horizontal bars per class from a long (class, feature, score) table."""
    classes = list(dict.fromkeys(top["class"]))
    fig, axes = plt.subplots(1, len(classes), figsize=(4.5 * len(classes), 0.35 * top.groupby("class").size().max() + 1.5), squeeze=False)
    for ax, c in zip(axes[0], classes):
        part = top[top["class"] == c].iloc[::-1]
        ax.barh(part["feature"], part["score"])
        ax.set_title(str(c))
        ax.set_xlabel("score")
    fig.suptitle(title)
    return _save(fig, save_path)


def plot_topic_prevalence(proportions: pd.Series, labels: Optional[pd.Series], save_path: Path, title: str = "Expected topic proportions") -> Path:
    """Bars of corpus-level topic shares annotated with each topic's top words."""
    order = proportions.sort_values()
    fig, ax = plt.subplots(figsize=(8, 0.6 * len(order) + 1.5))
    ax.barh([str(t) for t in order.index], order.values)
    if labels is not None:
        for i, topic in enumerate(order.index):
            ax.text(order[topic], i, "  " + str(labels.get(topic, "")), va="center", fontsize=8)
    ax.set_xlim(0, order.max() * 2.2)
    ax.set_xlabel("Proportion")
    ax.set_title(title)
    return _save(fig, save_path)


def plot_group_boxplot(data: pd.DataFrame, response: str, group: str, save_path: Path, title: Optional[str] = None) -> Path:
    fig, ax = plt.subplots(figsize=(6, 4))
    sns.boxplot(data=data, x=group, y=response, ax=ax, color="lightgrey")
    sns.stripplot(data=data, x=group, y=response, ax=ax, color="black", size=4)
    ax.set_title(title or f"{response} by {group}")
    return _save(fig, save_path)


def plot_trajectories(data: pd.DataFrame, x: str, y: str, group: str, save_path: Path, title: Optional[str] = None) -> Path:
    """One line per group, e.g. reaction time over days per subject."""
    fig, ax = plt.subplots(figsize=(7, 5))
    sns.lineplot(data=data, x=x, y=y, hue=group, legend=False, ax=ax, marker="o", markersize=3)
    ax.set_title(title or f"{y} over {x} by {group}")
    return _save(fig, save_path)


def plot_fitted_curves(data: pd.DataFrame, x: str, y: str, curves: Dict[str, pd.DataFrame], save_path: Path, title: str = "Fitted values") -> Path:
    """Observed points plus fitted curves; each curve frame has columns ``x`` and ``fitted``."""
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.scatter(data[x], data[y], alpha=0.6, color="black", s=15, label="observed")
    for name, curve in curves.items():
        ax.plot(curve[x], curve["fitted"], linewidth=2, label=name)
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.set_title(title)
    ax.legend()
    return _save(fig, save_path)
