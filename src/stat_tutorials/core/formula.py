# formula.py
"""Parsing of lme4-style mixed-model formulas, e.g. ``y ~ x + (1 + x | g)``."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

BAR_RE = re.compile(r"\(([^()|]+)\|([^()|]+)\)")


@dataclass
class RandomTerm:
    group: str
    intercept: bool = True
    slopes: List[str] = field(default_factory=list)

    def re_formula(self) -> str:
        """statsmodels MixedLM ``re_formula`` for this term."""
        if not self.slopes:
            return "~1"
        rhs = " + ".join(self.slopes)
        return f"~{rhs}" if self.intercept else f"~0 + {rhs}"

    def vc_formulas(self) -> Dict[str, str]:
        """Independent variance components, keyed ``group`` / ``group:slope``."""
        out = {}
        if self.intercept:
            out[self.group] = f"0 + C({self.group})"
        for s in self.slopes:
            out[f"{self.group}:{s}"] = f"0 + C({self.group}):{s}"
        return out


@dataclass
class MixedFormula:
    response: str
    fixed: str
    random: List[RandomTerm]

    @property
    def groups(self) -> List[str]:
        seen = []
        for t in self.random:
            if t.group not in seen:
                seen.append(t.group)
        return seen


def _split_terms(rhs: str) -> List[str]:
    # "-1" is folded into "0" so callers only check one spelling
    rhs = re.sub(r"-\s*1\b", "+ 0", rhs)
    return [t.strip() for t in rhs.split("+") if t.strip()]


def parse_mixed_formula(formula: str) -> MixedFormula:
    if "~" not in formula:
        raise ValueError(f"Formula has no response: {formula!r}")
    response, rhs = (s.strip() for s in formula.split("~", 1))
    if not response:
        raise ValueError(f"Formula has no response: {formula!r}")

    random: List[RandomTerm] = []
    for lhs, group in BAR_RE.findall(rhs):
        group = group.strip()
        if "/" in group or ":" in group:
            raise ValueError(f"Nested grouping is not supported: ({lhs}|{group})")
        terms = _split_terms(lhs)
        intercept = "0" not in terms
        slopes = [t for t in terms if t not in ("0", "1")]
        if not intercept and not slopes:
            raise ValueError(f"Random term varies nothing: ({lhs}|{group})")
        random.append(RandomTerm(group=group, intercept=intercept, slopes=slopes))

    if not random:
        raise ValueError(f"Formula has no random-effect terms: {formula!r}")

    fixed_rhs = BAR_RE.sub("", rhs)
    fixed_terms = [t.strip() for t in fixed_rhs.split("+") if t.strip()]
    fixed = f"{response} ~ {' + '.join(fixed_terms) if fixed_terms else '1'}"
    return MixedFormula(response=response, fixed=fixed, random=random)
