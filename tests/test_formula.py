"""Tests for lme4-style formula parsing."""

import pytest

from stat_tutorials.core.formula import RandomTerm, parse_mixed_formula


class TestParseMixedFormula:
    """Tests for parse_mixed_formula."""

    def test_random_intercept(self):
        mf = parse_mixed_formula("Reaction ~ Days + (1 | Subject)")
        assert mf.response == "Reaction"
        assert mf.fixed == "Reaction ~ Days"
        assert mf.groups == ["Subject"]
        assert mf.random[0].intercept is True
        assert mf.random[0].slopes == []

    def test_random_slope(self):
        mf = parse_mixed_formula("Reaction ~ Days + (Days | Subject)")
        term = mf.random[0]
        assert term.intercept is True
        assert term.slopes == ["Days"]
        assert term.re_formula() == "~Days"

    def test_slope_without_intercept(self):
        """Both 0 + x and x - 1 drop the random intercept."""
        for lhs in ("0 + Days", "Days - 1"):
            term = parse_mixed_formula(f"y ~ Days + ({lhs} | g)").random[0]
            assert term.intercept is False
            assert term.slopes == ["Days"]
            assert term.re_formula() == "~0 + Days"

    def test_intercept_only_fixed_part(self):
        assert parse_mixed_formula("y ~ (1 | g)").fixed == "y ~ 1"

    def test_several_groups(self):
        mf = parse_mixed_formula("y ~ x + (1 | school) + (1 | class)")
        assert mf.groups == ["school", "class"]

    def test_vc_formulas(self):
        term = RandomTerm(group="g", intercept=True, slopes=["x"])
        assert term.vc_formulas() == {"g": "0 + C(g)", "g:x": "0 + C(g):x"}

    @pytest.mark.parametrize(
        "formula",
        [
            "Days + (1 | Subject)",
            " ~ Days + (1 | Subject)",
            "y ~ x",
            "y ~ x + (1 | a/b)",
            "y ~ x + (0 | g)",
        ],
    )
    def test_invalid(self, formula):
        """Unsupported or malformed formulas raise ValueError."""
        with pytest.raises(ValueError):
            parse_mixed_formula(formula)
