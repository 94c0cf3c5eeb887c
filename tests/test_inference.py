"""Tests for t-tests, ANOVA and post-hoc comparisons.

Reference values are R's output for the sleep and PlantGrowth datasets.
"""

import numpy as np
import pytest

from stat_tutorials.models.inference import (
    anova,
    check_normality,
    cohens_d,
    levene_test,
    pairwise_t_tests,
    t_test,
    t_test_formula,
    tukey_hsd,
)


class TestTTest:
    """Tests for t_test and t_test_formula."""

    def test_welch(self, sleep):
        res = t_test_formula(sleep, "extra", "group")
        assert res.method == "Welch Two Sample t-test"
        assert res.statistic == pytest.approx(-1.8608, abs=1e-4)
        assert res.df == pytest.approx(17.776, abs=1e-3)
        assert res.p_value == pytest.approx(0.07939, abs=1e-5)
        assert res.estimate == pytest.approx(-1.58)
        assert res.conf_low == pytest.approx(-3.3654832, abs=1e-5)
        assert res.conf_high == pytest.approx(0.2054832, abs=1e-5)

    def test_paired(self, sleep):
        res = t_test_formula(sleep, "extra", "group", paired=True, id_col="ID")
        assert res.method == "Paired t-test"
        assert res.statistic == pytest.approx(-4.0621, abs=1e-4)
        assert res.df == 9
        assert res.p_value == pytest.approx(0.002833, abs=1e-6)
        assert res.conf_low == pytest.approx(-2.4598858, abs=1e-5)
        assert res.conf_high == pytest.approx(-0.7001142, abs=1e-5)

    def test_paired_matches_on_id(self, sleep):
        """Shuffling rows does not change a paired test keyed on ID."""
        shuffled = sleep.sample(frac=1.0, random_state=0)
        res = t_test_formula(shuffled, "extra", "group", paired=True, id_col="ID")
        assert res.statistic == pytest.approx(-4.0621, abs=1e-4)

    def test_student(self, sleep):
        res = t_test_formula(sleep, "extra", "group", equal_var=True)
        assert res.df == 18
        assert res.p_value == pytest.approx(0.07919, abs=1e-5)

    def test_one_sample(self, sleep):
        res = t_test(sleep.loc[sleep["group"] == 1, "extra"])
        assert res.statistic == pytest.approx(1.3257, abs=1e-4)
        assert res.p_value == pytest.approx(0.2176, abs=1e-4)

    def test_one_sided(self, sleep):
        two = t_test_formula(sleep, "extra", "group")
        less = t_test_formula(sleep, "extra", "group", alternative="less")
        assert less.p_value == pytest.approx(two.p_value / 2)
        assert less.conf_low == -np.inf
        assert less.conf_high < two.conf_high

    def test_invalid(self, sleep, plant_growth):
        with pytest.raises(ValueError):
            t_test([1, 2, 3], alternative="bigger")
        with pytest.raises(ValueError):
            t_test([1, 2, 3], paired=True)
        with pytest.raises(ValueError):
            t_test_formula(plant_growth, "weight", "group")

    def test_to_dict(self, sleep):
        d = t_test_formula(sleep, "extra", "group").to_dict()
        assert {"method", "statistic", "df", "p_value", "estimate", "conf_low", "conf_high"} <= set(d)


class TestEffectSizesAndAssumptions:
    """Tests for cohens_d, check_normality and levene_test."""

    def test_cohens_d_paired(self, sleep):
        a = sleep.loc[sleep["group"] == 1, "extra"].to_numpy()
        b = sleep.loc[sleep["group"] == 2, "extra"].to_numpy()
        d = a - b
        assert cohens_d(a, b, paired=True) == pytest.approx(d.mean() / d.std(ddof=1))
        assert cohens_d(a, b) < 0

    def test_normality(self):
        res = check_normality(np.random.RandomState(0).normal(size=50))
        assert set(res) == {"statistic", "p_value", "normal"}
        assert res["normal"] is True

    def test_normality_too_small(self):
        with pytest.raises(ValueError):
            check_normality([1.0, 2.0])

    def test_levene(self, plant_growth):
        res = levene_test(plant_growth, "weight", "group")
        assert res["statistic"] == pytest.approx(1.1192, abs=1e-3)
        assert res["p_value"] == pytest.approx(0.3412, abs=1e-3)


class TestAnova:
    """Tests for anova and the post-hoc comparisons."""

    def test_one_way(self, plant_growth):
        table = anova(plant_growth, "weight ~ C(group)")
        row = table.loc["C(group)"]
        assert row["df"] == 2
        assert row["f_value"] == pytest.approx(4.846, abs=1e-3)
        assert row["p_value"] == pytest.approx(0.01591, abs=1e-5)
        assert row["sum_sq"] == pytest.approx(3.76634, abs=1e-4)
        assert row["eta_sq"] == pytest.approx(3.76634 / 14.25843, abs=1e-4)
        assert table.loc["Residual", "df"] == 27
        assert np.isnan(table.loc["Residual", "eta_sq"])

    def test_tukey(self, plant_growth):
        tukey = tukey_hsd(plant_growth, "weight", "group").set_index(["group1", "group2"])
        assert len(tukey) == 3
        assert tukey.loc[("trt1", "trt2"), "diff"] == pytest.approx(0.865)
        assert tukey.loc[("trt1", "trt2"), "p_adj"] == pytest.approx(0.0120, abs=2e-3)
        assert bool(tukey.loc[("trt1", "trt2"), "reject"]) is True
        assert tukey.loc[("ctrl", "trt1"), "p_adj"] == pytest.approx(0.3909, abs=2e-3)

    def test_pairwise_holm(self, plant_growth):
        pairs = pairwise_t_tests(plant_growth, "weight", "group").set_index(["group1", "group2"])
        assert pairs.loc[("ctrl", "trt1"), "p_adj"] == pytest.approx(0.194, abs=1e-3)
        assert pairs.loc[("ctrl", "trt2"), "p_adj"] == pytest.approx(0.175, abs=1e-3)
        assert pairs.loc[("trt1", "trt2"), "p_adj"] == pytest.approx(0.013, abs=1e-3)

    def test_pairwise_unadjusted(self, plant_growth):
        pairs = pairwise_t_tests(plant_growth, "weight", "group", p_adjust="none", pooled_sd=False)
        np.testing.assert_allclose(pairs["p_adj"], pairs["p_value"])

    def test_pairwise_unknown_adjustment(self, plant_growth):
        with pytest.raises(ValueError):
            pairwise_t_tests(plant_growth, "weight", "group", p_adjust="magic")
