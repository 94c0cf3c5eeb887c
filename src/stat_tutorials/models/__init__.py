# Model wrappers: library fits turned into tidy tables

from .linear import ModelSummary, coefficient_table, compare_models, fit_glm, fit_lm, make_family
from .mixed import MixedModelResult, fit_glmer, fit_lmer
from .text import DocumentFeatureMatrix
from .naive_bayes import NaiveBayesTextClassifier, create_nb_factory
from .logistic_regression import LogisticTextClassifier, create_lr_factory
from .models_registry import CLASSIFIER_DEFAULTS, get_classifier_factory
from .topics import StructuralTopicModel
from .inference import (
    TestResult,
    t_test,
    t_test_formula,
    anova,
    tukey_hsd,
    pairwise_t_tests,
    cohens_d,
    check_normality,
    levene_test,
)

__all__ = [
    "ModelSummary",
    "coefficient_table",
    "compare_models",
    "fit_glm",
    "fit_lm",
    "make_family",
    "MixedModelResult",
    "fit_glmer",
    "fit_lmer",
    "DocumentFeatureMatrix",
    "NaiveBayesTextClassifier",
    "create_nb_factory",
    "LogisticTextClassifier",
    "create_lr_factory",
    "CLASSIFIER_DEFAULTS",
    "get_classifier_factory",
    "StructuralTopicModel",
    "TestResult",
    "t_test",
    "t_test_formula",
    "anova",
    "tukey_hsd",
    "pairwise_t_tests",
    "cohens_d",
    "check_normality",
    "levene_test",
]
