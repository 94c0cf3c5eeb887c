# models_registry.py
from typing import Any, Callable, Dict, Tuple

from .logistic_regression import create_lr_factory
from .naive_bayes import create_nb_factory

# default parameters per classifier; the tutorials pass these unless overridden
CLASSIFIER_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "nb": {"smoothing": 1.0, "prior": "uniform", "distribution": "multinomial"},
    "bernoulli_nb": {"smoothing": 1.0, "prior": "uniform", "distribution": "bernoulli"},
    "logreg": {"weighting": "tfidf", "C": 1.0, "solver": "liblinear", "max_iter": 500},
}

ALIASES = {
    "naive_bayes": "nb",
    "multinomial_nb": "nb",
    "bernoulli": "bernoulli_nb",
    "lr": "logreg",
    "logistic": "logreg",
}


def get_classifier_factory(name: str) -> Tuple[Callable[[Dict[str, Any]], Any], Dict[str, Any]]:
    """
    Return (factory, default_params). factory: params(dict) -> classifier
    """
    key = ALIASES.get(name.lower(), name.lower())
    if key not in CLASSIFIER_DEFAULTS:
        raise ValueError(f"Unknown classifier: {name}")
    factory = create_lr_factory() if key == "logreg" else create_nb_factory()
    return factory, dict(CLASSIFIER_DEFAULTS[key])
