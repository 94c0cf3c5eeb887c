# Tutorials: one module per topic, shared plots/tables and the pipeline

from .pipeline import TUTORIALS, TutorialPipeline
from .visualization import export_table, regression_table, significance_stars

__all__ = [
    "TUTORIALS",
    "TutorialPipeline",
    "export_table",
    "regression_table",
    "significance_stars",
]
