"""
stat_tutorials: narrated statistics tutorials.

Generalized linear models, multilevel models, text classification,
structural topic models and basic inferential statistics, each run as a
load -> reshape -> fit -> summarise script that writes tables and figures.
"""

__version__ = "0.1.0"
