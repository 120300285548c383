"""
Inference workbench: one call from baseline data to savings uncertainty.

- run_inference: change-point posterior, summaries, fan, OLS comparison and
  savings posterior bundled into an InferenceReport
- DATASETS: sample heating, cooling and mixed buildings
- cli: `mv-bayes` command-line front end
"""

from workbench.datasets import DATASETS, Dataset, get_dataset
from workbench.pipeline import InferenceReport, run_inference

__all__ = [
    "DATASETS",
    "Dataset",
    "get_dataset",
    "InferenceReport",
    "run_inference",
]
