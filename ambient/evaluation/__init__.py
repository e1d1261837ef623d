"""LangSmith evaluation of SQL generation against a reference dataset."""

from ambient.evaluation.dataset import DEFAULT_DATASET_NAME, SQL_EXAMPLES
from ambient.evaluation.runner import SQLGenerationEvaluation, evaluation_configuration

__all__ = [
    "DEFAULT_DATASET_NAME",
    "SQL_EXAMPLES",
    "SQLGenerationEvaluation",
    "evaluation_configuration",
]
