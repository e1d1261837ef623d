"""
Evaluation Routes

Runs the LangSmith SQL-generation experiment and reports its configuration.
"""

import logging

from fastapi import APIRouter, status

from ambient.api.errors import ApiError
from ambient.evaluation import SQLGenerationEvaluation, evaluation_configuration
from ambient.evaluation.runner import STATUS_DESCRIPTION
from ambient.models.api import (
    EvaluateSQLGenerationRequest,
    EvaluationRunResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/evaluate-sql-generation", response_model=EvaluationRunResponse)
async def evaluate_sql_generation(
    payload: EvaluateSQLGenerationRequest | None = None,
) -> EvaluationRunResponse:
    """Get or create the reference dataset and run one experiment over it."""
    from ambient.api.main import get_component

    payload = payload or EvaluateSQLGenerationRequest()
    evaluation: SQLGenerationEvaluation = get_component("evaluation")
    try:
        summary = await evaluation.run(
            dataset_name=payload.dataset_name,
            experiment_prefix=payload.experiment_prefix,
        )
    except ApiError:
        raise
    except Exception as e:
        # LangSmith and provider errors are reported verbatim.
        logger.error(f"Error running SQL evaluation: {e}")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Unknown error occurred"
        ) from e
    return EvaluationRunResponse(**summary)


@router.get("/evaluate-sql-generation", response_model=StatusResponse)
async def evaluate_sql_generation_status() -> StatusResponse:
    return StatusResponse(
        configuration=evaluation_configuration(),
        description=STATUS_DESCRIPTION,
    )
