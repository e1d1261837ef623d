"""
SQLEvaluatorAgent

LLM-as-judge scoring of a generated query, optionally informed by what the
query actually returned when executed.
"""

import logging
from typing import Any

from ambient.agents.base import BaseAgent
from ambient.llm.parsing import parse_score
from ambient.models.agent import SQLEvaluationInput, SQLEvaluationOutput
from ambient.models.results import SQLEvaluation
from ambient.prompts.builders import build_sql_evaluation_prompt

logger = logging.getLogger(__name__)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def coerce_evaluation(payload: dict[str, Any] | None) -> SQLEvaluation:
    """Build an evaluation from model JSON, defaulting every malformed field."""
    if payload is None:
        return SQLEvaluation()

    summary = payload.get("summary")
    suggestions = payload.get("suggestions")
    return SQLEvaluation(
        score=parse_score(payload.get("score")),
        summary=summary if isinstance(summary, str) and summary else "No summary provided",
        strengths=_string_list(payload.get("strengths")),
        issues=_string_list(payload.get("issues")),
        suggestions=suggestions if isinstance(suggestions, str) else "",
    )


class SQLEvaluatorAgent(BaseAgent):
    """Scores SQL in ``[0, 1]``. Malformed model output yields a zero score."""

    def __init__(self, gateway=None):
        super().__init__(name="SQLEvaluatorAgent", gateway=gateway)

    async def execute(self, input: SQLEvaluationInput) -> SQLEvaluationOutput:
        prompt = build_sql_evaluation_prompt(
            question=input.query,
            sql=input.sql,
            schema=input.schema_name,
            tables=input.tables,
            execution_success=input.execution_success,
            execution_error=input.execution_error,
            result=input.execution_result,
            sample_size=self.limits.evaluation_sample_rows,
        )
        payload = await self.gateway.complete_json("evaluate_sql", prompt)
        self._track_llm_call()

        evaluation = coerce_evaluation(payload)
        if payload is None:
            logger.warning("Evaluation output unparseable, using default", extra={"agent": self.name})
        logger.info(
            f"SQL scored {evaluation.percent}%",
            extra={"agent": self.name, "score": evaluation.score},
        )
        return SQLEvaluationOutput(evaluation=evaluation)
