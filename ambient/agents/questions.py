"""
QuestionGeneratorAgent

Suggests example questions a user could ask about a schema.
"""

import logging
from typing import Any

from ambient.agents.base import BaseAgent
from ambient.llm.parsing import extract_json_array, extract_json_object
from ambient.models.agent import QuestionGenerationInput, QuestionGenerationOutput
from ambient.prompts.builders import build_question_generation_prompt

logger = logging.getLogger(__name__)


def extract_questions(text: str, limit: int = 10) -> list[str]:
    """
    Pull question strings out of model output.

    Accepts a bare array, ``{"questions": [...]}`` or an object with any
    array value. Blank and non-string entries are dropped.
    """
    items: list[Any] | None = None
    payload = extract_json_object(text)
    if payload is not None:
        if isinstance(payload.get("questions"), list):
            items = payload["questions"]
        else:
            items = next((v for v in payload.values() if isinstance(v, list)), None)
    if items is None:
        items = extract_json_array(text)
    if items is None:
        return []

    questions = [item.strip() for item in items if isinstance(item, str) and item.strip()]
    return questions[:limit]


class QuestionGeneratorAgent(BaseAgent):
    def __init__(self, gateway=None):
        super().__init__(name="QuestionGeneratorAgent", gateway=gateway)

    async def execute(self, input: QuestionGenerationInput) -> QuestionGenerationOutput:
        prompt = build_question_generation_prompt(
            input.schema_name, input.tables, input.schema_analysis
        )
        text = await self.gateway.complete("generate_questions", prompt)
        self._track_llm_call()

        questions = extract_questions(text, limit=self.limits.max_questions)
        if not questions:
            logger.warning("No valid questions generated", extra={"agent": self.name})
        return QuestionGenerationOutput(questions=questions)
