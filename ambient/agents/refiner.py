"""
SQLRefinerAgent

Rewrites a query using its evaluation feedback and execution outcome.
"""

import logging

from ambient.agents.base import BaseAgent
from ambient.models.agent import LLMOutputError, SQLRefinementInput, SQLRefinementOutput
from ambient.prompts.builders import build_sql_refinement_prompt

logger = logging.getLogger(__name__)


class SQLRefinerAgent(BaseAgent):
    def __init__(self, gateway=None):
        super().__init__(name="SQLRefinerAgent", gateway=gateway)

    async def execute(self, input: SQLRefinementInput) -> SQLRefinementOutput:
        prompt = build_sql_refinement_prompt(
            question=input.query,
            original_sql=input.original_sql,
            evaluation=input.evaluation,
            execution=input.execution,
            schema=input.schema_name,
            tables=input.tables,
            sample_size=self.limits.evaluation_sample_rows,
        )
        refined_sql = await self.gateway.complete_sql("refine_sql", prompt)
        self._track_llm_call()

        if not refined_sql:
            raise LLMOutputError(self.name, "Model returned no refined SQL")
        return SQLRefinementOutput(refined_sql=refined_sql)
