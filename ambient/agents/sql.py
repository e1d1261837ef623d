"""
SQLAgent

Generates PostgreSQL from a natural-language question, either against one
table (with sample rows) or across several tables that must be joined.
"""

import logging

from ambient.agents.base import BaseAgent
from ambient.llm.parsing import ensure_statement_terminator
from ambient.models.agent import LLMOutputError, SQLGenerationInput, SQLGenerationOutput
from ambient.prompts.builders import build_joined_sql_prompt, build_sql_generation_prompt

logger = logging.getLogger(__name__)


class SQLAgent(BaseAgent):
    """
    SQL generation agent.

    Usage:
        agent = SQLAgent()
        output = await agent(
            SQLGenerationInput(
                query="How many orders per customer?",
                schema_name="public",
                tables=tables_with_columns,
                joined=True,
            )
        )
        sql = output.sql
    """

    def __init__(self, gateway=None):
        super().__init__(name="SQLAgent", gateway=gateway)

    async def execute(self, input: SQLGenerationInput) -> SQLGenerationOutput:
        if input.joined:
            prompt = build_joined_sql_prompt(
                input.schema_name, input.query, input.tables, input.conversation
            )
            sql = ensure_statement_terminator(
                await self.gateway.complete_sql("generate_joined_sql", prompt)
            )
        else:
            table = input.tables[0]
            prompt = build_sql_generation_prompt(
                schema=input.schema_name or "public",
                table=table.table,
                columns=table.columns,
                question=input.query,
                sample_rows=input.sample_rows,
                sample_size=self.limits.sql_sample_rows,
            )
            sql = await self.gateway.complete_sql("generate_sql", prompt)
        self._track_llm_call()

        if not sql:
            raise LLMOutputError(self.name, "Model returned no SQL", context={"query": input.query})

        logger.debug("Generated SQL", extra={"agent": self.name, "sql": sql[:200]})
        return SQLGenerationOutput(sql=sql)
