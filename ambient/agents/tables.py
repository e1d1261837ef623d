"""
TableIdentifierAgent

Picks the tables relevant to a question from the schema's table list.
"""

import logging

from ambient.agents.base import BaseAgent
from ambient.models.agent import TableIdentifierInput, TableIdentifierOutput
from ambient.prompts.builders import build_table_identification_prompt

logger = logging.getLogger(__name__)


class TableIdentifierAgent(BaseAgent):
    """
    Asks the model for a JSON array of table names.

    Only names that appear in the candidate list survive, in the model's
    order and without duplicates. Unparseable output means no tables.
    """

    def __init__(self, gateway=None):
        super().__init__(name="TableIdentifierAgent", gateway=gateway)

    async def execute(self, input: TableIdentifierInput) -> TableIdentifierOutput:
        prompt = build_table_identification_prompt(input.query, input.tables, input.conversation)
        candidates = await self.gateway.complete_json_list("identify_tables", prompt)
        self._track_llm_call()

        if candidates is None:
            logger.warning(
                "Could not parse relevant tables, returning none",
                extra={"agent": self.name},
            )
            return TableIdentifierOutput(relevant_tables=[])

        known = set(input.tables)
        relevant: list[str] = []
        for name in candidates:
            if isinstance(name, str) and name in known and name not in relevant:
                relevant.append(name)

        dropped = len(candidates) - len(relevant)
        if dropped:
            logger.debug(f"Ignored {dropped} unknown or duplicate table names")
        return TableIdentifierOutput(relevant_tables=relevant)
