"""
InterpreterAgent

Summarises a result set in plain language.
"""

from ambient.agents.base import BaseAgent
from ambient.models.agent import InterpretationInput, InterpretationOutput
from ambient.prompts.builders import build_interpretation_prompt


class InterpreterAgent(BaseAgent):
    def __init__(self, gateway=None):
        super().__init__(name="InterpreterAgent", gateway=gateway)

    async def execute(self, input: InterpretationInput) -> InterpretationOutput:
        prompt = build_interpretation_prompt(
            input.query, input.sql, input.result, limit=self.limits.interpretation_rows
        )
        text = await self.gateway.complete("interpret_results", prompt)
        self._track_llm_call()
        return InterpretationOutput(interpretation=text.strip())
