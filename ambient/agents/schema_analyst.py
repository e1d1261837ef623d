"""
SchemaAnalystAgent

Writes a prose overview of a whole schema: purpose, key tables, inferred
relationships and likely use cases.
"""

from ambient.agents.base import BaseAgent
from ambient.models.agent import SchemaAnalysisInput, SchemaAnalysisOutput
from ambient.prompts.builders import build_schema_analysis_prompt


class SchemaAnalystAgent(BaseAgent):
    def __init__(self, gateway=None):
        super().__init__(name="SchemaAnalystAgent", gateway=gateway)

    async def execute(self, input: SchemaAnalysisInput) -> SchemaAnalysisOutput:
        prompt = build_schema_analysis_prompt(input.schema_name, input.tables)
        analysis = await self.gateway.complete("analyze_schema", prompt)
        self._track_llm_call()
        return SchemaAnalysisOutput(analysis=analysis.strip())
