"""
ChartConfigAgent

Produces a Chart.js configuration object for a result set.
"""

import logging

from ambient.agents.base import BaseAgent
from ambient.llm.parsing import extract_json_object
from ambient.models.agent import ChartConfigInput, ChartConfigOutput, LLMOutputError
from ambient.prompts.builders import build_chart_config_prompt

logger = logging.getLogger(__name__)


class ChartConfigAgent(BaseAgent):
    """
    Asks for a Chart.js config and checks it has ``type`` and ``data``.

    There is no sensible default chart, so unusable output raises
    ``LLMOutputError`` instead of falling back.
    """

    def __init__(self, gateway=None):
        super().__init__(name="ChartConfigAgent", gateway=gateway)

    async def execute(self, input: ChartConfigInput) -> ChartConfigOutput:
        prompt = build_chart_config_prompt(
            question=input.query,
            result=input.result,
            sql=input.sql,
            interpretation=input.interpretation,
            sample_size=self.limits.chart_sample_rows,
        )
        text = await self.gateway.complete("chart_config", prompt)
        self._track_llm_call()

        config = extract_json_object(text)
        if not config or not config.get("type") or not config.get("data"):
            logger.warning(
                "Invalid chart configuration structure",
                extra={"agent": self.name, "preview": text[:200]},
            )
            raise LLMOutputError(self.name, "Failed to parse chart configuration")
        return ChartConfigOutput(chart_config=config)
