"""
Base Agent Framework

Abstract base class for every LLM task agent.
Provides consistent interface, timing, logging, and error handling.

Usage:
    class MyAgent(BaseAgent):
        def __init__(self, gateway=None):
            super().__init__(name="MyAgent", gateway=gateway)

        async def execute(self, input: MyInput) -> MyOutput:
            text = await self.gateway.complete("interpret_results", prompt)
            self._track_llm_call()
            return MyOutput(interpretation=text)
"""

import logging
import time
from abc import ABC, abstractmethod

from ambient.config import MissingConfigurationError
from ambient.llm.gateway import LLMGateway
from ambient.models.agent import AgentError, AgentInput, AgentMetadata, AgentOutput

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """
    Abstract base class for all agents.

    Responsibilities:
        - Define standard interface via execute() method
        - Provide timing and performance tracking
        - Handle logging and error propagation
        - Manage execution metadata

    The __call__ method wraps execute() with timing and logging. Failures are
    never retried: ``AgentError`` and missing configuration propagate as-is,
    anything else is wrapped in ``AgentError``.
    """

    def __init__(self, name: str, gateway: LLMGateway | None = None):
        self.name = name
        self._gateway = gateway
        self._metadata = self._create_metadata()

    @property
    def gateway(self) -> LLMGateway:
        """LLM gateway, created from settings on first use."""
        if self._gateway is None:
            self._gateway = LLMGateway()
        return self._gateway

    @abstractmethod
    async def execute(self, input: AgentInput) -> AgentOutput:
        """
        Execute the agent's core logic.

        Raises:
            AgentError: On execution failures
        """
        pass  # pragma: no cover - abstract method

    async def __call__(self, input: AgentInput) -> AgentOutput:
        """Execute the agent with timing, logging, and error handling."""
        start_time = time.perf_counter()
        self._metadata = self._create_metadata()

        logger.info(
            f"Starting {self.name}",
            extra={"agent": self.name, "query": input.query[:100]},
        )

        try:
            output = await self.execute(input)
        except (AgentError, MissingConfigurationError) as e:
            self._finish(start_time, error=str(e))
            logger.error(
                f"Failed {self.name}",
                extra={"agent": self.name, "error": str(e)},
            )
            raise
        except Exception as e:
            duration_ms = self._finish(start_time, error=str(e))
            logger.error(
                f"Unexpected error in {self.name}",
                extra={
                    "agent": self.name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "duration_ms": duration_ms,
                },
                exc_info=True,
            )
            raise AgentError(
                agent=self.name,
                message=f"Unexpected error: {e}",
                recoverable=False,
                context={"error_type": type(e).__name__},
            ) from e

        duration_ms = self._finish(start_time)
        output.metadata = self._metadata

        logger.info(
            f"Completed {self.name}",
            extra={
                "agent": self.name,
                "success": output.success,
                "duration_ms": duration_ms,
                "llm_calls": self._metadata.llm_calls,
            },
        )
        return output

    def _finish(self, start_time: float, error: str | None = None) -> float:
        duration_ms = (time.perf_counter() - start_time) * 1000
        self._metadata.mark_complete()
        self._metadata.duration_ms = duration_ms
        self._metadata.error = error
        return duration_ms

    def _create_metadata(self) -> AgentMetadata:
        return AgentMetadata(agent_name=self.name)

    def _track_llm_call(self) -> None:
        """Count an LLM request against this run's metadata."""
        self._metadata.llm_calls += 1

    @property
    def limits(self):
        """Prompt sampling sizes and thresholds (``PipelineSettings``)."""
        return self.gateway.settings.pipeline
