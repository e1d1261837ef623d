"""
Agents

One agent per LLM task. Every agent is called as ``await agent(input)`` and
goes through ``BaseAgent.__call__`` for timing, logging and error wrapping.
"""

from ambient.agents.base import BaseAgent
from ambient.agents.chart import ChartConfigAgent
from ambient.agents.erd import ERDLayoutAgent
from ambient.agents.evaluator import SQLEvaluatorAgent
from ambient.agents.interpreter import InterpreterAgent
from ambient.agents.questions import QuestionGeneratorAgent
from ambient.agents.refiner import SQLRefinerAgent
from ambient.agents.schema_analyst import SchemaAnalystAgent
from ambient.agents.sql import SQLAgent
from ambient.agents.tables import TableIdentifierAgent

__all__ = [
    "BaseAgent",
    "ChartConfigAgent",
    "ERDLayoutAgent",
    "InterpreterAgent",
    "QuestionGeneratorAgent",
    "SchemaAnalystAgent",
    "SQLAgent",
    "SQLEvaluatorAgent",
    "SQLRefinerAgent",
    "TableIdentifierAgent",
]
