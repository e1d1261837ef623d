"""Conversation sessions and the LangGraph chains that answer questions."""

from ambient.pipeline.orchestrator import AnalyticsPipeline, ExplorationReport
from ambient.pipeline.session import ConversationSession, StepFlags

__all__ = ["AnalyticsPipeline", "ConversationSession", "ExplorationReport", "StepFlags"]
