"""
Analytics Pipeline Orchestrator

LangGraph chains that drive one conversational turn from question to chart:

    ask:       identify tables -> fetch columns (concurrently) -> generate joined SQL
               -> execute -> evaluate -> [refine -> re-execute -> re-evaluate]
               -> interpret -> [chart]
    ask_table: columns + sample rows -> generate SQL -> evaluate -> execute -> interpret

A failed identification, column fetch or SQL generation records ``error`` on
the assistant message and ends that turn. Execution errors are recorded but
the turn continues so the evaluator can judge the failure. Evaluation,
interpretation and chart failures are logged and skipped. Other turns and
the session itself are never affected.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, TypedDict

from langgraph.graph import END, StateGraph

from ambient.agents import (
    ChartConfigAgent,
    ERDLayoutAgent,
    InterpreterAgent,
    QuestionGeneratorAgent,
    SchemaAnalystAgent,
    SQLAgent,
    SQLEvaluatorAgent,
    SQLRefinerAgent,
    TableIdentifierAgent,
)
from ambient.config import MissingConfigurationError, Settings, get_settings
from ambient.connectors.base import ConnectorError
from ambient.database.executor import SQLExecutor
from ambient.database.introspector import SchemaIntrospector
from ambient.llm.gateway import LLMGateway
from ambient.models.agent import (
    AgentError,
    ChartConfigInput,
    ERDLayoutInput,
    InterpretationInput,
    QuestionGenerationInput,
    SchemaAnalysisInput,
    SQLEvaluationInput,
    SQLGenerationInput,
    SQLRefinementInput,
    TableIdentifierInput,
)
from ambient.models.conversation import ConversationTurn, Message
from ambient.models.results import (
    ERDLayout,
    ExecutionOutcome,
    ExecutionSummary,
    QueryResult,
    SQLEvaluation,
)
from ambient.models.schema import ForeignKey, TableWithColumns
from ambient.pipeline.session import ConversationSession

logger = logging.getLogger(__name__)

# Failures that end or skip a step instead of crashing the session
STEP_ERRORS = (AgentError, ConnectorError, MissingConfigurationError)


# ============================================================================
# Turn State Schema
# ============================================================================


class TurnState(TypedDict, total=False):
    """State threaded through a turn's graph. ``message`` is mutated in place."""

    session: ConversationSession
    message: Message
    conversation: list[ConversationTurn]
    table: str | None
    sample_rows: list[dict[str, Any]] | None
    auto_refine: bool
    with_chart: bool
    halted: bool


@dataclass
class ExplorationReport:
    """Everything the schema explorer shows for one schema."""

    schema: str
    tables: list[TableWithColumns]
    foreign_keys: list[ForeignKey]
    analysis: str | None = None
    questions: list[str] = field(default_factory=list)
    layout: ERDLayout | None = None


# ============================================================================
# Analytics Pipeline
# ============================================================================


class AnalyticsPipeline:
    """
    Orchestrates introspection, the SQL agents and execution for a session.

    Usage:
        pipeline = AnalyticsPipeline()
        session = ConversationSession(env="prod", schema="public")
        message = await pipeline.ask(session, "How many orders per customer?")
        if message.can_refine():
            await pipeline.refine(session, message.id)
    """

    def __init__(
        self,
        introspector: SchemaIntrospector | None = None,
        executor: SQLExecutor | None = None,
        gateway: LLMGateway | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.introspector = introspector or SchemaIntrospector(
            self.settings.database, sample_limit=self.settings.pipeline.sample_rows_limit
        )
        self.executor = executor or SQLExecutor(self.introspector)
        self.gateway = gateway or LLMGateway(self.settings)

        self.table_identifier = TableIdentifierAgent(self.gateway)
        self.sql = SQLAgent(self.gateway)
        self.evaluator = SQLEvaluatorAgent(self.gateway)
        self.refiner = SQLRefinerAgent(self.gateway)
        self.interpreter = InterpreterAgent(self.gateway)
        self.chart_generator = ChartConfigAgent(self.gateway)
        self.schema_analyst = SchemaAnalystAgent(self.gateway)
        self.question_generator = QuestionGeneratorAgent(self.gateway)
        self.erd_layout = ERDLayoutAgent(self.gateway)

        self.ask_graph = self._build_chain(
            [
                ("identify_tables", self._run_identify_tables),
                ("fetch_columns", self._run_fetch_columns),
                ("generate_sql", self._run_generate_joined_sql),
                ("execute_sql", self._run_execute_sql),
                ("evaluate_sql", self._run_evaluate_sql),
                ("refine_sql", self._run_auto_refine),
                ("interpret", self._run_interpret),
                ("chart", self._run_chart),
            ]
        )
        self.table_graph = self._build_chain(
            [
                ("load_table", self._run_load_table),
                ("generate_sql", self._run_generate_table_sql),
                ("evaluate_sql", self._run_evaluate_sql),
                ("execute_sql", self._run_execute_sql),
                ("interpret", self._run_interpret),
            ]
        )

    @property
    def refine_threshold(self) -> float:
        return self.settings.pipeline.refine_threshold

    def _build_chain(self, steps: list[tuple[str, Any]]):
        """Compile steps into a linear graph that stops once a step halts."""
        workflow = StateGraph(TurnState)
        for name, node in steps:
            workflow.add_node(name, node)
        workflow.set_entry_point(steps[0][0])

        for (name, _), (next_name, _) in zip(steps, steps[1:]):
            workflow.add_conditional_edges(
                name,
                self._should_continue,
                {"continue": next_name, "end": END},
            )
        workflow.add_edge(steps[-1][0], END)
        return workflow.compile()

    def _should_continue(self, state: TurnState) -> str:
        return "end" if state.get("halted") else "continue"

    def _halt(self, state: TurnState, error: str) -> TurnState:
        state["message"].error = error
        return {"halted": True}

    # ========================================================================
    # Public operations
    # ========================================================================

    async def ask(
        self,
        session: ConversationSession,
        question: str,
        auto_refine: bool = False,
        with_chart: bool = False,
    ) -> Message:
        """Run the joined-table chain for one question and return the assistant message."""
        conversation = session.conversation_context(
            preview_rows=self.settings.pipeline.evaluation_sample_rows
        )
        session.add_user_message(question)
        message = session.add_assistant_message(question)

        await self.ask_graph.ainvoke(
            {
                "session": session,
                "message": message,
                "conversation": conversation,
                "auto_refine": auto_refine,
                "with_chart": with_chart,
                "halted": False,
            }
        )
        logger.info(
            "Turn completed",
            extra={"message_id": message.id, "error": message.error, "sql": message.sql},
        )
        return message

    async def ask_table(self, session: ConversationSession, table: str, question: str) -> Message:
        """Run the single-table chain: the question is answered from ``table`` alone."""
        session.add_user_message(question)
        message = session.add_assistant_message(question)

        await self.table_graph.ainvoke(
            {
                "session": session,
                "message": message,
                "conversation": [],
                "table": table,
                "halted": False,
            }
        )
        return message

    async def refine(self, session: ConversationSession, message_id: str) -> Message:
        """
        Refine a low-scoring query: refine -> execute -> evaluate.

        A refined query that fails to execute is recorded with an empty
        result and is not evaluated.

        Raises:
            KeyError: If the message does not exist
            ValueError: If refinement is not available for the message
        """
        message = session.get_message(message_id)
        if not message.can_refine(self.refine_threshold):
            raise ValueError("Refinement is not available for this message")
        await self._refine_message(session, message)
        return message

    async def chart(
        self, session: ConversationSession, message_id: str, use_refined: bool = False
    ) -> dict[str, Any]:
        """
        Generate a Chart.js config for a message's (refined) result.

        Raises:
            KeyError: If the message does not exist
            ValueError: If the message has no result to chart
            AgentError: If the model output is not a usable chart config
        """
        message = session.get_message(message_id)
        result = message.refined_result if use_refined else message.result
        sql = message.refined_sql if use_refined else message.sql
        if result is None:
            raise ValueError("There is no result to chart for this message")

        with session.step("generating_chart"):
            output = await self.chart_generator(
                ChartConfigInput(
                    query=message.user_question or "",
                    sql=sql,
                    result=result,
                    interpretation=message.interpretation,
                )
            )
        if use_refined:
            message.refined_chart_config = output.chart_config
        else:
            message.chart_config = output.chart_config
        return output.chart_config

    async def explore(self, env: str | None, schema: str) -> ExplorationReport:
        """Describe a schema and run the analysis, question and ERD agents over it."""
        tables, foreign_keys = await self.introspector.describe_schema(env, schema)
        report = ExplorationReport(schema=schema, tables=tables, foreign_keys=foreign_keys)
        if not tables:
            return report

        analysis, layout = await asyncio.gather(
            self.schema_analyst(SchemaAnalysisInput(schema_name=schema, tables=tables)),
            self.erd_layout(ERDLayoutInput(tables=tables, foreign_keys=foreign_keys)),
        )
        report.analysis = analysis.analysis
        report.layout = layout.layout

        questions = await self.question_generator(
            QuestionGenerationInput(
                schema_name=schema, tables=tables, schema_analysis=report.analysis
            )
        )
        report.questions = questions.questions
        return report

    # ========================================================================
    # Graph nodes
    # ========================================================================

    async def _run_identify_tables(self, state: TurnState) -> TurnState:
        session, message = state["session"], state["message"]
        with session.step("identifying_tables"):
            try:
                if not session.tables:
                    listed = await self.introspector.list_tables(session.env, session.schema)
                    session.tables = [table.name for table in listed]
                output = await self.table_identifier(
                    TableIdentifierInput(
                        query=message.user_question,
                        tables=session.tables,
                        conversation=state["conversation"],
                    )
                )
            except STEP_ERRORS as e:
                logger.error(f"Table identification failed: {e}")
                return self._halt(state, "Failed to identify relevant tables")

        if not output.relevant_tables:
            return self._halt(state, "No relevant tables identified for your query")
        message.relevant_tables = output.relevant_tables
        return {"halted": False}

    async def _run_fetch_columns(self, state: TurnState) -> TurnState:
        session, message = state["session"], state["message"]
        with session.step("fetching_columns"):
            try:
                message.tables_with_columns = await self.introspector.describe_tables(
                    session.env, session.schema, message.relevant_tables or []
                )
            except STEP_ERRORS as e:
                logger.error(f"Column fetch failed: {e}")
                return self._halt(state, "Failed to fetch columns for relevant tables")
        return {"halted": False}

    async def _run_load_table(self, state: TurnState) -> TurnState:
        session, message = state["session"], state["message"]
        table = state["table"]
        with session.step("fetching_columns"):
            try:
                columns, sample = await asyncio.gather(
                    self.introspector.list_columns(session.env, session.schema, table),
                    self.introspector.sample_rows(session.env, session.schema, table),
                )
            except STEP_ERRORS as e:
                logger.error(f"Loading {table} failed: {e}")
                return self._halt(state, "Failed to fetch columns")

        message.relevant_tables = [table]
        message.tables_with_columns = [TableWithColumns(table=table, columns=columns)]
        return {"halted": False, "sample_rows": sample.rows}

    async def _generate(self, state: TurnState, joined: bool) -> TurnState:
        session, message = state["session"], state["message"]
        with session.step("generating_sql"):
            try:
                output = await self.sql(
                    SQLGenerationInput(
                        query=message.user_question,
                        conversation=state.get("conversation", []),
                        schema_name=session.schema,
                        tables=message.tables_with_columns,
                        sample_rows=state.get("sample_rows"),
                        joined=joined,
                    )
                )
            except STEP_ERRORS as e:
                logger.error(f"SQL generation failed: {e}")
                return self._halt(state, "Failed to generate SQL")
        message.sql = output.sql
        return {"halted": False}

    async def _run_generate_joined_sql(self, state: TurnState) -> TurnState:
        return await self._generate(state, joined=True)

    async def _run_generate_table_sql(self, state: TurnState) -> TurnState:
        return await self._generate(state, joined=False)

    async def _execute(self, session: ConversationSession, sql: str) -> ExecutionOutcome:
        with session.step("executing_sql"):
            try:
                return await self.executor.execute(session.env, sql)
            except STEP_ERRORS as e:
                logger.error(f"SQL execution failed: {e}")
                return ExecutionOutcome(error="Failed to execute SQL")

    async def _run_execute_sql(self, state: TurnState) -> TurnState:
        session, message = state["session"], state["message"]
        outcome = await self._execute(session, message.sql)
        if outcome.error is not None:
            message.error = outcome.error
        else:
            message.result = outcome.result
        return {"halted": False}

    async def _evaluate(
        self,
        session: ConversationSession,
        message: Message,
        sql: str,
        result: QueryResult | None,
        error: str | None,
    ) -> SQLEvaluation | None:
        with session.step("evaluating"):
            try:
                output = await self.evaluator(
                    SQLEvaluationInput(
                        query=message.user_question,
                        sql=sql,
                        schema_name=session.schema,
                        tables=message.tables_with_columns or [],
                        execution_success=error is None,
                        execution_error=error,
                        execution_result=result,
                    )
                )
            except STEP_ERRORS as e:
                logger.warning(f"SQL evaluation failed: {e}")
                return None
        return output.evaluation

    async def _run_evaluate_sql(self, state: TurnState) -> TurnState:
        session, message = state["session"], state["message"]
        message.evaluation = await self._evaluate(
            session, message, message.sql, message.result, message.error
        )
        return {"halted": False}

    async def _run_auto_refine(self, state: TurnState) -> TurnState:
        message = state["message"]
        if state.get("auto_refine") and message.can_refine(self.refine_threshold):
            await self._refine_message(state["session"], message)
        return {"halted": False}

    async def _refine_message(self, session: ConversationSession, message: Message) -> None:
        outcome = ExecutionOutcome(result=message.result, error=message.error)
        with session.step("refining"):
            try:
                output = await self.refiner(
                    SQLRefinementInput(
                        query=message.user_question,
                        original_sql=message.sql,
                        evaluation=message.evaluation,
                        execution=ExecutionSummary.from_outcome(
                            outcome, self.settings.pipeline.evaluation_sample_rows
                        ),
                        schema_name=session.schema,
                        tables=message.tables_with_columns or [],
                    )
                )
            except STEP_ERRORS as e:
                logger.warning(f"SQL refinement failed: {e}")
                return
        message.refined_sql = output.refined_sql

        refined = await self._execute(session, message.refined_sql)
        if refined.error is not None:
            logger.info("Refined SQL failed to execute", extra={"error": refined.error})
            message.refined_result = QueryResult(columns=[], rows=[], row_count=0)
            return

        message.refined_result = refined.result
        message.refined_evaluation = await self._evaluate(
            session, message, message.refined_sql, refined.result, None
        )

    def _best_result(self, message: Message) -> tuple[str | None, QueryResult | None]:
        if message.refined_result is not None and message.refined_evaluation is not None:
            return message.refined_sql, message.refined_result
        return message.sql, message.result

    async def _run_interpret(self, state: TurnState) -> TurnState:
        session, message = state["session"], state["message"]
        sql, result = self._best_result(message)
        if result is None:
            return {"halted": False}

        with session.step("interpreting"):
            try:
                output = await self.interpreter(
                    InterpretationInput(query=message.user_question, sql=sql, result=result)
                )
            except STEP_ERRORS as e:
                logger.warning(f"Interpretation failed: {e}")
                return {"halted": False}
        message.interpretation = output.interpretation
        message.content = output.interpretation
        return {"halted": False}

    async def _run_chart(self, state: TurnState) -> TurnState:
        session, message = state["session"], state["message"]
        _, result = self._best_result(message)
        if not state.get("with_chart") or result is None:
            return {"halted": False}

        use_refined = result is message.refined_result
        try:
            await self.chart(session, message.id, use_refined=use_refined)
        except STEP_ERRORS as e:
            logger.warning(f"Chart generation failed: {e}")
        return {"halted": False}
