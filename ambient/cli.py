"""
Ambient Analytics CLI

Command-line interface for exploring a Postgres schema and asking it questions.

Usage:
    ambient serve                              # Run the API server
    ambient schemas                            # List schemas
    ambient tables public                      # List tables in a schema
    ambient columns public orders              # Describe a table
    ambient ask public "Orders per customer?"  # One question, joined-table chain
    ambient ask public "..." --table orders    # One question about a single table
    ambient chat public                        # Conversation with /refine and /chart
    ambient explore public                     # Schema analysis, questions, ERD layout
    ambient evaluate                           # LangSmith SQL-generation experiment
"""

import asyncio
import json
import logging
import subprocess
import sys
from typing import Any

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ambient import __version__
from ambient.config import MissingConfigurationError, get_settings
from ambient.connectors.base import ConnectorError
from ambient.evaluation import SQLGenerationEvaluation
from ambient.models.agent import AgentError
from ambient.models.conversation import Message
from ambient.models.results import QueryResult, SQLEvaluation
from ambient.pipeline import AnalyticsPipeline, ConversationSession, ExplorationReport

console = Console()

CLI_ERRORS = (AgentError, ConnectorError, MissingConfigurationError)
MAX_DISPLAY_ROWS = 20


def configure_cli_logging(verbose: bool) -> None:
    if verbose:
        get_settings().logging.configure()
        return
    logging.disable(logging.CRITICAL)
    for logger_name in ("ambient", "httpx", "openai", "anthropic", "langsmith", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.CRITICAL)


def _run(coro) -> Any:
    """Run a coroutine, turning expected failures into a clean exit."""
    try:
        return asyncio.run(coro)
    except CLI_ERRORS as e:
        message = e.message if hasattr(e, "message") else str(e)
        console.print(f"[red]Error: {message}[/red]")
        sys.exit(1)


# ============================================================================
# Rendering
# ============================================================================


def render_result(result: QueryResult, title: str = "Results") -> None:
    table = Table(show_header=True, header_style="bold cyan", title=title)
    for column in result.columns:
        table.add_column(column)
    for row in result.rows[:MAX_DISPLAY_ROWS]:
        table.add_row(*["" if row.get(c) is None else str(row.get(c)) for c in result.columns])
    console.print(table)
    shown = min(len(result.rows), MAX_DISPLAY_ROWS)
    console.print(f"[dim]{result.row_count} row(s), showing {shown}[/dim]")


def render_evaluation(evaluation: SQLEvaluation, title: str = "Evaluation") -> None:
    color = "green" if evaluation.score >= 0.9 else "yellow" if evaluation.score >= 0.6 else "red"
    lines = [f"[bold {color}]{evaluation.percent}%[/bold {color}]  {evaluation.summary}"]
    if evaluation.strengths:
        lines.append("\n[bold]Strengths[/bold]")
        lines.extend(f"  + {item}" for item in evaluation.strengths)
    if evaluation.issues:
        lines.append("\n[bold]Issues[/bold]")
        lines.extend(f"  - {item}" for item in evaluation.issues)
    if evaluation.suggestions:
        lines.append(f"\n[bold]Suggestions[/bold]\n  {evaluation.suggestions}")
    console.print(Panel("\n".join(lines), title=title, border_style=color))


def render_message(message: Message, threshold: float = 0.9) -> None:
    """Display every populated part of an assistant message."""
    if message.relevant_tables:
        console.print(f"[dim]Tables: {', '.join(message.relevant_tables)}[/dim]")
    if message.sql:
        console.print(Panel(message.sql, title="SQL", border_style="cyan", highlight=True))
    if message.error:
        console.print(f"[red]{message.error}[/red]")
    if message.result is not None:
        render_result(message.result)
    if message.evaluation is not None:
        render_evaluation(message.evaluation)

    if message.refined_sql:
        console.print(
            Panel(message.refined_sql, title="Refined SQL", border_style="magenta", highlight=True)
        )
        if message.refined_result is not None:
            render_result(message.refined_result, title="Refined results")
        if message.refined_evaluation is not None:
            render_evaluation(message.refined_evaluation, title="Refined evaluation")

    if message.interpretation:
        console.print(
            Panel(Markdown(message.interpretation), title="[bold green]Answer[/bold green]")
        )
    for label, config in (
        ("Chart", message.chart_config),
        ("Refined chart", message.refined_chart_config),
    ):
        if config:
            console.print(Panel(json.dumps(config, indent=2), title=label, border_style="blue"))

    if message.can_refine(threshold):
        console.print("[yellow]Score is below threshold. Refinement is available.[/yellow]")


def render_report(report: ExplorationReport) -> None:
    table = Table(show_header=True, header_style="bold cyan", title=f"Schema {report.schema}")
    table.add_column("Table")
    table.add_column("Type")
    table.add_column("Columns", justify="right")
    table.add_column("Role")
    roles = {}
    positions = {}
    if report.layout is not None:
        roles = {c.table_name: c.type for c in report.layout.classifications}
        positions = report.layout.positions
    for entry in report.tables:
        table.add_row(
            entry.table, entry.table_type or "", str(len(entry.columns)), roles.get(entry.table, "")
        )
    console.print(table)

    if report.foreign_keys:
        console.print("\n[bold cyan]Relationships[/bold cyan]")
        for fk in report.foreign_keys:
            console.print(f"  {fk.from_table}.{fk.from_column} -> {fk.to_table}.{fk.to_column}")
    if positions:
        console.print(f"[dim]Layout computed for {len(positions)} table(s)[/dim]")
    if report.analysis:
        console.print(Panel(Markdown(report.analysis), title="[bold green]Analysis[/bold green]"))
    if report.questions:
        console.print("\n[bold cyan]Questions to ask[/bold cyan]")
        for index, question in enumerate(report.questions, 1):
            console.print(f"  {index}. {question}")


# ============================================================================
# Commands
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="Ambient Analytics")
@click.option("--verbose", is_flag=True, help="Show application logs.")
def cli(verbose: bool):
    """Ambient Analytics - explore a Postgres schema in plain language."""
    configure_cli_logging(verbose)


@cli.command()
@click.option("--host", default=None, help="Bind host (defaults to API_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (defaults to API_PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    settings = get_settings()
    command = [
        sys.executable,
        "-m",
        "uvicorn",
        "ambient.api.main:app",
        "--host",
        host or settings.api_host,
        "--port",
        str(port or settings.api_port),
    ]
    if reload:
        command.append("--reload")
    console.print(f"[cyan]Starting API:[/cyan] {' '.join(command)}")
    process = subprocess.Popen(command)
    try:
        process.wait()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping API server...[/yellow]")
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()


@cli.command()
@click.option("--env", default=None, help="Environment identifier.")
def schemas(env: str | None):
    """List non-system schemas."""
    pipeline = AnalyticsPipeline()
    names = _run(pipeline.introspector.list_schemas(env))
    if not names:
        console.print("[yellow]No schemas found[/yellow]")
        return
    for name in names:
        console.print(name)


@cli.command()
@click.argument("schema")
@click.option("--env", default=None, help="Environment identifier.")
def tables(schema: str, env: str | None):
    """List tables and views in SCHEMA."""
    pipeline = AnalyticsPipeline()
    listed = _run(pipeline.introspector.list_tables(env, schema))
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Table")
    table.add_column("Type")
    for entry in listed:
        table.add_row(entry.name, entry.table_type)
    console.print(table)


@cli.command()
@click.argument("schema")
@click.argument("table_name")
@click.option("--env", default=None, help="Environment identifier.")
@click.option("--sample", is_flag=True, help="Also show sample rows.")
def columns(schema: str, table_name: str, env: str | None, sample: bool):
    """Describe the columns of SCHEMA.TABLE_NAME."""
    pipeline = AnalyticsPipeline()
    listed = _run(pipeline.introspector.list_columns(env, schema, table_name))
    table = Table(show_header=True, header_style="bold cyan", title=f"{schema}.{table_name}")
    table.add_column("Column")
    table.add_column("Type")
    table.add_column("Nullable")
    table.add_column("Default")
    for column in listed:
        data_type = column.data_type
        if column.max_length:
            data_type = f"{data_type}({column.max_length})"
        table.add_row(column.name, data_type, "yes" if column.nullable else "no", column.default or "")
    console.print(table)

    if sample:
        rows = _run(pipeline.introspector.sample_rows(env, schema, table_name))
        render_result(
            QueryResult(columns=rows.columns, rows=rows.rows, row_count=len(rows.rows)),
            title="Sample rows",
        )


@cli.command()
@click.argument("schema")
@click.argument("question")
@click.option("--env", default=None, help="Environment identifier.")
@click.option("--table", "table_name", default=None, help="Answer from this table only.")
@click.option("--refine", is_flag=True, help="Refine the query when its score is low.")
@click.option("--chart", is_flag=True, help="Generate a chart configuration.")
def ask(
    schema: str,
    question: str,
    env: str | None,
    table_name: str | None,
    refine: bool,
    chart: bool,
):
    """Ask one QUESTION about SCHEMA and exit."""
    pipeline = AnalyticsPipeline()
    session = ConversationSession(env=env, schema=schema)

    async def run_query() -> Message:
        with console.status("[cyan]Processing query...[/cyan]", spinner="dots"):
            if table_name:
                message = await pipeline.ask_table(session, table_name, question)
                if refine and message.can_refine(pipeline.refine_threshold):
                    await pipeline.refine(session, message.id)
                if chart and message.result is not None:
                    await pipeline.chart(session, message.id)
                return message
            return await pipeline.ask(session, question, auto_refine=refine, with_chart=chart)

    message = _run(run_query())
    render_message(message, pipeline.refine_threshold)
    if message.error and message.result is None and message.sql is None:
        sys.exit(1)


@cli.command()
@click.argument("schema")
@click.option("--env", default=None, help="Environment identifier.")
def chat(schema: str, env: str | None):
    """Interactive conversation about SCHEMA."""
    console.print(
        Panel.fit(
            "[bold green]Ambient Analytics[/bold green]\n"
            "Ask questions in plain language. Commands: /refine, /chart, /tables, exit",
            border_style="green",
        )
    )
    pipeline = AnalyticsPipeline()
    session = ConversationSession(env=env, schema=schema)

    async def run_chat():
        while True:
            try:
                query = console.input("[bold cyan]You:[/bold cyan] ").strip()
            except (EOFError, KeyboardInterrupt):
                console.print("\n[yellow]Goodbye![/yellow]")
                break

            if not query:
                continue
            if query.lower() in {"exit", "quit", ":q"}:
                console.print("[yellow]Goodbye![/yellow]")
                break

            last = session.last_assistant_message()
            try:
                if query == "/tables":
                    console.print(", ".join(session.tables) or "[dim]not loaded yet[/dim]")
                    continue
                if query == "/refine":
                    if last is None or not last.can_refine(pipeline.refine_threshold):
                        console.print("[yellow]Nothing to refine.[/yellow]")
                        continue
                    with console.status("[cyan]Refining...[/cyan]", spinner="dots"):
                        await pipeline.refine(session, last.id)
                    if last.refined_sql is None:
                        console.print("[red]Refinement failed[/red]")
                        continue
                    render_message(last, pipeline.refine_threshold)
                    continue
                if query == "/chart":
                    if last is None or last.result is None:
                        console.print("[yellow]No result to chart.[/yellow]")
                        continue
                    use_refined = last.refined_result is not None and bool(last.refined_result.rows)
                    with console.status("[cyan]Generating chart...[/cyan]", spinner="dots"):
                        config = await pipeline.chart(session, last.id, use_refined=use_refined)
                    console.print(Panel(json.dumps(config, indent=2), title="Chart"))
                    continue

                with console.status("[cyan]Processing...[/cyan]", spinner="dots"):
                    message = await pipeline.ask(session, query)
                render_message(message, pipeline.refine_threshold)

            except CLI_ERRORS as e:
                console.print(f"\n[red]Error: {e}[/red]")

    asyncio.run(run_chat())


@cli.command()
@click.argument("schema")
@click.option("--env", default=None, help="Environment identifier.")
def explore(schema: str, env: str | None):
    """Analyze SCHEMA: tables, relationships, analysis, questions and ERD roles."""
    pipeline = AnalyticsPipeline()

    async def run_explore() -> ExplorationReport:
        with console.status("[cyan]Exploring schema...[/cyan]", spinner="dots"):
            return await pipeline.explore(env, schema)

    report = _run(run_explore())
    if not report.tables:
        console.print(f"[yellow]No tables found in {schema}[/yellow]")
        return
    render_report(report)


@cli.command()
@click.option("--dataset", "dataset_name", default=None, help="LangSmith dataset name.")
@click.option("--prefix", "experiment_prefix", default="sql-eval", show_default=True)
def evaluate(dataset_name: str | None, experiment_prefix: str):
    """Run the LangSmith SQL-generation evaluation."""
    evaluation = SQLGenerationEvaluation()
    kwargs = {"experiment_prefix": experiment_prefix}
    if dataset_name:
        kwargs["dataset_name"] = dataset_name

    async def run_evaluation() -> dict[str, Any]:
        with console.status("[cyan]Running evaluation...[/cyan]", spinner="dots"):
            return await evaluation.run(**kwargs)

    summary = _run(run_evaluation())
    console.print(f"[green]✓ {summary['message']}[/green]")
    console.print(f"Dataset: {summary['dataset_name']} ({summary['dataset_id']})")
    console.print(f"[dim]{summary['results']['message']}[/dim]")


if __name__ == "__main__":
    cli()
