"""
SQL Generation Evaluation

Runs a LangSmith experiment over the reference dataset: the target generates
SQL from each example's question and tables, and an LLM judge scores it
against the reference query under the ``sql_correctness`` key.

Usage:
    evaluation = SQLGenerationEvaluation()
    summary = await evaluation.run()
"""

import asyncio
import json
import logging
from typing import Any

from langsmith import Client
from langsmith.evaluation import aevaluate

from ambient.config import MissingConfigurationError, Settings, get_settings
from ambient.evaluation.dataset import DATASET_DESCRIPTION, DEFAULT_DATASET_NAME, SQL_EXAMPLES
from ambient.llm.gateway import LLMGateway
from ambient.llm.parsing import parse_score
from ambient.models.schema import TableWithColumns
from ambient.prompts.builders import build_eval_generation_prompt, build_eval_judge_prompt

logger = logging.getLogger(__name__)

CORRECTNESS_KEY = "sql_correctness"
DEFAULT_EXPERIMENT_PREFIX = "sql-eval"
STATUS_DESCRIPTION = (
    "SQL generation evaluation endpoint - evaluates SQL query quality, syntax, "
    "and semantic correctness"
)
RESULTS_MESSAGE = (
    "Check LangSmith UI for detailed SQL evaluation results including syntax, "
    "semantic accuracy, and best practices scores"
)


def evaluation_configuration(settings: Settings | None = None) -> dict[str, bool]:
    """Which credentials the evaluation needs are present."""
    settings = settings or get_settings()
    return {
        "langsmithConfigured": bool(settings.tracing.api_key),
        "openaiConfigured": bool(settings.llm.openai_api_key),
    }


class SQLGenerationEvaluation:
    """LangSmith dataset management plus the generate-and-judge experiment."""

    def __init__(
        self,
        settings: Settings | None = None,
        gateway: LLMGateway | None = None,
        client: Client | None = None,
    ):
        self.settings = settings or get_settings()
        self.gateway = gateway or LLMGateway(self.settings)
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.settings.tracing.api_key:
                raise MissingConfigurationError(
                    "LangSmith API key not configured", setting="LANGSMITH_API_KEY"
                )
            self._client = Client(
                api_key=self.settings.tracing.api_key,
                api_url=self.settings.tracing.endpoint,
            )
        return self._client

    def get_or_create_dataset(self, dataset_name: str = DEFAULT_DATASET_NAME):
        """Return the named dataset, creating and seeding it on first use."""
        existing = list(self.client.list_datasets(dataset_name=dataset_name))
        if existing:
            logger.info(f"Using existing dataset: {existing[0].id}")
            return existing[0]

        dataset = self.client.create_dataset(dataset_name, description=DATASET_DESCRIPTION)
        logger.info(f"Created new dataset: {dataset.id}")
        self.client.create_examples(
            inputs=[example["inputs"] for example in SQL_EXAMPLES],
            outputs=[example["outputs"] for example in SQL_EXAMPLES],
            dataset_id=dataset.id,
        )
        logger.info(f"Added {len(SQL_EXAMPLES)} SQL examples to dataset")
        return dataset

    async def generate_sql(self, inputs: dict[str, Any]) -> dict[str, str]:
        """Evaluation target: question + schema + tables JSON -> SQL."""
        tables = [TableWithColumns.model_validate(t) for t in json.loads(inputs["tables"])]
        prompt = build_eval_generation_prompt(inputs["question"], inputs["schema"], tables)
        sql = await self.gateway.complete_sql("eval_generate_sql", prompt)
        return {"sql": sql}

    async def judge_sql(
        self,
        inputs: dict[str, Any],
        outputs: dict[str, Any],
        reference_outputs: dict[str, Any],
    ) -> dict[str, Any]:
        """LLM-as-judge correctness score. Never raises."""
        prompt = build_eval_judge_prompt(
            question=inputs.get("question", ""),
            generated_sql=outputs.get("sql", ""),
            reference_sql=reference_outputs.get("sql", ""),
            explanation=reference_outputs.get("explanation", ""),
        )
        try:
            verdict = await self.gateway.complete_json("eval_judge_sql", prompt)
        except Exception as e:
            logger.error(f"Error in SQL evaluator: {e}")
            return {"key": CORRECTNESS_KEY, "score": 0, "comment": f"Evaluation failed: {e}"}

        if verdict is None:
            return {
                "key": CORRECTNESS_KEY,
                "score": 0,
                "comment": "Evaluation failed: judge returned no JSON",
            }
        return {
            "key": CORRECTNESS_KEY,
            "score": parse_score(verdict.get("score")),
            "comment": verdict.get("reasoning", ""),
        }

    async def run(
        self,
        dataset_name: str = DEFAULT_DATASET_NAME,
        experiment_prefix: str = DEFAULT_EXPERIMENT_PREFIX,
    ) -> dict[str, Any]:
        """Ensure the dataset exists and run one experiment over it."""
        # The LangSmith client is synchronous, keep its calls off the event loop.
        dataset = await asyncio.to_thread(self.get_or_create_dataset, dataset_name)

        await aevaluate(
            self.generate_sql,
            data=dataset_name,
            evaluators=[self.judge_sql],
            experiment_prefix=experiment_prefix,
            max_concurrency=2,
            client=self.client,
        )
        logger.info(
            "SQL evaluation completed",
            extra={"dataset_id": str(dataset.id), "experiment_prefix": experiment_prefix},
        )
        return {
            "success": True,
            "message": "SQL evaluation completed successfully",
            "dataset_id": str(dataset.id),
            "dataset_name": dataset_name,
            "results": {"experimentPrefix": experiment_prefix, "message": RESULTS_MESSAGE},
        }
