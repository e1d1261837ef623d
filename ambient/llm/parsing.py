"""
Model Output Parsing

Lenient helpers for turning chat-completion text into SQL strings, JSON
values and scores. Malformed input yields ``None`` or ``0.0`` rather than an
exception so callers can fall back to defaults.
"""

import json
import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:sql|json)?\n?", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_JSON_ARRAY_GREEDY = re.compile(r"\[.*\]", re.DOTALL)
_JSON_ARRAY_FIRST = re.compile(r"\[.*?\]", re.DOTALL)


def strip_code_fences(text: str | None) -> str:
    """Remove Markdown code fences and surrounding whitespace."""
    if not text:
        return ""
    return _FENCE.sub("", text).strip()


def ensure_statement_terminator(sql: str) -> str:
    """Append ``;`` unless the statement already ends with one."""
    sql = sql.strip()
    if not sql or sql.endswith(";"):
        return sql
    return f"{sql};"


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def extract_json_object(text: str | None) -> dict[str, Any] | None:
    """Parse a JSON object, tolerating fences and surrounding prose."""
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None

    value = _loads(cleaned)
    if value is None:
        match = _JSON_OBJECT.search(cleaned)
        value = _loads(match.group(0)) if match else None

    if not isinstance(value, dict):
        logger.warning("Model output is not a JSON object", extra={"preview": cleaned[:200]})
        return None
    return value


def extract_json_array(text: str | None) -> list[Any] | None:
    """Parse a JSON array, or the first ``[...]`` found inside prose."""
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None

    value = _loads(cleaned)
    if isinstance(value, list):
        return value

    for pattern in (_JSON_ARRAY_GREEDY, _JSON_ARRAY_FIRST):
        match = pattern.search(cleaned)
        if match:
            value = _loads(match.group(0))
            if isinstance(value, list):
                return value

    logger.warning("Model output contains no JSON array", extra={"preview": cleaned[:200]})
    return None


def parse_score(value: Any) -> float:
    """Coerce a model-reported score into ``[0, 1]``; anything else is ``0.0``."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0.0
    if not isinstance(value, int | float):
        return 0.0

    score = float(value)
    if math.isnan(score) or score < 0.0 or score > 1.0:
        return 0.0
    return score
