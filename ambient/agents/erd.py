"""
ERDLayoutAgent

Classifies tables as fact, dimension or bridge and places them on a
3000x3000 canvas for an entity-relationship diagram.
"""

import logging
import math
from typing import Any

from ambient.agents.base import BaseAgent
from ambient.models.agent import ERDLayoutInput, ERDLayoutOutput
from ambient.models.results import ERDLayout, Position, TableClassification
from ambient.prompts.builders import build_erd_layout_prompt

logger = logging.getLogger(__name__)

CANVAS_SIZE = 3000
H_SPACING = 600
V_SPACING = 500

_TABLE_TYPES = {"fact", "dimension", "bridge"}


def grid_positions(tables: list[str]) -> dict[str, Position]:
    """Lay tables out row by row with the minimum diagram spacing."""
    if not tables:
        return {}
    columns = math.ceil(math.sqrt(len(tables)))
    return {
        name: Position(x=(idx % columns) * H_SPACING, y=(idx // columns) * V_SPACING)
        for idx, name in enumerate(tables)
    }


def _position(value: Any) -> Position | None:
    if not isinstance(value, dict):
        return None
    x, y = value.get("x"), value.get("y")
    if isinstance(x, bool) or isinstance(y, bool):
        return None
    if not isinstance(x, int | float) or not isinstance(y, int | float):
        return None
    return Position(x=x, y=y)


def coerce_layout(payload: dict[str, Any] | None, tables: list[str]) -> ERDLayout:
    """
    Keep only classifications and positions for known tables.

    Tables the model left unplaced get grid positions below its layout.
    """
    known = set(tables)
    classifications: list[TableClassification] = []
    positions: dict[str, Position] = {}

    if payload is not None:
        for item in payload.get("classifications") or []:
            if not isinstance(item, dict):
                continue
            name = item.get("tableName") or item.get("table_name")
            kind = item.get("type")
            if name in known and kind in _TABLE_TYPES:
                reasoning = item.get("reasoning")
                classifications.append(
                    TableClassification(
                        table_name=name,
                        type=kind,
                        reasoning=reasoning if isinstance(reasoning, str) else "",
                    )
                )

        raw_positions = payload.get("positions")
        if isinstance(raw_positions, dict):
            for name, value in raw_positions.items():
                position = _position(value)
                if name in known and position is not None:
                    positions[name] = position

    missing = [name for name in tables if name not in positions]
    if missing:
        offset = max((p.y for p in positions.values()), default=-V_SPACING) + V_SPACING
        for name, position in grid_positions(missing).items():
            positions[name] = Position(x=position.x, y=position.y + offset)

    return ERDLayout(classifications=classifications, positions=positions)


class ERDLayoutAgent(BaseAgent):
    """Unparseable output falls back to an unclassified grid layout."""

    def __init__(self, gateway=None):
        super().__init__(name="ERDLayoutAgent", gateway=gateway)

    async def execute(self, input: ERDLayoutInput) -> ERDLayoutOutput:
        prompt = build_erd_layout_prompt(input.tables, input.foreign_keys)
        payload = await self.gateway.complete_json("erd_layout", prompt)
        self._track_llm_call()

        if payload is None:
            logger.warning("ERD layout unparseable, using grid layout", extra={"agent": self.name})
        layout = coerce_layout(payload, [entry.table for entry in input.tables])
        return ERDLayoutOutput(layout=layout)
