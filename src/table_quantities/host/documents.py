import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from table_quantities.core.entities import Composite, DrawResult, Leaf, ResultType
from table_quantities.dice import DiceFormulaError, roll_dice

logger = logging.getLogger(__name__)

RESULT_FIELDS = {"type", "description", "name", "document_uuid", "weight", "range"}
MAX_NESTED_ROLLS = 10


@dataclass(eq=False)
class TableResult:
    id: str
    type: ResultType = ResultType.TEXT
    description: str = ""
    name: str = ""
    document_uuid: Optional[str] = None
    weight: int = 1
    range: Tuple[int, int] = (1, 1)
    updates: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    def update_source(self, changes: Dict[str, Any]) -> "TableResult":
        """
        Applies changes to this in-memory result without persisting them.
        Unknown fields are rejected; every applied change is kept in `updates`.
        """
        unknown = set(changes) - RESULT_FIELDS
        if unknown:
            raise KeyError(f"Unknown TableResult fields: {sorted(unknown)}")
        if "type" in changes:
            changes = {**changes, "type": ResultType(changes["type"])}
        if changes.get("type") == ResultType.DOCUMENT and not changes.get("document_uuid", self.document_uuid):
            raise ValueError("A document result requires a document_uuid")

        diff = {k: v for k, v in changes.items() if getattr(self, k) != v}
        for key, value in diff.items():
            setattr(self, key, value)
        if diff:
            self.updates.append(diff)
        return self

    def clone(self) -> "TableResult":
        return replace(self, updates=[])

    @classmethod
    def from_dict(cls, data: dict) -> "TableResult":
        return cls(
            id=str(data["id"]),
            type=ResultType(data.get("type", "text")),
            description=data.get("description", ""),
            name=data.get("name", ""),
            document_uuid=data.get("document_uuid"),
            weight=int(data.get("weight", 1)),
            range=tuple(data["range"]) if data.get("range") else (1, 1)
        )


class Item(Leaf):
    def __init__(self, id: str, name: str, type: str = "loot", system: dict | None = None):
        self.id = id
        self.name = name
        self.type = type
        self.system = system or {}

    @property
    def uuid(self) -> str:
        return f"Item.{self.id}"

    def to_dict(self) -> dict:
        """Creation data for a copy of this item, tagged with where it came from."""
        return {
            "name": self.name,
            "type": self.type,
            "system": copy.deepcopy(self.system),
            "_stats": {"compendiumSource": self.uuid}
        }


class RollTable(Composite):
    def __init__(self, id: str, name: str, results: list[TableResult], formula: str | None = None, world=None):
        self.id = id
        self.name = name
        self.results = results
        self.world = world
        self._assign_ranges()
        self.formula = formula or f"1d{max(self.total_weight, 1)}"

    @property
    def uuid(self) -> str:
        return f"RollTable.{self.id}"

    @property
    def total_weight(self) -> int:
        return sum(r.weight for r in self.results)

    def _assign_ranges(self):
        # Only fill ranges when none were given explicitly
        if any(r.range != (1, 1) for r in self.results):
            return
        low = 1
        for result in self.results:
            result.range = (low, low + result.weight - 1)
            low += result.weight

    def get_results_for_roll(self, value: int) -> list[TableResult]:
        return [r for r in self.results if r.range[0] <= value <= r.range[1]]

    async def roll_formula(self) -> dict:
        outcome = roll_dice(self.formula)
        if "error" in outcome:
            raise DiceFormulaError(outcome["error"])
        return outcome

    async def roll(self, *, recursive: bool = True, _depth: int = 0) -> DrawResult:
        """
        Rolls the table formula and returns fresh copies of the matching results.
        With `recursive`, results linking to another table are replaced by a roll on it.
        """
        roll = await self.roll_formula()
        results = []
        for result in self.get_results_for_roll(roll["total"]):
            linked = None
            if recursive and _depth < MAX_NESTED_ROLLS and result.type == ResultType.DOCUMENT and self.world is not None:
                linked = await self.world.from_uuid(result.document_uuid)
            # Results carrying a quantity roll are left for the expansion engine
            if isinstance(linked, RollTable) and "[[/r" not in (result.description or ""):
                inner = await linked.roll(recursive=True, _depth=_depth + 1)
                results.extend(inner.results)
            else:
                results.append(result.clone())

        logger.debug(f"Rolled {roll['total']} on {self.name}: {len(results)} result(s)")
        return DrawResult(roll=roll, results=results)

    async def draw(self, *, display_chat: bool = True, recursive: bool = True, roll_mode: Optional[str] = None) -> DrawResult:
        """Rolls on the table and, unless told otherwise, posts the outcome to chat."""
        draw = await self.roll(recursive=recursive)
        if display_chat:
            await self.to_message(draw.results, roll=draw.roll, roll_mode=roll_mode)
        return draw

    async def to_message(self, results, *, roll=None, lines: list[str] | None = None, roll_mode: Optional[str] = None):
        """Posts a draw summary to the world chat log."""
        if lines is None:
            lines = [describe_result(r) for r in results]
        total = roll["total"] if roll else "?"
        content = f"**{self.name}** (rolled {total})\n" + "\n".join(f"- {line}" for line in lines)
        if self.world is None:
            logger.info(content)
            return content
        return self.world.chat.post(content, roll_mode=roll_mode)


def describe_result(result) -> str:
    if result.type == ResultType.DOCUMENT and result.document_uuid:
        return result.description or f"@UUID[{result.document_uuid}]{{{result.name}}}"
    return result.description or result.name
