"""
Capability types for everything the engine touches but does not own.

Hosts plug their documents in by subclassing ``Leaf`` (item-like, can carry a
rolled quantity) or ``Composite`` (table-like, can be drawn from).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class ResultType(str, Enum):
    TEXT = "text"
    DOCUMENT = "document"


@dataclass
class DrawResult:
    """What a Composite's draw returns: the roll outcome and the drawn results."""
    roll: Any
    results: List[Any] = field(default_factory=list)


class Leaf(ABC):
    """A terminal entity eligible for quantity annotation."""

    uuid: str
    name: str


class Composite(ABC):
    """A drawable entity the engine may draw from recursively."""

    uuid: str
    name: str

    @abstractmethod
    async def draw(self, *, display_chat: bool = True, recursive: bool = True, roll_mode: Optional[str] = None) -> DrawResult:
        ...
