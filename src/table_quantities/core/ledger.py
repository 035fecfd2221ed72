import weakref
import logging
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuantityRecord:
    quantity: int
    document_uuid: str
    name: str
    expanded_to_children: bool = False
    original_description: str = ""


class QuantityLedger:
    """
    Engine-owned bookkeeping for rolled quantities.

    Records are keyed by result identity (never by value) and disappear with
    the result they describe, so caller-owned documents are never written to.
    Pending quantities are queued per target uuid, first in first out, for a
    creation-time consumer to drain.
    """

    def __init__(self):
        self._records: dict[int, tuple[weakref.ref, QuantityRecord]] = {}
        self._pending: dict[str, deque] = {}

    # --- Side Table ---

    def record(self, result, data: QuantityRecord):
        """Attaches data to a result instance, replacing any earlier record for it."""
        key = id(result)
        records = self._records

        def _forget(ref, key=key):
            entry = records.get(key)
            if entry is not None and entry[0] is ref:
                del records[key]

        self._records[key] = (weakref.ref(result, _forget), data)

    def lookup(self, result) -> QuantityRecord | None:
        entry = self._records.get(id(result))
        if entry is None or entry[0]() is not result:
            return None
        return entry[1]

    # --- Pending Queue ---

    def enqueue(self, uuid: str, quantity: int):
        self._pending.setdefault(uuid, deque()).append(quantity)

    def dequeue(self, uuid: str) -> int | None:
        """Pops the oldest pending quantity for uuid; drops the key once drained."""
        queue = self._pending.get(uuid)
        if not queue:
            return None
        quantity = queue.popleft()
        if not queue:
            del self._pending[uuid]
        return quantity

    def retract(self, enqueued) -> int:
        """
        Takes back quantities queued by a draw that was abandoned.
        enqueued: (uuid, quantity) pairs in the order they were queued. Each one
        removes the newest matching entry of its target; emptied targets are dropped.
        """
        retracted = 0
        for uuid, quantity in reversed(list(enqueued)):
            queue = self._pending.get(uuid)
            if not queue:
                continue
            for index in range(len(queue) - 1, -1, -1):
                if queue[index] == quantity:
                    del queue[index]
                    retracted += 1
                    break
            if not queue:
                del self._pending[uuid]
        return retracted

    def pending(self, uuid: str) -> list[int]:
        return list(self._pending.get(uuid, ()))

    def pending_uuids(self) -> list[str]:
        return list(self._pending)

    def clear_pending(self, uuid: str | None = None) -> int:
        """Discards never-consumed quantities (all, or for one uuid). Returns how many were dropped."""
        if uuid is not None:
            dropped = len(self._pending.pop(uuid, ()))
        else:
            dropped = sum(len(q) for q in self._pending.values())
            self._pending.clear()
        if dropped:
            logger.info(f"Cleared {dropped} pending quantities")
        return dropped
