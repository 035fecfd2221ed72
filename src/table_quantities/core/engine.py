import logging
from contextvars import ContextVar

from table_quantities.settings import MODULE_ID
from table_quantities.core.entities import Composite, Leaf, ResultType
from table_quantities.core.directives import parse_quantity_result
from table_quantities.core.ledger import QuantityLedger, QuantityRecord

logger = logging.getLogger(__name__)

# Composite targets may reference each other, so depth is the only guard against cycles.
MAX_RECURSION_DEPTH = 10

# Set while the engine draws from a sub-table, so the draw interceptor passes those draws through.
expanding_ctx: ContextVar[bool] = ContextVar("table_quantities_expanding", default=False)


class ExpansionEngine:
    def __init__(self, evaluate, resolve, ledger: QuantityLedger | None = None, max_depth: int = MAX_RECURSION_DEPTH):
        """
        evaluate: async (formula) -> int, the dice service.
        resolve: async (uuid) -> entity or None, the document lookup.
        """
        self.evaluate = evaluate
        self.resolve = resolve
        self.ledger = ledger if ledger is not None else QuantityLedger()
        self.max_depth = max_depth

    async def expand(self, results, depth: int = 0, enqueued: list | None = None) -> list:
        """
        Expands quantity directives in a batch of results, one at a time and in order.
        Results without a (firing) directive come back unchanged in their original position.
        enqueued: optional list collecting every (uuid, quantity) queued for this batch.
        """
        processed = []
        for result in results:
            directive = parse_quantity_result(result)
            if directive:
                processed.extend(await self.process_result(result, directive, depth, enqueued))
            else:
                processed.append(result)
        return processed

    async def process_result(self, result, directive, depth: int, enqueued: list | None = None) -> list:
        """
        Process a single result that matches a quantity pattern.
        Leaf targets: record the quantity and queue it for the creation hook.
        Composite targets: draw from the sub-table `quantity` times and flatten.
        """
        quantity = await self.evaluate(directive.formula)
        if quantity <= 0:
            return [result]

        doc = await self.resolve(directive.uuid)
        if doc is None:
            logger.warning(f"{MODULE_ID} | Could not resolve UUID: {directive.uuid}")
            return [result]

        # --- Composite reference: draw from sub-table N times ---
        if isinstance(doc, Composite):
            if depth >= self.max_depth:
                logger.warning(f"{MODULE_ID} | Max recursion depth reached for table: {directive.name}")
                return [result]

            sub_results = []
            for _ in range(quantity):
                token = expanding_ctx.set(True)
                try:
                    draw = await doc.draw(display_chat=False, recursive=True)
                finally:
                    expanding_ctx.reset(token)
                sub_results.extend(await self.expand(draw.results, depth + 1, enqueued))

            self.ledger.record(result, QuantityRecord(
                quantity=quantity,
                document_uuid=directive.uuid,
                name=directive.name,
                expanded_to_children=True,
                original_description=result.description or ""
            ))
            return sub_results

        # --- Leaf reference: record quantity, queue it, normalize text results ---
        if isinstance(doc, Leaf):
            original_description = result.description or ""
            if result.type == ResultType.TEXT:
                result = result.update_source({
                    "type": ResultType.DOCUMENT,
                    "document_uuid": directive.uuid,
                    "name": directive.name,
                    "description": ""
                })

            self.ledger.record(result, QuantityRecord(
                quantity=quantity,
                document_uuid=directive.uuid,
                name=directive.name,
                original_description=original_description
            ))
            self.ledger.enqueue(directive.uuid, quantity)
            if enqueued is not None:
                enqueued.append((directive.uuid, quantity))
            return [result]

        logger.warning(f"{MODULE_ID} | Unsupported document type for UUID: {directive.uuid}")
        return [result]
