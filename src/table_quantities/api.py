"""
Public API for Table Quantities.

Other integrations may rely on everything exported here: the directive
patterns, parsing, expansion, and ledger lookups.
"""

import logging

from table_quantities.settings import MODULE_ID, register_settings
from table_quantities.core.directives import TEXT_PATTERN, ROLL_PATTERN, parse_quantity_result
from table_quantities.core.engine import ExpansionEngine, MAX_RECURSION_DEPTH
from table_quantities.core import hooks
from table_quantities.core.creation import CREATE_HOOK, register_creation_hook
from table_quantities.core.interceptor import install, uninstall
from table_quantities.core.ledger import QuantityLedger
from table_quantities.dice import evaluate_formula

logger = logging.getLogger(__name__)

# Process-wide ledger shared by the draw wrapper and the creation hook
ledger = QuantityLedger()

_engine: ExpansionEngine | None = None
_creation_hook_id: int | None = None


def configure(resolve, evaluate=evaluate_formula, max_depth: int = MAX_RECURSION_DEPTH) -> ExpansionEngine:
    """Builds the process-wide engine around the host's document lookup and dice service."""
    global _engine
    _engine = ExpansionEngine(evaluate=evaluate, resolve=resolve, ledger=ledger, max_depth=max_depth)
    return _engine


def get_engine() -> ExpansionEngine:
    if _engine is None:
        raise RuntimeError(f"{MODULE_ID} is not configured; call configure() or initialize() first")
    return _engine


def initialize(world, table_cls=None) -> ExpansionEngine:
    """Registers settings, builds the engine, wraps the table draw and subscribes the creation hook."""
    if table_cls is None:
        from table_quantities.host.documents import RollTable
        table_cls = RollTable

    global _creation_hook_id
    logger.info(f"{MODULE_ID} | Initializing Table Quantities")
    register_settings()
    engine = configure(resolve=world.from_uuid)

    uninstall(table_cls)
    install(table_cls, engine)
    if _creation_hook_id is not None:
        hooks.off(CREATE_HOOK, _creation_hook_id)
    _creation_hook_id = register_creation_hook(ledger)
    return engine


async def expand(results, depth: int = 0) -> list:
    return await get_engine().expand(results, depth)


process_results = expand
parse = parse_quantity_result


def lookup(result):
    return ledger.lookup(result)


def dequeue(uuid: str) -> int | None:
    return ledger.dequeue(uuid)


__all__ = [
    'MODULE_ID',
    'TEXT_PATTERN',
    'ROLL_PATTERN',
    'ledger',
    'configure',
    'get_engine',
    'initialize',
    'expand',
    'process_results',
    'parse',
    'parse_quantity_result',
    'lookup',
    'dequeue'
]
