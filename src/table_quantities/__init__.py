"""
Table Quantities: rolled quantities and nested draws for roll table results.

A result reading ``[[/r 1d4]]@UUID[Item.abc]{Torch}`` (or a linked result
whose description holds ``[[/r 1d4]]``) is expanded at draw time: item
targets get a rolled quantity queued for item creation, table targets are
drawn from that many times and their results spliced in.
"""

from table_quantities.api import (
    MODULE_ID,
    TEXT_PATTERN,
    ROLL_PATTERN,
    ledger,
    configure,
    get_engine,
    initialize,
    expand,
    process_results,
    parse,
    parse_quantity_result,
    lookup,
    dequeue
)

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
