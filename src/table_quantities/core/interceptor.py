import logging
import functools
from dataclasses import replace

from table_quantities.settings import MODULE_ID, get_setting
from table_quantities.core import hooks
from table_quantities.core.engine import expanding_ctx
from table_quantities.core.entities import ResultType

logger = logging.getLogger(__name__)

RESULTS_READY_HOOK = f"{MODULE_ID}.resultsReady"
_ORIGINAL_ATTR = "_table_quantities_original_draw"


def format_report_lines(results, ledger, modify_chat: bool = True) -> list[str]:
    """One chat line per result; rolled quantities replace the description when modify_chat is on."""
    lines = []
    for result in results:
        data = ledger.lookup(result)
        if modify_chat and data and data.quantity:
            lines.append(f"{data.quantity}x @UUID[{data.document_uuid}]{{{data.name}}}")
        elif result.type == ResultType.DOCUMENT and result.document_uuid and not result.description:
            lines.append(f"@UUID[{result.document_uuid}]{{{result.name}}}")
        else:
            lines.append(result.description or result.name)
    return lines


async def wrapped_draw(wrapped, table, engine, **options):
    """
    Draws with chat suppressed, expands quantity directives, then sends its own
    chat message with rolled quantities and publishes the expanded results.
    Any failure after the draw leaves the caller with a plain draw result and
    takes back the quantities that draw had queued.
    """
    # Sub-table draws made by the engine itself are expanded by the engine
    if expanding_ctx.get():
        return await wrapped(table, **options)

    want_chat = options.get("display_chat", True) is not False
    draw_result = None
    chat_sent = False
    enqueued = []
    try:
        draw_result = await wrapped(table, **{**options, "display_chat": False})

        results = await engine.expand(draw_result.results, enqueued=enqueued)

        if want_chat:
            lines = format_report_lines(results, engine.ledger, get_setting("modifyChat"))
            await table.to_message(results, roll=draw_result.roll, lines=lines, roll_mode=options.get("roll_mode"))
            chat_sent = True

        expanded = replace(draw_result, results=results)
        hooks.call_all(RESULTS_READY_HOOK, expanded.results, engine.ledger)
        return expanded

    except Exception:
        logger.exception(f"{MODULE_ID} | Quantity expansion failed for table: {getattr(table, 'name', table)}")
        # An abandoned expansion must not leave quantities behind for unrelated items
        if enqueued:
            engine.ledger.retract(enqueued)
        if draw_result is None:
            return await wrapped(table, **options)
        if want_chat and not chat_sent:
            try:
                await table.to_message(draw_result.results, roll=draw_result.roll, roll_mode=options.get("roll_mode"))
            except Exception:
                logger.exception(f"{MODULE_ID} | Could not post the unmodified draw to chat")
        return draw_result


def install(table_cls, engine):
    """Replaces table_cls.draw with the quantity-expanding wrapper. Installing twice is a no-op."""
    if _ORIGINAL_ATTR in vars(table_cls):
        return False
    original = table_cls.draw

    @functools.wraps(original)
    async def draw(self, **options):
        return await wrapped_draw(original, self, engine, **options)

    setattr(table_cls, _ORIGINAL_ATTR, original)
    table_cls.draw = draw
    logger.info(f"{MODULE_ID} | Wrapped {table_cls.__name__}.draw")
    return True


def uninstall(table_cls):
    original = vars(table_cls).get(_ORIGINAL_ATTR)
    if original is None:
        return False
    table_cls.draw = original
    delattr(table_cls, _ORIGINAL_ATTR)
    return True
