import logging

from table_quantities.settings import MODULE_ID, get_setting
from table_quantities.core import hooks
from table_quantities.core.ledger import QuantityLedger

logger = logging.getLogger(__name__)

CREATE_HOOK = "preCreateItem"


def source_uuid_of(data: dict) -> str | None:
    """The uuid an item being created was copied from, if the data records one."""
    source = (data.get("_stats") or {}).get("compendiumSource")
    if source:
        return source
    source = ((data.get("flags") or {}).get("core") or {}).get("sourceId")
    if source:
        return source
    return data.get("uuid")


def set_property(data: dict, path: str, value):
    """Writes value at a dotted path, creating intermediate dicts."""
    keys = path.split(".")
    target = data
    for key in keys[:-1]:
        if not isinstance(target.get(key), dict):
            target[key] = {}
        target = target[key]
    target[keys[-1]] = value


def apply_pending_quantity(data: dict, ledger: QuantityLedger, quantity_path: str | None = None) -> int | None:
    """
    Drains one pending quantity for the item's source uuid into its creation data.
    Returns the applied quantity, or None when nothing was pending.
    """
    uuid = source_uuid_of(data)
    if not uuid:
        return None
    quantity = ledger.dequeue(uuid)
    if quantity is None:
        return None

    path = quantity_path or get_setting("quantityPath")
    set_property(data, path, quantity)
    logger.debug(f"{MODULE_ID} | Applied quantity {quantity} at {path} for {uuid}")
    return quantity


def register_creation_hook(ledger: QuantityLedger) -> int:
    def _on_pre_create(data, *args):
        apply_pending_quantity(data, ledger)

    return hooks.on(CREATE_HOOK, _on_pre_create)
