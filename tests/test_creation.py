from table_quantities import settings
from table_quantities.core import hooks
from table_quantities.core.creation import (
    CREATE_HOOK,
    apply_pending_quantity,
    register_creation_hook,
    set_property,
    source_uuid_of,
)
from table_quantities.core.ledger import QuantityLedger


def item_data(uuid="Item.abc"):
    return {"name": "Torch", "system": {"quantity": 1}, "_stats": {"compendiumSource": uuid}}


def test_source_uuid_lookup_order():
    assert source_uuid_of(item_data("Item.a")) == "Item.a"
    assert source_uuid_of({"flags": {"core": {"sourceId": "Item.b"}}}) == "Item.b"
    assert source_uuid_of({"uuid": "Item.c"}) == "Item.c"
    assert source_uuid_of({"name": "Nameless"}) is None

def test_set_property_creates_intermediate_dicts():
    data = {"system": "not-a-dict"}
    set_property(data, "system.quantity.value", 4)
    assert data == {"system": {"quantity": {"value": 4}}}

def test_apply_pending_quantity_uses_configured_path():
    ledger = QuantityLedger()
    ledger.enqueue("Item.abc", 4)
    data = item_data()

    assert apply_pending_quantity(data, ledger) == 4
    assert data["system"]["quantity"] == 4
    assert ledger.pending_uuids() == []

def test_apply_pending_quantity_custom_path():
    settings.set_setting("quantityPath", "system.uses.value")
    ledger = QuantityLedger()
    ledger.enqueue("Item.abc", 2)
    data = item_data()

    apply_pending_quantity(data, ledger)

    assert data["system"] == {"quantity": 1, "uses": {"value": 2}}

def test_apply_pending_quantity_explicit_path_wins():
    ledger = QuantityLedger()
    ledger.enqueue("Item.abc", 2)
    data = item_data()

    apply_pending_quantity(data, ledger, quantity_path="count")

    assert data["count"] == 2
    assert data["system"]["quantity"] == 1

def test_nothing_pending_leaves_data_alone():
    ledger = QuantityLedger()
    ledger.enqueue("Item.other", 9)
    data = item_data()

    assert apply_pending_quantity(data, ledger) is None
    assert data == item_data()
    assert ledger.pending("Item.other") == [9]

def test_creation_hook_drains_in_draw_order():
    ledger = QuantityLedger()
    register_creation_hook(ledger)
    ledger.enqueue("Item.abc", 3)
    ledger.enqueue("Item.abc", 1)

    first, second, third = item_data(), item_data(), item_data()
    assert hooks.call(CREATE_HOOK, first) is True
    hooks.call(CREATE_HOOK, second)
    hooks.call(CREATE_HOOK, third)

    assert first["system"]["quantity"] == 3
    assert second["system"]["quantity"] == 1
    assert third["system"]["quantity"] == 1
