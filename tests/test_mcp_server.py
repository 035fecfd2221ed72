import os
import asyncio
from unittest.mock import patch

import pytest

pytest.importorskip("mcp")

import table_quantities
from table_quantities import mcp_server
from table_quantities.core.interceptor import uninstall
from table_quantities.host.documents import RollTable

WORLD_FILE = os.path.abspath(os.path.join(os.path.dirname(__file__), "../world/world.json"))


@pytest.fixture
def server(monkeypatch):
    monkeypatch.setenv("TABLE_QUANTITIES_WORLD_FILE", WORLD_FILE)
    monkeypatch.setattr(mcp_server, "_world", None)
    yield mcp_server
    uninstall(RollTable)
    table_quantities.ledger.clear_pending()


def test_draw_from_table(server):
    text = asyncio.run(server.draw_from_table("Goblin Pockets"))
    assert text.startswith("Drew from **Goblin Pockets**")

def test_unknown_table(server):
    assert asyncio.run(server.draw_from_table("Dragon Hoard")) == "Error: No roll table named 'Dragon Hoard'"

def test_loot_then_inventory(server, monkeypatch):
    # every die shows 2: the table roll lands on Rations, whose quantity roll is 1d4
    monkeypatch.setattr("random.randint", lambda low, high: 2)

    text = asyncio.run(server.loot_table("RollTable.trinkets", "Scanlan"))
    assert text == "Scanlan looted **Trinkets**:\n- 2x Rations (1 day) (Item.ration)"
    assert table_quantities.ledger.pending_uuids() == []

    assert server.read_inventory("Scanlan") == "### Inventory: Scanlan\n- 2x Rations (1 day)"

def test_pending_quantities_round_trip(server):
    assert server.pending_quantities() == "No pending quantities."
    table_quantities.ledger.enqueue("Item.torch", 2)
    assert server.pending_quantities() == "- Item.torch: [2]"
    assert server.clear_pending_quantities() == "Cleared 1 pending quantities."

def test_main_configures_logging_before_serving():
    with patch("logging.basicConfig") as basic_config, patch.object(mcp_server.mcp, "run") as run:
        mcp_server.main()

    basic_config.assert_called_once()
    run.assert_called_once_with()
