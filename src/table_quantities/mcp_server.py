import os
import logging
from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

# Load env vars BEFORE resolving the world directory
load_dotenv()

import table_quantities
from table_quantities.settings import MODULE_ID, get_world_dir
from table_quantities.host.database import init_db
from table_quantities.host.inventory import create_items_from_results, list_inventory
from table_quantities.host.world import UnknownDocumentError, load_world

logger = logging.getLogger(__name__)

# Initialize FastMCP Server
mcp = FastMCP("TableQuantities")

_world = None


def get_world():
    """Loads the world on first use and wires the quantity engine into it."""
    global _world
    if _world is None:
        world_dir = get_world_dir()
        world_path = os.environ.get("TABLE_QUANTITIES_WORLD_FILE", os.path.join(world_dir, "world.json"))
        _world = load_world(world_path, chat_log_path=os.path.join(world_dir, "chat_log.md"))
        init_db()
        table_quantities.initialize(_world)
    return _world


def _describe(results) -> str:
    lines = []
    for result in results:
        data = table_quantities.lookup(result)
        if data and data.quantity:
            lines.append(f"- {data.quantity}x {data.name} ({data.document_uuid})")
        else:
            lines.append(f"- {result.description or result.name}")
    return "\n".join(lines) or "- (nothing)"


@mcp.tool()
async def draw_from_table(table: str) -> str:
    """
    Draws once from a roll table, expanding any rolled quantities and nested tables.
    table: The table name or uuid (e.g. "Goblin Pockets" or "RollTable.goblin").
    """
    try:
        roll_table = get_world().get_table(table)
    except UnknownDocumentError as e:
        return f"Error: {e}"
    draw = await roll_table.draw()
    return f"Drew from **{roll_table.name}** (rolled {draw.roll['total']}):\n{_describe(draw.results)}"


@mcp.tool()
async def loot_table(table: str, character_name: str) -> str:
    """
    Draws from a roll table and puts every item it yields into a character's inventory,
    with the rolled quantities applied.
    table: The table name or uuid.
    character_name: Who receives the loot.
    """
    world = get_world()
    try:
        roll_table = world.get_table(table)
    except UnknownDocumentError as e:
        return f"Error: {e}"
    draw = await roll_table.draw()
    created = await create_items_from_results(draw.results, character_name, world)
    if not created:
        return f"{character_name} found nothing useful on **{roll_table.name}**."
    return f"{character_name} looted **{roll_table.name}**:\n{_describe(draw.results)}"


@mcp.tool()
def read_inventory(character_name: str) -> str:
    """
    Lists a character's inventory with quantities.
    """
    get_world()
    return list_inventory(character_name)


@mcp.tool()
def pending_quantities() -> str:
    """
    Shows rolled quantities still waiting for an item to be created.
    """
    ledger = table_quantities.ledger
    uuids = ledger.pending_uuids()
    if not uuids:
        return "No pending quantities."
    return "\n".join(f"- {uuid}: {ledger.pending(uuid)}" for uuid in uuids)


@mcp.tool()
def clear_pending_quantities() -> str:
    """
    Discards every rolled quantity that was never consumed (e.g. at the end of a session).
    """
    dropped = table_quantities.ledger.clear_pending()
    return f"Cleared {dropped} pending quantities."


def main():
    logging.basicConfig(level=os.environ.get("TABLE_QUANTITIES_LOG_LEVEL", "INFO"))
    logger.info(f"{MODULE_ID} | Starting MCP server")
    mcp.run()


if __name__ == "__main__":
    main()
