import json
import logging

from table_quantities.core import hooks
from table_quantities.core.creation import CREATE_HOOK
from table_quantities.core.entities import Leaf, ResultType
from table_quantities.host.database import get_db_connection

logger = logging.getLogger(__name__)

# Path the host's own item model keeps its stack size under
HOST_QUANTITY_PATH = "system.quantity"


def get_or_create_character(name: str) -> int:
    with get_db_connection() as conn:
        conn.execute("INSERT OR IGNORE INTO characters (name) VALUES (?)", (name.strip(),))
        row = conn.execute("SELECT id FROM characters WHERE name = ?", (name.strip(),)).fetchone()
        return row["id"]


def _read_quantity(data: dict) -> int:
    value = data
    for key in HOST_QUANTITY_PATH.split("."):
        if not isinstance(value, dict) or key not in value:
            return 1
        value = value[key]
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return 1


async def create_items_from_results(results, character_name: str, world) -> list[dict]:
    """
    Creates an inventory entry for every drawn result linking to an item.
    Listeners of preCreateItem may adjust the creation data or veto it by returning False.
    """
    character_id = get_or_create_character(character_name)
    created = []
    for result in results:
        if result.type != ResultType.DOCUMENT or not result.document_uuid:
            continue
        item = await world.from_uuid(result.document_uuid)
        if not isinstance(item, Leaf):
            continue

        data = item.to_dict()
        if not hooks.call(CREATE_HOOK, data, {"character": character_name}):
            logger.info(f"Creation of {data['name']} vetoed by a preCreateItem listener")
            continue

        quantity = _read_quantity(data)
        with get_db_connection() as conn:
            conn.execute(
                "INSERT INTO inventory (character_id, item_name, source_uuid, quantity, data_json) VALUES (?, ?, ?, ?, ?)",
                (character_id, data["name"], item.uuid, quantity, json.dumps(data))
            )
        created.append(data)
        logger.info(f"Added {quantity}x {data['name']} to {character_name}")
    return created


def list_inventory(character_name: str) -> str:
    with get_db_connection() as conn:
        rows = conn.execute('''
            SELECT i.item_name, SUM(i.quantity) AS quantity
            FROM inventory i
            JOIN characters c ON i.character_id = c.id
            WHERE LOWER(c.name) = LOWER(?)
            GROUP BY i.item_name
            ORDER BY i.item_name
        ''', (character_name.strip(),)).fetchall()

    if not rows:
        return f"{character_name} is carrying nothing."
    lines = [f"- {row['quantity']}x {row['item_name']}" for row in rows]
    return "\n".join([f"### Inventory: {character_name}"] + lines)
