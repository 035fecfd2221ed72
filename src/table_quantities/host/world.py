import os
import json
import logging

from table_quantities.host.chat import ChatLog
from table_quantities.host.documents import Item, RollTable, TableResult

logger = logging.getLogger(__name__)


class UnknownDocumentError(LookupError):
    pass


class World:
    """In-memory document registry: items and roll tables addressed by uuid."""

    def __init__(self, chat: ChatLog | None = None):
        self.documents: dict = {}
        self.chat = chat or ChatLog()

    def add(self, document):
        if isinstance(document, RollTable):
            document.world = self
        self.documents[document.uuid] = document
        return document

    async def from_uuid(self, uuid: str):
        """Resolves a uuid to its document, or None when nothing is registered under it."""
        return self.documents.get(uuid)

    def get_table(self, name_or_uuid: str) -> RollTable:
        doc = self.documents.get(name_or_uuid)
        if isinstance(doc, RollTable):
            return doc
        for doc in self.documents.values():
            if isinstance(doc, RollTable) and doc.name.lower() == name_or_uuid.lower():
                return doc
        raise UnknownDocumentError(f"No roll table named '{name_or_uuid}'")

    @property
    def items(self) -> list[Item]:
        return [d for d in self.documents.values() if isinstance(d, Item)]

    @property
    def tables(self) -> list[RollTable]:
        return [d for d in self.documents.values() if isinstance(d, RollTable)]


def load_world(path: str, chat_log_path: str | None = None) -> World:
    """
    Loads items and roll tables from a world JSON file:
    {"items": [{"id", "name", "type", "system"}], "tables": [{"id", "name", "formula", "results": [...]}]}
    """
    with open(path, "r") as f:
        data = json.load(f)

    world = World(chat=ChatLog(chat_log_path))
    for item in data.get("items", []):
        world.add(Item(
            id=str(item["id"]),
            name=item["name"],
            type=item.get("type", "loot"),
            system=item.get("system", {})
        ))
    for table in data.get("tables", []):
        results = [
            TableResult.from_dict({"id": f"{table['id']}-{idx}", **r})
            for idx, r in enumerate(table.get("results", []))
        ]
        world.add(RollTable(
            id=str(table["id"]),
            name=table["name"],
            results=results,
            formula=table.get("formula")
        ))

    logger.info(f"Loaded world from {os.path.basename(path)}: {len(world.items)} items, {len(world.tables)} tables")
    return world
