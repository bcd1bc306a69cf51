import logging
from datetime import datetime, timezone
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from studx.models.message import MessageDocument


logger = logging.getLogger(__name__)


class MessageRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["messages"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("conversation_id", ASCENDING), ("created_at", ASCENDING)])

    async def save_message(
        self,
        conversation_id,
        sender_id: str,
        sender_name: str,
        text: str,
    ) -> MessageDocument:
        doc: MessageDocument = {
            "conversation_id": conversation_id,
            "sender_id": str(sender_id),
            "sender_name": sender_name,
            "text": text,
            "created_at": datetime.now(timezone.utc),
            "is_read": False,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def list_by_conversation(self, conversation_id) -> List[MessageDocument]:
        # insertion order; _id breaks ties within the same millisecond
        cursor = self.collection.find({"conversation_id": conversation_id}).sort(
            [("created_at", ASCENDING), ("_id", ASCENDING)]
        )
        return await cursor.to_list(length=None)

    async def mark_read_for_reader(self, conversation_id, reader_id: str) -> int:
        result = await self.collection.update_many(
            {"conversation_id": conversation_id, "sender_id": {"$ne": str(reader_id)}, "is_read": False},
            {"$set": {"is_read": True}},
        )
        modified = result.modified_count or 0
        logger.debug("Marked %d messages read in %s for %s", modified, conversation_id, reader_id)
        return modified

    async def delete_by_conversation(self, conversation_id) -> int:
        result = await self.collection.delete_many({"conversation_id": conversation_id})
        return result.deleted_count or 0

