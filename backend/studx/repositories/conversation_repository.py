import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from studx.models.conversation import ConversationDocument, ParticipantDetails


logger = logging.getLogger(__name__)


def pair_key(user_a: str, user_b: str) -> str:
    lo, hi = sorted([str(user_a), str(user_b)])
    return f"{lo}:{hi}"


def to_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


class ConversationRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["conversations"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("participants", ASCENDING)])
        await self.collection.create_index([("pair_key", ASCENDING)], unique=True)
        await self.collection.create_index([("last_message.timestamp", DESCENDING)])

    async def find_between(self, user_a: str, user_b: str) -> Optional[ConversationDocument]:
        return await self.collection.find_one({"pair_key": pair_key(user_a, user_b)})

    async def create_one_to_one(
        self,
        caller_details: ParticipantDetails,
        other_details: ParticipantDetails,
    ) -> ConversationDocument:
        """Insert a conversation for the pair, or return the one that already exists.

        ``pair_key`` carries a unique index, so a racing insert for the same pair
        surfaces as ``DuplicateKeyError`` and resolves to the stored document.
        """
        caller_id = str(caller_details["user_id"])
        other_id = str(other_details["user_id"])
        doc: ConversationDocument = {
            "participants": sorted([caller_id, other_id]),
            "pair_key": pair_key(caller_id, other_id),
            "participant_details": [caller_details, other_details],
            "last_message": None,
            "unread_counts": {caller_id: 0, other_id: 0},
            "created_at": datetime.now(timezone.utc),
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            logger.debug("Conversation for %s already created concurrently", doc["pair_key"])
            existing = await self.find_between(caller_id, other_id)
            if existing is None:
                raise
            return existing
        doc["_id"] = result.inserted_id
        return doc

    async def find_for_participant(self, conversation_id, user_id: str) -> Optional[ConversationDocument]:
        oid = to_object_id(conversation_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid, "participants": str(user_id)})

    async def update_on_new_message(self, conversation_id, text: str, sender_id: str, receiver_id: str, timestamp: datetime) -> None:
        await self.collection.update_one(
            {"_id": conversation_id},
            {
                "$set": {
                    "last_message": {
                        "text": text,
                        "sender_id": str(sender_id),
                        "timestamp": timestamp,
                    },
                },
                "$inc": {f"unread_counts.{receiver_id}": 1},
            },
        )

    async def reset_unread(self, conversation_id, user_id: str) -> None:
        await self.collection.update_one(
            {"_id": conversation_id},
            {"$set": {f"unread_counts.{user_id}": 0}},
        )

    async def list_for_user(self, user_id: str) -> List[ConversationDocument]:
        # conversations without a last message sort after the rest, newest first
        sort = [("last_message.timestamp", DESCENDING), ("_id", DESCENDING)]
        cursor = self.collection.find({"participants": str(user_id)}).sort(sort)
        return await cursor.to_list(length=None)

    async def delete(self, conversation_id) -> bool:
        result = await self.collection.delete_one({"_id": conversation_id})
        return result.deleted_count > 0
