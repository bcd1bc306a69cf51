from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from studx.models.user import UserDocument
from studx.repositories.conversation_repository import to_object_id


class UserRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db.get_collection("users")

    async def get_user_by_id(self, user_id: str) -> Optional[UserDocument]:

        oid = to_object_id(user_id)
        if oid is None:
            return None
        user = await self._collection.find_one({"_id": oid})
        if user:
            user["_id"] = str(user["_id"])  # normalize to string for API layer
        return user

