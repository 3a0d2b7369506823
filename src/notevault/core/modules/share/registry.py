from datetime import datetime
from typing import Any

from pymongo.asynchronous.collection import AsyncCollection

from notevault.core.modules.share.models import ShareGrant
from notevault.utils import to_mongo_datetime


class GrantRegistry:
    """Persistent set of outstanding share grants.

    Every mutation is a single MongoDB operation, so each one is atomic on its own and
    no cross-statement locking is needed. Token uniqueness is enforced by a unique index,
    not by an application-level check.
    """

    def __init__(self, collection: AsyncCollection[dict[str, Any]]) -> None:
        self._collection = collection

    async def create_indexes(self) -> None:
        await self._collection.create_index([("token", 1)], unique=True)
        await self._collection.create_index([("expires_at", 1)])
        await self._collection.create_index([("created_by", 1), ("created_at", -1)])
        await self._collection.create_index([("note_id", 1)])

    async def insert(self, grant: ShareGrant) -> None:
        """Insert a grant. Raises DuplicateKeyError if the token is already taken."""
        await self._collection.insert_one(grant.to_mongo())

    async def find_by_token(self, token: str) -> ShareGrant | None:
        doc = await self._collection.find_one({"token": token})
        if doc is None:
            return None
        return ShareGrant.model_validate(doc)

    async def list_by_creator(self, user_id: int, valid_at: datetime) -> list[ShareGrant]:
        """Grants created by the user that are still valid at the given moment, newest first."""
        query = {"created_by": user_id, "expires_at": {"$gt": to_mongo_datetime(valid_at)}}
        cursor = self._collection.find(query).sort("created_at", -1)
        return await ShareGrant.list_cursor(cursor)

    async def delete(self, grant_id: int, created_by: int) -> bool:
        """Delete a grant if it belongs to the given creator."""
        result = await self._collection.delete_one({"_id": grant_id, "created_by": created_by})
        return result.deleted_count > 0

    async def delete_by_note(self, note_id: int) -> int:
        result = await self._collection.delete_many({"note_id": note_id})
        return result.deleted_count

    async def delete_by_creator(self, user_id: int) -> int:
        result = await self._collection.delete_many({"created_by": user_id})
        return result.deleted_count

    async def delete_expired(self, moment: datetime) -> int:
        """Bulk delete every grant with expires_at <= moment."""
        result = await self._collection.delete_many({"expires_at": {"$lte": to_mongo_datetime(moment)}})
        return result.deleted_count

    async def count(self) -> int:
        return await self._collection.count_documents({})
