from typing import Any

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from notevault.core.core import Service
from notevault.core.modules.counter.models import CounterType


class CounterService(Service):
    """Service for issuing auto-incrementing ids per entity type."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("counters")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("counter_type", 1)], unique=True)

    async def get_next_sequence(self, counter_type: CounterType) -> int:
        """Atomically increment and return the next id for the given entity type."""
        result = await self._collection.find_one_and_update(
            {"counter_type": counter_type},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

        # If it was just created (upserted), seq will be 1
        return int(result["seq"])

