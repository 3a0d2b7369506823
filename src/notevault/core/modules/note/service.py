import re
from datetime import timedelta
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from notevault.core.core import Service
from notevault.core.modules.counter.models import CounterType
from notevault.core.modules.note.models import Note, NoteStats
from notevault.errors import NotFoundError, ValidationError
from notevault.utils import to_mongo_datetime

logger = structlog.get_logger(__name__)

MAX_TITLE_LENGTH = 200


def validate_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationError("Note title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Note title must be at most {MAX_TITLE_LENGTH} characters long")
    return title


class NoteService(Service):
    """Stores notes; knows nothing about sharing beyond cascading deletes."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("notes")

    async def on_start(self) -> None:
        """Create index for per-owner listing sorted by last update."""
        await self._collection.create_index([("user_id", 1), ("updated_at", -1)])

    async def get_note(self, note_id: int) -> Note | None:
        doc = await self._collection.find_one({"_id": note_id})
        if doc is None:
            return None
        return Note.model_validate(doc)

    async def get_note_owner(self, note_id: int) -> int | None:
        doc = await self._collection.find_one({"_id": note_id}, projection={"user_id": 1})
        if doc is None:
            return None
        return int(doc["user_id"])

    async def list_notes(self, user_id: int, query: str | None = None) -> list[Note]:
        """List the user's notes, newest first, optionally filtered by a case-insensitive substring."""
        mongo_query: dict[str, Any] = {"user_id": user_id}
        if query and query.strip():
            pattern = {"$regex": re.escape(query.strip()), "$options": "i"}
            mongo_query["$or"] = [{"title": pattern}, {"content": pattern}]

        cursor = self._collection.find(mongo_query).sort("updated_at", -1)
        notes = await Note.list_cursor(cursor)
        logger.debug("list_notes", user_id=user_id, query=query, returned=len(notes))
        return notes

    async def create_note(self, user_id: int, title: str, content: str = "") -> Note:
        title = validate_title(title)
        note_id = await self.core.services.counter.get_next_sequence(CounterType.NOTE)
        timestamp = self.core.clock()
        note = Note(id=note_id, user_id=user_id, title=title, content=content, created_at=timestamp, updated_at=timestamp)
        await self._collection.insert_one(note.to_mongo())
        return note

    async def update_note(self, note_id: int, title: str, content: str = "") -> Note:
        """Replace title and content of an existing note."""
        title = validate_title(title)
        changes = {"title": title, "content": content, "updated_at": to_mongo_datetime(self.core.clock())}
        result = await self._collection.update_one({"_id": note_id}, {"$set": changes})
        if result.matched_count == 0:
            raise NotFoundError("Note not found")

        note = await self.get_note(note_id)
        if note is None:
            raise NotFoundError("Note not found")
        return note

    async def delete_note(self, note_id: int) -> None:
        """Delete a note together with every share grant pointing at it."""
        result = await self._collection.delete_one({"_id": note_id})
        if result.deleted_count == 0:
            raise NotFoundError("Note not found")
        revoked = await self.core.services.share.delete_grants_for_note(note_id)
        logger.info("note_deleted", note_id=note_id, revoked_shares=revoked)

    async def delete_notes_by_user(self, user_id: int) -> int:
        """Delete all notes of a user and return count of deleted notes."""
        result = await self._collection.delete_many({"user_id": user_id})
        return result.deleted_count

    async def get_stats(self, user_id: int) -> NoteStats:
        current = self.core.clock()
        start_of_day = to_mongo_datetime(current.replace(hour=0, minute=0, second=0, microsecond=0))
        week_ago = to_mongo_datetime(current - timedelta(days=7))

        total = await self._collection.count_documents({"user_id": user_id})
        today = await self._collection.count_documents({"user_id": user_id, "created_at": {"$gte": start_of_day}})
        this_week = await self._collection.count_documents({"user_id": user_id, "created_at": {"$gte": week_ago}})
        return NoteStats(total_notes=total, notes_today=today, notes_this_week=this_week)
