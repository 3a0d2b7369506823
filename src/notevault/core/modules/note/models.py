from pydantic import BaseModel, Field

from notevault.core.db import MongoModel, UtcDatetime
from notevault.utils import now


class Note(MongoModel):
    """Plain-text note owned by a single user."""

    user_id: int  # Owner
    title: str
    content: str = ""
    created_at: UtcDatetime = Field(default_factory=now)
    updated_at: UtcDatetime = Field(default_factory=now)


class NoteStats(BaseModel):
    """Note counters for the owner's dashboard."""

    total_notes: int = Field(..., ge=0)
    notes_today: int = Field(..., ge=0, description="Notes created since 00:00 UTC")
    notes_this_week: int = Field(..., ge=0, description="Notes created in the last 7 days")
