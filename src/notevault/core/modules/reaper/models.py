from enum import StrEnum

from pydantic import BaseModel

from notevault.core.db import UtcDatetime


class ReaperState(StrEnum):
    IDLE = "idle"
    SWEEPING = "sweeping"


class SweepResult(BaseModel):
    """Outcome of one sweep."""

    started_at: UtcDatetime
    deleted: int
    succeeded: bool
