from enum import StrEnum

from pydantic import BaseModel, Field

from notevault.core.db import UtcDatetime


class ExportFormat(StrEnum):
    JSON = "json"
    TXT = "txt"
    MD = "md"
    CSV = "csv"

    @property
    def media_type(self) -> str:
        return {
            ExportFormat.JSON: "application/json",
            ExportFormat.TXT: "text/plain",
            ExportFormat.MD: "text/markdown",
            ExportFormat.CSV: "text/csv",
        }[self]


class ExportNote(BaseModel):
    id: int
    title: str
    content: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ExportData(BaseModel):
    """JSON export document."""

    export_date: UtcDatetime
    notes_count: int = Field(..., ge=0)
    notes: list[ExportNote]


class ExportFile(BaseModel):
    """Rendered export ready to be sent as an attachment."""

    filename: str
    media_type: str
    content: str
