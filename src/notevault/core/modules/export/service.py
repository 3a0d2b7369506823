"""Export of a user's notes to downloadable files."""

import csv
import io
from datetime import datetime

import structlog

from notevault.core.core import Service
from notevault.core.modules.export.models import ExportData, ExportFile, ExportFormat, ExportNote
from notevault.core.modules.note.models import Note
from notevault.errors import ValidationError

logger = structlog.get_logger(__name__)

SEPARATOR = "=" * 50


def render_json(notes: list[Note], exported_at: datetime) -> str:
    data = ExportData(
        export_date=exported_at,
        notes_count=len(notes),
        notes=[ExportNote.model_validate(note.model_dump()) for note in notes],
    )
    return data.model_dump_json(indent=2)


def render_txt(notes: list[Note]) -> str:
    return "".join(
        f"TITLE: {note.title}\nDATE: {note.created_at:%Y-%m-%d %H:%M}\nCONTENT:\n{note.content}\n{SEPARATOR}\n\n"
        for note in notes
    )


def render_markdown(notes: list[Note]) -> str:
    return "".join(
        f"# {note.title}\n\n*Created: {note.created_at:%Y-%m-%d %H:%M}*\n\n{note.content}\n\n---\n\n" for note in notes
    )


def render_csv(notes: list[Note]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["id", "title", "content", "created_at", "updated_at"])
    for note in notes:
        writer.writerow([note.id, note.title, note.content, note.created_at.isoformat(), note.updated_at.isoformat()])
    return buffer.getvalue()


class ExportService(Service):
    """Renders the owner's notes in one of the supported formats."""

    async def export_notes(self, user_id: int, export_format: str) -> ExportFile:
        try:
            fmt = ExportFormat(export_format.lower())
        except ValueError as e:
            raise ValidationError(f"Unsupported export format: {export_format}") from e

        notes = sorted(await self.core.services.note.list_notes(user_id), key=lambda n: n.created_at, reverse=True)
        exported_at = self.core.clock()

        match fmt:
            case ExportFormat.JSON:
                content = render_json(notes, exported_at)
            case ExportFormat.TXT:
                content = render_txt(notes)
            case ExportFormat.MD:
                content = render_markdown(notes)
            case ExportFormat.CSV:
                content = render_csv(notes)

        logger.debug("export_notes", user_id=user_id, format=fmt, notes_count=len(notes))
        return ExportFile(filename=f"notes_{exported_at:%Y-%m-%d}.{fmt}", media_type=fmt.media_type, content=content)
