"""Tests for note export rendering."""

import csv
import io
import json

import pytest

from notevault.errors import ValidationError


@pytest.fixture
async def notes(core, alice, clock):
    first = await core.services.note.create_note(alice.id, "Alpha", "line one")
    clock.advance(hours=1)
    second = await core.services.note.create_note(alice.id, "Beta, with comma", 'say "hi"\nsecond line')
    return [second, first]


class TestExportNotes:
    async def test_json(self, core, alice, notes):
        export_file = await core.services.export.export_notes(alice.id, "json")

        assert export_file.filename == "notes_2025-06-02.json"
        assert export_file.media_type == "application/json"
        data = json.loads(export_file.content)
        assert data["notes_count"] == 2
        assert [n["title"] for n in data["notes"]] == ["Beta, with comma", "Alpha"]
        assert set(data["notes"][0]) == {"id", "title", "content", "created_at", "updated_at"}

    async def test_txt(self, core, alice, notes):
        export_file = await core.services.export.export_notes(alice.id, "txt")
        assert export_file.media_type == "text/plain"
        assert export_file.content.startswith("TITLE: Beta, with comma\nDATE: 2025-06-02 13:00\nCONTENT:\n")
        assert export_file.content.count("=" * 50) == 2

    async def test_markdown(self, core, alice, notes):
        export_file = await core.services.export.export_notes(alice.id, "md")
        assert export_file.filename.endswith(".md")
        assert "# Alpha\n\n*Created: 2025-06-02 12:00*\n\nline one" in export_file.content

    async def test_csv_quotes_values(self, core, alice, notes):
        export_file = await core.services.export.export_notes(alice.id, "CSV")
        rows = list(csv.reader(io.StringIO(export_file.content)))
        assert rows[0] == ["id", "title", "content", "created_at", "updated_at"]
        assert rows[1][1:3] == ["Beta, with comma", 'say "hi"\nsecond line']
        assert len(rows) == 3

    async def test_only_own_notes(self, core, bob, notes):
        data = json.loads((await core.services.export.export_notes(bob.id, "json")).content)
        assert data["notes_count"] == 0

    async def test_unsupported_format(self, core, alice):
        with pytest.raises(ValidationError):
            await core.services.export.export_notes(alice.id, "pdf")
