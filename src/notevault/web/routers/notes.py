from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from notevault.core.modules.note.models import Note, NoteStats
from notevault.web.deps import AppDep, AuthDep
from notevault.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["notes"])


class NoteRequest(BaseModel):
    """Request to create or replace a note."""

    title: str = Field(..., description="Note title (required, at most 200 characters)")
    content: str = Field("", description="Note body as plain text")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"title": "Groceries", "content": "milk, eggs, bread"},
            ]
        }
    }


@router.get(
    "/notes",
    summary="List notes",
    description="Get the current user's notes, most recently updated first. "
    "Use `q` for a case-insensitive substring search over title and content.",
    operation_id="listNotes",
    responses={
        200: {"description": "Notes of the current user"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_notes(
    app: AppDep,
    identity: AuthDep,
    q: Annotated[str | None, Query(description="Search term")] = None,
) -> list[Note]:
    return await app.list_notes(identity, q)


@router.get(
    "/notes/stats",
    summary="Get note statistics",
    description="Count the current user's notes: total, created today (UTC) and created in the last 7 days.",
    operation_id="getNoteStats",
    responses={
        200: {"description": "Note statistics"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_note_stats(app: AppDep, identity: AuthDep) -> NoteStats:
    return await app.get_note_stats(identity)


@router.post(
    "/notes",
    summary="Create note",
    description="Create a new note owned by the current user.",
    operation_id="createNote",
    status_code=201,
    responses={
        201: {"description": "Note created"},
        400: {"model": ErrorResponse, "description": "Invalid note data"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_note(note_data: NoteRequest, app: AppDep, identity: AuthDep) -> Note:
    return await app.create_note(identity, note_data.title, note_data.content)


@router.get(
    "/notes/{note_id}",
    summary="Get note",
    description="Get a single note owned by the current user.",
    operation_id="getNote",
    responses={
        200: {"description": "Note details"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Note not found"},
    },
)
async def get_note(note_id: int, app: AppDep, identity: AuthDep) -> Note:
    return await app.get_note(identity, note_id)


@router.put(
    "/notes/{note_id}",
    summary="Update note",
    description="Replace the title and content of a note owned by the current user.",
    operation_id="updateNote",
    responses={
        200: {"description": "Note updated"},
        400: {"model": ErrorResponse, "description": "Invalid note data"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Note not found"},
    },
)
async def update_note(note_id: int, note_data: NoteRequest, app: AppDep, identity: AuthDep) -> Note:
    return await app.update_note(identity, note_id, note_data.title, note_data.content)


@router.delete(
    "/notes/{note_id}",
    summary="Delete note",
    description="Delete a note owned by the current user. Its share links stop working.",
    operation_id="deleteNote",
    status_code=204,
    responses={
        204: {"description": "Note deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Note not found"},
    },
)
async def delete_note(note_id: int, app: AppDep, identity: AuthDep) -> None:
    await app.delete_note(identity, note_id)
