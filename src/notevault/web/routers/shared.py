"""Public endpoints reached through a share link; no session required."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from notevault.core.modules.share.models import SharedNoteView
from notevault.web.deps import AppDep, IdentityDep
from notevault.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["shared"])


class UpdateSharedNoteRequest(BaseModel):
    """Request to edit a note through a read_write share link."""

    title: str = Field(..., description="Note title (required, at most 200 characters)")
    content: str = Field("", description="Note body as plain text")


@router.get(
    "/shared/{token}",
    summary="Get shared note",
    description="Read a note through its share link. Authentication is optional and an unusable credential is ignored.",
    operation_id="getSharedNote",
    responses={
        200: {"description": "Shared note"},
        404: {"model": ErrorResponse, "description": "Share link is invalid or expired"},
    },
)
async def get_shared_note(token: str, app: AppDep, identity: IdentityDep) -> SharedNoteView:
    return await app.get_shared_note(token, identity)


@router.put(
    "/shared/{token}",
    summary="Update shared note",
    description="Edit a note through a share link with read_write permission.",
    operation_id="updateSharedNote",
    responses={
        200: {"description": "Shared note updated"},
        400: {"model": ErrorResponse, "description": "Invalid note data"},
        403: {"model": ErrorResponse, "description": "Share link is read-only"},
        404: {"model": ErrorResponse, "description": "Share link is invalid or expired"},
    },
)
async def update_shared_note(
    token: str, note_data: UpdateSharedNoteRequest, app: AppDep, identity: IdentityDep
) -> SharedNoteView:
    return await app.update_shared_note(token, note_data.title, note_data.content, identity)
