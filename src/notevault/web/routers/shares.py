from fastapi import APIRouter
from pydantic import BaseModel, Field, StrictInt

from notevault.core.modules.share.models import ShareLink, SharePermission
from notevault.web.deps import AppDep, AuthDep
from notevault.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["shares"])


class CreateShareRequest(BaseModel):
    """Request to create a share link for a note."""

    permission: SharePermission = Field(SharePermission.READ, description="What link holders may do with the note")
    ttl_days: StrictInt | None = Field(None, description="Days until the link expires (server default when omitted)")


@router.post(
    "/notes/{note_id}/share",
    summary="Share note",
    description="Create a new share link for a note owned by the current user. "
    "Existing links for the same note stay valid.",
    operation_id="shareNote",
    status_code=201,
    responses={
        201: {"description": "Share link created"},
        400: {"model": ErrorResponse, "description": "Invalid ttl_days"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Note not found"},
    },
)
async def share_note(note_id: int, share_data: CreateShareRequest, app: AppDep, identity: AuthDep) -> ShareLink:
    return await app.share_note(identity, note_id, share_data.permission, share_data.ttl_days)


@router.get(
    "/shares",
    summary="List share links",
    description="Get the current user's share links that have not expired yet, newest first.",
    operation_id="listShares",
    responses={
        200: {"description": "Active share links"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_shares(app: AppDep, identity: AuthDep) -> list[ShareLink]:
    return await app.list_shares(identity)


@router.delete(
    "/shares/{share_id}",
    summary="Revoke share link",
    description="Delete a share link. Only its creator can revoke it.",
    operation_id="revokeShare",
    status_code=204,
    responses={
        204: {"description": "Share link revoked"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Share link not found"},
    },
)
async def revoke_share(share_id: int, app: AppDep, identity: AuthDep) -> None:
    await app.revoke_share(identity, share_id)
