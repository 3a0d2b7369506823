"""Export API endpoints."""

from fastapi import APIRouter, Response

from notevault.web.deps import AppDep, AuthDep
from notevault.web.openapi import ErrorResponse

router = APIRouter(tags=["export"])


@router.get(
    "/export/{export_format}",
    summary="Export notes",
    description="Download all notes of the current user as a json, txt, md or csv attachment.",
    operation_id="exportNotes",
    response_class=Response,
    responses={
        200: {"description": "Export file"},
        400: {"model": ErrorResponse, "description": "Unsupported export format"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def export_notes(export_format: str, app: AppDep, identity: AuthDep) -> Response:
    export_file = await app.export_notes(identity, export_format)
    return Response(
        content=export_file.content,
        media_type=export_file.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export_file.filename}"'},
    )
