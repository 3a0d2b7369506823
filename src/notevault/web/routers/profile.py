from fastapi import APIRouter

from notevault.core.modules.user.models import UserView
from notevault.web.deps import AppDep, AuthDep
from notevault.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"])


@router.get(
    "/profile",
    summary="Get current user profile",
    description="Get the profile of the currently authenticated user.",
    operation_id="getCurrentUserProfile",
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_profile(app: AppDep, identity: AuthDep) -> UserView:
    return await app.get_current_user(identity)


@router.delete(
    "/profile",
    summary="Delete account",
    description="Delete the current user together with their notes and share links. "
    "Outstanding session credentials stop working immediately.",
    operation_id="deleteAccount",
    status_code=204,
    responses={
        204: {"description": "Account deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def delete_account(app: AppDep, identity: AuthDep) -> None:
    await app.delete_account(identity)
