from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from notevault.core.db import UtcDatetime
from notevault.core.modules.user.models import UserView
from notevault.web.deps import AppDep
from notevault.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])

AUTH_COOKIE = "auth_token"


class RegisterRequest(BaseModel):
    """Account registration request."""

    username: str = Field(..., description="Unique username (at most 64 characters)")
    email: str = Field(..., description="Unique email address, used to log in")
    password: str = Field(..., description="Password (at least 6 characters)")


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field(..., description="Email address for authentication")
    password: str = Field(..., description="Password for authentication")


class LoginResponse(BaseModel):
    """Authentication response."""

    token: str = Field(..., description="Session credential for subsequent requests")
    token_type: str = Field("bearer", description="Always 'bearer'")
    expires_at: UtcDatetime = Field(..., description="Moment the credential stops being accepted")
    user: UserView


@router.post(
    "/auth/register",
    summary="Register account",
    description="Create a new user account. Email and username must be unique.",
    operation_id="register",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid data or user already exists"},
    },
)
async def register(register_data: RegisterRequest, app: AppDep) -> UserView:
    return await app.register(register_data.username, register_data.email, register_data.password)


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password to receive a session credential.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, response: Response) -> LoginResponse:
    """Authenticate user and issue a session credential."""

    credential, user = await app.login(login_data.email, login_data.password)

    # Set cookie for browser-based clients
    response.set_cookie(
        key=AUTH_COOKIE,
        value=credential.token,
        httponly=True,
        samesite="lax",
        secure=False,  # Set to True in production with HTTPS
        max_age=int((credential.expires_at - credential.issued_at).total_seconds()),
    )

    return LoginResponse(token=credential.token, expires_at=credential.expires_at, user=user)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Clear the authentication cookie. Credentials are stateless and stay valid until they expire.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
    },
)
async def logout(response: Response) -> None:
    response.delete_cookie(AUTH_COOKIE)
