from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from notevault.app import App
from notevault.core.modules.session.models import Anonymous, Authenticated, Identity
from notevault.errors import AuthenticationError

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name="auth_token", auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


def get_credential(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    token_cookie: Annotated[str | None, Depends(cookie_scheme)] = None,
) -> str | None:
    """Extract the session credential from the Authorization Bearer header, falling back to the cookie."""
    if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
        return credentials.credentials
    return token_cookie or None


async def get_identity(
    app: Annotated[App, Depends(get_app)],
    credential: Annotated[str | None, Depends(get_credential)],
) -> Identity:
    """Optional authentication: routes using this accept anonymous requests.

    A credential that fails verification is treated as absent.
    """
    try:
        return await app.identify(credential)
    except AuthenticationError:
        return Anonymous()


async def get_authenticated(
    app: Annotated[App, Depends(get_app)],
    credential: Annotated[str | None, Depends(get_credential)],
) -> Authenticated:
    """Required authentication."""
    identity = await app.identify(credential)
    if not isinstance(identity, Authenticated):
        raise AuthenticationError("Not authenticated")
    return identity


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
IdentityDep = Annotated[Identity, Depends(get_identity)]
AuthDep = Annotated[Authenticated, Depends(get_authenticated)]
