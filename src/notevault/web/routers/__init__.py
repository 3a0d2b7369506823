from notevault.web.routers.auth import router as auth_router
from notevault.web.routers.export import router as export_router
from notevault.web.routers.notes import router as notes_router
from notevault.web.routers.profile import router as profile_router
from notevault.web.routers.shared import router as shared_router
from notevault.web.routers.shares import router as shares_router

__all__ = [
    "auth_router",
    "export_router",
    "notes_router",
    "profile_router",
    "shared_router",
    "shares_router",
]
