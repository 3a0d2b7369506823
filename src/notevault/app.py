from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from pymongo import AsyncMongoClient

from notevault.config import Config
from notevault.core.core import Core
from notevault.core.modules.export.models import ExportFile
from notevault.core.modules.note.models import Note, NoteStats
from notevault.core.modules.session.models import Anonymous, Authenticated, Identity, IssuedCredential
from notevault.core.modules.share.models import ResolvedShare, SharedNoteView, ShareLink, SharePermission
from notevault.core.modules.user.models import UserView
from notevault.errors import AuthenticationError, NotFoundError, ShareNotFoundError
from notevault.utils import Clock, now

ANONYMOUS = Anonymous()


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None, clock: Clock = now) -> None:
        self._core = Core(config, mongo_client=mongo_client, clock=clock)

    @property
    def core(self) -> Core:
        return self._core

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Authentication ===
    async def identify(self, credential: str | None) -> Identity:
        """Resolve an optional bearer credential; raises AuthenticationError if present but unusable."""
        return await self._core.services.session.identify(credential)

    async def register(self, username: str, email: str, password: str) -> UserView:
        """Create a new user account."""
        user = await self._core.services.user.create_user(username, email, password)
        return UserView.from_domain(user)

    async def login(self, email: str, password: str) -> tuple[IssuedCredential, UserView]:
        """Check the password and issue a session credential."""
        user = await self._core.services.user.authenticate(email, password)
        if user is None:
            raise AuthenticationError("Incorrect email or password")
        return self._core.services.session.create_credential(user.id), UserView.from_domain(user)

    async def get_current_user(self, identity: Identity) -> UserView:
        """Get current authenticated user profile."""
        user = await self._core.services.access.ensure_authenticated(identity)
        return UserView.from_domain(user)

    async def delete_account(self, identity: Identity) -> None:
        """Delete the current user with their notes and share grants."""
        user = await self._core.services.access.ensure_authenticated(identity)
        await self._core.services.share.delete_grants_by_creator(user.id)
        await self._core.services.note.delete_notes_by_user(user.id)
        await self._core.services.user.delete_user(user.id)

    # === Notes ===
    async def list_notes(self, identity: Identity, query: str | None = None) -> list[Note]:
        """List own notes, optionally filtered by a search term."""
        user = await self._core.services.access.ensure_authenticated(identity)
        return await self._core.services.note.list_notes(user.id, query)

    async def get_note(self, identity: Identity, note_id: int) -> Note:
        return await self._core.services.access.ensure_note_owner(identity, note_id)

    async def create_note(self, identity: Identity, title: str, content: str) -> Note:
        user = await self._core.services.access.ensure_authenticated(identity)
        return await self._core.services.note.create_note(user.id, title, content)

    async def update_note(self, identity: Identity, note_id: int, title: str, content: str) -> Note:
        note = await self._core.services.access.ensure_note_owner(identity, note_id)
        return await self._core.services.note.update_note(note.id, title, content)

    async def delete_note(self, identity: Identity, note_id: int) -> None:
        note = await self._core.services.access.ensure_note_owner(identity, note_id)
        await self._core.services.note.delete_note(note.id)

    async def get_note_stats(self, identity: Identity) -> NoteStats:
        user = await self._core.services.access.ensure_authenticated(identity)
        return await self._core.services.note.get_stats(user.id)

    async def export_notes(self, identity: Identity, export_format: str) -> ExportFile:
        user = await self._core.services.access.ensure_authenticated(identity)
        return await self._core.services.export.export_notes(user.id, export_format)

    # === Sharing (owner side) ===
    async def share_note(
        self, identity: Identity, note_id: int, permission: SharePermission, ttl_days: int | None = None
    ) -> ShareLink:
        """Create a share link for an own note."""
        user = await self._core.services.access.ensure_authenticated(identity)
        grant = await self._core.services.share.issue(note_id, user.id, permission, ttl_days)
        note = await self._core.services.note.get_note(note_id)
        return self._core.services.share.to_link(grant, note.title if note else None)

    async def list_shares(self, identity: Identity) -> list[ShareLink]:
        """List the caller's share links that have not expired yet."""
        user = await self._core.services.access.ensure_authenticated(identity)
        grants = await self._core.services.share.list_shares(user.id)
        links = []
        for grant in grants:
            note = await self._core.services.note.get_note(grant.note_id)
            links.append(self._core.services.share.to_link(grant, note.title if note else None))
        return links

    async def revoke_share(self, identity: Identity, share_id: int) -> None:
        user = await self._core.services.access.ensure_authenticated(identity)
        await self._core.services.share.revoke(share_id, user.id)

    # === Sharing (public side) ===
    async def get_shared_note(self, token: str, identity: Identity = ANONYMOUS) -> SharedNoteView:
        """Read a note through a share link; the presenter's identity plays no part in the decision."""
        share = await self._core.services.share.resolve(token)
        note = await self._core.services.note.get_note(share.note_id)
        if note is None:
            raise ShareNotFoundError
        return await self._shared_view(note, share, identity)

    async def update_shared_note(
        self, token: str, title: str, content: str, identity: Identity = ANONYMOUS
    ) -> SharedNoteView:
        """Edit a note through a read_write share link."""
        share = await self._core.services.share.resolve(token)
        self._core.services.access.ensure_share_permission(share, SharePermission.READ_WRITE)
        try:
            note = await self._core.services.note.update_note(share.note_id, title, content)
        except NotFoundError as e:
            raise ShareNotFoundError from e
        return await self._shared_view(note, share, identity)

    async def _shared_view(self, note: Note, share: ResolvedShare, identity: Identity) -> SharedNoteView:
        owner = await self._core.services.user.find_user_by_id(share.owner_id)
        return SharedNoteView(
            id=note.id,
            title=note.title,
            content=note.content,
            created_at=note.created_at,
            updated_at=note.updated_at,
            shared_by=owner.username if owner else None,
            permission=share.permission,
            can_edit=share.permission.allows_write,
            expires_at=share.expires_at,
            is_owner=isinstance(identity, Authenticated) and identity.user_id == share.owner_id,
        )
