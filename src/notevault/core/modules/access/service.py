from notevault.core.core import Service
from notevault.core.modules.note.models import Note
from notevault.core.modules.session.models import Authenticated, Identity
from notevault.core.modules.share.models import ResolvedShare, SharePermission
from notevault.core.modules.user.models import User
from notevault.errors import AccessDeniedError, AuthenticationError, NotOwnerError, UserNotFoundError


class AccessService(Service):
    async def ensure_authenticated(self, identity: Identity) -> User:
        """Ensure the request carries an authenticated identity whose user still exists."""
        if not isinstance(identity, Authenticated):
            raise AuthenticationError("Not authenticated")
        user = await self.core.services.user.find_user_by_id(identity.user_id)
        if user is None:
            raise UserNotFoundError
        return user

    async def ensure_note_owner(self, identity: Identity, note_id: int) -> Note:
        """Ensure the authenticated user owns the note; a foreign note looks like a missing one."""
        user = await self.ensure_authenticated(identity)
        note = await self.core.services.note.get_note(note_id)
        if note is None or note.user_id != user.id:
            raise NotOwnerError
        return note

    def ensure_share_permission(self, share: ResolvedShare, required: SharePermission) -> None:
        """Ensure the share grant covers the attempted operation, whoever presents it."""
        if not share.permission.includes(required):
            raise AccessDeniedError("This share link does not allow editing")
