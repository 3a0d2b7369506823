import secrets
from datetime import datetime, timedelta
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from notevault.core.core import Service
from notevault.core.modules.counter.models import CounterType
from notevault.core.modules.share.models import ResolvedShare, ShareGrant, ShareLink, SharePermission
from notevault.core.modules.share.registry import GrantRegistry
from notevault.errors import NotFoundError, NotOwnerError, ShareExpiredError, ShareNotFoundError, ValidationError
from notevault.utils import token_prefix

logger = structlog.get_logger(__name__)

TOKEN_BYTES = 32  # 256-bit tokens
MAX_TOKEN_LENGTH = 128
MAX_TOKEN_ATTEMPTS = 3


def generate_share_token() -> str:
    """Generate a cryptographically random URL-safe share token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class ShareService(Service):
    """Issues, resolves, lists and revokes share grants."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self.registry = GrantRegistry(database.get_collection("share_grants"))

    async def on_start(self) -> None:
        await self.registry.create_indexes()

    def build_url(self, token: str) -> str:
        return f"{self.core.config.public_url}/shared/{token}"

    def to_link(self, grant: ShareGrant, note_title: str | None = None) -> ShareLink:
        return ShareLink.from_grant(grant, self.build_url(grant.token), note_title)

    def _validate_ttl(self, ttl_days: int | None) -> int:
        if ttl_days is None:
            return self.core.config.share_default_ttl_days
        if isinstance(ttl_days, bool) or ttl_days <= 0:
            raise ValidationError("ttl_days must be a positive integer")
        if ttl_days > self.core.config.share_max_ttl_days:
            raise ValidationError(f"ttl_days must not exceed {self.core.config.share_max_ttl_days}")
        return ttl_days

    async def _is_token_collision(self, error: DuplicateKeyError, token: str) -> bool:
        """Whether the duplicate key is the token rather than another unique key such as _id."""
        key_pattern = (error.details or {}).get("keyPattern")
        if key_pattern is not None:
            return "token" in key_pattern
        return await self.registry.find_by_token(token) is not None

    async def issue(
        self, note_id: int, owner_id: int, permission: SharePermission, ttl_days: int | None = None
    ) -> ShareGrant:
        """Mint a new grant for a note owned by ``owner_id``.

        Existing grants for the same note are left untouched.

        Raises:
            NotOwnerError: The note does not exist or belongs to someone else.
            ValidationError: ttl_days is not positive or exceeds the configured maximum.
        """
        ttl_days = self._validate_ttl(ttl_days)

        if await self.core.services.note.get_note_owner(note_id) != owner_id:
            logger.info("share_issue_rejected", note_id=note_id, user_id=owner_id)
            raise NotOwnerError

        grant_id = await self.core.services.counter.get_next_sequence(CounterType.SHARE)
        created_at = self.core.clock()
        expires_at = created_at + timedelta(days=ttl_days)

        for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
            grant = ShareGrant(
                id=grant_id,
                note_id=note_id,
                token=generate_share_token(),
                permission=permission,
                expires_at=expires_at,
                created_by=owner_id,
                created_at=created_at,
            )
            try:
                await self.registry.insert(grant)
            except DuplicateKeyError as e:
                if not await self._is_token_collision(e, grant.token):
                    raise
                logger.warning("share_token_collision", note_id=note_id, attempt=attempt)
                continue

            logger.info(
                "share_issued",
                share_id=grant.id,
                note_id=note_id,
                user_id=owner_id,
                permission=permission,
                expires_at=expires_at,
            )
            return grant

        raise RuntimeError(f"Could not generate a unique share token after {MAX_TOKEN_ATTEMPTS} attempts")

    async def resolve(self, token: str) -> ResolvedShare:
        """Resolve a token to the note it grants access to.

        The expiry is checked here on every call; grants the reaper has not swept yet are
        rejected just like grants it already deleted.

        Raises:
            ShareNotFoundError: No grant with this token (never issued, revoked or reaped).
            ShareExpiredError: Grant exists but expired.
        """
        if not token or len(token) > MAX_TOKEN_LENGTH:
            raise ShareNotFoundError

        grant = await self.registry.find_by_token(token)
        if grant is None:
            logger.info("share_resolve_not_found", token=token_prefix(token))
            raise ShareNotFoundError

        current = self.core.clock()
        if not grant.is_valid_at(current):
            logger.info("share_resolve_expired", share_id=grant.id, expired_at=grant.expires_at)
            raise ShareExpiredError

        return ResolvedShare(
            grant_id=grant.id,
            note_id=grant.note_id,
            permission=grant.permission,
            owner_id=grant.created_by,
            expires_at=grant.expires_at,
        )

    async def list_shares(self, user_id: int) -> list[ShareGrant]:
        """Still-valid grants created by the user, newest first."""
        return await self.registry.list_by_creator(user_id, self.core.clock())

    async def revoke(self, share_id: int, user_id: int) -> None:
        """Delete a grant. Only its creator may revoke it."""
        if not await self.registry.delete(share_id, user_id):
            raise NotFoundError("Share link not found")
        logger.info("share_revoked", share_id=share_id, user_id=user_id)

    async def delete_grants_for_note(self, note_id: int) -> int:
        return await self.registry.delete_by_note(note_id)

    async def delete_grants_by_creator(self, user_id: int) -> int:
        return await self.registry.delete_by_creator(user_id)

    async def delete_expired(self, moment: datetime | None = None) -> int:
        """Remove all grants expired at ``moment`` (defaults to now)."""
        return await self.registry.delete_expired(moment or self.core.clock())
