"""Share grant models.

A grant is a capability: whoever presents its token may read (and, for read_write,
edit) the bound note until the grant expires. Grants are immutable once created;
revocation followed by re-issuance replaces any kind of "extend expiry" operation.
"""

from datetime import datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, model_validator

from notevault.core.db import MongoModel, UtcDatetime


class SharePermission(StrEnum):
    READ = "read"
    READ_WRITE = "read_write"

    @property
    def allows_write(self) -> bool:
        return self is SharePermission.READ_WRITE

    def includes(self, other: "SharePermission") -> bool:
        """Whether this permission covers ``other`` (read_write implies read)."""
        return self is SharePermission.READ_WRITE or other is SharePermission.READ


class ShareGrant(MongoModel):
    """Persisted share grant.

    Indexed on token - unique, expires_at, created_by, note_id.
    """

    note_id: int
    token: str
    permission: SharePermission
    expires_at: UtcDatetime
    created_by: int  # Owner of the note at issuance time
    created_at: UtcDatetime

    @model_validator(mode="after")
    def check_expiry_after_creation(self) -> Self:
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        return self

    def is_valid_at(self, moment: datetime) -> bool:
        return moment < self.expires_at


class ResolvedShare(BaseModel):
    """Outcome of a successful token resolution."""

    grant_id: int
    note_id: int
    permission: SharePermission
    owner_id: int
    expires_at: UtcDatetime


class ShareLink(BaseModel):
    """Share grant as returned to its creator (API representation)."""

    id: int = Field(..., description="Share grant ID, used for revocation")
    note_id: int = Field(..., description="Shared note ID")
    note_title: str | None = Field(None, description="Title of the shared note")
    token: str = Field(..., description="Capability token")
    url: str = Field(..., description="Public URL for the shared note")
    permission: SharePermission
    can_edit: bool = Field(..., description="Whether link holders may edit the note")
    expires_at: UtcDatetime
    created_at: UtcDatetime

    @classmethod
    def from_grant(cls, grant: ShareGrant, url: str, note_title: str | None = None) -> "ShareLink":
        return cls(
            id=grant.id,
            note_id=grant.note_id,
            note_title=note_title,
            token=grant.token,
            url=url,
            permission=grant.permission,
            can_edit=grant.permission.allows_write,
            expires_at=grant.expires_at,
            created_at=grant.created_at,
        )


class SharedNoteView(BaseModel):
    """Note as seen through a share link."""

    id: int
    title: str
    content: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
    shared_by: str | None = Field(None, description="Username of the note owner")
    permission: SharePermission
    can_edit: bool
    expires_at: UtcDatetime
    is_owner: bool = Field(False, description="Whether the viewer is logged in as the note owner")
