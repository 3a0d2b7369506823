"""Session credential and request identity models."""

from dataclasses import dataclass
from typing import NewType

from pydantic import BaseModel, Field

from notevault.core.db import UtcDatetime

SessionToken = NewType("SessionToken", str)


class IssuedCredential(BaseModel):
    """Signed, self-contained session credential returned at login.

    Never persisted; validity follows from the signature and the embedded expiry.
    """

    token: SessionToken = Field(..., description="Bearer credential for the Authorization header")
    user_id: int
    issued_at: UtcDatetime
    expires_at: UtcDatetime


@dataclass(frozen=True, slots=True)
class Authenticated:
    """Request carrying a verified session credential."""

    user_id: int


@dataclass(frozen=True, slots=True)
class Anonymous:
    """Request without a session credential."""


Identity = Authenticated | Anonymous
