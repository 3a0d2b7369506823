from pydantic import BaseModel, Field

from notevault.core.db import MongoModel, UtcDatetime
from notevault.utils import now


class User(MongoModel):
    """User domain model with credentials."""

    username: str
    email: str
    password_hash: str  # bcrypt hash
    created_at: UtcDatetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Email address")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, username=user.username, email=user.email)
