from typing import Any

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from notevault.core.core import Service
from notevault.core.modules.counter.models import CounterType
from notevault.core.modules.user.models import User
from notevault.core.modules.user.validators import normalize_email, validate_password, validate_username
from notevault.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

# Unknown emails are checked against this hash too
DUMMY_PASSWORD_HASH = bcrypt.hashpw(b"notevault-dummy-password", bcrypt.gensalt())


class UserService(Service):
    """Credential store: user records and password verification.

    Reads always go to the database so that a deleted user loses access immediately.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create unique indexes for login lookups."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self._collection.create_index([("username", 1)], unique=True)

    async def find_user_by_id(self, user_id: int) -> User | None:
        """Get user by ID, or None if the user does not exist."""
        doc = await self._collection.find_one({"_id": user_id})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def get_user(self, user_id: int) -> User:
        """Get user by ID."""
        user = await self.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def find_user_by_email(self, email: str) -> User | None:
        doc = await self._collection.find_one({"email": email.strip().lower()})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def create_user(self, username: str, email: str, password: str) -> User:
        """Create user with hashed password."""
        validate_username(username)
        email = normalize_email(email)
        validate_password(password)

        if await self._collection.find_one({"$or": [{"email": email}, {"username": username}]}) is not None:
            raise ValidationError("User with this email or username already exists")

        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        user_id = await self.core.services.counter.get_next_sequence(CounterType.USER)
        user = User(id=user_id, username=username, email=email, password_hash=password_hash, created_at=self.core.clock())
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            # Lost a race against a concurrent registration with the same email or username
            raise ValidationError("User with this email or username already exists") from e

        logger.info("user_created", user_id=user.id, username=username)
        return user

    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the user if the password matches, None otherwise."""
        user = await self.find_user_by_email(email)
        if user is None:
            bcrypt.checkpw(password.encode("utf-8"), DUMMY_PASSWORD_HASH)
            return None
        if not bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8")):
            return None
        return user

    async def delete_user(self, user_id: int) -> None:
        """Delete a user record."""
        result = await self._collection.delete_one({"_id": user_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"User '{user_id}' not found")
        logger.info("user_deleted", user_id=user_id)
