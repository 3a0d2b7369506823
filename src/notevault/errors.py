from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user, except for the authentication and share link
    families, which are collapsed to a fixed message by the web layer.
    These errors should not contain any sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidCredentialError(AuthenticationError):
    """Session credential is malformed or its signature does not verify."""


class ExpiredCredentialError(AuthenticationError):
    """Session credential is authentic but its expiry has elapsed."""


class UserNotFoundError(AuthenticationError):
    """Session credential refers to a user that no longer exists."""


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class NotOwnerError(NotFoundError):
    """Raised when the caller does not own the note.

    Reported exactly like a missing note so that note existence is not disclosed.
    """

    def __init__(self, message: str = "Note not found") -> None:
        super().__init__(message)


class ShareLinkError(UserError):
    """Base class for share tokens that cannot be used."""

    def __init__(self, message: str = "Share link is invalid or expired") -> None:
        super().__init__(message)


class ShareNotFoundError(ShareLinkError):
    """No grant matches the token (never issued, revoked, or already reaped)."""


class ShareExpiredError(ShareLinkError):
    """Grant exists but its expiry has passed."""
