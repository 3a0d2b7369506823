import re

from notevault.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 6 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")


def validate_username(username: str) -> None:
    if not username or username != username.strip():
        raise ValidationError("Username cannot be empty or have surrounding whitespace")
    if len(username) > 64:
        raise ValidationError("Username must be at most 64 characters long")


def normalize_email(email: str) -> str:
    """Lowercase and validate an email address."""
    normalized = email.strip().lower()
    if not EMAIL_RE.fullmatch(normalized):
        raise ValidationError("Invalid email address")
    return normalized
