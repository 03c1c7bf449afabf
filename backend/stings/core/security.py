"""
Security module for credentials.
Handles password hashing and session token generation.
"""
import secrets

from passlib.context import CryptContext

# Password hashing context
# Argon2 is a modern, salted, memory-hard password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

DEFAULT_TOKEN_BYTES = 32
MIN_TOKEN_BYTES = 16
MAX_TOKEN_BYTES = 96  # token_urlsafe(96) is 128 chars, the users.session_token width


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Verify a plain text password against a stored hash.

    Returns False (never raises) when the stored hash is missing or unreadable,
    so callers cannot tell a malformed record apart from a wrong password.
    """
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def new_session_token(nbytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """
    Create an opaque session token from the OS CSPRNG.

    Args:
        nbytes: Bytes of randomness; the URL-safe text is ~1.3x longer

    Returns:
        URL-safe token string
    """
    return secrets.token_urlsafe(nbytes)
