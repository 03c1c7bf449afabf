# stings/models/user.py
"""
Database model for users.
One record per username, holding the password hash, the active session and
the subscription window.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Lifecycle:
    - Created by register (no session or subscription fields set)
    - login sets session_token/session_timestamp, logout clears them
    - submit-code extends subscription_end and records subscription_months
    - Never deleted by any exposed operation

    Timestamps are epoch milliseconds; a missing or past subscription_end
    means the user is not subscribed.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key
    username = fields.CharField(
        max_length=256,
        unique=True,
        index=True
    )  # Login name (unique, immutable once created)
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    session_token = fields.CharField(max_length=128, null=True)  # Present only while a session is active (fits MAX_TOKEN_BYTES)
    session_timestamp = fields.BigIntField(null=True)  # Time of last login (ms)
    subscription_end = fields.BigIntField(null=True)  # Subscription expiry (ms)
    subscription_months = fields.IntField(null=True)  # Last purchased plan length (3 or 7)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name

    def __str__(self) -> str:
        return self.username
