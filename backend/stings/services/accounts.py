"""
Account service: registration, login, session checks, logout and
access-code subscriptions over the user store.

Every operation is a single read and/or single write against one user
record. Concurrent submissions for the same user are not serialized; the
last write wins.
"""
import logging
import re
import secrets
import time
from typing import Callable

from stings.core.access_codes import AccessCodeTable
from stings.core.db import UserStore
from stings.core.errors import AuthError, ConflictError, ValidationError
from stings.core.security import DEFAULT_TOKEN_BYTES, hash_password, new_session_token, verify_password
from stings.schemas.account import LoginResult, SessionStatus, SubscriptionOut

logger = logging.getLogger("uvicorn.error")

USERNAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
MAX_USERNAME_LENGTH = 256  # users.username column width
MIN_PASSWORD_LENGTH = 6
DAY_MS = 24 * 60 * 60 * 1000
MONTH_MS = 30 * DAY_MS  # Fixed 30-day month, not calendar aware
# 100 years keeps subscription_end within BIGINT and months within INT
MAX_SUBSCRIPTION_MONTHS = 1200


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def _same_token(stored: str, supplied: str) -> bool:
    return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


def is_subscribed(subscription_end: int | None, now: int) -> bool:
    return subscription_end is not None and subscription_end > now


class AccountService:
    """
    Handler logic for the five account operations.

    Args:
        store: Initialized user store
        codes: Access-code table loaded at startup
        session_ttl_minutes: Optional server-side session lifetime; None keeps
            sessions alive until logout
        token_bytes: Entropy of generated session tokens
        clock: Returns "now" in epoch milliseconds
    """

    def __init__(
        self,
        store: UserStore,
        codes: AccessCodeTable,
        session_ttl_minutes: int | None = None,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.codes = codes
        self.session_ttl_ms = session_ttl_minutes * 60 * 1000 if session_ttl_minutes else None
        self.token_bytes = token_bytes
        self.clock = clock

    async def register(self, username: str | None, password: str | None) -> None:
        """
        Create a user with a hashed password.

        Raises:
            ValidationError: Missing fields, bad username or short password
            ConflictError: Username already registered
        """
        if not username or not password:
            raise ValidationError("Username and password are required")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters long")
        if not USERNAME_PATTERN.fullmatch(username):
            raise ValidationError(
                "Username must start with a letter and contain only letters, numbers, or underscores"
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        if await self.store.find_by_username(username) is not None:
            raise ConflictError("Username already registered")
        # insert() also raises ConflictError if a concurrent register wins the race
        await self.store.insert(username, hash_password(password))
        logger.info("[accounts] registered username=%s", username)

    async def login(self, username: str | None, password: str | None) -> LoginResult:
        """
        Check credentials and start a new session, replacing any previous one.

        Raises:
            ValidationError: Missing fields
            AuthError: Unknown username or wrong password (indistinguishable)
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = await self.store.find_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError("Invalid username or password")

        token = new_session_token(self.token_bytes)
        await self.store.update_fields(username, session_token=token, session_timestamp=self.clock())
        logger.info("[accounts] login username=%s", username)
        return LoginResult(username=username, sessionToken=token, subscriptionEnd=user.subscription_end)

    async def validate_session(self, username: str | None, session_token: str | None) -> SessionStatus:
        """Report whether the token is the user's active session and whether they are subscribed."""
        if not username or not session_token:
            return SessionStatus(valid=False)

        user = await self.store.find_by_username(username)
        if user is None or user.session_token is None or not _same_token(user.session_token, session_token):
            return SessionStatus(valid=False)

        now = self.clock()
        if self.session_ttl_ms is not None:
            started = user.session_timestamp
            if started is None or now - started > self.session_ttl_ms:
                return SessionStatus(valid=False)

        return SessionStatus(
            valid=True,
            isSubscribed=is_subscribed(user.subscription_end, now),
            subscriptionEnd=user.subscription_end,
        )

    async def logout(self, username: str | None) -> None:
        """Clear the session fields. A missing username or an inactive session is not an error."""
        if not username:
            return
        await self.store.update_fields(username, session_token=None, session_timestamp=None)
        logger.info("[accounts] logout username=%s", username)

    async def submit_code(
        self, username: str | None, code: str | None, subscription_months: int | None
    ) -> SubscriptionOut:
        """
        Activate or extend a subscription with an access code.

        The expected code depends on the username's first letter, the plan
        (3 months, otherwise 7) and whether the current subscription is still
        active (renewal code) or absent/expired (initial code). On success the
        subscription ends `subscription_months * 30` days from now.

        Raises:
            ValidationError: Bad input, unknown user or wrong code
        """
        if not username:
            raise ValidationError("Username is required")
        if code is None:
            raise ValidationError("Access code is required")
        if subscription_months is None or not 1 <= subscription_months <= MAX_SUBSCRIPTION_MONTHS:
            raise ValidationError(
                f"subscriptionMonths must be a positive integer no greater than {MAX_SUBSCRIPTION_MONTHS}"
            )

        # Reject a bad first letter before touching storage
        self.codes.letter_codes(username[0])

        user = await self.store.find_by_username(username)
        if user is None:
            raise ValidationError("User not found")

        now = self.clock()
        renewing = is_subscribed(user.subscription_end, now)
        expected = self.codes.expected_code(username[0], subscription_months, renewing)
        if code != expected:
            raise ValidationError(f"Invalid access code for {subscription_months}-month plan")

        subscription_end = now + subscription_months * MONTH_MS
        await self.store.update_fields(
            username,
            subscription_end=subscription_end,
            subscription_months=subscription_months,
        )
        logger.info(
            "[accounts] subscription %s username=%s months=%s until=%s",
            "renewed" if renewing else "activated", username, subscription_months, subscription_end,
        )
        return SubscriptionOut(subscriptionMonths=subscription_months, subscriptionEnd=subscription_end)
