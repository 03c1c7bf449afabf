"""
Storage client for user records.
Wraps Tortoise ORM behind an explicitly constructed `UserStore` with an
init/close lifecycle; the service receives the store at construction time.
"""
import logging
from typing import Any

from tortoise import Tortoise
from tortoise.exceptions import BaseORMException, IntegrityError
from tortoise.exceptions import ValidationError as FieldValidationError

from stings.core.errors import ConflictError, StorageError, ValidationError
from stings.models.user import User

logger = logging.getLogger("uvicorn.error")

MODEL_MODULES = ["stings.models.user"]

# Driver-level socket errors can surface unwrapped from the backend
STORAGE_FAILURES = (BaseORMException, OSError)


def tortoise_config(db_url: str) -> dict:
    """Tortoise ORM configuration dictionary for a connection URL."""
    return {
        "connections": {"default": db_url},
        "apps": {
            "models": {
                "models": MODEL_MODULES,
                "default_connection": "default",
            },
        },
    }


class UserStore:
    """
    Single logical `users` collection keyed by username.

    Supports lookup by username, insert, and partial-field updates. Each call
    is one statement against one row; no multi-record transactions.
    """

    def __init__(self, db_url: str):
        self.db_url = db_url
        self._ready = False

    async def init(self) -> None:
        """
        Open the connection and create the users table if it does not exist.

        Raises:
            StorageError: If the database cannot be reached or initialized
        """
        try:
            await Tortoise.init(config=tortoise_config(self.db_url))
            await Tortoise.generate_schemas(safe=True)
        except STORAGE_FAILURES as exc:
            raise StorageError(f"Could not connect to storage: {exc}") from exc
        self._ready = True
        logger.info("[store] connected")

    async def close(self) -> None:
        if not self._ready:
            return
        await Tortoise.close_connections()
        self._ready = False
        logger.info("[store] connections closed")

    async def find_by_username(self, username: str) -> User | None:
        try:
            return await User.get_or_none(username=username)
        except STORAGE_FAILURES as exc:
            raise StorageError(str(exc)) from exc

    async def insert(self, username: str, password_hash: str) -> User:
        """
        Raises:
            ConflictError: If the username is already taken
            ValidationError: If a value violates a column constraint
        """
        try:
            return await User.create(username=username, password_hash=password_hash)
        except IntegrityError as exc:
            raise ConflictError("Username already registered") from exc
        except FieldValidationError as exc:
            raise ValidationError(str(exc)) from exc
        except STORAGE_FAILURES as exc:
            raise StorageError(str(exc)) from exc

    async def update_fields(self, username: str, **fields: Any) -> int:
        """
        Set the given columns on one user; None clears a column.

        Returns:
            Number of rows updated (0 when the username is unknown)
        """
        try:
            return await User.filter(username=username).update(**fields)
        except FieldValidationError as exc:
            raise ValidationError(str(exc)) from exc
        except STORAGE_FAILURES as exc:
            raise StorageError(str(exc)) from exc
