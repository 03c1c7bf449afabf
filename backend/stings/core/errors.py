"""
Domain exceptions for the account service.
Each error carries the HTTP status it is rendered with by the API layer.
"""


class AccountError(Exception):
    """Base class for failures surfaced to clients as `{"error": message}`."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AccountError):
    """Malformed or rejected input."""

    status_code = 400


class ConflictError(AccountError):
    """Username is already registered."""

    status_code = 400


class AuthError(AccountError):
    """Bad credentials."""

    status_code = 401


class StorageError(AccountError):
    """The datastore is unreachable or a query failed."""

    status_code = 500
