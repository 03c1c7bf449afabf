# stings/api/routers/accounts.py
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from stings.api.deps import get_account_service
from stings.core.errors import StorageError
from stings.schemas.account import CredentialsIn, LogoutIn, SubmitCodeIn, ValidateSessionIn
from stings.services.accounts import AccountService

logger = logging.getLogger("uvicorn.error")

router = APIRouter(tags=["accounts"])


def _failure(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": message})


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: CredentialsIn, accounts: AccountService = Depends(get_account_service)):
    """
    Register a new user.

    Returns:
        201 {message} on success

    Errors (400 {error}):
        - missing username or password
        - username not matching ^[A-Za-z][A-Za-z0-9_]*$
        - password shorter than 6 characters
        - username already registered
    """
    try:
        await accounts.register(body.username, body.password)
    except StorageError:
        logger.exception("[register] storage failure")
        return _failure("Registration failed")
    return {"message": "Registration successful"}


@router.post("/login")
async def login(body: CredentialsIn, accounts: AccountService = Depends(get_account_service)):
    """
    Authenticate and start a session.

    Returns:
        200 {message, username, sessionToken, subscriptionEnd}

    Errors:
        - 400: missing username or password
        - 401: unknown user or wrong password (same message for both)

    Note:
        A successful login replaces any previous session token of the user.
    """
    try:
        result = await accounts.login(body.username, body.password)
    except StorageError:
        logger.exception("[login] storage failure")
        return _failure("Login failed")
    return {"message": "Login successful", **result.model_dump()}


@router.post("/validate-session")
async def validate_session(body: ValidateSessionIn, accounts: AccountService = Depends(get_account_service)):
    """
    Check a session token; cheap enough for client polling.

    Returns:
        200 {valid: true, isSubscribed, subscriptionEnd} when the token is active
        401 {valid: false} otherwise
    """
    try:
        session = await accounts.validate_session(body.username, body.sessionToken)
    except StorageError:
        logger.exception("[validate-session] storage failure")
        return _failure("Session validation failed")
    if not session.valid:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"valid": False})
    return session.model_dump()


@router.post("/logout")
async def logout(body: LogoutIn, accounts: AccountService = Depends(get_account_service)):
    """Clear the user's session. Idempotent."""
    try:
        await accounts.logout(body.username)
    except StorageError:
        logger.exception("[logout] storage failure")
        return _failure("Logout failed")
    return {"message": "Logout successful"}


@router.post("/submit-code")
async def submit_code(body: SubmitCodeIn, accounts: AccountService = Depends(get_account_service)):
    """
    Activate or renew a subscription with an access code.

    Returns:
        200 {message, subscriptionEnd}

    Errors (400 {error}):
        - username not starting with A-Z
        - wrong code for the plan and subscription state
        - unknown user, missing code or non-positive subscriptionMonths
    """
    try:
        sub = await accounts.submit_code(body.username, body.code, body.subscriptionMonths)
    except StorageError:
        logger.exception("[submit-code] storage failure")
        return _failure("Failed to process code")
    return {
        "message": f"Subscription activated for {sub.subscriptionMonths} months",
        "subscriptionEnd": sub.subscriptionEnd,
    }
