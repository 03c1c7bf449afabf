"""
Pydantic schemas for account endpoints.
Request fields are optional so missing values reach the service and are
reported as validation errors rather than framework errors.
"""
from pydantic import BaseModel, StrictInt, StrictStr


class CredentialsIn(BaseModel):
    """Request body for register and login."""
    username: StrictStr | None = None
    password: StrictStr | None = None


class ValidateSessionIn(BaseModel):
    username: StrictStr | None = None
    sessionToken: StrictStr | None = None


class LogoutIn(BaseModel):
    username: StrictStr | None = None


class SubmitCodeIn(BaseModel):
    """Request body for access-code submission."""
    username: StrictStr | None = None
    code: StrictStr | None = None
    subscriptionMonths: StrictInt | None = None  # 3 selects the three-month plan, anything else seven-month


class LoginResult(BaseModel):
    """Returned by a successful login."""
    username: str
    sessionToken: str
    subscriptionEnd: int | None = None  # Epoch ms, None when never subscribed


class SessionStatus(BaseModel):
    """Outcome of a session check; `valid=False` is a normal result, not an error."""
    valid: bool
    isSubscribed: bool = False
    subscriptionEnd: int | None = None


class SubscriptionOut(BaseModel):
    subscriptionMonths: int
    subscriptionEnd: int  # Epoch ms
