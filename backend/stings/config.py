# stings/config.py
import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

from stings.core.security import DEFAULT_TOKEN_BYTES, MAX_TOKEN_BYTES, MIN_TOKEN_BYTES

load_dotenv()  # Load environment variables from .env file

DEFAULT_ACCESS_CODES_PATH = Path(__file__).resolve().parent / "data" / "access_codes.json"


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Stings Account Service"
    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    # CORS origins for frontend (comma separated, "*" allows any)
    CORS_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]

    # Storage connection string (any Tortoise ORM URL)
    database_url: str = os.getenv("DATABASE_URL", "sqlite://stings.sqlite3")

    # Access-code table, loaded once at startup
    access_codes_path: Path = Path(os.getenv("ACCESS_CODES_PATH", str(DEFAULT_ACCESS_CODES_PATH)))

    # Sessions
    # Unset TTL keeps a session alive until an explicit logout
    session_ttl_minutes: int | None = _optional_int("SESSION_TTL_MINUTES")
    session_token_bytes: int = Field(
        default=int(os.getenv("SESSION_TOKEN_BYTES", str(DEFAULT_TOKEN_BYTES))),
        validate_default=True,
    )

    @field_validator("session_token_bytes")
    @classmethod
    def clamp_token_bytes(cls, v: int) -> int:
        return min(MAX_TOKEN_BYTES, max(MIN_TOKEN_BYTES, v))


settings = Settings()  # Instantiate configuration
