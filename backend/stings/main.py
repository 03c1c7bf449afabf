# stings/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stings.config import Settings, settings as default_settings
from stings.core.access_codes import AccessCodeTable
from stings.core.db import UserStore
from stings.core.errors import AccountError, StorageError
from stings.api.routers import accounts
from stings.services.accounts import AccountService

logger = logging.getLogger("uvicorn.error")


def create_app(settings: Settings | None = None, store: UserStore | None = None) -> FastAPI:
    """
    Build the application with its collaborators wired in.

    The access-code table is loaded here, once. When `store` is given it is
    used as-is (already initialized); otherwise a store is created from
    `settings.database_url` and opened on startup.
    """
    settings = settings or default_settings
    logger.setLevel(settings.log_level)

    manage_store = store is None
    store = store or UserStore(settings.database_url)
    codes = AccessCodeTable.load(settings.access_codes_path)
    logger.info("[startup] loaded %d access code entries from %s", len(codes), settings.access_codes_path)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.store = store
    app.state.accounts = AccountService(
        store,
        codes,
        session_ttl_minutes=settings.session_ttl_minutes,
        token_bytes=settings.session_token_bytes,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup():
        if not manage_store:
            return
        try:
            await store.init()
        except StorageError:
            # Fail fast: the server must not run without its datastore
            logger.critical("[startup] storage connection failed", exc_info=True)
            raise

    @app.on_event("shutdown")
    async def on_shutdown():
        if manage_store:
            await store.close()

    @app.exception_handler(AccountError)
    async def account_error_handler(request: Request, exc: AccountError):
        if exc.status_code >= 500:
            logger.error("[api] %s %s failed: %s", request.method, request.url.path, exc.message)
            return JSONResponse(status_code=exc.status_code, content={"error": "Internal server error"})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request body"
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("[api] unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # REST
    app.include_router(accounts.router, prefix="/api")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


app = create_app()
