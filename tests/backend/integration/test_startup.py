import pytest

from stings.config import Settings
from stings.core.db import UserStore
from stings.core.errors import StorageError
from stings.main import create_app


pytestmark = pytest.mark.asyncio

UNUSABLE_DB_URL = "nosuchdb://nowhere/stings"


async def test_store_init_raises_storage_error():
    store = UserStore(UNUSABLE_DB_URL)
    with pytest.raises(StorageError, match="Could not connect to storage"):
        await store.init()


async def test_startup_fails_when_storage_is_unavailable():
    """The app must refuse to start without its datastore."""
    app = create_app(Settings(database_url=UNUSABLE_DB_URL))
    with pytest.raises(StorageError):
        await app.router.startup()
    # Shutdown after a failed start is harmless
    await app.router.shutdown()
