from fastapi import Request

from stings.services.accounts import AccountService


def get_account_service(request: Request) -> AccountService:
    """
    FastAPI dependency returning the AccountService built by `create_app`.

    Usage:
        @router.post("/example")
        async def example(accounts: AccountService = Depends(get_account_service)):
            ...
    """
    return request.app.state.accounts
