import pytest

from stings.core.errors import StorageError
from stings.services.accounts import DAY_MS


pytestmark = pytest.mark.asyncio

PASSWORD = "StrongPass!23"


async def register_user(client, username: str, password: str = PASSWORD):
    return await client.post("/api/register", json={"username": username, "password": password})


async def login_user(client, username: str, password: str = PASSWORD):
    return await client.post("/api/login", json={"username": username, "password": password})


async def test_register_and_login_flow(client, username):
    resp = await register_user(client, username)
    assert resp.status_code == 201
    assert resp.json() == {"message": "Registration successful"}

    # Duplicate username should fail
    dup_resp = await register_user(client, username)
    assert dup_resp.status_code == 400
    assert dup_resp.json() == {"error": "Username already registered"}

    login_resp = await login_user(client, username)
    body = login_resp.json()
    assert login_resp.status_code == 200
    assert body["message"] == "Login successful"
    assert body["username"] == username
    assert body["sessionToken"]
    assert body["subscriptionEnd"] is None

    # Invalid password
    bad_login = await login_user(client, username, "wrong-password")
    assert bad_login.status_code == 401
    assert bad_login.json() == {"error": "Invalid username or password"}


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"username": "1abc", "password": PASSWORD}, "must start with a letter"),
        ({"username": "ab-c", "password": PASSWORD}, "must start with a letter"),
        ({"username": "abc", "password": "12345"}, "at least 6 characters"),
        ({"username": "abc"}, "required"),
        ({}, "required"),
    ],
)
async def test_register_validation_errors(client, payload, message):
    resp = await client.post("/api/register", json=payload)
    assert resp.status_code == 400
    assert message in resp.json()["error"]


async def test_register_username_length_limit(client):
    ok = await register_user(client, "A" * 256)
    assert ok.status_code == 201

    too_long = await register_user(client, "A" * 257)
    assert too_long.status_code == 400
    assert too_long.json() == {"error": "Username must be at most 256 characters long"}


async def test_register_rejects_wrong_types(client):
    resp = await client.post("/api/register", json={"username": 123, "password": PASSWORD})
    assert resp.status_code == 400
    assert "username" in resp.json()["error"]


async def test_login_missing_fields(client):
    resp = await client.post("/api/login", json={"username": "abc"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Username and password are required"}


async def test_validate_session_and_logout(client, username):
    await register_user(client, username)
    token = (await login_user(client, username)).json()["sessionToken"]

    resp = await client.post("/api/validate-session", json={"username": username, "sessionToken": token})
    assert resp.status_code == 200
    assert resp.json() == {"valid": True, "isSubscribed": False, "subscriptionEnd": None}

    logout_resp = await client.post("/api/logout", json={"username": username})
    assert logout_resp.status_code == 200
    assert logout_resp.json() == {"message": "Logout successful"}

    after = await client.post("/api/validate-session", json={"username": username, "sessionToken": token})
    assert after.status_code == 401
    assert after.json() == {"valid": False}

    # Logging out again is fine
    again = await client.post("/api/logout", json={"username": username})
    assert again.status_code == 200


async def test_logout_without_username_succeeds(client):
    resp = await client.post("/api/logout", json={})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logout successful"}


async def test_validate_session_missing_fields(client):
    resp = await client.post("/api/validate-session", json={})
    assert resp.status_code == 401
    assert resp.json() == {"valid": False}


async def test_submit_code_flow(client, clock):
    await register_user(client, "Alice")
    token = (await login_user(client, "Alice")).json()["sessionToken"]

    resp = await client.post(
        "/api/submit-code", json={"username": "Alice", "code": "222978", "subscriptionMonths": 3}
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Subscription activated for 3 months"
    assert body["subscriptionEnd"] == clock.now + 90 * DAY_MS

    session = await client.post("/api/validate-session", json={"username": "Alice", "sessionToken": token})
    assert session.json() == {"valid": True, "isSubscribed": True, "subscriptionEnd": body["subscriptionEnd"]}

    # Subscription is active now, so only the renewal code is accepted
    reused = await client.post(
        "/api/submit-code", json={"username": "Alice", "code": "222978", "subscriptionMonths": 3}
    )
    assert reused.status_code == 400
    assert reused.json() == {"error": "Invalid access code for 3-month plan"}

    renewed = await client.post(
        "/api/submit-code", json={"username": "Alice", "code": "000000", "subscriptionMonths": 3}
    )
    assert renewed.status_code == 200

    relogin = await login_user(client, "Alice")
    assert relogin.json()["subscriptionEnd"] == renewed.json()["subscriptionEnd"]


async def test_submit_code_bad_username(client):
    resp = await client.post(
        "/api/submit-code", json={"username": "9lives", "code": "222978", "subscriptionMonths": 3}
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid username: First letter must be A-Z"}


async def test_submit_code_rejects_huge_months(client):
    await register_user(client, "Alice")
    resp = await client.post(
        "/api/submit-code", json={"username": "Alice", "code": "111000", "subscriptionMonths": 10**10}
    )
    assert resp.status_code == 400
    assert "subscriptionMonths" in resp.json()["error"]


async def test_submit_code_rejects_string_months(client):
    await register_user(client, "Alice")
    resp = await client.post(
        "/api/submit-code", json={"username": "Alice", "code": "222978", "subscriptionMonths": "3"}
    )
    assert resp.status_code == 400
    assert "subscriptionMonths" in resp.json()["error"]


async def test_malformed_json_is_a_client_error(client):
    resp = await client.post(
        "/api/login", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert "error" in resp.json()


async def test_storage_failure_becomes_generic_500(client, accounts, monkeypatch):
    async def broken(*args, **kwargs):
        raise StorageError("connection refused")

    monkeypatch.setattr(accounts.store, "find_by_username", broken)
    monkeypatch.setattr(accounts.store, "update_fields", broken)

    cases = [
        ("/api/register", {"username": "Alice", "password": PASSWORD}, "Registration failed"),
        ("/api/login", {"username": "Alice", "password": PASSWORD}, "Login failed"),
        ("/api/validate-session", {"username": "Alice", "sessionToken": "t"}, "Session validation failed"),
        ("/api/logout", {"username": "Alice"}, "Logout failed"),
        ("/api/submit-code", {"username": "Alice", "code": "1", "subscriptionMonths": 3}, "Failed to process code"),
    ]
    for path, payload, message in cases:
        resp = await client.post(path, json=payload)
        assert resp.status_code == 500, path
        assert resp.json() == {"error": message}


async def test_healthz(client):
    resp = await client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
