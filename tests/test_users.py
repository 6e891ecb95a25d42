# tests/test_users.py
"""Tests for the user handlers."""

import pytest

from kriptty import users

ALICE = {
    "id": 1,
    "name": "Alice",
    "email": "alice@example.com",
    "admin": True,
    "role": 1,
    "timezone": "Europe/Madrid",
    "last_seen": None,
    "created_at": "2024-01-01T10:00:00Z",
    "exchanges": [{"id": 3, "name": "Main", "exchange": "bybit"}],
}


@pytest.mark.asyncio
async def test_list_users_shows_exchanges(api, client):
    bob = {"id": 2, "name": "Bob", "email": "bob@example.com", "admin": False, "role": 2}
    api.add("GET", "/users", {"data": [ALICE, bob]})

    text = await users.list_users(client)

    assert text.startswith("Users (Total: 2):\n\n")
    assert "- ID: 1, Name: Alice, Email: alice@example.com, Admin: Yes, Role: 1" in text
    assert "  Exchanges: Main (bybit, ID: 3)" in text
    assert "  Exchanges: None" in text


@pytest.mark.asyncio
async def test_get_user_defaults_for_missing_fields(api, client):
    api.add("GET", "/users/1", {"data": ALICE})

    text = await users.get_user(client, 1)

    assert text.splitlines()[0] == "User Details:"
    assert "- Timezone: Europe/Madrid" in text
    assert "- Last Seen: Never" in text
    assert "- Created: 2024-01-01T10:00:00Z" in text


@pytest.mark.asyncio
async def test_get_user_not_found(api, client):
    api.add("GET", "/users/42", status=404, text="Not Found")
    assert await users.get_user(client, 42) == "User with ID 42 not found."


@pytest.mark.asyncio
async def test_get_user_is_repeatable(api, client):
    api.add("GET", "/users/1", {"data": ALICE})
    assert await users.get_user(client, 1) == await users.get_user(client, 1)


@pytest.mark.asyncio
async def test_create_user_sends_admin_false_by_default(api, client):
    api.add("POST", "/users", {"data": {**ALICE, "admin": False, "role": 2}})

    text = await users.create_user(client, "Alice", "alice@example.com", "hunter22", 2)

    assert api.last_json() == {
        "name": "Alice",
        "email": "alice@example.com",
        "password": "hunter22",
        "role": 2,
        "admin": False,
    }
    assert text.startswith("User created successfully:")
    assert "- Admin: No" in text


@pytest.mark.asyncio
async def test_create_user_validation_error_is_generic(api, client):
    api.add("POST", "/users", status=422, text='{"errors":{"email":["taken"]}}')

    text = await users.create_user(client, "Alice", "alice@example.com", "hunter22", 2)

    assert text.startswith("Error creating user: API request failed: 422")
    assert '{"errors":{"email":["taken"]}}' in text


@pytest.mark.asyncio
async def test_update_user_email(api, client):
    api.add("PATCH", "/users/1", {"data": {**ALICE, "email": "new@example.com"}})

    text = await users.update_user_email(client, 1, "new@example.com")

    assert api.last_json() == {"email": "new@example.com"}
    assert text == "User 1 email updated to: new@example.com"


@pytest.mark.asyncio
async def test_update_user_password_never_echoes(api, client):
    api.add("PATCH", "/users/1", {"data": ALICE})

    text = await users.update_user_password(client, 1, "s3cret-pass")

    assert api.last_json() == {"password": "s3cret-pass"}
    assert text == "User 1 password updated successfully."
    assert "s3cret-pass" not in text


@pytest.mark.asyncio
async def test_update_user_role_not_found(api, client):
    api.add("PATCH", "/users/5", status=404, text="")
    assert await users.update_user_role(client, 5, 2) == "User with ID 5 not found."


@pytest.mark.asyncio
async def test_update_user_admin(api, client):
    api.add("PATCH", "/users/1", {"data": {**ALICE, "admin": False}})
    text = await users.update_user_admin(client, 1, False)
    assert api.last_json() == {"admin": False}
    assert text == "User 1 admin status set to: No"


def test_list_roles_is_static():
    assert users.list_roles() == "Available Roles:\n- Role 1: Admin\n- Role 2: User"
