# tests/test_routines.py
"""Tests for the routine handlers."""

import pytest

from kriptty import routines

ROUTINE_ID = "9b2f6c1e-3a4d-4f5e-8a7b-1c2d3e4f5a6b"

ROUTINE = {
    "id": ROUTINE_ID,
    "user_id": 7,
    "name": "Trend Flip",
    "type": "manual",
    "action": {"grid_mode": "static", "grid_id": 0, "lm": "n", "lwe": 2, "sm": "n", "swe": 2},
    "triggered_at": None,
    "triggered_by": None,
    "created_at": "2024-02-01T09:00:00Z",
}


@pytest.mark.asyncio
async def test_create_routine_nests_action(api, client):
    api.add("POST", "/routines", {"data": ROUTINE})

    text = await routines.create_routine(client, 7, "Trend Flip", "static", 0, "n", 2, "n", 2)

    assert api.last_json() == {
        "user_id": 7,
        "name": "Trend Flip",
        "action": {"grid_mode": "static", "grid_id": 0, "lm": "n", "lwe": 2, "sm": "n", "swe": 2},
    }
    assert text.splitlines() == [
        "Routine created successfully:",
        f"- ID: {ROUTINE_ID}",
        "- Name: Trend Flip",
        "- User ID: 7",
        "- Grid Mode: static",
        "- Grid ID: 0",
        "- Long Mode: n (WE: 2)",
        "- Short Mode: n (WE: 2)",
    ]


class TestBuildRoutineUpdate:

    def test_only_given_action_fields(self):
        assert routines.build_routine_update(lwe=3, sm="gs") == {"action": {"lwe": 3, "sm": "gs"}}

    def test_name_only_has_no_action_key(self):
        assert routines.build_routine_update(name="Renamed") == {"name": "Renamed"}

    def test_zero_values_are_sent(self):
        assert routines.build_routine_update(grid_id=0, swe=0) == {"action": {"grid_id": 0, "swe": 0}}

    def test_empty_name_is_ignored(self):
        assert routines.build_routine_update(name="", lm="m") == {"action": {"lm": "m"}}


@pytest.mark.asyncio
async def test_update_routine_patches_sparse_body(api, client):
    api.add("PATCH", f"/routines/{ROUTINE_ID}", {"data": ROUTINE})

    text = await routines.update_routine(client, ROUTINE_ID, lwe=1.5)

    assert api.last_json() == {"action": {"lwe": 1.5}}
    assert text.startswith("Routine updated successfully:")


@pytest.mark.asyncio
async def test_get_routine_not_found(api, client):
    api.add("GET", f"/routines/{ROUTINE_ID}", status=404, text="")
    assert await routines.get_routine(client, ROUTINE_ID) == f"Routine with ID {ROUTINE_ID} not found."


@pytest.mark.asyncio
async def test_get_routine_defaults(api, client):
    api.add("GET", f"/routines/{ROUTINE_ID}", {"data": ROUTINE})
    text = await routines.get_routine(client, ROUTINE_ID)
    assert "- Last Run: Never" in text
    assert "- Triggered By: N/A" in text


@pytest.mark.asyncio
async def test_list_routines_empty(api, client):
    api.add("GET", "/routines", {"data": []})
    assert await routines.list_routines(client) == "No routines found."


@pytest.mark.asyncio
async def test_run_routine_without_exchange_sends_no_body(api, client):
    ran = {**ROUTINE, "triggered_at": "2024-03-01T12:00:00Z", "triggered_by": "api"}
    api.add("POST", f"/routines/{ROUTINE_ID}/run", {"message": "Routine executed successfully", "data": ran})

    text = await routines.run_routine(client, ROUTINE_ID)

    assert api.last.content == b""
    assert text.splitlines() == [
        "Routine executed successfully",
        "- Routine: Trend Flip",
        "- Triggered At: 2024-03-01T12:00:00Z",
        "- Triggered By: api",
    ]


@pytest.mark.asyncio
async def test_run_routine_on_one_exchange(api, client):
    api.add("POST", f"/routines/{ROUTINE_ID}/run", {"message": "ok", "data": ROUTINE})

    text = await routines.run_routine(client, ROUTINE_ID, exchange_id=3)

    assert api.last_json() == {"exchange_id": 3}
    assert "- Triggered At: N/A" in text


@pytest.mark.asyncio
async def test_routine_parameters_without_grids(api, client):
    api.add("GET", "/routine-parameters", {"data": {
        "grid_modes": {"static": "Static"},
        "bot_modes": {"n": "Normal"},
        "grids": [],
    }})

    text = await routines.get_routine_parameters(client)

    assert "Grid Modes:\n  - static: Static" in text
    assert "Bot Modes (for lm/sm):\n  - n: Normal" in text
    assert text.endswith("Available Grids:\n  (none)")
