# =============================================================================
# kriptty/routines.py  -  Routine Handlers
# =============================================================================
#
# A routine is a saved bot configuration ("action"): grid mode, grid id, and
# the long/short mode + wallet exposure pair.  Running it applies the action
# to the bots on an exchange.
#
# The tools take the action fields flat (grid_mode, lm, lwe, ...) because
# that is easier for an agent to fill in.  This module folds them back into
# the nested {"action": {...}} object the API expects.
# =============================================================================

from kriptty.client import ApiError, KripttyClient
from kriptty.formatting import api_error_message, format_mapping
from kriptty.models import Routine

ACTION_FIELDS = ("grid_mode", "grid_id", "lm", "lwe", "sm", "swe")


def _not_found(routine_id: str) -> str:
    return f"Routine with ID {routine_id} not found."


def _format_routine_line(routine: Routine) -> str:
    action = routine.action
    return "\n".join([
        f"- ID: {routine.id}",
        f"  Name: {routine.name}",
        f"  User: {routine.user_id}",
        f"  Type: {routine.type}",
        f"  Grid Mode: {action.grid_mode}, Grid ID: {action.grid_id}",
        f"  Long: {action.lm} (WE: {action.lwe})",
        f"  Short: {action.sm} (WE: {action.swe})",
        f"  Last Run: {routine.triggered_at or 'Never'}",
    ])


def _format_action_summary(routine: Routine) -> list[str]:
    action = routine.action
    return [
        f"- Grid Mode: {action.grid_mode}",
        f"- Grid ID: {action.grid_id}",
        f"- Long Mode: {action.lm} (WE: {action.lwe})",
        f"- Short Mode: {action.sm} (WE: {action.swe})",
    ]


async def get_routine_parameters(client: KripttyClient) -> str:
    try:
        params = await client.get_routine_parameters()
    except ApiError as e:
        return api_error_message(e, "fetching routine parameters")

    grids = "\n".join(f"  - ID: {g.id}, Name: {g.name}, User: {g.user_id}" for g in params.grids)

    return (
        "Routine Parameters:\n\n"
        f"Grid Modes:\n{format_mapping(params.grid_modes)}\n\n"
        f"Bot Modes (for lm/sm):\n{format_mapping(params.bot_modes)}\n\n"
        f"Available Grids:\n{grids or '  (none)'}"
    )


async def list_routines(client: KripttyClient) -> str:
    try:
        routines = await client.list_routines()
    except ApiError as e:
        return api_error_message(e, "fetching routines")

    if not routines:
        return "No routines found."

    summary = "\n\n".join(_format_routine_line(r) for r in routines)
    return f"Routines (Total: {len(routines)}):\n\n{summary}"


async def get_routine(client: KripttyClient, routine_id: str) -> str:
    try:
        routine = await client.get_routine(routine_id)
    except ApiError as e:
        return api_error_message(e, "fetching routine", not_found=_not_found(routine_id))

    action = routine.action
    return "\n".join([
        "Routine Details:",
        f"- ID: {routine.id}",
        f"- Name: {routine.name}",
        f"- User ID: {routine.user_id}",
        f"- Type: {routine.type}",
        f"- Grid Mode: {action.grid_mode}",
        f"- Grid ID: {action.grid_id}",
        f"- Long Mode: {action.lm}",
        f"- Long Wallet Exposure: {action.lwe}",
        f"- Short Mode: {action.sm}",
        f"- Short Wallet Exposure: {action.swe}",
        f"- Last Run: {routine.triggered_at or 'Never'}",
        f"- Triggered By: {routine.triggered_by or 'N/A'}",
        f"- Created: {routine.created_at}",
    ])


async def create_routine(
    client: KripttyClient,
    user_id: int,
    name: str,
    grid_mode: str,
    grid_id: int,
    lm: str,
    lwe: float,
    sm: str,
    swe: float,
) -> str:
    action = {
        "grid_mode": grid_mode,
        "grid_id": grid_id,
        "lm": lm,
        "lwe": lwe,
        "sm": sm,
        "swe": swe,
    }
    try:
        routine = await client.create_routine({"user_id": user_id, "name": name, "action": action})
    except ApiError as e:
        return api_error_message(e, "creating routine")

    return "\n".join([
        "Routine created successfully:",
        f"- ID: {routine.id}",
        f"- Name: {routine.name}",
        f"- User ID: {routine.user_id}",
        *_format_action_summary(routine),
    ])


def build_routine_update(name: str | None = None, **action_fields) -> dict:
    """Build a sparse PATCH body.

    Only the fields the caller provided are sent.  The "action" key appears
    only when at least one action field changed; the API merges it into the
    stored action.
    """
    body: dict = {}
    if name:
        body["name"] = name

    action = {
        key: action_fields[key]
        for key in ACTION_FIELDS
        if action_fields.get(key) is not None
    }
    if action:
        body["action"] = action
    return body


async def update_routine(
    client: KripttyClient,
    routine_id: str,
    name: str | None = None,
    grid_mode: str | None = None,
    grid_id: int | None = None,
    lm: str | None = None,
    lwe: float | None = None,
    sm: str | None = None,
    swe: float | None = None,
) -> str:
    body = build_routine_update(
        name=name, grid_mode=grid_mode, grid_id=grid_id, lm=lm, lwe=lwe, sm=sm, swe=swe,
    )
    try:
        routine = await client.update_routine(routine_id, body)
    except ApiError as e:
        return api_error_message(e, "updating routine", not_found=_not_found(routine_id))

    return "\n".join([
        "Routine updated successfully:",
        f"- ID: {routine.id}",
        f"- Name: {routine.name}",
        *_format_action_summary(routine),
    ])


async def run_routine(client: KripttyClient, routine_id: str, exchange_id: int | None = None) -> str:
    try:
        result = await client.run_routine(routine_id, exchange_id)
    except ApiError as e:
        return api_error_message(e, "running routine", not_found=_not_found(routine_id))

    routine = result.data
    return "\n".join([
        result.message,
        f"- Routine: {routine.name}",
        f"- Triggered At: {routine.triggered_at or 'N/A'}",
        f"- Triggered By: {routine.triggered_by or 'N/A'}",
    ])
