# =============================================================================
# kriptty/users.py  -  User Handlers
# =============================================================================
#
# Listing, reading, creating and editing Kriptty users.  The update tools each
# change a single field (email, name, password, admin flag, role) so the agent
# never has to build a partial user object itself.
#
# Every handler follows the same shape:
#     call the client once -> render the result
#     404                  -> "User with ID <id> not found."
#     other ApiError       -> "Error <doing>: <message>"
#     anything else        -> propagates to the tool runtime
# =============================================================================

from kriptty.client import ApiError, KripttyClient
from kriptty.formatting import api_error_message, yes_no
from kriptty.models import User

ROLE_LABELS: dict[int, str] = {
    1: "Admin",
    2: "User",
}


def _not_found(user_id: int) -> str:
    return f"User with ID {user_id} not found."


def _format_user_line(user: User) -> str:
    exchanges = (
        ", ".join(f"{e.name} ({e.exchange}, ID: {e.id})" for e in user.exchanges)
        if user.exchanges
        else "None"
    )
    return (
        f"- ID: {user.id}, Name: {user.name}, Email: {user.email}, "
        f"Admin: {yes_no(user.admin)}, Role: {user.role}\n"
        f"  Exchanges: {exchanges}"
    )


async def list_users(client: KripttyClient) -> str:
    try:
        users = await client.list_users()
    except ApiError as e:
        return api_error_message(e, "fetching users")

    summary = "\n".join(_format_user_line(u) for u in users)
    return f"Users (Total: {len(users)}):\n\n{summary}"


async def get_user(client: KripttyClient, user_id: int) -> str:
    try:
        user = await client.get_user(user_id)
    except ApiError as e:
        return api_error_message(e, "fetching user", not_found=_not_found(user_id))

    return "\n".join([
        "User Details:",
        f"- ID: {user.id}",
        f"- Name: {user.name}",
        f"- Email: {user.email}",
        f"- Admin: {yes_no(user.admin)}",
        f"- Role: {user.role}",
        f"- Timezone: {user.timezone or 'Not set'}",
        f"- Last Seen: {user.last_seen or 'Never'}",
        f"- Created: {user.created_at}",
    ])


async def create_user(
    client: KripttyClient,
    name: str,
    email: str,
    password: str,
    role: int,
    admin: bool = False,
) -> str:
    try:
        user = await client.create_user({
            "name": name,
            "email": email,
            "password": password,
            "role": role,
            "admin": admin,
        })
    except ApiError as e:
        return api_error_message(e, "creating user")

    return "\n".join([
        "User created successfully:",
        f"- ID: {user.id}",
        f"- Name: {user.name}",
        f"- Email: {user.email}",
        f"- Admin: {yes_no(user.admin)}",
        f"- Role: {user.role}",
    ])


async def update_user_email(client: KripttyClient, user_id: int, email: str) -> str:
    try:
        user = await client.update_user(user_id, {"email": email})
    except ApiError as e:
        return api_error_message(e, "updating email", not_found=_not_found(user_id))
    return f"User {user.id} email updated to: {user.email}"


async def update_user_name(client: KripttyClient, user_id: int, name: str) -> str:
    try:
        user = await client.update_user(user_id, {"name": name})
    except ApiError as e:
        return api_error_message(e, "updating name", not_found=_not_found(user_id))
    return f"User {user.id} name updated to: {user.name}"


async def update_user_password(client: KripttyClient, user_id: int, password: str) -> str:
    # The new password is never echoed back.
    try:
        await client.update_user(user_id, {"password": password})
    except ApiError as e:
        return api_error_message(e, "updating password", not_found=_not_found(user_id))
    return f"User {user_id} password updated successfully."


async def update_user_admin(client: KripttyClient, user_id: int, admin: bool) -> str:
    try:
        user = await client.update_user(user_id, {"admin": admin})
    except ApiError as e:
        return api_error_message(e, "updating admin status", not_found=_not_found(user_id))
    return f"User {user.id} admin status set to: {yes_no(user.admin)}"


async def update_user_role(client: KripttyClient, user_id: int, role: int) -> str:
    try:
        user = await client.update_user(user_id, {"role": role})
    except ApiError as e:
        return api_error_message(e, "updating role", not_found=_not_found(user_id))
    return f"User {user.id} role updated to: {user.role}"


def list_roles() -> str:
    """Static role legend.  No API call."""
    lines = ["Available Roles:"]
    lines.extend(f"- Role {role}: {label}" for role, label in ROLE_LABELS.items())
    return "\n".join(lines)
