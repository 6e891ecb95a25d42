# =============================================================================
# kriptty/bots.py  -  Bot Handlers
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Configuration and process control for grid-trading bots:
#     - discovery:  get_bot_parameters (modes, grids, symbols per venue)
#     - reads:      list_bots, get_bot, get_bot_status
#     - writes:     create_bot, update_bot
#     - process:    start_bot, stop_bot, restart_bot
#     - exposure:   swap_bot_we, simple_swap_bot_we
#
# PROCESS STATE:
#   Whether a bot is running (pid, is_running, started_at/stopped_at) is
#   decided by the server.  We only display it.  A new bot is always created
#   STOPPED; changes to a running bot may need a restart to take effect, and
#   the rendered text says so.
#
# 422 ON START/RESTART:
#   The API answers 422 when a bot cannot be started in its current state.
#   That goes through the generic "Error starting bot: ..." path; the
#   server's message is passed along verbatim.
# =============================================================================

from typing import Any

from kriptty.client import ApiError, KripttyClient
from kriptty.formatting import (
    api_error_message,
    bot_mode_label,
    format_mapping,
    grid_mode_label,
    or_default,
    yes_no,
)
from kriptty.models import Bot, BotParameters, SymbolSummary

SYMBOLS_PER_EXCHANGE = 10

OPTIONAL_CREATE_FIELDS = (
    "grid_id",
    "leverage",
    "assigned_balance",
    "oh_mode",
    "show_logs",
    "is_on_trend",
    "is_on_routines",
)

UPDATABLE_FIELDS = (
    "name",
    "symbol_id",
    "market_type",
    "grid_mode",
    "grid_id",
    "lm",
    "lwe",
    "sm",
    "swe",
    "leverage",
    "assigned_balance",
    "oh_mode",
    "show_logs",
    "is_on_trend",
    "is_on_routines",
)

# Fields where an explicit None is a real value ("detach the custom grid").
NULLABLE_FIELDS = frozenset({"grid_id"})

RESTART_NOTE = "Note: If the bot is running, restart it for changes to take effect."


def _not_found(bot_id: int) -> str:
    return f"Bot with ID {bot_id} not found."


def _exchange_info(bot: Bot) -> str:
    if bot.exchange:
        return f"{bot.exchange.name} ({bot.exchange.exchange})"
    return f"ID: {bot.exchange_id}"


def _grid_info(bot: Bot) -> str:
    if bot.grid:
        return bot.grid.name
    return f"ID: {bot.grid_id}" if bot.grid_id else "N/A"


def _format_bot(bot: Bot) -> str:
    """Compact block used by list_bots."""
    status = f"RUNNING (PID: {bot.pid})" if bot.is_running else "STOPPED"
    symbol = bot.symbol.nice_name if bot.symbol else f"ID: {bot.symbol_id}"
    return "\n".join([
        f"- ID: {bot.id}",
        f"  Name: {bot.name}",
        f"  Status: {status}",
        f"  Exchange: {_exchange_info(bot)}",
        f"  Symbol: {symbol}",
        f"  Market Type: {bot.market_type}",
        f"  Grid Mode: {grid_mode_label(bot.grid_mode)}",
        f"  Grid: {_grid_info(bot)}",
        f"  Long Mode: {bot_mode_label(bot.lm)} (WE: {bot.lwe})",
        f"  Short Mode: {bot_mode_label(bot.sm)} (WE: {bot.swe})",
        f"  Leverage: {bot.leverage}x",
        f"  Created: {bot.created_at}",
    ])


def _format_bot_detailed(bot: Bot) -> str:
    symbol = f"{bot.symbol.nice_name} ({bot.symbol.name})" if bot.symbol else f"ID: {bot.symbol_id}"
    balance = bot.assigned_balance if bot.assigned_balance > 0 else "No limit"
    return "\n".join([
        "Bot Details:",
        f"- ID: {bot.id}",
        f"- Name: {bot.name}",
        f"- Status: {'RUNNING' if bot.is_running else 'STOPPED'}",
        f"- PID: {or_default(bot.pid)}",
        f"- Started At: {or_default(bot.started_at)}",
        f"- Stopped At: {or_default(bot.stopped_at)}",
        "",
        "Configuration:",
        f"- Exchange: {_exchange_info(bot)}",
        f"- Symbol: {symbol}",
        f"- Market Type: {bot.market_type}",
        f"- Grid Mode: {grid_mode_label(bot.grid_mode)}",
        f"- Grid: {_grid_info(bot)}",
        f"- Leverage: {bot.leverage}x",
        f"- Assigned Balance: {balance}",
        "",
        "Trading Modes:",
        f"- Long Mode: {bot_mode_label(bot.lm)}",
        f"- Long Wallet Exposure: {bot.lwe}",
        f"- Short Mode: {bot_mode_label(bot.sm)}",
        f"- Short Wallet Exposure: {bot.swe}",
        "",
        "Options:",
        f"- Order History Mode: {'Enabled' if bot.oh_mode else 'Disabled'}",
        f"- Show Logs: {yes_no(bot.show_logs)}",
        f"- On Trend: {yes_no(bot.is_on_trend)}",
        f"- On Routines: {yes_no(bot.is_on_routines)}",
        "",
        "Metadata:",
        f"- User ID: {bot.user_id}",
        f"- Created: {bot.created_at}",
        f"- Updated: {bot.updated_at}",
    ])


def group_symbols(symbols: list[SymbolSummary], limit: int = SYMBOLS_PER_EXCHANGE) -> str:
    """Render symbols grouped by venue, at most `limit` per venue.

    Venues appear in the order they are first seen.  For a truncated venue
    the last listed symbol's line ends with " ... and N more".
    """
    by_exchange: dict[str, list[SymbolSummary]] = {}
    for symbol in symbols:
        by_exchange.setdefault(symbol.exchange, []).append(symbol)

    blocks = []
    for exchange, members in by_exchange.items():
        lines = [f"  {exchange}:"]
        lines.extend(f"    - ID: {s.id}, {s.nice_name}" for s in members[:limit])
        if len(members) > limit:
            lines[-1] += f" ... and {len(members) - limit} more"
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def _format_parameters(params: BotParameters) -> str:
    if params.grids:
        grids = "\n".join(f"  - ID: {g.id}, Name: {g.name} (User: {g.user_id})" for g in params.grids)
    else:
        grids = "  No custom grids available"

    fields = params.fields
    return (
        "Bot Parameters:\n\n"
        f"Bot Modes:\n{format_mapping(params.bot_modes)}\n\n"
        f"Grid Modes:\n{format_mapping(params.grid_modes)}\n\n"
        f"Market Types:\n{format_mapping(params.market_types)}\n\n"
        f"Available Grids:\n{grids}\n\n"
        f"Available Symbols (by exchange):\n{group_symbols(params.symbols)}\n\n"
        f"Required Fields: {', '.join(fields.required)}\n"
        f"Optional Fields: {', '.join(fields.optional)}\n\n"
        f"Notes:\n{format_mapping(fields.notes)}"
    )


async def get_bot_parameters(client: KripttyClient) -> str:
    try:
        params = await client.get_bot_parameters()
    except ApiError as e:
        return api_error_message(e, "fetching bot parameters")
    return _format_parameters(params)


async def list_bots(
    client: KripttyClient,
    user_id: int | None = None,
    exchange_id: int | None = None,
) -> str:
    # Checked here, before any request: the API needs one of the two filters.
    if not user_id and not exchange_id:
        return "Error: Either user_id or exchange_id is required."

    try:
        bots = await client.list_bots(user_id=user_id, exchange_id=exchange_id)
    except ApiError as e:
        return api_error_message(e, "fetching bots")

    if not bots:
        target = f"user {user_id}" if user_id else f"exchange {exchange_id}"
        return f"No bots found for {target}."

    target = f"User {user_id}" if user_id else f"Exchange {exchange_id}"
    running = sum(1 for b in bots if b.is_running)
    summary = "\n\n".join(_format_bot(b) for b in bots)
    return f"Bots for {target} (Total: {len(bots)}, Running: {running}):\n\n{summary}"


async def get_bot(client: KripttyClient, bot_id: int) -> str:
    try:
        bot = await client.get_bot(bot_id)
    except ApiError as e:
        return api_error_message(e, "fetching bot", not_found=_not_found(bot_id))
    return _format_bot_detailed(bot)


async def create_bot(
    client: KripttyClient,
    name: str,
    exchange_id: int,
    symbol_id: int,
    market_type: str,
    grid_mode: str,
    lm: str,
    lwe: float,
    sm: str,
    swe: float,
    **options: Any,
) -> str:
    """Create a bot.  `options` may hold any of OPTIONAL_CREATE_FIELDS."""
    data: dict[str, Any] = {
        "name": name,
        "exchange_id": exchange_id,
        "symbol_id": symbol_id,
        "market_type": market_type,
        "grid_mode": grid_mode,
        "lm": lm,
        "lwe": lwe,
        "sm": sm,
        "swe": swe,
    }
    data.update(
        (key, options[key])
        for key in OPTIONAL_CREATE_FIELDS
        if options.get(key) is not None
    )

    try:
        bot = await client.create_bot(data)
    except ApiError as e:
        return api_error_message(e, "creating bot")

    symbol = bot.symbol.nice_name if bot.symbol else bot.symbol_id
    return "\n".join([
        "Bot created successfully:",
        f"- ID: {bot.id}",
        f"- Name: {bot.name}",
        f"- Symbol: {symbol}",
        f"- Grid Mode: {grid_mode_label(bot.grid_mode)}",
        f"- Long: {bot_mode_label(bot.lm)} (WE: {bot.lwe})",
        f"- Short: {bot_mode_label(bot.sm)} (WE: {bot.swe})",
        "",
        "Note: Bot is created in STOPPED state. Use start_bot to start it.",
    ])


def build_bot_update(**changes: Any) -> dict[str, Any]:
    """Keep only the fields the caller passed.

    None means "not given" for every field except those in NULLABLE_FIELDS,
    where an explicitly passed None is sent as JSON null.
    """
    return {
        key: changes[key]
        for key in UPDATABLE_FIELDS
        if key in changes and (changes[key] is not None or key in NULLABLE_FIELDS)
    }


async def update_bot(client: KripttyClient, bot_id: int, **changes: Any) -> str:
    try:
        bot = await client.update_bot(bot_id, build_bot_update(**changes))
    except ApiError as e:
        return api_error_message(e, "updating bot", not_found=_not_found(bot_id))

    return "\n".join([
        "Bot updated successfully:",
        f"- ID: {bot.id}",
        f"- Name: {bot.name}",
        f"- Status: {'RUNNING' if bot.is_running else 'STOPPED'}",
        f"- Long: {bot_mode_label(bot.lm)} (WE: {bot.lwe})",
        f"- Short: {bot_mode_label(bot.sm)} (WE: {bot.swe})",
        "",
        "Note: If the bot is running, you may need to restart it for some changes to take effect.",
    ])


# -----------------------------------------------------------------------------
# Process control
# -----------------------------------------------------------------------------
def _format_started(message: str, bot: Bot) -> str:
    return "\n".join([
        message,
        f"- ID: {bot.id}",
        f"- Name: {bot.name}",
        f"- PID: {bot.pid}",
        f"- Started At: {bot.started_at}",
    ])


def _format_swapped(message: str, bot: Bot) -> str:
    return "\n".join([
        message,
        f"- ID: {bot.id}",
        f"- Name: {bot.name}",
        f"- Long WE: {bot.lwe}",
        f"- Short WE: {bot.swe}",
        "",
        RESTART_NOTE,
    ])


async def start_bot(client: KripttyClient, bot_id: int) -> str:
    try:
        result = await client.bot_action(bot_id, "start")
    except ApiError as e:
        return api_error_message(e, "starting bot", not_found=_not_found(bot_id))
    return _format_started(result.message, result.data)


async def stop_bot(client: KripttyClient, bot_id: int) -> str:
    try:
        result = await client.bot_action(bot_id, "stop")
    except ApiError as e:
        return api_error_message(e, "stopping bot", not_found=_not_found(bot_id))

    bot = result.data
    return "\n".join([
        result.message,
        f"- ID: {bot.id}",
        f"- Name: {bot.name}",
        "- Status: STOPPED",
    ])


async def restart_bot(client: KripttyClient, bot_id: int) -> str:
    try:
        result = await client.bot_action(bot_id, "restart")
    except ApiError as e:
        return api_error_message(e, "restarting bot", not_found=_not_found(bot_id))
    return _format_started(result.message, result.data)


async def swap_bot_we(client: KripttyClient, bot_id: int, new_trend: str) -> str:
    """Re-balance wallet exposure towards `new_trend` ("LONG" or "SHORT")."""
    try:
        result = await client.bot_action(bot_id, "swap-we", {"new_trend": new_trend})
    except ApiError as e:
        return api_error_message(e, "swapping wallet exposure", not_found=_not_found(bot_id))
    return _format_swapped(result.message, result.data)


async def simple_swap_bot_we(client: KripttyClient, bot_id: int) -> str:
    """Exchange lwe and swe."""
    try:
        result = await client.bot_action(bot_id, "simple-swap-we")
    except ApiError as e:
        return api_error_message(e, "swapping wallet exposure", not_found=_not_found(bot_id))
    return _format_swapped(result.message, result.data)


async def get_bot_status(client: KripttyClient, bot_id: int) -> str:
    try:
        status = await client.get_bot_status(bot_id)
    except ApiError as e:
        return api_error_message(e, "fetching bot status", not_found=_not_found(bot_id))

    return "\n".join([
        "Bot Status:",
        f"- ID: {status.id}",
        f"- Name: {status.name}",
        f"- Process Running: {'YES' if status.is_running else 'NO'}",
        f"- PID: {or_default(status.pid)}",
        f"- Started At: {or_default(status.started_at)}",
        f"- Stopped At: {or_default(status.stopped_at)}",
    ])
