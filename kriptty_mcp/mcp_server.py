# =============================================================================
# kriptty_mcp/mcp_server.py  -  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines every MCP tool an agent can call to manage a Kriptty account:
#   users, routines, exchanges, bots and trades.  Each tool is a thin
#   wrapper around one handler in kriptty/; the handler makes exactly one
#   REST call and returns readable text.
#
# HOW IT WORKS (the flow):
#   1. The agent calls a tool by name (e.g. "get_bot" with {"id": 12})
#   2. FastMCP validates the arguments against the signature below
#   3. The tool hands them to the kriptty handler with the shared client
#   4. The handler calls the API and renders the answer as text
#   5. The agent receives that text, never raw JSON
#
# TOOL NAMING CONVENTIONS:
#   - list_* / get_*   read-only, safe to repeat
#   - create_* / update_* / refresh_*   change stored data
#   - start_* / stop_* / restart_* / run_* / *swap*   act on live bots
#
# ERRORS:
#   A known API failure (404, 422, ...) comes back as ordinary text so the
#   agent can read it.  A transport failure (API unreachable, timeout) is
#   raised, and FastMCP reports the call as failed without stopping the
#   server.
#
# RUNNING THIS SERVER:
#   a) kriptty-mcp            (console script, see main.py)
#   b) python -m kriptty_mcp.mcp_server
# =============================================================================

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from kriptty import bots, exchanges, routines, trades, users
from kriptty.client import KripttyClient
from kriptty.config import get_settings
from kriptty_mcp.params import (
    ApiCredential,
    ApiPassphrase,
    AssignedBalance,
    BotId,
    BotMode,
    Email,
    ExchangeId,
    ExchangeVendor,
    GridMode,
    GridUpdate,
    KEEP_GRID,
    Leverage,
    MarketType,
    Month,
    Password,
    PerPage,
    PnlPeriod,
    ResourceName,
    RiskMode,
    Role,
    RoutineId,
    RoutineName,
    SortColumn,
    SortOrder,
    SymbolId,
    TradeId,
    Trend,
    UserId,
    WalletExposure,
    Year,
)

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the MCP server talks to the agent over STDOUT.
# A log line on stdout would corrupt the JSON-RPC stream.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for responses
#     - YELLOW for intermediate status messages
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"     # Reset to default terminal color

# Never written to the log in clear text.
_SECRET_PARAMS = frozenset({"password", "api_key", "api_secret", "api_frase"})

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger("kriptty_mcp")


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(
        f"{k}={'***' if k in _SECRET_PARAMS and v is not None else repr(v)}"
        for k, v in params.items()
    )
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: str) -> str:
    """Log the first line of the tool's text in GREEN, then return the text."""
    first_line = result.split("\n", 1)[0]
    line_count = result.count("\n") + 1
    logger.info(f"{_GREEN}  ← {tool_name} response: {first_line} ({line_count} lines){_RESET}")
    return result


# =============================================================================
# The shared API client
# =============================================================================
# Built on the first tool call, then reused by every call after it.  Reading
# the settings here (and not at import time) means the server can start and
# list its tools even before KRIPTTY_API_URL / KRIPTTY_API_TOKEN are set; the
# first real call then fails with a clear ConfigError.
#
# The server's lifespan closes the client's connections on shutdown.
# =============================================================================
_client: KripttyClient | None = None


def get_client() -> KripttyClient:
    global _client
    if _client is None:
        _client = KripttyClient(get_settings())
        _log_status(f"API client ready for {_client.base_url}")
    return _client


async def close_client() -> None:
    """Close the shared client's connections, if one was ever built."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        _log_status("API client closed")


@asynccontextmanager
async def _lifespan(server: FastMCP) -> AsyncIterator[None]:
    try:
        yield
    finally:
        await close_client()


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
mcp = FastMCP(
    "kriptty-mcp",
    instructions=(
        "Tools for managing a Kriptty trading-bot account: users, exchanges "
        "(API credentials and balances), bots, routines and trade history. "
        "Call the *_parameters tools first to discover valid modes, grids and symbols."
    ),
    lifespan=_lifespan,
)


# =============================================================================
# USERS
# =============================================================================
@mcp.tool()
async def list_users() -> str:
    """List all Kriptty users, each with the exchanges they own."""
    _log_request("list_users")
    return _log_response("list_users", await users.list_users(get_client()))


@mcp.tool()
async def get_user(id: UserId) -> str:
    """Get one user's full profile: email, admin flag, role, timezone, last seen."""
    _log_request("get_user", id=id)
    return _log_response("get_user", await users.get_user(get_client(), id))


@mcp.tool()
async def create_user(
    name: Annotated[str, Field(min_length=1, description="User name")],
    email: Email,
    password: Password,
    role: Role,
    admin: Annotated[bool, Field(description="Is admin")] = False,
) -> str:
    """Create a new user.

    Call list_roles first if you are unsure which role number to use.
    """
    _log_request("create_user", name=name, email=email, password=password, role=role, admin=admin)
    text = await users.create_user(get_client(), name, email, password, role, admin)
    return _log_response("create_user", text)


@mcp.tool()
async def update_user_email(user_id: UserId, email: Email) -> str:
    """Change a user's email address."""
    _log_request("update_user_email", user_id=user_id, email=email)
    return _log_response("update_user_email", await users.update_user_email(get_client(), user_id, email))


@mcp.tool()
async def update_user_name(
    user_id: UserId,
    name: Annotated[str, Field(min_length=1, description="New name")],
) -> str:
    """Change a user's display name."""
    _log_request("update_user_name", user_id=user_id, name=name)
    return _log_response("update_user_name", await users.update_user_name(get_client(), user_id, name))


@mcp.tool()
async def update_user_password(user_id: UserId, password: Password) -> str:
    """Set a new password for a user.  The password is never echoed back."""
    _log_request("update_user_password", user_id=user_id, password=password)
    text = await users.update_user_password(get_client(), user_id, password)
    return _log_response("update_user_password", text)


@mcp.tool()
async def update_user_admin(
    user_id: UserId,
    admin: Annotated[bool, Field(description="Admin status (true/false)")],
) -> str:
    """Grant or revoke a user's admin flag."""
    _log_request("update_user_admin", user_id=user_id, admin=admin)
    return _log_response("update_user_admin", await users.update_user_admin(get_client(), user_id, admin))


@mcp.tool()
async def update_user_role(user_id: UserId, role: Role) -> str:
    """Change a user's role number."""
    _log_request("update_user_role", user_id=user_id, role=role)
    return _log_response("update_user_role", await users.update_user_role(get_client(), user_id, role))


@mcp.tool()
def list_roles() -> str:
    """List the available user roles.  Answers locally, without calling the API."""
    _log_request("list_roles")
    return _log_response("list_roles", users.list_roles())


# =============================================================================
# ROUTINES
# =============================================================================
# A routine stores an "action" (grid mode, grid id, long/short mode and
# wallet exposure).  Running it applies that action to the bots on an
# exchange, e.g. to flip every bot from long-biased to short-biased at once.
# =============================================================================
@mcp.tool()
async def list_routine_parameters() -> str:
    """List valid routine values: grid modes, bot modes (for lm/sm) and custom grids.

    WHEN TO CALL THIS: before create_routine or update_routine, to pick a
    valid grid_id and mode codes.
    """
    _log_request("list_routine_parameters")
    return _log_response("list_routine_parameters", await routines.get_routine_parameters(get_client()))


@mcp.tool()
async def list_routines() -> str:
    """List all routines with their actions and when they last ran."""
    _log_request("list_routines")
    return _log_response("list_routines", await routines.list_routines(get_client()))


@mcp.tool()
async def get_routine(id: RoutineId) -> str:
    """Get one routine, including who last triggered it."""
    _log_request("get_routine", id=id)
    return _log_response("get_routine", await routines.get_routine(get_client(), str(id)))


@mcp.tool()
async def create_routine(
    user_id: UserId,
    name: RoutineName,
    grid_mode: GridMode,
    grid_id: Annotated[int, Field(ge=0, description="Grid ID (0 for none)")],
    lm: Annotated[BotMode, Field(description="Long mode: n=normal, m=manual, gs=graceful stop, t=take profit, p=panic")],
    lwe: Annotated[WalletExposure, Field(description="Long wallet exposure (0-11)")],
    sm: Annotated[BotMode, Field(description="Short mode: n=normal, m=manual, gs=graceful stop, t=take profit, p=panic")],
    swe: Annotated[WalletExposure, Field(description="Short wallet exposure (0-11)")],
) -> str:
    """Create a routine for a user.

    The six action fields are stored together and applied to bots when the
    routine runs.
    """
    _log_request("create_routine", user_id=user_id, name=name, grid_mode=grid_mode,
                 grid_id=grid_id, lm=lm, lwe=lwe, sm=sm, swe=swe)
    text = await routines.create_routine(get_client(), user_id, name, grid_mode, grid_id, lm, lwe, sm, swe)
    return _log_response("create_routine", text)


@mcp.tool()
async def update_routine(
    id: RoutineId,
    name: RoutineName | None = None,
    grid_mode: GridMode | None = None,
    grid_id: Annotated[int | None, Field(ge=0, description="Grid ID (0 for none)")] = None,
    lm: BotMode | None = None,
    lwe: WalletExposure | None = None,
    sm: BotMode | None = None,
    swe: WalletExposure | None = None,
) -> str:
    """Update a routine.  Only the fields you pass are changed."""
    _log_request("update_routine", id=id, name=name, grid_mode=grid_mode,
                 grid_id=grid_id, lm=lm, lwe=lwe, sm=sm, swe=swe)
    text = await routines.update_routine(
        get_client(), str(id),
        name=name, grid_mode=grid_mode, grid_id=grid_id, lm=lm, lwe=lwe, sm=sm, swe=swe,
    )
    return _log_response("update_routine", text)


@mcp.tool()
async def run_routine(
    id: RoutineId,
    exchange_id: Annotated[int | None, Field(gt=0, description="Apply to the bots on this exchange only")] = None,
) -> str:
    """Run a routine now, applying its action to bots.

    Pass exchange_id to target the bots of one exchange.
    """
    _log_request("run_routine", id=id, exchange_id=exchange_id)
    return _log_response("run_routine", await routines.run_routine(get_client(), str(id), exchange_id))


# =============================================================================
# EXCHANGES
# =============================================================================
@mcp.tool()
async def list_exchange_parameters() -> str:
    """List supported exchange venues, risk modes and field notes.

    WHEN TO CALL THIS: before create_exchange, to see which venues exist and
    which extra fields (e.g. api_frase for OKX) a venue needs.
    """
    _log_request("list_exchange_parameters")
    return _log_response("list_exchange_parameters", await exchanges.get_exchange_parameters(get_client()))


@mcp.tool()
async def list_exchanges(user_id: UserId) -> str:
    """List a user's exchanges with risk mode, testnet flag, API error flag and USDT balance."""
    _log_request("list_exchanges", user_id=user_id)
    return _log_response("list_exchanges", await exchanges.list_exchanges(get_client(), user_id))


@mcp.tool()
async def get_exchange(id: ExchangeId) -> str:
    """Get one exchange with its full balance breakdown (USDT, USD, BTC, ETH)."""
    _log_request("get_exchange", id=id)
    return _log_response("get_exchange", await exchanges.get_exchange(get_client(), id))


@mcp.tool()
async def create_exchange(
    user_id: UserId,
    name: ResourceName,
    exchange: ExchangeVendor,
    risk_mode: Annotated[RiskMode, Field(description="Risk mode: 1=Conservative, 2=Moderate, 3=Kamikaze")],
    api_key: ApiCredential,
    api_secret: ApiCredential,
    api_frase: Annotated[ApiPassphrase | None, Field(description="API passphrase (required for OKX)")] = None,
    is_testnet: Annotated[bool, Field(description="Use testnet (Bybit only)")] = False,
) -> str:
    """Connect a new exchange account for a user.

    The server checks the credentials straight away; the answer reports
    whether that check failed (API Error) and the balance it found.
    """
    _log_request("create_exchange", user_id=user_id, name=name, exchange=exchange, risk_mode=risk_mode,
                 api_key=api_key, api_secret=api_secret, api_frase=api_frase, is_testnet=is_testnet)
    text = await exchanges.create_exchange(
        get_client(), user_id, name, exchange, risk_mode, api_key, api_secret,
        api_frase=api_frase, is_testnet=is_testnet,
    )
    return _log_response("create_exchange", text)


@mcp.tool()
async def update_exchange(
    id: ExchangeId,
    name: ResourceName | None = None,
    exchange: ExchangeVendor | None = None,
    risk_mode: RiskMode | None = None,
    api_key: ApiCredential | None = None,
    api_secret: ApiCredential | None = None,
    api_frase: ApiPassphrase | None = None,
    is_testnet: bool | None = None,
) -> str:
    """Update an exchange.  Only the fields you pass are changed."""
    _log_request("update_exchange", id=id, name=name, exchange=exchange, risk_mode=risk_mode,
                 api_key=api_key, api_secret=api_secret, api_frase=api_frase, is_testnet=is_testnet)
    text = await exchanges.update_exchange(
        get_client(), id,
        name=name, exchange=exchange, risk_mode=risk_mode, api_key=api_key,
        api_secret=api_secret, api_frase=api_frase, is_testnet=is_testnet,
    )
    return _log_response("update_exchange", text)


@mcp.tool()
async def refresh_exchange(id: ExchangeId) -> str:
    """Re-check an exchange's credentials and re-sync its balance."""
    _log_request("refresh_exchange", id=id)
    return _log_response("refresh_exchange", await exchanges.refresh_exchange(get_client(), id))


# =============================================================================
# BOTS
# =============================================================================
# Bots are created STOPPED.  start/stop/restart act on the live process;
# config changes to a running bot generally need a restart to apply.
# =============================================================================
@mcp.tool()
async def list_bot_parameters() -> str:
    """List valid bot values: modes, grid modes, market types, custom grids and symbols.

    WHEN TO CALL THIS: before create_bot, to find the symbol_id for a pair
    on the right exchange venue.  Symbols are grouped by venue and capped at
    10 per venue.
    """
    _log_request("list_bot_parameters")
    return _log_response("list_bot_parameters", await bots.get_bot_parameters(get_client()))


@mcp.tool()
async def list_bots(
    user_id: Annotated[int | None, Field(gt=0, description="User ID to list bots for")] = None,
    exchange_id: Annotated[int | None, Field(gt=0, description="Exchange ID to list bots for")] = None,
) -> str:
    """List bots for a user or for an exchange.  At least one of the two is required."""
    _log_request("list_bots", user_id=user_id, exchange_id=exchange_id)
    return _log_response("list_bots", await bots.list_bots(get_client(), user_id, exchange_id))


@mcp.tool()
async def get_bot(id: BotId) -> str:
    """Get a bot's full configuration, trading modes, options and process state."""
    _log_request("get_bot", id=id)
    return _log_response("get_bot", await bots.get_bot(get_client(), id))


@mcp.tool()
async def create_bot(
    name: ResourceName,
    exchange_id: ExchangeId,
    symbol_id: SymbolId,
    market_type: MarketType,
    grid_mode: GridMode,
    lm: Annotated[BotMode, Field(description="Long mode: n=normal, m=manual, gs=graceful stop, t=take profit, p=panic")],
    lwe: Annotated[WalletExposure, Field(description="Long wallet exposure (0-11)")],
    sm: Annotated[BotMode, Field(description="Short mode: n=normal, m=manual, gs=graceful stop, t=take profit, p=panic")],
    swe: Annotated[WalletExposure, Field(description="Short wallet exposure (0-11)")],
    grid_id: Annotated[int | None, Field(gt=0, description='Grid ID (required when grid_mode is "custom")')] = None,
    leverage: Annotated[Leverage | None, Field(description="Leverage (default: 10)")] = None,
    assigned_balance: Annotated[AssignedBalance | None, Field(description="Assigned balance (default: 0 for no limit)")] = None,
    oh_mode: Annotated[bool | None, Field(description="Order history mode (default: true)")] = None,
    show_logs: Annotated[bool | None, Field(description="Show logs (default: true)")] = None,
    is_on_trend: Annotated[bool | None, Field(description="Is on trend (default: false)")] = None,
    is_on_routines: Annotated[bool | None, Field(description="Is on routines (default: false)")] = None,
) -> str:
    """Create a bot on an exchange.  The bot starts STOPPED; call start_bot to run it."""
    options = dict(
        grid_id=grid_id, leverage=leverage, assigned_balance=assigned_balance, oh_mode=oh_mode,
        show_logs=show_logs, is_on_trend=is_on_trend, is_on_routines=is_on_routines,
    )
    _log_request("create_bot", name=name, exchange_id=exchange_id, symbol_id=symbol_id,
                 market_type=market_type, grid_mode=grid_mode, lm=lm, lwe=lwe, sm=sm, swe=swe, **options)
    text = await bots.create_bot(
        get_client(), name, exchange_id, symbol_id, market_type, grid_mode, lm, lwe, sm, swe, **options,
    )
    return _log_response("create_bot", text)


@mcp.tool()
async def update_bot(
    id: BotId,
    name: ResourceName | None = None,
    symbol_id: Annotated[int | None, Field(gt=0, description="Symbol ID")] = None,
    market_type: MarketType | None = None,
    grid_mode: GridMode | None = None,
    grid_id: GridUpdate = KEEP_GRID,
    lm: BotMode | None = None,
    lwe: WalletExposure | None = None,
    sm: BotMode | None = None,
    swe: WalletExposure | None = None,
    leverage: Leverage | None = None,
    assigned_balance: AssignedBalance | None = None,
    oh_mode: bool | None = None,
    show_logs: bool | None = None,
    is_on_trend: bool | None = None,
    is_on_routines: bool | None = None,
) -> str:
    """Update a bot.  Only the fields you pass are changed.

    To remove a bot's custom grid pass grid_id=null (or 0); it is sent to
    the API as null.  Leave grid_id out to keep the current grid.  A running
    bot may need restart_bot before changes apply.
    """
    changes = dict(
        name=name, symbol_id=symbol_id, market_type=market_type, grid_mode=grid_mode,
        lm=lm, lwe=lwe, sm=sm, swe=swe, leverage=leverage, assigned_balance=assigned_balance,
        oh_mode=oh_mode, show_logs=show_logs, is_on_trend=is_on_trend, is_on_routines=is_on_routines,
    )
    changes = {k: v for k, v in changes.items() if v is not None}
    if grid_id != KEEP_GRID:
        changes["grid_id"] = grid_id or None

    _log_request("update_bot", id=id, **changes)
    return _log_response("update_bot", await bots.update_bot(get_client(), id, **changes))


@mcp.tool()
async def start_bot(id: BotId) -> str:
    """Start a stopped bot.  Reports the new PID and start time."""
    _log_request("start_bot", id=id)
    return _log_response("start_bot", await bots.start_bot(get_client(), id))


@mcp.tool()
async def stop_bot(id: BotId) -> str:
    """Stop a running bot."""
    _log_request("stop_bot", id=id)
    return _log_response("stop_bot", await bots.stop_bot(get_client(), id))


@mcp.tool()
async def restart_bot(id: BotId) -> str:
    """Restart a bot so configuration changes take effect."""
    _log_request("restart_bot", id=id)
    return _log_response("restart_bot", await bots.restart_bot(get_client(), id))


@mcp.tool()
async def swap_bot_we(
    id: BotId,
    new_trend: Annotated[Trend, Field(description="New trend direction")],
) -> str:
    """Swap a bot's wallet exposure towards a new trend (LONG or SHORT).

    Reports the resulting long and short wallet exposure.  Restart the bot
    if it is running.
    """
    _log_request("swap_bot_we", id=id, new_trend=new_trend)
    return _log_response("swap_bot_we", await bots.swap_bot_we(get_client(), id, new_trend))


@mcp.tool()
async def simple_swap_bot_we(id: BotId) -> str:
    """Exchange a bot's long and short wallet exposure values."""
    _log_request("simple_swap_bot_we", id=id)
    return _log_response("simple_swap_bot_we", await bots.simple_swap_bot_we(get_client(), id))


@mcp.tool()
async def get_bot_status(id: BotId) -> str:
    """Get only a bot's process state: PID, running flag, start/stop times."""
    _log_request("get_bot_status", id=id)
    return _log_response("get_bot_status", await bots.get_bot_status(get_client(), id))


# =============================================================================
# TRADES
# =============================================================================
@mcp.tool()
async def list_trades(
    exchange_id: Annotated[int, Field(gt=0, description="Exchange ID (required)")],
    symbol: Annotated[str | None, Field(description="Filter by trading symbol (e.g., BTCUSDT)")] = None,
    from_date: Annotated[str | None, Field(description="Start date filter (YYYY-MM-DD)")] = None,
    to_date: Annotated[str | None, Field(description="End date filter (YYYY-MM-DD)")] = None,
    per_page: Annotated[PerPage | None, Field(description="Records per page (default: 25, max: 100)")] = None,
    sort_by: Annotated[SortColumn | None, Field(description="Column to sort by")] = None,
    sort_order: Annotated[SortOrder | None, Field(description="Sort direction (default: desc)")] = None,
) -> str:
    """List an exchange's trades, one page at a time, with a pagination footer."""
    _log_request("list_trades", exchange_id=exchange_id, symbol=symbol, from_date=from_date,
                 to_date=to_date, per_page=per_page, sort_by=sort_by, sort_order=sort_order)
    text = await trades.list_trades(
        get_client(), exchange_id,
        symbol=symbol, from_date=from_date, to_date=to_date,
        per_page=per_page, sort_by=sort_by, sort_order=sort_order,
    )
    return _log_response("list_trades", text)


@mcp.tool()
async def get_trade(id: TradeId) -> str:
    """Get every field of one trade, including signed closed PnL."""
    _log_request("get_trade", id=id)
    return _log_response("get_trade", await trades.get_trade(get_client(), id))


@mcp.tool()
async def list_trade_symbols(exchange_id: ExchangeId) -> str:
    """List the distinct symbols an exchange has traded."""
    _log_request("list_trade_symbols", exchange_id=exchange_id)
    return _log_response("list_trade_symbols", await trades.list_trade_symbols(get_client(), exchange_id))


@mcp.tool()
async def get_pnl_stats(
    exchange_id: Annotated[int, Field(gt=0, description="Exchange ID (required)")],
    period: Annotated[PnlPeriod | None, Field(description="Aggregation period (default: daily)")] = None,
    month: Annotated[Month | None, Field(description="Month filter for daily period (1-12)")] = None,
    year: Annotated[Year | None, Field(description="Year filter")] = None,
) -> str:
    """Get realised P&L grouped by day, month or year, with per-symbol detail.

    Each period shows its subtotal (trades and PnL) with the symbols under
    it; the last line is the exchange's all-time PnL.
    """
    _log_request("get_pnl_stats", exchange_id=exchange_id, period=period, month=month, year=year)
    text = await trades.get_pnl_stats(get_client(), exchange_id, period=period, month=month, year=year)
    return _log_response("get_pnl_stats", text)


# =============================================================================
# Server entry point
# =============================================================================
if __name__ == "__main__":
    mcp.run()
