# =============================================================================
# kriptty/models.py  -  Response Models (the "nouns" of the API)
# =============================================================================
#
# These models describe the JSON the Kriptty API sends back.  They carry no
# behaviour: a handler decodes a payload into one of them, renders it, and
# throws it away.  Nothing here is stored between calls.
#
# WHY PYDANTIC (AND NOT PLAIN DATACLASSES)?
#   The payloads are nested (a bot embeds its exchange, symbol and grid; a
#   trade list is wrapped in pagination links and meta).  model_validate()
#   decodes the whole tree in one call.
#
# "TRUST THE SERVER":
#   These are decoding types, not a second validation layer.  Unknown keys
#   are ignored and every attribute the API may omit or null has a default,
#   so a well-formed answer never fails to decode.
#
# NUMBERS:
#   Wallet exposures, leverage and prices are typed `int | float` so a JSON
#   `2` stays `2` when rendered (not `2.0`).  Balances and pnl figures arrive
#   as decimal strings and stay strings until formatting.py reads them; a
#   server that sends them as JSON numbers instead is accepted too.
# =============================================================================

from typing import Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base for every payload model.

    Unknown keys are ignored, and a number sent where a decimal string is
    expected (pnl, balances, qty) is kept as its string form.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


# -----------------------------------------------------------------------------
# Envelopes
# -----------------------------------------------------------------------------
# The API wraps every answer.  Reads come back as {"data": ...}; actions
# (start, stop, refresh, run, swap) come back as {"message": ..., "data": ...};
# the trade list comes back paginated.
# -----------------------------------------------------------------------------
class DataEnvelope(ApiModel, Generic[T]):
    data: T


class MessageEnvelope(ApiModel, Generic[T]):
    message: str = ""
    data: T


class PaginationLinks(ApiModel):
    first: str | None = None
    last: str | None = None
    prev: str | None = None
    next: str | None = None


class PaginationMeta(ApiModel):
    current_page: int = 1
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None
    last_page: int = 1
    per_page: int = 0
    total: int = 0
    path: str = ""


class Paginated(ApiModel, Generic[T]):
    data: list[T] = Field(default_factory=list)
    links: PaginationLinks = Field(default_factory=PaginationLinks)
    meta: PaginationMeta = Field(default_factory=PaginationMeta)


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------
class ExchangeSummary(ApiModel):
    """The short exchange record nested inside a user."""

    id: int
    name: str = ""
    exchange: str = ""


class User(ApiModel):
    id: int
    name: str = ""
    email: str = ""
    admin: bool = False
    role: int = 0
    timezone: str | None = None
    last_seen: str | None = None
    created_at: str | None = None
    exchanges: list[ExchangeSummary] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Routines
# -----------------------------------------------------------------------------
class RoutineAction(ApiModel):
    """What a routine applies to bots when it runs."""

    grid_mode: str = ""                # recursive | neat | static | clock | custom
    grid_id: int | None = None         # 0 means "no custom grid"
    lm: str = ""                       # long mode code (n, m, gs, t, p)
    lwe: Number = 0                    # long wallet exposure, 0-11
    sm: str = ""                       # short mode code
    swe: Number = 0                    # short wallet exposure, 0-11


class Routine(ApiModel):
    id: str                            # UUID
    user_id: int | None = None
    name: str = ""
    type: str | None = None
    action: RoutineAction = Field(default_factory=RoutineAction)
    triggered_at: str | None = None
    triggered_by: str | None = None
    created_at: str | None = None


class GridSummary(ApiModel):
    id: int
    user_id: int | None = None
    name: str = ""


class RoutineParameters(ApiModel):
    grid_modes: dict[str, str] = Field(default_factory=dict)
    bot_modes: dict[str, str] = Field(default_factory=dict)
    grids: list[GridSummary] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Exchanges
# -----------------------------------------------------------------------------
class ExchangeDetailed(ApiModel):
    id: int
    user_id: int | None = None
    name: str = ""
    slug: str = ""
    exchange: str = ""                 # bybit | binance | binance_us | bitget | okx
    risk_mode: str = ""                # "1" | "2" | "3"
    is_testnet: bool = False
    api_error: bool = False            # True when the stored credentials last failed
    usdt_balance: str | None = None
    usd_balance: str | None = None
    btc_balance: str | None = None
    eth_balance: str | None = None
    initial_usdt_balance: str | None = None
    initial_balance_recorded_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ParameterFields(ApiModel):
    """Field guidance returned by the *-parameters endpoints."""

    required: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)
    notes: dict[str, str] = Field(default_factory=dict)


class ExchangeParameters(ApiModel):
    exchanges: dict[str, str] = Field(default_factory=dict)
    risk_modes: dict[str, str] = Field(default_factory=dict)
    fields: ParameterFields = Field(default_factory=ParameterFields)


# -----------------------------------------------------------------------------
# Bots
# -----------------------------------------------------------------------------
class BotExchange(ApiModel):
    id: int
    name: str = ""
    slug: str = ""
    exchange: str = ""


class BotSymbol(ApiModel):
    id: int
    name: str = ""
    nice_name: str = ""


class BotGrid(ApiModel):
    id: int
    name: str = ""


class Bot(ApiModel):
    """A grid-trading bot.

    ``is_running`` is computed by the server (pid set and the process alive);
    this package only ever displays it.
    """

    id: int
    name: str = ""
    market_type: str = ""              # futures | spot
    grid_mode: str = ""
    lm: str = ""
    lwe: Number = 0
    sm: str = ""
    swe: Number = 0
    leverage: Number = 0
    assigned_balance: Number = 0       # 0 means no limit
    oh_mode: bool = False
    show_logs: bool = False
    is_on_trend: bool = False
    is_on_routines: bool = False
    pid: int | None = None
    started_at: str | None = None
    stopped_at: str | None = None
    is_running: bool = False
    user_id: int | None = None
    exchange_id: int | None = None
    grid_id: int | None = None
    symbol_id: int | None = None
    exchange: BotExchange | None = None
    symbol: BotSymbol | None = None
    grid: BotGrid | None = None
    created_at: str | None = None
    updated_at: str | None = None


class BotStatus(ApiModel):
    id: int
    name: str = ""
    pid: int | None = None
    is_running: bool = False
    started_at: str | None = None
    stopped_at: str | None = None


class SymbolSummary(ApiModel):
    id: int
    name: str = ""
    nice_name: str = ""
    exchange: str = ""


class BotParameters(ApiModel):
    bot_modes: dict[str, str] = Field(default_factory=dict)
    grid_modes: dict[str, str] = Field(default_factory=dict)
    market_types: dict[str, str] = Field(default_factory=dict)
    grids: list[GridSummary] = Field(default_factory=list)
    symbols: list[SymbolSummary] = Field(default_factory=list)
    fields: ParameterFields = Field(default_factory=ParameterFields)


# -----------------------------------------------------------------------------
# Trades
# -----------------------------------------------------------------------------
class Trade(ApiModel):
    id: int
    exchange_id: int | None = None
    position_id: int | None = None
    symbol: str = ""
    nice_name: str = ""
    order_id: str | None = None
    order_oid: str | None = None
    side: str = ""
    qty: str | None = None
    order_price: Number | None = None
    order_type: str | None = None
    exec_type: str | None = None
    closed_size: str | None = None
    avg_entry_price: str | None = None
    avg_exit_price: str | None = None
    closed_pnl: str | None = None
    fill_count: int | None = None
    leverage: Number | None = None
    created_at: str | None = None
    updated_at: str | None = None


class PnlRecord(ApiModel):
    """One aggregation bucket.  Which date fields are set depends on the period."""

    date: str | None = None            # daily
    year: int | None = None            # monthly, yearly
    month: int | None = None           # monthly
    month_name: str | None = None      # monthly
    symbol: str = ""
    total_trades: int = 0
    pnl: str = "0"


class PnlStatsResponse(ApiModel):
    period: str = "daily"
    records: list[PnlRecord] = Field(default_factory=list)
    global_pnl: str = "0"
