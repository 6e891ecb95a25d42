# =============================================================================
# kriptty_mcp/params.py  -  Tool Parameter Types
# =============================================================================
#
# Annotated aliases reused across tool signatures.  FastMCP turns the type
# plus its pydantic Field into the JSON schema the agent sees, and validates
# every call against it.  A call that breaks a bound (lwe=12, leverage=0,
# a routine id that is not a UUID) fails here and never reaches the API.
# =============================================================================

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import Field

UserId = Annotated[int, Field(gt=0, description="User ID")]
ExchangeId = Annotated[int, Field(gt=0, description="Exchange ID")]
BotId = Annotated[int, Field(gt=0, description="Bot ID")]
TradeId = Annotated[int, Field(gt=0, description="Trade ID")]
SymbolId = Annotated[int, Field(gt=0, description="Symbol ID (use list_bot_parameters to see available symbols)")]
RoutineId = Annotated[UUID, Field(description="Routine ID (UUID)")]

GridMode = Literal["recursive", "neat", "static", "clock", "custom"]
BotMode = Literal["n", "m", "gs", "t", "p"]
MarketType = Literal["futures", "spot"]
ExchangeVendor = Literal["bybit", "binance", "binance_us", "bitget", "okx"]
RiskMode = Literal["1", "2", "3"]
Trend = Literal["LONG", "SHORT"]

WalletExposure = Annotated[Union[int, float], Field(ge=0, le=11)]
Leverage = Annotated[Union[int, float], Field(ge=1, le=125)]
AssignedBalance = Annotated[Union[int, float], Field(ge=0)]

Email = Annotated[str, Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", description="Email address")]
Password = Annotated[str, Field(min_length=8, description="Password (min 8 characters)")]
Role = Annotated[int, Field(description="Role (see list_roles)")]

RoutineName = Annotated[str, Field(min_length=1, max_length=52)]
ResourceName = Annotated[str, Field(min_length=1, max_length=255)]
ApiCredential = Annotated[str, Field(min_length=1, max_length=100)]
ApiPassphrase = Annotated[str, Field(max_length=250)]

SortColumn = Literal["id", "symbol", "side", "qty", "closed_pnl", "order_price", "leverage", "created_at"]
SortOrder = Literal["asc", "desc"]
PnlPeriod = Literal["daily", "monthly", "yearly"]
PerPage = Annotated[int, Field(ge=1, le=100)]
Month = Annotated[int, Field(ge=1, le=12)]
Year = Annotated[int, Field(ge=2020, le=2100)]

# update_bot needs three grid states: attach a grid, detach it (null or 0),
# or leave it alone.  "keep" is the default so an explicit null is not
# mistaken for an omitted argument.
KEEP_GRID = "keep"
GridUpdate = Annotated[
    Union[Annotated[int, Field(ge=0)], None, Literal["keep"]],
    Field(description='Grid ID to attach; null or 0 detaches the custom grid; "keep" leaves it unchanged'),
]
