# =============================================================================
# kriptty/exchanges.py  -  Exchange Handlers
# =============================================================================
#
# An "exchange" in Kriptty is a user's account on a crypto venue (Bybit,
# Binance, ...) together with its API credentials and last-synced balances.
#
# THE api_error FLAG:
#   The server tries the stored credentials whenever an exchange is created,
#   updated or refreshed.  api_error=True means that attempt failed.  Every
#   mutating tool reports the flag so the agent can tell the user straight
#   away that the keys look wrong.
# =============================================================================

from kriptty.client import ApiError, KripttyClient
from kriptty.formatting import api_error_message, format_mapping, or_default, risk_mode_label, yes_no
from kriptty.models import ExchangeDetailed

UPDATABLE_FIELDS = ("name", "exchange", "risk_mode", "api_key", "api_secret", "api_frase", "is_testnet")


def _not_found(exchange_id: int) -> str:
    return f"Exchange with ID {exchange_id} not found."


def _api_error_flag(exchange: ExchangeDetailed, when_failed: str) -> str:
    return f"Yes ({when_failed})" if exchange.api_error else "No"


def _format_exchange(exchange: ExchangeDetailed) -> str:
    return "\n".join([
        f"- ID: {exchange.id}",
        f"  Name: {exchange.name}",
        f"  Exchange: {exchange.exchange}",
        f"  Risk Mode: {risk_mode_label(exchange.risk_mode)}",
        f"  Testnet: {yes_no(exchange.is_testnet)}",
        f"  API Error: {_api_error_flag(exchange, 'credentials may be invalid')}",
        f"  USDT Balance: {or_default(exchange.usdt_balance)}",
        f"  Created: {exchange.created_at}",
    ])


async def get_exchange_parameters(client: KripttyClient) -> str:
    try:
        params = await client.get_exchange_parameters()
    except ApiError as e:
        return api_error_message(e, "fetching exchange parameters")

    fields = params.fields
    return (
        "Exchange Parameters:\n\n"
        f"Supported Exchanges:\n{format_mapping(params.exchanges)}\n\n"
        f"Risk Modes:\n{format_mapping(params.risk_modes)}\n\n"
        f"Required Fields: {', '.join(fields.required)}\n"
        f"Optional Fields: {', '.join(fields.optional)}\n\n"
        f"Notes:\n{format_mapping(fields.notes)}"
    )


async def list_exchanges(client: KripttyClient, user_id: int) -> str:
    try:
        exchanges = await client.list_exchanges(user_id)
    except ApiError as e:
        return api_error_message(e, "fetching exchanges")

    if not exchanges:
        return f"No exchanges found for user {user_id}."

    summary = "\n\n".join(_format_exchange(e) for e in exchanges)
    return f"Exchanges for User {user_id} (Total: {len(exchanges)}):\n\n{summary}"


async def get_exchange(client: KripttyClient, exchange_id: int) -> str:
    try:
        exchange = await client.get_exchange(exchange_id)
    except ApiError as e:
        return api_error_message(e, "fetching exchange", not_found=_not_found(exchange_id))

    return "\n".join([
        "Exchange Details:",
        f"- ID: {exchange.id}",
        f"- User ID: {exchange.user_id}",
        f"- Name: {exchange.name}",
        f"- Slug: {exchange.slug}",
        f"- Exchange Type: {exchange.exchange}",
        f"- Risk Mode: {risk_mode_label(exchange.risk_mode)}",
        f"- Testnet: {yes_no(exchange.is_testnet)}",
        f"- API Error: {_api_error_flag(exchange, 'credentials may be invalid')}",
        "- Balances:",
        f"  - USDT: {or_default(exchange.usdt_balance)}",
        f"  - USD: {or_default(exchange.usd_balance)}",
        f"  - BTC: {or_default(exchange.btc_balance)}",
        f"  - ETH: {or_default(exchange.eth_balance)}",
        f"- Initial USDT Balance: {or_default(exchange.initial_usdt_balance, 'Not recorded')}",
        f"- Initial Balance Date: {or_default(exchange.initial_balance_recorded_at)}",
        f"- Created: {exchange.created_at}",
        f"- Updated: {exchange.updated_at}",
    ])


async def create_exchange(
    client: KripttyClient,
    user_id: int,
    name: str,
    exchange: str,
    risk_mode: str,
    api_key: str,
    api_secret: str,
    api_frase: str | None = None,
    is_testnet: bool = False,
) -> str:
    data = {
        "user_id": user_id,
        "name": name,
        "exchange": exchange,
        "risk_mode": risk_mode,
        "api_key": api_key,
        "api_secret": api_secret,
        "is_testnet": is_testnet,
    }
    # Passphrase is OKX-only.
    if api_frase is not None:
        data["api_frase"] = api_frase

    try:
        created = await client.create_exchange(data)
    except ApiError as e:
        return api_error_message(e, "creating exchange")

    return "\n".join([
        "Exchange created successfully:",
        f"- ID: {created.id}",
        f"- Name: {created.name}",
        f"- Exchange: {created.exchange}",
        f"- API Error: {_connectivity(created)}",
        f"- USDT Balance: {or_default(created.usdt_balance)}",
    ])


def _connectivity(exchange: ExchangeDetailed) -> str:
    return "Yes (check credentials)" if exchange.api_error else "No (connectivity OK)"


async def update_exchange(client: KripttyClient, exchange_id: int, **changes) -> str:
    """PATCH only the fields the caller passed (see UPDATABLE_FIELDS)."""
    data = {
        key: changes[key]
        for key in UPDATABLE_FIELDS
        if changes.get(key) is not None
    }
    try:
        updated = await client.update_exchange(exchange_id, data)
    except ApiError as e:
        return api_error_message(e, "updating exchange", not_found=_not_found(exchange_id))

    return "\n".join([
        "Exchange updated successfully:",
        f"- ID: {updated.id}",
        f"- Name: {updated.name}",
        f"- Exchange: {updated.exchange}",
        f"- API Error: {_connectivity(updated)}",
    ])


async def refresh_exchange(client: KripttyClient, exchange_id: int) -> str:
    try:
        result = await client.refresh_exchange(exchange_id)
    except ApiError as e:
        return api_error_message(e, "refreshing exchange", not_found=_not_found(exchange_id))

    exchange = result.data
    return "\n".join([
        result.message,
        f"- ID: {exchange.id}",
        f"- Name: {exchange.name}",
        f"- API Error: {_api_error_flag(exchange, 'credentials invalid or connection failed')}",
        f"- USDT Balance: {or_default(exchange.usdt_balance)}",
    ])
