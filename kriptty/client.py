# =============================================================================
# kriptty/client.py  -  Authenticated Request Gateway
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Every tool ends in exactly one REST call, and every REST call goes
#   through KripttyClient.request():
#     1. join the configured base URL with the endpoint path
#     2. attach the bearer token and the JSON headers
#     3. send the request (one attempt, httpx's default timeout)
#     4. on 2xx, decode the JSON body; otherwise raise ApiError
#
# TWO KINDS OF FAILURE:
#   - ApiError: the server answered, but not with a 2xx.  Handlers turn this
#     into a readable sentence ("Bot with ID 9 not found.").
#   - httpx.TransportError (connect errors, timeouts, ...): we never reached
#     the server.  Nothing in this package catches it; the tool runtime
#     reports it as a failed call.
#
# The typed methods below (get_bot, list_trades, ...) are thin: they pick the
# endpoint, method and body, and decode the answer into a model.
# =============================================================================

import logging
from typing import Any

import httpx

from kriptty.config import Settings
from kriptty.models import (
    Bot,
    BotParameters,
    BotStatus,
    DataEnvelope,
    ExchangeDetailed,
    ExchangeParameters,
    MessageEnvelope,
    Paginated,
    PnlStatsResponse,
    Routine,
    RoutineParameters,
    Trade,
    User,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A non-2xx answer from the Kriptty API."""

    def __init__(self, status: int, status_text: str, message: str | None = None):
        self.status = status
        self.status_text = status_text
        self.message = message or f"API Error: {status} {status_text}"
        super().__init__(self.message)


def _query(**params: Any) -> dict[str, Any]:
    """Drop parameters the caller did not provide."""
    return {key: value for key, value in params.items() if value is not None}


class KripttyClient:
    """Async client for the Kriptty REST API.

    One instance serves the whole process.  It holds no state besides the
    base URL and an httpx.AsyncClient carrying the auth headers.

    Args:
        settings: API URL and token.
        transport: Optional httpx transport.  Tests pass an
            httpx.MockTransport here; production leaves it unset.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = settings.api_url.rstrip("/")
        self._http = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {settings.api_token}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Args:
            endpoint: Path relative to the base URL, with a leading slash.
            method: GET, POST or PATCH.
            body: Serialized as JSON when given.
            params: Query string parameters.

        Raises:
            ApiError: The server answered with a status outside 200-299.
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, endpoint)

        response = await self._http.request(method, url, json=body, params=params)

        if not response.is_success:
            error_body = response.text
            logger.warning("%s %s -> %s", method, endpoint, response.status_code)
            raise ApiError(
                response.status_code,
                response.reason_phrase,
                f"API request failed: {response.status_code} {response.reason_phrase}. {error_body}",
            )

        return response.json()

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------
    async def list_users(self) -> list[User]:
        payload = await self.request("/users")
        return DataEnvelope[list[User]].model_validate(payload).data

    async def get_user(self, user_id: int) -> User:
        payload = await self.request(f"/users/{user_id}")
        return DataEnvelope[User].model_validate(payload).data

    async def create_user(self, data: dict[str, Any]) -> User:
        payload = await self.request("/users", method="POST", body=data)
        return DataEnvelope[User].model_validate(payload).data

    async def update_user(self, user_id: int, data: dict[str, Any]) -> User:
        payload = await self.request(f"/users/{user_id}", method="PATCH", body=data)
        return DataEnvelope[User].model_validate(payload).data

    # -------------------------------------------------------------------------
    # Routines
    # -------------------------------------------------------------------------
    async def get_routine_parameters(self) -> RoutineParameters:
        payload = await self.request("/routine-parameters")
        return DataEnvelope[RoutineParameters].model_validate(payload).data

    async def list_routines(self) -> list[Routine]:
        payload = await self.request("/routines")
        return DataEnvelope[list[Routine]].model_validate(payload).data

    async def get_routine(self, routine_id: str) -> Routine:
        payload = await self.request(f"/routines/{routine_id}")
        return DataEnvelope[Routine].model_validate(payload).data

    async def create_routine(self, data: dict[str, Any]) -> Routine:
        payload = await self.request("/routines", method="POST", body=data)
        return DataEnvelope[Routine].model_validate(payload).data

    async def update_routine(self, routine_id: str, data: dict[str, Any]) -> Routine:
        payload = await self.request(f"/routines/{routine_id}", method="PATCH", body=data)
        return DataEnvelope[Routine].model_validate(payload).data

    async def run_routine(self, routine_id: str, exchange_id: int | None = None) -> MessageEnvelope[Routine]:
        body = {"exchange_id": exchange_id} if exchange_id is not None else None
        payload = await self.request(f"/routines/{routine_id}/run", method="POST", body=body)
        return MessageEnvelope[Routine].model_validate(payload)

    # -------------------------------------------------------------------------
    # Exchanges
    # -------------------------------------------------------------------------
    async def get_exchange_parameters(self) -> ExchangeParameters:
        payload = await self.request("/exchange-parameters")
        return DataEnvelope[ExchangeParameters].model_validate(payload).data

    async def list_exchanges(self, user_id: int) -> list[ExchangeDetailed]:
        payload = await self.request("/exchanges", params={"user_id": user_id})
        return DataEnvelope[list[ExchangeDetailed]].model_validate(payload).data

    async def get_exchange(self, exchange_id: int) -> ExchangeDetailed:
        payload = await self.request(f"/exchanges/{exchange_id}")
        return DataEnvelope[ExchangeDetailed].model_validate(payload).data

    async def create_exchange(self, data: dict[str, Any]) -> ExchangeDetailed:
        payload = await self.request("/exchanges", method="POST", body=data)
        return DataEnvelope[ExchangeDetailed].model_validate(payload).data

    async def update_exchange(self, exchange_id: int, data: dict[str, Any]) -> ExchangeDetailed:
        payload = await self.request(f"/exchanges/{exchange_id}", method="PATCH", body=data)
        return DataEnvelope[ExchangeDetailed].model_validate(payload).data

    async def refresh_exchange(self, exchange_id: int) -> MessageEnvelope[ExchangeDetailed]:
        payload = await self.request(f"/exchanges/{exchange_id}/refresh", method="POST")
        return MessageEnvelope[ExchangeDetailed].model_validate(payload)

    # -------------------------------------------------------------------------
    # Bots
    # -------------------------------------------------------------------------
    async def get_bot_parameters(self) -> BotParameters:
        payload = await self.request("/bot-parameters")
        return DataEnvelope[BotParameters].model_validate(payload).data

    async def list_bots(self, user_id: int | None = None, exchange_id: int | None = None) -> list[Bot]:
        payload = await self.request("/bots", params=_query(user_id=user_id, exchange_id=exchange_id))
        return DataEnvelope[list[Bot]].model_validate(payload).data

    async def get_bot(self, bot_id: int) -> Bot:
        payload = await self.request(f"/bots/{bot_id}")
        return DataEnvelope[Bot].model_validate(payload).data

    async def create_bot(self, data: dict[str, Any]) -> Bot:
        payload = await self.request("/bots", method="POST", body=data)
        return DataEnvelope[Bot].model_validate(payload).data

    async def update_bot(self, bot_id: int, data: dict[str, Any]) -> Bot:
        payload = await self.request(f"/bots/{bot_id}", method="PATCH", body=data)
        return DataEnvelope[Bot].model_validate(payload).data

    async def bot_action(self, bot_id: int, action: str, body: dict[str, Any] | None = None) -> MessageEnvelope[Bot]:
        """POST /bots/{id}/{action} for start, stop, restart, swap-we and simple-swap-we."""
        payload = await self.request(f"/bots/{bot_id}/{action}", method="POST", body=body)
        return MessageEnvelope[Bot].model_validate(payload)

    async def get_bot_status(self, bot_id: int) -> BotStatus:
        payload = await self.request(f"/bots/{bot_id}/status")
        return DataEnvelope[BotStatus].model_validate(payload).data

    # -------------------------------------------------------------------------
    # Trades
    # -------------------------------------------------------------------------
    async def list_trades(
        self,
        exchange_id: int,
        symbol: str | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
        per_page: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Paginated[Trade]:
        params = _query(
            exchange_id=exchange_id,
            symbol=symbol or None,
            from_date=from_date or None,
            to_date=to_date or None,
            per_page=per_page,
            sort_by=sort_by or None,
            sort_order=sort_order or None,
        )
        payload = await self.request("/trades", params=params)
        return Paginated[Trade].model_validate(payload)

    async def get_trade(self, trade_id: int) -> Trade:
        payload = await self.request(f"/trades/{trade_id}")
        return DataEnvelope[Trade].model_validate(payload).data

    async def list_trade_symbols(self, exchange_id: int) -> list[str]:
        payload = await self.request("/trades/symbols", params={"exchange_id": exchange_id})
        return DataEnvelope[list[str]].model_validate(payload).data

    async def get_pnl_stats(
        self,
        exchange_id: int,
        period: str | None = None,
        month: int | None = None,
        year: int | None = None,
    ) -> PnlStatsResponse:
        params = _query(exchange_id=exchange_id, period=period, month=month, year=year)
        payload = await self.request("/trades/stats/pnl", params=params)
        return DataEnvelope[PnlStatsResponse].model_validate(payload).data
