# tests/test_trades.py
"""Tests for the trade and P&L handlers."""

import pytest

from kriptty import trades
from kriptty.models import PnlRecord

TRADE = {
    "id": 501,
    "exchange_id": 3,
    "position_id": None,
    "symbol": "BTCUSDT",
    "nice_name": "BTC/USDT",
    "order_id": "abc-1",
    "order_oid": None,
    "side": "Sell",
    "qty": "0.010",
    "order_price": 65000.5,
    "order_type": "Limit",
    "exec_type": "Trade",
    "closed_size": "0.010",
    "avg_entry_price": "64000",
    "avg_exit_price": "65000.5",
    "closed_pnl": "10.005",
    "fill_count": 1,
    "leverage": 10,
    "created_at": "2024-01-01T12:00:00Z",
    "updated_at": "2024-01-01T12:00:01Z",
}

DAILY_RECORDS = [
    {"date": "2024-01-01", "symbol": "BTCUSDT", "total_trades": 2, "pnl": "1.5"},
    {"date": "2024-01-01", "symbol": "ETHUSDT", "total_trades": 1, "pnl": "-0.25"},
]


class TestListTrades:

    @pytest.mark.asyncio
    async def test_page_with_footer(self, api, client):
        losing = {**TRADE, "id": 502, "side": "Buy", "closed_pnl": "-2.5"}
        api.add("GET", "/trades", {
            "data": [TRADE, losing],
            "links": {"first": "p1", "last": "p1", "prev": None, "next": None},
            "meta": {"current_page": 1, "from": 1, "to": 2, "last_page": 1, "per_page": 25, "total": 2},
        })

        text = await trades.list_trades(client, 3)

        assert text.startswith("Trades for Exchange 3 (Page 1/1, Total: 2):")
        assert "- ID: 501 | BTC/USDT | Sell | Qty: 0.010 | PnL: +10.0050 | 2024-01-01T12:00:00Z" in text
        assert "PnL: -2.5000" in text
        assert text.endswith("Pagination: Showing 1-2 of 2 trades")

    @pytest.mark.asyncio
    async def test_empty_with_symbol(self, api, client):
        api.add("GET", "/trades", {"data": [], "meta": {"total": 0}})
        text = await trades.list_trades(client, 3, symbol="DOGEUSDT")
        assert text == "No trades found for exchange 3 with symbol DOGEUSDT."

    @pytest.mark.asyncio
    async def test_filters_reach_the_query(self, api, client):
        api.add("GET", "/trades", {"data": []})
        await trades.list_trades(client, 3, from_date="2024-01-01", sort_by="closed_pnl")
        assert dict(api.last.url.params) == {
            "exchange_id": "3",
            "from_date": "2024-01-01",
            "sort_by": "closed_pnl",
        }


@pytest.mark.asyncio
async def test_get_trade_detail(api, client):
    api.add("GET", "/trades/501", {"data": TRADE})

    text = await trades.get_trade(client, 501)

    assert "- Position ID: N/A" in text
    assert "- Closed PnL: +10.0050" in text
    assert "- Leverage: 10x" in text
    assert "- Order OID: N/A" in text


@pytest.mark.asyncio
async def test_get_trade_not_found(api, client):
    api.add("GET", "/trades/9", status=404, text="")
    assert await trades.get_trade(client, 9) == "Trade with ID 9 not found."


@pytest.mark.asyncio
async def test_list_trade_symbols(api, client):
    api.add("GET", "/trades/symbols", {"data": ["BTCUSDT", "ETHUSDT"]})

    text = await trades.list_trade_symbols(client, 3)

    assert dict(api.last.url.params) == {"exchange_id": "3"}
    assert text == "Traded Symbols for Exchange 3 (Total: 2):\n\n  - BTCUSDT\n  - ETHUSDT"


class TestPnlStats:

    @pytest.mark.asyncio
    async def test_daily_grouping(self, api, client):
        api.add("GET", "/trades/stats/pnl", {"data": {
            "period": "daily",
            "records": DAILY_RECORDS,
            "global_pnl": "1.25",
        }})

        text = await trades.get_pnl_stats(client, 3)

        assert text.splitlines() == [
            "P&L Statistics for Exchange 3 (daily):",
            "",
            "2024-01-01: 3 trades, PnL: +1.2500",
            "    BTCUSDT: 2 trades, +1.5000",
            "    ETHUSDT: 1 trades, -0.2500",
            "",
            "Global PnL (All Time): +1.2500",
        ]

    @pytest.mark.asyncio
    async def test_query_parameters(self, api, client):
        api.add("GET", "/trades/stats/pnl", {"data": {"period": "daily", "records": [], "global_pnl": "0"}})
        await trades.get_pnl_stats(client, 3, period="daily", month=2, year=2024)
        assert dict(api.last.url.params) == {
            "exchange_id": "3", "period": "daily", "month": "2", "year": "2024",
        }

    @pytest.mark.asyncio
    async def test_no_records_still_shows_global(self, api, client):
        api.add("GET", "/trades/stats/pnl", {"data": {"period": "yearly", "records": [], "global_pnl": "-3"}})

        text = await trades.get_pnl_stats(client, 3, period="yearly")

        assert text == (
            "No P&L statistics found for exchange 3 with period yearly.\n\n"
            "Global PnL (All Time): -3.0000"
        )

    def test_monthly_and_yearly_keys(self):
        record = PnlRecord(year=2024, month=1, month_name="January", symbol="BTCUSDT", total_trades=1, pnl="1")
        assert trades.period_key(record, "monthly") == "January 2024"
        assert trades.period_key(record, "yearly") == "2024"

    def test_groups_keep_first_seen_order(self):
        records = [
            PnlRecord(date="2024-01-02", symbol="A"),
            PnlRecord(date="2024-01-01", symbol="B"),
            PnlRecord(date="2024-01-02", symbol="C"),
        ]
        groups = trades.group_pnl_records(records, "daily")
        assert list(groups) == ["2024-01-02", "2024-01-01"]
        assert [r.symbol for r in groups["2024-01-02"]] == ["A", "C"]


@pytest.mark.asyncio
async def test_numeric_pnl_values_are_accepted(api, client):
    api.add("GET", "/trades/stats/pnl", {"data": {
        "period": "daily",
        "records": [
            {"date": "2024-01-01", "symbol": "BTCUSDT", "total_trades": 2, "pnl": 1.5},
            {"date": "2024-01-01", "symbol": "ETHUSDT", "total_trades": 1, "pnl": -0.25},
        ],
        "global_pnl": 1.25,
    }})

    text = await trades.get_pnl_stats(client, 3)

    assert "2024-01-01: 3 trades, PnL: +1.2500" in text
    assert "    ETHUSDT: 1 trades, -0.2500" in text
    assert text.endswith("Global PnL (All Time): +1.2500")


@pytest.mark.asyncio
async def test_numeric_trade_fields_are_accepted(api, client):
    api.add("GET", "/trades/501", {"data": {**TRADE, "qty": 0.01, "closed_pnl": -3}})

    text = await trades.get_trade(client, 501)

    assert "- Quantity: 0.01" in text
    assert "- Closed PnL: -3.0000" in text
