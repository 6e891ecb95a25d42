# =============================================================================
# kriptty/trades.py  -  Trade Handlers
# =============================================================================
#
# Read-only views of an exchange's trade history:
#   - list_trades         one page of trades plus a pagination footer
#   - get_trade           every field of one trade
#   - list_trade_symbols  the distinct symbols ever traded
#   - get_pnl_stats       realised pnl aggregated per day, month or year
#
# PNL FIGURES:
#   Always 4 decimals with an explicit sign ("+1.2500", "-0.2500"); see
#   formatting.format_pnl.  Sums are done in Decimal, never float.
#
# PNL GROUPING:
#   The API returns one record per (period bucket, symbol).  We group the
#   records by bucket, keeping the order in which buckets first appear, and
#   print a subtotal line per bucket with its symbols underneath.
# =============================================================================

from decimal import Decimal

from kriptty.client import ApiError, KripttyClient
from kriptty.formatting import api_error_message, format_pnl, or_default, to_decimal
from kriptty.models import PnlRecord, Trade


def _format_trade(trade: Trade) -> str:
    return (
        f"- ID: {trade.id} | {trade.nice_name} | {trade.side} | "
        f"Qty: {or_default(trade.qty)} | PnL: {format_pnl(trade.closed_pnl)} | {trade.created_at}"
    )


def _format_trade_detailed(trade: Trade) -> str:
    return "\n".join([
        "Trade Details:",
        f"- ID: {trade.id}",
        f"- Exchange ID: {trade.exchange_id}",
        f"- Position ID: {or_default(trade.position_id)}",
        f"- Symbol: {trade.symbol} ({trade.nice_name})",
        f"- Side: {trade.side}",
        f"- Order Type: {trade.order_type}",
        f"- Exec Type: {trade.exec_type}",
        f"- Quantity: {or_default(trade.qty)}",
        f"- Order Price: {or_default(trade.order_price)}",
        f"- Avg Entry Price: {or_default(trade.avg_entry_price)}",
        f"- Avg Exit Price: {or_default(trade.avg_exit_price)}",
        f"- Closed Size: {or_default(trade.closed_size)}",
        f"- Closed PnL: {format_pnl(trade.closed_pnl)}",
        f"- Leverage: {or_default(trade.leverage)}x",
        f"- Fill Count: {or_default(trade.fill_count)}",
        f"- Order ID: {trade.order_id}",
        f"- Order OID: {or_default(trade.order_oid)}",
        f"- Created: {trade.created_at}",
        f"- Updated: {trade.updated_at}",
    ])


def period_key(record: PnlRecord, period: str) -> str:
    """The bucket a pnl record belongs to: "2024-01-01", "January 2024" or "2024"."""
    if period == "daily" and record.date:
        return record.date
    if period == "monthly" and record.month_name:
        return f"{record.month_name} {record.year}"
    if record.year:
        return str(record.year)
    return ""


def group_pnl_records(records: list[PnlRecord], period: str) -> dict[str, list[PnlRecord]]:
    groups: dict[str, list[PnlRecord]] = {}
    for record in records:
        groups.setdefault(period_key(record, period), []).append(record)
    return groups


def _format_pnl_group(key: str, records: list[PnlRecord]) -> str:
    total_pnl = sum((to_decimal(r.pnl) for r in records), Decimal(0))
    total_trades = sum(r.total_trades for r in records)
    lines = [f"{key}: {total_trades} trades, PnL: {format_pnl(total_pnl)}"]
    lines.extend(f"    {r.symbol}: {r.total_trades} trades, {format_pnl(r.pnl)}" for r in records)
    return "\n".join(lines)


async def list_trades(
    client: KripttyClient,
    exchange_id: int,
    symbol: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    per_page: int | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
) -> str:
    try:
        page = await client.list_trades(
            exchange_id,
            symbol=symbol,
            from_date=from_date,
            to_date=to_date,
            per_page=per_page,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ApiError as e:
        return api_error_message(e, "fetching trades")

    if not page.data:
        suffix = f" with symbol {symbol}" if symbol else ""
        return f"No trades found for exchange {exchange_id}{suffix}."

    meta = page.meta
    trades = "\n".join(_format_trade(t) for t in page.data)
    return (
        f"Trades for Exchange {exchange_id} (Page {meta.current_page}/{meta.last_page}, Total: {meta.total}):\n\n"
        f"{trades}\n\n"
        f"Pagination: Showing {meta.from_}-{meta.to} of {meta.total} trades"
    )


async def get_trade(client: KripttyClient, trade_id: int) -> str:
    try:
        trade = await client.get_trade(trade_id)
    except ApiError as e:
        return api_error_message(e, "fetching trade", not_found=f"Trade with ID {trade_id} not found.")
    return _format_trade_detailed(trade)


async def list_trade_symbols(client: KripttyClient, exchange_id: int) -> str:
    try:
        symbols = await client.list_trade_symbols(exchange_id)
    except ApiError as e:
        return api_error_message(e, "fetching trade symbols")

    if not symbols:
        return f"No traded symbols found for exchange {exchange_id}."

    listing = "\n".join(f"  - {s}" for s in symbols)
    return f"Traded Symbols for Exchange {exchange_id} (Total: {len(symbols)}):\n\n{listing}"


async def get_pnl_stats(
    client: KripttyClient,
    exchange_id: int,
    period: str | None = None,
    month: int | None = None,
    year: int | None = None,
) -> str:
    try:
        stats = await client.get_pnl_stats(exchange_id, period=period, month=month, year=year)
    except ApiError as e:
        return api_error_message(e, "fetching P&L statistics")

    global_line = f"Global PnL (All Time): {format_pnl(stats.global_pnl)}"

    if not stats.records:
        return (
            f"No P&L statistics found for exchange {exchange_id} with period {stats.period}.\n\n"
            f"{global_line}"
        )

    groups = group_pnl_records(stats.records, stats.period)
    body = "\n\n".join(_format_pnl_group(key, records) for key, records in groups.items())
    return f"P&L Statistics for Exchange {exchange_id} ({stats.period}):\n\n{body}\n\n{global_line}"
