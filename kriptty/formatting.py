# =============================================================================
# kriptty/formatting.py  -  Shared Rendering Helpers
# =============================================================================
#
# Every handler returns plain text.  The helpers here keep that text
# consistent across the five resource families:
#   - label tables for the short codes the API uses (lm/sm, grid modes, risk)
#   - how missing values, flags and pnl figures are written
#   - how an ApiError becomes a sentence
# =============================================================================

from decimal import Decimal
from typing import Any

from kriptty.client import ApiError

BOT_MODE_LABELS: dict[str, str] = {
    "n": "Normal",
    "m": "Manual",
    "gs": "Graceful Stop",
    "t": "Take Profit Only",
    "p": "Panic",
}

GRID_MODE_LABELS: dict[str, str] = {
    "recursive": "Recursive",
    "neat": "Neat",
    "static": "Static",
    "clock": "Clock",
    "custom": "Custom",
}

RISK_MODE_LABELS: dict[str, str] = {
    "1": "Conservative",
    "2": "Moderate",
    "3": "Kamikaze",
}


def bot_mode_label(code: str) -> str:
    return BOT_MODE_LABELS.get(code, code)


def grid_mode_label(code: str) -> str:
    return GRID_MODE_LABELS.get(code, code)


def risk_mode_label(code: str) -> str:
    return RISK_MODE_LABELS.get(code, code)


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def or_default(value: Any, default: str = "N/A") -> Any:
    """Return `value`, or `default` when it is empty (None, "", 0)."""
    return value if value else default


def format_pnl(value: str | Decimal | int | float | None) -> str:
    """Render a pnl figure with 4 decimals and an explicit sign.

    Non-negative values get a literal "+"; negative ones keep their minus.
    A missing value counts as zero.

        >>> format_pnl("1.25")
        '+1.2500'
        >>> format_pnl("-0.25")
        '-0.2500'
    """
    amount = to_decimal(value)
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{abs(amount):.4f}"


def to_decimal(value: str | Decimal | int | float | None) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_mapping(entries: dict[str, str], indent: str = "  ") -> str:
    """One "- key: label" line per entry, in the API's order."""
    return "\n".join(f"{indent}- {key}: {label}" for key, label in entries.items())


def api_error_message(error: ApiError, doing: str, not_found: str | None = None) -> str:
    """Turn an ApiError into the text a tool returns.

    Args:
        error: The structured HTTP error from the gateway.
        doing: What the tool was doing, e.g. "fetching bot".
        not_found: Text to return for a 404.  Collection endpoints leave
            this unset and report 404 like any other status.
    """
    if error.status == 404 and not_found is not None:
        return not_found
    return f"Error {doing}: {error.message}"
