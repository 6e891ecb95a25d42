# =============================================================================
# kriptty/config.py  -  Process Configuration
# =============================================================================
#
# Two values are needed to reach the API: its base URL and a bearer token.
# Both come from the environment (main.py loads a .env file first), both are
# required, and neither has a default.  A missing value stops the first tool
# call that needs the API; there is no prompt and no fallback.
#
# The settings object is built once and never changes afterwards.
# =============================================================================

import os
from dataclasses import dataclass

API_URL_VAR = "KRIPTTY_API_URL"
API_TOKEN_VAR = "KRIPTTY_API_TOKEN"


class ConfigError(RuntimeError):
    """Raised when a required environment variable is missing or empty."""


def _require_env(name: str) -> str:
    value = os.environ.get(name, "")
    if not value:
        raise ConfigError(f"Missing required environment variable: {name}")
    return value


@dataclass(frozen=True)
class Settings:
    """Connection settings for the Kriptty API."""

    api_url: str                       # e.g. "https://app.kriptty.com/api/v1"
    api_token: str                     # Bearer token, sent on every request

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_url=_require_env(API_URL_VAR),
            api_token=_require_env(API_TOKEN_VAR),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings.  Only tests need this."""
    global _settings
    _settings = None
