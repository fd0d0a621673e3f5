"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from feebot.helpers.constants import BTC_DEFAULT_TIER
from feebot.helpers.errors import ConfigError


# Load environment variables from .env file
load_dotenv()

CREDENTIAL_ENV_KEYS = {
    "app_key": "X_APP_KEY",
    "app_secret": "X_APP_SECRET",
    "access_token": "X_ACCESS_TOKEN",
    "access_secret": "X_ACCESS_SECRET",
}

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})


def get_required_env(key: str) -> str:
    """Get a required environment variable.

    Args:
        key: Environment variable name

    Returns:
        Environment variable value

    Raises:
        ConfigError: If the environment variable is not set or empty

    Example:
        ```python
        from feebot.helpers.config import get_required_env

        app_key = get_required_env("X_APP_KEY")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ConfigError(msg)
    return value


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default

    Example:
        ```python
        from feebot.helpers.config import get_optional_env

        tier = get_optional_env("BTC_TIER", "hourFee")
        ```
    """
    return os.getenv(key, default)


def parse_bool_env(value: str | None) -> bool:
    """Interpret a flag-style environment value (``1``, ``true``, ``yes``, ``on``)."""
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


class XCredentials(BaseModel):
    """OAuth 1.0a user-context credentials for the posting account."""

    app_key: str
    app_secret: str
    access_token: str
    access_secret: str

    model_config = ConfigDict(frozen=True)


class BotConfig(BaseModel):
    """Settings for one metrics run, built once at startup."""

    btc_tier: str = Field(
        default=BTC_DEFAULT_TIER, description="mempool.space fee tier to quote"
    )
    explainer_url: str = Field(
        default="", description="Link appended as a final 'More:' line"
    )
    dry_run: bool = Field(default=False, description="Compose but do not post")

    app_key: str | None = Field(default=None, repr=False)
    app_secret: str | None = Field(default=None, repr=False)
    access_token: str | None = Field(default=None, repr=False)
    access_secret: str | None = Field(default=None, repr=False)

    model_config = ConfigDict(frozen=True)

    def require_credentials(self) -> XCredentials:
        """Return the posting credentials or fail naming the first missing one.

        Raises:
            ConfigError: If any of the four X credentials is unset or empty
        """
        for field_name, env_key in CREDENTIAL_ENV_KEYS.items():
            if not getattr(self, field_name):
                msg = f"{env_key} environment variable is not set"
                raise ConfigError(msg)

        return XCredentials(
            app_key=self.app_key,
            app_secret=self.app_secret,
            access_token=self.access_token,
            access_secret=self.access_secret,
        )


def load_config(
    *, btc_tier: str | None = None, dry_run: bool | None = None
) -> BotConfig:
    """Build the run configuration from the environment.

    Args:
        btc_tier: Optional override for BTC_TIER
        dry_run: Optional override for DRY_RUN

    Returns:
        Immutable configuration record

    Example:
        ```python
        from feebot.helpers.config import load_config

        config = load_config(dry_run=True)
        ```
    """
    credentials = {
        field_name: get_optional_env(env_key)
        for field_name, env_key in CREDENTIAL_ENV_KEYS.items()
    }

    return BotConfig(
        btc_tier=btc_tier or get_optional_env("BTC_TIER") or BTC_DEFAULT_TIER,
        explainer_url=get_optional_env("EXPLAINER_URL", "") or "",
        dry_run=(
            dry_run if dry_run is not None else parse_bool_env(get_optional_env("DRY_RUN"))
        ),
        **credentials,
    )


__all__ = [
    "BotConfig",
    "XCredentials",
    "get_optional_env",
    "get_required_env",
    "load_config",
    "parse_bool_env",
]
