"""
Runtime configuration read from the environment (and a local .env file).

Tokens are never hardcoded; when they are absent from the environment and
BROKERBOT_SECRET_ARN is set, the composition root loads them from AWS
Secrets Manager before calling Settings.from_env().
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from brokerbot.domain.errors import ConfigurationError

STOCK_PROVIDERS = ("finnhub", "yfinance")
_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    discord_token: str
    finnhub_token: str = ""
    stock_provider: str = "finnhub"
    crypto_exchange: str = "GEMINI"
    price_feed_max_age: float = 60.0
    quote_timeout: float = 30.0
    upstream_timeout: float = 10.0
    max_concurrency: Optional[int] = None
    alias_table: Optional[str] = None
    aws_region: str = "us-east-1"
    test_mode: bool = False
    port: int = 8080
    log_level: str = "INFO"
    build_version: str = "dev"
    build_time: str = "0"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from *environ* (defaults to os.environ after loading .env).

        Raises:
            ConfigurationError: if a required token is missing or a value is malformed.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        discord_token = environ.get("DISCORD_TOKEN", "").strip()
        finnhub_token = environ.get("FINNHUB_TOKEN", "").strip()
        stock_provider = environ.get("STOCK_PROVIDER", "finnhub").strip().lower()

        if not discord_token:
            raise ConfigurationError("DISCORD_TOKEN is not set")
        if stock_provider not in STOCK_PROVIDERS:
            raise ConfigurationError(
                f"STOCK_PROVIDER must be one of {', '.join(STOCK_PROVIDERS)}, got {stock_provider!r}"
            )
        if stock_provider == "finnhub" and not finnhub_token:
            raise ConfigurationError("FINNHUB_TOKEN is not set")

        quote_timeout = _number(environ, "QUOTE_TIMEOUT_SECONDS", 30.0)
        # Upstream calls must give up before the per-ticker deadline does.
        upstream_timeout = _number(environ, "UPSTREAM_TIMEOUT_SECONDS", min(10.0, quote_timeout / 2))
        if upstream_timeout >= quote_timeout:
            raise ConfigurationError(
                f"UPSTREAM_TIMEOUT_SECONDS ({upstream_timeout:g}) must be less than "
                f"QUOTE_TIMEOUT_SECONDS ({quote_timeout:g})"
            )

        return cls(
            discord_token=discord_token,
            finnhub_token=finnhub_token,
            stock_provider=stock_provider,
            crypto_exchange=environ.get("CRYPTO_EXCHANGE", "GEMINI").strip().upper(),
            price_feed_max_age=_number(environ, "PRICE_FEED_MAX_AGE_SECONDS", 60.0),
            quote_timeout=quote_timeout,
            upstream_timeout=upstream_timeout,
            max_concurrency=int(_number(environ, "MAX_CONCURRENCY", 0)) or None,
            alias_table=environ.get("ALIAS_TABLE") or None,
            aws_region=environ.get("AWS_DEFAULT_REGION", "us-east-1"),
            test_mode=environ.get("TEST_MODE", "").strip().lower() in _TRUE,
            port=int(_number(environ, "PORT", 8080)),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            build_version=environ.get("BUILD_VERSION", "dev"),
            build_time=environ.get("BUILD_TIME", "0"),
        )


def tokens_missing(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True when a token the configured stock provider needs is absent."""
    environ = os.environ if environ is None else environ
    if not environ.get("DISCORD_TOKEN"):
        return True
    provider = environ.get("STOCK_PROVIDER", "finnhub").strip().lower()
    return provider == "finnhub" and not environ.get("FINNHUB_TOKEN")


def _number(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{key} must not be negative, got {raw!r}")
    return value
