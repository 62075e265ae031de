"""Environment-driven configuration for the relay."""

import os
from dataclasses import dataclass, field

DEFAULT_BASE_URL = "https://api.weatherbit.io/v2.0"
DEFAULT_CACHE_TTL = 1800  # seconds, 30 min
DEFAULT_EXPIRES_MINUTES = 25
DEFAULT_UPSTREAM_TIMEOUT = 10.0

_TRUTHY = ("true", "1", "yes", "on")


@dataclass(frozen=True)
class RelayConfig:
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    allowed_origins: tuple[str, ...] = field(default_factory=tuple)
    debug: bool = False
    cache_ttl: int = DEFAULT_CACHE_TTL
    expires_minutes: int = DEFAULT_EXPIRES_MINUTES
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT


def _parse_origins(raw: str) -> tuple[str, ...]:
    return tuple(o.strip().rstrip("/") for o in raw.split(",") if o.strip())


def _parse_number(name: str, raw: str, cast, allow_zero: bool = True):
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0 or (value == 0 and not allow_zero):
        qualifier = "negative" if allow_zero else "zero or negative"
        raise ValueError(f"{name} must not be {qualifier}, got {raw!r}")
    return value


def load_config(environ: dict | None = None) -> RelayConfig:
    """Build a RelayConfig from *environ* (defaults to ``os.environ``).

    Raises ValueError when a numeric setting cannot be parsed.
    """
    env = os.environ if environ is None else environ
    return RelayConfig(
        api_key=env.get("WB_KEY", "").strip(),
        base_url=env.get("WEATHERBIT_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        allowed_origins=_parse_origins(env.get("ALLOWED_ORIGINS", "")),
        debug=env.get("RELAY_DEBUG", "").strip().lower() in _TRUTHY,
        cache_ttl=_parse_number("CACHE_TTL", env.get("CACHE_TTL", str(DEFAULT_CACHE_TTL)), int),
        expires_minutes=_parse_number(
            "EXPIRES_MINUTES", env.get("EXPIRES_MINUTES", str(DEFAULT_EXPIRES_MINUTES)), int
        ),
        upstream_timeout=_parse_number(
            "UPSTREAM_TIMEOUT",
            env.get("UPSTREAM_TIMEOUT", str(DEFAULT_UPSTREAM_TIMEOUT)),
            float,
            allow_zero=False,
        ),
    )
