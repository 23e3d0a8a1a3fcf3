"""Application settings loaded from the environment.

All runtime configuration lives here; modules call :func:`get_settings`
instead of reading ``os.environ`` themselves. Tests build their own snapshot
with :func:`load_settings`.
"""
import os
from decimal import Decimal
from functools import lru_cache
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field

from nekoha_booking.domain.enums import RoomType

_RATE_KEYS: Dict[RoomType, str] = {
    RoomType.STANDARD: "NEKOHA_RATE_STANDARD",
    RoomType.STANDARD_CONNECTING: "NEKOHA_RATE_STANDARD_CONNECTING",
    RoomType.DELUX: "NEKOHA_RATE_DELUX",
    RoomType.SUITE: "NEKOHA_RATE_SUITE",
}

_DEFAULT_RATES: Dict[RoomType, str] = {
    RoomType.STANDARD: "350",
    RoomType.STANDARD_CONNECTING: "600",
    RoomType.DELUX: "500",
    RoomType.SUITE: "800",
}


class Settings(BaseModel):
    """Immutable snapshot of configuration values"""
    secret_key: str
    token_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=30, ge=1)
    log_level: str = "INFO"
    currency: str = "THB"
    history_limit: int = Field(default=50, ge=1)
    admin_username: str = "admin"
    admin_password: str = "admin123"
    default_rates: Dict[RoomType, Decimal]

    class Config:
        frozen = True


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Load configuration from the environment and fall back to defaults"""
    if env is None:
        env = os.environ

    default_rates = {
        room_type: Decimal(env.get(key, _DEFAULT_RATES[room_type]))
        for room_type, key in _RATE_KEYS.items()
    }

    return Settings(
        secret_key=env.get("NEKOHA_SECRET_KEY", "change-me-in-production"),
        token_algorithm=env.get("NEKOHA_TOKEN_ALGORITHM", "HS256"),
        access_token_expire_minutes=int(env.get("NEKOHA_TOKEN_EXPIRE_MINUTES", "30")),
        log_level=env.get("NEKOHA_LOG_LEVEL", "INFO"),
        currency=env.get("NEKOHA_CURRENCY", "THB"),
        history_limit=int(env.get("NEKOHA_HISTORY_LIMIT", "50")),
        admin_username=env.get("NEKOHA_ADMIN_USERNAME", "admin"),
        admin_password=env.get("NEKOHA_ADMIN_PASSWORD", "admin123"),
        default_rates=default_rates,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached :class:`Settings` instance"""
    return load_settings()
