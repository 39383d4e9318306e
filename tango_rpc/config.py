from __future__ import annotations

import logging
import pickle
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = "%(asctime)-20s %(name)-24s %(levelname)-8s: %(message)s"


class RpcSettings(BaseSettings):
    """
    Endpoint configuration.

    Precedence (highest → lowest): init kwargs, environment variables
    (TANGO_RPC_*, nested with '__', e.g. TANGO_RPC_LOGGING__LEVEL=DEBUG),
    .env file, defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TANGO_RPC_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    codec: Literal["json", "msgpack"] = Field("json", description="Frame encoding on the channel.")
    handshake: bool = Field(True, description="Exchange clientReady/serverReady to track connection state.")
    id_source: Literal["time", "counter"] = Field(
        "time",
        description="Correlation id generator. 'counter' is deterministic but only unique per endpoint.",
    )

    logging: LoggingSettings = LoggingSettings()


@lru_cache(maxsize=16)
def _get_settings_cached(overrides_blob: bytes) -> RpcSettings:
    overrides = pickle.loads(overrides_blob)
    return RpcSettings(**overrides)


def get_settings(**overrides: Any) -> RpcSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    overrides_blob = pickle.dumps(overrides, protocol=pickle.HIGHEST_PROTOCOL)
    return _get_settings_cached(overrides_blob)


def clear_settings_cache() -> None:
    _get_settings_cached.cache_clear()


def configure_logging(settings: RpcSettings) -> None:
    logging.basicConfig(level=settings.logging.level, format=settings.logging.format)
    logging.getLogger("tango_rpc").setLevel(settings.logging.level)
