"""
Client configuration from the environment.

Values come from process environment variables, optionally seeded from a
dotenv file (~/.txpipe/.env by default).  Existing environment variables
win over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from .errors import ConfigError
from .identity.keys import TXPIPE_ENV

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_RPC_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_FALLBACK_GAS_PRICE = 1_000_000_000  # 1 gwei


@dataclass(frozen=True)
class ClientConfig:
    rpc_url: str = DEFAULT_RPC_URL
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    fallback_gas_price: int = DEFAULT_FALLBACK_GAS_PRICE

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ConfigError("rpc_url must not be empty")
        for name in ("rpc_timeout", "receipt_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be > 0")
        if self.poll_interval < 0:
            raise ConfigError("poll_interval must be >= 0")
        if self.fallback_gas_price < 0:
            raise ConfigError("fallback_gas_price must be >= 0")

    @classmethod
    def from_mapping(cls, env: Mapping[str, Optional[str]]) -> "ClientConfig":
        return cls(
            rpc_url=env.get("TXPIPE_RPC_URL") or DEFAULT_RPC_URL,
            rpc_timeout=_number(env, "TXPIPE_RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT, float),
            receipt_timeout=_number(env, "TXPIPE_RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT, float),
            poll_interval=_number(env, "TXPIPE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL, float),
            fallback_gas_price=_number(
                env, "TXPIPE_FALLBACK_GAS_PRICE", DEFAULT_FALLBACK_GAS_PRICE, int
            ),
        )

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "ClientConfig":
        """
        Load configuration.

        Args:
            env_path: Path to a dotenv file (default: ~/.txpipe/.env)

        Raises:
            ConfigError: If a value cannot be parsed
        """
        env_path = env_path or TXPIPE_ENV
        merged: dict[str, Optional[str]] = {}
        if env_path.exists():
            merged.update(dotenv_values(env_path))
        merged.update(os.environ)
        return cls.from_mapping(merged)


def _number(env: Mapping[str, Optional[str]], key: str, default, kind):
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{key} is not a valid {kind.__name__}: {raw!r}") from exc
