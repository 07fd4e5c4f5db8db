"""
duopool TOML Configuration Loader

Loads duopool.toml with environment variable overrides.
Each section is a dataclass with from_dict + apply_env.

Environment variable mapping:
    [pool] token_a          → DUOPOOL_TOKEN_A
    [pool] token_b          → DUOPOOL_TOKEN_B
    [pool] address          → DUOPOOL_POOL_ADDRESS
    [pool] strict_swap_pull → DUOPOOL_STRICT_SWAP_PULL
    [logging] level         → DUOPOOL_LOG_LEVEL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import DEFAULT_POOL_ADDRESS, DEFAULT_TOKEN_A, DEFAULT_TOKEN_B, parse_bool
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(value: str) -> bool:
    parsed = parse_bool(value)
    if not isinstance(parsed, bool):
        raise ConfigurationError(f"Expected True/False, got {value!r}")
    return parsed


@dataclass
class PoolSectionConfig:
    """[pool] section."""
    token_a: str = DEFAULT_TOKEN_A
    token_b: str = DEFAULT_TOKEN_B
    address: str = DEFAULT_POOL_ADDRESS
    strict_swap_pull: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolSectionConfig":
        return cls(
            token_a=data.get("token_a", DEFAULT_TOKEN_A),
            token_b=data.get("token_b", DEFAULT_TOKEN_B),
            address=data.get("address", DEFAULT_POOL_ADDRESS),
            strict_swap_pull=data.get("strict_swap_pull", True),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("DUOPOOL_TOKEN_A"):
            self.token_a = v
        if v := os.environ.get("DUOPOOL_TOKEN_B"):
            self.token_b = v
        if v := os.environ.get("DUOPOOL_POOL_ADDRESS"):
            self.address = v
        if v := os.environ.get("DUOPOOL_STRICT_SWAP_PULL"):
            self.strict_swap_pull = _env_bool(v)


@dataclass
class LoggingSectionConfig:
    """[logging] section."""
    level: str = "INFO"
    file_output: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSectionConfig":
        return cls(
            level=str(data.get("level", "INFO")).upper(),
            file_output=data.get("file_output", False),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("DUOPOOL_LOG_LEVEL"):
            self.level = v.upper()


@dataclass
class PoolConfig:
    """Top-level configuration."""
    pool: PoolSectionConfig = field(default_factory=PoolSectionConfig)
    logging: LoggingSectionConfig = field(default_factory=LoggingSectionConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolConfig":
        return cls(
            pool=PoolSectionConfig.from_dict(data.get("pool", {})),
            logging=LoggingSectionConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "PoolConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides applied).
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.pool.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if not self.pool.token_a or not self.pool.token_b:
            raise ConfigurationError("token_a and token_b must be set")
        if self.pool.token_a == self.pool.token_b:
            raise ConfigurationError(f"token_a and token_b must differ: {self.pool.token_a}")
        if not self.pool.address:
            raise ConfigurationError("pool address must be set")
        if not isinstance(self.pool.strict_swap_pull, bool):
            raise ConfigurationError("strict_swap_pull must be a boolean")
        if not isinstance(self.logging.file_output, bool):
            raise ConfigurationError("file_output must be a boolean")
        if self.logging.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.logging.level}")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool": {
                "token_a": self.pool.token_a,
                "token_b": self.pool.token_b,
                "address": self.pool.address,
                "strict_swap_pull": self.pool.strict_swap_pull,
            },
            "logging": {
                "level": self.logging.level,
                "file_output": self.logging.file_output,
            },
        }


def load_config(path: Optional[str] = None) -> PoolConfig:
    """
    Load pool configuration.

    Resolution order:
        1. Explicit *path* argument
        2. DUOPOOL_CONFIG env var
        3. ./duopool.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("DUOPOOL_CONFIG", "duopool.toml")

    cfg = PoolConfig.from_file(path)
    cfg.validate()
    return cfg
