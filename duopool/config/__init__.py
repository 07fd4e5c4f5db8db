"""
duopool Configuration

Loads duopool.toml. Environment variables override TOML values.
"""

from .loader import (
    PoolConfig,
    PoolSectionConfig,
    LoggingSectionConfig,
    load_config,
)

__all__ = [
    "PoolConfig",
    "PoolSectionConfig",
    "LoggingSectionConfig",
    "load_config",
]
