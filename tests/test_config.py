"""
Tests for duopool.toml loading and environment overrides.
"""

import pytest

from duopool.config import PoolConfig, load_config
from duopool.exceptions import ConfigurationError

ENV_VARS = (
    "DUOPOOL_CONFIG",
    "DUOPOOL_TOKEN_A",
    "DUOPOOL_TOKEN_B",
    "DUOPOOL_POOL_ADDRESS",
    "DUOPOOL_STRICT_SWAP_PULL",
    "DUOPOOL_LOG_LEVEL",
)

SAMPLE = """
[pool]
token_a = "USD"
token_b = "ETH"
address = "pool-usd-eth"
strict_swap_pull = false

[logging]
level = "debug"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "duopool.toml"
    path.write_text(SAMPLE)
    return path


class TestLoadConfig:

    def test_defaults_when_missing(self, tmp_path):
        cfg = load_config(str(tmp_path / "absent.toml"))
        assert (cfg.pool.token_a, cfg.pool.token_b) == ("TKA", "TKB")
        assert cfg.pool.address == "duopool"
        assert cfg.pool.strict_swap_pull is True
        assert cfg.logging.level == "INFO"

    def test_reads_file(self, config_file):
        cfg = load_config(str(config_file))
        assert (cfg.pool.token_a, cfg.pool.token_b) == ("USD", "ETH")
        assert cfg.pool.address == "pool-usd-eth"
        assert cfg.pool.strict_swap_pull is False
        assert cfg.logging.level == "DEBUG"

    def test_config_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("DUOPOOL_CONFIG", str(config_file))
        assert load_config().pool.token_a == "USD"

    def test_env_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("DUOPOOL_TOKEN_B", "BTC")
        monkeypatch.setenv("DUOPOOL_POOL_ADDRESS", "other")
        monkeypatch.setenv("DUOPOOL_STRICT_SWAP_PULL", "True")
        monkeypatch.setenv("DUOPOOL_LOG_LEVEL", "warning")
        cfg = load_config(str(config_file))
        assert cfg.pool.token_b == "BTC"
        assert cfg.pool.address == "other"
        assert cfg.pool.strict_swap_pull is True
        assert cfg.logging.level == "WARNING"

    def test_bad_env_bool(self, config_file, monkeypatch):
        monkeypatch.setenv("DUOPOOL_STRICT_SWAP_PULL", "maybe")
        with pytest.raises(ConfigurationError):
            load_config(str(config_file))

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[pool\ntoken_a = ")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(str(path))


class TestValidate:

    def test_same_tokens(self, tmp_path):
        path = tmp_path / "same.toml"
        path.write_text('[pool]\ntoken_a = "X"\ntoken_b = "X"\n')
        with pytest.raises(ConfigurationError, match="differ"):
            load_config(str(path))

    def test_non_bool_strict_flag(self):
        cfg = PoolConfig.from_dict({"pool": {"strict_swap_pull": "yes"}})
        with pytest.raises(ConfigurationError, match="boolean"):
            cfg.validate()

    def test_non_bool_file_output(self, tmp_path):
        path = tmp_path / "file_output.toml"
        path.write_text('[logging]\nfile_output = "no"\n')
        with pytest.raises(ConfigurationError, match="file_output"):
            load_config(str(path))

    def test_bad_log_level(self):
        cfg = PoolConfig.from_dict({"logging": {"level": "loud"}})
        with pytest.raises(ConfigurationError, match="log level"):
            cfg.validate()

    def test_empty_address(self):
        cfg = PoolConfig.from_dict({"pool": {"address": ""}})
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_to_dict_round_trip(self, config_file):
        cfg = load_config(str(config_file))
        again = PoolConfig.from_dict(cfg.to_dict())
        assert again == cfg
