"""
Tests for the duopool command line.
"""

import json

import pytest
from click.testing import CliRunner

from duopool.cli.pool import cli, format_price

QUIET_CONFIG = """
[pool]
token_a = "TKA"
token_b = "TKB"

[logging]
level = "WARNING"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DUOPOOL_CONFIG", "DUOPOOL_TOKEN_A", "DUOPOOL_TOKEN_B",
                 "DUOPOOL_POOL_ADDRESS", "DUOPOOL_STRICT_SWAP_PULL", "DUOPOOL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def quiet_config(tmp_path):
    path = tmp_path / "duopool.toml"
    path.write_text(QUIET_CONFIG)
    return str(path)


class TestFormatPrice:

    def test_whole(self):
        assert format_price(4 * 10 ** 21) == "4000"

    def test_fraction(self):
        assert format_price(25 * 10 ** 16) == "0.25"

    def test_smallest_unit(self):
        assert format_price(1) == "0.000000000000000001"


class TestQuoteCommands:

    def test_amount_out(self, runner):
        result = runner.invoke(cli, ["amount-out", "100", "1000", "4000"])
        assert result.exit_code == 0
        assert result.output.strip() == "363"

    def test_amount_out_empty_reserve(self, runner):
        result = runner.invoke(cli, ["amount-out", "100", "0", "4000"])
        assert result.exit_code != 0
        assert "Insufficient" in result.output

    def test_price(self, runner):
        result = runner.invoke(cli, ["price", "1000", "4000"])
        assert result.exit_code == 0
        assert result.output.strip() == "4"

    def test_price_raw(self, runner):
        result = runner.invoke(cli, ["price", "4000", "1000", "--raw"])
        assert result.output.strip() == str(25 * 10 ** 16)

    def test_price_no_liquidity(self, runner):
        result = runner.invoke(cli, ["price", "0", "4000"])
        assert result.exit_code != 0


class TestSimulate:

    def test_deposit_and_swap(self, runner, quiet_config):
        result = runner.invoke(cli, [
            "simulate", "--config", quiet_config,
            "--deposit", "1000", "4000", "--swap", "100",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["addLiquidity"] == {"amountA": 1000, "amountB": 4000, "liquidity": 2000}
        assert data["swap"] == {"path": ["TKA", "TKB"], "amounts": [100, 363]}
        assert data["pool"]["reserveA"] == 1100
        assert data["pool"]["reserveB"] == 3637
        assert data["pool"]["liquidityBalance"] == {"provider": 2000}

    def test_reverse_swap(self, runner, quiet_config):
        result = runner.invoke(cli, [
            "simulate", "--config", quiet_config,
            "--deposit", "1000", "4000", "--swap", "400", "--reverse",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["swap"]["amounts"] == [400, 90]
        assert (data["pool"]["reserveA"], data["pool"]["reserveB"]) == (910, 4400)

    def test_zero_deposit_fails(self, runner, quiet_config):
        result = runner.invoke(cli, [
            "simulate", "--config", quiet_config, "--deposit", "0", "4000",
        ])
        assert result.exit_code != 0
        assert "NoLiquidityMintedError" in result.output


class TestShowConfig:

    def test_show_config(self, runner, quiet_config):
        result = runner.invoke(cli, ["show-config", "--config", quiet_config])
        assert result.exit_code == 0
        assert json.loads(result.output)["logging"]["level"] == "WARNING"

    def test_invalid_config(self, runner, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[pool]\ntoken_a = "X"\ntoken_b = "X"\n')
        result = runner.invoke(cli, ["show-config", "--config", str(path)])
        assert result.exit_code != 0
        assert "differ" in result.output
