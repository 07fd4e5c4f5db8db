#!/usr/bin/env python3
"""
duopool CLI

Command-line quoting and simulation for a constant-product pool.

Usage:
    duopool amount-out <amount_in> <reserve_in> <reserve_out>
    duopool price <reserve_x> <reserve_y>
    duopool simulate --deposit A B [--swap AMOUNT] [--reverse] [--config FILE]
    duopool show-config [--config FILE]
"""

import json
from typing import Optional

import click

from duopool.config import load_config
from duopool.constants import PRICE_SCALE
from duopool.exceptions import DuopoolException
from duopool.logger import LogManager
from duopool.pool import ConstantProductPool, get_amount_out, spot_price
from duopool.tokens import Token, TokenError

SIM_MINTER = "minter"
SIM_PROVIDER = "provider"
SIM_TRADER = "trader"


def format_price(price: int) -> str:
    """Render a 10**18-scaled price as a decimal string."""
    whole, frac = divmod(price, PRICE_SCALE)
    frac_str = f"{frac:018d}".rstrip("0")
    return f"{whole}.{frac_str}" if frac_str else str(whole)


@click.group()
@click.version_option(version="1.0.0", prog_name="duopool")
def cli():
    """duopool - two-asset constant-product pool."""
    pass


@cli.command("amount-out")
@click.argument("amount_in", type=int)
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
def amount_out(amount_in: int, reserve_in: int, reserve_out: int):
    """Quote the output of an exact-input swap."""
    try:
        click.echo(get_amount_out(amount_in, reserve_in, reserve_out))
    except DuopoolException as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("reserve_x", type=int)
@click.argument("reserve_y", type=int)
@click.option("--raw", is_flag=True, help="Print the 10**18-scaled integer")
def price(reserve_x: int, reserve_y: int, raw: bool):
    """Price of X in units of Y for the given reserves."""
    try:
        value = spot_price(reserve_x, reserve_y)
    except DuopoolException as e:
        raise click.ClickException(str(e))
    click.echo(value if raw else format_price(value))


@cli.command()
@click.option("--config", "config_path", type=click.Path(), default=None, help="duopool.toml path")
@click.option("--deposit", nargs=2, type=int, required=True, help="Initial deposit of A and B")
@click.option("--swap", "swap_amount", type=int, default=None, help="Swap this amount after depositing")
@click.option("--reverse", is_flag=True, help="Swap B for A instead of A for B")
def simulate(config_path: Optional[str], deposit, swap_amount: Optional[int], reverse: bool):
    """Run a deposit (and optional swap) on an in-memory pool."""
    try:
        cfg = load_config(config_path)
    except DuopoolException as e:
        raise click.ClickException(str(e))
    LogManager().configure(
        log_level=cfg.logging.level,
        file_output=cfg.logging.file_output,
        force=True,
    )

    token_a = Token(name=cfg.pool.token_a, symbol=cfg.pool.token_a, deployer=SIM_MINTER)
    token_b = Token(name=cfg.pool.token_b, symbol=cfg.pool.token_b, deployer=SIM_MINTER)
    pool = ConstantProductPool.from_config(cfg, token_a, token_b)
    deadline = 2 ** 63 - 1

    amount_a, amount_b = deposit
    try:
        for token, amount in ((token_a, amount_a), (token_b, amount_b)):
            # non-positive deposits are left for the pool to reject
            if amount > 0:
                token.mint(SIM_MINTER, SIM_PROVIDER, amount)
                token.approve(SIM_PROVIDER, pool.address, amount)
        added = pool.add_liquidity(
            SIM_PROVIDER, pool.token_a, pool.token_b,
            amount_a, amount_b, 0, 0, SIM_PROVIDER, deadline,
        )
        result = {"addLiquidity": {
            "amountA": added.amount_a,
            "amountB": added.amount_b,
            "liquidity": added.liquidity,
        }}

        if swap_amount is not None:
            path = [pool.token_b, pool.token_a] if reverse else [pool.token_a, pool.token_b]
            token_in = token_b if reverse else token_a
            if swap_amount > 0:
                token_in.mint(SIM_MINTER, SIM_TRADER, swap_amount)
                token_in.approve(SIM_TRADER, pool.address, swap_amount)
            amounts = pool.swap_exact_tokens_for_tokens(
                SIM_TRADER, swap_amount, 0, path, SIM_TRADER, deadline,
            )
            result["swap"] = {"path": path, "amounts": amounts}
    except (DuopoolException, TokenError) as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")

    result["pool"] = pool.to_dict()
    click.echo(json.dumps(result, indent=2))


@cli.command("show-config")
@click.option("--config", "config_path", type=click.Path(), default=None, help="duopool.toml path")
def show_config(config_path: Optional[str]):
    """Print the effective configuration."""
    try:
        cfg = load_config(config_path)
    except DuopoolException as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(cfg.to_dict(), indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()
