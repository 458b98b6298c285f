"""Shared plumbing for CLI commands: client construction and output."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import click

from ..abi import AbiCodec
from ..client import Client
from ..config import ClientConfig
from ..errors import TxPipeError
from ..identity.keys import load_private_key
from ..pipeline import ReceiptStatus, SubmissionOutcome


def die(message: str, exit_code: int = 1) -> NoReturn:
    click.secho(f"ERROR: {message}", fg="red", err=True)
    sys.exit(exit_code)


def load_config(ctx: click.Context) -> ClientConfig:
    obj = ctx.ensure_object(dict)
    try:
        config = ClientConfig.from_env(obj.get("env_file"))
    except TxPipeError as exc:
        die(str(exc), exc.exit_code)
    rpc_url = obj.get("rpc_url")
    if rpc_url:
        config = ClientConfig(
            rpc_url=rpc_url,
            rpc_timeout=config.rpc_timeout,
            receipt_timeout=config.receipt_timeout,
            poll_interval=config.poll_interval,
            fallback_gas_price=config.fallback_gas_price,
        )
    return config


def open_client(ctx: click.Context) -> Client:
    """Build a connected Client from CLI context, or exit with an error."""
    obj = ctx.ensure_object(dict)
    config = load_config(ctx)
    try:
        private_key = load_private_key(obj.get("env_file"))
        return Client.connect(private_key, config=config, transport=obj.get("transport"))
    except TxPipeError as exc:
        die(str(exc), exc.exit_code)


def parse_args_json(args_json: str) -> list[Any]:
    try:
        args = json.loads(args_json)
        if not isinstance(args, list):
            raise ValueError("Args must be a JSON array")
    except (json.JSONDecodeError, ValueError) as exc:
        die(f"Invalid args: {exc}")
    return args


def load_codec(abi_path: str) -> AbiCodec:
    try:
        return AbiCodec.from_file(Path(abi_path))
    except (FileNotFoundError, json.JSONDecodeError, TxPipeError) as exc:
        die(f"Cannot load ABI: {exc}")


def print_outcome(outcome: SubmissionOutcome, as_json: bool = False) -> None:
    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        return

    click.echo("")
    click.echo(f"  Sender:    {outcome.sender}")
    click.echo(f"  Target:    {outcome.to}")
    click.echo(f"  Chain:     {outcome.chain_id}")
    if outcome.nonce is not None:
        click.echo(f"  Nonce:     {outcome.nonce}")
    if outcome.gas_limit is not None:
        click.echo(f"  Gas limit: {outcome.gas_limit}")
    if outcome.gas_price is not None:
        suffix = " (fallback)" if outcome.fallback_price_used else ""
        click.echo(f"  Gas price: {outcome.gas_price}{suffix}")
    if outcome.max_fee_per_gas is not None:
        click.echo(f"  Max fee:   {outcome.max_fee_per_gas}")
        click.echo(f"  Tip:       {outcome.max_priority_fee_per_gas}")
    if outcome.tx_hash:
        click.echo(f"  TX:        {outcome.tx_hash}")
    if outcome.block_number is not None:
        click.echo(f"  Block:     {outcome.block_number}")
    for warning in outcome.warnings:
        click.secho(f"  WARNING: {warning}", fg="yellow")


def report_status(outcome: SubmissionOutcome) -> None:
    """Print a one-line verdict and exit non-zero when reverted."""
    if outcome.status is ReceiptStatus.SUCCESS:
        click.secho("SUCCESS: Transaction confirmed!", fg="green")
    elif outcome.status is ReceiptStatus.REVERTED:
        click.secho("FAILED: Transaction reverted", fg="red")
        sys.exit(1)
    elif outcome.status is ReceiptStatus.PENDING:
        click.secho("SENT: Transaction broadcast, not waiting for receipt", fg="cyan")
    else:
        click.secho("UNKNOWN: No receipt yet; the transaction may still be mined", fg="yellow")


def fee_options(func):
    """Options shared by ``send`` and ``invoke``."""
    options = [
        click.option("--value", default=0, type=int, help="ETH value in wei"),
        click.option("--gas-price", default=None, type=int, help="Fixed gas price in wei"),
        click.option(
            "--fallback-gas-price",
            default=None,
            type=int,
            help="Gas price used if the node cannot suggest one",
        ),
        click.option("--dynamic-fee", is_flag=True, help="Send a fee cap/tip transaction"),
        click.option("--no-wait", is_flag=True, help="Do not wait for the receipt"),
        click.option("--timeout", default=None, type=float, help="Receipt wait timeout (seconds)"),
        click.option("--json", "as_json", is_flag=True, help="Print the outcome as JSON"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def optional_path(value: Optional[str]) -> Optional[Path]:
    return Path(value).expanduser() if value else None
