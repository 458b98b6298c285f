"""
Send / Invoke - submit a signed transaction through the pipeline.

``send`` takes raw call data; ``invoke`` packs it from an ABI first.
Both print the outcome, including partial progress when a stage fails.
"""

from __future__ import annotations

import sys
from typing import Any, Optional

import click

from ..errors import PipelineError, TxPipeError
from ..sinks import EchoSink
from .common import (
    die,
    fee_options,
    load_codec,
    open_client,
    parse_args_json,
    print_outcome,
    report_status,
)


def _run(
    ctx: click.Context,
    to: str,
    data: bytes | str,
    value: int,
    gas_price: Optional[int],
    fallback_gas_price: Optional[int],
    dynamic_fee: bool,
    no_wait: bool,
    timeout: Optional[float],
    as_json: bool,
) -> None:
    client = open_client(ctx)
    if not as_json:
        click.echo(f"  Sender: {client.address}")
        click.echo(f"  Target: {to}")
        if value > 0:
            click.echo(f"  Value: {value} wei")
        click.echo("")

    kwargs: dict[str, Any] = {
        "value": value,
        "gas_price": gas_price,
        "fallback_gas_price": fallback_gas_price,
        "dynamic_fee": dynamic_fee,
        "wait": not no_wait,
        "timeout": timeout,
        "sink": None if as_json else EchoSink(),
    }
    with client:
        try:
            outcome = client.submit(to, data, **kwargs)
        except PipelineError as exc:
            click.secho(f"Transaction failed: {exc}", fg="red", err=True)
            if exc.outcome is not None:
                print_outcome(exc.outcome, as_json)
            sys.exit(exc.exit_code)
        except TxPipeError as exc:
            die(str(exc), exc.exit_code)

    print_outcome(outcome, as_json)
    if not as_json:
        report_status(outcome)


@click.command()
@click.option("--to", required=True, help="Destination address")
@click.option("--data", default="0x", help="Hex call data")
@fee_options
@click.pass_context
def send(
    ctx: click.Context,
    to: str,
    data: str,
    value: int,
    gas_price: Optional[int],
    fallback_gas_price: Optional[int],
    dynamic_fee: bool,
    no_wait: bool,
    timeout: Optional[float],
    as_json: bool,
) -> None:
    """Send a transaction with raw call data."""
    _run(ctx, to, data, value, gas_price, fallback_gas_price, dynamic_fee, no_wait, timeout, as_json)


@click.command()
@click.option("--to", required=True, help="Target contract address")
@click.option("--abi", "abi_path", required=True, type=click.Path(exists=True), help="ABI or artifact JSON")
@click.option("--function", "func_name", required=True, help="Function name to call")
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
@fee_options
@click.pass_context
def invoke(
    ctx: click.Context,
    to: str,
    abi_path: str,
    func_name: str,
    args_json: str,
    value: int,
    gas_price: Optional[int],
    fallback_gas_price: Optional[int],
    dynamic_fee: bool,
    no_wait: bool,
    timeout: Optional[float],
    as_json: bool,
) -> None:
    """
    Call a contract function in a transaction.

    Sends from your key to the contract.  You pay gas.
    """
    args = parse_args_json(args_json)
    codec = load_codec(abi_path)
    try:
        data = codec.pack(func_name, *args)
    except TxPipeError as exc:
        die(str(exc), exc.exit_code)

    if not as_json:
        click.echo(f"  Function: {func_name}")
        click.echo(f"  Args: {args}")
    _run(ctx, to, data, value, gas_price, fallback_gas_price, dynamic_fee, no_wait, timeout, as_json)
