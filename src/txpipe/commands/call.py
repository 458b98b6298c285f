from __future__ import annotations

import json

import click

from ..errors import TxPipeError
from .common import die, load_codec, open_client, parse_args_json


def _jsonable(value):
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@click.command()
@click.option("--to", required=True, help="Contract address")
@click.option("--abi", "abi_path", required=True, type=click.Path(exists=True), help="ABI or artifact JSON")
@click.option("--function", "func_name", required=True, help="View function name")
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
@click.pass_context
def call(ctx: click.Context, to: str, abi_path: str, func_name: str, args_json: str) -> None:
    """Read from a contract without sending a transaction."""
    args = parse_args_json(args_json)
    codec = load_codec(abi_path)

    with open_client(ctx) as client:
        try:
            values = client.call_function(to, codec, func_name, *args)
        except TxPipeError as exc:
            die(str(exc), exc.exit_code)

    click.echo(json.dumps(_jsonable(list(values))))
