"""
txpipe CLI

Command-line interface for submitting signed transactions to an
Ethereum-compatible node.

Commands:
  whoami    - Show the sender address for the configured key
  chain-id  - Show the chain id reported by the node
  send      - Send a transaction with raw call data
  invoke    - Send a transaction packed from an ABI
  call      - Read-only contract call
"""

from __future__ import annotations

import logging
from typing import Optional

import click

from . import __version__
from .errors import TxPipeError
from .identity.keys import init_identity, load_private_key
from .commands.common import die, load_config, optional_path
from .node.connector import connect


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=__version__, prog_name="txpipe")
@click.option(
    "--rpc-url",
    envvar="TXPIPE_RPC_URL",
    default=None,
    help="JSON-RPC endpoint (default: from config)",
)
@click.option(
    "--env-file",
    default=None,
    help="dotenv file with PRIVATE_KEY and TXPIPE_* settings (default: ~/.txpipe/.env)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic to stderr")
@click.pass_context
def cli(ctx: click.Context, rpc_url: Optional[str], env_file: Optional[str], verbose: bool) -> None:
    """txpipe - sign and submit transactions to an EVM node."""
    obj = ctx.ensure_object(dict)
    obj["rpc_url"] = rpc_url
    obj["env_file"] = optional_path(env_file)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


# ============ Top-level Commands ============

from .commands.call import call
from .commands.send import invoke, send

cli.add_command(send)
cli.add_command(invoke)
cli.add_command(call)


# ============ Identity ============


@cli.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the sender address."""
    try:
        identity = init_identity(load_private_key(ctx.obj.get("env_file")))
    except TxPipeError as exc:
        die(str(exc), exc.exit_code)
    click.echo(f"Address: {identity.address}")


@cli.command("chain-id")
@click.pass_context
def chain_id(ctx: click.Context) -> None:
    """Show the chain id reported by the node."""
    config = load_config(ctx)
    try:
        conn = connect(config.rpc_url, timeout=config.rpc_timeout, transport=ctx.obj.get("transport"))
    except TxPipeError as exc:
        die(str(exc), exc.exit_code)
    click.echo(f"Endpoint: {conn.endpoint}")
    click.echo(f"Chain ID: {conn.chain_id}")
    conn.close()


# ============ Entry Points ============


def main() -> None:
    """txpipe CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
