"""
Enactor CLI

Command-line interface for running changesets against EVM networks,
either with the local deployer key or as timelock proposals.

Commands:
  run     - Capture a changeset file and enact it
  nonce   - Show the deployer's pending nonce on a network
  whoami  - Show current deployer address
"""

from __future__ import annotations

import logging
import sys

import click

from .signing.eth import get_address, load_private_key


# ============ Constants ============

VERSION = "0.3.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="enactor")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug)")
def cli(verbose: int) -> None:
    """Enactor - run a changeset with a key or as a timelock proposal."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# ============ Top-level Commands ============

from .commands.nonce import nonce
from .commands.run import run

cli.add_command(run)
cli.add_command(nonce)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show current deployer identity."""
    try:
        pk = load_private_key()
        address = get_address(pk)
        click.echo(f"Address: {address}")
    except (ValueError, FileNotFoundError):
        click.echo("No deployer key found.")
        click.echo("Set PRIVATE_KEY in the environment or in ~/.enactor/.env.")
        sys.exit(1)


# ============ Entry Points ============


def main() -> None:
    """Enactor CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
