"""
Nonce - show where the next captured transaction would start.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ..config import build_environment, load_settings
from ..errors import EnactorError, RpcError


@click.command()
@click.option("--network", "selector", required=True, type=int, help="Network selector")
@click.option(
    "--networks-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Networks JSON file (default: $ENACTOR_NETWORKS)",
)
def nonce(selector: int, networks_file: Optional[Path]) -> None:
    """Show the deployer's pending nonce on a network."""
    try:
        settings = load_settings(networks_path=networks_file)
        env = build_environment(settings)
        network = env.network(selector)
        address = network.deployer_key.from_address
        pending = network.client.get_pending_nonce(address)
    except EnactorError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)
    except RpcError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    click.echo(f"  Network: {network.name} ({selector})")
    click.echo(f"  Deployer: {address}")
    click.echo(f"  Pending nonce: {pending}")
