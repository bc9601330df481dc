"""
Run - capture a changeset file and enact it.

Without --min-delay the captured transactions are sent with the deployer
key, one at a time.  With --min-delay they become timelock proposals
written as JSON files for the proposal signing tool.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ..changeset import apply_changeset, load_changeset
from ..config import build_chain_state, build_environment, load_settings
from ..deployment.group import DeployerGroup, GovernanceConfig
from ..deployment.proposal import write_proposals
from ..errors import EnactorError
from ..utils import parse_duration


@click.command()
@click.argument("changeset_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--networks-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Networks JSON file (default: $ENACTOR_NETWORKS)",
)
@click.option("--min-delay", default=None, help="Timelock delay, e.g. 24h; enables proposal mode")
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("proposals"),
    show_default=True,
    help="Directory for proposal JSON files",
)
@click.option("--dry-run", is_flag=True, help="Capture only, do not send or write anything")
def run(
    changeset_file: Path,
    networks_file: Optional[Path],
    min_delay: Optional[str],
    out_dir: Path,
    dry_run: bool,
) -> None:
    """Capture CHANGESET_FILE and send it or turn it into proposals."""
    governance: Optional[GovernanceConfig] = None
    if min_delay is not None:
        try:
            governance = GovernanceConfig(min_delay=parse_duration(min_delay))
        except ValueError as exc:
            click.secho(f"ERROR: {exc}", fg="red")
            sys.exit(2)

    try:
        changeset = load_changeset(changeset_file)
        settings = load_settings(networks_path=networks_file)
        env = build_environment(settings)
        state = build_chain_state(settings, env)

        group = DeployerGroup(env, state, governance, description=changeset.contexts[0].description)
        group = apply_changeset(group, changeset)
    except EnactorError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    mode = "proposal" if governance is not None else "deployer key"
    click.echo(f"=== Enactor Run: {changeset.description} ({mode}) ===")
    for context in group.contexts():
        click.echo(f"  [{context.description}]")
        for selector, txs in context.transactions.items():
            for tx in txs:
                click.echo(f"    network {selector}  nonce {tx.nonce}  to {tx.to}  value {tx.value}")
    click.echo("")

    if dry_run:
        click.echo("Dry run: nothing sent.")
        return

    try:
        output = group.enact()
    except EnactorError as exc:
        click.secho(f"FAILED: {exc}", fg="red")
        if governance is None:
            click.echo("Transactions confirmed before the failure stay on-chain.")
        sys.exit(exc.exit_code)

    if governance is None:
        click.secho("SUCCESS: All transactions confirmed!", fg="green")
        return

    paths = write_proposals(output.proposals, out_dir)
    click.secho(f"SUCCESS: {len(paths)} proposal(s) written", fg="green")
    for path in paths:
        click.echo(f"  {path}")
