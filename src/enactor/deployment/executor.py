"""
Direct execution of captured transactions with the deployer key.

Transactions are sent strictly one at a time, each confirmed before the
next: context order first, then network, then capture order.  The first
failure stops everything and nothing already mined is undone.
"""

from __future__ import annotations

import logging

from ..chain.tx import broadcast_and_confirm
from .context import DeploymentContext
from .environment import Environment
from .proposal import ChangesetOutput

logger = logging.getLogger(__name__)


def execute(contexts: list[DeploymentContext], env: Environment) -> ChangesetOutput:
    sent = 0
    for context in contexts:
        for selector, txs in context.transactions.items():
            network = env.network(selector)
            for tx in txs:
                broadcast_and_confirm(
                    network.client,
                    tx,
                    receipt_timeout=network.receipt_timeout,
                    poll_interval=network.poll_interval,
                )
                sent += 1
        logger.info("Deployment context %r executed", context.description)

    logger.info("Executed %d transaction(s) with the deployer key", sent)
    return ChangesetOutput()
