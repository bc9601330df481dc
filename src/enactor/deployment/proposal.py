"""
Proposal assembly - turn captured transactions into timelock proposals.

Each non-empty deployment context becomes one MCMS-with-timelock proposal
holding one batch per network.  When several proposals are produced in a
single pass, the starting op count of each one is chained from the
previous proposal, since none of them has been executed yet when the
next one is built.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Any, Iterable, Optional

from ..errors import ProposalBuildError
from ..utils import format_duration, to_checksum_address
from .context import DeploymentContext
from .environment import (
    ChainState,
    Environment,
    ManyChainMultiSig,
    build_proposer_per_chain,
    build_timelock_address_per_chain,
)

logger = logging.getLogger(__name__)

PROPOSAL_VERSION = "1"
DEFAULT_VALID_UNTIL = timedelta(hours=72)


@dataclass(frozen=True)
class Operation:
    to: str
    data: str
    value: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"to": self.to, "data": self.data, "value": self.value}


@dataclass(frozen=True)
class BatchChainOperation:
    chain_identifier: int
    batch: list[Operation]

    def to_dict(self) -> dict[str, Any]:
        return {
            "chainIdentifier": self.chain_identifier,
            "batch": [op.to_dict() for op in self.batch],
        }


@dataclass(frozen=True)
class ChainMetadata:
    starting_op_count: int
    mcm_address: str

    def to_dict(self) -> dict[str, Any]:
        return {"startingOpCount": self.starting_op_count, "mcmAddress": self.mcm_address}


@dataclass(frozen=True)
class TimelockProposal:
    """An MCMS proposal scheduling batches on the timelock of each network."""
    description: str
    min_delay: str
    valid_until: int
    chain_metadata: dict[int, ChainMetadata]
    timelock_addresses: dict[int, str]
    transactions: list[BatchChainOperation]
    version: str = PROPOSAL_VERSION
    operation: str = "schedule"
    override_previous_root: bool = False
    signatures: list[str] = field(default_factory=list)

    def batch_for(self, chain: int) -> list[Operation]:
        ops: list[Operation] = []
        for batch in self.transactions:
            if batch.chain_identifier == chain:
                ops.extend(batch.batch)
        return ops

    def starting_op_count(self, chain: int) -> int:
        return self.chain_metadata[chain].starting_op_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "validUntil": self.valid_until,
            "signatures": list(self.signatures),
            "overridePreviousRoot": self.override_previous_root,
            "chainMetadata": {str(k): v.to_dict() for k, v in sorted(self.chain_metadata.items())},
            "description": self.description,
            "minDelay": self.min_delay,
            "operation": self.operation,
            "timelockAddresses": {str(k): v for k, v in sorted(self.timelock_addresses.items())},
            "transactions": [batch.to_dict() for batch in self.transactions],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class ChangesetOutput:
    proposals: list[TimelockProposal] = field(default_factory=list)


def build_batches(context: DeploymentContext) -> list[BatchChainOperation]:
    """One batch per network that captured at least one transaction, in first-capture order."""
    batches = []
    for selector, txs in context.transactions.items():
        if not txs:
            continue
        ops = []
        for tx in txs:
            if tx.to is None:
                raise ProposalBuildError(
                    f"Contract creation (nonce {tx.nonce}, network {selector}) cannot be scheduled on a timelock"
                )
            ops.append(Operation(to=tx.to, data=tx.data, value=tx.value))
        batches.append(BatchChainOperation(chain_identifier=selector, batch=ops))
    return batches


def build_proposal_metadata(
    selectors: Iterable[int],
    proposers: dict[int, ManyChainMultiSig],
) -> dict[int, ChainMetadata]:
    """Read each proposer's live op count as the default starting op count."""
    metadata: dict[int, ChainMetadata] = {}
    for selector in selectors:
        proposer = proposers.get(selector)
        if proposer is None:
            raise ProposalBuildError(f"missing proposer mcm for chain {selector}")
        try:
            op_count = proposer.get_op_count()
        except Exception as exc:
            raise ProposalBuildError(f"failed to get op count for chain {selector}: {exc}") from exc
        metadata[selector] = ChainMetadata(starting_op_count=op_count, mcm_address=proposer.address)
    return metadata


def build_proposal_from_batches(
    timelocks: dict[int, str],
    proposers: dict[int, ManyChainMultiSig],
    batches: list[BatchChainOperation],
    description: str,
    min_delay: timedelta,
    valid_for: timedelta = DEFAULT_VALID_UNTIL,
) -> TimelockProposal:
    if not batches:
        raise ProposalBuildError("no operations in batch")

    selectors = sorted({batch.chain_identifier for batch in batches})
    metadata = build_proposal_metadata(selectors, proposers)

    timelock_addresses: dict[int, str] = {}
    for selector in selectors:
        if selector not in timelocks:
            raise ProposalBuildError(f"missing timelock for chain {selector}")
        timelock_addresses[selector] = to_checksum_address(timelocks[selector])

    return TimelockProposal(
        description=description,
        min_delay=format_duration(min_delay),
        valid_until=int(time.time() + valid_for.total_seconds()),
        chain_metadata=metadata,
        timelock_addresses=timelock_addresses,
        transactions=list(batches),
    )


def chain_starting_op_counts(previous: TimelockProposal, proposal: TimelockProposal) -> TimelockProposal:
    """
    Start ``proposal`` where ``previous`` ends.

    For every network in ``previous``, the starting op count becomes the
    previous start plus the number of operations ``previous`` schedules on
    that network.  Networks ``proposal`` does not touch are carried over
    too, so the chain survives a proposal that skips a network.
    """
    metadata = dict(proposal.chain_metadata)
    timelocks = dict(proposal.timelock_addresses)
    for chain, prev in previous.chain_metadata.items():
        current = metadata.get(chain)
        metadata[chain] = ChainMetadata(
            starting_op_count=prev.starting_op_count + len(previous.batch_for(chain)),
            mcm_address=current.mcm_address if current is not None else prev.mcm_address,
        )
        if chain not in timelocks and chain in previous.timelock_addresses:
            timelocks[chain] = previous.timelock_addresses[chain]
    return replace(proposal, chain_metadata=metadata, timelock_addresses=timelocks)


def build_proposals(
    contexts: list[DeploymentContext],
    env: Environment,
    state: ChainState,
    min_delay: timedelta,
) -> list[TimelockProposal]:
    """
    One proposal per non-empty context, oldest context first.

    Raises:
        ProposalBuildError: Nothing is returned if any context fails
    """
    proposals: list[TimelockProposal] = []
    for context in contexts:
        batches = build_batches(context)
        if not batches:
            logger.warning("No batch was produced from deployment context, skipping proposal: %s", context.description)
            continue

        timelocks = build_timelock_address_per_chain(env, state)
        proposers = build_proposer_per_chain(env, state)

        try:
            proposal = build_proposal_from_batches(timelocks, proposers, batches, context.description, min_delay)
        except ProposalBuildError as exc:
            raise ProposalBuildError(f"failed to build proposal {context.description!r}: {exc}") from exc

        if proposals:
            proposal = chain_starting_op_counts(proposals[-1], proposal)

        logger.info(
            "Built proposal %r for networks %s",
            context.description,
            ", ".join(str(b.chain_identifier) for b in batches),
        )
        proposals.append(proposal)

    return proposals


def _slug(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "proposal"


def write_proposals(proposals: list[TimelockProposal], directory: Path, prefix: Optional[str] = None) -> list[Path]:
    """Write one JSON file per proposal, numbered in emission order."""
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for index, proposal in enumerate(proposals):
        name = f"{prefix + '-' if prefix else ''}{index:02d}-{_slug(proposal.description)}.json"
        path = directory / name
        path.write_text(proposal.to_json() + "\n", encoding="utf-8")
        paths.append(path)
    return paths
