"""
Deployer Group - write a changeset once, run it with a key or as a proposal.

Contract-interaction code asks the group for a transactor per network and
"sends" transactions through it.  Nothing is sent: every transaction is
signed with a simulated nonce and recorded in the current deployment
context.  ``enact()`` then either broadcasts the recorded transactions
with the deployer key, or, when a ``GovernanceConfig`` is set, turns them
into timelock proposals.

Example:

    group = DeployerGroup(env, state, governance).with_deployment_context("Curse")
    rmn = BoundContract(rmn_address, rmn_abi, group.get_deployer(selector))
    rmn.transact("curse", subject)
    output = group.enact()

The group assumes a single caller: two groups (or threads) capturing for
the same account will hand out the same nonces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..chain.rpc import RpcClient
from ..chain.tx import CapturedTransaction, TransactMode, TransactOpts, Transactor
from ..errors import NonceResolutionError, RpcError, SigningError
from ..signing.eth import SimulatedSigner
from .context import DeploymentContext, collect
from .environment import ChainState, Environment
from .executor import execute
from .proposal import ChangesetOutput, build_proposals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GovernanceConfig:
    """Presence of this config switches the group to proposal mode."""
    min_delay: timedelta


class RecordingTransactor(Transactor):
    """
    Transactor that signs and records instead of sending.

    The nonce of each transaction is ``starting_nonce`` plus the number of
    transactions already captured for the network in the whole context
    stack.  The count is taken on every call so forks between two
    signatures cannot produce a gap or a reuse.
    """

    def __init__(
        self,
        network: int,
        client: RpcClient,
        opts: TransactOpts,
        starting_nonce: int,
        context: DeploymentContext,
    ) -> None:
        super().__init__(network, client, opts.with_changes(mode=TransactMode.CAPTURE, nonce=starting_nonce))
        self.starting_nonce = starting_nonce
        self.context = context

    def captured_count(self) -> int:
        return sum(c.transaction_count(self.network) for c in self.context.flatten())

    def next_nonce(self) -> int:
        return self.starting_nonce + self.captured_count()

    def record(self, captured: CapturedTransaction) -> None:
        self.context.append(captured)
        logger.debug(
            "Captured transaction to %s on network %s with nonce %s in %r",
            captured.to,
            self.network,
            captured.nonce,
            self.context.description,
        )

    def send(self, captured: CapturedTransaction) -> dict:
        raise SigningError("a recording transactor never broadcasts; call DeployerGroup.enact()")


class DeployerGroup:
    def __init__(
        self,
        env: Environment,
        state: ChainState,
        governance: Optional[GovernanceConfig] = None,
        description: str = "",
        context: Optional[DeploymentContext] = None,
    ) -> None:
        self.env = env
        self.state = state
        self.governance = governance
        self.context = context if context is not None else DeploymentContext(description)

    def __repr__(self) -> str:
        mode = "proposal" if self.governance is not None else "deployer"
        return f"DeployerGroup({self.context.description!r}, mode={mode})"

    def with_deployment_context(self, description: str) -> "DeployerGroup":
        """A group sharing everything with this one except a forked context."""
        return DeployerGroup(
            self.env,
            self.state,
            governance=self.governance,
            context=self.context.fork(description),
        )

    def get_deployer(self, selector: int, nonce: Optional[int] = None) -> RecordingTransactor:
        """
        Signing handle for ``selector``.

        Args:
            selector: Network to sign for
            nonce: Starting nonce; defaults to the deployer key's configured
                nonce, then to the account's pending nonce on the network

        Raises:
            NetworkNotFoundError: Unknown network
            NonceResolutionError: The pending nonce lookup failed
            SigningError: The gas price or chain id lookup failed
        """
        network = self.env.network(selector)
        key = network.deployer_key

        if self.governance is not None:
            timelock = self.state.chain(selector).timelock
            opts = TransactOpts(
                signer=SimulatedSigner(timelock),
                gas_limit=key.gas_limit,
                gas_price=0,
                chain_id=key.chain_id,
            )
        else:
            opts = key

        if nonce is None:
            nonce = opts.nonce
        if nonce is None:
            try:
                nonce = network.client.get_pending_nonce(opts.from_address)
            except RpcError as exc:
                raise NonceResolutionError(f"could not get nonce for deployer {opts.from_address}: {exc}") from exc

        if opts.gas_price is None:
            try:
                opts = opts.with_changes(gas_price=network.client.get_gas_price())
            except RpcError as exc:
                raise SigningError(f"could not get gas price on network {selector}: {exc}") from exc

        if opts.chain_id is None:
            try:
                opts = opts.with_changes(chain_id=network.client.get_chain_id())
            except RpcError as exc:
                raise SigningError(f"could not get chain id on network {selector}: {exc}") from exc

        logger.info("Deployer for network %s is %s, starting nonce %d", selector, opts.from_address, nonce)
        return RecordingTransactor(
            selector,
            network.client,
            opts,
            starting_nonce=nonce,
            context=self.context,
        )

    def contexts(self) -> list[DeploymentContext]:
        return self.context.flatten()

    def transactions(self) -> dict[int, list[CapturedTransaction]]:
        return collect(self.contexts())

    def transaction_count(self, selector: int) -> int:
        return len(self.transactions().get(selector, []))

    def enact(self) -> ChangesetOutput:
        """
        Realize every captured transaction of the context stack.

        Proposal mode returns all proposals or raises; direct mode stops at
        the first failed transaction, leaving earlier ones on-chain.
        """
        contexts = self.contexts()
        if self.governance is not None:
            return ChangesetOutput(
                proposals=build_proposals(contexts, self.env, self.state, self.governance.min_delay)
            )
        return execute(contexts, self.env)
