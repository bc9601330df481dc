"""
Environment and chain state consumed by the deployer group.

``Environment`` holds what is needed to talk to each network (RPC client
and deployer key).  ``ChainState`` holds the governance contracts deployed
on each network (timelock, proposer MCM).  Both are owned by the caller;
the deployer group only reads them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..chain.abi import MANY_CHAIN_MULTISIG_ABI
from ..chain.rpc import DEFAULT_POLL_INTERVAL, DEFAULT_RECEIPT_TIMEOUT, RpcClient
from ..chain.tx import TransactOpts
from ..errors import NetworkNotFoundError
from ..utils import to_checksum_address

logger = logging.getLogger(__name__)


@dataclass
class Network:
    """
    One network in the environment.

    Attributes:
        selector: Network identifier used as key everywhere
        name: Human readable name
        client: RPC client for nonce lookup, broadcast and receipts
        deployer_key: Signing options of the local deployer account
    """
    selector: int
    name: str
    client: RpcClient
    deployer_key: TransactOpts
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL


@dataclass
class Environment:
    name: str
    networks: dict[int, Network] = field(default_factory=dict)

    def network(self, selector: int) -> Network:
        try:
            return self.networks[selector]
        except KeyError:
            raise NetworkNotFoundError(selector, "environment") from None

    def selectors(self) -> list[int]:
        return sorted(self.networks)


class ManyChainMultiSig:
    """Handle on a proposer MCM contract."""

    def __init__(self, address: str, client: Optional[RpcClient] = None) -> None:
        self.address = to_checksum_address(address)
        self.client = client

    def __repr__(self) -> str:
        return f"ManyChainMultiSig({self.address})"

    def get_op_count(self) -> int:
        """Number of operations already executed by this MCM."""
        if self.client is None:
            raise RuntimeError(f"No RPC client bound to MCM {self.address}")
        return int(self.client.read_contract(self.address, MANY_CHAIN_MULTISIG_ABI, "getOpCount") or 0)


@dataclass
class ChainContracts:
    timelock: str
    proposer_mcm: ManyChainMultiSig


@dataclass
class ChainState:
    chains: dict[int, ChainContracts] = field(default_factory=dict)

    def chain(self, selector: int) -> ChainContracts:
        try:
            return self.chains[selector]
        except KeyError:
            raise NetworkNotFoundError(selector, "chain state") from None


def build_timelock_address_per_chain(env: Environment, state: ChainState) -> dict[int, str]:
    """Timelock address for every environment network that has governance contracts."""
    timelocks: dict[int, str] = {}
    for selector in env.selectors():
        contracts = state.chains.get(selector)
        if contracts is None:
            logger.debug("Network %s has no governance contracts", selector)
            continue
        timelocks[selector] = to_checksum_address(contracts.timelock)
    return timelocks


def build_proposer_per_chain(env: Environment, state: ChainState) -> dict[int, ManyChainMultiSig]:
    return {
        selector: state.chains[selector].proposer_mcm
        for selector in env.selectors()
        if selector in state.chains
    }
