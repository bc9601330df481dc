"""
Deployment - deployer groups, deployment contexts and proposal assembly.
"""

from .context import DeploymentContext, collect
from .environment import (
    ChainContracts,
    ChainState,
    Environment,
    ManyChainMultiSig,
    Network,
    build_proposer_per_chain,
    build_timelock_address_per_chain,
)
from .group import DeployerGroup, GovernanceConfig, RecordingTransactor
from .proposal import (
    BatchChainOperation,
    ChainMetadata,
    ChangesetOutput,
    Operation,
    TimelockProposal,
    build_proposals,
    write_proposals,
)

__all__ = [
    "BatchChainOperation",
    "ChainContracts",
    "ChainMetadata",
    "ChainState",
    "ChangesetOutput",
    "DeployerGroup",
    "DeploymentContext",
    "Environment",
    "GovernanceConfig",
    "ManyChainMultiSig",
    "Network",
    "Operation",
    "RecordingTransactor",
    "TimelockProposal",
    "build_proposals",
    "build_proposer_per_chain",
    "build_timelock_address_per_chain",
    "collect",
    "write_proposals",
]
