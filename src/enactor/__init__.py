__all__ = [
    # Deployer group
    "DeployerGroup",
    "DeploymentContext",
    "GovernanceConfig",
    "RecordingTransactor",
    "ChangesetOutput",
    # Environment
    "Environment",
    "Network",
    "ChainState",
    "ChainContracts",
    "ManyChainMultiSig",
    # Proposals
    "TimelockProposal",
    "BatchChainOperation",
    "ChainMetadata",
    "Operation",
    "write_proposals",
    # Chain
    "RpcClient",
    "BoundContract",
    "CapturedTransaction",
    "TransactMode",
    "TransactOpts",
    "Transactor",
    # Signing
    "LocalSigner",
    "SimulatedSigner",
    "generate_eoa",
    "get_address",
    "load_private_key",
    # Errors
    "EnactorError",
    "ConfigError",
    "NetworkNotFoundError",
    "NonceResolutionError",
    "SigningError",
    "ProposalBuildError",
    "BroadcastError",
    "ConfirmationError",
    "RpcError",
]

from .errors import (
    BroadcastError,
    ConfigError,
    ConfirmationError,
    EnactorError,
    NetworkNotFoundError,
    NonceResolutionError,
    ProposalBuildError,
    RpcError,
    SigningError,
)
from .signing.eth import (
    LocalSigner,
    SimulatedSigner,
    generate_eoa,
    get_address,
    load_private_key,
)
from .chain.rpc import RpcClient
from .chain.tx import (
    BoundContract,
    CapturedTransaction,
    TransactMode,
    TransactOpts,
    Transactor,
)
from .deployment.context import DeploymentContext
from .deployment.environment import ChainContracts, ChainState, Environment, ManyChainMultiSig, Network
from .deployment.group import DeployerGroup, GovernanceConfig, RecordingTransactor
from .deployment.proposal import (
    BatchChainOperation,
    ChainMetadata,
    ChangesetOutput,
    Operation,
    TimelockProposal,
    write_proposals,
)
