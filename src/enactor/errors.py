"""
Error taxonomy for Enactor.

Every error surfaced by the deployer group derives from ``EnactorError``
and carries an ``exit_code`` used by the CLI.  Nothing is retried inside
the library: a failure from ``DeployerGroup.enact()`` may mean a prefix
of the work is already on-chain (direct mode).
"""

from __future__ import annotations


class EnactorError(RuntimeError):
    exit_code: int = 1


class ConfigError(EnactorError):
    exit_code = 2


class NetworkNotFoundError(EnactorError):
    exit_code = 3

    def __init__(self, selector: int, where: str = "environment") -> None:
        super().__init__(f"Network {selector} not found in {where}")
        self.selector = selector


class NonceResolutionError(EnactorError):
    exit_code = 4


class SigningError(EnactorError):
    exit_code = 5


class ProposalBuildError(EnactorError):
    exit_code = 6


class BroadcastError(EnactorError):
    exit_code = 7


class ConfirmationError(EnactorError):
    exit_code = 8


class RpcError(RuntimeError):
    """JSON-RPC level failure (HTTP error or an ``error`` member)."""
