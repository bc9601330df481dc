"""
Deployment context - a named log of captured transactions per network.

Contexts form a stack through their ``parent`` link.  ``fork`` never
touches the receiver; it returns a new empty context pointing at it, so
code holding an older context keeps seeing exactly its own transactions.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..chain.tx import CapturedTransaction


class DeploymentContext:
    def __init__(self, description: str, parent: Optional["DeploymentContext"] = None) -> None:
        self.description = description
        self.parent = parent
        self.transactions: dict[int, list[CapturedTransaction]] = {}

    def __repr__(self) -> str:
        return f"DeploymentContext({self.description!r}, depth={len(self.flatten())})"

    def fork(self, description: str) -> "DeploymentContext":
        return DeploymentContext(description, parent=self)

    def flatten(self) -> list["DeploymentContext"]:
        """Oldest ancestor first, ``self`` last."""
        contexts = []
        current: Optional[DeploymentContext] = self
        while current is not None:
            contexts.append(current)
            current = current.parent
        contexts.reverse()
        return contexts

    def append(self, tx: CapturedTransaction) -> None:
        self.transactions.setdefault(tx.network, []).append(tx)

    def transaction_count(self, network: int) -> int:
        return len(self.transactions.get(network, ()))

    def is_empty(self) -> bool:
        return not any(self.transactions.values())


def collect(contexts: Iterable[DeploymentContext]) -> dict[int, list[CapturedTransaction]]:
    """Concatenate per-network transactions of ``contexts`` in order."""
    transactions: dict[int, list[CapturedTransaction]] = {}
    for context in contexts:
        for network, txs in context.transactions.items():
            transactions.setdefault(network, []).extend(txs)
    return transactions
