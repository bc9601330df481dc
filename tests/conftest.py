"""Shared fixtures: an offline stand-in for RpcClient and small environments."""

from __future__ import annotations

from typing import Any, Callable, Optional

import pytest

from enactor.chain.tx import TransactOpts
from enactor.deployment.environment import ChainContracts, ChainState, Environment, ManyChainMultiSig, Network
from enactor.errors import RpcError
from enactor.signing.eth import LocalSigner

DEPLOYER_KEY = "0x" + "11" * 32
TIMELOCK = "0x" + "7a" * 20
PROPOSER = "0x" + "3c" * 20
ADDR_AA = "0x" + "aa" * 20
ADDR_BB = "0x" + "bb" * 20
ADDR_CC = "0x" + "cc" * 20


class FakeClient:
    """Records every call; never touches the network."""

    def __init__(
        self, nonce: int = 0, gas_price: int = 1_000_000_000, op_count: int = 0, chain_id: int = 1
    ) -> None:
        self.nonce = nonce
        self.gas_price = gas_price
        self.chain_id = chain_id
        self.op_count = op_count
        self.events: list[tuple[str, Any]] = []
        self.sent: list[str] = []
        self.nonce_error: Optional[Exception] = None
        self.gas_price_error: Optional[Exception] = None
        self.chain_id_error: Optional[Exception] = None
        self.op_count_error: Optional[Exception] = None
        self.fail_send_at: Optional[int] = None
        self.revert_at: Optional[int] = None
        self.timeout_at: Optional[int] = None

    def get_pending_nonce(self, address: str) -> int:
        self.events.append(("nonce", address))
        if self.nonce_error is not None:
            raise self.nonce_error
        return self.nonce

    def get_gas_price(self) -> int:
        self.events.append(("gas_price", None))
        if self.gas_price_error is not None:
            raise self.gas_price_error
        return self.gas_price

    def get_chain_id(self) -> int:
        self.events.append(("chain_id", None))
        if self.chain_id_error is not None:
            raise self.chain_id_error
        return self.chain_id

    def send_raw_transaction(self, raw_tx: str) -> str:
        index = len(self.sent)
        if self.fail_send_at == index:
            raise RpcError("RPC error: {'code': -32000, 'message': 'nonce too low'}")
        self.sent.append(raw_tx)
        tx_hash = "0x%064x" % (index + 1)
        self.events.append(("send", tx_hash))
        return tx_hash

    def wait_for_receipt(self, tx_hash: str, timeout: float = 120, poll_interval: float = 2.0) -> dict:
        self.events.append(("wait", tx_hash))
        index = int(tx_hash, 16) - 1
        if self.timeout_at == index:
            raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")
        status = "0x0" if self.revert_at == index else "0x1"
        return {"transactionHash": tx_hash, "status": status, "blockNumber": hex(100 + index)}

    def read_contract(self, contract_address: str, abi: list, function_name: str, args: Optional[list] = None) -> Any:
        self.events.append(("call", function_name))
        if self.op_count_error is not None:
            raise self.op_count_error
        return self.op_count


@pytest.fixture()
def signer() -> LocalSigner:
    return LocalSigner.from_key(DEPLOYER_KEY)


@pytest.fixture()
def make_env(signer: LocalSigner) -> Callable[..., tuple[Environment, ChainState, dict[int, FakeClient]]]:
    """Build (env, state, clients) for the given selectors; every network gets governance contracts."""

    def _make(
        *selectors: int,
        nonce: int = 0,
        op_count: int = 0,
        deployer_nonce: Optional[int] = None,
        governance_for: Optional[set[int]] = None,
    ) -> tuple[Environment, ChainState, dict[int, FakeClient]]:
        env = Environment(name="test")
        state = ChainState()
        clients: dict[int, FakeClient] = {}
        for selector in selectors:
            client = FakeClient(nonce=nonce, op_count=op_count)
            clients[selector] = client
            env.networks[selector] = Network(
                selector=selector,
                name=f"net-{selector}",
                client=client,  # type: ignore[arg-type]
                deployer_key=TransactOpts(signer=signer, nonce=deployer_nonce, chain_id=selector),
                poll_interval=0,
            )
            if governance_for is None or selector in governance_for:
                state.chains[selector] = ChainContracts(
                    timelock=TIMELOCK,
                    proposer_mcm=ManyChainMultiSig(PROPOSER, client),  # type: ignore[arg-type]
                )
        return env, state, clients

    return _make


def call_tx(to: str, data: str = "0x", value: int = 0) -> dict:
    return {"to": to, "data": data, "value": value}


@pytest.fixture()
def tx() -> Callable[..., dict]:
    return call_tx
