"""Tests for the SEND-mode transactor and transaction builders."""

from __future__ import annotations

import pytest
from eth_account import Account

from conftest import ADDR_AA, DEPLOYER_KEY, FakeClient
from enactor.chain.tx import (
    CapturedTransaction,
    TransactMode,
    TransactOpts,
    Transactor,
    broadcast_and_confirm,
    build_call_tx,
    build_deploy_tx,
)
from enactor.errors import BroadcastError, NonceResolutionError, RpcError
from enactor.signing.eth import LocalSigner, SimulatedSigner
from enactor.utils import to_checksum_address


def _transactor(client: FakeClient, nonce=None, mode=TransactMode.SEND) -> Transactor:
    opts = TransactOpts(signer=LocalSigner.from_key(DEPLOYER_KEY), nonce=nonce, chain_id=1, mode=mode)
    return Transactor(1, client, opts, poll_interval=0)  # type: ignore[arg-type]


class TestSendMode:
    def test_send_mode_broadcasts_immediately(self) -> None:
        client = FakeClient(nonce=4)
        captured = _transactor(client).transact(build_call_tx(ADDR_AA, "0x"))
        assert captured.nonce == 4
        assert client.sent == ["0x" + captured.raw.hex()]
        assert [k for k, _ in client.events if k in ("send", "wait")] == ["send", "wait"]

    def test_explicit_nonce_advances_after_send(self) -> None:
        client = FakeClient(nonce=99)
        transactor = _transactor(client, nonce=7)
        first = transactor.transact(build_call_tx(ADDR_AA, "0x"))
        second = transactor.transact(build_call_tx(ADDR_AA, "0x"))
        assert (first.nonce, second.nonce) == (7, 8)

    def test_nonce_failure(self) -> None:
        client = FakeClient()
        client.nonce_error = RpcError("down")
        with pytest.raises(NonceResolutionError):
            _transactor(client).transact(build_call_tx(ADDR_AA, "0x"))

    def test_capture_mode_needs_recorder(self) -> None:
        client = FakeClient()
        with pytest.raises(ValueError, match="recording transactor"):
            _transactor(client, nonce=0, mode=TransactMode.CAPTURE)
        assert client.events == []

    def test_gas_price_falls_back_to_node(self) -> None:
        client = FakeClient(gas_price=123)
        captured = _transactor(client, nonce=0).transact(build_call_tx(ADDR_AA, "0x"))
        assert ("gas_price", None) in client.events
        assert Account.recover_transaction(captured.raw) == Account.from_key(DEPLOYER_KEY).address


class TestBroadcastAndConfirm:
    def test_unsigned_cannot_be_broadcast(self) -> None:
        unsigned = CapturedTransaction(
            network=1, to=ADDR_AA, data="0x", value=0, nonce=0, from_address=ADDR_AA
        )
        with pytest.raises(BroadcastError, match="not signed"):
            broadcast_and_confirm(FakeClient(), unsigned)  # type: ignore[arg-type]


class TestBuilders:
    def test_build_call_tx_checksums(self) -> None:
        tx = build_call_tx(ADDR_AA, "0x01", value=2, gas_limit=21_000)
        assert tx == {"to": to_checksum_address(ADDR_AA), "data": "0x01", "value": 2, "gas": 21_000}

    def test_build_deploy_tx_appends_constructor_args(self) -> None:
        abi = [{"type": "constructor", "inputs": [{"name": "x", "type": "uint256"}]}]
        tx = build_deploy_tx("0x6080", abi=abi, constructor_args=[1])
        assert "to" not in tx
        assert tx["data"] == "0x6080" + "00" * 31 + "01"

    def test_build_deploy_tx_without_constructor(self) -> None:
        with pytest.raises(ValueError, match="Constructor not found"):
            build_deploy_tx("0x6080", abi=[], constructor_args=[1])


class TestSimulatedSigner:
    def test_address_is_checksummed_and_nothing_is_signed(self) -> None:
        signer = SimulatedSigner("0x" + "7a" * 20)
        assert signer.address == to_checksum_address("0x" + "7a" * 20)
        signed = signer.sign_transaction({"to": ADDR_AA})
        assert signed.raw is None
        assert signed.tx_hash is None
