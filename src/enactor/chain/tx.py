"""
Transaction Builder - Build, sign, and send (or capture) transactions.

A ``Transactor`` is the signing handle passed to contract-interaction code.
It owns the nonce and signer for one account on one network and either
broadcasts each transaction (``TransactMode.SEND``) or hands it to a
recorder (``TransactMode.CAPTURE``).
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Protocol

from eth_abi import encode

from ..errors import BroadcastError, ConfirmationError, NonceResolutionError, RpcError, SigningError
from ..signing.eth import SignedTx
from ..utils import bytes_to_hex, to_checksum_address
from .abi import encode_call
from .rpc import DEFAULT_POLL_INTERVAL, DEFAULT_RECEIPT_TIMEOUT, RpcClient

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 500_000


class Signer(Protocol):
    @property
    def address(self) -> str: ...

    def sign_transaction(self, tx: dict) -> SignedTx: ...


class TransactMode(enum.Enum):
    CAPTURE = "capture"
    SEND = "send"


@dataclass(frozen=True)
class TransactOpts:
    """
    Options of a signing handle.

    Attributes:
        signer: Produces signed bytes (or nothing, for simulated accounts)
        nonce: Starting nonce; ``None`` means ask the network
        gas_limit: Gas limit applied when a transaction does not set one
        gas_price: Gas price in wei; ``None`` means ask the network
        value: Default value in wei
        chain_id: EIP-155 chain ID
        mode: Whether transactions are broadcast or captured
    """
    signer: Signer
    nonce: Optional[int] = None
    gas_limit: int = DEFAULT_GAS_LIMIT
    gas_price: Optional[int] = None
    value: int = 0
    chain_id: Optional[int] = None
    mode: TransactMode = TransactMode.SEND

    @property
    def from_address(self) -> str:
        return self.signer.address

    def with_changes(self, **changes: Any) -> "TransactOpts":
        return replace(self, **changes)


@dataclass(frozen=True)
class CapturedTransaction:
    """A fully built transaction; signed unless its account is simulated."""
    network: int
    to: Optional[str]
    data: str
    value: int
    nonce: int
    from_address: str
    raw: Optional[bytes] = None
    tx_hash: Optional[str] = None

    @property
    def signed(self) -> bool:
        return self.raw is not None


def build_call_tx(to: str, data: str, value: int = 0, gas_limit: Optional[int] = None) -> dict:
    """Build an unsigned call transaction; nonce, gas price and chain are filled in by the transactor."""
    tx: dict[str, Any] = {
        "to": to_checksum_address(to),
        "data": data,
        "value": value,
    }
    if gas_limit is not None:
        tx["gas"] = gas_limit
    return tx


def build_deploy_tx(
    bytecode: str,
    abi: Optional[list] = None,
    constructor_args: Optional[list] = None,
    gas_limit: int = 3_000_000,
) -> dict:
    """
    Build a contract creation transaction (no ``to``).

    Constructor arguments are ABI-encoded and appended to the bytecode.
    """
    deploy_data = bytecode[2:] if bytecode.startswith("0x") else bytecode
    if constructor_args:
        constructor = next((e for e in abi or [] if e.get("type") == "constructor"), None)
        if constructor is None:
            raise ValueError("Constructor not found in ABI, but constructor_args were provided.")
        input_types = [inp["type"] for inp in constructor.get("inputs", [])]
        deploy_data += encode(input_types, constructor_args).hex()

    return {"data": "0x" + deploy_data, "value": 0, "gas": gas_limit}


def broadcast_and_confirm(
    client: RpcClient,
    captured: CapturedTransaction,
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> dict:
    """
    Send a signed transaction and block until it is mined successfully.

    Raises:
        BroadcastError: The transaction is unsigned or the node rejected it
        ConfirmationError: No receipt in time, or the transaction reverted
    """
    if captured.raw is None:
        raise BroadcastError(f"Transaction with nonce {captured.nonce} on network {captured.network} is not signed")

    try:
        tx_hash = client.send_raw_transaction(bytes_to_hex(captured.raw))
    except RpcError as exc:
        raise BroadcastError(f"failed to send transaction: {exc}") from exc

    logger.info("Sent transaction %s (network %s, nonce %s)", tx_hash, captured.network, captured.nonce)

    try:
        receipt = client.wait_for_receipt(tx_hash, timeout=receipt_timeout, poll_interval=poll_interval)
    except (RpcError, TimeoutError) as exc:
        raise ConfirmationError(f"waiting for tx {tx_hash} to be mined failed: {exc}") from exc

    status = receipt.get("status", "0x0")
    status = int(status, 16) if isinstance(status, str) else int(status)
    if status != 1:
        raise ConfirmationError(f"Transaction {tx_hash} reverted (block {receipt.get('blockNumber')})")

    logger.info("Confirmed transaction %s in block %s", tx_hash, receipt.get("blockNumber"))
    return receipt


class Transactor:
    """
    Signing handle for one account on one network.

    In SEND mode every ``transact`` call signs, broadcasts and waits for the
    receipt before returning.  CAPTURE mode is only accepted by subclasses
    that override ``record`` (see ``deployment.group.RecordingTransactor``).
    """

    def __init__(
        self,
        network: int,
        client: RpcClient,
        opts: TransactOpts,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if opts.mode is TransactMode.CAPTURE and type(self).record is Transactor.record:
            raise ValueError(f"{type(self).__name__} cannot capture; CAPTURE mode needs a recording transactor")
        self.network = network
        self.client = client
        self.opts = opts
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval

    @property
    def from_address(self) -> str:
        return self.opts.from_address

    @property
    def mode(self) -> TransactMode:
        return self.opts.mode

    def next_nonce(self) -> int:
        if self.opts.nonce is not None:
            return self.opts.nonce
        try:
            return self.client.get_pending_nonce(self.from_address)
        except RpcError as exc:
            raise NonceResolutionError(f"could not get nonce for {self.from_address}: {exc}") from exc

    def prepare(self, tx: dict, nonce: int) -> dict:
        full = dict(tx)
        if full.get("to"):
            full["to"] = to_checksum_address(full["to"])
        full.setdefault("value", self.opts.value)
        full.setdefault("gas", self.opts.gas_limit)
        full.setdefault("data", "0x")
        full["nonce"] = nonce
        if "gasPrice" not in full:
            full["gasPrice"] = self.opts.gas_price if self.opts.gas_price is not None else self.client.get_gas_price()
        if self.opts.chain_id is not None:
            full.setdefault("chainId", self.opts.chain_id)
        return full

    def sign(self, tx: dict, nonce: int) -> CapturedTransaction:
        try:
            full = self.prepare(tx, nonce)
            signed = self.opts.signer.sign_transaction(full)
        except Exception as exc:
            raise SigningError(f"failed to sign transaction with nonce {nonce}: {exc}") from exc

        to = full.get("to")
        return CapturedTransaction(
            network=self.network,
            to=to_checksum_address(to) if to else None,
            data=bytes_to_hex(full["data"]),
            value=int(full["value"]),
            nonce=nonce,
            from_address=self.from_address,
            raw=signed.raw,
            tx_hash=signed.tx_hash,
        )

    def transact(self, tx: dict) -> CapturedTransaction:
        captured = self.sign(tx, self.next_nonce())
        if self.mode is TransactMode.CAPTURE:
            self.record(captured)
        else:
            self.send(captured)
        return captured

    def record(self, captured: CapturedTransaction) -> None:
        """Keep a CAPTURE-mode transaction; subclasses that capture override this."""
        raise NotImplementedError("CAPTURE mode requires a recording transactor")

    def send(self, captured: CapturedTransaction) -> dict:
        receipt = broadcast_and_confirm(
            self.client, captured, receipt_timeout=self.receipt_timeout, poll_interval=self.poll_interval
        )
        # The node has this nonce now; keep an explicit starting nonce moving.
        if self.opts.nonce is not None:
            self.opts = self.opts.with_changes(nonce=captured.nonce + 1)
        return receipt


class BoundContract:
    """
    A contract address + ABI bound to a transactor.

    Code written against ``BoundContract`` does not know whether its
    transactions are sent or captured.
    """

    def __init__(self, address: str, abi: list, transactor: Transactor) -> None:
        self.address = to_checksum_address(address)
        self.abi = abi
        self.transactor = transactor

    def transact(self, function_name: str, *args: Any, value: int = 0, gas_limit: Optional[int] = None) -> CapturedTransaction:
        data = encode_call(self.abi, function_name, list(args))
        return self.transactor.transact(build_call_tx(self.address, data, value=value, gas_limit=gas_limit))

    def call(self, function_name: str, *args: Any) -> Any:
        return self.transactor.client.read_contract(self.address, self.abi, function_name, list(args))
