"""
JSON-RPC Client for EVM networks.

Lightweight alternative to web3.py: uses httpx for HTTP + eth-abi for encoding.
One ``RpcClient`` is bound to one network endpoint; it covers nonce lookup,
broadcast and receipt polling, which is all the deployer group needs.
"""

from __future__ import annotations

import itertools
import logging
import time
from typing import Any, Optional

import httpx

from ..errors import RpcError
from .abi import decode_result, encode_call

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_RECEIPT_TIMEOUT = 120
DEFAULT_POLL_INTERVAL = 2.0


class RpcClient:
    """
    JSON-RPC client bound to a single endpoint.

    Args:
        url: RPC endpoint URL
        timeout: Per-request HTTP timeout in seconds
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"RpcClient({self.url!r})"

    def call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: If the HTTP request or the RPC call fails
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.url, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RpcError(f"{method} failed: {exc}") from exc

        if "error" in data:
            raise RpcError(f"RPC error: {data['error']}")

        return data.get("result")

    def get_chain_id(self) -> int:
        return int(self.call("eth_chainId", []), 16)

    def get_nonce(self, address: str) -> int:
        """Mined transaction count for an address."""
        return int(self.call("eth_getTransactionCount", [address, "latest"]), 16)

    def get_pending_nonce(self, address: str) -> int:
        """Transaction count including the node's pending pool."""
        return int(self.call("eth_getTransactionCount", [address, "pending"]), 16)

    def get_gas_price(self) -> int:
        return int(self.call("eth_gasPrice", []), 16)

    def get_balance(self, address: str) -> int:
        return int(self.call("eth_getBalance", [address, "latest"]), 16)

    def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Args:
            raw_tx: 0x-prefixed hex encoded signed transaction

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        return self.call("eth_sendRawTransaction", [raw_tx])

    def get_receipt(self, tx_hash: str) -> Optional[dict]:
        return self.call("eth_getTransactionReceipt", [tx_hash])

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> dict:
        """
        Wait for a transaction receipt.

        Raises:
            TimeoutError: If receipt not found within timeout
            RpcError: If polling fails
        """
        start = time.monotonic()
        while True:
            receipt = self.get_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() - start >= timeout:
                break
            logger.debug("Receipt for %s not available yet, polling", tx_hash)
            time.sleep(poll_interval)

        raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")

    def read_contract(self, contract_address: str, abi: list, function_name: str, args: Optional[list] = None) -> Any:
        """Read from a smart contract (eth_call)."""
        calldata = encode_call(abi, function_name, args or [])
        result = self.call("eth_call", [{"to": contract_address, "data": calldata}, "latest"])

        if result is None or result == "0x":
            return None

        return decode_result(abi, function_name, result)
