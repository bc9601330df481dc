"""RpcClient tests against an in-process httpx transport."""

from __future__ import annotations

import json

import httpx
import pytest

from enactor.chain.abi import MANY_CHAIN_MULTISIG_ABI
from enactor.chain.rpc import RpcClient
from enactor.errors import RpcError


def _client(handler) -> tuple[RpcClient, list[dict]]:
    requests: list[dict] = []

    def _handle(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append(body)
        return handler(body)

    return RpcClient("http://node.test", transport=httpx.MockTransport(_handle)), requests


def _result(value):
    return lambda body: httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": value})


class TestCall:
    def test_pending_nonce_uses_pending_tag(self) -> None:
        client, requests = _client(_result("0x1a"))
        assert client.get_pending_nonce("0xabc") == 26
        assert requests[0]["method"] == "eth_getTransactionCount"
        assert requests[0]["params"] == ["0xabc", "pending"]

    def test_latest_nonce(self) -> None:
        client, requests = _client(_result("0x2"))
        assert client.get_nonce("0xabc") == 2
        assert requests[0]["params"][1] == "latest"

    def test_request_ids_increase(self) -> None:
        client, requests = _client(_result("0x1"))
        client.get_chain_id()
        client.get_gas_price()
        assert [r["id"] for r in requests] == [1, 2]

    def test_rpc_error_member(self) -> None:
        client, _ = _client(
            lambda body: httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": "nonce too low"}}
            )
        )
        with pytest.raises(RpcError, match="nonce too low"):
            client.send_raw_transaction("0x00")

    def test_http_error(self) -> None:
        client, _ = _client(lambda body: httpx.Response(502, text="bad gateway"))
        with pytest.raises(RpcError, match="eth_gasPrice"):
            client.get_gas_price()


class TestReceipts:
    def test_polls_until_receipt(self) -> None:
        answers = [None, None, {"status": "0x1", "blockNumber": "0x5"}]
        client, requests = _client(lambda body: _result(answers.pop(0))(body))
        receipt = client.wait_for_receipt("0xhash", timeout=5, poll_interval=0)
        assert receipt["status"] == "0x1"
        assert len(requests) == 3

    def test_timeout(self) -> None:
        client, _ = _client(_result(None))
        with pytest.raises(TimeoutError):
            client.wait_for_receipt("0xhash", timeout=0, poll_interval=0)


class TestReadContract:
    def test_get_op_count(self) -> None:
        client, requests = _client(_result("0x" + "00" * 31 + "09"))
        count = client.read_contract("0x" + "3c" * 20, MANY_CHAIN_MULTISIG_ABI, "getOpCount")
        assert count == 9
        assert requests[0]["method"] == "eth_call"
        assert requests[0]["params"][0]["data"].startswith("0x")
        assert len(requests[0]["params"][0]["data"]) == 10

    def test_empty_result(self) -> None:
        client, _ = _client(_result("0x"))
        assert client.read_contract("0x" + "3c" * 20, MANY_CHAIN_MULTISIG_ABI, "getOpCount") is None
