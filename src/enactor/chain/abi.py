"""
ABI helpers - load contract ABIs and encode/decode calls.

ABIs are read from JSON files on disk: either a Foundry/Hardhat artifact
(``{"abi": [...], ...}``) or a bare ABI list.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from eth_abi import decode, encode

from ..utils import hex_to_bytes, keccak256


@lru_cache(maxsize=16)
def load_abi(path: str | Path) -> list[dict[str, Any]]:
    """
    Load an ABI from a JSON artifact.

    Args:
        path: Path to an artifact or bare ABI JSON file

    Returns:
        ABI as a list of dicts

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file holds neither an artifact nor an ABI list
    """
    abi_path = Path(path)
    if not abi_path.exists():
        raise FileNotFoundError(f"ABI not found: {abi_path}")

    with abi_path.open("r", encoding="utf-8") as f:
        artifact = json.load(f)

    if isinstance(artifact, list):
        return artifact
    if isinstance(artifact, dict) and isinstance(artifact.get("abi"), list):
        return artifact["abi"]
    raise ValueError(f"No ABI in {abi_path}")


def _find_function(abi: list, function_name: str) -> dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function_name:
            return entry
    raise ValueError(f"Function {function_name} not found in ABI")


def _canonical_type(param: dict[str, Any]) -> str:
    kind = param["type"]
    if kind.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){kind[len('tuple'):]}"
    return kind


def function_selector(signature: str) -> bytes:
    """First 4 bytes of keccak256 over a canonical signature like ``transfer(address,uint256)``."""
    return keccak256(signature.replace(" ", "").encode("utf-8"))[:4]


def split_signature(signature: str) -> tuple[str, list[str]]:
    sig = signature.replace(" ", "")
    if "(" not in sig or not sig.endswith(")"):
        raise ValueError(f"Invalid function signature: {signature}")
    name, _, rest = sig.partition("(")
    inner = rest[:-1]
    types: list[str] = []
    depth = 0
    current = ""
    for ch in inner:
        if ch == "," and depth == 0:
            types.append(current)
            current = ""
            continue
        depth += ch == "("
        depth -= ch == ")"
        current += ch
    if current:
        types.append(current)
    return name, types


def encode_signature_call(signature: str, args: list) -> str:
    """ABI-encode a call given a human-readable signature instead of an ABI."""
    _, input_types = split_signature(signature)
    selector = function_selector(signature)
    encoded_args = encode(input_types, args) if input_types else b""
    return "0x" + selector.hex() + encoded_args.hex()


def encode_call(abi: list, function_name: str, args: list) -> str:
    """ABI-encode a function call to hex calldata."""
    func = _find_function(abi, function_name)
    input_types = [_canonical_type(inp) for inp in func.get("inputs", [])]
    sig = f"{function_name}({','.join(input_types)})"
    selector = function_selector(sig)

    if args:
        encoded_args = encode(input_types, args)
    else:
        encoded_args = b""

    return "0x" + selector.hex() + encoded_args.hex()


def decode_result(abi: list, function_name: str, data: str) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        Decoded result (single value or tuple), ``None`` for no outputs
    """
    func = _find_function(abi, function_name)
    output_types = [_canonical_type(out) for out in func.get("outputs", [])]
    if not output_types:
        return None

    decoded = decode(output_types, hex_to_bytes(data))

    if len(decoded) == 1:
        return decoded[0]
    return decoded


MANY_CHAIN_MULTISIG_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getOpCount",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint40"}],
    },
]
