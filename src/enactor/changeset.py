"""
Changeset files - a declarative list of contract calls per deployment context.

    {
      "description": "Set fee config",
      "contexts": [
        {"description": "Update ramps",
         "calls": [{"network": 1, "to": "0x...", "signature": "setFee(uint256)", "args": [5]},
                   {"network": 1, "to": "0x...", "data": "0x1234", "value": 0}]}
      ]
    }

Every context after the first is forked from the previous one, so the
contexts are realized in file order.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from eth_abi.exceptions import EncodingError, ParseError

from .chain.abi import encode_signature_call, split_signature
from .chain.tx import build_call_tx
from .deployment.group import DeployerGroup, RecordingTransactor
from .errors import ConfigError
from .utils import bytes_to_hex, hex_to_bytes, to_checksum_address


@dataclass(frozen=True)
class Call:
    network: int
    to: str
    signature: Optional[str] = None
    args: list = field(default_factory=list)
    data: Optional[str] = None
    value: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Call":
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid call {data!r}: expected an object")
        try:
            call = cls(
                network=int(data["network"]),
                to=to_checksum_address(str(data["to"])),
                signature=data.get("signature"),
                args=list(data.get("args") or []),
                data=data.get("data"),
                value=int(data.get("value", 0)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid call {data!r}: {exc}") from exc
        if (call.signature is None) == (call.data is None):
            raise ConfigError(f"Call to {call.to} needs exactly one of 'signature' or 'data'")
        return call

    def calldata(self) -> str:
        """
        Hex calldata for this call.

        Raises:
            ConfigError: Malformed data, signature or arguments
        """
        try:
            if self.data is not None:
                return bytes_to_hex(hex_to_bytes(self.data))
            _, types = split_signature(self.signature or "")
            return encode_signature_call(self.signature or "", _coerce_args(types, self.args))
        except (TypeError, ValueError, EncodingError, ParseError) as exc:
            raise ConfigError(f"Invalid call to {self.to} on network {self.network}: {exc}") from exc


def _coerce_args(types: list[str], args: list) -> list:
    """JSON has no bytes type: hex strings passed for ``bytes``/``bytesN`` are decoded."""
    if len(types) != len(args):
        raise ConfigError(f"Expected {len(types)} argument(s), got {len(args)}")
    coerced = []
    for kind, arg in zip(types, args):
        if kind.startswith("bytes") and "[" not in kind and isinstance(arg, str):
            arg = hex_to_bytes(arg)
        coerced.append(arg)
    return coerced


@dataclass(frozen=True)
class ContextSpec:
    description: str
    calls: list[Call]


@dataclass(frozen=True)
class Changeset:
    description: str
    contexts: list[ContextSpec]

    def networks(self) -> list[int]:
        return sorted({call.network for ctx in self.contexts for call in ctx.calls})


def load_changeset(path: Path) -> Changeset:
    if not path.exists():
        raise ConfigError(f"Changeset file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Changeset {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Changeset {path} must be a JSON object")

    contexts = []
    for index, entry in enumerate(data.get("contexts") or []):
        if not isinstance(entry, dict):
            raise ConfigError(f"Changeset {path}: context {index} must be an object")
        contexts.append(
            ContextSpec(
                description=str(entry.get("description") or f"context {index}"),
                calls=[Call.from_dict(c) for c in entry.get("calls") or []],
            )
        )
    if not contexts:
        raise ConfigError(f"Changeset {path} has no contexts")
    return Changeset(description=str(data.get("description", path.stem)), contexts=contexts)


def apply_changeset(group: DeployerGroup, changeset: Changeset) -> DeployerGroup:
    """
    Capture every call of ``changeset`` through ``group``.

    The first context's calls land in ``group``'s own context, each later
    one in a fork of the previous.  Returns the innermost group; calling
    ``enact()`` on it realizes all contexts.
    """
    deployers: dict[int, RecordingTransactor] = {}
    current = group
    for index, spec in enumerate(changeset.contexts):
        if index > 0:
            current = current.with_deployment_context(spec.description)
        for call in spec.calls:
            # A handle records into the context it was created in; the
            # starting nonce is reused since counts span the whole stack.
            deployer = deployers.get(call.network)
            if deployer is None or deployer.context is not current.context:
                deployer = current.get_deployer(
                    call.network, nonce=deployer.starting_nonce if deployer is not None else None
                )
                deployers[call.network] = deployer
            try:
                tx = build_call_tx(call.to, call.calldata(), value=call.value)
            except ValueError as exc:
                raise ConfigError(f"Invalid call to {call.to} on network {call.network}: {exc}") from exc
            deployer.transact(tx)
    return current
