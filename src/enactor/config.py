"""
Configuration - networks file + .env.

Settings come from the process environment, after loading
~/.enactor/.env (or an explicit path) with python-dotenv:

    PRIVATE_KEY               deployer key (0x-prefixed hex)
    ENACTOR_NETWORKS          path to the networks JSON file
    ENACTOR_RECEIPT_TIMEOUT   seconds to wait for each receipt (default 120)
    ENACTOR_POLL_INTERVAL     receipt polling interval in seconds (default 2)

The networks file lists one entry per network:

    {"networks": [{"selector": 16015286601757825753, "name": "sepolia",
                   "rpc_url": "https://...", "chain_id": 11155111,
                   "timelock": "0x...", "proposer_mcm": "0x..."}]}
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .chain.rpc import DEFAULT_POLL_INTERVAL, DEFAULT_RECEIPT_TIMEOUT, RpcClient
from .chain.tx import TransactOpts
from .deployment.environment import ChainContracts, ChainState, Environment, ManyChainMultiSig, Network
from .errors import ConfigError
from .signing.eth import ENACTOR_ENV, LocalSigner, load_private_key
from .utils import hex_to_bytes


@dataclass(frozen=True)
class NetworkConfig:
    selector: int
    name: str
    rpc_url: str
    chain_id: Optional[int] = None
    timelock: Optional[str] = None
    proposer_mcm: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NetworkConfig":
        try:
            return cls(
                selector=int(data["selector"]),
                name=str(data.get("name") or data["selector"]),
                rpc_url=str(data["rpc_url"]),
                chain_id=int(data["chain_id"]) if data.get("chain_id") is not None else None,
                timelock=data.get("timelock"),
                proposer_mcm=data.get("proposer_mcm"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid network entry {data!r}: {exc}") from exc


@dataclass(frozen=True)
class Settings:
    private_key: Optional[str]
    networks: list[NetworkConfig] = field(default_factory=list)
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL


def load_networks(path: Path) -> list[NetworkConfig]:
    if not path.exists():
        raise ConfigError(f"Networks file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Networks file {path} is not valid JSON: {exc}") from exc

    entries = data.get("networks") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ConfigError(f"Networks file {path} must hold a list of networks")

    networks = [NetworkConfig.from_dict(entry) for entry in entries]
    selectors = [n.selector for n in networks]
    if len(set(selectors)) != len(selectors):
        raise ConfigError(f"Duplicate network selectors in {path}")
    return networks


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def load_settings(env_path: Optional[Path] = None, networks_path: Optional[Path] = None) -> Settings:
    """
    Load settings from .env / environment.

    Raises:
        ConfigError: If the networks file is missing or malformed
    """
    env_path = env_path or ENACTOR_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

    try:
        private_key: Optional[str] = load_private_key(env_path)
    except ValueError:
        private_key = None

    if networks_path is None:
        raw = os.environ.get("ENACTOR_NETWORKS")
        if not raw:
            raise ConfigError("ENACTOR_NETWORKS is not set and no networks file was given")
        networks_path = Path(raw).expanduser()

    return Settings(
        private_key=private_key,
        networks=load_networks(networks_path),
        receipt_timeout=_float_env("ENACTOR_RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT),
        poll_interval=_float_env("ENACTOR_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
    )


def build_environment(settings: Settings, name: str = "default") -> Environment:
    if not settings.private_key:
        raise ConfigError("PRIVATE_KEY is required to build an environment")
    try:
        if len(hex_to_bytes(settings.private_key)) != 32:
            raise ValueError("expected 32 bytes of hex")
        signer = LocalSigner.from_key(settings.private_key)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"PRIVATE_KEY is not a valid private key: {exc}") from exc

    env = Environment(name=name)
    for cfg in settings.networks:
        env.networks[cfg.selector] = Network(
            selector=cfg.selector,
            name=cfg.name,
            client=RpcClient(cfg.rpc_url),
            deployer_key=TransactOpts(signer=signer, chain_id=cfg.chain_id),
            receipt_timeout=settings.receipt_timeout,
            poll_interval=settings.poll_interval,
        )
    return env


def build_chain_state(settings: Settings, env: Environment) -> ChainState:
    """Governance contracts of every network that declares both a timelock and a proposer."""
    state = ChainState()
    for cfg in settings.networks:
        if not cfg.timelock or not cfg.proposer_mcm:
            continue
        network = env.network(cfg.selector)
        state.chains[cfg.selector] = ChainContracts(
            timelock=cfg.timelock,
            proposer_mcm=ManyChainMultiSig(cfg.proposer_mcm, network.client),
        )
    return state
