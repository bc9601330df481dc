"""
ECDSA / secp256k1 keys and transaction signers.

Two signers are provided:
- ``LocalSigner``: signs with a local private key (direct mode)
- ``SimulatedSigner``: bound to a contract address (the timelock) that
  cannot sign; it only fixes the ``from`` of a transaction that will be
  executed later through a governance proposal

Keys are loaded from ~/.enactor/.env as PRIVATE_KEY (hex format) or from
the process environment.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..utils import bytes_to_hex, to_checksum_address


# Default config directory
ENACTOR_DIR = Path.home() / ".enactor"
ENACTOR_ENV = ENACTOR_DIR / ".env"


def generate_eoa() -> tuple[str, str]:
    """
    Generate a new ECDSA/secp256k1 keypair (EOA).

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from .env file or environment.

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    env_path = env_path or ENACTOR_ENV

    if env_path.exists():
        load_dotenv(env_path, override=True)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError(f"PRIVATE_KEY not found. Set PRIVATE_KEY in the environment or in {env_path}")

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def get_account(private_key: Optional[str] = None) -> LocalAccount:
    if private_key is None:
        private_key = load_private_key()
    return Account.from_key(private_key)


def get_address(private_key: Optional[str] = None) -> str:
    return get_account(private_key).address


@dataclass(frozen=True)
class SignedTx:
    raw: Optional[bytes]
    tx_hash: Optional[str]


class LocalSigner:
    """Signs legacy transactions with a local key via eth-account."""

    def __init__(self, account: LocalAccount) -> None:
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "LocalSigner":
        return cls(Account.from_key(private_key))

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, tx: dict) -> SignedTx:
        signed = self._account.sign_transaction(tx)
        return SignedTx(raw=bytes(signed.raw_transaction), tx_hash=bytes_to_hex(bytes(signed.hash)))


class SimulatedSigner:
    """
    Stand-in signer for an account that is a contract.

    The transaction is returned unsigned: it only exists to be turned into
    a proposal operation, never to be broadcast.
    """

    def __init__(self, address: str) -> None:
        self._address = to_checksum_address(address)

    @property
    def address(self) -> str:
        return self._address

    def sign_transaction(self, tx: dict) -> SignedTx:
        return SignedTx(raw=None, tx_hash=None)
