from __future__ import annotations

import re
from datetime import timedelta

from eth_hash.auto import keccak


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format.

    eth-account requires checksummed addresses in transaction fields.
    """
    addr = address.lower().replace("0x", "")
    if len(addr) != 40 or not re.fullmatch(r"[0-9a-f]{40}", addr):
        raise ValueError(f"Invalid address: {address}")
    addr_hash = keccak256(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def hex_to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def bytes_to_hex(value: bytes | str) -> str:
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    return "0x" + value.hex()


_DURATION_PART = re.compile(r"(\d+)(h|m|s)")


def parse_duration(value: str) -> timedelta:
    """Parse durations like ``24h``, ``1h30m`` or ``90s``."""
    text = value.strip()
    parts = _DURATION_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ValueError(f"Invalid duration: {value!r}")
    seconds = 0
    for number, unit in parts:
        seconds += int(number) * {"h": 3600, "m": 60, "s": 1}[unit]
    return timedelta(seconds=seconds)


def format_duration(delay: timedelta) -> str:
    """Render a whole-second duration the way timelock tooling expects (``24h0m0s``)."""
    total = int(delay.total_seconds())
    if total == 0:
        return "0s"
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{minutes}m{seconds}s"
    return f"{seconds}s"
