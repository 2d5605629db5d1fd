"""
TRON address encodings.

A TRON address is the 0x41 version byte followed by the same 20-byte account
hash an Ethereum address uses. It is shown to users as base58check ("T...")
and appears in node APIs as hex ("41..."). The canonical form used for every
comparison in this package is lower-case hex with the 41 prefix.
"""

import string

import base58

from .constants import (
    ADDRESS_PREFIX,
    ADDRESS_PREFIX_HEX,
    BASE58_ADDRESS_LENGTH,
    HEX_ADDRESS_LENGTH,
)

_HEX_DIGITS = frozenset(string.hexdigits)


def _is_hex(value: str) -> bool:
    return bool(value) and all(char in _HEX_DIGITS for char in value)


def to_hex_address(address: str) -> str:
    """
    Normalize a TRON address to canonical lower-case ``41...`` hex.

    Accepted encodings:
        - base58check ``T...``
        - hex with the ``41`` prefix
        - ``0x`` followed by the 20-byte account hash (EVM style)

    Anything else is returned lower-cased so it compares unequal to every
    valid address. Never raises.

    Example:
        to_hex_address("TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t")
        # '41a614f803b6fd780986a42c78ec9c7f77e6ded13c'
    """
    if not isinstance(address, str):
        return str(address).lower()

    candidate = address.strip()
    if candidate.startswith("T") and len(candidate) == BASE58_ADDRESS_LENGTH:
        try:
            raw = base58.b58decode_check(candidate)
        except ValueError:
            return candidate.lower()
        if len(raw) == 21 and raw[:1] == ADDRESS_PREFIX:
            return raw.hex()
        return candidate.lower()

    lowered = candidate.lower()
    if lowered.startswith("0x") and len(lowered) == 42 and _is_hex(lowered[2:]):
        return ADDRESS_PREFIX_HEX + lowered[2:]
    # "41..." hex is already canonical once lower-cased
    return lowered


def is_valid_address(address: str) -> bool:
    """Return True if ``address`` is a TRON address in any accepted encoding."""
    canonical = to_hex_address(address)
    return (
        len(canonical) == HEX_ADDRESS_LENGTH
        and canonical.startswith(ADDRESS_PREFIX_HEX)
        and _is_hex(canonical)
    )


def to_base58_address(address: str) -> str:
    """
    Encode a TRON address in any accepted encoding as base58check.

    Raises:
        ValueError: If ``address`` is not a TRON address.
    """
    if not is_valid_address(address):
        raise ValueError(f"invalid TRON address: {address}")
    return base58.b58encode_check(bytes.fromhex(to_hex_address(address))).decode("ascii")


def from_account_hash(account_hash: bytes) -> str:
    """Build the base58check address for a 20-byte account hash."""
    if len(account_hash) != 20:
        raise ValueError(f"account hash must be 20 bytes, got {len(account_hash)}")
    return base58.b58encode_check(ADDRESS_PREFIX + account_hash).decode("ascii")


def to_abi_word(address: str) -> str:
    """
    ABI-encode a TRON address as a 32-byte word (hex, no prefix).

    Contract calls take the 20-byte account hash; the 41 prefix is dropped.

    Raises:
        ValueError: If ``address`` is not a TRON address.
    """
    if not is_valid_address(address):
        raise ValueError(f"invalid TRON address: {address}")
    return to_hex_address(address)[2:].rjust(64, "0")
