"""Addresses derived from public keys: version byte, key hash and checksum in Base58."""

from __future__ import annotations

from tway.base58 import base58_decode, base58_encode
from tway.hashing import ripemd160, sha256

VERSION = 0x00
ADDRESS_CHECKSUM_LEN = 4


def hash_pub_key(pub_key: bytes) -> bytes:
    """Return RIPEMD-160 of the SHA-256 of a public key."""
    return ripemd160(sha256(pub_key))


def checksum(payload: bytes) -> bytes:
    """Return the first bytes of the double SHA-256 of payload."""
    return sha256(sha256(payload))[:ADDRESS_CHECKSUM_LEN]


def address_from_pub_key_hash(pub_key_hash: bytes) -> str:
    """Build the Base58 address of a public key hash."""
    versioned = bytes([VERSION]) + bytes(pub_key_hash)
    return base58_encode(versioned + checksum(versioned)).decode("ascii")


def _decode_address(address: str | bytes) -> bytes:
    decoded = base58_decode(address)
    if len(decoded) <= ADDRESS_CHECKSUM_LEN:
        raise ValueError("address is too short")
    return decoded


def pub_key_hash_from_address(address: str | bytes) -> bytes:
    """Extract the public key hash; raises ValueError on a malformed address."""
    return _decode_address(address)[1:-ADDRESS_CHECKSUM_LEN]


def is_address_valid(address: str | bytes) -> bool:
    """Return True if the address decodes and its checksum matches."""
    try:
        decoded = _decode_address(address)
    except ValueError:
        return False
    body, actual = decoded[:-ADDRESS_CHECKSUM_LEN], decoded[-ADDRESS_CHECKSUM_LEN:]
    return checksum(body) == actual