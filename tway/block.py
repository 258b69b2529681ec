"""Blocks, their headers, hashing and serialization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tway.encoding import decode_int
from tway.hashing import sha256
from tway.merkle import merkle_root
from tway.transaction import (
    Transaction,
    _b64,
    _from_json,
    _to_json,
    _unb64,
    _unwrap_bytes,
    _wrap_bytes,
    serialize_transactions,
)


@dataclass
class BlockHeader:
    """The header of a block; every field is hex-text encoded bytes or a hash."""

    version: bytes = b""
    hash_prev_block: bytes = b""
    hash_merkle_root: bytes = b""
    time: bytes = b""
    bits: bytes = b""
    nonce: bytes = b""

    def _to_document(self) -> dict[str, Any]:
        return {
            "Version": _b64(self.version),
            "HashPrevBlock": _b64(self.hash_prev_block),
            "HashMerkleRoot": _b64(self.hash_merkle_root),
            "Time": _b64(self.time),
            "Bits": _b64(self.bits),
            "Nonce": _b64(self.nonce),
        }

    @classmethod
    def _from_document(cls, doc: Mapping[str, Any]) -> BlockHeader:
        return cls(
            version=_unb64(doc.get("Version")),
            hash_prev_block=_unb64(doc.get("HashPrevBlock")),
            hash_merkle_root=_unb64(doc.get("HashMerkleRoot")),
            time=_unb64(doc.get("Time")),
            bits=_unb64(doc.get("Bits")),
            nonce=_unb64(doc.get("Nonce")),
        )

    def __str__(self) -> str:
        return (
            f"{{Version: {decode_int(self.version)}, "
            f"PrevBlock: {self.hash_prev_block.hex()}, "
            f"MerkleRoot: {self.hash_merkle_root.hex()}, "
            f"Time: {decode_int(self.time)}, "
            f"Bits: {decode_int(self.bits)}, "
            f"Nonce: {decode_int(self.nonce)}}}"
        )


@dataclass
class Block:
    """A block: a header and the transactions it confirms."""

    size: bytes = b""
    header: BlockHeader = field(default_factory=BlockHeader)
    counter: int = 0
    transactions: list[Transaction] = field(default_factory=list)

    def hash(self) -> bytes:
        """Return the SHA-256 of the header fields (without version) and the size."""
        h = self.header
        return sha256(
            h.hash_prev_block + h.hash_merkle_root + h.time + h.bits + h.nonce + self.size
        )

    def serialize(self) -> bytes:
        """Encode the block for storage or the wire."""
        document = {
            "Size": _b64(self.size),
            "Header": self.header._to_document(),
            "Counter": self.counter,
            "Transactions": [tx._to_document() for tx in self.transactions] or None,
        }
        return _wrap_bytes(_to_json(document))

    @classmethod
    def deserialize(cls, data: bytes) -> Block:
        """Decode a block written by serialize; raises ValueError if malformed."""
        doc = _from_json(_unwrap_bytes(data))
        counter = doc.get("Counter") or 0
        if not isinstance(counter, int) or counter < 0:
            raise ValueError("invalid transaction counter")
        header = doc.get("Header") or {}
        if not isinstance(header, Mapping):
            raise ValueError("invalid block header")
        return cls(
            size=_unb64(doc.get("Size")),
            header=BlockHeader._from_document(header),
            counter=counter,
            transactions=[
                Transaction._from_document(tx) for tx in doc.get("Transactions") or []
            ],
        )


def block_hashes(blocks: Iterable[Block] | Mapping[Any, Block]) -> list[bytes]:
    """Return the hash of each block; a mapping contributes its values."""
    if isinstance(blocks, Mapping):
        blocks = blocks.values()
    return [block.hash() for block in blocks]


def merkle_hash(txs: Iterable[Transaction]) -> bytes:
    """Return the Merkle root over the serialized transactions."""
    return merkle_root(serialize_transactions(txs)).data