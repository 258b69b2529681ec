"""Wallets holding P-256 key pairs, and the per-node file that stores them."""

from __future__ import annotations

import base64
import json
import random
from dataclasses import dataclass, field
from pathlib import Path

from Crypto.Hash import SHA256
from Crypto.PublicKey import ECC
from Crypto.Signature import DSS

from tway.address import address_from_pub_key_hash, hash_pub_key

_NOT_STORED = "public key doesn't match with a private key stored"


def _int_bytes(value: int) -> bytes:
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


@dataclass(frozen=True)
class Wallet:
    """A private key and its public key, X followed by Y without leading zeros."""

    private_key: ECC.EccKey
    public_key: bytes = field(init=False)

    def __post_init__(self) -> None:
        if not self.private_key.has_private():
            raise ValueError("a wallet needs a private key")
        point = self.private_key.pointQ
        object.__setattr__(
            self, "public_key", _int_bytes(int(point.x)) + _int_bytes(int(point.y))
        )

    @classmethod
    def generate(cls) -> Wallet:
        """Create a wallet with a fresh key pair."""
        return cls(ECC.generate(curve="P-256"))

    def address(self) -> str:
        """Return the Base58 address of the public key."""
        return address_from_pub_key_hash(hash_pub_key(self.public_key))

    def sign(self, data: bytes) -> bytes:
        """Sign the SHA-256 of data; returns r and s, 32 bytes each."""
        signer = DSS.new(self.private_key, "fips-186-3")
        return signer.sign(SHA256.new(bytes(data)))


class WalletStore:
    """The wallets of a node, keyed by address and kept in one file."""

    def __init__(self, path: str | Path, rng: random.Random | None = None) -> None:
        self.path = Path(path)
        self.wallets: dict[str, Wallet] = {}
        self._rng = rng or random.Random()

    @classmethod
    def for_node(cls, directory: str | Path, node_id: str) -> WalletStore:
        """Return the store of a node; its file is named after the node ID."""
        if not node_id:
            raise ValueError("a node ID is required")
        return cls(Path(directory) / node_id)

    def __contains__(self, address: object) -> bool:
        return address in self.wallets

    def __len__(self) -> int:
        return len(self.wallets)

    def load(self) -> None:
        """Replace the wallets with those in the file.

        Raises FileNotFoundError when the file is missing and ValueError when it is malformed.
        """
        if not self.path.exists():
            raise FileNotFoundError(str(self.path))
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            keys = [
                ECC.import_key(base64.b64decode(entry, validate=True))
                for entry in document["wallets"]
            ]
        except (KeyError, TypeError, json.JSONDecodeError) as exc:
            raise ValueError(f"malformed wallet file: {self.path}") from exc
        wallets = (Wallet(key) for key in keys)
        self.wallets = {wallet.address(): wallet for wallet in wallets}

    def save(self) -> None:
        """Write every wallet to the file."""
        document = {
            "wallets": [
                base64.b64encode(wallet.private_key.export_key(format="DER")).decode(
                    "ascii"
                )
                for wallet in self.wallets.values()
            ]
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")

    def generate_wallet(self) -> str:
        """Create a wallet, store it, save the file and return its address."""
        wallet = Wallet.generate()
        address = wallet.address()
        self.wallets[address] = wallet
        self.save()
        return address

    def contains(self, address: str) -> bool:
        """Return True if a wallet with this address is stored."""
        return address in self.wallets

    def public_key(self, address: str) -> bytes:
        """Return the public key of a stored address; raises KeyError otherwise."""
        return self.wallets[address].public_key

    def by_pub_key_hash(self, pub_key_hash: bytes) -> Wallet | None:
        """Return the wallet whose public key hashes to pub_key_hash, if any."""
        return next(
            (
                wallet
                for wallet in self.wallets.values()
                if hash_pub_key(wallet.public_key) == pub_key_hash
            ),
            None,
        )

    def sign_with(self, address: str) -> bytes:
        """Sign empty data with the key of a stored address; raises KeyError otherwise."""
        wallet = self.wallets.get(address)
        if wallet is None:
            raise KeyError(_NOT_STORED)
        return wallet.sign(b"")

    def random_wallet(self) -> Wallet:
        """Pick a wallet at random among all but the last stored one.

        With a single wallet that wallet is returned; with none, LookupError is raised.
        """
        wallets = list(self.wallets.values())
        if not wallets:
            raise LookupError("no wallet stored")
        if len(wallets) == 1:
            return wallets[0]
        return wallets[self._rng.randrange(len(wallets) - 1)]

    def exists(self) -> bool:
        """Return True if the wallet file exists and wallets are loaded."""
        return self.path.exists() and bool(self.wallets)

    def addresses(self) -> list[str]:
        """Return the stored addresses."""
        return list(self.wallets)