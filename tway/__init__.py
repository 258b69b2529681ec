"""Encodings, hashes, Merkle roots, transactions, blocks, peer messages, request history and wallets for a small blockchain node."""

__version__ = "0.1.0"