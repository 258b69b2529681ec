import hashlib

from tway.hashing import ripemd160, sha256


def test_sha256_known_vector():
    assert sha256(b"abc").hex() == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_sha256_matches_hashlib():
    data = b"tway block data"
    assert sha256(data) == hashlib.sha256(data).digest()
    assert len(sha256(b"")) == 32


def test_ripemd160_empty_vector():
    assert ripemd160(b"").hex() == "9c1185a5c5e9fc54612808977ee8f548b2258d31"


def test_ripemd160_length_and_determinism():
    digest = ripemd160(sha256(b"public key"))
    assert len(digest) == 20
    assert digest == ripemd160(sha256(b"public key"))