import pytest

from tway.encoding import (
    array_byte_to_int,
    decode_int,
    encode_int,
    total_length,
    var_int_serialize_size,
)


def test_encode_int_pads_to_two_digits():
    assert encode_int(5) == b"05"
    assert encode_int(255) == b"ff"


def test_encode_negative():
    assert encode_int(-1) == b"-1"
    assert decode_int(encode_int(-1)) == -1


@pytest.mark.parametrize("n", [0, 1, 15, 16, 255, 256, 4096, 123456789, -42, 2**62])
def test_round_trip(n):
    assert decode_int(encode_int(n)) == n


@pytest.mark.parametrize("bad", [b"", b"zz", b"0x10", b"1_0", b" 1"])
def test_decode_malformed_gives_zero(bad):
    assert decode_int(bad) == 0


def test_decode_clamps_to_int64():
    assert decode_int(b"f" * 20) == 2**63 - 1
    assert decode_int(b"-" + b"f" * 20) == -(2**63)


def test_array_byte_to_int():
    assert array_byte_to_int(b"") == 0
    assert array_byte_to_int(b"42") == 42
    assert array_byte_to_int(b"-7") == -7


@pytest.mark.parametrize("bad", [b"abc", b"1.5", b" 3", b"9" * 30])
def test_array_byte_to_int_rejects(bad):
    with pytest.raises(ValueError):
        array_byte_to_int(bad)


def test_total_length_matches_join():
    chunks = [b"ab", b"", b"cde", b"\x00" * 10]
    assert total_length(chunks) == len(b"".join(chunks))
    assert total_length([]) == 0


@pytest.mark.parametrize(
    "value, size",
    [
        (0, 1),
        (0xFC, 1),
        (0xFD, 3),
        (0xFFFF, 3),
        (0x10000, 5),
        (0xFFFFFFFF, 5),
        (0x100000000, 9),
    ],
)
def test_var_int_serialize_size(value, size):
    assert var_int_serialize_size(value) == size