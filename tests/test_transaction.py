import hashlib

import pytest

from tway.encoding import encode_int, total_length
from tway.transaction import (
    Input,
    Output,
    Transaction,
    deserialize_outputs,
    make_input,
    make_output,
    serialize_outputs,
    serialize_transactions,
)


def _coinbase() -> Transaction:
    return Transaction(
        version=b"\x01",
        in_counter=encode_int(1),
        inputs=[make_input(b"", encode_int(-1), [])],
        out_counter=encode_int(1),
        outputs=[make_output([b"OP_DUP", b"pubkeyhash"], 100)],
        lock_time=b"\x00",
    )


def _spending(prev: Transaction, amount: int) -> Transaction:
    return Transaction(
        version=b"\x01",
        in_counter=encode_int(1),
        inputs=[make_input(prev.hash(), encode_int(0), [b"sig", b"pubkey"])],
        out_counter=encode_int(1),
        outputs=[make_output([b"otherhash"], amount)],
        lock_time=b"\x00",
    )


def test_make_input_records_script_length():
    script = [b"signature", b"pubkey"]
    inp = make_input(b"\x11" * 32, encode_int(2), script)
    assert inp.tx_in_script_len == encode_int(total_length(script))
    assert inp.script_sig == script


def test_make_output_records_value_and_length():
    out = make_output([b"abc", b"de"], 250)
    assert out.value == encode_int(250)
    assert out.tx_script_length == encode_int(5)


def test_output_locked_with():
    out = make_output([b"OP_DUP", b"pubkeyhash"], 1)
    assert out.is_locked_with(b"pubkeyhash") is True
    assert out.is_locked_with(b"missing") is False


def test_input_round_trip():
    inp = make_input(b"\x22" * 32, encode_int(3), [b"sig", b"key"])
    assert Input.deserialize(inp.serialize()) == inp


def test_transaction_round_trip():
    tx = _spending(_coinbase(), 60)
    assert Transaction.deserialize(tx.serialize()) == tx


def test_empty_transaction_round_trip():
    assert Transaction.deserialize(Transaction().serialize()) == Transaction()


def test_serialized_frame_layout():
    data = Transaction().serialize()
    assert data[0] == len(data) - 1
    assert data[1:3] == b"\x0a\x00"
    assert b'"Inputs":null' in data


def test_long_payload_uses_multibyte_length():
    tx = Transaction(outputs=[make_output([b"x" * 400], 1)])
    data = tx.serialize()
    assert data[0] >= 0x80
    assert Transaction.deserialize(data) == tx


def test_hash_is_sha256_of_serialization():
    tx = _coinbase()
    assert tx.hash() == hashlib.sha256(tx.serialize()).digest()


def test_value_sums_outputs():
    tx = Transaction(outputs=[make_output([b"a"], 30), make_output([b"b"], 12)])
    assert tx.value() == 42


def test_is_coinbase():
    coinbase = _coinbase()
    assert coinbase.is_coinbase() is True
    assert _spending(coinbase, 10).is_coinbase() is False


def test_fees():
    prev = _coinbase()
    tx = _spending(prev, 60)
    assert tx.fees({prev.hash().hex(): prev}) == 40


def test_coinbase_has_no_fees():
    assert _coinbase().fees({}) == 0


def test_fees_missing_previous_transaction():
    tx = _spending(_coinbase(), 60)
    with pytest.raises(KeyError):
        tx.fees({})


@pytest.mark.parametrize("bad", [b"", b"\x05\x0a\x00\x03ab", b"\x03\x0c\x00\x00"])
def test_deserialize_malformed(bad):
    with pytest.raises(ValueError):
        Transaction.deserialize(bad)


def test_deserialize_non_object_payload():
    data = serialize_transactions([Transaction()])[0]
    assert Transaction.deserialize(data) == Transaction()
    with pytest.raises(ValueError):
        Output.__init__  # noqa: B018
        deserialize_outputs(b"\x06\x0a\x00\x03[1]")


def test_outputs_round_trip():
    outputs = [make_output([b"a", b"b"], 5), make_output([b"c"], 7)]
    assert deserialize_outputs(serialize_outputs(outputs)) == outputs
    assert deserialize_outputs(serialize_outputs([])) == []


def test_serialize_transactions():
    txs = [_coinbase(), Transaction()]
    serialized = serialize_transactions(txs)
    assert [Transaction.deserialize(item) for item in serialized] == txs