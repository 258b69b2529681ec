"""Transactions, their inputs and outputs, and their wire serialization."""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tway.encoding import decode_int, encode_int, total_length
from tway.hashing import sha256

# A serialized object is JSON text carried as a single framed byte string.
_BYTES_TYPE_ID = 0x0A


def _encode_uint(value: int) -> bytes:
    if value < 0x80:
        return bytes([value])
    body = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return bytes([256 - len(body)]) + body


def _decode_uint(data: bytes, pos: int) -> tuple[int, int]:
    if pos >= len(data):
        raise ValueError("truncated data")
    first = data[pos]
    if first < 0x80:
        return first, pos + 1
    size = 256 - first
    end = pos + 1 + size
    if size > 8 or end > len(data):
        raise ValueError("malformed length")
    return int.from_bytes(data[pos + 1 : end], "big"), end


def _wrap_bytes(payload: bytes) -> bytes:
    body = bytes([_BYTES_TYPE_ID, 0]) + _encode_uint(len(payload)) + payload
    return _encode_uint(len(body)) + body


def _unwrap_bytes(data: bytes) -> bytes:
    data = bytes(data)
    length, pos = _decode_uint(data, 0)
    body = data[pos : pos + length]
    if len(body) != length:
        raise ValueError("truncated data")
    type_id, pos = _decode_uint(body, 0)
    if type_id != _BYTES_TYPE_ID:
        raise ValueError("data does not hold a byte string")
    delta, pos = _decode_uint(body, pos)
    if delta != 0:
        raise ValueError("malformed data")
    size, pos = _decode_uint(body, pos)
    payload = body[pos : pos + size]
    if len(payload) != size:
        raise ValueError("truncated data")
    return payload


def _to_json(document: Any) -> bytes:
    return json.dumps(document, separators=(",", ":")).encode("utf-8")


def _from_json(payload: bytes) -> dict[str, Any]:
    try:
        document = json.loads(payload)
    except UnicodeDecodeError as exc:
        raise ValueError("payload is not UTF-8 JSON") from exc
    if not isinstance(document, dict):
        raise ValueError("payload is not a JSON object")
    return document


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(value: str | None) -> bytes:
    if value is None:
        return b""
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, TypeError) as exc:
        raise ValueError("invalid base64 field") from exc


def _b64_list(items: list[bytes]) -> list[str] | None:
    return [_b64(item) for item in items] or None


def _unb64_list(values: list[str] | None) -> list[bytes]:
    return [_unb64(value) for value in values or []]


@dataclass
class Input:
    """A transaction input spending an earlier output."""

    prev_transaction_hash: bytes = b""
    vout: bytes = b""
    tx_in_script_len: bytes = b""
    script_sig: list[bytes] = field(default_factory=list)

    def _to_document(self) -> dict[str, Any]:
        return {
            "PrevTransactionHash": _b64(self.prev_transaction_hash),
            "Vout": _b64(self.vout),
            "TxInScriptLen": _b64(self.tx_in_script_len),
            "ScriptSig": _b64_list(self.script_sig),
        }

    @classmethod
    def _from_document(cls, doc: Mapping[str, Any]) -> Input:
        return cls(
            prev_transaction_hash=_unb64(doc.get("PrevTransactionHash")),
            vout=_unb64(doc.get("Vout")),
            tx_in_script_len=_unb64(doc.get("TxInScriptLen")),
            script_sig=_unb64_list(doc.get("ScriptSig")),
        )

    def serialize(self) -> bytes:
        """Encode the input for storage or the wire."""
        return _wrap_bytes(_to_json(self._to_document()))

    @classmethod
    def deserialize(cls, data: bytes) -> Input:
        """Decode an input written by serialize; raises ValueError if malformed."""
        return cls._from_document(_from_json(_unwrap_bytes(data)))


@dataclass
class Output:
    """A transaction output locked by a script."""

    value: bytes = b""
    tx_script_length: bytes = b""
    script_pub_key: list[bytes] = field(default_factory=list)

    def is_locked_with(self, key: bytes) -> bool:
        """Return True if the locking script holds this public key or key hash."""
        return any(op == key for op in self.script_pub_key)

    def _to_document(self) -> dict[str, Any]:
        return {
            "Value": _b64(self.value),
            "TxScriptLength": _b64(self.tx_script_length),
            "ScriptPubKey": _b64_list(self.script_pub_key),
        }

    @classmethod
    def _from_document(cls, doc: Mapping[str, Any]) -> Output:
        return cls(
            value=_unb64(doc.get("Value")),
            tx_script_length=_unb64(doc.get("TxScriptLength")),
            script_pub_key=_unb64_list(doc.get("ScriptPubKey")),
        )


def make_input(
    prev_transaction_hash: bytes, vout: bytes, script_sig: list[bytes]
) -> Input:
    """Build an input, recording the total length of its unlocking script."""
    script_sig = list(script_sig)
    return Input(
        prev_transaction_hash=prev_transaction_hash,
        vout=vout,
        tx_in_script_len=encode_int(total_length(script_sig)),
        script_sig=script_sig,
    )


def make_output(script_pub_key: list[bytes], value: int) -> Output:
    """Build an output of the given value, recording its script length."""
    script_pub_key = list(script_pub_key)
    return Output(
        value=encode_int(value),
        tx_script_length=encode_int(total_length(script_pub_key)),
        script_pub_key=script_pub_key,
    )


@dataclass
class Transaction:
    """A transaction moving value from inputs to outputs."""

    version: bytes = b""
    in_counter: bytes = b""
    inputs: list[Input] = field(default_factory=list)
    out_counter: bytes = b""
    outputs: list[Output] = field(default_factory=list)
    lock_time: bytes = b""

    def _to_document(self) -> dict[str, Any]:
        return {
            "Version": _b64(self.version),
            "InCounter": _b64(self.in_counter),
            "Inputs": [i._to_document() for i in self.inputs] or None,
            "OutCounter": _b64(self.out_counter),
            "Outputs": [o._to_document() for o in self.outputs] or None,
            "LockTime": _b64(self.lock_time),
        }

    @classmethod
    def _from_document(cls, doc: Mapping[str, Any]) -> Transaction:
        return cls(
            version=_unb64(doc.get("Version")),
            in_counter=_unb64(doc.get("InCounter")),
            inputs=[Input._from_document(i) for i in doc.get("Inputs") or []],
            out_counter=_unb64(doc.get("OutCounter")),
            outputs=[Output._from_document(o) for o in doc.get("Outputs") or []],
            lock_time=_unb64(doc.get("LockTime")),
        )

    def serialize(self) -> bytes:
        """Encode the transaction for storage or the wire."""
        return _wrap_bytes(_to_json(self._to_document()))

    @classmethod
    def deserialize(cls, data: bytes) -> Transaction:
        """Decode a transaction written by serialize; raises ValueError if malformed."""
        return cls._from_document(_from_json(_unwrap_bytes(data)))

    def hash(self) -> bytes:
        """Return the transaction ID: the SHA-256 of its serialized form."""
        return sha256(self.serialize())

    def value(self) -> int:
        """Return the total value of the outputs."""
        return sum(decode_int(out.value) for out in self.outputs)

    def is_coinbase(self) -> bool:
        """Return True for a coinbase transaction."""
        return (
            len(self.inputs) == 1
            and not self.inputs[0].prev_transaction_hash
            and self.inputs[0].vout == encode_int(-1)
        )

    def fees(self, prev_txs: Mapping[str, Transaction]) -> int:
        """Return inputs minus outputs; prev_txs maps hex transaction IDs to transactions.

        Every output of each referenced transaction counts towards the inputs.
        Raises KeyError when a referenced transaction is missing.
        """
        if self.is_coinbase():
            return 0
        total_input = sum(
            prev_txs[inp.prev_transaction_hash.hex()].value() for inp in self.inputs
        )
        return total_input - self.value()


def serialize_outputs(outputs: Iterable[Output]) -> bytes:
    """Encode a list of outputs."""
    document = {"Outputs": [out._to_document() for out in outputs] or None}
    return _wrap_bytes(_to_json(document))


def deserialize_outputs(data: bytes) -> list[Output]:
    """Decode outputs written by serialize_outputs; raises ValueError if malformed."""
    document = _from_json(_unwrap_bytes(data))
    return [Output._from_document(o) for o in document.get("Outputs") or []]


def serialize_transactions(txs: Iterable[Transaction]) -> list[bytes]:
    """Serialize each transaction in turn."""
    return [tx.serialize() for tx in txs]