# tway

Building blocks of a small proof-of-work blockchain node, as a plain
Python library: encodings, hashes, Merkle roots, transactions, blocks,
peer addresses and messages, a per-peer request history, and wallets.

## What is inside

- `tway.base58`: `base58_encode` and `base58_decode` with the Bitcoin
  alphabet. Leading zero bytes become leading `1` characters and back.
  Decoding raises `ValueError` on characters outside the alphabet.
- `tway.encoding`: the integer encoding used in block and transaction
  fields. `encode_int` writes lower-case hexadecimal text padded to two
  digits; `decode_int` reads it back, giving 0 for malformed text.
  Also `array_byte_to_int` (decimal text, empty gives 0),
  `total_length` and `var_int_serialize_size`.
- `tway.hashing`: `sha256` and `ripemd160`.
- `tway.merkle`: `MerkleNode`, `new_merkle_node`, `merkle_root` (the last
  node of an odd level is duplicated; an empty list raises `ValueError`)
  and `number_of_two_power`.
- `tway.transaction`: `Input`, `Output` and `Transaction` dataclasses,
  `make_input` and `make_output`, `serialize`/`deserialize`, `hash`,
  `value`, `is_coinbase` and `fees`, plus `serialize_outputs`,
  `deserialize_outputs` and `serialize_transactions`. Serialized data is
  JSON text framed as a single length-prefixed byte string; malformed data
  raises `ValueError`.
- `tway.block`: `BlockHeader` and `Block`, `Block.hash` (SHA-256 over the
  header fields other than the version, followed by the size),
  `serialize`/`deserialize`, `block_hashes` and `merkle_hash`.
- `tway.netaddr`: `NetAddress` (IP, port and a timestamp rounded to the
  second; equality compares IP and port only), `NetAddress.from_string`,
  `ip_string_to_bytes`, `split_ip_and_port` and `get_local_ip`.
- `tway.messages`: dataclasses for the peer messages: `MsgAskAddr`,
  `MsgAddr`, `MsgAskBlocks`, `MsgBlock`, `MsgGetData`, `MsgAskHeaders`,
  `Header`, `MsgHeaders`, `MsgInv`, `MsgPing`, `MsgPong`, `MsgTx`,
  `MsgVerack` and `MsgVersion`.
- `tway.history_records`: records of exchanged requests
  (`GetBlocksHistory`, `GetHeadersHistory`, `HeadersHistory`,
  `VersionHistory`) and list types with filters, date sorting and `first`.
- `tway.history`: `HistoryManager`, which keeps the records per peer
  address (thread-safe) and answers `best_height_asked`,
  `full_range_requests`, `count_peers_answering` and
  `average_time_to_get_n_headers`; and `DownloadRecord` with
  `average_download_time`, the mean block download time over the last hour.
- `tway.address`: `hash_pub_key`, `checksum`, `address_from_pub_key_hash`,
  `pub_key_hash_from_address` and `is_address_valid`.
- `tway.wallet`: `Wallet` (a P-256 key pair; `sign` returns the 64-byte
  `r || s` signature of the SHA-256 of the data) and `WalletStore`, the
  wallets of one node kept in one JSON file of base64 DER private keys.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Base58 round trip:

```python
from tway.base58 import base58_encode, base58_decode

encoded = base58_encode(b"hello")
assert base58_decode(encoded) == b"hello"
```

A Merkle root over some transaction data:

```python
from tway.merkle import merkle_root

root = merkle_root([b"tx1", b"tx2", b"tx3"])
print(root.data.hex())
```

Wallets and addresses:

```python
from tway.wallet import WalletStore
from tway.address import is_address_valid

store = WalletStore.for_node("wallets", "10000")
address = store.generate_wallet()   # writes wallets/10000
assert is_address_valid(address)
print(store.addresses())
```

Parsing a peer address:

```python
from tway.netaddr import NetAddress

peer = NetAddress.from_string("192.168.1.10:3000")
print(str(peer))   # 192.168.1.10:3000
```

Recording requests and reading statistics:

```python
from tway.history import HistoryManager
from tway.messages import MsgAskBlocks
from tway.netaddr import NetAddress

history = HistoryManager(max_block_per_msg=500)
peer = NetAddress.from_string("10.0.0.2:3000")
history.add_get_blocks(MsgAskBlocks(peer, (1, 500)), sent=True)
print(history.best_height_asked())   # 500
```

## What it does not do

This is a library of data structures and helpers only. It has no command,
does not open network connections or listen for peers, does not store or
validate a chain, keeps no transaction pool or set of unspent outputs,
does not mine, and does not build or sign spending transactions. Wallet
balances are not computed.