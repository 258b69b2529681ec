"""Messages exchanged between nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from tway.block import BlockHeader
from tway.netaddr import NetAddress
from tway.transaction import Transaction


@dataclass
class MsgAskAddr:
    """A request for the receiver's list of known peer addresses."""

    addr_sender: NetAddress
    addr_receiver: NetAddress


@dataclass
class MsgAddr:
    """A list of known peer addresses, each as "ip:port" bytes."""

    addr_sender: NetAddress
    addr_receiver: NetAddress
    addr_list: list[bytes] = field(default_factory=list)


@dataclass
class MsgAskBlocks:
    """A request for the hashes of the blocks in an inclusive height range."""

    addr: NetAddress
    block_range: tuple[int, int]

    def __str__(self) -> str:
        low, high = self.block_range
        return f"{{Addr: {self.addr}, Range: [{low}:{high}]}}"


@dataclass
class MsgBlock:
    """A serialized block."""

    addr_sender: NetAddress
    addr_receiver: NetAddress
    data: bytes = b""


@dataclass
class MsgGetData:
    """A request for a block or transaction by hash; kind is "block" or "tx"."""

    addr_sender: NetAddress
    addr_receiver: NetAddress
    id: bytes = b""
    kind: str = "block"


@dataclass
class MsgAskHeaders:
    """A request for up to count block headers between two hashes."""

    addr_sender: NetAddress
    addr_receiver: NetAddress
    version: int = 0
    head_hash: bytes = b""
    stopping_hash: bytes = b""
    count: int = 0

    def __str__(self) -> str:
        return (
            f"{{AddrSender: {self.addr_sender}, "
            f"AddrReceiver: {self.addr_receiver}, "
            f"Version: {self.version}, "
            f"HeadHash: {self.head_hash.hex()}, "
            f"StoppingHash: {self.stopping_hash.hex()}, "
            f"Count: {self.count}}}"
        )


@dataclass
class Header:
    """A block header together with its height and hash."""

    height: int
    hash: bytes
    header: BlockHeader

    def __str__(self) -> str:
        return f"{{Height: {self.height}, Hash: {self.hash.hex()}, Header: {self.header}}}"


@dataclass
class MsgHeaders:
    """A reply to a headers request, carrying the request it answers."""

    addr_sender: NetAddress
    addr_receiver: NetAddress
    version: int = 0
    headers: list[Header] = field(default_factory=list)
    get_headers_origin: MsgAskHeaders | None = None

    def __str__(self) -> str:
        lines = [
            f"{{AddrSender: {self.addr_sender}, AddrReceiver: {self.addr_receiver}, "
            f"Version: {self.version}, List:\n"
        ]
        lines.extend(f"[{index}] {header}\n" for index, header in enumerate(self.headers))
        lines.append("}")
        return "".join(lines)


@dataclass
class MsgInv:
    """An inventory of hashes; kind is "block" or "tx"."""

    addr_sender: NetAddress
    addr_receiver: NetAddress
    kind: str = "block"
    items: list[bytes] = field(default_factory=list)


@dataclass
class MsgPing:
    """A liveness check."""

    addr_sender: NetAddress
    addr_receiver: NetAddress


@dataclass
class MsgPong:
    """The answer to a ping."""

    addr_sender: NetAddress
    addr_receiver: NetAddress


@dataclass
class MsgTx:
    """A transaction being relayed."""

    addr_sender: NetAddress
    addr_receiver: NetAddress
    tx: Transaction


@dataclass
class MsgVerack:
    """Acknowledges a version message."""

    addr_sender: NetAddress
    addr_receiver: NetAddress


@dataclass
class MsgVersion:
    """A node's protocol version and chain height."""

    protocol_version: int
    addr_receiver: NetAddress
    addr_sender: NetAddress
    last_block: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))