"""Network addresses of peers and helpers to parse them."""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

# Documentation-only address; connecting a UDP socket to it sends nothing
# but lets the system pick the outgoing interface.
_PROBE_ADDRESS = ("192.0.2.1", 9)


def _atoi(text: str) -> int:
    """Parse decimal text, giving 0 when it is not a number."""
    try:
        return int(text, 10)
    except ValueError:
        return 0


def ip_string_to_bytes(ip: str) -> bytes:
    """Turn dotted text into one byte per part; parts that are not numbers become 0."""
    return bytes(_atoi(part) & 0xFF for part in ip.split("."))


def split_ip_and_port(addr: str) -> tuple[bytes, int]:
    """Split "a.b.c.d:port" into IP bytes and port; a missing port gives 0."""
    parts = addr.split(":")
    if len(parts) == 2:
        return ip_string_to_bytes(parts[0]), _atoi(parts[1]) & 0xFFFF
    return ip_string_to_bytes(parts[0]), 0


def _candidate_addresses():
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            probe.connect(_PROBE_ADDRESS)
            yield probe.getsockname()[0]
    except OSError:
        pass
    try:
        yield from socket.gethostbyname_ex(socket.gethostname())[2]
    except OSError:
        pass


def get_local_ip() -> ipaddress.IPv4Address:
    """Return the first non-loopback IPv4 address of this host.

    Raises OSError when the host has no such address.
    """
    for candidate in _candidate_addresses():
        try:
            ip = ipaddress.ip_address(candidate)
        except ValueError:
            continue
        if ip.version == 4 and not ip.is_loopback and not ip.is_unspecified:
            return ip
    raise OSError("are you connected to the network?")


def _normalize(ip: IPAddress) -> IPAddress:
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    return ip


def _coerce_ip(value: object) -> IPAddress | None:
    if value is None:
        return None
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return _normalize(value)
    if isinstance(value, str):
        try:
            return _normalize(ipaddress.ip_address(value))
        except ValueError:
            return None
    if isinstance(value, (bytes, bytearray)):
        if len(value) not in (4, 16):
            raise ValueError(f"an IP address is 4 or 16 bytes, not {len(value)}")
        return _normalize(ipaddress.ip_address(bytes(value)))
    raise TypeError(f"cannot use {type(value).__name__} as an IP address")


def _now_to_the_second() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True, eq=False)
class NetAddress:
    """A peer's IP address and port, with the time it was last seen.

    An IP that could not be parsed is kept as None and printed as "<nil>".
    """

    ip: IPAddress | None
    port: int
    timestamp: datetime = field(default_factory=_now_to_the_second)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ip", _coerce_ip(self.ip))
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")
        object.__setattr__(self, "timestamp", self.timestamp.replace(microsecond=0))

    @classmethod
    def from_string(cls, addr: str) -> NetAddress:
        """Parse "ip:port"; raises ValueError unless there is exactly one colon."""
        parts = addr.split(":")
        if len(parts) != 2:
            raise ValueError(f"invalid network address: {addr!r}")
        return cls(parts[0], _atoi(parts[1]) & 0xFFFF)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetAddress):
            return NotImplemented
        return self.ip == other.ip and self.port == other.port

    def __hash__(self) -> int:
        return hash((self.ip, self.port))

    def __str__(self) -> str:
        host = "<nil>" if self.ip is None else str(self.ip)
        return f"{host}:{self.port}"