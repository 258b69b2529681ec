"""Per-peer history of requests and timing statistics drawn from it."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from tway.history_records import (
    BlocksHistoryList,
    GetBlocksHistory,
    GetHeadersHistory,
    GetHeadersHistoryList,
    HeadersHistory,
    HeadersHistoryList,
    VersionHistory,
)
from tway.messages import MsgAskBlocks, MsgAskHeaders, MsgHeaders, MsgVersion

_HOUR_NS = 3600 * 10**9


def _now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


def _nanoseconds(delta: timedelta) -> int:
    return (delta.days * 86400 + delta.seconds) * 10**9 + delta.microseconds * 1000


def _truncating_div(total: int, count: int) -> int:
    quotient = abs(total) // count
    return quotient if total >= 0 else -quotient


class HistoryManager:
    """Keeps, for each peer address, the requests exchanged with it."""

    def __init__(self, max_block_per_msg: int, log: bool = False) -> None:
        self.max_block_per_msg = max_block_per_msg
        self.log_enabled = log
        self.get_blocks: dict[str, BlocksHistoryList] = {}
        self.get_headers: dict[str, GetHeadersHistoryList] = {}
        self.headers: dict[str, HeadersHistoryList] = {}
        self.versions: dict[str, list[VersionHistory]] = {}
        self._blocks_lock = threading.Lock()
        self._headers_lock = threading.Lock()
        self._version_lock = threading.Lock()

    def _log(self, title: str, content: str) -> None:
        if self.log_enabled:
            print(f"HISTORY {title}: {content}")

    def add_get_blocks(self, msg: MsgAskBlocks, sent: bool) -> GetBlocksHistory:
        """Record a getblocks request under the address it names."""
        record = GetBlocksHistory(msg, _now(), sent)
        with self._blocks_lock:
            self.get_blocks.setdefault(str(msg.addr), BlocksHistoryList()).append(record)
        self._log("getblocks request", str(record))
        return record

    def add_get_headers(self, msg: MsgAskHeaders, sent: bool) -> GetHeadersHistory:
        """Record a getheaders request under the peer on the other side."""
        addr = str(msg.addr_receiver if sent else msg.addr_sender)
        with self._headers_lock:
            records = self.get_headers.setdefault(addr, GetHeadersHistoryList())
            record = GetHeadersHistory(msg, _now(), sent, len(records))
            records.append(record)
        self._log("getheaders request", str(record))
        return record

    def add_headers(self, msg: MsgHeaders) -> HeadersHistory:
        """Record a headers reply under its sender."""
        record = HeadersHistory(msg, _now())
        with self._headers_lock:
            self.headers.setdefault(str(msg.addr_sender), HeadersHistoryList()).append(
                record
            )
        self._log("headers request:", str(record))
        return record

    def add_version(self, msg: MsgVersion, sent: bool) -> VersionHistory:
        """Record a version message under the peer on the other side."""
        addr = str(msg.addr_receiver if sent else msg.addr_sender)
        record = VersionHistory(msg, _now(), sent)
        with self._version_lock:
            self.versions.setdefault(addr, []).append(record)
        return record

    def best_height_asked(self) -> int:
        """Return the highest block height ever asked for, 0 if none."""
        with self._blocks_lock:
            return max(
                [0]
                + [
                    record.message.block_range[1]
                    for records in self.get_blocks.values()
                    for record in records
                ]
            )

    def full_range_requests(self) -> BlocksHistoryList:
        """Return the sent getblocks requests that span the largest allowed range."""
        with self._blocks_lock:
            found = BlocksHistoryList(
                record
                for records in self.get_blocks.values()
                for record in records
                if record.contains_full_range(self.max_block_per_msg)
            )
        return found.select(True)

    def get_blocks_for(self, addr: str) -> BlocksHistoryList:
        """Return a copy of the getblocks records for a peer."""
        with self._blocks_lock:
            return BlocksHistoryList(self.get_blocks.get(addr, ()))

    def get_headers_for(self, addr: str) -> GetHeadersHistoryList:
        """Return a copy of the getheaders records for a peer."""
        with self._headers_lock:
            return GetHeadersHistoryList(self.get_headers.get(addr, ()))

    def headers_for(self, addr: str) -> HeadersHistoryList:
        """Return a copy of the headers replies from a peer."""
        with self._headers_lock:
            return HeadersHistoryList(self.headers.get(addr, ()))

    def count_peers_answering(
        self, stopping_hash: bytes, head_hash: bytes, count: int
    ) -> int:
        """Return how many peers replied to the getheaders request with these values."""
        with self._headers_lock:
            snapshot = [list(records) for records in self.headers.values()]
        return sum(
            1
            for records in snapshot
            if any(
                (origin := record.message.get_headers_origin) is not None
                and origin.head_hash == head_hash
                and origin.stopping_hash == stopping_hash
                and origin.count == count
                for record in records
            )
        )

    def average_time_to_get_n_headers(self, count: int) -> int:
        """Return the mean nanoseconds between a getheaders request and its reply."""
        with self._headers_lock:
            requests = {
                addr: GetHeadersHistoryList(records)
                for addr, records in self.get_headers.items()
            }
            replies = {
                addr: HeadersHistoryList(records)
                for addr, records in self.headers.items()
            }
        total = 0
        counted = 0
        for addr, records in requests.items():
            last_reply = (
                replies.get(addr, HeadersHistoryList())
                .select_by_count(count)
                .sort_by_date(True)
                .first()
            )
            if last_reply is None:
                continue
            candidates = records.select_by_sent(True).sort_by_date(True).select_by_count(
                count
            )
            for request in candidates:
                if last_reply.date > request.date:
                    total += _nanoseconds(last_reply.date - request.date)
                    counted += 1
                    break
        if counted == 0:
            return 0
        return _truncating_div(total, counted)


@dataclass
class DownloadRecord:
    """When a block download started and when the block arrived, in nanoseconds."""

    start: int
    received_at: int = 0


def average_download_time(
    records: Iterable[DownloadRecord] | Mapping[object, DownloadRecord],
    now: int | None = None,
) -> int:
    """Return the mean download time in nanoseconds over the last hour, 0 if none.

    Only downloads that started within the hour before now and have arrived count.
    """
    if isinstance(records, Mapping):
        records = records.values()
    if now is None:
        now = time.time_ns()
    cutoff = now - _HOUR_NS
    durations = [
        record.received_at - record.start
        for record in records
        if record.start > cutoff and record.received_at != 0
    ]
    if not durations:
        return 0
    return _truncating_div(sum(durations), len(durations))