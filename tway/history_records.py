"""Records of requests exchanged with peers, and filters over lists of them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tway.messages import MsgAskBlocks, MsgAskHeaders, MsgHeaders, MsgVersion


def _clock(date: datetime) -> str:
    return date.strftime("%H:%M:%S.%f")


@dataclass
class GetBlocksHistory:
    """A getblocks request that was sent or received."""

    message: MsgAskBlocks
    date: datetime
    sent: bool

    def contains_full_range(self, max_block_per_msg: int) -> bool:
        """Return True if the request spans exactly the largest allowed range."""
        low, high = self.message.block_range
        return high - low + 1 == max_block_per_msg

    def __str__(self) -> str:
        return (
            f"{{Date: {_clock(self.date)}, Message: {self.message}, "
            f"Sent: {str(self.sent).lower()}}}"
        )


class BlocksHistoryList(list):
    """A list of getblocks records."""

    def select(self, sent: bool) -> BlocksHistoryList:
        """Return the records that were sent (True) or received (False)."""
        return BlocksHistoryList(item for item in self if item.sent == sent)

    def sort_by_date(self, desc: bool = False) -> BlocksHistoryList:
        """Return a copy ordered by date."""
        return BlocksHistoryList(sorted(self, key=lambda item: item.date, reverse=desc))

    def first(self) -> GetBlocksHistory | None:
        """Return the first record, or None when the list is empty."""
        return self[0] if self else None

    def higher_range(self, max_block_per_msg: int) -> GetBlocksHistory | None:
        """Return the full-range record asking for the highest block, if any."""
        best = None
        higher = 0
        for item in self:
            top = item.message.block_range[1]
            if top > higher and item.contains_full_range(max_block_per_msg):
                best, higher = item, top
        return best


@dataclass
class GetHeadersHistory:
    """A getheaders request that was sent or received."""

    message: MsgAskHeaders
    date: datetime
    sent: bool
    id: int = 0

    def __str__(self) -> str:
        return (
            f"{{Date:{_clock(self.date)}, ID: {self.id}, Message: {self.message}, "
            f"Sent: {str(self.sent).lower()}}}"
        )


class GetHeadersHistoryList(list):
    """A list of getheaders records."""

    def select_by_sent(self, sent: bool) -> GetHeadersHistoryList:
        """Return the records that were sent (True) or received (False)."""
        return GetHeadersHistoryList(item for item in self if item.sent == sent)

    def select_by_stopping_hash(self, stopping_hash: bytes) -> GetHeadersHistoryList:
        """Return the requests with this stopping hash."""
        return GetHeadersHistoryList(
            item for item in self if item.message.stopping_hash == stopping_hash
        )

    def select_by_head_hash(self, head_hash: bytes) -> GetHeadersHistoryList:
        """Return the requests with this head hash."""
        return GetHeadersHistoryList(
            item for item in self if item.message.head_hash == head_hash
        )

    def select_by_count(self, count: int) -> GetHeadersHistoryList:
        """Return the requests whose 16-bit count equals count."""
        wanted = count & 0xFFFF
        return GetHeadersHistoryList(
            item for item in self if item.message.count == wanted
        )

    def sort_by_date(self, desc: bool = False) -> GetHeadersHistoryList:
        """Return a copy ordered by date."""
        return GetHeadersHistoryList(
            sorted(self, key=lambda item: item.date, reverse=desc)
        )

    def first(self) -> GetHeadersHistory | None:
        """Return the first record, or None when the list is empty."""
        return self[0] if self else None


@dataclass
class HeadersHistory:
    """A headers reply received from a peer."""

    message: MsgHeaders
    date: datetime

    def __str__(self) -> str:
        return f"{{Date: {_clock(self.date)}, Message: {self.message}}}"


class HeadersHistoryList(list):
    """A list of headers records."""

    def select_by_count(self, count: int) -> HeadersHistoryList:
        """Return the replies holding at most count headers."""
        return HeadersHistoryList(
            item for item in self if len(item.message.headers) <= count
        )

    def longest_list_length(self) -> int:
        """Return the largest number of headers in any reply, 0 when empty."""
        return max((len(item.message.headers) for item in self), default=0)

    def sort_by_date(self, desc: bool = False) -> HeadersHistoryList:
        """Return a copy ordered by date."""
        return HeadersHistoryList(sorted(self, key=lambda item: item.date, reverse=desc))

    def first(self) -> HeadersHistory | None:
        """Return the first record, or None when the list is empty."""
        return self[0] if self else None

    def select_by_stopping_hash(self, stopping_hash: bytes) -> HeadersHistoryList:
        """Return the replies whose first header has this hash."""
        return HeadersHistoryList(
            item
            for item in self
            if item.message.headers and item.message.headers[0].hash == stopping_hash
        )

    def select_by_head_hash(self, head_hash: bytes) -> HeadersHistoryList:
        """Return the replies whose last header has this hash."""
        return HeadersHistoryList(
            item
            for item in self
            if item.message.headers and item.message.headers[-1].hash == head_hash
        )


@dataclass
class VersionHistory:
    """A version message that was sent or received."""

    message: MsgVersion
    date: datetime
    sent: bool