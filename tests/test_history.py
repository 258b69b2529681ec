import time
from datetime import datetime, timedelta

from tway.block import BlockHeader
from tway.history import DownloadRecord, HistoryManager, average_download_time
from tway.messages import Header, MsgAskBlocks, MsgAskHeaders, MsgHeaders, MsgVersion
from tway.netaddr import NetAddress

A = NetAddress("10.0.0.1", 3000)
B = NetAddress("10.0.0.2", 3001)
C = NetAddress("10.0.0.3", 3002)
T0 = datetime(2021, 5, 4, 10, 0, 0)


def _headers(n):
    return [Header(i, bytes([i]), BlockHeader()) for i in range(n)]


def test_add_get_blocks_keyed_by_addr():
    hm = HistoryManager(10)
    record = hm.add_get_blocks(MsgAskBlocks(A, (1, 10)), True)
    assert hm.get_blocks_for(str(A)) == [record]
    assert record.sent is True
    assert hm.get_blocks_for(str(B)) == []


def test_best_height_asked():
    hm = HistoryManager(10)
    assert hm.best_height_asked() == 0
    hm.add_get_blocks(MsgAskBlocks(A, (1, 10)), True)
    hm.add_get_blocks(MsgAskBlocks(B, (11, 20)), False)
    assert hm.best_height_asked() == 20


def test_full_range_requests_only_sent_and_full():
    hm = HistoryManager(10)
    wanted = hm.add_get_blocks(MsgAskBlocks(A, (1, 10)), True)
    hm.add_get_blocks(MsgAskBlocks(A, (11, 20)), False)
    hm.add_get_blocks(MsgAskBlocks(B, (21, 25)), True)
    assert hm.full_range_requests() == [wanted]


def test_add_get_headers_ids_and_keys():
    hm = HistoryManager(10)
    first = hm.add_get_headers(MsgAskHeaders(A, B, count=5), True)
    second = hm.add_get_headers(MsgAskHeaders(A, B, count=5), True)
    received = hm.add_get_headers(MsgAskHeaders(C, A, count=5), False)
    assert [first.id, second.id] == [0, 1]
    assert hm.get_headers_for(str(B)) == [first, second]
    assert hm.get_headers_for(str(C)) == [received]
    assert received.id == 0


def test_add_headers_and_version():
    hm = HistoryManager(10)
    reply = hm.add_headers(MsgHeaders(B, A, headers=_headers(2)))
    assert hm.headers_for(str(B)) == [reply]
    sent = hm.add_version(MsgVersion(1, B, A, 3), True)
    received = hm.add_version(MsgVersion(1, A, C, 4), False)
    assert hm.versions[str(B)] == [sent]
    assert hm.versions[str(C)] == [received]


def test_getters_return_copies():
    hm = HistoryManager(10)
    hm.add_get_blocks(MsgAskBlocks(A, (1, 10)), True)
    copy = hm.get_blocks_for(str(A))
    copy.clear()
    assert len(hm.get_blocks_for(str(A))) == 1


def test_count_peers_answering():
    hm = HistoryManager(10)
    origin = MsgAskHeaders(A, B, 1, b"head", b"stop", 5)
    other = MsgAskHeaders(A, B, 1, b"head", b"stop", 6)
    answering = [B, C]
    for peer in answering:
        hm.add_headers(MsgHeaders(peer, A, headers=_headers(1), get_headers_origin=origin))
    hm.add_headers(MsgHeaders(B, A, headers=_headers(1), get_headers_origin=origin))
    hm.add_headers(MsgHeaders(A, B, headers=_headers(1), get_headers_origin=other))
    assert hm.count_peers_answering(b"stop", b"head", 5) == len(answering)
    assert hm.count_peers_answering(b"stop", b"other", 5) == 0


def _exchange(hm, peer, request_at, reply_at, count=5, reply_size=3):
    request = hm.add_get_headers(MsgAskHeaders(A, peer, count=count), True)
    request.date = request_at
    reply = hm.add_headers(MsgHeaders(peer, A, headers=_headers(reply_size)))
    reply.date = reply_at


def test_average_time_to_get_n_headers():
    hm = HistoryManager(10)
    _exchange(hm, B, T0, T0 + timedelta(seconds=2))
    _exchange(hm, C, T0, T0 + timedelta(seconds=4))
    assert hm.average_time_to_get_n_headers(5) == 3_000_000_000


def test_average_time_uses_latest_earlier_request():
    hm = HistoryManager(10)
    _exchange(hm, B, T0, T0 + timedelta(seconds=3))
    later = hm.add_get_headers(MsgAskHeaders(A, B, count=5), True)
    later.date = T0 + timedelta(seconds=1)
    assert hm.average_time_to_get_n_headers(5) == 2_000_000_000


def test_average_time_without_matches_is_zero():
    hm = HistoryManager(10)
    assert hm.average_time_to_get_n_headers(5) == 0
    _exchange(hm, B, T0 + timedelta(seconds=5), T0)
    assert hm.average_time_to_get_n_headers(5) == 0
    assert hm.average_time_to_get_n_headers(7) == 0


def test_log_output(capsys):
    hm = HistoryManager(10, log=True)
    record = hm.add_get_blocks(MsgAskBlocks(A, (1, 10)), True)
    assert capsys.readouterr().out == f"HISTORY getblocks request: {record}\n"


def test_no_log_output_when_disabled(capsys):
    hm = HistoryManager(10)
    hm.add_get_blocks(MsgAskBlocks(A, (1, 10)), True)
    assert capsys.readouterr().out == ""


def test_average_download_time():
    now = 10_000
    records = [DownloadRecord(9_000, 9_060), DownloadRecord(9_500, 9_520)]
    assert average_download_time(records, now) == 40


def test_average_download_time_skips_old_and_pending():
    now = time.time_ns()
    recent = DownloadRecord(now - 500, now - 100)
    old = DownloadRecord(now - 2 * 3600 * 10**9, now - 10)
    pending = DownloadRecord(now - 50)
    result = average_download_time({"a": recent, "b": old, "c": pending}, now)
    assert result == recent.received_at - recent.start


def test_average_download_time_empty():
    assert average_download_time([], 1_000) == 0
    assert average_download_time([DownloadRecord(900)], 1_000) == 0