import io
import tracemalloc

import pytest

from pcapfmt import (
    InvalidDateError,
    InvalidFileHeaderError,
    PcapEOFError,
    PcapReader,
)
from pcapfmt.codec.pcap_reader import MAX_SNAPLEN
from pcapfmt.codec.timecodec import make_time

from pcap_builders import NATIVE, SWAPPED, TrickleReader, file_header, record


def open_bytes(data, **kwargs):
    return PcapReader(io.BytesIO(data), **kwargs)


class TestHeader:
    def test_empty_stream_is_invalid_header(self):
        with pytest.raises(InvalidFileHeaderError):
            open_bytes(b"")

    def test_short_header_is_invalid(self):
        with pytest.raises(InvalidFileHeaderError):
            open_bytes(file_header(NATIVE)[:23])

    def test_bad_magic(self):
        with pytest.raises(InvalidFileHeaderError):
            open_bytes(b"\x0a\x0d\x0d\x0a" + bytes(20))

    def test_snaplen_above_ceiling_is_rejected(self):
        with pytest.raises(InvalidFileHeaderError, match="exceeds"):
            open_bytes(file_header(NATIVE, snaplen=0xFFFFFFFF))

    def test_snaplen_rejection_allocates_nothing_large(self):
        tracemalloc.start()
        try:
            with pytest.raises(InvalidFileHeaderError):
                open_bytes(file_header(NATIVE, snaplen=MAX_SNAPLEN + 1))
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()
        assert peak < 1024 * 1024

    def test_snaplen_at_ceiling_is_accepted(self):
        reader = open_bytes(file_header(NATIVE, snaplen=MAX_SNAPLEN))
        assert reader.snaplen == MAX_SNAPLEN

    def test_custom_ceiling(self):
        with pytest.raises(InvalidFileHeaderError):
            open_bytes(file_header(NATIVE, snaplen=2048), max_snaplen=1024)

    def test_exposes_options(self):
        reader = open_bytes(file_header(SWAPPED, nano=True, snaplen=1500, linktype=101,
                                        thiszone=60))
        assert reader.options.snaplen == 1500
        assert reader.options.linktype == 101
        assert reader.options.high_res_timestamps
        assert reader.options.non_native_byte_order
        assert reader.linktype == 101
        assert reader.utc_offset == 60


class TestRecords:
    def test_reads_packets_in_order(self):
        data = (file_header(NATIVE)
                + record(NATIVE, 100, 1, b"first")
                + record(NATIVE, 101, 2, b"second", orig_len=60))
        reader = open_bytes(data)

        first = reader.next()
        assert first.timestamp_ns == make_time(100, 1000)
        assert bytes(first.data) == b"first"
        assert first.orig_len == 5

        second = reader.next()
        assert second.timestamp_ns == make_time(101, 2000)
        assert bytes(second.data) == b"second"
        assert second.orig_len == 60
        assert second.is_truncated

    def test_exhaustion_is_idempotent(self):
        reader = open_bytes(file_header(NATIVE) + record(NATIVE, 1, 0, b"x"))
        assert reader.next() is not None
        assert reader.next() is None
        assert reader.exhausted
        assert reader.next() is None

    def test_header_only_file_has_no_packets(self):
        assert open_bytes(file_header(NATIVE)).next() is None

    def test_partial_record_header_is_fatal(self):
        reader = open_bytes(file_header(NATIVE) + b"\x00" * 7)
        with pytest.raises(PcapEOFError):
            reader.next()

    def test_truncated_payload_is_fatal(self):
        reader = open_bytes(file_header(NATIVE) + record(NATIVE, 1, 0, b"abcdef")[:-2])
        with pytest.raises(PcapEOFError):
            reader.next()

    def test_swapped_byte_order(self):
        data = file_header(SWAPPED, nano=True) + record(SWAPPED, 7, 999_999_999, b"\x01\x02")
        packet = open_bytes(data).next()
        assert packet.timestamp_ns == make_time(7, 999_999_999)
        assert bytes(packet.data) == b"\x01\x02"

    def test_utc_offset_is_applied(self):
        data = file_header(NATIVE, thiszone=-3600) + record(NATIVE, 7200, 0, b"")
        assert open_bytes(data).next().timestamp_ns == make_time(3600)

    def test_oversized_record_is_truncated_and_skipped(self):
        big = bytes(range(256)) * 8
        data = (file_header(NATIVE, snaplen=100)
                + record(NATIVE, 1, 0, big)
                + record(NATIVE, 2, 0, b"next"))
        reader = open_bytes(data)

        packet = reader.next()
        assert bytes(packet.data) == big[:100]
        assert packet.orig_len == len(big)

        following = reader.next()
        assert bytes(following.data) == b"next"
        assert following.timestamp_ns == make_time(2)
        assert reader.next() is None

    def test_oversized_record_logs_warning(self, caplog):
        data = file_header(NATIVE, snaplen=4) + record(NATIVE, 1, 0, b"123456")
        with caplog.at_level("WARNING", logger="pcapfmt.codec.pcap_reader"):
            open_bytes(data).next()
        assert "more than snaplen" in caplog.text

    def test_oversized_record_cut_short_is_fatal(self):
        data = file_header(NATIVE, snaplen=4) + record(NATIVE, 1, 0, b"123456")[:-1]
        with pytest.raises(PcapEOFError):
            open_bytes(data).next()

    def test_invalid_date_keeps_stream_aligned(self):
        data = (file_header(NATIVE)
                + record(NATIVE, 1, 1_000_000, b"bad")
                + record(NATIVE, 2, 0, b"good"))
        reader = open_bytes(data)
        with pytest.raises(InvalidDateError):
            reader.next()
        assert bytes(reader.next().data) == b"good"
        assert reader.packet_count == 2

    def test_zero_snaplen(self):
        data = file_header(NATIVE, snaplen=0) + record(NATIVE, 1, 0, b"abc")
        packet = open_bytes(data).next()
        assert bytes(packet.data) == b""
        assert packet.orig_len == 3

    def test_trickling_source(self):
        data = (file_header(SWAPPED, snaplen=8)
                + record(SWAPPED, 3, 4, b"0123456789")
                + record(SWAPPED, 5, 6, b"ab"))
        reader = PcapReader(TrickleReader(data, step=3))
        assert bytes(reader.next().data) == b"01234567"
        assert bytes(reader.next().data) == b"ab"
        assert reader.next() is None


class TestBufferOwnership:
    def test_next_returns_read_only_view(self):
        data = file_header(NATIVE) + record(NATIVE, 1, 0, b"abc")
        packet = open_bytes(data).next()
        assert isinstance(packet.data, memoryview)
        assert packet.data.readonly

    def test_view_is_overwritten_by_next_call(self):
        data = (file_header(NATIVE)
                + record(NATIVE, 1, 0, b"aaaa")
                + record(NATIVE, 2, 0, b"bbbb"))
        reader = open_bytes(data)
        first = reader.next()
        kept = first.detach()
        reader.next()
        assert bytes(first.data) == b"bbbb"
        assert kept.data == b"aaaa"

    def test_iteration_yields_owned_copies(self):
        data = (file_header(NATIVE)
                + record(NATIVE, 1, 0, b"aaaa")
                + record(NATIVE, 2, 0, b"bbbb"))
        packets = list(open_bytes(data))
        assert [p.data for p in packets] == [b"aaaa", b"bbbb"]
        assert all(isinstance(p.data, bytes) for p in packets)

    def test_iteration_can_resume_after_record_error(self):
        data = (file_header(NATIVE)
                + record(NATIVE, 1, 2_000_000, b"bad")
                + record(NATIVE, 2, 0, b"good"))
        reader = open_bytes(data)
        with pytest.raises(InvalidDateError):
            next(reader)
        assert [p.data for p in reader] == [b"good"]

    def test_packets_can_skip_invalid_records(self):
        data = (file_header(NATIVE)
                + record(NATIVE, 1, 0, b"one")
                + record(NATIVE, 1, 5_000_000, b"bad")
                + record(NATIVE, 3, 0, b"three"))
        assert [p.data for p in open_bytes(data).packets(skip_invalid=True)] == \
            [b"one", b"three"]
        with pytest.raises(InvalidDateError):
            list(open_bytes(data).packets())


def test_open_and_close_file(tmp_path):
    path = tmp_path / "capture.pcap"
    path.write_bytes(file_header(NATIVE) + record(NATIVE, 1, 0, b"payload"))
    with PcapReader.open(str(path)) as reader:
        assert [p.data for p in reader] == [b"payload"]
    assert reader.next() is None
    reader.close()


def test_open_closes_file_on_bad_header(tmp_path):
    path = tmp_path / "broken.pcap"
    path.write_bytes(b"not a pcap file at all!!")
    with pytest.raises(InvalidFileHeaderError):
        PcapReader.open(str(path))
