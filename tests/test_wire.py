import struct

import pytest

from pcapfmt.codec.wire import (
    FILE_HEADER_SIZE,
    RECORD_HEADER_SIZE,
    FileHeader,
    Linktype,
    RecordHeader,
    linktype_name,
    pack_file_header,
    pack_record_header,
    unpack_file_header,
    unpack_record_header,
)


def test_layout_sizes():
    header = FileHeader(0xA1B2C3D4, 2, 4, 0, 0, 65535, 1)
    assert len(pack_file_header(header, '<')) == FILE_HEADER_SIZE == 24
    assert len(pack_record_header(RecordHeader(1, 2, 3, 4), '>')) == RECORD_HEADER_SIZE == 16


def test_file_header_field_order_little_endian():
    header = FileHeader(0xA1B2C3D4, 2, 4, -3600, 0, 262144, 101)
    blob = pack_file_header(header, '<')
    assert blob[:4] == b"\xd4\xc3\xb2\xa1"
    assert struct.unpack('<HH', blob[4:8]) == (2, 4)
    assert struct.unpack('<i', blob[8:12]) == (-3600,)
    assert struct.unpack('<II', blob[16:24]) == (262144, 101)
    assert unpack_file_header(blob, '<') == header


def test_file_header_big_endian_bytes():
    blob = pack_file_header(FileHeader(0xA1B23C4D, 2, 4, 0, 0, 1000, 0), '>')
    assert blob[:8] == b"\xa1\xb2\x3c\x4d\x00\x02\x00\x04"


def test_record_header_byte_order_is_explicit():
    header = RecordHeader(ts_sec=1, ts_subsec=2, incl_len=3, orig_len=4)
    little = pack_record_header(header, '<')
    big = pack_record_header(header, '>')
    assert little[:4] == b"\x01\x00\x00\x00"
    assert big[:4] == b"\x00\x00\x00\x01"
    assert unpack_record_header(little, '<') == header
    assert unpack_record_header(big, '>') == header


def test_pack_rejects_out_of_range_field():
    with pytest.raises(struct.error):
        pack_record_header(RecordHeader(0, 0, 0, 1 << 32), '<')


def test_linktype_values():
    assert Linktype.NULL == 0
    assert Linktype.ETHERNET == 1
    assert Linktype.RAW == 101
    assert Linktype.LINUX_SLL == 113
    assert Linktype.USB_DARWIN == 266


def test_linktype_name():
    assert linktype_name(1) == "ETHERNET"
    assert linktype_name(Linktype.IEEE802_11_RADIOTAP) == "IEEE802_11_RADIOTAP"
    assert linktype_name(4242) == "UNKNOWN(4242)"
