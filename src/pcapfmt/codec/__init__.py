"""
Legacy pcap (libpcap) file decoding and encoding.
"""

from .packet_source import IPacketSource
from .pcap_reader import MAX_SNAPLEN, PcapReader
from .pcap_writer import PcapWriter
from .magic import PcapMagic, ResolvedHeader, resolve_file_header
from .roundtrip import RoundTripReport, verify_roundtrip
from .timecodec import decode_time, encode_time, from_datetime, make_time
from .wire import Linktype, linktype_name
from .exceptions import (
    PcapError,
    PcapIOError,
    PcapEOFError,
    PcapFormatError,
    InvalidFileHeaderError,
    InvalidPacketSizeError,
    InvalidDateError,
)

__all__ = [
    'IPacketSource',
    'PcapReader',
    'PcapWriter',
    'MAX_SNAPLEN',
    'PcapMagic',
    'ResolvedHeader',
    'resolve_file_header',
    'RoundTripReport',
    'verify_roundtrip',
    'decode_time',
    'encode_time',
    'from_datetime',
    'make_time',
    'Linktype',
    'linktype_name',
    'PcapError',
    'PcapIOError',
    'PcapEOFError',
    'PcapFormatError',
    'InvalidFileHeaderError',
    'InvalidPacketSizeError',
    'InvalidDateError',
]
