"""
File header variant detection.

The magic number at offset 0 tells both the byte order of the file
(relative to this host) and the unit of the sub-second timestamp field.
"""

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum

from ..models.options import FileFormatOptions, NATIVE_BYTE_ORDER, SWAPPED_BYTE_ORDER
from .exceptions import InvalidFileHeaderError
from .wire import (
    FILE_HEADER_SIZE,
    PCAP_VERSION_MAJOR,
    PCAP_VERSION_MINOR,
    FileHeader,
    unpack_file_header,
)

logger = logging.getLogger(__name__)

_HOST_U32 = struct.Struct('=I')


class PcapMagic(IntEnum):
    """The four magic numbers, as read in host byte order."""
    NORMAL = 0xA1B2C3D4                  # Host order, microseconds
    NANOSECOND = 0xA1B23C4D              # Host order, nanoseconds
    BYTE_SWAPPED = 0xD4C3B2A1            # Swapped order, microseconds
    NANOSECOND_BYTE_SWAPPED = 0x4D3CB2A1  # Swapped order, nanoseconds

    @property
    def need_byte_swap(self) -> bool:
        return self in (PcapMagic.BYTE_SWAPPED, PcapMagic.NANOSECOND_BYTE_SWAPPED)

    @property
    def ns_res(self) -> bool:
        return self in (PcapMagic.NANOSECOND, PcapMagic.NANOSECOND_BYTE_SWAPPED)


@dataclass(frozen=True)
class ResolvedHeader:
    """Fully parsed file header."""
    ns_res: bool
    need_byte_swap: bool
    network: int
    utc_offset: int
    snaplen: int

    @property
    def byte_order(self) -> str:
        return SWAPPED_BYTE_ORDER if self.need_byte_swap else NATIVE_BYTE_ORDER

    def to_options(self) -> FileFormatOptions:
        return FileFormatOptions(
            snaplen=self.snaplen,
            linktype=self.network,
            high_res_timestamps=self.ns_res,
            non_native_byte_order=self.need_byte_swap,
        )


def magic_for(options: FileFormatOptions) -> int:
    """
    Magic value to store for options, in the file's own byte order.

    The writer packs this with the file's byte order, so a reader on a host
    with the opposite order sees the swapped variant.
    """
    if options.high_res_timestamps:
        return PcapMagic.NANOSECOND
    return PcapMagic.NORMAL


def resolve_file_header(data: bytes) -> ResolvedHeader:
    """
    Parse and validate a raw 24-byte file header.

    Raises:
        InvalidFileHeaderError: unknown magic, unsupported version or short data
    """
    if len(data) < FILE_HEADER_SIZE:
        raise InvalidFileHeaderError(
            f"File too small for pcap header: {len(data)} of {FILE_HEADER_SIZE} bytes")

    raw_magic, = _HOST_U32.unpack_from(data, 0)
    try:
        magic = PcapMagic(raw_magic)
    except ValueError:
        raise InvalidFileHeaderError(f"Invalid pcap magic number: 0x{raw_magic:08x}")

    byte_order = SWAPPED_BYTE_ORDER if magic.need_byte_swap else NATIVE_BYTE_ORDER
    header: FileHeader = unpack_file_header(bytes(data[:FILE_HEADER_SIZE]), byte_order)

    if (header.version_major, header.version_minor) != (PCAP_VERSION_MAJOR, PCAP_VERSION_MINOR):
        raise InvalidFileHeaderError(
            f"Unsupported pcap version {header.version_major}.{header.version_minor}, "
            f"expected {PCAP_VERSION_MAJOR}.{PCAP_VERSION_MINOR}")

    logger.debug("pcap header: magic=%s snaplen=%d linktype=%d thiszone=%d",
                 magic.name, header.snaplen, header.network, header.thiszone)

    return ResolvedHeader(
        ns_res=magic.ns_res,
        need_byte_swap=magic.need_byte_swap,
        network=header.network,
        utc_offset=header.thiszone,
        snaplen=header.snaplen,
    )
