"""
File format options shared by the reader and the writer.
"""

import sys
from dataclasses import dataclass, replace

LITTLE_ENDIAN = '<'
BIG_ENDIAN = '>'

NATIVE_BYTE_ORDER = LITTLE_ENDIAN if sys.byteorder == 'little' else BIG_ENDIAN
SWAPPED_BYTE_ORDER = BIG_ENDIAN if NATIVE_BYTE_ORDER == LITTLE_ENDIAN else LITTLE_ENDIAN

_BYTE_ORDER_NAMES = {
    'little': LITTLE_ENDIAN,
    'big': BIG_ENDIAN,
    'native': NATIVE_BYTE_ORDER,
    'swapped': SWAPPED_BYTE_ORDER,
}


@dataclass(frozen=True)
class FileFormatOptions:
    """
    The four values that decide how every record of a stream is laid out.

    Read back from the file header by PcapReader, or supplied by the caller
    when creating a file with PcapWriter.
    """
    snaplen: int
    """Maximum number of payload bytes stored per packet."""

    linktype: int
    """Link-layer type of the payloads (see Linktype for known values)."""

    high_res_timestamps: bool = False
    """True for nanosecond sub-second fields, False for microseconds."""

    non_native_byte_order: bool = False
    """True if the file's byte order is the opposite of this host's."""

    @classmethod
    def for_byte_order(cls, byte_order: str, snaplen: int, linktype: int,
                       high_res_timestamps: bool = False) -> "FileFormatOptions":
        """
        Build options from a byte order name instead of a host-relative flag.

        Args:
            byte_order: 'little', 'big', 'native' or 'swapped'
        """
        try:
            order = _BYTE_ORDER_NAMES[byte_order]
        except KeyError:
            raise ValueError(f"Unknown byte order: {byte_order!r}")
        return cls(
            snaplen=snaplen,
            linktype=linktype,
            high_res_timestamps=high_res_timestamps,
            non_native_byte_order=order != NATIVE_BYTE_ORDER,
        )

    @property
    def byte_order(self) -> str:
        """struct byte order character ('<' or '>') used on disk."""
        return SWAPPED_BYTE_ORDER if self.non_native_byte_order else NATIVE_BYTE_ORDER

    @property
    def endianness(self) -> str:
        return 'little' if self.byte_order == LITTLE_ENDIAN else 'big'

    def replace(self, **changes) -> "FileFormatOptions":
        return replace(self, **changes)
