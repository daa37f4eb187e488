"""
PCAP file format reader (legacy .pcap).

Reference: https://wiki.wireshark.org/Development/LibpcapFileFormat

The reader is a streaming decoder over any binary file object. It parses
the 24-byte file header once, then decodes one record per next() call into
a single buffer of snaplen bytes that is reused for every packet.
"""

import logging
import sys
from typing import BinaryIO, Iterator, Optional

from ..models.options import FileFormatOptions
from ..models.packet import CapturedPacket
from .exceptions import (
    InvalidDateError,
    InvalidFileHeaderError,
    InvalidPacketSizeError,
    PcapEOFError,
    PcapIOError,
)
from .magic import ResolvedHeader, resolve_file_header
from .packet_source import IPacketSource
from .stream import discard, readinto_exact
from .timecodec import decode_time
from .wire import FILE_HEADER_SIZE, RECORD_HEADER_SIZE, unpack_record_header

logger = logging.getLogger(__name__)

# Largest snaplen accepted from a file header. The reader allocates a buffer
# of snaplen bytes, so a hostile header must not be able to ask for gigabytes.
MAX_SNAPLEN = 16 * 1024 * 1024


class PcapReader(IPacketSource):
    """
    Reads packets from a legacy pcap stream.

    Example:
        with PcapReader.open("capture.pcap") as reader:
            print(reader.options)
            for packet in reader:
                process(packet)
    """

    def __init__(self, source: BinaryIO, max_snaplen: int = MAX_SNAPLEN):
        """
        Read and validate the file header.

        Args:
            source: Binary stream positioned at the start of a pcap file
            max_snaplen: Reject headers declaring a larger snaplen

        Raises:
            InvalidFileHeaderError: bad magic, version or snaplen, or short header
            PcapIOError: the source failed
        """
        self._source = source
        self._owns_source = False
        self._exhausted = False
        self._packet_count = 0

        # 1. Read exactly 24 bytes; a short read is a broken header, not EOF
        raw = bytearray(FILE_HEADER_SIZE)
        n = readinto_exact(source, memoryview(raw))
        if n < FILE_HEADER_SIZE:
            raise InvalidFileHeaderError(
                f"File too small for pcap header: {n} of {FILE_HEADER_SIZE} bytes")

        # 2. Resolve byte order, timestamp unit, version
        self._header = resolve_file_header(bytes(raw))

        # 3. Refuse oversized buffers before allocating anything
        if self._header.snaplen > max_snaplen:
            raise InvalidFileHeaderError(
                f"Snaplen {self._header.snaplen} exceeds the limit of {max_snaplen} bytes")

        self._options = self._header.to_options()
        self._byte_order = self._header.byte_order
        self._buffer = bytearray(self._header.snaplen)
        self._view = memoryview(self._buffer)

    @classmethod
    def open(cls, filepath: str, max_snaplen: int = MAX_SNAPLEN) -> "PcapReader":
        """Open filepath for reading. The returned reader closes the file."""
        handle = open(filepath, 'rb')
        try:
            reader = cls(handle, max_snaplen=max_snaplen)
        except BaseException:
            handle.close()
            raise
        reader._owns_source = True
        return reader

    # =========================================================================
    # STREAM METADATA
    # =========================================================================
    @property
    def options(self) -> FileFormatOptions:
        return self._options

    @property
    def header(self) -> ResolvedHeader:
        return self._header

    @property
    def linktype(self) -> int:
        return self._header.network

    @property
    def snaplen(self) -> int:
        return self._header.snaplen

    @property
    def utc_offset(self) -> int:
        return self._header.utc_offset

    @property
    def packet_count(self) -> int:
        """Records consumed so far, including ones that raised a record-level error."""
        return self._packet_count

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    # =========================================================================
    # DECODING
    # =========================================================================
    def next(self) -> Optional[CapturedPacket]:
        """
        Decode the next record.

        The returned packet's data is a read-only view of the reader's
        buffer and is overwritten by the next call. Use packet.detach()
        to keep it.
        """
        if self._exhausted:
            return None

        # 1. Record header; clean EOF only if not a single byte is there
        raw = bytearray(RECORD_HEADER_SIZE)
        n = readinto_exact(self._source, memoryview(raw))
        if n == 0:
            self._exhausted = True
            return None
        if n < RECORD_HEADER_SIZE:
            raise PcapEOFError(
                f"Record header truncated: {n} of {RECORD_HEADER_SIZE} bytes")

        # 2. Apply the stream's byte order
        record = unpack_record_header(bytes(raw), self._byte_order)
        self._packet_count += 1

        # 3. Read what fits into the buffer
        size_to_read = min(record.incl_len, len(self._buffer))
        n = readinto_exact(self._source, self._view[:size_to_read])
        if n < size_to_read:
            raise PcapEOFError(
                f"Packet {self._packet_count} truncated: "
                f"expected {size_to_read} bytes, got {n}")

        # 4. Skip the rest of an oversized record so the next header lines up
        if record.incl_len > size_to_read:
            logger.warning(
                "Packet %d declares %d stored bytes, more than snaplen %d; truncating",
                self._packet_count, record.incl_len, len(self._buffer))
            discard(self._source, record.incl_len - size_to_read)

        # 5. Timestamp
        timestamp_ns = decode_time(record.ts_sec, record.ts_subsec,
                                   self._header.ns_res, self._header.utc_offset)
        if timestamp_ns is None:
            raise InvalidDateError(
                f"Packet {self._packet_count} has an invalid timestamp: "
                f"{record.ts_sec}s + {record.ts_subsec}")

        # 6. Lengths must fit the platform size type
        if record.orig_len > sys.maxsize:
            raise InvalidPacketSizeError(
                f"Packet {self._packet_count} has original length {record.orig_len}")

        return CapturedPacket(
            timestamp_ns=timestamp_ns,
            data=self._view[:size_to_read].toreadonly(),
            orig_len=record.orig_len,
        )

    def packets(self, skip_invalid: bool = False) -> Iterator[CapturedPacket]:
        """
        Yield detached packets until the stream is exhausted.

        Args:
            skip_invalid: Log and skip records with an invalid date or size
                instead of raising
        """
        while True:
            try:
                packet = self.next()
            except (InvalidDateError, InvalidPacketSizeError) as e:
                if not skip_invalid:
                    raise
                logger.warning("Skipping record: %s", e)
                continue
            if packet is None:
                return
            yield packet.detach()

    def close(self):
        """Close the source if this reader opened it. Safe to call multiple times."""
        self._exhausted = True
        if self._owns_source and self._source is not None:
            try:
                self._source.close()
            except OSError as e:
                raise PcapIOError(f"Close failed: {e}") from e
            finally:
                self._source = None
