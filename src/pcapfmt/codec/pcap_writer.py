"""
PCAP file format writer (legacy .pcap).

Three ways to start writing:
- PcapWriter(sink, options): new file, header written immediately
- PcapWriter.append(sink): existing file on a seekable read/write sink;
  the options are recovered from its header
- PcapWriter.append_unchecked(sink, options): trust the caller that sink
  already ends with a file written with exactly these options
"""

import io
import logging
from typing import BinaryIO, Iterable

from ..models.options import FileFormatOptions
from ..models.packet import CapturedPacket
from .exceptions import (
    InvalidDateError,
    InvalidFileHeaderError,
    InvalidPacketSizeError,
    PcapIOError,
)
from .magic import magic_for
from .pcap_reader import MAX_SNAPLEN, PcapReader
from . import stream
from .timecodec import encode_time
from .wire import (
    PCAP_VERSION_MAJOR,
    PCAP_VERSION_MINOR,
    U32_MAX,
    FileHeader,
    RecordHeader,
    pack_file_header,
    pack_record_header,
)

logger = logging.getLogger(__name__)


class PcapWriter:
    """
    Writes packets to a legacy pcap stream.

    Byte order and timestamp resolution come from the options and do not
    depend on the host.
    """

    def __init__(self, sink: BinaryIO, options: FileFormatOptions, _write_header: bool = True):
        """
        Start a new capture file on sink.

        Raises:
            InvalidFileHeaderError: snaplen or linktype do not fit 32 bits
            PcapIOError: the sink failed
        """
        self._check_options(options)
        self._sink = sink
        self._options = options
        self._byte_order = options.byte_order
        self._owns_sink = False
        self._packet_count = 0

        if _write_header:
            stream.write_all(sink, self._build_header(options))

    @staticmethod
    def _check_options(options: FileFormatOptions):
        if not 0 <= options.snaplen <= U32_MAX:
            raise InvalidFileHeaderError(f"Snaplen {options.snaplen} does not fit in 32 bits")
        if not 0 <= options.linktype <= U32_MAX:
            raise InvalidFileHeaderError(f"Linktype {options.linktype} does not fit in 32 bits")

    @staticmethod
    def _build_header(options: FileFormatOptions) -> bytes:
        header = FileHeader(
            magic=magic_for(options),
            version_major=PCAP_VERSION_MAJOR,
            version_minor=PCAP_VERSION_MINOR,
            thiszone=0,
            sigfigs=0,
            snaplen=options.snaplen,
            network=options.linktype,
        )
        return pack_file_header(header, options.byte_order)

    @classmethod
    def append_unchecked(cls, sink: BinaryIO, options: FileFormatOptions) -> "PcapWriter":
        """
        Continue a file without writing or checking a header.

        If options differ from the ones the file was created with, the
        result is a corrupt file.

        Raises:
            InvalidFileHeaderError: snaplen or linktype do not fit 32 bits
        """
        return cls(sink, options, _write_header=False)

    @classmethod
    def append(cls, sink: BinaryIO, max_snaplen: int = MAX_SNAPLEN) -> "PcapWriter":
        """
        Continue an existing file, recovering its options from the header.

        sink must be readable, writable and seekable. It is left positioned
        at its end.

        Raises:
            InvalidFileHeaderError: the existing file header is invalid
            PcapIOError: the sink cannot seek
        """
        try:
            sink.seek(0, io.SEEK_SET)
        except (OSError, AttributeError) as e:
            raise PcapIOError(f"Append needs a seekable sink: {e}") from e

        options = PcapReader(sink, max_snaplen=max_snaplen).options

        try:
            sink.seek(0, io.SEEK_END)
        except OSError as e:
            raise PcapIOError(f"Seek failed: {e}") from e

        logger.debug("Appending with recovered options %s", options)
        return cls.append_unchecked(sink, options)

    @classmethod
    def create(cls, filepath: str, options: FileFormatOptions) -> "PcapWriter":
        """Create (or truncate) filepath. The returned writer closes the file."""
        handle = open(filepath, 'wb')
        try:
            writer = cls(handle, options)
        except BaseException:
            handle.close()
            raise
        writer._owns_sink = True
        return writer

    @classmethod
    def open_append(cls, filepath: str) -> "PcapWriter":
        """Open an existing capture file for checked append."""
        handle = open(filepath, 'r+b')
        try:
            writer = cls.append(handle)
        except BaseException:
            handle.close()
            raise
        writer._owns_sink = True
        return writer

    @property
    def options(self) -> FileFormatOptions:
        return self._options

    def get_options(self) -> FileFormatOptions:
        return self._options

    @property
    def packet_count(self) -> int:
        """Packets written by this writer (not counting pre-existing ones)."""
        return self._packet_count

    def write(self, packet: CapturedPacket):
        """
        Append one packet record.

        Payloads longer than snaplen are truncated, the way a capture would
        have truncated them; orig_len is stored unchanged.

        Raises:
            InvalidDateError: timestamp before 1970 or beyond 32-bit seconds
            InvalidPacketSizeError: orig_len does not fit 32 bits
            PcapIOError: the sink failed or the writer is closed
        """
        sink = self._open_sink()
        encoded = encode_time(packet.timestamp_ns, self._options.high_res_timestamps)
        if encoded is None:
            raise InvalidDateError(
                f"Timestamp {packet.timestamp_ns}ns cannot be stored in a pcap file")
        ts_sec, ts_subsec = encoded

        if not 0 <= packet.orig_len <= U32_MAX:
            raise InvalidPacketSizeError(
                f"Original length {packet.orig_len} does not fit in 32 bits")

        incl_len = min(len(packet.data), self._options.snaplen)
        if incl_len < len(packet.data):
            logger.debug("Truncating %d byte packet to snaplen %d",
                         len(packet.data), self._options.snaplen)

        record = RecordHeader(
            ts_sec=ts_sec,
            ts_subsec=ts_subsec,
            incl_len=incl_len,
            orig_len=packet.orig_len,
        )
        stream.write_all(sink, pack_record_header(record, self._byte_order))
        stream.write_all(sink, memoryview(packet.data)[:incl_len])
        self._packet_count += 1

    def write_all(self, packets: Iterable[CapturedPacket]) -> int:
        """Write every packet; returns the number written."""
        count = 0
        for packet in packets:
            self.write(packet)
            count += 1
        return count

    def flush(self):
        stream.flush(self._open_sink())

    def _open_sink(self) -> BinaryIO:
        if self._sink is None:
            raise PcapIOError("Writer is closed")
        return self._sink

    def detach(self) -> BinaryIO:
        """Flush and hand back the sink. The writer must not be used afterwards."""
        self.flush()
        sink, self._sink = self._sink, None
        self._owns_sink = False
        return sink

    def close(self):
        """Flush, and close the sink if this writer opened it."""
        if self._sink is None:
            return
        try:
            self.flush()
        finally:
            if self._owns_sink:
                self._sink.close()
            self._sink = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
