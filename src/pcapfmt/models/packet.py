# Packet data model
"""
Packet data model for pcapfmt.

A CapturedPacket is the unit that flows between PcapReader and PcapWriter.
It is IMMUTABLE, but when it comes straight out of PcapReader.next() its
payload is a read-only view into the reader's reusable buffer. That view is
only valid until the next decode call on the same reader. Call detach() to
get a packet that owns its bytes.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class CapturedPacket:
    """
    A single captured packet: timestamp, stored bytes and on-wire length.

    The payload is opaque; interpreting it depends on the file's linktype.
    """
    timestamp_ns: int
    """Nanoseconds since Unix epoch (1970-01-01 UTC)."""

    data: BytesLike
    """Stored packet bytes (possibly truncated to the file's snaplen)."""

    orig_len: int
    """Bytes on the wire. May be larger than len(data)."""

    @classmethod
    def from_bytes(cls, data: BytesLike, timestamp_ns: int = 0,
                   orig_len: Optional[int] = None) -> "CapturedPacket":
        """Build a packet that owns a copy of data; orig_len defaults to len(data)."""
        data = bytes(data)
        return cls(
            timestamp_ns=timestamp_ns,
            data=data,
            orig_len=len(data) if orig_len is None else orig_len,
        )

    def detach(self) -> "CapturedPacket":
        """
        Return a packet that owns its payload.

        Packets returned by PcapReader.next() borrow the reader's buffer;
        the copy made here survives further reads.
        """
        if isinstance(self.data, bytes):
            return self
        return replace(self, data=bytes(self.data))

    # COMPUTED PROPERTIES
    @property
    def captured_length(self) -> int:
        return len(self.data)

    @property
    def is_truncated(self) -> bool:
        """True if fewer bytes were stored than were on the wire."""
        return len(self.data) < self.orig_len

    @property
    def timestamp_us(self) -> int:
        """Microseconds since epoch (truncated)."""
        return self.timestamp_ns // 1000

    @property
    def timestamp_seconds(self) -> float:
        """Seconds since epoch with fractional part (loses sub-microsecond precision)."""
        return self.timestamp_ns / NANOS_PER_SECOND

    @property
    def datetime(self) -> datetime:
        """UTC datetime of the capture, at microsecond precision."""
        seconds, nanos = divmod(self.timestamp_ns, NANOS_PER_SECOND)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(
            microsecond=nanos // 1000)
