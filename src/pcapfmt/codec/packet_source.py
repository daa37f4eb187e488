"""
IPacketSource Interface

The contract every packet decoder in this package follows. A source hands
out CapturedPackets one call at a time, in stream order.

Rules for implementers:
1. next() returns None at end of stream, and keeps returning None after that
2. Record-level errors are raised from next() with the stream left at the
   next record, so the caller may call next() again
3. Packets returned by next() may borrow internal buffers; iteration
   (__next__) always hands out detached packets
4. close() releases only resources the source opened itself
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ..models.options import FileFormatOptions
from ..models.packet import CapturedPacket


class IPacketSource(ABC):
    """
    Abstract base class for packet sources.

    Enables both styles:
        packet = source.next()          # zero-copy, valid until the next call
        for packet in source: ...       # owned copies
    """

    @property
    @abstractmethod
    def options(self) -> FileFormatOptions:
        """Format options of the stream being decoded."""
        pass

    @abstractmethod
    def next(self) -> Optional[CapturedPacket]:
        """
        Decode the next packet.

        Returns:
            The packet, or None once the stream is exhausted

        Raises:
            InvalidDateError, InvalidPacketSizeError: this record is unusable,
                the following one can still be read
            PcapIOError: the source failed or ended inside a record
        """
        pass

    @abstractmethod
    def close(self):
        """Release resources. MUST be safe to call multiple times."""
        pass

    def __iter__(self) -> Iterator[CapturedPacket]:
        return self

    def __next__(self) -> CapturedPacket:
        packet = self.next()
        if packet is None:
            raise StopIteration
        return packet.detach()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
