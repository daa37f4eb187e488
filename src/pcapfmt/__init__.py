"""
pcapfmt: read and write libpcap capture files.

    from pcapfmt import PcapReader, PcapWriter, FileFormatOptions, Linktype

    with PcapReader.open("in.pcap") as reader:
        with PcapWriter.create("out.pcap", reader.options) as writer:
            for packet in reader:
                writer.write(packet)
"""

from .models import CapturedPacket, FileFormatOptions
from .codec import (
    PcapReader,
    PcapWriter,
    Linktype,
    PcapError,
    PcapIOError,
    PcapEOFError,
    PcapFormatError,
    InvalidFileHeaderError,
    InvalidPacketSizeError,
    InvalidDateError,
)

__version__ = "0.1.0"

__all__ = [
    'CapturedPacket',
    'FileFormatOptions',
    'PcapReader',
    'PcapWriter',
    'Linktype',
    'PcapError',
    'PcapIOError',
    'PcapEOFError',
    'PcapFormatError',
    'InvalidFileHeaderError',
    'InvalidPacketSizeError',
    'InvalidDateError',
]
