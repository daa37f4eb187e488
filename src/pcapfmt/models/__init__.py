"""
Data models shared by the pcap reader and writer.
"""

from .packet import CapturedPacket
from .options import FileFormatOptions

__all__ = [
    'CapturedPacket',
    'FileFormatOptions',
]
