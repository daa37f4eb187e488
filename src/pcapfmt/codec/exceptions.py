# Custom exceptions

"""
Custom exceptions for pcap encoding and decoding.

Header-level errors (InvalidFileHeaderError) abort opening a stream.
Record-level errors (InvalidPacketSizeError, InvalidDateError) leave the
stream positioned at the next record, so the caller may keep reading.
"""


class PcapError(Exception):
    """Base exception for all pcap codec errors."""
    pass


class PcapIOError(PcapError):
    """Raised when the underlying source or sink fails."""
    pass


class PcapEOFError(PcapIOError):
    """Raised when the stream ends in the middle of a header or payload (truncated)."""
    pass


class PcapFormatError(PcapError):
    """Raised when the file content is invalid or corrupt."""
    pass


class InvalidFileHeaderError(PcapFormatError):
    """Raised when the 24-byte file header cannot be parsed or is unsupported."""
    pass


class InvalidPacketSizeError(PcapFormatError):
    """Raised when a packet length field does not fit its representation."""
    pass


class InvalidDateError(PcapFormatError):
    """Raised when a packet timestamp cannot be represented."""
    pass
