"""
Exact-length reads and writes on binary file objects.

Python file objects may return fewer bytes than asked for (pipes, sockets,
raw files). The reader and writer only ever go through these helpers, which
loop until the request is satisfied and turn OSError into PcapIOError.
"""

import io
from typing import BinaryIO

from .exceptions import PcapEOFError, PcapIOError

# Upper bound on the scratch buffer used to skip over oversized records.
DISCARD_CHUNK_SIZE = 64 * 1024


def readinto_exact(source: BinaryIO, view: memoryview) -> int:
    """
    Fill view from source, stopping early only at end of stream.

    Returns:
        Number of bytes read (less than len(view) only at end of stream)
    """
    total = 0
    size = len(view)
    while total < size:
        try:
            if hasattr(source, 'readinto'):
                n = source.readinto(view[total:])
            else:
                chunk = source.read(size - total)
                n = len(chunk) if chunk is not None else None
                if n:
                    view[total:total + n] = chunk
        except OSError as e:
            raise PcapIOError(f"Read failed: {e}") from e
        if n is None:
            raise PcapIOError("Source would block; non-blocking streams are not supported")
        if n == 0:
            break
        total += n
    return total


def read_exact(source: BinaryIO, size: int, what: str = "data") -> bytes:
    """Read exactly size bytes or raise PcapEOFError."""
    buf = bytearray(size)
    n = readinto_exact(source, memoryview(buf))
    if n < size:
        raise PcapEOFError(f"Stream ended after {n} of {size} bytes of {what}")
    return bytes(buf)


def discard(source: BinaryIO, size: int) -> None:
    """Read and drop size bytes, using at most DISCARD_CHUNK_SIZE bytes of memory."""
    scratch = memoryview(bytearray(min(size, DISCARD_CHUNK_SIZE)))
    remaining = size
    while remaining > 0:
        step = min(remaining, len(scratch))
        n = readinto_exact(source, scratch[:step])
        if n < step:
            raise PcapEOFError(
                f"Stream ended while skipping {size} bytes of oversized packet data")
        remaining -= n


def write_all(sink: BinaryIO, data) -> None:
    """Write every byte of data to sink."""
    view = memoryview(data).cast('B')
    while len(view):
        try:
            n = sink.write(view)
        except OSError as e:
            raise PcapIOError(f"Write failed: {e}") from e
        if n is None:
            # Raw streams return None when nothing could be written without blocking
            if isinstance(sink, io.RawIOBase):
                raise PcapIOError("Sink would block; non-blocking streams are not supported")
            # Other duck-typed sinks may not report a count
            break
        if n == 0:
            raise PcapIOError("Sink accepted no data")
        # Buffered and in-memory sinks write everything and may return len(data)
        if n >= len(view):
            break
        view = view[n:]


def flush(sink: BinaryIO) -> None:
    try:
        sink.flush()
    except OSError as e:
        raise PcapIOError(f"Flush failed: {e}") from e
