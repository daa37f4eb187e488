"""
Conversion between on-disk (seconds, sub-second) pairs and absolute times.

Absolute times are integer nanoseconds since the Unix epoch. The codec
returns None instead of raising; PcapReader and PcapWriter turn that into
InvalidDateError.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

from ..models.packet import NANOS_PER_SECOND
from .wire import U32_MAX

I64_MAX = (1 << 63) - 1
I64_MIN = -(1 << 63)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def make_time(sec: int, nsec: int = 0) -> int:
    """Absolute time from whole seconds and nanoseconds since epoch."""
    return sec * NANOS_PER_SECOND + nsec


def decode_time(ts_sec: int, ts_subsec: int, ns_res: bool,
                utc_offset: int = 0) -> Optional[int]:
    """
    Absolute time of a record header, or None if it cannot be represented.

    Args:
        ts_sec: Seconds field (u32)
        ts_subsec: Microseconds, or nanoseconds when ns_res is set (u32)
        ns_res: True if the file uses nanosecond timestamps
        utc_offset: thiszone field of the file header
    """
    if ns_res:
        nsec = ts_subsec
    else:
        nsec = ts_subsec * 1000
        if nsec > U32_MAX:
            return None

    sec = ts_sec + utc_offset
    if sec > I64_MAX or sec < I64_MIN:
        return None
    # Before the epoch
    if sec < 0:
        return None

    if nsec >= NANOS_PER_SECOND:
        return None
    return make_time(sec, nsec)


def encode_time(timestamp_ns: int, high_res: bool) -> Optional[Tuple[int, int]]:
    """
    (ts_sec, ts_subsec) for an absolute time, or None if out of range.

    Microsecond output rounds half up. A carry into the next second is
    folded into ts_sec.
    """
    if timestamp_ns < 0:
        return None

    sec, nsec = divmod(timestamp_ns, NANOS_PER_SECOND)
    if high_res:
        subsec = nsec
    else:
        subsec = (nsec + 500) // 1000
        if subsec >= 1_000_000:
            sec += 1
            subsec -= 1_000_000

    if sec > U32_MAX:
        return None
    return sec, subsec


def from_datetime(value: datetime) -> int:
    """Absolute time of a datetime. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return (delta.days * 86400 + delta.seconds) * NANOS_PER_SECOND + delta.microseconds * 1000

