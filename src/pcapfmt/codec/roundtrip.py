"""
Decode, re-encode and re-decode a capture, checking nothing changed.

Used by `pcapfmt verify` and by the test-suite to exercise the codec on
corrupted and synthetic input. Never raises for malformed input bytes.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.options import FileFormatOptions
from .exceptions import InvalidDateError, PcapError
from .pcap_reader import PcapReader
from .pcap_writer import PcapWriter

logger = logging.getLogger(__name__)

# Allowed timestamp drift when going from nanosecond to microsecond files.
MAX_DOWNSAMPLE_DRIFT_NS = 1_000_000


@dataclass
class RoundTripReport:
    """Outcome of one round trip."""
    source_options: FileFormatOptions
    target_options: FileFormatOptions
    packets_compared: int = 0
    packets_rejected: int = 0
    """Packets the writer refused (InvalidDateError) and were left out."""
    mismatches: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.mismatches


def verify_roundtrip(data: bytes, flip_resolution: bool = False,
                     flip_byte_order: bool = False) -> Optional[RoundTripReport]:
    """
    Round-trip data through PcapReader and PcapWriter.

    Args:
        data: Raw capture file bytes
        flip_resolution: Write with the other timestamp resolution
        flip_byte_order: Write with the other byte order

    Returns:
        A report, or None if data does not start with a valid file header
    """
    try:
        reader = PcapReader(io.BytesIO(data))
    except PcapError as e:
        logger.debug("Not a valid capture: %s", e)
        return None

    source_options = reader.options
    target_options = source_options
    if flip_resolution:
        target_options = target_options.replace(
            high_res_timestamps=not target_options.high_res_timestamps)
    if flip_byte_order:
        target_options = target_options.replace(
            non_native_byte_order=not target_options.non_native_byte_order)

    report = RoundTripReport(source_options=source_options, target_options=target_options)

    # 1. Re-encode every packet the reader can decode, remember which ones made it
    sink = io.BytesIO()
    writer = PcapWriter(sink, target_options)
    written = []
    while True:
        try:
            packet = reader.next()
        except PcapError as e:
            logger.debug("Stopping at undecodable record: %s", e)
            break
        if packet is None:
            break
        try:
            writer.write(packet)
        except InvalidDateError:
            report.packets_rejected += 1
            written.append(False)
        else:
            written.append(True)

    # 2. Decode both and compare packet by packet
    original = PcapReader(io.BytesIO(data))
    copy = PcapReader(io.BytesIO(sink.getvalue()))
    if copy.options != target_options:
        report.mismatches.append(f"options {copy.options} != {target_options}")
        return report

    lossy = source_options.high_res_timestamps and not target_options.high_res_timestamps
    for index, kept in enumerate(written, start=1):
        expected = original.next().detach()
        if not kept:
            continue
        actual = copy.next()
        if actual is None:
            report.mismatches.append(f"packet {index}: missing from re-encoded stream")
            return report
        _compare(index, expected, actual, lossy, report)
        report.packets_compared += 1

    if copy.next() is not None:
        report.mismatches.append("re-encoded stream has extra packets")
    return report


def _compare(index, expected, actual, lossy, report):
    if lossy:
        if abs(expected.timestamp_ns - actual.timestamp_ns) > MAX_DOWNSAMPLE_DRIFT_NS:
            report.mismatches.append(
                f"packet {index}: timestamp {actual.timestamp_ns} too far from "
                f"{expected.timestamp_ns}")
    elif expected.timestamp_ns != actual.timestamp_ns:
        report.mismatches.append(
            f"packet {index}: timestamp {actual.timestamp_ns} != {expected.timestamp_ns}")
    if expected.orig_len != actual.orig_len:
        report.mismatches.append(
            f"packet {index}: orig_len {actual.orig_len} != {expected.orig_len}")
    if bytes(expected.data) != bytes(actual.data):
        report.mismatches.append(f"packet {index}: payload differs")
