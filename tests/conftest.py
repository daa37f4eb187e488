import io

import pytest

from pcapfmt import CapturedPacket, FileFormatOptions, Linktype

from pcap_builders import random_payloads


@pytest.fixture
def options():
    return FileFormatOptions(
        snaplen=1000,
        linktype=Linktype.NULL,
        high_res_timestamps=True,
        non_native_byte_order=False,
    )


@pytest.fixture
def sink():
    return io.BytesIO()


@pytest.fixture
def random_packets():
    """10 packets with payloads of random size in [0, 2000), untruncated."""
    payloads = random_payloads(seed=1234)
    return [
        CapturedPacket.from_bytes(data, timestamp_ns=1_600_000_000_123_456_000 + i * 1_000_000_000)
        for i, data in enumerate(payloads)
    ]
