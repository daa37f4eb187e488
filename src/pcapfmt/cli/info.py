"""CLI command for capture file summaries."""
import json
from typing import Any, Dict

import click

from ..codec.exceptions import InvalidDateError, InvalidPacketSizeError, PcapError
from ..codec.pcap_reader import PcapReader
from ..codec.wire import linktype_name


def summarize(reader: PcapReader) -> Dict[str, Any]:
    """Scan every record of reader and return header and packet statistics."""
    options = reader.options
    summary: Dict[str, Any] = {
        'byte_order': options.endianness,
        'non_native_byte_order': options.non_native_byte_order,
        'resolution': 'nanosecond' if options.high_res_timestamps else 'microsecond',
        'snaplen': options.snaplen,
        'linktype': options.linktype,
        'linktype_name': linktype_name(options.linktype),
        'utc_offset': reader.utc_offset,
        'packet_count': 0,
        'truncated_count': 0,
        'invalid_count': 0,
        'captured_bytes': 0,
        'first_timestamp': None,
        'last_timestamp': None,
    }

    first = last = None
    while True:
        try:
            packet = reader.next()
        except (InvalidDateError, InvalidPacketSizeError):
            summary['invalid_count'] += 1
            continue
        if packet is None:
            break
        summary['packet_count'] += 1
        summary['captured_bytes'] += len(packet.data)
        if packet.is_truncated:
            summary['truncated_count'] += 1
        if first is None:
            first = packet.datetime
        last = packet.datetime

    if first is not None:
        summary['first_timestamp'] = first.isoformat()
        summary['last_timestamp'] = last.isoformat()
    return summary


@click.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
def info(filepath: str, as_json: bool):
    """
    Show the header and packet statistics of a pcap file.

    Example:
      pcapfmt info capture.pcap --json
    """
    try:
        with PcapReader.open(filepath) as reader:
            summary = summarize(reader)
    except PcapError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(summary, indent=2))
        return
    for key, value in summary.items():
        click.echo(f"{key:24} {value}")
