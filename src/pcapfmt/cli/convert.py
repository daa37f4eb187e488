"""CLI command for re-encoding capture files."""
import logging
import os
from typing import Optional

import click

from ..codec.exceptions import InvalidDateError, InvalidPacketSizeError, PcapError
from ..codec.pcap_reader import PcapReader
from ..codec.pcap_writer import PcapWriter
from ..models.options import FileFormatOptions

logger = logging.getLogger(__name__)

BYTE_ORDER_CHOICES = ["keep", "native", "swapped", "little", "big"]
RESOLUTION_CHOICES = ["keep", "micro", "nano"]


def build_target_options(source: FileFormatOptions,
                         byte_order: str = "keep",
                         resolution: str = "keep",
                         snaplen: Optional[int] = None,
                         linktype: Optional[int] = None) -> FileFormatOptions:
    """Apply convert's command line choices on top of the source file's options."""
    high_res = source.high_res_timestamps
    if resolution != "keep":
        high_res = resolution == "nano"

    if byte_order == "keep":
        target = source.replace(high_res_timestamps=high_res)
    else:
        target = FileFormatOptions.for_byte_order(
            byte_order,
            snaplen=source.snaplen,
            linktype=source.linktype,
            high_res_timestamps=high_res,
        )

    if snaplen is not None:
        target = target.replace(snaplen=snaplen)
    if linktype is not None:
        target = target.replace(linktype=linktype)
    return target


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_path", type=click.Path(dir_okay=False))
@click.option("--byte-order", "byte_order", type=click.Choice(BYTE_ORDER_CHOICES),
              default="keep", show_default=True, help="Byte order of the output file")
@click.option("--resolution", "resolution", type=click.Choice(RESOLUTION_CHOICES),
              default="keep", show_default=True, help="Timestamp resolution of the output file")
@click.option("--snaplen", "snaplen", type=click.IntRange(min=0), default=None,
              help="Snaplen of the output file; longer packets are truncated")
@click.option("--linktype", "linktype", type=click.IntRange(min=0), default=None,
              help="Override the link type written to the output header")
@click.option("--limit", "limit", type=int, default=0, show_default=True,
              help="Max packets to copy (0 = no limit)")
@click.option("--skip-invalid/--strict", "skip_invalid", default=False, show_default=True,
              help="Skip records with invalid timestamps or sizes instead of failing")
def convert(input_path: str,
            output_path: str,
            byte_order: str,
            resolution: str,
            snaplen: Optional[int],
            linktype: Optional[int],
            limit: int,
            skip_invalid: bool):
    """
    Copy a pcap file, optionally changing its format variant.

    Example:
      pcapfmt convert in.pcap out.pcap --byte-order big --resolution nano
    """
    # Creating the output truncates it before the input is read
    if os.path.exists(output_path) and os.path.samefile(input_path, output_path):
        raise click.ClickException(f"{output_path} is also the input file")

    copied = 0
    skipped = 0
    try:
        with PcapReader.open(input_path) as reader:
            target = build_target_options(reader.options, byte_order, resolution,
                                          snaplen, linktype)
            with PcapWriter.create(output_path, target) as writer:
                while limit <= 0 or copied < limit:
                    try:
                        packet = reader.next()
                        if packet is None:
                            break
                        writer.write(packet)
                    except (InvalidDateError, InvalidPacketSizeError) as e:
                        if not skip_invalid:
                            raise
                        logger.warning("Skipping packet %d: %s", reader.packet_count, e)
                        skipped += 1
                        continue
                    copied += 1
    except PcapError as e:
        raise click.ClickException(str(e))

    message = f"Wrote {copied} packets to {output_path}"
    if skipped:
        message += f" ({skipped} invalid packets skipped)"
    click.echo(message)
