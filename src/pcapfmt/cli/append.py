"""CLI command for appending packets to an existing capture file."""
import os

import click

from ..codec.exceptions import PcapError
from ..codec.pcap_reader import PcapReader
from ..codec.pcap_writer import PcapWriter
from ..codec.wire import linktype_name


@click.command()
@click.argument("target", type=click.Path(exists=True, dir_okay=False))
@click.argument("sources", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.option("--force", is_flag=True,
              help="Append even if a source's link type differs from the target's")
def append(target: str, sources, force: bool):
    """
    Append every packet of SOURCES to TARGET, keeping TARGET's format.

    Example:
      pcapfmt append merged.pcap part2.pcap part3.pcap
    """
    for source in sources:
        if os.path.samefile(target, source):
            raise click.ClickException(f"Cannot append {source} to itself")

    total = 0
    try:
        with PcapWriter.open_append(target) as writer:
            for source in sources:
                with PcapReader.open(source) as reader:
                    if reader.linktype != writer.options.linktype and not force:
                        raise click.ClickException(
                            f"{source} has link type {linktype_name(reader.linktype)}, "
                            f"{target} has {linktype_name(writer.options.linktype)} "
                            f"(use --force to append anyway)")
                    total += writer.write_all(reader.packets())
    except PcapError as e:
        raise click.ClickException(str(e))

    click.echo(f"Appended {total} packets to {target}")
