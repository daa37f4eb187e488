"""CLI command for round-trip checking a capture file."""
import itertools

import click

from ..codec.roundtrip import verify_roundtrip


@click.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def verify(filepath: str):
    """
    Re-encode a pcap file in every format variant and compare the packets.

    Example:
      pcapfmt verify capture.pcap
    """
    with open(filepath, "rb") as f:
        data = f.read()

    failed = False
    for flip_resolution, flip_byte_order in itertools.product([False, True], repeat=2):
        report = verify_roundtrip(data, flip_resolution=flip_resolution,
                                  flip_byte_order=flip_byte_order)
        if report is None:
            raise click.ClickException(f"{filepath} is not a valid pcap file")

        target = report.target_options
        label = (f"{target.endianness}-endian "
                 f"{'nano' if target.high_res_timestamps else 'micro'}")
        status = "ok" if report.ok else "FAILED"
        click.echo(f"{label:24} {status}: {report.packets_compared} compared, "
                   f"{report.packets_rejected} rejected")
        for mismatch in report.mismatches:
            click.echo(f"  {mismatch}")
        failed = failed or not report.ok

    if failed:
        raise click.ClickException("Round trip changed packet contents")
