"""Entry point for the pcapfmt command line."""
import logging

import click

from .. import __version__
from .append import append
from .convert import convert
from .info import info
from .verify import verify


@click.group()
@click.version_option(__version__, prog_name="pcapfmt")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug)")
def cli(verbose: int):
    """Read, convert and append libpcap capture files."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


cli.add_command(info)
cli.add_command(convert)
cli.add_command(append)
cli.add_command(verify)


if __name__ == "__main__":
    cli()
