"""
Command line front end: ``pcapfmt info | convert | append | verify``.

The click group lives in pcapfmt.cli.main so that importing the codec never
imports click.
"""
