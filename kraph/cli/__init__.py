"""kraph command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kraph`` script).
"""

from kraph.cli.main import cli

__all__ = ["cli"]
