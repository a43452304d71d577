"""depcatalog command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``depcatalog`` script).
"""

from depcatalog.cli.main import cli

__all__ = ["cli"]
