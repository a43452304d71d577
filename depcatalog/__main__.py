"""Entry point for `python -m depcatalog`.

Usage:
    python -m depcatalog serve
    python -m depcatalog graph --team team-1
"""

from __future__ import annotations

from depcatalog.cli import cli

cli()
