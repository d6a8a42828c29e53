"""Entry point for `python -m kraph`.

Usage:
    python -m kraph build seed topology.yaml
"""

from __future__ import annotations

from kraph.cli import cli

cli(prog_name="kraph")
