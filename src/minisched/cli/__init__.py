"""
minisched CLI.

Entry point: ``minisched`` (see :mod:`minisched.cli.app`).
"""

from minisched.cli.app import app

__all__ = ["app"]
