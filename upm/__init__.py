"""
upm - upkeep command-line tool.

This is the command-line interface for planning updates of tracked files.
Supports querying, marking files for install/update/uninstall, printing the
plan, consistency checks and update site management.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
