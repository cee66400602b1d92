"""
CLI module for dotstore.

Provides the command-line interface using Click.
"""

from dotstore.cli.main import cli, main

__all__ = ["main", "cli"]
