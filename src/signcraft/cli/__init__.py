"""Command-line interface for signcraft.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- One command per kind of sign geometry
- Binary or ASCII STL output
- Quiet mode and optional log file
- Detailed error reporting
"""

from signcraft.cli.app import cli, main

__all__ = ["cli", "main"]
