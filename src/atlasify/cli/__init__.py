"""Command-line interface for atlasify.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bars for shape and region processing
- Verbose/quiet output modes
- Region listing without conversion
- Detailed error reporting
"""

from atlasify.cli.app import cli, main

__all__ = ["cli", "main"]
