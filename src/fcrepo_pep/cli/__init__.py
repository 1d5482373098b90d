"""Command-line interface for fcrepo-pep.

Provides commands for checking authorization decisions and validating
policy tables.
"""

from .main import cli, main

__all__ = ["cli", "main"]
