"""CLI for acp-identity.

Entry point: main() in main.py
"""

from .main import cli, main

__all__ = ["cli", "main"]
