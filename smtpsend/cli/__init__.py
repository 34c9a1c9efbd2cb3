"""Command-line interface for smtpsend"""

from .cli import main

__all__ = ["main"]
