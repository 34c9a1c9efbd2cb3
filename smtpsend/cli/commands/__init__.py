"""CLI command handlers"""

from .send import handle_send

__all__ = ["handle_send"]
