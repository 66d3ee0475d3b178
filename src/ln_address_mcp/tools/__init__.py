"""
ln-address MCP Tools

Tool implementations for Lightning Address operations.
"""

from .create_invoice import create_invoice
from .decode_invoice import decode_invoice
from .resolve_address import resolve_lightning_address

__all__ = [
    "create_invoice",
    "decode_invoice",
    "resolve_lightning_address",
]
