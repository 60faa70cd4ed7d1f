"""
Exceptions shared across the x402 client.
"""

from __future__ import annotations

__all__ = ["ConfigError"]


class ConfigError(ValueError):
    """Raised when the supplied configuration is invalid."""
