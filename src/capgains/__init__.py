"""
capgains - Capital Gains Tax Calculator

Public API for computing per-transaction capital-gains tax from a
sequence of buy/sell operations.
"""

from importlib.metadata import version

try:
    __version__ = version("capgains")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
