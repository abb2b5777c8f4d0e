"""Command and script generation for apps running on VPS hosts."""

__version__ = "0.1.0"
