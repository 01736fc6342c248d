"""Sync appointments from the Lizto web calendar into MongoDB."""

__version__ = "0.3.0"
