"""Electro Expert - marketplace auth, account and approval core."""

__version__ = "0.1.0"
