"""Electro Settings Module - System settings with an optimistic cache."""
