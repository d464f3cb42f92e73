"""Electro Admin Module - Role administration."""
