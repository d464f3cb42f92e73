"""Electro Accounts Module - Profile documents and completeness."""
