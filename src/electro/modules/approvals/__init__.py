"""Electro Approvals Module - Business account approval workflow."""
