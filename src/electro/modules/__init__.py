"""Electro Modules - Application feature modules."""
