"""Concrete database connectors."""
