"""Deterministic synthetic computational-chemistry service."""

__version__ = "0.1.0"
