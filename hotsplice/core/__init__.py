"""
Core components shared by the wrap and injection engines.

This package contains the record schemas, error taxonomy, identifier
generation, capability flags, member resolution and configuration.
"""

__all__ = []
