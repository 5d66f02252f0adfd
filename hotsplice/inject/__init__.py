"""
Source-level injection into existing functions.

This package contains the pieces of the injection pipeline:
- fragments: parsing function source and injected snippets
- placement: choosing the splice index for a target line
- compiler: materializing regenerated source as a live function
- engine: inject_function and the injection registry
"""

from hotsplice.inject.engine import get_injection, inject_function, iter_injections

__all__ = [
    "get_injection",
    "inject_function",
    "iter_injections",
]
