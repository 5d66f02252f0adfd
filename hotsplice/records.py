"""Read-only access to the process-wide patch and injection records."""

from typing import Optional, TextIO

from hotsplice.core.report import build_report, dump_report
from hotsplice.inject.engine import get_injection, iter_injections
from hotsplice.wrap.engine import get_patch, iter_patches


def dump_records(stream: Optional[TextIO] = None) -> str:
    """Render every patch and injection applied so far as YAML.

    Args:
        stream: Optional stream to also write the YAML to

    Returns:
        The YAML text

    Example:
        >>> import sys
        >>> dump_records(sys.stderr)
    """
    return dump_report(build_report(iter_patches(), iter_injections()), stream)


__all__ = [
    "dump_records",
    "get_injection",
    "get_patch",
    "iter_injections",
    "iter_patches",
]
