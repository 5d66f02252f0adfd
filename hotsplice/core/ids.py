"""Opaque identifiers for patch and injection records."""

import random
import string
from typing import Optional

from hotsplice.core.config import get_int

_ALPHABET = string.digits + string.ascii_lowercase
DEFAULT_SUFFIX_LENGTH = 8


def new_id(prefix: str = "patch", length: Optional[int] = None) -> str:
    """Mint an id of the form ``<prefix>_<base36 suffix>``.

    Collisions are unlikely but not impossible; callers that need uniqueness
    check against their registry. Not suitable for anything security related.

    Args:
        prefix: Leading tag, e.g. "fn" for patches or "inj" for injections
        length: Suffix length (default: config ``ids.suffix_length`` or 8)

    Returns:
        The new identifier
    """
    if length is None:
        length = get_int(["ids", "suffix_length"], DEFAULT_SUFFIX_LENGTH)
    length = max(1, length)
    suffix = "".join(random.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}_{suffix}"
