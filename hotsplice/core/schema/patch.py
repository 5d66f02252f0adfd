"""Patch specifications and records for the wrap engine.

A patch describes hooks to run around an existing callable:

- prefix(*args, **kwargs) -> (early_result, new_args, flow)
- postfix(call_result, *args, **kwargs) -> result
- replace(*args, **kwargs) -> result

If ``replace`` is set it takes total precedence over prefix and postfix.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional


class FlowControl(str, Enum):
    """Signal returned by a prefix hook to steer the wrapper.

    Members compare equal to their string values, so hooks may return plain
    strings such as ``"stop"``.
    """

    CONTINUE_EXEC = "continue"
    CONTINUE_WITHOUT_POSTFIX = "continue_without_postfix"
    STOP_EXEC = "stop"


@dataclass
class PatchSpec:
    """Hooks and bookkeeping for a single patch.

    Attributes:
        prefix: Runs before the original; may rewrite args or stop the call
        postfix: Runs after the original with its result prepended to args
        replace: Runs instead of the original
        id: Record id to use verbatim; minted with prefix "fn" when None
        metadata: Free-form caller data kept on the record
        allow_unsafe_injection: Informational only; carried on the record
    """

    prefix: Optional[Callable[..., Any]] = None
    postfix: Optional[Callable[..., Any]] = None
    replace: Optional[Callable[..., Any]] = None
    id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    allow_unsafe_injection: bool = False


@dataclass(frozen=True)
class PatchRecord:
    """Record of an applied patch.

    Attributes:
        id: Patch id
        member: Name of the member that was replaced
        patch: The PatchSpec that was applied
        original: The callable found at the member immediately before patching
        timestamp: Seconds since the epoch when the patch was applied
    """

    id: str
    member: str
    patch: PatchSpec
    original: Callable[..., Any]
    timestamp: float = field(default_factory=time.time)
