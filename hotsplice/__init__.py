"""
hotsplice: runtime patching and source injection for Python callables.

Two ways to change what an existing callable does:
- patch_function wraps it with prefix/postfix/replace hooks
- inject_function splices new statements into its source and recompiles it
"""

from hotsplice.core.errors import (
    AssignmentError,
    HotspliceError,
    InvalidTargetError,
    MissingFieldError,
    PermissionDeniedError,
    SourceSyntaxError,
    SpecError,
    UnsupportedShapeError,
)
from hotsplice.core.flags import allow_inject, get_inject_flag, no_inject
from hotsplice.core.schema import (
    FlowControl,
    InjectionSpec,
    InjectRecord,
    InsertLocation,
    PatchRecord,
    PatchSpec,
)
from hotsplice.inject.engine import get_injection, inject_function, iter_injections
from hotsplice.records import dump_records
from hotsplice.wrap.engine import get_patch, iter_patches, patch_function

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "AssignmentError",
    "FlowControl",
    "HotspliceError",
    "InjectionSpec",
    "InjectRecord",
    "InsertLocation",
    "InvalidTargetError",
    "MissingFieldError",
    "PatchRecord",
    "PatchSpec",
    "PermissionDeniedError",
    "SourceSyntaxError",
    "SpecError",
    "UnsupportedShapeError",
    "allow_inject",
    "dump_records",
    "get_inject_flag",
    "get_injection",
    "get_patch",
    "inject_function",
    "iter_injections",
    "iter_patches",
    "no_inject",
    "patch_function",
]
