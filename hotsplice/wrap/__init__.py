"""Hook-based wrapping of existing callables.

The wrapper dispatches to the patch's hooks:
- replace: runs instead of the original
- prefix: runs first; may rewrite positional args or stop the call
- postfix: runs last with the original's result prepended to the args
"""

from hotsplice.wrap.engine import build_wrapper, get_patch, iter_patches, patch_function

__all__ = [
    "build_wrapper",
    "get_patch",
    "iter_patches",
    "patch_function",
]
