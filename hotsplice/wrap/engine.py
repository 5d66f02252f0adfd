"""Wrap engine: replace a callable with a hook-dispatching wrapper.

patch_function swaps ``target[member]`` for a wrapper that runs the patch's
prefix, postfix or replace hooks around the original. Hook failures are
logged and degrade to "hook had no effect"; they never fail the call.
"""

import functools
import logging
from typing import Any, Callable, Iterator, Optional

from hotsplice.core.errors import MissingFieldError, SpecError
from hotsplice.core.registry import RecordRegistry
from hotsplice.core.schema.patch import FlowControl, PatchRecord, PatchSpec
from hotsplice.core.targets import resolve_member

logger = logging.getLogger(__name__)

_patches: RecordRegistry[PatchRecord] = RecordRegistry("fn")

_HOOKS = ("prefix", "postfix", "replace")


def _validate_patch(patch: Optional[PatchSpec]) -> None:
    if patch is None:
        raise MissingFieldError("Patch cannot be None", field_name="patch")
    for hook in _HOOKS:
        value = getattr(patch, hook)
        if value is not None and not callable(value):
            raise SpecError(
                f"patch.{hook} must be callable, got {type(value).__name__}",
                field_name=f"patch.{hook}",
            )


def _display_name(original: Callable[..., Any], member: str) -> str:
    name = getattr(original, "__name__", None)
    if not name or name == "<lambda>":
        return member
    return name


def build_wrapper(
    original: Callable[..., Any], patch: PatchSpec, patch_id: str, member: str
) -> Callable[..., Any]:
    """Build the dispatching wrapper for ``original``.

    Args:
        original: Callable being wrapped
        patch: Hooks to dispatch to
        patch_id: Id used to tag hook failure diagnostics
        member: Member name, used as the wrapper's name for anonymous originals

    Returns:
        A function that can be assigned in place of ``original``
    """

    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if patch.replace is not None:
            return patch.replace(*args, **kwargs)

        call_args = args
        flow = FlowControl.CONTINUE_EXEC

        if patch.prefix is not None:
            try:
                early_result, new_args, new_flow = patch.prefix(*args, **kwargs)
                new_args = tuple(new_args)
            except Exception as e:
                logger.warning(f"[{patch_id}] 'prefix' hook raised {type(e).__name__}: {e}")
            else:
                call_args, flow = new_args, new_flow
                if flow == FlowControl.STOP_EXEC:
                    return early_result

        call_result = original(*call_args, **kwargs)

        if patch.postfix is not None and flow != FlowControl.CONTINUE_WITHOUT_POSTFIX:
            try:
                return patch.postfix(call_result, *call_args, **kwargs)
            except Exception as e:
                logger.warning(f"[{patch_id}] 'postfix' hook raised {type(e).__name__}: {e}")

        return call_result

    functools.update_wrapper(wrapper, original)
    wrapper.__name__ = _display_name(original, member)
    return wrapper


def patch_function(target: Any, member: str, patch: PatchSpec) -> str:
    """Patch a callable member of a module, class, instance or mapping.

    Args:
        target: Object holding the callable
        member: Name of the callable
        patch: Hooks to apply

    Returns:
        The patch id (``patch.id`` if set, otherwise a fresh "fn_" id)

    Raises:
        InvalidTargetError: If target is None or the member is not callable
        MissingFieldError: If member or patch is None
        SpecError: If a hook is not callable or the id is already registered
        AssignmentError: If the wrapper could not be written back

    Example:
        >>> def log_args(*args, **kwargs):
        ...     print(args)
        ...     return None, args, FlowControl.CONTINUE_EXEC
        >>> patch_id = patch_function(math, "hypot", PatchSpec(prefix=log_args))
    """
    resolved = resolve_member(target, member)
    _validate_patch(patch)

    if patch.id:
        patch_id = patch.id
        if patch_id in _patches:
            raise SpecError(f"patch id {patch_id!r} is already registered", field_name="patch.id")
    else:
        patch_id = _patches.reserve_id()

    wrapper = build_wrapper(resolved.value, patch, patch_id, resolved.name)
    resolved.assign(wrapper)

    record = PatchRecord(
        id=patch_id, member=resolved.name, patch=patch, original=resolved.value
    )
    _patches.add(patch_id, record)

    hooks = [hook for hook in _HOOKS if getattr(patch, hook) is not None]
    logger.info(f"Applied patch {patch_id} to {resolved.name} (hooks: {', '.join(hooks) or 'none'})")
    return patch_id


def get_patch(patch_id: str) -> Optional[PatchRecord]:
    """Return the record for ``patch_id``, or None."""
    return _patches.get(patch_id)


def iter_patches() -> Iterator[PatchRecord]:
    """Iterate over patch records in the order they were applied."""
    return iter(_patches)
