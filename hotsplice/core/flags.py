"""Per-callable capability flags.

The only flag today is ``allow_inject``, consulted by inject_function. Flags
live in a side table weakly keyed by the callable, so marking a function
never keeps it alive and never touches its attributes.
"""

import types
import weakref
from typing import Any, Callable, Optional, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_allow_inject: "weakref.WeakKeyDictionary[Any, bool]" = weakref.WeakKeyDictionary()


def _flag_key(target: Any) -> Any:
    """Return the object the flag is stored against.

    Bound methods are created fresh on every attribute access, and
    staticmethod/classmethod wrappers are not what the class hands out, so
    all three are keyed by their underlying function.
    """
    if isinstance(target, (types.MethodType, staticmethod, classmethod)):
        return target.__func__
    return target


def _set_flag(target: Any, value: bool) -> None:
    try:
        _allow_inject[_flag_key(target)] = value
    except TypeError as e:
        raise TypeError(
            f"cannot flag {type(target).__name__} object: it does not support weak references"
        ) from e


def no_inject(target: F) -> F:
    """Mark a callable as refusing injections.

    Returns the callable unchanged, so it can be used as a decorator.
    """
    _set_flag(target, False)
    return target


def allow_inject(target: F) -> F:
    """Explicitly mark a callable as accepting injections.

    Returns the callable unchanged, so it can be used as a decorator.
    """
    _set_flag(target, True)
    return target


def get_inject_flag(target: Any) -> Optional[bool]:
    """Get the ``allow_inject`` flag for a callable.

    Args:
        target: The callable to query

    Returns:
        None if ``target`` is falsy, True if it was never flagged, otherwise
        the stored flag.
    """
    if not target:
        return None
    try:
        return _allow_inject.get(_flag_key(target), True)
    except TypeError:
        # Not weakly referenceable, so it can never have been flagged
        return True
