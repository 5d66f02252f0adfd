"""Resolve and overwrite ``target[member]`` slots.

A target is anything holding callables: a module, a class, an instance, or a
mutable mapping. Mappings are addressed by item, everything else by
attribute. On classes, staticmethod and classmethod descriptors are
unwrapped on read and re-applied on write so the replacement keeps the same
calling convention as the original.
"""

import inspect
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Callable

from hotsplice.core.errors import AssignmentError, InvalidTargetError, MissingFieldError

_MISSING = object()

PLAIN = "plain"
STATIC = "static"
CLASS = "class"


@dataclass(frozen=True)
class Member:
    """A callable found at ``target[name]``.

    Attributes:
        target: Object holding the member
        name: Member name
        value: The callable, with any staticmethod/classmethod wrapper removed
        kind: PLAIN, STATIC or CLASS
    """

    target: Any
    name: str
    value: Callable[..., Any]
    kind: str = PLAIN

    def rewrap(self, replacement: Callable[..., Any]) -> Any:
        """Give ``replacement`` the same descriptor shape as the original."""
        if self.kind == STATIC:
            return staticmethod(replacement)
        if self.kind == CLASS:
            return classmethod(replacement)
        return replacement

    def assign(self, replacement: Callable[..., Any]) -> None:
        """Write ``replacement`` into the slot.

        Raises:
            AssignmentError: If the target refuses the write
        """
        value = self.rewrap(replacement)
        try:
            if isinstance(self.target, MutableMapping):
                self.target[self.name] = value
            else:
                setattr(self.target, self.name, value)
        except Exception as e:
            raise AssignmentError(
                f"failed to assign replacement to target[{self.name}]: {e}", member=self.name
            ) from e


def resolve_member(target: Any, name: Any) -> Member:
    """Look up a callable member.

    Args:
        target: Module, class, instance or mutable mapping
        name: Member name

    Returns:
        The resolved Member

    Raises:
        InvalidTargetError: If target is None or the member is missing or not callable
        MissingFieldError: If name is None
    """
    if target is None:
        raise InvalidTargetError("Target object 'target' cannot be None")
    if name is None:
        raise MissingFieldError("Member name cannot be None", field_name="member")
    name = str(name)

    kind = PLAIN
    if isinstance(target, MutableMapping):
        value = target.get(name, _MISSING)
    else:
        value = getattr(target, name, _MISSING)
        if isinstance(target, type):
            raw = inspect.getattr_static(target, name, _MISSING)
            if isinstance(raw, staticmethod):
                kind, value = STATIC, raw.__func__
            elif isinstance(raw, classmethod):
                kind, value = CLASS, raw.__func__

    if value is _MISSING:
        raise InvalidTargetError(
            f"target[{name}] does not exist", member=name, actual_type="missing"
        )
    if not callable(value):
        actual_type = type(value).__name__
        raise InvalidTargetError(
            f"target[{name}] is not a function -- actual type is {actual_type}",
            member=name,
            actual_type=actual_type,
        )
    return Member(target=target, name=name, value=value, kind=kind)
