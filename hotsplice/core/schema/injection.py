"""Injection specifications and records for the injection engine."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union


class InsertLocation(str, Enum):
    """Where injected statements go relative to the statement at the target line."""

    BEFORE = "before"
    AFTER = "after"


@dataclass
class InjectionSpec:
    """Statements to splice into a callable's body.

    Attributes:
        code: Source text of one or more statements
        line: 1-based line number, counted from the first line of the
              callable's own source text (its first decorator or ``def``)
        loc: Insert before or after the statement found at ``line``
    """

    code: str
    line: Optional[int]
    loc: Optional[Union[InsertLocation, str]] = InsertLocation.AFTER


@dataclass(frozen=True)
class InjectRecord:
    """Record of an applied injection.

    Attributes:
        id: Injection id
        member: Name of the member that was replaced
        original: The callable found at the member immediately before injection
        spec: The InjectionSpec that was applied
        source: Regenerated source of the new callable
        timestamp: Seconds since the epoch when the injection was applied
    """

    id: str
    member: str
    original: Callable[..., Any]
    spec: InjectionSpec
    source: str
    timestamp: float = field(default_factory=time.time)
