"""Injection engine: permanently splice statements into a function body.

inject_function reads a function's own source, parses it, inserts the
caller's statements near a target line, regenerates the source with
``ast.unparse``, compiles a replacement and writes it back over the member.
Every failure happens before the write, so the member is either fully
replaced or left untouched.
"""

import ast
import inspect
import logging
import types
from typing import Any, Callable, Iterator, Optional

from hotsplice.core.config import get_bool
from hotsplice.core.errors import (
    MissingFieldError,
    PermissionDeniedError,
    SpecError,
    UnsupportedShapeError,
)
from hotsplice.core.flags import get_inject_flag
from hotsplice.core.registry import RecordRegistry
from hotsplice.core.schema.injection import InjectionSpec, InjectRecord, InsertLocation
from hotsplice.core.targets import Member, resolve_member
from hotsplice.inject.compiler import materialize
from hotsplice.inject.fragments import parse_function_source, parse_statements
from hotsplice.inject.placement import find_insertion_index, splice

logger = logging.getLogger(__name__)

_injections: RecordRegistry[InjectRecord] = RecordRegistry("inj")


def _validate_spec(spec: Optional[InjectionSpec]) -> InsertLocation:
    """Check required fields and return the normalized location."""
    if spec is None:
        raise MissingFieldError("Injection spec cannot be None", field_name="spec")
    if spec.line is None:
        raise MissingFieldError("spec.line cannot be None", field_name="spec.line")
    if spec.loc is None:
        raise MissingFieldError("spec.loc cannot be None", field_name="spec.loc")
    if not spec.code or not spec.code.strip():
        raise MissingFieldError("spec.code cannot be empty", field_name="spec.code")

    if isinstance(spec.line, bool) or not isinstance(spec.line, int) or spec.line < 1:
        raise SpecError(f"spec.line must be a positive integer, got {spec.line!r}", field_name="spec.line")
    try:
        return InsertLocation(spec.loc)
    except ValueError as e:
        raise SpecError(
            f"spec.loc must be 'before' or 'after', got {spec.loc!r}", field_name="spec.loc"
        ) from e


def _function_of(member: Member) -> types.FunctionType:
    """Return the plain function behind the member, or raise UnsupportedShapeError."""
    value = member.value
    if isinstance(value, types.MethodType):
        value = value.__func__
    if not isinstance(value, types.FunctionType):
        raise UnsupportedShapeError(
            f"cannot inject into {member.name}: {type(value).__name__} has no Python source",
            member=member.name,
        )
    if value.__code__.co_name == "<lambda>":
        raise UnsupportedShapeError(
            f"cannot inject into {member.name}: lambdas have no statement block",
            member=member.name,
        )
    return value


def _read_source(function: types.FunctionType, member: str) -> str:
    # Read from the code object so __wrapped__ is never followed
    try:
        return inspect.getsource(function.__code__)
    except (OSError, TypeError) as e:
        raise UnsupportedShapeError(
            f"cannot inject into {member}: source is unavailable ({e})", member=member
        ) from e


def _rebind(member: Member, function: types.FunctionType) -> Callable[..., Any]:
    if isinstance(member.value, types.MethodType):
        return types.MethodType(function, member.value.__self__)
    return function


def inject_function(target: Any, member: str, spec: InjectionSpec) -> str:
    """Inject statements into a function member and recompile it.

    Args:
        target: Module, class, instance or mapping holding the function
        member: Name of the function
        spec: Code to inject, target line and placement

    Returns:
        The injection id ("inj_...")

    Raises:
        InvalidTargetError: If target is None or the member is not callable
        MissingFieldError: If member, spec, spec.code, spec.line or spec.loc is missing
        SpecError: If spec.line or spec.loc holds an invalid value
        PermissionDeniedError: If the function was marked with no_inject
        UnsupportedShapeError: If the callable has no rewritable statement block
        SourceSyntaxError: If the function source or the injected code fails to parse
        AssignmentError: If the new function could not be written back

    Example:
        >>> def counter():
        ...     x = 1
        ...     return x
        >>> ns = types.SimpleNamespace(counter=counter)
        >>> inject_id = inject_function(ns, "counter", InjectionSpec("x = x + 1", line=2))
        >>> ns.counter()
        2
    """
    resolved = resolve_member(target, member)
    loc = _validate_spec(spec)

    if get_inject_flag(resolved.value) is False:
        raise PermissionDeniedError(
            f"Function {resolved.name} has prohibited injection via no_inject",
            member=resolved.name,
        )

    function = _function_of(resolved)
    source = _read_source(function, resolved.name)

    fn_node = parse_function_source(source)
    new_statements = parse_statements(spec.code)

    index = find_insertion_index(fn_node.body, spec.line, loc)
    splice(fn_node.body, index, new_statements)
    ast.fix_missing_locations(fn_node)

    new_source = ast.unparse(fn_node)
    logger.debug(f"Regenerated source for {resolved.name}:\n{new_source}")

    inject_id = _injections.reserve_id()
    register = get_bool(["inject", "register_source"], True)
    replacement = materialize(new_source, function, f"<hotsplice:{inject_id}>", register=register)

    resolved.assign(_rebind(resolved, replacement))

    record = InjectRecord(
        id=inject_id,
        member=resolved.name,
        original=resolved.value,
        spec=spec,
        source=new_source,
    )
    _injections.add(inject_id, record)

    logger.info(
        f"Injected {len(new_statements)} statement(s) into {resolved.name} "
        f"at index {index} (line {spec.line}, {loc.value}) as {inject_id}"
    )
    return inject_id


def get_injection(inject_id: str) -> Optional[InjectRecord]:
    """Return the record for ``inject_id``, or None."""
    return _injections.get(inject_id)


def iter_injections() -> Iterator[InjectRecord]:
    """Iterate over injection records in the order they were applied."""
    return iter(_injections)
