"""Turn regenerated function source into a live function.

This is the one place where caller-supplied text becomes executable code.
Nothing is checked or sandboxed here; a hardened deployment would swap
``materialize`` for a restricted compiler.

The regenerated ``def`` is compiled inside a synthetic factory whose
parameters are the original's free variables. That makes the compiler emit
the same free variables (including ``__class__`` for zero-argument
``super()``), so the inner code object can be bound to the original's own
closure cells. Methods are additionally nested in a synthetic class named
after their owner so ``__private`` names mangle as before. The factory is
assembled as a syntax tree around the parsed ``def``, so the function text
is compiled exactly as written. The factory itself is never executed, which
also means decorators in the source are not re-applied.
"""

import ast
import linecache
import logging
import types
from typing import Any, Dict, Optional

from hotsplice.core.errors import SourceSyntaxError, UnsupportedShapeError
from hotsplice.inject.fragments import FunctionNode, parse_function_source

logger = logging.getLogger(__name__)

_FACTORY_NAME = "__hotsplice_factory__"


def _owner_class_name(qualname: str) -> Optional[str]:
    """Return the defining class name for a method qualname like "Cls.method"."""
    parts = qualname.split(".")
    if len(parts) >= 2 and parts[-2] != "<locals>":
        return parts[-2]
    return None


def _factory_module(node: FunctionNode, freevars: tuple, owner: Optional[str]) -> ast.Module:
    """Wrap ``node`` in ``def factory(<freevars>):`` and, for methods, ``class <owner>:``."""
    header = f"def {_FACTORY_NAME}({', '.join(freevars)}):\n"
    if owner is None:
        module = ast.parse(header + "    pass\n")
    else:
        # Private names are mangled against the enclosing class name
        module = ast.parse(header + f"    class {owner}:\n        pass\n")

    innermost = module.body[0]
    if owner is not None:
        innermost = innermost.body[0]
    innermost.body = [node]
    return ast.fix_missing_locations(module)


def _find_code(code: types.CodeType, name: str) -> types.CodeType:
    for const in code.co_consts:
        if isinstance(const, types.CodeType) and const.co_name == name:
            return const
    raise UnsupportedShapeError(f"regenerated source does not define {name!r}")


def register_source(filename: str, source: str) -> None:
    """Make ``source`` visible to linecache and inspect under ``filename``.

    Entries with no mtime are never invalidated by ``linecache.checkcache``.
    """
    if not source.endswith("\n"):
        source += "\n"
    lines = source.splitlines(keepends=True)
    linecache.cache[filename] = (len(source), None, lines, filename)


def materialize(
    source: str,
    original: types.FunctionType,
    filename: str,
    register: bool = True,
) -> types.FunctionType:
    """Compile ``source`` into a function that stands in for ``original``.

    Line numbers on the new code object refer to ``source`` itself, which is
    what gets registered with linecache.

    Args:
        source: Source of a single ``def`` named like the original
        original: Function whose globals, closure and metadata are reused
        filename: Filename recorded on the compiled code
        register: Register ``source`` with linecache

    Returns:
        The new function

    Raises:
        SourceSyntaxError: If the source does not compile
        UnsupportedShapeError: If the source does not define the original's name
    """
    freevars = original.__code__.co_freevars
    owner = _owner_class_name(original.__qualname__)
    node = parse_function_source(source)
    factory = _factory_module(node, freevars, owner)
    try:
        factory_code = compile(factory, filename, "exec", dont_inherit=True)
    except SyntaxError as e:
        raise SourceSyntaxError(f"regenerated source does not compile: {e.msg}", source, e) from e

    code = _find_code(factory_code, _FACTORY_NAME)
    if owner is not None:
        code = _find_code(code, owner)
    code = _find_code(code, original.__code__.co_name)

    cells: Dict[str, Any] = dict(zip(freevars, original.__closure__ or ()))
    missing = [name for name in code.co_freevars if name not in cells]
    if missing:
        raise UnsupportedShapeError(
            f"regenerated {original.__qualname__} needs closure variables the original "
            f"does not have: {', '.join(missing)}"
        )
    closure = tuple(cells[name] for name in code.co_freevars) or None

    function = types.FunctionType(
        code, original.__globals__, original.__name__, original.__defaults__, closure
    )
    function.__kwdefaults__ = original.__kwdefaults__
    function.__annotations__ = dict(original.__annotations__)
    function.__doc__ = original.__doc__
    function.__module__ = original.__module__
    function.__qualname__ = original.__qualname__
    function.__dict__.update(original.__dict__)

    if register:
        register_source(filename, source)
    logger.debug(f"Materialized {original.__qualname__} from {filename}")
    return function
