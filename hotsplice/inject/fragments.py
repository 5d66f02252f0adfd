"""Parse callable source and injected code into AST fragments.

Two entry points:
- parse_function_source: source of a whole ``def`` -> FunctionDef node
- parse_statements: free-standing code snippet -> list of statement nodes

Line numbers on returned nodes are relative to the text that was parsed, so
line 1 of a function is the first line of its own source.
"""

import ast
import textwrap
from typing import List, Union

from hotsplice.core.errors import SourceSyntaxError, UnsupportedShapeError

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]

# Indented method source parses as the body of this header
_BLOCK_HEADER = "if 1:\n"


def parse_function_source(source: str) -> FunctionNode:
    """Parse the source of a single function definition.

    Indented source (methods, nested functions) is parsed as it stands, so
    multi-line strings whose lines start at column 0 keep their text.

    Args:
        source: Text as returned by ``inspect.getsource``; may be indented

    Returns:
        The function definition node, with decorators and body intact

    Raises:
        SourceSyntaxError: If the text does not parse
        UnsupportedShapeError: If the text is not a ``def``/``async def``
    """
    indented = source[:1] in (" ", "\t")
    text = _BLOCK_HEADER + source if indented else source
    try:
        module = ast.parse(text)
    except SyntaxError as e:
        if indented and e.lineno is not None:
            e.lineno -= 1
        raise SourceSyntaxError(f"unable to parse function source: {e.msg}", source, e) from e

    if indented:
        module = ast.increment_lineno(module, -1)
        body = module.body[0].body if module.body else []
    else:
        body = module.body

    node = body[0] if body else None
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        shape = type(node).__name__ if node is not None else "empty source"
        raise UnsupportedShapeError(
            f"cannot inject into {shape}: only def/async def with a statement block are supported"
        )
    return node


def parse_statements(code: str) -> List[ast.stmt]:
    """Parse a snippet of one or more statements.

    ``return``, ``yield`` and ``await`` parse at module level; whether they
    are legal in the target is decided when the function is recompiled.

    Args:
        code: Statement text; common leading indentation is removed

    Returns:
        Statement nodes in source order

    Raises:
        SourceSyntaxError: If the snippet does not parse
    """
    try:
        module = ast.parse(textwrap.dedent(code))
    except SyntaxError as e:
        raise SourceSyntaxError(f"unable to parse injected code: {e.msg}", code, e) from e
    return list(module.body)
