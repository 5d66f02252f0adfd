"""Locate where injected statements go in a function body."""

import ast
import logging
from typing import List, Sequence

from hotsplice.core.schema.injection import InsertLocation

logger = logging.getLogger(__name__)


def find_insertion_index(
    statements: Sequence[ast.stmt], line: int, loc: InsertLocation = InsertLocation.AFTER
) -> int:
    """Compute the splice index for ``line`` within ``statements``.

    Statements are scanned in order and the first rule that applies wins:

    1. the statement ends on ``line``;
    2. the statement's line range contains ``line``;
    3. the statement starts after ``line``.

    For rules 1 and 2 the new code goes after the matched statement, or
    before it when ``loc`` is BEFORE. For rule 3 the line falls in a gap
    (blank line, comment, or the function header) and the new code goes
    directly before that statement, whatever ``loc`` says. A line past the
    last statement appends.

    Args:
        statements: Body of the function being rewritten
        line: 1-based target line
        loc: Placement relative to a matched statement

    Returns:
        Index at which to splice, in ``range(len(statements) + 1)``
    """
    for i, stmt in enumerate(statements):
        start = stmt.lineno
        end = getattr(stmt, "end_lineno", None) or start
        if end == line or start <= line <= end:
            index = i if loc == InsertLocation.BEFORE else i + 1
            logger.debug(f"Line {line} matched statement {i} (lines {start}-{end}), index {index}")
            return index
        if start > line:
            logger.debug(f"Line {line} precedes statement {i} (line {start}), index {i}")
            return i

    logger.debug(f"Line {line} is past the last statement, appending")
    return len(statements)


def splice(statements: List[ast.stmt], index: int, new_statements: Sequence[ast.stmt]) -> None:
    """Insert ``new_statements`` into ``statements`` at ``index``, in order."""
    statements[index:index] = list(new_statements)
