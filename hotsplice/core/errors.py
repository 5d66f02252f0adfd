"""Exceptions raised by patch_function and inject_function.

Every error here is raised synchronously, before the target member or any
registry has been touched. Hook failures during wrapper dispatch are not
represented here: they are logged and swallowed by the wrapper.
"""

from typing import Optional


class HotspliceError(Exception):
    """Base class for all hotsplice errors."""


class InvalidTargetError(HotspliceError):
    """Raised when the target is missing or the member is not callable.

    Attributes:
        member: Name of the member that was looked up (optional)
        actual_type: Name of the runtime type found at the member (optional)
    """

    def __init__(
        self, message: str, member: Optional[str] = None, actual_type: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.member = member
        self.actual_type = actual_type


class SpecError(HotspliceError):
    """Raised when a PatchSpec or InjectionSpec field holds an invalid value.

    Attributes:
        field_name: Dotted name of the offending field (e.g. "spec.line")
    """

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class MissingFieldError(SpecError):
    """Raised when a required argument or spec field is None or empty."""


class SourceSyntaxError(HotspliceError, SyntaxError):
    """Raised when a callable's source or injected code fails to parse.

    Subclasses the builtin SyntaxError so callers catching SyntaxError still
    see it. Location details are copied from the parser's error.

    Attributes:
        source: The text that failed to parse
    """

    def __init__(
        self, message: str, source: str = "", cause: Optional[SyntaxError] = None
    ) -> None:
        super().__init__(message)
        self.source = source
        if cause is not None:
            self.lineno = cause.lineno
            self.offset = cause.offset
            self.text = cause.text


class UnsupportedShapeError(HotspliceError):
    """Raised when a callable has no rewritable statement block.

    Lambdas, builtins, callable instances and functions whose source cannot
    be retrieved all land here.

    Attributes:
        member: Name of the member being injected into
    """

    def __init__(self, message: str, member: Optional[str] = None) -> None:
        super().__init__(message)
        self.member = member


class PermissionDeniedError(HotspliceError):
    """Raised when the callable was marked with no_inject.

    Attributes:
        member: Name of the member being injected into
    """

    def __init__(self, message: str, member: Optional[str] = None) -> None:
        super().__init__(message)
        self.member = member


class AssignmentError(HotspliceError):
    """Raised when the replacement could not be written back to the target.

    The underlying exception is chained as ``__cause__``.

    Attributes:
        member: Name of the member that could not be overwritten
    """

    def __init__(self, message: str, member: Optional[str] = None) -> None:
        super().__init__(message)
        self.member = member
