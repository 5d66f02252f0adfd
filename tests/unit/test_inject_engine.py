"""Unit tests for the injection engine.

Line numbers in these tests count from the first line of each target
function's own source, so line 1 is the ``def`` line.
"""

import functools
import logging
import types

import pytest

from hotsplice.core.errors import (
    InvalidTargetError,
    MissingFieldError,
    PermissionDeniedError,
    SourceSyntaxError,
    SpecError,
    UnsupportedShapeError,
)
from hotsplice.core.flags import no_inject
from hotsplice.core.schema.injection import InjectionSpec, InsertLocation
from hotsplice.inject.engine import get_injection, inject_function, iter_injections


def counter():
    x = 1
    return x


def record_events(log):
    log.append("a")
    log.append("b")


def greet(name="world"):
    """Say hello."""
    message = "hello " + name
    return message


def make_adder(n):
    def add(x):
        total = x + n
        return total

    return add


def plain():
    x = None
    return x


def count_injections():
    return len(list(iter_injections()))


class TestInjectPlacement:
    """Tests for where statements land."""

    def test_insert_after_line(self):
        """Test injecting after a statement returns the updated value."""
        ns = types.SimpleNamespace(counter=counter)
        inject_function(ns, "counter", InjectionSpec("x = x + 1", line=2, loc=InsertLocation.AFTER))

        assert ns.counter() == 2

    def test_insert_before_line(self):
        """Test BEFORE places code ahead of the matched statement."""
        ns = types.SimpleNamespace(counter=counter)
        inject_function(ns, "counter", InjectionSpec("x = 5", line=3, loc=InsertLocation.BEFORE))

        assert ns.counter() == 5

    def test_insert_after_return_is_unreachable(self):
        """Test AFTER on the return line leaves the result alone."""
        ns = types.SimpleNamespace(counter=counter)
        inject_function(ns, "counter", InjectionSpec("x = 5", line=3, loc=InsertLocation.AFTER))

        assert ns.counter() == 1

    def test_line_past_end_appends_in_order(self):
        """Test that a line beyond the body appends all statements in order."""
        ns = types.SimpleNamespace(record_events=record_events)
        inject_function(
            ns,
            "record_events",
            InjectionSpec("log.append('c')\nlog.append('d')", line=99, loc=InsertLocation.AFTER),
        )

        log = []
        ns.record_events(log)
        assert log == ["a", "b", "c", "d"]

    def test_header_line_prepends(self):
        """Test that targeting the def line inserts before every statement."""
        ns = types.SimpleNamespace(record_events=record_events)
        inject_function(ns, "record_events", InjectionSpec("log.append('start')", line=1))

        log = []
        ns.record_events(log)
        assert log == ["start", "a", "b"]

    def test_loc_as_string(self):
        """Test that loc may be given as a plain string."""
        ns = types.SimpleNamespace(record_events=record_events)
        inject_function(ns, "record_events", InjectionSpec("log.append('mid')", line=3, loc="before"))

        log = []
        ns.record_events(log)
        assert log == ["a", "mid", "b"]

    def test_multiline_string_kept_verbatim(self):
        """Test that injected string literals are not re-indented."""
        ns = types.SimpleNamespace(plain=plain)
        inject_function(ns, "plain", InjectionSpec('x = """a\nb"""', line=2))

        assert ns.plain() == "a\nb"

    def test_original_function_untouched(self):
        """Test that the module-level function itself is not modified."""
        ns = types.SimpleNamespace(counter=counter)
        inject_function(ns, "counter", InjectionSpec("x = 100", line=2))

        assert ns.counter() == 100
        assert counter() == 1


class TestInjectShapes:
    """Tests for the kinds of callables that can be rewritten."""

    def test_metadata_preserved(self):
        """Test name, docstring and defaults survive injection."""
        ns = types.SimpleNamespace(greet=greet)
        inject_function(ns, "greet", InjectionSpec("message = message.upper()", line=3))

        assert ns.greet() == "HELLO WORLD"
        assert ns.greet.__name__ == "greet"
        assert ns.greet.__doc__ == "Say hello."
        assert ns.greet.__defaults__ == ("world",)

    def test_closure(self):
        """Test that closure variables stay bound."""
        ns = types.SimpleNamespace(add=make_adder(3))
        inject_function(ns, "add", InjectionSpec("total = total * n", line=2))

        assert ns.add(1) == 12

    def test_method_on_class(self):
        """Test injecting into a method defined on a class."""

        class Greeter:
            def greet(self, name):
                message = "hello " + name
                return message

        inject_function(Greeter, "greet", InjectionSpec("message = message.upper()", line=2))

        assert Greeter().greet("bob") == "HELLO BOB"

    def test_bound_method_on_instance(self):
        """Test that injecting through an instance rebinds to that instance only."""

        class Greeter:
            def __init__(self, punctuation):
                self.punctuation = punctuation

            def greet(self, name):
                message = "hello " + name
                return message

        loud = Greeter("!")
        inject_function(loud, "greet", InjectionSpec("message += self.punctuation", line=2))

        assert loud.greet("bob") == "hello bob!"
        assert Greeter("?").greet("bob") == "hello bob"

    def test_method_with_flush_left_string(self):
        """Test a method whose multi-line string starts lines at column 0."""

        class Holder:
            def query(self):
                sql = """
SELECT 1
"""
                return sql

        first_id = inject_function(
            Holder, "query", InjectionSpec("sql = sql.strip()", line=5, loc="before")
        )
        assert Holder().query() == "SELECT 1"

        return_line = get_injection(first_id).source.splitlines().index("    return sql") + 1
        inject_function(Holder, "query", InjectionSpec("sql = sql.lower()", line=return_line, loc="before"))
        assert Holder().query() == "select 1"

    def test_staticmethod_stays_static(self):
        """Test that staticmethods are re-wrapped after injection."""

        class Maths:
            @staticmethod
            def double(x):
                result = x * 2
                return result

        inject_function(Maths, "double", InjectionSpec("result += 1", line=3))

        assert isinstance(Maths.__dict__["double"], staticmethod)
        assert Maths.double(4) == 9

    def test_repeated_injection(self):
        """Test that an injected function can be injected into again."""
        ns = types.SimpleNamespace(counter=counter)
        inject_function(ns, "counter", InjectionSpec("x = x + 1", line=2))
        inject_function(ns, "counter", InjectionSpec("x = x * 10", line=3))

        assert ns.counter() == 20

    def test_mapping_target(self):
        """Test injecting into a dict entry."""
        table = {"counter": counter}
        inject_function(table, "counter", InjectionSpec("x = -x", line=2))

        assert table["counter"]() == -1

    def test_lambda_unsupported(self):
        """Test that lambdas are rejected."""
        ns = types.SimpleNamespace(square=lambda x: x * x)
        with pytest.raises(UnsupportedShapeError):
            inject_function(ns, "square", InjectionSpec("x = 1", line=1))

    def test_builtin_unsupported(self):
        """Test that builtins are rejected."""
        ns = types.SimpleNamespace(length=len)
        with pytest.raises(UnsupportedShapeError):
            inject_function(ns, "length", InjectionSpec("x = 1", line=1))

    def test_partial_unsupported(self):
        """Test that callable objects without source are rejected."""
        ns = types.SimpleNamespace(counter=functools.partial(counter))
        with pytest.raises(UnsupportedShapeError):
            inject_function(ns, "counter", InjectionSpec("x = 1", line=1))

    def test_source_unavailable(self):
        """Test functions compiled from strings have no retrievable source."""
        namespace = {}
        exec("def generated():\n    return 1\n", namespace)
        ns = types.SimpleNamespace(generated=namespace["generated"])

        with pytest.raises(UnsupportedShapeError):
            inject_function(ns, "generated", InjectionSpec("pass", line=2))


class TestInjectFailures:
    """Tests for failures and atomicity."""

    def test_bad_code_leaves_member_untouched(self):
        """Test that a parse failure neither mutates nor records."""
        ns = types.SimpleNamespace(counter=counter)
        before = count_injections()

        with pytest.raises(SourceSyntaxError):
            inject_function(ns, "counter", InjectionSpec("x = (", line=2))

        assert ns.counter is counter
        assert count_injections() == before

    def test_syntax_error_is_builtin_syntax_error(self):
        """Test that callers can catch the builtin SyntaxError."""
        ns = types.SimpleNamespace(counter=counter)
        with pytest.raises(SyntaxError):
            inject_function(ns, "counter", InjectionSpec("def", line=2))

    def test_no_inject_denied(self):
        """Test that no_inject blocks injection and leaves the member alone."""

        def guarded():
            value = 1
            return value

        no_inject(guarded)
        ns = types.SimpleNamespace(guarded=guarded)

        with pytest.raises(PermissionDeniedError) as exc_info:
            inject_function(ns, "guarded", InjectionSpec("value = 2", line=2))

        assert exc_info.value.member == "guarded"
        assert "guarded" in str(exc_info.value)
        assert ns.guarded is guarded

    def test_missing_line(self):
        """Test that a None line is a MissingFieldError."""
        ns = types.SimpleNamespace(counter=counter)
        with pytest.raises(MissingFieldError) as exc_info:
            inject_function(ns, "counter", InjectionSpec("x = 2", line=None))
        assert exc_info.value.field_name == "spec.line"

    def test_missing_loc(self):
        """Test that a None loc is a MissingFieldError."""
        ns = types.SimpleNamespace(counter=counter)
        with pytest.raises(MissingFieldError):
            inject_function(ns, "counter", InjectionSpec("x = 2", line=2, loc=None))

    def test_empty_code(self):
        """Test that blank code is a MissingFieldError."""
        ns = types.SimpleNamespace(counter=counter)
        with pytest.raises(MissingFieldError):
            inject_function(ns, "counter", InjectionSpec("   ", line=2))

    def test_missing_spec(self):
        """Test that a None spec is a MissingFieldError."""
        ns = types.SimpleNamespace(counter=counter)
        with pytest.raises(MissingFieldError):
            inject_function(ns, "counter", None)

    @pytest.mark.parametrize("line", [0, -3, 2.5, True])
    def test_invalid_line(self, line):
        """Test that lines must be positive integers."""
        ns = types.SimpleNamespace(counter=counter)
        with pytest.raises(SpecError):
            inject_function(ns, "counter", InjectionSpec("x = 2", line=line))

    def test_invalid_loc(self):
        """Test that unknown locations are rejected."""
        ns = types.SimpleNamespace(counter=counter)
        with pytest.raises(SpecError):
            inject_function(ns, "counter", InjectionSpec("x = 2", line=2, loc="middle"))

    def test_non_callable_member(self):
        """Test that non-callables are an InvalidTargetError."""
        ns = types.SimpleNamespace(counter=3)
        with pytest.raises(InvalidTargetError):
            inject_function(ns, "counter", InjectionSpec("x = 2", line=2))


class TestInjectRecords:
    """Tests for injection records and logging."""

    def test_record_contents(self):
        """Test that the record keeps the original, the spec and the new source."""
        ns = types.SimpleNamespace(counter=counter)
        spec = InjectionSpec("x = x + 1", line=2)
        inject_id = inject_function(ns, "counter", spec)

        record = get_injection(inject_id)
        assert inject_id.startswith("inj_")
        assert record.original is counter
        assert record.spec is spec
        assert record.member == "counter"
        assert "x = x + 1" in record.source

    def test_unknown_id_returns_none(self):
        """Test lookups of unknown ids."""
        assert get_injection("inj_does_not_exist") is None

    def test_injection_logged(self, caplog):
        """Test that a successful injection is logged at INFO."""
        ns = types.SimpleNamespace(counter=counter)
        with caplog.at_level(logging.INFO, logger="hotsplice.inject.engine"):
            inject_id = inject_function(ns, "counter", InjectionSpec("x = 7", line=2))

        assert inject_id in caplog.text
