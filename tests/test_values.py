"""
Tests for runtime values, display formatting and builtins.
"""

import math
import pytest

from treelox.runtime import (
    Value, ValueKind, NIL, TRUE, FALSE,
    number_val, string_val, bool_val, function_val, wrap_value,
    format_number, stringify,
    BuiltinFunction, get_builtin_registry,
)


class TestTruthiness:
    """Only false and nil are falsy."""

    @pytest.mark.parametrize("value,expected", [
        (NIL, False),
        (FALSE, False),
        (TRUE, True),
        (number_val(0), True),
        (string_val(""), True),
        (number_val(-1.5), True),
    ])
    def test_is_truthy(self, value, expected):
        assert value.is_truthy() is expected


class TestEquality:
    """Equality is structural within a kind."""

    def test_same_kind(self):
        assert number_val(1) == number_val(1.0)
        assert string_val("a") == string_val("a")
        assert NIL == Value(None, ValueKind.NIL)
        assert number_val(1) != number_val(2)

    def test_different_kinds_never_equal(self):
        assert number_val(1) != TRUE
        assert number_val(0) != FALSE
        assert string_val("1") != number_val(1)
        assert NIL != FALSE

    def test_nan_not_equal_to_itself(self):
        nan = number_val(math.nan)
        assert nan != nan

    def test_functions_compare_by_identity(self):
        clock = get_builtin_registry().get_function("clock")
        other = BuiltinFunction("clock", 0, lambda: NIL)
        assert function_val(clock) == function_val(clock)
        assert function_val(clock) != function_val(other)

    def test_hashable(self):
        assert len({number_val(1), number_val(1), string_val("1")}) == 2


class TestConstructors:
    """Test value constructors."""

    def test_number_is_float(self):
        v = number_val(3)
        assert v.data == 3.0
        assert isinstance(v.data, float)
        assert v.is_number

    def test_bool_val_reuses_constants(self):
        assert bool_val(True) is TRUE
        assert bool_val(False) is FALSE

    @pytest.mark.parametrize("raw,kind", [
        (None, ValueKind.NIL),
        (True, ValueKind.BOOLEAN),
        (2, ValueKind.NUMBER),
        (2.5, ValueKind.NUMBER),
        ("s", ValueKind.STRING),
    ])
    def test_wrap_value(self, raw, kind):
        assert wrap_value(raw).kind == kind

    def test_wrap_unsupported(self):
        with pytest.raises(ValueError):
            wrap_value([1, 2])


class TestDisplay:
    """Test the display form used by print."""

    @pytest.mark.parametrize("n,text", [
        (3.0, "3"),
        (2.5, "2.5"),
        (-7.0, "-7"),
        (0.1, "0.1"),
        (1e21, "1000000000000000000000"),
        (1e16, "10000000000000000"),
        (0.00001, "0.00001"),
        (123456.75, "123456.75"),
        (math.inf, "inf"),
        (-math.inf, "-inf"),
        (math.nan, "NaN"),
    ])
    def test_format_number(self, n, text):
        assert format_number(n) == text

    def test_stringify(self):
        assert stringify(string_val("hi there")) == "hi there"
        assert stringify(TRUE) == "true"
        assert stringify(FALSE) == "false"
        assert stringify(NIL) == "nil"
        assert stringify(number_val(10)) == "10"

    def test_native_function_display(self):
        clock = get_builtin_registry().get_function("clock")
        assert stringify(function_val(clock)) == "<native fn>"


class TestBuiltins:
    """Test the builtin registry."""

    def test_clock_registered(self):
        registry = get_builtin_registry()
        assert "clock" in registry.names()
        clock = registry.get_function("clock")
        assert clock.arity == 0

    def test_clock_returns_number(self):
        clock = get_builtin_registry().get_function("clock")
        result = clock.call(None, [])
        assert result.is_number
        assert result.data > 0

    def test_as_values(self):
        values = get_builtin_registry().as_values()
        assert values["clock"].kind == ValueKind.FUNCTION

    def test_unknown_function(self):
        assert get_builtin_registry().get_function("nope") is None
