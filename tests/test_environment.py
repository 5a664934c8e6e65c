"""
Tests for environments and the execution context.
"""

import pytest

from treelox import TokenType, UndefinedVariableError
from treelox.tokens import make_token
from treelox.runtime import Environment, ExecutionContext, NIL, number_val, string_val


def name(text):
    return make_token(TokenType.IDENTIFIER, text)


class TestEnvironment:
    """Test define/get/assign on a scope chain."""

    def test_define_and_get(self):
        env = Environment()
        env.define("x", number_val(1))
        assert env.get(name("x")) == number_val(1)

    def test_define_replaces_binding(self):
        """Redeclaring in the same scope is allowed."""
        env = Environment()
        env.define("x", number_val(1))
        env.define("x", string_val("two"))
        assert env.get(name("x")) == string_val("two")

    def test_get_searches_enclosing(self):
        outer = Environment(name="global")
        outer.define("x", number_val(1))
        inner = Environment(enclosing=outer)
        assert inner.get(name("x")) == number_val(1)

    def test_get_undefined(self):
        env = Environment(enclosing=Environment())
        with pytest.raises(UndefinedVariableError) as exc_info:
            env.get(name("missing"))
        assert exc_info.value.message == "Undefined variable 'missing'."
        assert exc_info.value.token.lexeme == "missing"

    def test_shadowing_leaves_outer_alone(self):
        outer = Environment()
        outer.define("a", string_val("outer"))
        inner = Environment(enclosing=outer)
        inner.define("a", string_val("inner"))
        assert inner.get(name("a")) == string_val("inner")
        assert outer.get(name("a")) == string_val("outer")

    def test_assign_updates_nearest_defining_scope(self):
        outer = Environment()
        outer.define("a", number_val(1))
        inner = Environment(enclosing=outer)
        inner.assign(name("a"), number_val(2))
        assert outer.get(name("a")) == number_val(2)
        assert "a" not in inner.values

    def test_assign_is_visible_through_every_reference(self):
        """Storage is shared, not copied."""
        shared = Environment()
        shared.define("count", number_val(0))
        holder_a = Environment(enclosing=shared)
        holder_b = Environment(enclosing=shared)
        holder_a.assign(name("count"), number_val(5))
        assert holder_b.get(name("count")) == number_val(5)

    def test_assign_undefined_does_not_create(self):
        env = Environment()
        with pytest.raises(UndefinedVariableError):
            env.assign(name("nope"), number_val(1))
        assert not env.contains("nope")

    def test_contains_and_depth(self):
        outer = Environment()
        outer.define("x", NIL)
        inner = Environment(enclosing=Environment(enclosing=outer))
        assert inner.contains("x")
        assert not inner.contains("y")
        assert inner.depth == 3
        assert outer.depth == 1


class TestExecutionContext:
    """Test scope switching and the return signal."""

    def test_starts_at_globals(self):
        ctx = ExecutionContext()
        assert ctx.current_scope is ctx.globals

    def test_new_scope_restores_previous(self):
        ctx = ExecutionContext()
        with ctx.new_scope("block") as scope:
            assert ctx.current_scope is scope
            assert scope.enclosing is ctx.globals
        assert ctx.current_scope is ctx.globals

    def test_new_scope_restores_on_error(self):
        ctx = ExecutionContext()
        with pytest.raises(RuntimeError):
            with ctx.new_scope("block"):
                raise RuntimeError("boom")
        assert ctx.current_scope is ctx.globals

    def test_new_scope_with_explicit_enclosing(self):
        """Function calls enclose the captured scope, not the caller's."""
        ctx = ExecutionContext()
        captured = Environment(name="closure")
        with ctx.new_scope("outer"):
            caller = ctx.current_scope
            with ctx.new_scope("call", enclosing=captured) as scope:
                assert scope.enclosing is captured
            assert ctx.current_scope is caller

    def test_return_signal(self):
        ctx = ExecutionContext()
        assert not ctx.should_return
        ctx.signal_return(number_val(3))
        assert ctx.should_return
        assert ctx.take_return() == number_val(3)
        assert not ctx.should_return

    def test_take_return_without_signal_is_nil(self):
        ctx = ExecutionContext()
        assert ctx.take_return() == NIL

    def test_reset(self):
        ctx = ExecutionContext()
        ctx.current_scope = Environment(enclosing=ctx.globals)
        ctx.signal_return(number_val(1))
        ctx.reset()
        assert ctx.current_scope is ctx.globals
        assert not ctx.should_return
