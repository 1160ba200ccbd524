"""
Scope Stack Tests
=================

Tests for scope nesting, shadowing, declaration conflicts, function
merging through the stack, and the loop-depth counter.
"""

import pytest

from minic.errors import InternalCompilerError
from minic.frontend.errors import ScopeError, ScopeErrorKind, NoCurrentScopeError
from minic.frontend.scope import ScopeStack
from minic.frontend.types import TYPE_INT, TYPE_FLOAT, TYPE_BOOL


@pytest.fixture
def scopes():
    stack = ScopeStack()
    stack.enter_scope()
    return stack


def error_kind(excinfo):
    return excinfo.value.kind


class TestScopeNesting:
    """Tests for entering and leaving scopes."""

    def test_levels(self):
        """Levels start at 0 and grow by one per nesting step."""
        stack = ScopeStack()
        assert stack.depth == -1
        assert stack.enter_scope().level == 0
        assert stack.enter_scope().level == 1
        assert stack.enter_scope().level == 2
        stack.exit_scope()
        assert stack.depth == 1

    def test_parent_indices(self):
        """Each frame records the index of the frame below it."""
        stack = ScopeStack()
        root = stack.enter_scope()
        inner = stack.enter_scope()
        assert root.parent is None
        assert inner.parent == 0

    def test_symbol_records_scope_level(self, scopes):
        """Symbols remember the level of the scope that owns them."""
        assert scopes.insert_variable("g", TYPE_INT).scope_level == 0
        scopes.enter_scope()
        assert scopes.insert_variable("l", TYPE_INT).scope_level == 1

    def test_inner_names_vanish_on_exit(self, scopes):
        """After a balanced enter/exit pair inner names are undeclared."""
        scopes.enter_scope()
        scopes.insert_variable("y", TYPE_INT, initialized=True)
        scopes.exit_scope()
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_variable("y")
        assert error_kind(excinfo) is ScopeErrorKind.UNDECLARED_IDENTIFIER

    def test_exit_without_scope(self):
        """Exiting with no open scope is an internal error."""
        stack = ScopeStack()
        with pytest.raises(NoCurrentScopeError) as excinfo:
            stack.exit_scope()
        assert excinfo.value.kind is ScopeErrorKind.NO_CURRENT_SCOPE
        assert isinstance(excinfo.value, InternalCompilerError)

    def test_insert_without_scope(self):
        """Declaring with no open scope is an internal error."""
        with pytest.raises(NoCurrentScopeError):
            ScopeStack().insert_variable("x", TYPE_INT)

    def test_outer_names_visible_inside(self, scopes):
        """Lookups walk outward through every enclosing scope."""
        scopes.insert_variable("g", TYPE_BOOL, initialized=True)
        scopes.enter_scope()
        scopes.enter_scope()
        assert scopes.lookup_variable("g").declared_type == TYPE_BOOL


class TestShadowing:
    """Tests for inner bindings hiding outer ones."""

    def test_inner_hides_outer_until_exit(self, scopes):
        """The nearest binding wins, and the outer one returns on exit."""
        scopes.insert_variable("x", TYPE_INT, initialized=True)
        scopes.enter_scope()
        scopes.insert_variable("x", TYPE_FLOAT, initialized=True)
        assert scopes.lookup_variable("x").declared_type == TYPE_FLOAT
        scopes.exit_scope()
        assert scopes.lookup_variable("x").declared_type == TYPE_INT

    def test_variable_hides_function(self, scopes):
        """A nearer variable makes a function name resolve as the wrong kind."""
        scopes.insert_function_definition("f", [], TYPE_INT)
        scopes.enter_scope()
        scopes.insert_variable("f", TYPE_INT, initialized=True)
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_function("f")
        assert error_kind(excinfo) is ScopeErrorKind.FOUND_BUT_WRONG_KIND


class TestVariables:
    """Tests for variable and parameter declarations and lookup."""

    def test_redefinition_in_same_scope(self, scopes):
        """A second declaration fails and the first binding is kept."""
        scopes.insert_variable("x", TYPE_INT, initialized=True)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_variable("x", TYPE_FLOAT, initialized=True)
        assert error_kind(excinfo) is ScopeErrorKind.VARIABLE_REDEFINITION
        assert scopes.lookup_variable("x").declared_type == TYPE_INT

    def test_parameter_then_variable_conflict(self, scopes):
        """Parameters and variables share one namespace per scope."""
        scopes.insert_parameter("a", TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_variable("a", TYPE_INT)
        assert error_kind(excinfo) is ScopeErrorKind.VARIABLE_REDEFINITION

    def test_parameters_are_initialized(self, scopes):
        """A parameter can be read immediately."""
        scopes.insert_parameter("a", TYPE_FLOAT)
        assert scopes.lookup_variable("a").declared_type == TYPE_FLOAT

    def test_use_before_init(self, scopes):
        """Reading an uninitialized variable fails with its own kind."""
        scopes.insert_variable("x", TYPE_INT, initialized=False)
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_variable("x")
        assert error_kind(excinfo) is ScopeErrorKind.VARIABLE_USED_BEFORE_INIT

    def test_assignable_accepts_uninitialized(self, scopes):
        """Assignment targets may be uninitialized; marking makes them readable."""
        scopes.insert_variable("x", TYPE_INT, initialized=False)
        assert scopes.lookup_assignable("x").name == "x"
        scopes.mark_initialized("x")
        assert scopes.lookup_variable("x").initialized

    def test_mutable_flag_is_recorded(self, scopes):
        """The mutable flag is carried on the variable kind."""
        symbol = scopes.insert_variable("k", TYPE_INT, mutable=False, initialized=True)
        assert symbol.kind.mutable is False

    def test_function_found_as_variable(self, scopes):
        """Looking up a function name as a variable is a kind mismatch."""
        scopes.insert_function_definition("f", [], TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_variable("f")
        assert error_kind(excinfo) is ScopeErrorKind.FOUND_BUT_WRONG_KIND

    def test_undeclared(self, scopes):
        """A name bound nowhere is undeclared."""
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_variable("nope")
        assert error_kind(excinfo) is ScopeErrorKind.UNDECLARED_IDENTIFIER


class TestFunctions:
    """Tests for function declarations through the scope stack."""

    def test_prototype_then_definition(self, scopes):
        """A matching definition upgrades the prototype in place."""
        proto = scopes.insert_function_prototype("f", [TYPE_INT], TYPE_INT)
        defined = scopes.insert_function_definition("f", [TYPE_INT], TYPE_INT)
        assert defined is proto
        assert defined.kind.defined
        assert scopes.lookup_function("f") is proto

    def test_second_definition_fails(self, scopes):
        """Defining a function twice is a redefinition."""
        scopes.insert_function_prototype("f", [TYPE_INT], TYPE_INT)
        scopes.insert_function_definition("f", [TYPE_INT], TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_function_definition("f", [TYPE_INT], TYPE_INT)
        assert error_kind(excinfo) is ScopeErrorKind.FUNCTION_REDEFINITION

    def test_duplicate_prototype(self, scopes):
        """Repeating a prototype is rejected."""
        scopes.insert_function_prototype("f", [], TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_function_prototype("f", [], TYPE_INT)
        assert error_kind(excinfo) is ScopeErrorKind.FUNCTION_PROTOTYPE_REDEFINITION

    def test_signature_conflict_keeps_prototype(self, scopes):
        """A mismatching definition is rejected and the prototype stays."""
        scopes.insert_function_prototype("f", [TYPE_INT], TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_function_definition("f", [TYPE_FLOAT], TYPE_INT)
        assert error_kind(excinfo) is ScopeErrorKind.FUNCTION_SIGNATURE_CONFLICT
        assert not scopes.current_scope.get("f").kind.defined

    def test_return_type_is_part_of_signature(self, scopes):
        """Different return types conflict."""
        scopes.insert_function_prototype("f", [], TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_function_definition("f", [], TYPE_FLOAT)
        assert error_kind(excinfo) is ScopeErrorKind.FUNCTION_SIGNATURE_CONFLICT

    def test_prototype_after_definition(self, scopes):
        """A prototype after the definition is rejected."""
        scopes.insert_function_definition("f", [], TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_function_prototype("f", [], TYPE_INT)
        assert error_kind(excinfo) is ScopeErrorKind.FUNCTION_REDEFINITION_AS_PROTOTYPE

    def test_rejected_merges_leave_binding_alone(self, scopes):
        """Failed declarations never replace or modify the existing symbol."""
        original = scopes.insert_function_definition("f", [TYPE_INT], TYPE_INT)
        attempts = [
            lambda: scopes.insert_function_definition("f", [TYPE_INT], TYPE_INT),
            lambda: scopes.insert_function_prototype("f", [TYPE_INT], TYPE_INT),
            lambda: scopes.insert_function_definition("f", [TYPE_BOOL], TYPE_BOOL),
        ]
        for attempt in attempts:
            with pytest.raises(ScopeError):
                attempt()
            assert scopes.current_scope.get("f") is original
            assert original.kind.defined
            assert original.kind.param_types == (TYPE_INT,)

    def test_function_over_variable(self, scopes):
        """Declaring a function over a variable is a variable redefinition."""
        scopes.insert_variable("f", TYPE_INT, initialized=True)
        with pytest.raises(ScopeError) as excinfo:
            scopes.insert_function_definition("f", [], TYPE_INT)
        assert error_kind(excinfo) is ScopeErrorKind.VARIABLE_REDEFINITION

    def test_prototype_only_is_not_callable(self, scopes):
        """Only functions with a body can be called."""
        scopes.insert_function_prototype("f", [], TYPE_INT)
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_function("f")
        assert error_kind(excinfo) is ScopeErrorKind.UNDEFINED_FUNCTION_CALLED

    def test_missing_function(self, scopes):
        """Calling an unbound name reports an undefined function."""
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_function("g")
        assert error_kind(excinfo) is ScopeErrorKind.UNDEFINED_FUNCTION_CALLED

    def test_variable_found_as_function(self, scopes):
        """Calling a variable is a kind mismatch."""
        scopes.insert_variable("v", TYPE_INT, initialized=True)
        with pytest.raises(ScopeError) as excinfo:
            scopes.lookup_function("v")
        assert error_kind(excinfo) is ScopeErrorKind.FOUND_BUT_WRONG_KIND
        assert "does not name a function" in str(excinfo.value)


class TestLoopContext:
    """Tests for the loop-depth counter."""

    def test_counter(self):
        """in_loop follows balanced enter/exit calls."""
        stack = ScopeStack()
        assert not stack.in_loop()
        stack.enter_loop()
        stack.enter_loop()
        stack.exit_loop()
        assert stack.in_loop()
        stack.exit_loop()
        assert not stack.in_loop()

    def test_loop_depth_independent_of_scopes(self, scopes):
        """Entering scopes does not change loop context."""
        scopes.enter_loop()
        scopes.enter_scope()
        scopes.exit_scope()
        assert scopes.in_loop()

    def test_exit_below_zero(self):
        """An unmatched exit_loop is an internal error."""
        with pytest.raises(InternalCompilerError):
            ScopeStack().exit_loop()
