"""
Symbol and Function Merge Tests
===============================

Every cell of the prototype/definition merge table, plus the symbol
kind helpers.
"""

import pytest

from minic.frontend.errors import ScopeErrorKind
from minic.frontend.types import TYPE_INT, TYPE_FLOAT
from minic.frontend.symbols import (
    Symbol,
    Signature,
    VariableKind,
    ParameterKind,
    FunctionKind,
    FunctionState,
    DeclarationKind,
    MergeOutcome,
    function_state,
    merge_function_declaration,
)


PROTO = DeclarationKind.PROTOTYPE
DEF = DeclarationKind.DEFINITION


class TestMergeMatrix:
    """Tests for merge_function_declaration."""

    @pytest.mark.parametrize(
        "state, incoming, same_signature, expected",
        [
            (FunctionState.UNDECLARED, PROTO, False, MergeOutcome.INSERTED),
            (FunctionState.UNDECLARED, PROTO, True, MergeOutcome.INSERTED),
            (FunctionState.UNDECLARED, DEF, False, MergeOutcome.INSERTED),
            (FunctionState.UNDECLARED, DEF, True, MergeOutcome.INSERTED),
            (FunctionState.PROTOTYPE, PROTO, True, MergeOutcome.PROTOTYPE_REDEFINITION),
            (FunctionState.PROTOTYPE, PROTO, False, MergeOutcome.SIGNATURE_CONFLICT),
            (FunctionState.PROTOTYPE, DEF, True, MergeOutcome.UPGRADED),
            (FunctionState.PROTOTYPE, DEF, False, MergeOutcome.SIGNATURE_CONFLICT),
            (FunctionState.DEFINED, DEF, True, MergeOutcome.REDEFINITION),
            (FunctionState.DEFINED, DEF, False, MergeOutcome.REDEFINITION),
            (FunctionState.DEFINED, PROTO, True, MergeOutcome.REDEFINITION_AS_PROTOTYPE),
            (FunctionState.DEFINED, PROTO, False, MergeOutcome.REDEFINITION_AS_PROTOTYPE),
        ],
    )
    def test_cell(self, state, incoming, same_signature, expected):
        """Each (state, incoming, signature) cell has one fixed outcome."""
        assert merge_function_declaration(state, incoming, same_signature) is expected

    def test_only_insert_and_upgrade_are_accepted(self):
        """Rejected outcomes carry an error kind; accepted ones do not."""
        for outcome in MergeOutcome:
            if outcome in (MergeOutcome.INSERTED, MergeOutcome.UPGRADED):
                assert outcome.accepted
                assert outcome.error_kind is None
            else:
                assert not outcome.accepted
                assert isinstance(outcome.error_kind, ScopeErrorKind)

    def test_error_kinds(self):
        """Rejected outcomes map to their scope error kinds."""
        assert MergeOutcome.PROTOTYPE_REDEFINITION.error_kind is (
            ScopeErrorKind.FUNCTION_PROTOTYPE_REDEFINITION
        )
        assert MergeOutcome.SIGNATURE_CONFLICT.error_kind is (
            ScopeErrorKind.FUNCTION_SIGNATURE_CONFLICT
        )
        assert MergeOutcome.REDEFINITION.error_kind is ScopeErrorKind.FUNCTION_REDEFINITION
        assert MergeOutcome.REDEFINITION_AS_PROTOTYPE.error_kind is (
            ScopeErrorKind.FUNCTION_REDEFINITION_AS_PROTOTYPE
        )


class TestFunctionState:
    """Tests for classifying existing bindings."""

    def _function(self, defined):
        sig = Signature((TYPE_INT,), TYPE_INT)
        return Symbol("f", FunctionKind(sig, defined=defined), TYPE_INT)

    def test_absent_is_undeclared(self):
        """No binding means UNDECLARED."""
        assert function_state(None) is FunctionState.UNDECLARED

    def test_prototype_and_defined(self):
        """The defined flag selects PROTOTYPE or DEFINED."""
        assert function_state(self._function(False)) is FunctionState.PROTOTYPE
        assert function_state(self._function(True)) is FunctionState.DEFINED

    def test_variable_is_rejected(self):
        """Variables are not function states."""
        with pytest.raises(TypeError):
            function_state(Symbol("x", VariableKind(), TYPE_INT))


class TestSymbol:
    """Tests for symbol kinds and signatures."""

    def test_kind_predicates(self):
        """Variables and parameters are values; functions are not."""
        var = Symbol("x", VariableKind(mutable=False), TYPE_INT)
        par = Symbol("p", ParameterKind(), TYPE_INT)
        fn = Symbol("f", FunctionKind(Signature((), TYPE_INT)), TYPE_INT)
        assert var.is_value and not var.is_function
        assert par.is_value and not par.is_function
        assert fn.is_function and not fn.is_value

    def test_signature_equality(self):
        """Signatures compare parameter types in order and the return type."""
        assert Signature((TYPE_INT, TYPE_FLOAT), TYPE_INT) == Signature(
            (TYPE_INT, TYPE_FLOAT), TYPE_INT
        )
        assert Signature((TYPE_INT, TYPE_FLOAT), TYPE_INT) != Signature(
            (TYPE_FLOAT, TYPE_INT), TYPE_INT
        )
        assert Signature((TYPE_INT,), TYPE_INT) != Signature((TYPE_INT,), TYPE_FLOAT)

    def test_signature_str(self):
        """Signatures print as (params) -> return."""
        assert str(Signature((TYPE_INT, TYPE_FLOAT), TYPE_INT)) == "(int, float) -> int"

    def test_function_kind_accessors(self):
        """FunctionKind exposes its signature's parts."""
        kind = FunctionKind(Signature((TYPE_FLOAT,), TYPE_INT))
        assert kind.param_types == (TYPE_FLOAT,)
        assert kind.return_type == TYPE_INT
        assert not kind.defined
