"""
Symbols and Function Merging
============================

This module defines what the scope stack stores for each name, and the
rules for combining a function prototype with a later definition.

Symbol Kinds
------------
- VariableKind: a `let` binding or global variable (carries `mutable`)
- ParameterKind: a function parameter
- FunctionKind: a function prototype or definition (carries the
  parameter types, the return type and whether a body has been seen)

Prototype / Definition Merging
------------------------------
A function name moves through three states:

    UNDECLARED --prototype--> PROTOTYPE --definition--> DEFINED
    UNDECLARED --definition-------------------------->  DEFINED

merge_function_declaration() is the total transition function over
(existing state, incoming kind, signatures equal?). Every cell returns an
explicit MergeOutcome; only INSERTED and UPGRADED change the table.

    existing   | incoming    | same sig | outcome
    -----------+-------------+----------+-------------------------------
    UNDECLARED | either      | n/a      | INSERTED
    PROTOTYPE  | prototype   | yes      | PROTOTYPE_REDEFINITION
    PROTOTYPE  | either      | no       | SIGNATURE_CONFLICT
    PROTOTYPE  | definition  | yes      | UPGRADED
    DEFINED    | definition  | any      | REDEFINITION
    DEFINED    | prototype   | any      | REDEFINITION_AS_PROTOTYPE
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from minic.frontend.types import LangType
from minic.frontend.errors import ScopeErrorKind


# =============================================================================
# Symbol Kinds
# =============================================================================

@dataclass(frozen=True)
class Signature:
    """
    A function's parameter and return types.

    Two signatures are equal when their parameter types are pairwise
    equal (in order) and their return types are equal.
    """
    param_types: tuple[LangType, ...]
    return_type: LangType

    def __str__(self) -> str:
        params = ", ".join(str(t) for t in self.param_types)
        return f"({params}) -> {self.return_type}"


@dataclass
class VariableKind:
    """A variable binding."""
    mutable: bool = True


@dataclass
class ParameterKind:
    """A function parameter binding."""
    pass


@dataclass
class FunctionKind:
    """
    A function binding.

    Attributes:
        signature: Parameter and return types
        defined: False for a prototype, True once a body has been seen
    """
    signature: Signature
    defined: bool = False

    @property
    def param_types(self) -> tuple[LangType, ...]:
        return self.signature.param_types

    @property
    def return_type(self) -> LangType:
        return self.signature.return_type


SymbolKind = Union[VariableKind, ParameterKind, FunctionKind]


@dataclass
class Symbol:
    """
    One named binding in a scope.

    Attributes:
        name: The identifier
        kind: Variable, parameter or function details
        declared_type: The binding's type (return type for functions)
        scope_level: Level of the owning scope (0 = global)
        initialized: Whether a value has been assigned
    """
    name: str
    kind: SymbolKind
    declared_type: Optional[LangType] = None
    scope_level: int = 0
    initialized: bool = False

    @property
    def is_function(self) -> bool:
        return isinstance(self.kind, FunctionKind)

    @property
    def is_value(self) -> bool:
        """True for variables and parameters."""
        return isinstance(self.kind, (VariableKind, ParameterKind))


# =============================================================================
# Function Merge State Machine
# =============================================================================

class FunctionState(Enum):
    """State of a function name in one scope."""
    UNDECLARED = auto()
    PROTOTYPE = auto()
    DEFINED = auto()


class DeclarationKind(Enum):
    """What an incoming function declaration is."""
    PROTOTYPE = auto()
    DEFINITION = auto()


class MergeOutcome(Enum):
    """Result of merging an incoming function declaration."""
    INSERTED = auto()
    UPGRADED = auto()
    PROTOTYPE_REDEFINITION = auto()
    SIGNATURE_CONFLICT = auto()
    REDEFINITION = auto()
    REDEFINITION_AS_PROTOTYPE = auto()

    @property
    def accepted(self) -> bool:
        """True if the table should be updated."""
        return self in (MergeOutcome.INSERTED, MergeOutcome.UPGRADED)

    @property
    def error_kind(self) -> Optional[ScopeErrorKind]:
        """The scope error for a rejected merge, None if accepted."""
        return _OUTCOME_ERRORS.get(self)


_OUTCOME_ERRORS = {
    MergeOutcome.PROTOTYPE_REDEFINITION: ScopeErrorKind.FUNCTION_PROTOTYPE_REDEFINITION,
    MergeOutcome.SIGNATURE_CONFLICT: ScopeErrorKind.FUNCTION_SIGNATURE_CONFLICT,
    MergeOutcome.REDEFINITION: ScopeErrorKind.FUNCTION_REDEFINITION,
    MergeOutcome.REDEFINITION_AS_PROTOTYPE: ScopeErrorKind.FUNCTION_REDEFINITION_AS_PROTOTYPE,
}


def function_state(symbol: Optional[Symbol]) -> FunctionState:
    """
    Classify an existing binding for merging.

    Args:
        symbol: The binding currently in the scope, or None

    Returns:
        The function state of that binding

    Raises:
        TypeError: If the binding is not a function (callers must
                   handle variable/parameter clashes first)
    """
    if symbol is None:
        return FunctionState.UNDECLARED
    if not isinstance(symbol.kind, FunctionKind):
        raise TypeError(f"'{symbol.name}' is not a function binding")
    return FunctionState.DEFINED if symbol.kind.defined else FunctionState.PROTOTYPE


def merge_function_declaration(
    state: FunctionState,
    incoming: DeclarationKind,
    same_signature: bool,
) -> MergeOutcome:
    """
    Decide what happens when a function declaration meets an existing one.

    Args:
        state: State of the existing binding
        incoming: Whether the new declaration is a prototype or definition
        same_signature: Whether the signatures are equal (ignored when
                        the name is undeclared or already defined)

    Returns:
        The merge outcome (see the module docstring for the full table)
    """
    if state is FunctionState.UNDECLARED:
        return MergeOutcome.INSERTED

    if state is FunctionState.PROTOTYPE:
        if not same_signature:
            return MergeOutcome.SIGNATURE_CONFLICT
        if incoming is DeclarationKind.PROTOTYPE:
            return MergeOutcome.PROTOTYPE_REDEFINITION
        return MergeOutcome.UPGRADED

    # DEFINED
    if incoming is DeclarationKind.DEFINITION:
        return MergeOutcome.REDEFINITION
    return MergeOutcome.REDEFINITION_AS_PROTOTYPE
