"""
Scope Stack
===========

This module implements lexical scoping for the front end: the chain of
nested scopes, the declare/lookup protocol, and the loop-depth counter
that decides whether 'break' and 'continue' are legal.

Scope Chain
-----------
Scopes are kept as an owned list of frames. Each frame records the index
of its parent frame (None for the global scope) and its level (parent's
level + 1, global is 0). Entering a scope appends a frame whose parent is
the current frame; exiting discards the current frame. Since scope
lifetimes are strictly nested, no frame ever outlives the one below it.

Lookup
------
Lookups walk from the current frame outward along the parent indices and
stop at the first frame that binds the name. That nearest binding alone
decides the result:

    lookup_variable:  variable/parameter -> ok (must be initialized)
                      function           -> FoundButWrongKind
    lookup_function:  defined function   -> ok
                      prototype          -> UndefinedFunctionCalled
                      variable/parameter -> FoundButWrongKind
    either, unbound anywhere             -> UndeclaredIdentifier /
                                            UndefinedFunctionCalled

Failures are raised as ScopeError; the caller decides whether to collect
or propagate them.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from minic.errors import InternalCompilerError, SourceLocation
from minic.frontend.types import LangType
from minic.frontend.errors import ScopeError, ScopeErrorKind, NoCurrentScopeError
from minic.frontend.symbols import (
    Symbol,
    VariableKind,
    ParameterKind,
    FunctionKind,
    Signature,
    DeclarationKind,
    MergeOutcome,
    function_state,
    merge_function_declaration,
)

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """
    One lexical scope.

    Attributes:
        symbols: Bindings declared directly in this scope
        parent: Index of the enclosing scope's frame (None for global)
        level: Nesting level (global scope is 0)
    """
    symbols: dict[str, Symbol] = field(default_factory=dict)
    parent: Optional[int] = None
    level: int = 0

    def get(self, name: str) -> Optional[Symbol]:
        return self.symbols.get(name)


class ScopeStack:
    """
    Nested lexical scopes plus a loop-depth counter.

    Example:
        scopes = ScopeStack()
        scopes.enter_scope()
        scopes.insert_variable("x", TYPE_INT, mutable=True, initialized=True)
        scopes.enter_scope()
        scopes.insert_variable("x", TYPE_FLOAT, mutable=True, initialized=True)
        scopes.lookup_variable("x").declared_type   # float (shadowing)
        scopes.exit_scope()
        scopes.lookup_variable("x").declared_type   # int
    """

    def __init__(self):
        self._frames: list[Scope] = []
        self._loop_depth = 0

    # =========================================================================
    # Scope Management
    # =========================================================================

    def enter_scope(self) -> Scope:
        """Open a new innermost scope and return it."""
        if self._frames:
            parent = len(self._frames) - 1
            level = self._frames[parent].level + 1
        else:
            parent = None
            level = 0
        scope = Scope(parent=parent, level=level)
        self._frames.append(scope)
        logger.debug(f"enter scope level {level}")
        return scope

    def exit_scope(self) -> None:
        """
        Discard the innermost scope and every symbol it owns.

        Raises:
            NoCurrentScopeError: If no scope is open
        """
        if not self._frames:
            raise NoCurrentScopeError("exit_scope")
        scope = self._frames.pop()
        logger.debug(f"exit scope level {scope.level} ({len(scope.symbols)} symbols)")

    @property
    def current_scope(self) -> Scope:
        """
        The innermost open scope.

        Raises:
            NoCurrentScopeError: If no scope is open
        """
        if not self._frames:
            raise NoCurrentScopeError("current_scope")
        return self._frames[-1]

    @property
    def depth(self) -> int:
        """Level of the innermost scope, -1 when none is open."""
        if not self._frames:
            return -1
        return self._frames[-1].level

    # =========================================================================
    # Loop Context
    # =========================================================================

    def enter_loop(self) -> None:
        self._loop_depth += 1

    def exit_loop(self) -> None:
        if self._loop_depth == 0:
            raise InternalCompilerError("exit_loop without a matching enter_loop")
        self._loop_depth -= 1

    def in_loop(self) -> bool:
        """Return True if 'break' and 'continue' are currently legal."""
        return self._loop_depth > 0

    # =========================================================================
    # Declarations
    # =========================================================================

    def insert_variable(
        self,
        name: str,
        var_type: Optional[LangType],
        mutable: bool = True,
        initialized: bool = False,
        location: Optional[SourceLocation] = None,
    ) -> Symbol:
        """
        Declare a variable in the current scope.

        Args:
            name: Variable name
            var_type: Declared type (None if not known)
            mutable: Whether the binding may be reassigned
            initialized: Whether it was given a value at declaration
            location: Declaration site, for diagnostics

        Returns:
            The new symbol

        Raises:
            ScopeError: VariableRedefinition if the name is already bound
                        in the current scope (the existing binding is kept)
        """
        return self._insert_value(
            name, VariableKind(mutable=mutable), var_type, initialized, location
        )

    def insert_parameter(
        self,
        name: str,
        param_type: LangType,
        location: Optional[SourceLocation] = None,
    ) -> Symbol:
        """Declare an (always initialized) function parameter."""
        return self._insert_value(name, ParameterKind(), param_type, True, location)

    def _insert_value(self, name, kind, declared_type, initialized, location) -> Symbol:
        scope = self.current_scope
        if name in scope.symbols:
            raise ScopeError(ScopeErrorKind.VARIABLE_REDEFINITION, name, location)
        symbol = Symbol(
            name=name,
            kind=kind,
            declared_type=declared_type,
            scope_level=scope.level,
            initialized=initialized,
        )
        scope.symbols[name] = symbol
        logger.debug(f"declare {type(kind).__name__} '{name}': {declared_type} at level {scope.level}")
        return symbol

    def insert_function_prototype(
        self,
        name: str,
        param_types: Sequence[LangType],
        return_type: LangType,
        location: Optional[SourceLocation] = None,
    ) -> Symbol:
        """Declare a function signature without a body. See _insert_function."""
        return self._insert_function(
            name, param_types, return_type, DeclarationKind.PROTOTYPE, location
        )

    def insert_function_definition(
        self,
        name: str,
        param_types: Sequence[LangType],
        return_type: LangType,
        location: Optional[SourceLocation] = None,
    ) -> Symbol:
        """Declare a function with a body. See _insert_function."""
        return self._insert_function(
            name, param_types, return_type, DeclarationKind.DEFINITION, location
        )

    def _insert_function(
        self,
        name: str,
        param_types: Sequence[LangType],
        return_type: LangType,
        incoming: DeclarationKind,
        location: Optional[SourceLocation],
    ) -> Symbol:
        """
        Merge a function declaration into the current scope.

        A matching definition after a prototype upgrades the prototype's
        binding in place; every other clash is rejected and leaves the
        existing binding untouched.

        Returns:
            The inserted or upgraded symbol

        Raises:
            ScopeError: VariableRedefinition if the name is bound to a
                        variable or parameter, otherwise the error kind of
                        the rejected merge outcome
        """
        scope = self.current_scope
        existing = scope.get(name)
        if existing is not None and not existing.is_function:
            raise ScopeError(ScopeErrorKind.VARIABLE_REDEFINITION, name, location)

        signature = Signature(tuple(param_types), return_type)
        same_signature = existing is not None and existing.kind.signature == signature
        outcome = merge_function_declaration(function_state(existing), incoming, same_signature)
        logger.debug(f"function '{name}' {incoming.name.lower()}: {outcome.name}")

        if not outcome.accepted:
            raise ScopeError(outcome.error_kind, name, location)

        if outcome is MergeOutcome.UPGRADED:
            existing.kind.defined = True
            return existing

        symbol = Symbol(
            name=name,
            kind=FunctionKind(signature, defined=incoming is DeclarationKind.DEFINITION),
            declared_type=return_type,
            scope_level=scope.level,
            initialized=True,
        )
        scope.symbols[name] = symbol
        return symbol

    # =========================================================================
    # Lookup
    # =========================================================================

    def _resolve(self, name: str) -> Optional[Symbol]:
        """Return the nearest binding of name, walking outward."""
        index = len(self._frames) - 1 if self._frames else None
        while index is not None:
            scope = self._frames[index]
            symbol = scope.get(name)
            if symbol is not None:
                return symbol
            index = scope.parent
        return None

    def lookup_assignable(
        self, name: str, location: Optional[SourceLocation] = None
    ) -> Symbol:
        """
        Resolve a variable or parameter, initialized or not.

        Used for assignment targets, which may legally be uninitialized.

        Raises:
            ScopeError: FoundButWrongKind if the nearest binding is a
                        function, UndeclaredIdentifier if there is none
        """
        symbol = self._resolve(name)
        if symbol is None:
            raise ScopeError(ScopeErrorKind.UNDECLARED_IDENTIFIER, name, location)
        if not symbol.is_value:
            raise ScopeError(
                ScopeErrorKind.FOUND_BUT_WRONG_KIND, name, location, wanted="variable"
            )
        return symbol

    def lookup_variable(
        self, name: str, location: Optional[SourceLocation] = None
    ) -> Symbol:
        """
        Resolve a variable or parameter whose value is being read.

        Raises:
            ScopeError: VariableUsedBeforeInit if the binding has no value
                        yet, plus the failures of lookup_assignable
        """
        symbol = self.lookup_assignable(name, location)
        if not symbol.initialized:
            raise ScopeError(ScopeErrorKind.VARIABLE_USED_BEFORE_INIT, name, location)
        return symbol

    def mark_initialized(self, name: str) -> None:
        """Record that the nearest binding of name now holds a value."""
        symbol = self._resolve(name)
        if symbol is not None and symbol.is_value:
            symbol.initialized = True

    def lookup_function(
        self, name: str, location: Optional[SourceLocation] = None
    ) -> Symbol:
        """
        Resolve a callable function.

        Only functions that have a body can be called; a prototype alone
        is treated the same as no declaration at all.

        Raises:
            ScopeError: UndefinedFunctionCalled if the nearest binding is a
                        prototype or nothing binds the name,
                        FoundButWrongKind if it is a variable or parameter
        """
        symbol = self._resolve(name)
        if symbol is None:
            raise ScopeError(ScopeErrorKind.UNDEFINED_FUNCTION_CALLED, name, location)
        if not symbol.is_function:
            raise ScopeError(
                ScopeErrorKind.FOUND_BUT_WRONG_KIND, name, location, wanted="function"
            )
        if not symbol.kind.defined:
            raise ScopeError(ScopeErrorKind.UNDEFINED_FUNCTION_CALLED, name, location)
        return symbol
