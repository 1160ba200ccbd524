"""
Front End Error Hierarchy
=========================

This module defines the diagnostics produced by scope resolution and
type checking, the internal errors the front end can raise, and the
collector used to accumulate diagnostics during a pass.

Exception Hierarchy
-------------------
SemanticError (base for user-facing diagnostics)
├── ScopeError - declaration and resolution failures (ScopeErrorKind)
└── TypeCheckError - type rule violations (TypeErrorKind)
CompilationError - aggregate report of collected diagnostics
NoCurrentScopeError - scope stack misuse (internal)
NestingDepthError - tree nested beyond the configured limit (internal)

Accumulation
------------
Semantic errors are raised by the ScopeStack and caught by the
TypeChecker, which files them into one of two DiagnosticCollector
instances and carries on with a fallback type. They never escape the
public analysis entry points.

Error Message Format
--------------------
    hello.mc:5:12: error: undeclared identifier 'cnt'
    hint: declare 'cnt' before using it
"""

from enum import Enum
from typing import Optional, List

from minic.errors import MinicError, InternalCompilerError, SourceLocation


# =============================================================================
# Diagnostic Kinds
# =============================================================================

class ScopeErrorKind(Enum):
    """Failures reported by the scope stack."""
    UNDECLARED_IDENTIFIER = "UndeclaredIdentifier"
    FOUND_BUT_WRONG_KIND = "FoundButWrongKind"
    UNDEFINED_FUNCTION_CALLED = "UndefinedFunctionCalled"
    VARIABLE_REDEFINITION = "VariableRedefinition"
    FUNCTION_PROTOTYPE_REDEFINITION = "FunctionPrototypeRedefinition"
    FUNCTION_REDEFINITION = "FunctionRedefinition"
    FUNCTION_REDEFINITION_AS_PROTOTYPE = "FunctionRedefinitionAsPrototype"
    FUNCTION_SIGNATURE_CONFLICT = "FunctionSignatureConflict"
    VARIABLE_USED_BEFORE_INIT = "VariableUsedBeforeInit"
    NO_CURRENT_SCOPE = "NoCurrentScope"

    def __str__(self) -> str:
        return self.value


class TypeErrorKind(Enum):
    """Failures reported by the type checker."""
    ERRONEOUS_VAR_DECL = "ErroneousVarDecl"
    FN_CALL_PARAM_COUNT = "FnCallParamCount"
    FN_CALL_PARAM_TYPE = "FnCallParamType"
    ERRONEOUS_RETURN_TYPE = "ErroneousReturnType"
    EXPRESSION_TYPE_MISMATCH = "ExpressionTypeMismatch"
    NON_BOOLEAN_COND_STMT = "NonBooleanCondStmt"
    ERRONEOUS_BREAK = "ErroneousBreak"
    ERRONEOUS_CONTINUE = "ErroneousContinue"
    ATTEMPTED_BOOL_OP_ON_NON_BOOLS = "AttemptedBoolOpOnNonBools"
    ATTEMPTED_SHIFT_ON_NON_INT = "AttemptedShiftOnNonInt"
    ATTEMPTED_ADD_OP_ON_NON_NUMERIC = "AttemptedAddOpOnNonNumeric"
    ATTEMPTED_EXPONENTIATION_OF_NON_NUMERIC = "AttemptedExponentiationOfNonNumeric"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Base Semantic Exception
# =============================================================================

class SemanticError(MinicError):
    """
    Base exception for all user-facing semantic diagnostics.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example:
            prog.mc:3:9: error: call to undefined function 'fib'
            hint: only functions with a body can be called
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class CompilationError(SemanticError):
    """
    Aggregate error containing multiple diagnostics.

    The message is already a formatted report from DiagnosticCollector
    and is passed through untouched.
    """

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Scope Errors
# =============================================================================

_SCOPE_MESSAGES = {
    ScopeErrorKind.UNDECLARED_IDENTIFIER: "undeclared identifier '{name}'",
    ScopeErrorKind.FOUND_BUT_WRONG_KIND: "'{name}' does not name a {wanted}",
    ScopeErrorKind.UNDEFINED_FUNCTION_CALLED: "call to undefined function '{name}'",
    ScopeErrorKind.VARIABLE_REDEFINITION: "redefinition of '{name}'",
    ScopeErrorKind.FUNCTION_PROTOTYPE_REDEFINITION: "duplicate prototype for '{name}'",
    ScopeErrorKind.FUNCTION_REDEFINITION: "redefinition of function '{name}'",
    ScopeErrorKind.FUNCTION_REDEFINITION_AS_PROTOTYPE: "prototype for '{name}' after its definition",
    ScopeErrorKind.FUNCTION_SIGNATURE_CONFLICT: "conflicting signatures for '{name}'",
    ScopeErrorKind.VARIABLE_USED_BEFORE_INIT: "'{name}' is used before it is initialized",
    ScopeErrorKind.NO_CURRENT_SCOPE: "no open scope",
}

_SCOPE_HINTS = {
    ScopeErrorKind.UNDECLARED_IDENTIFIER: "declare '{name}' before using it",
    ScopeErrorKind.UNDEFINED_FUNCTION_CALLED: "only functions with a body can be called",
    ScopeErrorKind.FUNCTION_SIGNATURE_CONFLICT: "a definition must repeat the prototype's parameter and return types",
}


class ScopeError(SemanticError):
    """
    A declaration or name resolution failure.

    Raised by ScopeStack operations; the type checker catches it and
    records it in the scope diagnostics list.

    Attributes:
        kind: Which failure this is
        name: The identifier involved
    """

    def __init__(
        self,
        kind: ScopeErrorKind,
        name: str,
        location: Optional[SourceLocation] = None,
        wanted: str = "variable",
    ):
        self.kind = kind
        self.name = name
        message = _SCOPE_MESSAGES[kind].format(name=name, wanted=wanted)
        hint = _SCOPE_HINTS.get(kind)
        super().__init__(
            message,
            location=location,
            hint=hint.format(name=name) if hint else None,
        )


# =============================================================================
# Type Errors
# =============================================================================

class TypeCheckError(SemanticError):
    """
    A violation of the typing rules.

    Attributes:
        kind: Which rule was violated
        expected_type: What the rule required (optional)
        actual_type: What was found (optional)
    """

    def __init__(
        self,
        kind: TypeErrorKind,
        message: str,
        location: Optional[SourceLocation] = None,
        expected_type: Optional[str] = None,
        actual_type: Optional[str] = None,
    ):
        self.kind = kind
        self.expected_type = expected_type
        self.actual_type = actual_type

        hint = None
        if expected_type and actual_type:
            hint = f"expected '{expected_type}', got '{actual_type}'"

        super().__init__(message, location=location, hint=hint)


# =============================================================================
# Internal Errors
# =============================================================================

class NoCurrentScopeError(InternalCompilerError):
    """
    A scope operation was attempted with no open scope.

    This is caller misuse (an exit without a matching enter), not a
    property of the program being compiled.
    """
    kind = ScopeErrorKind.NO_CURRENT_SCOPE

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} with no open scope")


class NestingDepthError(InternalCompilerError):
    """
    The tree is nested more deeply than the configured limit.

    Raised instead of letting the recursive walk hit Python's own
    recursion limit.
    """

    def __init__(self, limit: int, location: Optional[SourceLocation] = None):
        self.limit = limit
        super().__init__(
            f"program nesting exceeds the limit of {limit} levels",
            location=location,
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class DiagnosticCollector:
    """
    Collects diagnostics for batch reporting.

    The checker uses one collector per diagnostic list so that a single
    run reports every problem it can find rather than stopping at the
    first one.

    Example:
        collector = DiagnosticCollector(max_errors=100)

        try:
            scopes.lookup_variable(name)
        except ScopeError as e:
            collector.add(e)

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the collector.

        Args:
            max_errors: Maximum errors to keep; later ones are counted
                        as dropped and summarized by a single warning
        """
        self.errors: List[SemanticError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors
        self.dropped = 0

    def add(self, error: SemanticError) -> None:
        """Add an error to the collection."""
        if self.should_stop():
            if self.dropped == 0:
                self.add_warning(f"too many errors, only the first {self.max_errors} are shown")
            self.dropped += 1
            return
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def kinds(self) -> list:
        """Return the kinds of the collected errors, in order."""
        return [getattr(e, "kind", None) for e in self.errors]

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
        self.dropped = 0

    def raise_if_errors(self) -> None:
        """Raise a CompilationError if any errors were collected."""
        if self.has_errors():
            raise CompilationError(self.report())
