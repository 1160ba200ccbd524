"""
minic Error Hierarchy
=====================

This module defines the root of the exception hierarchy for minic and
the source location type shared by the AST and every diagnostic.
All exceptions inherit from MinicError, allowing callers to catch all
compiler errors with a single except clause if desired.

Exception Hierarchy
-------------------
MinicError (base)
├── SemanticError (frontend.errors) - user mistakes found by analysis
│   ├── ScopeError - resolution and declaration failures
│   └── TypeCheckError - type rule violations
├── CompilationError (frontend.errors) - aggregate multi-error report
└── InternalCompilerError - API misuse or violated pipeline invariant
    ├── NoCurrentScopeError (frontend.errors) - unbalanced scope exit
    └── NestingDepthError (frontend.errors) - tree nested too deeply

Design Philosophy
-----------------
User mistakes are never fatal: they are collected as diagnostics and
analysis continues. Only programmer misuse of the API, or a tree that
violates an invariant the pipeline relies on, raises an
InternalCompilerError out of the core.

Error messages follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class MinicError(Exception):
    """
    Base exception for all minic errors.

    All exceptions in the package inherit from this class, allowing
    callers to catch every compiler error with a single except clause:

        try:
            result = FrontendCompiler().compile_program(program)
        except MinicError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Locations are produced by the external parser and attached to AST
    nodes; this package only threads them through to diagnostics.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Internal Errors
# =============================================================================

class InternalCompilerError(MinicError):
    """
    A compiler bug or a violated pipeline invariant.

    Not for user mistakes (those are collected as diagnostics). Raised
    for things like popping a scope that was never pushed, or lowering a
    'break' that semantic analysis should have rejected.

    Attributes:
        message: The error description
        location: Where in the source the problem was noticed (optional)
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: internal compiler error: {self.message}"
        return f"internal compiler error: {self.message}"
