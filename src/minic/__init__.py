"""
minic - Front End for a Small C-like Teaching Language
======================================================

This package implements the middle of a compiler for minic, a small
statically typed language with C-like syntax: typed variables, functions
with prototypes and definitions, if/while/for, break/continue, and
expressions with arithmetic, relational and logical operators and calls.

Main Components
---------------
- **frontend.scope**: lexical scopes and symbol declaration/lookup
- **frontend.typechecker**: semantic analysis with accumulated diagnostics
- **frontend.irgen**: lowering to three-address code (quads)
- **frontend.compiler**: the driver running the passes in order

Tokenizing and parsing happen outside this package: a parser builds the
tree from minic.frontend.ast (or with minic.frontend.builders) and hands
it over.

Quick Start
-----------
    >>> from minic import compile_program
    >>> from minic.frontend.builders import program, let, while_, binary, assign
    >>> tree = program(
    ...     let("i", 0, "int"),
    ...     while_(binary("<", "i", 10), assign("i", binary("+", "i", 1))),
    ... )
    >>> result = compile_program(tree)
    >>> result.success
    True

Logging
-------
Every module logs through logging.getLogger(__name__) under the "minic"
namespace. The package never configures handlers.
"""

__version__ = "0.1.0"
__author__ = "minic contributors"

from minic.errors import MinicError, InternalCompilerError, SourceLocation
from minic.frontend import (
    FrontendCompiler,
    CompilerOptions,
    CompilationResult,
    compile_program,
    compile_to_ir,
    SemanticError,
    ScopeError,
    TypeCheckError,
    CompilationError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Driver
    "FrontendCompiler",
    "CompilerOptions",
    "CompilationResult",
    "compile_program",
    "compile_to_ir",
    # Exception hierarchy
    "MinicError",
    "InternalCompilerError",
    "SemanticError",
    "ScopeError",
    "TypeCheckError",
    "CompilationError",
    "SourceLocation",
]
