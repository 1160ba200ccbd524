"""
minic Front End Driver
======================

This module provides the main interface to the front end. It runs the
passes over a program tree handed over by a parser:

    Tree → Scope resolution + Type checking → IR generation → Quads

Usage
-----
    >>> from minic.frontend import FrontendCompiler
    >>> result = FrontendCompiler().compile_program(program)
    >>> if result.success:
    ...     print(result.ir_text)
    ... else:
    ...     print(result.report())

Pipeline
--------
1. **Analysis**: every top-level declaration is checked in order inside
   one global scope. Problems are collected, never raised.
2. **IR generation**: the same tree is lowered to quads. By default this
   is skipped when analysis reported errors; set
   CompilerOptions.emit_ir_on_errors to lower anyway (best effort).

Fatal Conditions
----------------
A tree nested beyond CompilerOptions.max_nesting_depth, or an internal
error such as 'break' outside a loop reaching the IR generator, stops the
run. The driver records it as the result's fatal_error instead of
raising.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from minic.errors import InternalCompilerError
from minic.frontend.ast import ProgramNode
from minic.frontend.errors import CompilationError, SemanticError
from minic.frontend.irgen import IRGenerator
from minic.frontend.quad import Quad, render_quads
from minic.frontend.typechecker import TypeChecker

logger = logging.getLogger(__name__)


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class CompilerOptions:
    """
    Front end configuration options.

    Attributes:
        max_nesting_depth: Deepest statement/expression nesting accepted
                           before the run stops with NestingDepthError
        emit_ir_on_errors: Lower the tree even if analysis found errors.
                           The resulting quads are best effort.
        max_errors: Maximum diagnostics kept per list; later ones are
                    dropped with a single warning
        filename: Source name recorded on the result and prefixed to
                  the driver's log records
    """
    max_nesting_depth: int = 200
    emit_ir_on_errors: bool = False
    max_errors: int = 100
    filename: str = "<input>"

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            MINIC_MAX_NESTING_DEPTH: Nesting limit (positive integer)
            MINIC_EMIT_IR_ON_ERRORS: 1/true/yes/on or 0/false/no/off
            MINIC_MAX_ERRORS: Diagnostics cap (positive integer)

        Invalid values are ignored and the default is kept.

        Returns:
            CompilerOptions with values from environment variables
        """
        options = cls()

        if depth := os.environ.get("MINIC_MAX_NESTING_DEPTH"):
            try:
                value = int(depth)
                if value > 0:
                    options.max_nesting_depth = value
            except ValueError:
                pass  # Ignore invalid values

        if emit := os.environ.get("MINIC_EMIT_IR_ON_ERRORS"):
            flag = emit.strip().lower()
            if flag in _TRUE_VALUES:
                options.emit_ir_on_errors = True
            elif flag in _FALSE_VALUES:
                options.emit_ir_on_errors = False

        if max_errors := os.environ.get("MINIC_MAX_ERRORS"):
            try:
                value = int(max_errors)
                if value > 0:
                    options.max_errors = value
            except ValueError:
                pass

        return options


@dataclass
class CompilationResult:
    """
    Result of running the front end.

    Attributes:
        filename: Source name
        success: True if analysis found no errors and IR was produced
        scope_errors: Declaration and resolution diagnostics, in order
        type_errors: Typing diagnostics, in order
        warnings: Warning messages from the diagnostic collectors
        quads: The lowered program (empty if IR generation was skipped)
        ir_emitted: Whether IR generation ran to completion
        fatal_error: The error that stopped the run, if any
    """
    filename: str = ""
    success: bool = False
    scope_errors: list[SemanticError] = field(default_factory=list)
    type_errors: list[SemanticError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    quads: list[Quad] = field(default_factory=list)
    ir_emitted: bool = False
    fatal_error: Optional[InternalCompilerError] = None

    @property
    def errors(self) -> list[SemanticError]:
        """All diagnostics, scope errors first."""
        return self.scope_errors + self.type_errors

    @property
    def has_errors(self) -> bool:
        return bool(self.scope_errors or self.type_errors or self.fatal_error)

    @property
    def ir_text(self) -> str:
        return render_quads(self.quads)

    def report(self) -> str:
        """Format every diagnostic for display."""
        lines = [str(e) for e in self.errors]
        if self.fatal_error is not None:
            lines.append(str(self.fatal_error))
        lines.extend(self.warnings)
        count = len(self.errors) + (1 if self.fatal_error is not None else 0)
        error_word = "error" if count == 1 else "errors"
        lines.append(f"{count} {error_word}")
        return "\n".join(lines)

    def raise_if_errors(self) -> None:
        """Raise a CompilationError if the run reported any problem."""
        if self.has_errors:
            raise CompilationError(self.report())


class FrontendCompiler:
    """
    Runs semantic analysis and IR generation over program trees.

    Example:
        compiler = FrontendCompiler(CompilerOptions(emit_ir_on_errors=True))
        result = compiler.compile_program(program)
        for quad in result.quads:
            print(quad)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Front end configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()

    def compile_program(self, program: ProgramNode) -> CompilationResult:
        """
        Analyze a program and, if allowed, lower it to quads.

        Args:
            program: Root of a structurally valid tree

        Returns:
            CompilationResult with diagnostics and quads
        """
        result = CompilationResult(filename=self.options.filename)

        checker = self._new_checker()
        try:
            checker.analyze_program(program)
        except InternalCompilerError as e:
            logger.warning(f"{self.options.filename}: analysis stopped: {e}")
            result.fatal_error = e
        self._collect(checker, result)

        if result.fatal_error is None and (
            not checker.has_errors() or self.options.emit_ir_on_errors
        ):
            try:
                result.quads = self._new_generator().generate(program)
                result.ir_emitted = True
            except InternalCompilerError as e:
                logger.warning(f"{self.options.filename}: IR generation stopped: {e}")
                result.fatal_error = e

        result.success = result.ir_emitted and not result.has_errors
        logger.info(
            f"{self.options.filename}: {len(result.scope_errors)} scope errors, "
            f"{len(result.type_errors)} type errors, {len(result.quads)} quads"
        )
        return result

    def analyze(self, program: ProgramNode) -> TypeChecker:
        """
        Run semantic analysis only.

        Returns:
            The checker, holding both diagnostic lists

        Raises:
            NestingDepthError: If the tree is nested beyond the limit
        """
        checker = self._new_checker()
        checker.analyze_program(program)
        return checker

    def generate(self, program: ProgramNode) -> list[Quad]:
        """
        Run IR generation only, without checking the program.

        Raises:
            InternalCompilerError: If the tree cannot be lowered
        """
        return self._new_generator().generate(program)

    def _new_checker(self) -> TypeChecker:
        return TypeChecker(
            max_errors=self.options.max_errors,
            max_nesting_depth=self.options.max_nesting_depth,
        )

    def _new_generator(self) -> IRGenerator:
        return IRGenerator(max_nesting_depth=self.options.max_nesting_depth)

    @staticmethod
    def _collect(checker: TypeChecker, result: CompilationResult) -> None:
        result.scope_errors = list(checker.scope_errors.errors)
        result.type_errors = list(checker.type_errors.errors)
        result.warnings = checker.scope_errors.warnings + checker.type_errors.warnings


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_program(
    program: ProgramNode, options: Optional[CompilerOptions] = None
) -> CompilationResult:
    """
    Run the front end over a program tree.

    Args:
        program: Root of a structurally valid tree
        options: Compiler options (uses defaults if None)

    Returns:
        CompilationResult with diagnostics and quads
    """
    return FrontendCompiler(options).compile_program(program)


def compile_to_ir(program: ProgramNode, options: Optional[CompilerOptions] = None) -> str:
    """
    Run the front end and return the IR listing.

    Raises:
        CompilationError: If analysis reported errors or the run stopped
    """
    result = compile_program(program, options)
    result.raise_if_errors()
    return result.ir_text
