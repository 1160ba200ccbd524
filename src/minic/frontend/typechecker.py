"""
minic Type Checker
==================

This module implements semantic analysis: it walks a program tree,
resolves every name through a ScopeStack, computes the type of every
expression and validates the typing rules.

The checker never stops at the first problem. Each failure is filed into
one of two diagnostic lists (scope errors and type errors) and the failed
expression is given the UNKNOWN type, which matches anything, so sibling
and parent nodes are still checked without a cascade of follow-on errors.

Typing Rules
------------
    literal                 -> int / float / bool / string
    name                    -> declared type of the binding
    -x                      -> x numeric, same type
    !x                      -> x bool, bool
    a + - * / % b, a ^ b    -> both numeric, float if either is float
    a && || b               -> both bool, bool
    a << >> b               -> both int, int
    a == != < > <= >= b     -> types match, bool
    name = value            -> types match, type of name
    f(args)                 -> arity and argument types match, return type

Scopes
------
The whole program is analyzed inside one global scope. Blocks and for
loops open a scope; a function opens one scope for its parameters and its
body block opens a nested one.

Usage:
    checker = TypeChecker()
    if not checker.analyze_program(program):
        print(checker.report())
"""

import logging
from typing import Optional

from minic.errors import InternalCompilerError, SourceLocation
from minic.frontend.types import (
    LangType,
    TYPE_INT,
    TYPE_FLOAT,
    TYPE_BOOL,
    TYPE_STRING,
    TYPE_VOID,
    TYPE_UNKNOWN,
    promote_numeric,
)
from minic.frontend.errors import (
    DiagnosticCollector,
    NestingDepthError,
    ScopeError,
    TypeCheckError,
    TypeErrorKind,
)
from minic.frontend.scope import ScopeStack
from minic.frontend.ast import (
    ASTNode,
    BinaryExpression,
    BinaryOperator,
    BlockStatement,
    BreakStatement,
    CallExpression,
    ContinueStatement,
    Expression,
    ExpressionStatement,
    ForStatement,
    FunctionNode,
    GlobalVariable,
    GroupingExpression,
    IdentifierExpression,
    IfStatement,
    LetStatement,
    ProgramNode,
    ReturnStatement,
    UnaryExpression,
    UnaryOperator,
    WhileStatement,
    strip_grouping,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_NESTING_DEPTH = 200

_LITERAL_TYPES = {
    "IntLiteral": TYPE_INT,
    "FloatLiteral": TYPE_FLOAT,
    "BoolLiteral": TYPE_BOOL,
    "StringLiteral": TYPE_STRING,
}


class TypeChecker:
    """
    Scope resolution and type checking over a program tree.

    Attributes:
        scopes: The scope stack names are declared in and resolved against.
                analyze_program replaces it with a fresh stack; direct
                visit_expr and check_statement calls use it as it stands.
        scope_errors: Declaration and resolution failures, in order
        type_errors: Typing rule violations, in order
        max_nesting_depth: Deepest statement/expression nesting accepted
    """

    def __init__(
        self,
        max_errors: int = 100,
        max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH,
    ):
        self.scopes = ScopeStack()
        self.scope_errors = DiagnosticCollector(max_errors)
        self.type_errors = DiagnosticCollector(max_errors)
        self.max_nesting_depth = max_nesting_depth

        # Return types of the enclosing functions, innermost last
        self._return_types: list[LangType] = []
        self._depth = 0

    # =========================================================================
    # Entry Points
    # =========================================================================

    def analyze_program(self, program: ProgramNode) -> bool:
        """
        Analyze a whole program in a fresh global scope.

        Previous diagnostics and bindings are discarded first.

        Args:
            program: The program tree

        Returns:
            True if no scope or type errors were found

        Raises:
            NestingDepthError: If the tree is nested beyond the limit
        """
        self.scopes = ScopeStack()
        self.scope_errors.clear()
        self.type_errors.clear()
        self._return_types = []
        self._depth = 0

        logger.debug(f"analyzing {len(program.declarations)} top-level declarations")

        self.scopes.enter_scope()
        for decl in program.declarations:
            self.check_statement(decl)
        self.scopes.exit_scope()

        logger.debug(
            f"analysis finished: {self.scope_errors.error_count()} scope errors, "
            f"{self.type_errors.error_count()} type errors"
        )
        return not self.has_errors()

    def has_errors(self) -> bool:
        return self.scope_errors.has_errors() or self.type_errors.has_errors()

    def report(self) -> str:
        """Format both diagnostic lists, scope errors first."""
        sections = []
        if self.scope_errors.has_errors():
            sections.append(self.scope_errors.report())
        if self.type_errors.has_errors():
            sections.append(self.type_errors.report())
        return "\n\n".join(sections)

    def _enter(self, node: ASTNode) -> None:
        self._depth += 1
        if self._depth > self.max_nesting_depth:
            raise NestingDepthError(self.max_nesting_depth, node.location)

    def _type_error(
        self,
        kind: TypeErrorKind,
        message: str,
        location: Optional[SourceLocation],
        expected: Optional[LangType] = None,
        actual: Optional[LangType] = None,
    ) -> None:
        self.type_errors.add(
            TypeCheckError(
                kind,
                message,
                location=location,
                expected_type=str(expected) if expected else None,
                actual_type=str(actual) if actual else None,
            )
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_expr(self, expr: Expression) -> LangType:
        """
        Compute the type of an expression.

        The result is also stored on the node as resolved_type. Failures
        are recorded and yield TYPE_UNKNOWN.
        """
        try:
            self._enter(expr)
            name = type(expr).__name__
            if name in _LITERAL_TYPES:
                result = _LITERAL_TYPES[name]
            else:
                checker = getattr(self, f"_check_{name}", None)
                if checker is None:
                    raise InternalCompilerError(
                        f"unsupported expression node {name}", expr.location
                    )
                result = checker(expr)
        finally:
            self._depth -= 1

        expr.resolved_type = result
        return result

    def _check_IdentifierExpression(self, expr: IdentifierExpression) -> LangType:
        try:
            symbol = self.scopes.lookup_variable(expr.name, expr.location)
        except ScopeError as e:
            self.scope_errors.add(e)
            self._type_error(
                TypeErrorKind.ERRONEOUS_VAR_DECL,
                f"cannot determine the type of '{expr.name}'",
                expr.location,
            )
            return TYPE_UNKNOWN
        return symbol.declared_type or TYPE_UNKNOWN

    def _check_GroupingExpression(self, expr: GroupingExpression) -> LangType:
        return self.visit_expr(expr.expression)

    def _check_UnaryExpression(self, expr: UnaryExpression) -> LangType:
        operand = self.visit_expr(expr.operand)
        if operand.is_unknown:
            return TYPE_UNKNOWN

        if expr.operator == UnaryOperator.NEGATE:
            if operand.is_numeric:
                return operand
            self._type_error(
                TypeErrorKind.ATTEMPTED_ADD_OP_ON_NON_NUMERIC,
                f"cannot negate a value of type '{operand}'",
                expr.location,
            )
            return TYPE_UNKNOWN

        if operand == TYPE_BOOL:
            return TYPE_BOOL
        self._type_error(
            TypeErrorKind.ATTEMPTED_BOOL_OP_ON_NON_BOOLS,
            f"operator '!' requires a bool operand, got '{operand}'",
            expr.location,
            expected=TYPE_BOOL,
            actual=operand,
        )
        return TYPE_UNKNOWN

    def _check_BinaryExpression(self, expr: BinaryExpression) -> LangType:
        op = expr.operator
        if op == BinaryOperator.ASSIGN:
            return self._check_assignment(expr)

        left = self.visit_expr(expr.left)
        right = self.visit_expr(expr.right)

        if op.is_comparison:
            if not left.matches(right):
                self._type_error(
                    TypeErrorKind.EXPRESSION_TYPE_MISMATCH,
                    f"cannot compare '{left}' with '{right}'",
                    expr.location,
                    expected=left,
                    actual=right,
                )
            return TYPE_BOOL

        if left.is_unknown or right.is_unknown:
            return TYPE_UNKNOWN

        if op.is_arithmetic or op == BinaryOperator.POWER:
            if left.is_numeric and right.is_numeric:
                return promote_numeric(left, right)
            kind = (
                TypeErrorKind.ATTEMPTED_EXPONENTIATION_OF_NON_NUMERIC
                if op == BinaryOperator.POWER
                else TypeErrorKind.ATTEMPTED_ADD_OP_ON_NON_NUMERIC
            )
            self._type_error(
                kind,
                f"operator '{op.value}' requires numeric operands, got '{left}' and '{right}'",
                expr.location,
            )
            return TYPE_UNKNOWN

        if op.is_logical:
            if left == TYPE_BOOL and right == TYPE_BOOL:
                return TYPE_BOOL
            self._type_error(
                TypeErrorKind.ATTEMPTED_BOOL_OP_ON_NON_BOOLS,
                f"operator '{op.value}' requires bool operands, got '{left}' and '{right}'",
                expr.location,
            )
            return TYPE_UNKNOWN

        if op.is_shift:
            if left == TYPE_INT and right == TYPE_INT:
                return TYPE_INT
            self._type_error(
                TypeErrorKind.ATTEMPTED_SHIFT_ON_NON_INT,
                f"operator '{op.value}' requires int operands, got '{left}' and '{right}'",
                expr.location,
            )
            return TYPE_UNKNOWN

        raise InternalCompilerError(f"unhandled binary operator {op}", expr.location)

    def _check_assignment(self, expr: BinaryExpression) -> LangType:
        """
        Check `name = value`.

        The target may be uninitialized; it is marked initialized once the
        value has been checked, so `x = x + 1` still reports a read of an
        uninitialized x. Parentheses around the target name are allowed.
        """
        target = strip_grouping(expr.left)
        if not isinstance(target, IdentifierExpression):
            self.visit_expr(expr.left)
            self.visit_expr(expr.right)
            self._type_error(
                TypeErrorKind.ERRONEOUS_VAR_DECL,
                "left side of an assignment must be a variable name",
                expr.left.location or expr.location,
            )
            return TYPE_UNKNOWN

        try:
            symbol = self.scopes.lookup_assignable(target.name, target.location)
            target_type = symbol.declared_type or TYPE_UNKNOWN
        except ScopeError as e:
            self.scope_errors.add(e)
            self._type_error(
                TypeErrorKind.ERRONEOUS_VAR_DECL,
                f"cannot assign to '{target.name}'",
                target.location,
            )
            symbol = None
            target_type = TYPE_UNKNOWN

        grouped = expr.left
        while isinstance(grouped, GroupingExpression):
            grouped.resolved_type = target_type
            grouped = grouped.expression
        target.resolved_type = target_type

        value_type = self.visit_expr(expr.right)
        if not target_type.matches(value_type):
            self._type_error(
                TypeErrorKind.EXPRESSION_TYPE_MISMATCH,
                f"cannot assign a value of type '{value_type}' to '{target.name}'",
                expr.location,
                expected=target_type,
                actual=value_type,
            )

        if symbol is not None:
            self.scopes.mark_initialized(target.name)
        return target_type

    def _check_CallExpression(self, expr: CallExpression) -> LangType:
        name = expr.function_name
        if name is None:
            self.visit_expr(expr.callee)
            for arg in expr.arguments:
                self.visit_expr(arg)
            self._type_error(
                TypeErrorKind.EXPRESSION_TYPE_MISMATCH,
                "called expression is not a function name",
                expr.callee.location or expr.location,
            )
            return TYPE_UNKNOWN

        try:
            symbol = self.scopes.lookup_function(name, expr.location)
        except ScopeError as e:
            self.scope_errors.add(e)
            symbol = None

        arg_types = [self.visit_expr(arg) for arg in expr.arguments]
        if symbol is None:
            return TYPE_UNKNOWN

        param_types = symbol.kind.param_types
        if len(arg_types) != len(param_types):
            self._type_error(
                TypeErrorKind.FN_CALL_PARAM_COUNT,
                f"'{name}' takes {len(param_types)} arguments but {len(arg_types)} were given",
                expr.location,
            )
        else:
            for index, (arg, expected) in enumerate(zip(arg_types, param_types), 1):
                if not arg.matches(expected):
                    self._type_error(
                        TypeErrorKind.FN_CALL_PARAM_TYPE,
                        f"argument {index} of '{name}' has the wrong type",
                        expr.arguments[index - 1].location or expr.location,
                        expected=expected,
                        actual=arg,
                    )

        return symbol.kind.return_type

    # =========================================================================
    # Statements and Declarations
    # =========================================================================

    def check_statement(self, node: ASTNode) -> None:
        """
        Check one statement or top-level declaration.

        Bindings it introduces are added to the current scope.
        """
        try:
            self._enter(node)
            name = type(node).__name__
            checker = getattr(self, f"_check_{name}", None)
            if checker is None:
                raise InternalCompilerError(f"unsupported statement node {name}", node.location)
            checker(node)
        finally:
            self._depth -= 1

    def _check_ExpressionStatement(self, stmt: ExpressionStatement) -> None:
        self.visit_expr(stmt.expression)

    def _check_LetStatement(self, stmt: LetStatement) -> None:
        self._declare_variable(stmt.name, stmt.var_type, stmt.initializer, stmt.location)

    def _check_GlobalVariable(self, decl: GlobalVariable) -> None:
        self._declare_variable(decl.name, decl.var_type, decl.initializer, decl.location)

    def _declare_variable(
        self,
        name: str,
        var_type: Optional[LangType],
        initializer: Optional[Expression],
        location: Optional[SourceLocation],
    ) -> None:
        # The initializer is checked before the name exists
        init_type = self.visit_expr(initializer) if initializer is not None else None

        if var_type is not None and init_type is not None and not var_type.matches(init_type):
            self._type_error(
                TypeErrorKind.ERRONEOUS_VAR_DECL,
                f"'{name}' is declared as '{var_type}' but initialized with '{init_type}'",
                location,
                expected=var_type,
                actual=init_type,
            )

        declared = var_type or init_type or TYPE_UNKNOWN
        try:
            self.scopes.insert_variable(
                name,
                declared,
                mutable=True,
                initialized=initializer is not None,
                location=location,
            )
        except ScopeError as e:
            self.scope_errors.add(e)

    def _check_BlockStatement(self, block: BlockStatement) -> None:
        self.scopes.enter_scope()
        for stmt in block.statements:
            self.check_statement(stmt)
        self.scopes.exit_scope()

    def _check_condition(self, cond: Expression, construct: str) -> None:
        cond_type = self.visit_expr(cond)
        if not cond_type.is_unknown and cond_type != TYPE_BOOL:
            self._type_error(
                TypeErrorKind.NON_BOOLEAN_COND_STMT,
                f"{construct} condition must be bool, got '{cond_type}'",
                cond.location,
                expected=TYPE_BOOL,
                actual=cond_type,
            )

    def _check_IfStatement(self, stmt: IfStatement) -> None:
        self._check_condition(stmt.condition, "if")
        self.check_statement(stmt.then_branch)
        if stmt.else_branch is not None:
            self.check_statement(stmt.else_branch)

    def _check_WhileStatement(self, stmt: WhileStatement) -> None:
        self._check_condition(stmt.condition, "while")
        self.scopes.enter_loop()
        self.check_statement(stmt.body)
        self.scopes.exit_loop()

    def _check_ForStatement(self, stmt: ForStatement) -> None:
        self.scopes.enter_scope()
        self.scopes.enter_loop()
        if stmt.initializer is not None:
            self.check_statement(stmt.initializer)
        if stmt.condition is not None:
            self._check_condition(stmt.condition, "for")
        if stmt.increment is not None:
            self.visit_expr(stmt.increment)
        self.check_statement(stmt.body)
        self.scopes.exit_loop()
        self.scopes.exit_scope()

    def _check_BreakStatement(self, stmt: BreakStatement) -> None:
        if not self.scopes.in_loop():
            self._type_error(
                TypeErrorKind.ERRONEOUS_BREAK, "'break' outside of a loop", stmt.location
            )

    def _check_ContinueStatement(self, stmt: ContinueStatement) -> None:
        if not self.scopes.in_loop():
            self._type_error(
                TypeErrorKind.ERRONEOUS_CONTINUE, "'continue' outside of a loop", stmt.location
            )

    def _check_ReturnStatement(self, stmt: ReturnStatement) -> None:
        if not self._return_types:
            # Top-level return: nothing to check against
            if stmt.value is not None:
                self.visit_expr(stmt.value)
            return

        expected = self._return_types[-1]
        if stmt.value is None:
            if not expected.is_void:
                self._type_error(
                    TypeErrorKind.ERRONEOUS_RETURN_TYPE,
                    f"missing return value in function returning '{expected}'",
                    stmt.location,
                    expected=expected,
                    actual=TYPE_VOID,
                )
            return

        actual = self.visit_expr(stmt.value)
        if expected.is_void:
            self._type_error(
                TypeErrorKind.ERRONEOUS_RETURN_TYPE,
                "void function cannot return a value",
                stmt.location,
            )
        elif not actual.matches(expected):
            self._type_error(
                TypeErrorKind.ERRONEOUS_RETURN_TYPE,
                f"returning '{actual}' from a function returning '{expected}'",
                stmt.location,
                expected=expected,
                actual=actual,
            )

    def _check_FunctionNode(self, func: FunctionNode) -> None:
        """
        Declare a function and check its body.

        The name is bound before the body is checked so that the body can
        call the function recursively. A rejected merge is reported but
        the body is still checked.
        """
        return_type = func.return_type or TYPE_VOID
        param_types = [p.param_type for p in func.parameters]

        try:
            if func.is_prototype:
                self.scopes.insert_function_prototype(
                    func.name, param_types, return_type, func.location
                )
            else:
                self.scopes.insert_function_definition(
                    func.name, param_types, return_type, func.location
                )
        except ScopeError as e:
            self.scope_errors.add(e)

        if func.is_prototype:
            return

        self.scopes.enter_scope()
        for p in func.parameters:
            try:
                self.scopes.insert_parameter(p.name, p.param_type, p.location)
            except ScopeError as e:
                self.scope_errors.add(e)

        self._return_types.append(return_type)
        self.check_statement(func.body)
        self._return_types.pop()
        self.scopes.exit_scope()
