"""
Tree Builders
=============

Shorthand constructors for building minic trees programmatically.
Operators are given by their source spelling and literals are wrapped
automatically, so a test can write

    binary("+", "x", 1)

instead of spelling out the three node constructors. Strings passed where
an expression is expected are read as identifiers; use string() for a
string literal.
"""

from typing import Optional, Sequence, Union

from minic.errors import SourceLocation
from minic.frontend.types import LangType, parse_type_name
from minic.frontend.ast import (
    ASTNode,
    BinaryExpression,
    BinaryOperator,
    BlockStatement,
    BoolLiteral,
    BreakStatement,
    CallExpression,
    ContinueStatement,
    Expression,
    ExpressionStatement,
    FloatLiteral,
    ForStatement,
    FunctionNode,
    GlobalVariable,
    GroupingExpression,
    IdentifierExpression,
    IfStatement,
    IntLiteral,
    LetStatement,
    ParameterNode,
    ProgramNode,
    ReturnStatement,
    Statement,
    StringLiteral,
    UnaryExpression,
    UnaryOperator,
    WhileStatement,
)

ExprLike = Union[Expression, str, bool, int, float]
TypeLike = Union[LangType, str, None]


def expr(value: ExprLike) -> Expression:
    """Coerce a Python value into an expression node."""
    if isinstance(value, Expression):
        return value
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return BoolLiteral(value=value)
    if isinstance(value, int):
        return IntLiteral(value=value)
    if isinstance(value, float):
        return FloatLiteral(value=value)
    if isinstance(value, str):
        return IdentifierExpression(name=value)
    raise TypeError(f"cannot build an expression from {value!r}")


def type_of(value: TypeLike) -> Optional[LangType]:
    if value is None or isinstance(value, LangType):
        return value
    return parse_type_name(value)


def stmt(value: Union[Statement, Expression, ExprLike]) -> Statement:
    """Wrap a bare expression as an expression statement."""
    if isinstance(value, Statement):
        return value
    return ExpressionStatement(expression=expr(value))


# =============================================================================
# Expressions
# =============================================================================

def ident(name: str, location: Optional[SourceLocation] = None) -> IdentifierExpression:
    return IdentifierExpression(name=name, location=location)


def string(value: str, location: Optional[SourceLocation] = None) -> StringLiteral:
    return StringLiteral(value=value, location=location)


def unary(op: str, operand: ExprLike, location: Optional[SourceLocation] = None) -> UnaryExpression:
    return UnaryExpression(
        operator=UnaryOperator(op), operand=expr(operand), location=location
    )


def binary(
    op: str, left: ExprLike, right: ExprLike, location: Optional[SourceLocation] = None
) -> BinaryExpression:
    """
    Build a binary expression.

    Args:
        op: Operator spelling, e.g. "+", "&&", "<="

    Raises:
        ValueError: If op is not a binary operator
    """
    return BinaryExpression(
        operator=BinaryOperator(op),
        left=expr(left),
        right=expr(right),
        location=location,
    )


def assign(target: ExprLike, value: ExprLike, location: Optional[SourceLocation] = None) -> BinaryExpression:
    left = ident(target, location) if isinstance(target, str) else expr(target)
    return binary("=", left, value, location)


def call(callee: ExprLike, *args: ExprLike, location: Optional[SourceLocation] = None) -> CallExpression:
    return CallExpression(
        callee=ident(callee, location) if isinstance(callee, str) else expr(callee),
        arguments=[expr(a) for a in args],
        location=location,
    )


def group(inner: ExprLike) -> GroupingExpression:
    return GroupingExpression(expression=expr(inner))


# =============================================================================
# Statements
# =============================================================================

def let(
    name: str,
    initializer: ExprLike,
    var_type: TypeLike = None,
    location: Optional[SourceLocation] = None,
) -> LetStatement:
    return LetStatement(
        name=name,
        var_type=type_of(var_type),
        initializer=expr(initializer),
        location=location,
    )


def block(*statements) -> BlockStatement:
    return BlockStatement(statements=[stmt(s) for s in statements])


def if_(cond: ExprLike, then, else_=None, location: Optional[SourceLocation] = None) -> IfStatement:
    return IfStatement(
        condition=expr(cond),
        then_branch=stmt(then),
        else_branch=stmt(else_) if else_ is not None else None,
        location=location,
    )


def while_(cond: ExprLike, body, location: Optional[SourceLocation] = None) -> WhileStatement:
    return WhileStatement(condition=expr(cond), body=stmt(body), location=location)


def for_(
    init=None,
    cond: Optional[ExprLike] = None,
    incr: Optional[ExprLike] = None,
    body=None,
    location: Optional[SourceLocation] = None,
) -> ForStatement:
    return ForStatement(
        initializer=stmt(init) if init is not None else None,
        condition=expr(cond) if cond is not None else None,
        increment=expr(incr) if incr is not None else None,
        body=stmt(body) if body is not None else BlockStatement(),
        location=location,
    )


def ret(value: Optional[ExprLike] = None, location: Optional[SourceLocation] = None) -> ReturnStatement:
    return ReturnStatement(
        value=expr(value) if value is not None else None, location=location
    )


def brk(location: Optional[SourceLocation] = None) -> BreakStatement:
    return BreakStatement(location=location)


def cont(location: Optional[SourceLocation] = None) -> ContinueStatement:
    return ContinueStatement(location=location)


# =============================================================================
# Declarations
# =============================================================================

def param(name: str, param_type: TypeLike) -> ParameterNode:
    return ParameterNode(name=name, param_type=type_of(param_type))


def function(
    name: str,
    params: Sequence = (),
    return_type: TypeLike = None,
    body: Optional[Sequence] = None,
    location: Optional[SourceLocation] = None,
) -> FunctionNode:
    """
    Build a function definition, or a prototype when body is None.

    Args:
        params: ParameterNode objects or (name, type) pairs
        body: Statements of the body block
    """
    parameters = [
        p if isinstance(p, ParameterNode) else param(*p) for p in params
    ]
    return FunctionNode(
        name=name,
        parameters=parameters,
        return_type=type_of(return_type),
        body=block(*body) if body is not None else None,
        location=location,
    )


def global_var(
    name: str,
    var_type: TypeLike = None,
    initializer: Optional[ExprLike] = None,
    location: Optional[SourceLocation] = None,
) -> GlobalVariable:
    return GlobalVariable(
        name=name,
        var_type=type_of(var_type),
        initializer=expr(initializer) if initializer is not None else None,
        location=location,
    )


def program(*declarations: ASTNode) -> ProgramNode:
    return ProgramNode(declarations=list(declarations))
