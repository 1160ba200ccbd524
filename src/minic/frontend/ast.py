"""
minic Abstract Syntax Tree (AST) Definitions
============================================

This module defines the AST node types the front end consumes. Trees are
built by an external parser (or by minic.frontend.builders) and must be
structurally valid: every mandatory child present, every operator one of
the enumerated ones.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node containing all top-level declarations
├── Declarations
│   ├── FunctionNode - function definition, or prototype when body is None
│   ├── GlobalVariable - top-level variable
│   └── ParameterNode - function parameter
├── Statements
│   ├── ExpressionStatement - expression as statement
│   ├── LetStatement - local variable binding
│   ├── BlockStatement - { ... }, opens a scope
│   ├── IfStatement - if/else statement
│   ├── WhileStatement - while loop
│   ├── ForStatement - for loop, opens a scope
│   ├── ReturnStatement - return statement
│   ├── BreakStatement - break statement
│   └── ContinueStatement - continue statement
└── Expressions
    ├── IdentifierExpression - variable reference
    ├── IntLiteral / FloatLiteral / BoolLiteral / StringLiteral
    ├── UnaryExpression - unary operators
    ├── BinaryExpression - binary operators, including assignment
    ├── CallExpression - function call
    └── GroupingExpression - parenthesized expression

Design Notes
------------
- All nodes are dataclasses
- Each node may carry its source location for error reporting; the
  parser is responsible for filling it in
- Expression nodes record their computed type after type checking
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from minic.errors import SourceLocation
from minic.frontend.types import LangType


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears (optional)
    """
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class Expression(ASTNode):
    """
    Base class for all expression nodes.

    Attributes:
        resolved_type: The type of this expression (set during type checking)
    """
    resolved_type: Optional[LangType] = field(default=None, compare=False)


@dataclass
class Statement(ASTNode):
    """Base class for all statement nodes."""
    pass


@dataclass
class Declaration(ASTNode):
    """Base class for nodes that introduce top-level names."""
    pass


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operators, valued by their source spelling."""
    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    POWER = "^"

    # Comparison
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    GREATER = ">"
    LESS_EQ = "<="
    GREATER_EQ = ">="

    # Logical
    LOGICAL_AND = "&&"
    LOGICAL_OR = "||"

    # Shift
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"

    ASSIGN = "="

    @property
    def is_arithmetic(self) -> bool:
        return self in _ARITHMETIC

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISON

    @property
    def is_logical(self) -> bool:
        return self in (BinaryOperator.LOGICAL_AND, BinaryOperator.LOGICAL_OR)

    @property
    def is_shift(self) -> bool:
        return self in (BinaryOperator.LEFT_SHIFT, BinaryOperator.RIGHT_SHIFT)


_ARITHMETIC = frozenset({
    BinaryOperator.ADD,
    BinaryOperator.SUBTRACT,
    BinaryOperator.MULTIPLY,
    BinaryOperator.DIVIDE,
    BinaryOperator.MODULO,
})

_COMPARISON = frozenset({
    BinaryOperator.EQUAL,
    BinaryOperator.NOT_EQUAL,
    BinaryOperator.LESS,
    BinaryOperator.GREATER,
    BinaryOperator.LESS_EQ,
    BinaryOperator.GREATER_EQ,
})


class UnaryOperator(Enum):
    """Unary operators, valued by their source spelling."""
    NEGATE = "-"
    LOGICAL_NOT = "!"


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass
class ProgramNode(ASTNode):
    """
    Root node of the AST representing a complete program.

    Attributes:
        declarations: Top-level functions, global variables and statements,
                      in source order
    """
    declarations: list[ASTNode] = field(default_factory=list)


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class IdentifierExpression(Expression):
    """Variable reference (or callee name)."""
    name: str = ""


@dataclass
class IntLiteral(Expression):
    value: int = 0


@dataclass
class FloatLiteral(Expression):
    value: float = 0.0


@dataclass
class BoolLiteral(Expression):
    value: bool = False


@dataclass
class StringLiteral(Expression):
    value: str = ""


@dataclass
class UnaryExpression(Expression):
    """
    Unary operation expression (op x).

    Attributes:
        operator: The unary operator
        operand: The operand expression
    """
    operator: UnaryOperator = None
    operand: Expression = None


@dataclass
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Assignment is a binary expression with operator ASSIGN whose left
    operand is an IdentifierExpression.

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass
class CallExpression(Expression):
    """
    Function call expression.

    Attributes:
        callee: The called expression (a name, possibly parenthesized)
        arguments: Argument expressions, in source order
    """
    callee: Expression = None
    arguments: list[Expression] = field(default_factory=list)

    @property
    def function_name(self) -> Optional[str]:
        """
        The called function's name, or None if the callee is not a name.

        Parentheses around the name are looked through, so `(f)(1)` calls f.
        """
        callee = strip_grouping(self.callee)
        if isinstance(callee, IdentifierExpression):
            return callee.name
        return None


@dataclass
class GroupingExpression(Expression):
    """Parenthesized expression."""
    expression: Expression = None


def strip_grouping(expr: Expression) -> Expression:
    """Return the expression inside any number of enclosing parentheses."""
    while isinstance(expr, GroupingExpression):
        expr = expr.expression
    return expr


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class ExpressionStatement(Statement):
    """Expression evaluated for its effect, e.g. `x = 5;` or `f();`."""
    expression: Expression = None


@dataclass
class LetStatement(Statement):
    """
    Local variable binding.

    Attributes:
        name: Variable name
        var_type: Declared type annotation (None = take the initializer's)
        initializer: Mandatory initializer expression
    """
    name: str = ""
    var_type: Optional[LangType] = None
    initializer: Expression = None


@dataclass
class BlockStatement(Statement):
    """
    Block statement enclosed in braces. Opens its own scope.

    Attributes:
        statements: Statements in the block
    """
    statements: list[Statement] = field(default_factory=list)


@dataclass
class ReturnStatement(Statement):
    """
    Return statement.

    Attributes:
        value: Optional return value expression
    """
    value: Optional[Expression] = None


@dataclass
class BreakStatement(Statement):
    """Break statement for exiting loops."""
    pass


@dataclass
class ContinueStatement(Statement):
    """Continue statement for skipping to the next loop iteration."""
    pass


@dataclass
class IfStatement(Statement):
    """
    If statement with optional else clause.

    Attributes:
        condition: The condition expression
        then_branch: Statement executed if condition is true
        else_branch: Optional statement executed if condition is false
    """
    condition: Expression = None
    then_branch: Statement = None
    else_branch: Optional[Statement] = None


@dataclass
class WhileStatement(Statement):
    """
    While loop statement.

    Attributes:
        condition: Loop condition, evaluated before every iteration
        body: Loop body statement
    """
    condition: Expression = None
    body: Statement = None


@dataclass
class ForStatement(Statement):
    """
    For loop statement. Opens a scope spanning all four parts.

    Attributes:
        initializer: Optional initialization statement (e.g. a let)
        condition: Optional loop condition (absent = loop forever)
        increment: Optional expression evaluated after each iteration
        body: Loop body statement
    """
    initializer: Optional[Statement] = None
    condition: Optional[Expression] = None
    increment: Optional[Expression] = None
    body: Statement = None


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass
class ParameterNode(ASTNode):
    """
    Function parameter declaration.

    Attributes:
        name: Parameter name
        param_type: The parameter's type
    """
    name: str = ""
    param_type: LangType = None


@dataclass
class FunctionNode(Declaration):
    """
    Function definition or prototype.

    Attributes:
        name: Function name
        parameters: Parameter declarations, in order
        return_type: Declared return type (None = void)
        body: The function body; None for a prototype
    """
    name: str = ""
    parameters: list[ParameterNode] = field(default_factory=list)
    return_type: Optional[LangType] = None
    body: Optional[BlockStatement] = None

    @property
    def is_prototype(self) -> bool:
        return self.body is None


@dataclass
class GlobalVariable(Declaration):
    """
    Top-level variable declaration.

    Attributes:
        name: Variable name
        var_type: Declared type (None = take the initializer's)
        initializer: Optional initial value
    """
    name: str = ""
    var_type: Optional[LangType] = None
    initializer: Optional[Expression] = None


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; everything else falls through to generic_visit, which visits
    all children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_CallExpression(self, node):
                self.count += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a node by dispatching to the appropriate method.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by node type)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all children of the node, in field order."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(program))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _nested(self, node: Optional[ASTNode]) -> None:
        self.indent_level += 1
        if node is not None:
            self.visit(node)
        self.indent_level -= 1

    def visit_ProgramNode(self, node: ProgramNode):
        self._emit("Program")
        self.indent_level += 1
        for decl in node.declarations:
            self.visit(decl)
        self.indent_level -= 1

    def visit_FunctionNode(self, node: FunctionNode):
        params = ", ".join(f"{p.param_type} {p.name}" for p in node.parameters)
        ret = node.return_type or "void"
        if node.is_prototype:
            self._emit(f"Prototype: {ret} {node.name}({params})")
        else:
            self._emit(f"Function: {ret} {node.name}({params})")
            self._nested(node.body)

    def visit_GlobalVariable(self, node: GlobalVariable):
        self._emit(f"Global: {self._decl_str(node)}")

    def visit_LetStatement(self, node: LetStatement):
        self._emit(f"Let: {self._decl_str(node)}")

    def visit_BlockStatement(self, node: BlockStatement):
        self._emit("Block")
        self.indent_level += 1
        for stmt in node.statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If ({self._expr_str(node.condition)})")
        self.indent_level += 1
        self._emit("Then:")
        self._nested(node.then_branch)
        if node.else_branch:
            self._emit("Else:")
            self._nested(node.else_branch)
        self.indent_level -= 1

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit(f"While ({self._expr_str(node.condition)})")
        self._nested(node.body)

    def visit_ForStatement(self, node: ForStatement):
        cond = self._expr_str(node.condition)
        incr = self._expr_str(node.increment)
        self._emit(f"For (; {cond}; {incr})")
        if node.initializer:
            self.indent_level += 1
            self._emit("Init:")
            self._nested(node.initializer)
            self.indent_level -= 1
        self._nested(node.body)

    def visit_ReturnStatement(self, node: ReturnStatement):
        if node.value:
            self._emit(f"Return {self._expr_str(node.value)}")
        else:
            self._emit("Return")

    def visit_BreakStatement(self, node: BreakStatement):
        self._emit("Break")

    def visit_ContinueStatement(self, node: ContinueStatement):
        self._emit("Continue")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"Expr: {self._expr_str(node.expression)}")

    def _decl_str(self, node) -> str:
        type_str = f"{node.var_type} " if node.var_type else ""
        init = f" = {self._expr_str(node.initializer)}" if node.initializer else ""
        return f"{type_str}{node.name}{init}"

    def _expr_str(self, expr: Optional[Expression]) -> str:
        """Convert expression to string representation."""
        if expr is None:
            return ""
        if isinstance(expr, BoolLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, (IntLiteral, FloatLiteral)):
            return str(expr.value)
        if isinstance(expr, StringLiteral):
            return f'"{expr.value}"'
        if isinstance(expr, IdentifierExpression):
            return expr.name
        if isinstance(expr, BinaryExpression):
            return f"({self._expr_str(expr.left)} {expr.operator.value} {self._expr_str(expr.right)})"
        if isinstance(expr, UnaryExpression):
            return f"({expr.operator.value}{self._expr_str(expr.operand)})"
        if isinstance(expr, CallExpression):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{self._expr_str(expr.callee)}({args})"
        if isinstance(expr, GroupingExpression):
            return self._expr_str(expr.expression)
        return f"<{type(expr).__name__}>"
