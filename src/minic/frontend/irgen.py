"""
IR Generator
============

This module lowers a program tree to three-address code (quads).

Lowering Strategy
-----------------
Every expression is lowered to a *place*, the operand string that holds
its value:

1. Literals and names are their own place and emit nothing
2. Unary and binary operations lower their operands left to right and
   emit one quad into a fresh temporary (_t0, _t1, ...)
3. Calls lower their arguments left to right, emit one `param` quad per
   argument, then a `call` quad into a fresh temporary
4. Assignment lowers the value and copies it into the target name

Control flow uses generated labels (_L0, _L1, ...):

    if (c) A else B             while (c) B
    ---------------             -----------
        if_false c goto ELSE    START:
        A                           if_false c goto END
        goto END                    B
    ELSE:                           goto START
        B                       END:
    END:

    for (I; c; n) B
    ---------------
        I
    START:
        if_false c goto END
        B
    NEXT:
        n
        goto START
    END:

'break' jumps to the innermost END, 'continue' to the innermost START
(while) or NEXT (for).

The generator does not re-check the program. It lowers any structurally
valid tree, including one that failed semantic analysis; deciding whether
to use that output is the driver's job.

Usage:
    generator = IRGenerator()
    quads = generator.generate(program)
    print(render_quads(quads))
"""

import logging
from typing import Optional

from minic.errors import InternalCompilerError
from minic.frontend.errors import NestingDepthError
from minic.frontend.quad import Opcode, Quad
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
    ProgramNode,
    ReturnStatement,
    StringLiteral,
    UnaryExpression,
    WhileStatement,
    strip_grouping,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_NESTING_DEPTH = 200


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


class IRGenerator:
    """
    Lowers program trees to quads.

    Temporary and label numbering restarts at zero on every generate()
    call, so names are unique within one call's output.
    """

    def __init__(self, max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH):
        self.max_nesting_depth = max_nesting_depth
        self.quads: list[Quad] = []

        self._temp_counter = 0
        self._label_counter = 0

        # Loop context, innermost last; pushed and popped together
        self._break_targets: list[str] = []
        self._continue_targets: list[str] = []

        self._depth = 0

    def generate(self, program: ProgramNode) -> list[Quad]:
        """
        Lower a whole program.

        Args:
            program: The root node

        Returns:
            A new list holding the program's quads, in order

        Raises:
            NestingDepthError: If the tree is nested beyond the limit
            InternalCompilerError: On 'break'/'continue' outside a loop
        """
        self.quads = []
        self._temp_counter = 0
        self._label_counter = 0
        self._break_targets = []
        self._continue_targets = []
        self._depth = 0

        for decl in program.declarations:
            self.generate_statement(decl)

        logger.debug(
            f"generated {len(self.quads)} quads "
            f"({self._temp_counter} temporaries, {self._label_counter} labels)"
        )
        return list(self.quads)

    # =========================================================================
    # Output Helpers
    # =========================================================================

    def _emit(self, opcode: Opcode, arg1: str = "", arg2: str = "", result: str = "") -> None:
        self.quads.append(Quad(opcode, arg1, arg2, result))

    def _emit_label(self, label: str) -> None:
        self._emit(Opcode.LABEL, result=label)

    def _emit_goto(self, label: str) -> None:
        self._emit(Opcode.GOTO, result=label)

    def _new_temp(self) -> str:
        """Generate a unique temporary name."""
        name = f"_t{self._temp_counter}"
        self._temp_counter += 1
        return name

    def _new_label(self) -> str:
        """Generate a unique label."""
        name = f"_L{self._label_counter}"
        self._label_counter += 1
        return name

    def _enter(self, node: ASTNode) -> None:
        self._depth += 1
        if self._depth > self.max_nesting_depth:
            raise NestingDepthError(self.max_nesting_depth, node.location)

    # =========================================================================
    # Expressions
    # =========================================================================

    def generate_expression(self, expr: Expression) -> str:
        """
        Lower an expression and return the place holding its value.
        """
        try:
            self._enter(expr)
            return self._lower_expression(expr)
        finally:
            self._depth -= 1

    def _lower_expression(self, expr: Expression) -> str:
        if isinstance(expr, IntLiteral):
            return str(expr.value)
        if isinstance(expr, FloatLiteral):
            return repr(float(expr.value))
        if isinstance(expr, BoolLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, StringLiteral):
            return _quote(expr.value)
        if isinstance(expr, IdentifierExpression):
            return expr.name
        if isinstance(expr, GroupingExpression):
            return self.generate_expression(expr.expression)
        if isinstance(expr, UnaryExpression):
            operand = self.generate_expression(expr.operand)
            temp = self._new_temp()
            self._emit(Opcode.for_unary(expr.operator), operand, result=temp)
            return temp
        if isinstance(expr, BinaryExpression):
            if expr.operator == BinaryOperator.ASSIGN:
                return self._generate_assignment(expr)
            left = self.generate_expression(expr.left)
            right = self.generate_expression(expr.right)
            temp = self._new_temp()
            self._emit(Opcode.for_binary(expr.operator), left, right, temp)
            return temp
        if isinstance(expr, CallExpression):
            return self._generate_call(expr)
        raise InternalCompilerError(
            f"cannot lower expression node {type(expr).__name__}", expr.location
        )

    def _generate_assignment(self, expr: BinaryExpression) -> str:
        target = strip_grouping(expr.left)
        if not isinstance(target, IdentifierExpression):
            raise InternalCompilerError("assignment target is not a name", expr.location)
        value = self.generate_expression(expr.right)
        self._emit(Opcode.COPY, value, result=target.name)
        return target.name

    def _generate_call(self, expr: CallExpression) -> str:
        name = expr.function_name
        if name is None:
            raise InternalCompilerError("callee is not a function name", expr.location)
        args = [self.generate_expression(arg) for arg in expr.arguments]
        for arg in args:
            self._emit(Opcode.PARAM, arg)
        temp = self._new_temp()
        self._emit(Opcode.CALL, name, str(len(args)), temp)
        return temp

    # =========================================================================
    # Statements
    # =========================================================================

    def generate_statement(self, stmt: ASTNode) -> None:
        """Lower a statement or top-level declaration."""
        try:
            self._enter(stmt)
            self._lower_statement(stmt)
        finally:
            self._depth -= 1

    def _lower_statement(self, stmt: ASTNode) -> None:
        if isinstance(stmt, ExpressionStatement):
            self.generate_expression(stmt.expression)
        elif isinstance(stmt, (LetStatement, GlobalVariable)):
            self._generate_var_decl(stmt.name, stmt.initializer)
        elif isinstance(stmt, BlockStatement):
            for inner in stmt.statements:
                self.generate_statement(inner)
        elif isinstance(stmt, IfStatement):
            self._generate_if(stmt)
        elif isinstance(stmt, WhileStatement):
            self._generate_while(stmt)
        elif isinstance(stmt, ForStatement):
            self._generate_for(stmt)
        elif isinstance(stmt, BreakStatement):
            self._generate_jump(self._break_targets, "break", stmt)
        elif isinstance(stmt, ContinueStatement):
            self._generate_jump(self._continue_targets, "continue", stmt)
        elif isinstance(stmt, ReturnStatement):
            self._generate_return(stmt)
        elif isinstance(stmt, FunctionNode):
            self._generate_function(stmt)
        else:
            raise InternalCompilerError(
                f"cannot lower statement node {type(stmt).__name__}", stmt.location
            )

    def _generate_var_decl(self, name: str, initializer: Optional[Expression]) -> None:
        if initializer is None:
            return
        value = self.generate_expression(initializer)
        self._emit(Opcode.COPY, value, result=name)

    def _generate_if(self, stmt: IfStatement) -> None:
        cond = self.generate_expression(stmt.condition)
        end_label = self._new_label()
        else_label = self._new_label() if stmt.else_branch is not None else end_label

        self._emit(Opcode.IF_FALSE, cond, result=else_label)
        self.generate_statement(stmt.then_branch)
        if stmt.else_branch is not None:
            self._emit_goto(end_label)
            self._emit_label(else_label)
            self.generate_statement(stmt.else_branch)
        self._emit_label(end_label)

    def _generate_while(self, stmt: WhileStatement) -> None:
        start_label = self._new_label()
        end_label = self._new_label()

        self._emit_label(start_label)
        cond = self.generate_expression(stmt.condition)
        self._emit(Opcode.IF_FALSE, cond, result=end_label)

        self._break_targets.append(end_label)
        self._continue_targets.append(start_label)
        self.generate_statement(stmt.body)
        self._continue_targets.pop()
        self._break_targets.pop()

        self._emit_goto(start_label)
        self._emit_label(end_label)

    def _generate_for(self, stmt: ForStatement) -> None:
        if stmt.initializer is not None:
            self.generate_statement(stmt.initializer)

        start_label = self._new_label()
        end_label = self._new_label()
        continue_label = self._new_label()

        self._emit_label(start_label)
        if stmt.condition is not None:
            cond = self.generate_expression(stmt.condition)
            self._emit(Opcode.IF_FALSE, cond, result=end_label)

        self._break_targets.append(end_label)
        self._continue_targets.append(continue_label)
        self.generate_statement(stmt.body)
        self._continue_targets.pop()
        self._break_targets.pop()

        self._emit_label(continue_label)
        if stmt.increment is not None:
            self.generate_expression(stmt.increment)
        self._emit_goto(start_label)
        self._emit_label(end_label)

    def _generate_jump(self, targets: list[str], keyword: str, stmt: ASTNode) -> None:
        if not targets:
            raise InternalCompilerError(f"'{keyword}' outside of a loop", stmt.location)
        self._emit_goto(targets[-1])

    def _generate_return(self, stmt: ReturnStatement) -> None:
        if stmt.value is None:
            self._emit(Opcode.RETURN)
            return
        value = self.generate_expression(stmt.value)
        self._emit(Opcode.RETURN, value)

    def _generate_function(self, func: FunctionNode) -> None:
        if func.is_prototype:
            return
        self._emit(Opcode.FUNC_BEGIN, result=func.name)
        self.generate_statement(func.body)
        self._emit(Opcode.FUNC_END, result=func.name)
