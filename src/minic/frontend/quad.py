"""
Three-Address Code
==================

This module defines the linear intermediate representation produced by
the IR generator: an ordered list of quads, each an opcode with up to two
arguments and a result.

Operands are plain strings: literal text ("42", "true"), source names,
temporaries (_t0, _t1, ...), labels (_L0, _L1, ...) or the empty string.

Text Form
---------
    copy        result = arg1
    goto        goto result
    if_false    if_false arg1 goto result
    binary      result = arg1 OP arg2
    neg / not   result = neg arg1, result = not arg1
    return      return arg1            (or just "return")
    label       result:
    param       param arg1
    call        result = call arg1, arg2
    func_begin  func_begin result
    func_end    func_end result
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from minic.errors import InternalCompilerError
from minic.frontend.ast import BinaryOperator, UnaryOperator


class Opcode(Enum):
    """IR operations, valued by their text mnemonic."""
    COPY = "copy"
    GOTO = "goto"
    IF_FALSE = "if_false"

    # Binary operations
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    POW = "pow"
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    GT = "gt"
    LE = "le"
    GE = "ge"
    AND = "and"
    OR = "or"
    SHL = "shl"
    SHR = "shr"

    # Unary operations
    NEG = "neg"
    NOT = "not"

    RETURN = "return"
    LABEL = "label"
    PARAM = "param"
    CALL = "call"
    FUNC_BEGIN = "func_begin"
    FUNC_END = "func_end"

    @property
    def symbol(self) -> str:
        """Operator spelling for binary opcodes."""
        try:
            return _SYMBOLS[self]
        except KeyError:
            raise InternalCompilerError(f"opcode {self.value} has no operator symbol") from None

    @classmethod
    def for_binary(cls, op: BinaryOperator) -> "Opcode":
        """
        Map a source binary operator to its opcode.

        Raises:
            InternalCompilerError: For assignment, which lowers to COPY
        """
        try:
            return _BINARY_OPCODES[op]
        except KeyError:
            raise InternalCompilerError(f"no opcode for binary operator '{op.value}'") from None

    @classmethod
    def for_unary(cls, op: UnaryOperator) -> "Opcode":
        return cls.NEG if op == UnaryOperator.NEGATE else cls.NOT


_BINARY_OPCODES = {
    BinaryOperator.ADD: Opcode.ADD,
    BinaryOperator.SUBTRACT: Opcode.SUB,
    BinaryOperator.MULTIPLY: Opcode.MUL,
    BinaryOperator.DIVIDE: Opcode.DIV,
    BinaryOperator.MODULO: Opcode.MOD,
    BinaryOperator.POWER: Opcode.POW,
    BinaryOperator.EQUAL: Opcode.EQ,
    BinaryOperator.NOT_EQUAL: Opcode.NE,
    BinaryOperator.LESS: Opcode.LT,
    BinaryOperator.GREATER: Opcode.GT,
    BinaryOperator.LESS_EQ: Opcode.LE,
    BinaryOperator.GREATER_EQ: Opcode.GE,
    BinaryOperator.LOGICAL_AND: Opcode.AND,
    BinaryOperator.LOGICAL_OR: Opcode.OR,
    BinaryOperator.LEFT_SHIFT: Opcode.SHL,
    BinaryOperator.RIGHT_SHIFT: Opcode.SHR,
}

_SYMBOLS = {opcode: op.value for op, opcode in _BINARY_OPCODES.items()}

BINARY_OPCODES = frozenset(_BINARY_OPCODES.values())
UNARY_OPCODES = frozenset({Opcode.NEG, Opcode.NOT})
_FLUSH_LEFT = frozenset({Opcode.LABEL, Opcode.FUNC_BEGIN, Opcode.FUNC_END})


@dataclass(frozen=True)
class Quad:
    """
    One three-address instruction.

    Attributes:
        opcode: The operation
        arg1: First operand ("" if unused)
        arg2: Second operand ("" if unused)
        result: Destination temporary, name or label ("" if unused)
    """
    opcode: Opcode
    arg1: str = ""
    arg2: str = ""
    result: str = ""

    def render(self) -> str:
        """
        Return the text form of this quad.

        Raises:
            InternalCompilerError: If the opcode has no text form
        """
        op = self.opcode
        if op == Opcode.COPY:
            return f"{self.result} = {self.arg1}"
        if op == Opcode.GOTO:
            return f"goto {self.result}"
        if op == Opcode.IF_FALSE:
            return f"if_false {self.arg1} goto {self.result}"
        if op in BINARY_OPCODES:
            return f"{self.result} = {self.arg1} {op.symbol} {self.arg2}"
        if op in UNARY_OPCODES:
            return f"{self.result} = {op.value} {self.arg1}"
        if op == Opcode.RETURN:
            return f"return {self.arg1}" if self.arg1 else "return"
        if op == Opcode.LABEL:
            return f"{self.result}:"
        if op == Opcode.PARAM:
            return f"param {self.arg1}"
        if op == Opcode.CALL:
            return f"{self.result} = call {self.arg1}, {self.arg2}"
        if op == Opcode.FUNC_BEGIN:
            return f"func_begin {self.result}"
        if op == Opcode.FUNC_END:
            return f"func_end {self.result}"
        raise InternalCompilerError(f"no text form for opcode {op.value}")

    def __str__(self) -> str:
        return self.render()


def render_quads(quads: Iterable[Quad]) -> str:
    """Render a quad sequence, one per line; labels and function markers are not indented."""
    lines = []
    for quad in quads:
        text = quad.render()
        lines.append(text if quad.opcode in _FLUSH_LEFT else f"    {text}")
    return "\n".join(lines)
