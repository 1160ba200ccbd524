"""
minic Type System
=================

This module implements the type model used by the scope and type
checking passes.

Supported Types
---------------
- int: integer values
- float: floating point values
- bool: true / false
- string: string literals
- void: no value (for function returns)
- unknown: the type of anything analysis could not determine

Placeholder kinds (custom, array, pointer) exist so the model can be
extended later; no current typing rule produces or accepts them.

Type Representation
-------------------
Types are represented as LangType objects with the following attributes:
- base_type: The fundamental kind (INT, FLOAT, ..., CUSTOM, ARRAY, POINTER)
- name: For custom types, the type's name (None otherwise)
- element: For array and pointer types, the element type (None otherwise)

Equality is structural: two LangType values are equal when all three
attributes are equal.

Unknown
-------
UNKNOWN acts as a wildcard wherever two types are matched (comparisons,
call arguments, assignment, return values). It is what the checker
substitutes for a failed sub-expression so one bad node never produces a
cascade of follow-on errors.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Base Type Enumeration
# =============================================================================

class BaseType(Enum):
    """Fundamental kinds of type."""
    INT = auto()
    FLOAT = auto()
    BOOL = auto()
    STRING = auto()
    VOID = auto()
    UNKNOWN = auto()

    # Placeholders, unused by the current typing rules
    CUSTOM = auto()
    ARRAY = auto()
    POINTER = auto()

    def __str__(self) -> str:
        """Return the source-level type name."""
        return self.name.lower()


# =============================================================================
# Type Representation
# =============================================================================

@dataclass(frozen=True)
class LangType:
    """
    Represents a type in the minic type system.

    This immutable class represents any type that can appear in a
    program. Use the predefined constants (TYPE_INT, TYPE_FLOAT, ...) for
    the primitive types.

    Attributes:
        base_type: The fundamental kind
        name: Type name for CUSTOM types
        element: Element type for ARRAY and POINTER types

    Examples:
        - int           : LangType(INT)
        - Point         : LangType(CUSTOM, name="Point")
        - int[]         : LangType(ARRAY, element=TYPE_INT)
    """
    base_type: BaseType
    name: Optional[str] = None
    element: Optional["LangType"] = None

    def __post_init__(self):
        """Validate type consistency."""
        if self.base_type == BaseType.CUSTOM and not self.name:
            raise ValueError("custom type requires a name")
        if self.base_type in (BaseType.ARRAY, BaseType.POINTER) and self.element is None:
            raise ValueError(f"{self.base_type} type requires an element type")

    @property
    def is_numeric(self) -> bool:
        """Return True for int and float."""
        return self.base_type in (BaseType.INT, BaseType.FLOAT)

    @property
    def is_unknown(self) -> bool:
        """Return True if this is the unknown (wildcard) type."""
        return self.base_type == BaseType.UNKNOWN

    @property
    def is_void(self) -> bool:
        """Return True if this is the void type."""
        return self.base_type == BaseType.VOID

    def matches(self, other: "LangType") -> bool:
        """
        Check whether two types are compatible for comparison, argument
        passing, assignment and return.

        Rules:
        1. Identical types match
        2. UNKNOWN matches anything

        Args:
            other: The type to check against

        Returns:
            True if the types are compatible
        """
        if self.is_unknown or other.is_unknown:
            return True
        return self == other

    def __str__(self) -> str:
        """Return the source-level type spelling."""
        if self.base_type == BaseType.CUSTOM:
            return self.name
        if self.base_type == BaseType.ARRAY:
            return f"{self.element}[]"
        if self.base_type == BaseType.POINTER:
            return f"{self.element}*"
        return str(self.base_type)


# =============================================================================
# Predefined Types (for convenience)
# =============================================================================

TYPE_INT = LangType(BaseType.INT)
TYPE_FLOAT = LangType(BaseType.FLOAT)
TYPE_BOOL = LangType(BaseType.BOOL)
TYPE_STRING = LangType(BaseType.STRING)
TYPE_VOID = LangType(BaseType.VOID)
TYPE_UNKNOWN = LangType(BaseType.UNKNOWN)


# =============================================================================
# Type Parsing Utilities
# =============================================================================

_TYPE_NAMES = {
    "int": TYPE_INT,
    "float": TYPE_FLOAT,
    "bool": TYPE_BOOL,
    "string": TYPE_STRING,
    "void": TYPE_VOID,
}


def parse_type_name(name: str) -> LangType:
    """
    Map a source-level type keyword to its LangType.

    Args:
        name: A type keyword such as "int" or "float"

    Returns:
        The corresponding predefined type

    Raises:
        ValueError: If the keyword is not a known type

    Examples:
        "int"    -> TYPE_INT
        "string" -> TYPE_STRING
    """
    try:
        return _TYPE_NAMES[name.lower()]
    except KeyError:
        raise ValueError(f"unknown type name: {name}") from None


# =============================================================================
# Type Promotion Rules
# =============================================================================

def promote_numeric(type_a: LangType, type_b: LangType) -> LangType:
    """
    Determine the result type of an arithmetic operation on two numeric
    operands.

    Float dominates: the result is float if either operand is float,
    otherwise int. Callers must check both operands are numeric first.

    Args:
        type_a: Left operand type
        type_b: Right operand type

    Returns:
        TYPE_FLOAT or TYPE_INT
    """
    if type_a.base_type == BaseType.FLOAT or type_b.base_type == BaseType.FLOAT:
        return TYPE_FLOAT
    return TYPE_INT
