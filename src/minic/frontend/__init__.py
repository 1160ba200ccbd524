"""
minic Front End
===============

Semantic analysis and IR generation for the minic language.

The front end takes a program tree from an external parser and runs:

1. **Scope resolution** (scope.ScopeStack): nested lexical scopes,
   shadowing, prototype/definition merging
2. **Type checking** (typechecker.TypeChecker): expression typing and
   statement rules, collecting scope and type diagnostics
3. **IR generation** (irgen.IRGenerator): lowering to three-address quads

Usage
-----
    >>> from minic.frontend import compile_program
    >>> from minic.frontend.builders import program, function, ret, binary
    >>> tree = program(function("add", [("a", "int"), ("b", "int")], "int",
    ...                         [ret(binary("+", "a", "b"))]))
    >>> print(compile_program(tree).ir_text)
    func_begin add
        _t0 = a + b
        return _t0
    func_end add
"""

from minic.frontend.compiler import (
    FrontendCompiler,
    CompilerOptions,
    CompilationResult,
    compile_program,
    compile_to_ir,
)
from minic.frontend.errors import (
    SemanticError,
    ScopeError,
    ScopeErrorKind,
    TypeCheckError,
    TypeErrorKind,
    CompilationError,
    NoCurrentScopeError,
    NestingDepthError,
    DiagnosticCollector,
)
from minic.frontend.types import (
    LangType,
    BaseType,
    TYPE_INT,
    TYPE_FLOAT,
    TYPE_BOOL,
    TYPE_STRING,
    TYPE_VOID,
    TYPE_UNKNOWN,
)
from minic.frontend.symbols import (
    Symbol,
    Signature,
    VariableKind,
    ParameterKind,
    FunctionKind,
    FunctionState,
    DeclarationKind,
    MergeOutcome,
    merge_function_declaration,
)
from minic.frontend.scope import Scope, ScopeStack
from minic.frontend.typechecker import TypeChecker
from minic.frontend.quad import Opcode, Quad, render_quads
from minic.frontend.irgen import IRGenerator
from minic.frontend.ast import (
    ASTNode,
    ASTVisitor,
    ASTPrinter,
    ProgramNode,
    FunctionNode,
    ParameterNode,
    GlobalVariable,
    BlockStatement,
    ExpressionStatement,
    LetStatement,
    IfStatement,
    WhileStatement,
    ForStatement,
    ReturnStatement,
    BreakStatement,
    ContinueStatement,
    IdentifierExpression,
    IntLiteral,
    FloatLiteral,
    BoolLiteral,
    StringLiteral,
    UnaryExpression,
    BinaryExpression,
    CallExpression,
    GroupingExpression,
    strip_grouping,
    UnaryOperator,
    BinaryOperator,
)

__all__ = [
    # Main API
    "FrontendCompiler",
    "CompilerOptions",
    "CompilationResult",
    "compile_program",
    "compile_to_ir",
    # Errors
    "SemanticError",
    "ScopeError",
    "ScopeErrorKind",
    "TypeCheckError",
    "TypeErrorKind",
    "CompilationError",
    "NoCurrentScopeError",
    "NestingDepthError",
    "DiagnosticCollector",
    # Types
    "LangType",
    "BaseType",
    "TYPE_INT",
    "TYPE_FLOAT",
    "TYPE_BOOL",
    "TYPE_STRING",
    "TYPE_VOID",
    "TYPE_UNKNOWN",
    # Symbols and scopes
    "Symbol",
    "Signature",
    "VariableKind",
    "ParameterKind",
    "FunctionKind",
    "FunctionState",
    "DeclarationKind",
    "MergeOutcome",
    "merge_function_declaration",
    "Scope",
    "ScopeStack",
    # Passes
    "TypeChecker",
    "IRGenerator",
    "Opcode",
    "Quad",
    "render_quads",
    # AST Nodes
    "ASTNode",
    "ASTVisitor",
    "ASTPrinter",
    "ProgramNode",
    "FunctionNode",
    "ParameterNode",
    "GlobalVariable",
    "BlockStatement",
    "ExpressionStatement",
    "LetStatement",
    "IfStatement",
    "WhileStatement",
    "ForStatement",
    "ReturnStatement",
    "BreakStatement",
    "ContinueStatement",
    "IdentifierExpression",
    "IntLiteral",
    "FloatLiteral",
    "BoolLiteral",
    "StringLiteral",
    "UnaryExpression",
    "BinaryExpression",
    "CallExpression",
    "GroupingExpression",
    "strip_grouping",
    "UnaryOperator",
    "BinaryOperator",
]
