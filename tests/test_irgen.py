"""
IR Generator Tests
==================

Tests for lowering expressions, control flow and functions to quads.
"""

import pytest

from minic.errors import InternalCompilerError
from minic.frontend.errors import NestingDepthError
from minic.frontend.irgen import IRGenerator
from minic.frontend.quad import Opcode
from minic.frontend.builders import (
    assign,
    binary,
    block,
    brk,
    call,
    cont,
    expr,
    for_,
    function,
    global_var,
    group,
    if_,
    let,
    program,
    ret,
    stmt,
    string,
    unary,
    while_,
)


def lower(*declarations):
    """Lower a program and return the rendered quads."""
    return [q.render() for q in IRGenerator().generate(program(*declarations))]


def jump_targets(quads):
    return [q.result for q in quads if q.opcode in (Opcode.GOTO, Opcode.IF_FALSE)]


def labels(quads):
    return [q.result for q in quads if q.opcode == Opcode.LABEL]


class TestExpressions:
    """Tests for expression lowering."""

    def test_literals_emit_nothing(self):
        """Literals and names are their own place."""
        assert lower(stmt(1), stmt("x"), stmt(True)) == []

    def test_literal_text(self):
        """Literal places use their source text."""
        assert lower(
            let("i", 42),
            let("f", 2.5),
            let("b", False),
            let("s", string("hi")),
        ) == ["i = 42", "f = 2.5", "b = false", 's = "hi"']

    def test_binary(self):
        """A binary operation goes into a fresh temporary."""
        assert lower(let("x", binary("+", "a", 1))) == ["_t0 = a + 1", "x = _t0"]

    def test_left_to_right(self):
        """Operands are lowered left to right."""
        node = binary("*", group(binary("+", "a", "b")), unary("-", "c"))
        assert lower(stmt(node)) == [
            "_t0 = a + b",
            "_t1 = neg c",
            "_t2 = _t0 * _t1",
        ]

    def test_not(self):
        """Logical not lowers to a not quad."""
        assert lower(stmt(unary("!", "done"))) == ["_t0 = not done"]

    def test_assignment(self):
        """Assignment copies the value into the target name."""
        assert lower(stmt(assign("x", binary("-", "x", 1)))) == ["_t0 = x - 1", "x = _t0"]

    def test_chained_assignment(self):
        """An assignment's place is its target."""
        assert lower(stmt(assign("a", assign("b", 1)))) == ["b = 1", "a = b"]

    def test_call(self):
        """Calls push one param per argument, then call."""
        assert lower(let("r", call("f", 1, binary("*", "x", 2)))) == [
            "_t0 = x * 2",
            "param 1",
            "param _t0",
            "_t1 = call f, 2",
            "r = _t1",
        ]

    def test_parenthesized_target(self):
        """(x) = value copies into x."""
        assert lower(stmt(assign(group(group("x")), binary("+", "y", 1)))) == [
            "_t0 = y + 1",
            "x = _t0",
        ]

    def test_parenthesized_callee(self):
        """(f)(1) calls f."""
        assert lower(let("r", call(group("f"), 1))) == [
            "param 1",
            "_t0 = call f, 1",
            "r = _t0",
        ]

    def test_target_not_a_name(self):
        """A non-name target cannot be lowered."""
        with pytest.raises(InternalCompilerError):
            lower(stmt(assign(group(1), 2)))

    def test_call_without_arguments(self):
        """A call with no arguments has count 0."""
        assert lower(stmt(call("tick"))) == ["_t0 = call tick, 0"]

    def test_lowers_unchecked_tree(self):
        """Semantically invalid trees are still lowered."""
        assert lower(stmt(binary("+", "ghost", True))) == ["_t0 = ghost + true"]


class TestIf:
    """Tests for if lowering."""

    def test_if_else_shape(self):
        """if/else lowers to exactly six quads."""
        tree = if_("c", block(assign("a", 1)), block(assign("a", 2)))
        assert lower(tree) == [
            "if_false c goto _L1",
            "a = 1",
            "goto _L0",
            "_L1:",
            "a = 2",
            "_L0:",
        ]

    def test_if_without_else(self):
        """Without else the false branch jumps to the end label."""
        assert lower(if_("c", block(assign("a", 1)))) == [
            "if_false c goto _L0",
            "a = 1",
            "_L0:",
        ]

    def test_condition_lowered_first(self):
        """A computed condition is evaluated before the branch."""
        assert lower(if_(binary("<", "a", "b"), block()))[:2] == [
            "_t0 = a < b",
            "if_false _t0 goto _L0",
        ]


class TestLoops:
    """Tests for while and for lowering."""

    def test_while_shape(self):
        """The condition is re-evaluated at the loop start."""
        tree = while_(binary("<", "i", 10), block(assign("i", binary("+", "i", 1))))
        assert lower(tree) == [
            "_L0:",
            "_t0 = i < 10",
            "if_false _t0 goto _L1",
            "_t1 = i + 1",
            "i = _t1",
            "goto _L0",
            "_L1:",
        ]

    def test_break_targets_loop_end(self):
        """break jumps to the label right after the loop body."""
        tree = while_("c", block(assign("x", 1), brk(), assign("x", 2)))
        quads = IRGenerator().generate(program(tree))
        rendered = [q.render() for q in quads]
        assert rendered == [
            "_L0:",
            "if_false c goto _L1",
            "x = 1",
            "goto _L1",
            "x = 2",
            "goto _L0",
            "_L1:",
        ]
        assert quads[3].result == labels(quads)[-1]

    def test_continue_targets_loop_start(self):
        """In a while loop continue jumps back to the condition."""
        assert lower(while_("c", block(cont())))[2] == "goto _L0"

    def test_nested_break(self):
        """break leaves only the innermost loop."""
        tree = while_("a", block(while_("b", block(brk())), brk()))
        assert lower(tree) == [
            "_L0:",
            "if_false a goto _L1",
            "_L2:",
            "if_false b goto _L3",
            "goto _L3",
            "goto _L2",
            "_L3:",
            "goto _L1",
            "goto _L0",
            "_L1:",
        ]

    def test_for_shape(self):
        """for lowers init, test, body, continue label, increment, back edge."""
        tree = for_(
            let("i", 0, "int"),
            binary("<", "i", 3),
            assign("i", binary("+", "i", 1)),
            block(cont()),
        )
        assert lower(tree) == [
            "i = 0",
            "_L0:",
            "_t0 = i < 3",
            "if_false _t0 goto _L1",
            "goto _L2",
            "_L2:",
            "_t1 = i + 1",
            "i = _t1",
            "goto _L0",
            "_L1:",
        ]

    def test_for_without_condition(self):
        """An absent condition loops until break."""
        assert lower(for_(body=block(brk()))) == [
            "_L0:",
            "goto _L1",
            "_L2:",
            "goto _L0",
            "_L1:",
        ]

    def test_break_outside_loop(self):
        """break with no enclosing loop is an internal error."""
        with pytest.raises(InternalCompilerError):
            lower(brk())

    def test_continue_outside_loop(self):
        """continue with no enclosing loop is an internal error."""
        with pytest.raises(InternalCompilerError):
            lower(cont())


class TestDeclarations:
    """Tests for functions, globals and returns."""

    def test_function(self):
        """Functions are bracketed by begin/end markers."""
        f = function("add", [("a", "int"), ("b", "int")], "int", [ret(binary("+", "a", "b"))])
        assert lower(f) == [
            "func_begin add",
            "_t0 = a + b",
            "return _t0",
            "func_end add",
        ]

    def test_prototype_emits_nothing(self):
        """Prototypes have no code."""
        assert lower(function("f", [("a", "int")], "int")) == []

    def test_bare_return(self):
        """return without a value has an empty operand."""
        assert lower(function("f", [], None, [ret()])) == [
            "func_begin f",
            "return",
            "func_end f",
        ]

    def test_globals(self):
        """Only globals with an initializer emit code."""
        assert lower(global_var("a", "int"), global_var("b", "int", 7)) == ["b = 7"]


class TestNaming:
    """Tests for temporary and label numbering."""

    PROGRAM = program(
        while_(binary("<", "i", 3), block(if_("c", block(brk()), block(cont())))),
        stmt(binary("+", binary("*", "a", "b"), "c")),
    )

    def test_counters_reset_between_runs(self):
        """Two runs over the same tree produce identical output."""
        generator = IRGenerator()
        first = generator.generate(self.PROGRAM)
        second = generator.generate(self.PROGRAM)
        assert first == second
        assert first[0].result == "_L0"

    def test_names_unique_within_run(self):
        """No temporary is assigned twice and no label is defined twice."""
        quads = IRGenerator().generate(self.PROGRAM)
        temps = [q.result for q in quads if q.result.startswith("_t")]
        assert len(temps) == len(set(temps))
        defined = labels(quads)
        assert len(defined) == len(set(defined))

    def test_every_jump_target_is_defined(self):
        """Each jump refers to a label emitted in the same run."""
        quads = IRGenerator().generate(self.PROGRAM)
        assert set(jump_targets(quads)) <= set(labels(quads))

    def test_returns_new_list(self):
        """generate() hands back a list the caller owns."""
        generator = IRGenerator()
        quads = generator.generate(self.PROGRAM)
        quads.clear()
        assert generator.quads


class TestNestingLimit:
    """Tests for the nesting depth guard."""

    def test_limit_exceeded(self):
        """Deep trees raise NestingDepthError instead of RecursionError."""
        node = expr(1)
        for _ in range(10):
            node = group(node)
        with pytest.raises(NestingDepthError):
            IRGenerator(max_nesting_depth=5).generate(program(stmt(node)))

    def test_generator_usable_after_limit(self):
        """A failed run does not poison the next one."""
        node = expr(1)
        for _ in range(10):
            node = group(node)
        generator = IRGenerator(max_nesting_depth=5)
        with pytest.raises(NestingDepthError):
            generator.generate(program(stmt(node)))
        assert [q.render() for q in generator.generate(program(let("x", 1)))] == ["x = 1"]
