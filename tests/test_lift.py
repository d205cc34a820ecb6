"""Tests for phi lowering and function-level lifting."""

import operator

import pytest

from conftest import const, make_diamond_function, make_loop_function
from ll2go.errors import UnimplementedOpcode, UnimplementedType
from ll2go.goast import BasicLit, DeclStmt, Ident, Token, UnaryExpr
from ll2go.ir import (
    DOUBLE, FLOAT, I1, I8, I32, PTR, AllocaInst, Argument, BinaryInst, Block,
    Function, ICmpInst, IntPredicate, Opcode, PhiInst, Type,
)
from ll2go.lift import lift_function
from ll2go.naming import LocalNamer
from ll2go.utils.ir_helpers import collect_phis, go_type, lower_phis, split_phis


def _render(stmts):
    return [str(s) for s in stmts]


_OPS = {
    Token.ADD: operator.add,
    Token.SUB: operator.sub,
    Token.MUL: operator.mul,
    Token.SHL: operator.lshift,
    Token.LSS: operator.lt,
    Token.GTR: operator.gt,
    Token.LEQ: operator.le,
}


def _eval(expr, env):
    if isinstance(expr, Ident):
        return env[expr.name]
    if isinstance(expr, BasicLit):
        return int(expr.value)
    if isinstance(expr, UnaryExpr):
        return -_eval(expr.x, env)
    return _OPS[expr.op](_eval(expr.x, env), _eval(expr.y, env))


def _run(lifted, path, **args):
    """Execute the lifted blocks along ``path`` and return the variables."""
    env = dict(args)
    for name in path:
        for stmt in lifted.blocks[name]:
            env[stmt.lhs[0].name] = _eval(stmt.rhs[0], env)
    return env


def _assert_single_definition(lifted):
    """Every ``:=`` name is defined once and never reassigned."""
    defined, assigned = [], set()
    for stmts in lifted.blocks.values():
        for stmt in stmts:
            name = stmt.lhs[0].name
            if stmt.tok is Token.DEFINE:
                defined.append(name)
            else:
                assigned.add(name)
    assert len(defined) == len(set(defined))
    assert not assigned & set(defined)
    assert assigned <= {str(d.name) for d in lifted.decls}


def make_exit_phi_function() -> Function:
    """Loop exiting from its latch; the exit reads %i through a phi and directly."""
    n = Argument("n", I32)
    i = PhiInst(name="i", type=I32)
    inext = BinaryInst(opcode=Opcode.ADD, name="inext", type=I32, x=i, y=const(1))
    c = ICmpInst(name="c", pred=IntPredicate.SLT, x=inext, y=n)
    i.add_incoming(const(0), "entry")
    i.add_incoming(inext, "loop")
    r = PhiInst(name="r", type=I32)
    r.add_incoming(i, "loop")
    out = BinaryInst(opcode=Opcode.MUL, name="out", type=I32, x=i, y=const(2))
    return Function("count", [n], [
        Block("entry", []),
        Block("loop", [i, inext, c]),
        Block("exit", [r, out]),
    ])


def make_swap_function(*params: Argument) -> Function:
    """a, b = b, a on every trip around the loop."""
    a = PhiInst(name="a", type=I32)
    b = PhiInst(name="b", type=I32)
    a.add_incoming(const(0), "entry")
    a.add_incoming(b, "loop")
    b.add_incoming(const(1), "entry")
    b.add_incoming(a, "loop")
    return Function("swap", list(params), [Block("entry", []), Block("loop", [a, b])])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("ty, name", [
    (I1, "bool"), (I8, "int8"), (I32, "int32"), (Type.integer(64), "int64"),
    (FLOAT, "float32"), (DOUBLE, "float64"),
])
def test_go_type(ty, name):
    assert go_type(ty) == Ident(name)


@pytest.mark.parametrize("ty", [PTR, Type.integer(128), Type.floating(80)])
def test_go_type_unimplemented(ty):
    with pytest.raises(UnimplementedType):
        go_type(ty)


def test_split_phis():
    func = make_loop_function()
    phis, rest = split_phis(func.get_block("loop"))
    assert [p.name for p in phis] == ["i", "sum"]
    assert [i.name for i in rest] == ["new_sum", "new_i", "loop_cond"]


def test_collect_phis():
    assert [p.name for p in collect_phis(make_diamond_function())] == ["result"]
    assert [p.name for p in collect_phis(make_loop_function())] == ["i", "sum"]


# ---------------------------------------------------------------------------
# Phi lowering
# ---------------------------------------------------------------------------


def test_lower_phis_diamond(resolver):
    lowering = lower_phis(make_diamond_function(), resolver)
    assert lowering.decls == [DeclStmt(Ident("result_phi"), Ident("int32"))]
    assert _render(lowering.heads["merge"]) == ["result := result_phi"]
    assert {k: _render(v) for k, v in lowering.copies.items()} == {
        "if_true": ["result_phi = val_true"],
        "if_false": ["result_phi = val_false"],
    }


def test_lower_phis_loop(resolver):
    lowering = lower_phis(make_loop_function(), resolver)
    assert _render(lowering.decls) == ["var i_phi int32", "var sum_phi int32"]
    assert _render(lowering.heads["loop"]) == ["i := i_phi", "sum := sum_phi"]
    assert _render(lowering.copies["entry"]) == ["i_phi = 1", "sum_phi = 0"]
    assert _render(lowering.copies["loop"]) == ["i_phi = new_i", "sum_phi = new_sum"]


def test_lower_phis_swap_reads_old_values(resolver):
    """Copies read the immutable phi names, so a swap needs no temporaries."""
    lowering = lower_phis(make_swap_function(), resolver)
    assert _render(lowering.copies["entry"]) == ["a_phi = 0", "b_phi = 1"]
    assert _render(lowering.copies["loop"]) == ["a_phi = b", "b_phi = a"]


def test_lower_phis_self_reference_keeps_copy(resolver):
    """Another predecessor may have written the merge variable since."""
    x = PhiInst(name="x", type=I32)
    x.add_incoming(const(0), "entry")
    x.add_incoming(x, "loop")
    func = Function("f", [], [Block("entry", []), Block("loop", [x])])
    lowering = lower_phis(func, resolver)
    assert _render(lowering.copies["loop"]) == ["x_phi = x"]


def test_merge_variable_avoids_ir_names(resolver):
    """A value already named like the merge variable keeps its identifier."""
    taken = Argument("b_phi", I32)
    assert resolver.local(taken) == Ident("b_phi")
    lowering = lower_phis(make_swap_function(taken), resolver)
    assert _render(lowering.decls) == ["var a_phi int32", "var b_phi_1 int32"]
    assert _render(lowering.copies["loop"]) == ["a_phi = b", "b_phi_1 = a"]


def test_lower_phis_without_phis(resolver):
    func = Function("f", [], [Block("entry", [])])
    lowering = lower_phis(func, resolver)
    assert lowering.decls == [] and lowering.heads == {} and lowering.copies == {}


# ---------------------------------------------------------------------------
# Function lifting
# ---------------------------------------------------------------------------


def test_lift_diamond():
    lifted = lift_function(make_diamond_function())
    assert lifted.name == "branch_func"
    assert lifted.params == ["a", "b"]
    assert _render(lifted.decls) == ["var result_phi int32"]
    assert {k: _render(v) for k, v in lifted.blocks.items()} == {
        "entry": ["cond := a > b"],
        "if_true": ["val_true := a + b", "result_phi = val_true"],
        "if_false": ["val_false := a - b", "result_phi = val_false"],
        "merge": ["result := result_phi", "doubled := result << 1"],
    }
    assert list(lifted.blocks) == ["entry", "if_true", "if_false", "merge"]
    assert _run(lifted, ["entry", "if_false", "merge"], a=2, b=5)["doubled"] == -6


def test_lift_loop():
    lifted = lift_function(make_loop_function())
    assert {k: _render(v) for k, v in lifted.blocks.items()} == {
        "entry": ["i_phi = 1", "sum_phi = 0"],
        "loop": [
            "i := i_phi",
            "sum := sum_phi",
            "new_sum := sum + i",
            "new_i := i + 1",
            "loop_cond := new_i <= n",
            "i_phi = new_i",
            "sum_phi = new_sum",
        ],
        "exit": [],
    }
    _assert_single_definition(lifted)
    env = _run(lifted, ["entry", "loop", "loop", "loop", "exit"], n=3)
    assert env["new_sum"] == 6


def test_lift_exit_from_latch_reads_phi_value():
    """Copies for the back edge run before the exit; %i keeps its SSA value."""
    lifted = lift_function(make_exit_phi_function())
    assert _render(lifted.blocks["loop"]) == [
        "i := i_phi", "inext := i + 1", "c := inext < n", "i_phi = inext", "r_phi = i",
    ]
    assert _render(lifted.blocks["exit"]) == ["r := r_phi", "out := i * 2"]
    _assert_single_definition(lifted)

    env = _run(lifted, ["entry", "loop", "loop", "exit"], n=2)
    assert env["c"] is False
    assert env["r"] == env["i"] == 1
    assert env["out"] == 2


def test_lift_swap_loop():
    lifted = lift_function(make_swap_function())
    _assert_single_definition(lifted)
    env = _run(lifted, ["entry", "loop", "loop"])
    assert (env["a"], env["b"]) == (1, 0)
    env = _run(lifted, ["entry", "loop", "loop", "loop"])
    assert (env["a"], env["b"]) == (0, 1)


def test_lift_two_back_edges_define_once():
    """Each latch writes the merge variable; nothing is redefined."""
    x = PhiInst(name="x", type=I32)
    y = PhiInst(name="y", type=I32)
    for phi, init in ((x, 0), (y, 1)):
        phi.add_incoming(const(init), "entry")
    x.add_incoming(y, "left")
    y.add_incoming(x, "left")
    x.add_incoming(y, "right")
    y.add_incoming(x, "right")
    func = Function("f", [], [
        Block("entry", []), Block("head", [x, y]), Block("left", []), Block("right", []),
    ])
    lifted = lift_function(func)
    assert _render(lifted.blocks["left"]) == ["x_phi = y", "y_phi = x"]
    assert _render(lifted.blocks["right"]) == ["x_phi = y", "y_phi = x"]
    _assert_single_definition(lifted)


def test_lift_numbered_values_with_custom_namer():
    a = Argument("0", I32)
    add = BinaryInst(opcode=Opcode.ADD, name="1", type=I32, x=a, y=const(2))
    func = Function("f", [a], [Block("2", [add])])
    lifted = lift_function(func, namer=LocalNamer(temp_prefix="v"))
    assert lifted.params == ["v0"]
    assert _render(lifted.blocks["2"]) == ["v1 := v0 + 2"]


def test_lift_numbered_phi():
    p = PhiInst(name="3", type=I32)
    p.add_incoming(const(7), "0")
    func = Function("f", [], [Block("0", []), Block("1", [p])])
    lifted = lift_function(func)
    assert _render(lifted.decls) == ["var t3_phi int32"]
    assert _render(lifted.blocks["1"]) == ["t3 := t3_phi"]


def test_lift_aborts_on_unimplemented_instruction():
    func = Function("f", [], [Block("entry", [AllocaInst(name="slot", allocated_type=I32)])])
    with pytest.raises(UnimplementedOpcode, match="alloca"):
        lift_function(func)
