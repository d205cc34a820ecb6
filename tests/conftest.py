"""Shared test fixtures and IR builders."""

import pytest

from ll2go.ir import (
    I32, PTR, AllocaInst, Argument, BinaryInst, Block, CallInst, CastInst,
    FCmpInst, FloatPredicate, Function, GetElementPtrInst, GlobalRef, ICmpInst,
    IntConstant, IntPredicate, LoadInst, Opcode, PhiInst, SelectInst,
    StoreInst, Type, BINARY_OPCODES, BITWISE_OPCODES, CONVERSION_OPCODES,
    DOUBLE, I1, I64,
)
from ll2go.naming import LocalNamer
from ll2go.translate import InstructionTranslator
from ll2go.values import ValueResolver


@pytest.fixture
def namer():
    return LocalNamer()


@pytest.fixture
def translator(namer):
    """Provide a translator with a fresh default naming policy."""
    return InstructionTranslator(namer)


@pytest.fixture
def resolver(namer):
    return ValueResolver(namer)


def const(value: int, ty: Type = I32) -> IntConstant:
    return IntConstant(ty, value)


def make_instruction(opcode: Opcode, name: str = "1"):
    """Build a well-formed instruction of any opcode, operands are i32 args."""
    a = Argument("a", I32)
    b = Argument("b", I32)
    if opcode in BINARY_OPCODES or opcode in BITWISE_OPCODES:
        return BinaryInst(opcode=opcode, name=name, type=I32, x=a, y=b)
    if opcode in CONVERSION_OPCODES:
        return CastInst(opcode=opcode, name=name, type=I64, src=a)
    if opcode == Opcode.ICMP:
        return ICmpInst(name=name, pred=IntPredicate.EQ, x=a, y=b)
    if opcode == Opcode.FCMP:
        p = Argument("p", DOUBLE)
        q = Argument("q", DOUBLE)
        return FCmpInst(name=name, pred=FloatPredicate.OLT, x=p, y=q)
    if opcode == Opcode.ALLOCA:
        return AllocaInst(name=name, allocated_type=I32)
    if opcode == Opcode.LOAD:
        return LoadInst(name=name, type=I32, src=Argument("ptr", PTR))
    if opcode == Opcode.STORE:
        return StoreInst(src=a, dst=Argument("ptr", PTR))
    if opcode == Opcode.GETELEMENTPTR:
        return GetElementPtrInst(name=name, element_type=I32,
                                 src=Argument("ptr", PTR), indices=(b,))
    if opcode == Opcode.PHI:
        return PhiInst(name=name, type=I32, incoming=[(a, "left"), (b, "right")])
    if opcode == Opcode.SELECT:
        return SelectInst(name=name, type=I32, cond=Argument("c", I1), x=a, y=b)
    if opcode == Opcode.CALL:
        return CallInst(name=name, type=I32, callee=GlobalRef("f"), args=(a, b))
    raise AssertionError(f"no builder for {opcode}")


def make_diamond_function() -> Function:
    """if (a > b) r = a + b else r = a - b; return r"""
    a = Argument("a", I32)
    b = Argument("b", I32)
    cond = ICmpInst(name="cond", pred=IntPredicate.SGT, x=a, y=b)
    val_true = BinaryInst(opcode=Opcode.ADD, name="val_true", type=I32, x=a, y=b)
    val_false = BinaryInst(opcode=Opcode.SUB, name="val_false", type=I32, x=a, y=b)
    result = PhiInst(name="result", type=I32)
    result.add_incoming(val_true, "if_true")
    result.add_incoming(val_false, "if_false")
    doubled = BinaryInst(opcode=Opcode.SHL, name="doubled", type=I32, x=result, y=const(1))
    return Function("branch_func", [a, b], [
        Block("entry", [cond]),
        Block("if_true", [val_true]),
        Block("if_false", [val_false]),
        Block("merge", [result, doubled]),
    ])


def make_loop_function() -> Function:
    """sum 1..n with loop-carried phis."""
    n = Argument("n", I32)
    i = PhiInst(name="i", type=I32)
    total = PhiInst(name="sum", type=I32)
    new_sum = BinaryInst(opcode=Opcode.ADD, name="new_sum", type=I32, x=total, y=i)
    new_i = BinaryInst(opcode=Opcode.ADD, name="new_i", type=I32, x=i, y=const(1))
    loop_cond = ICmpInst(name="loop_cond", pred=IntPredicate.SLE, x=new_i, y=n)
    i.add_incoming(const(1), "entry")
    i.add_incoming(new_i, "loop")
    total.add_incoming(const(0), "entry")
    total.add_incoming(new_sum, "loop")
    return Function("sum_to_n", [n], [
        Block("entry", []),
        Block("loop", [i, total, new_sum, new_i, loop_cond]),
        Block("exit", []),
    ])
