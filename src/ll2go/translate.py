"""Instruction selection: IR instructions to Go statements.

Each value-producing instruction becomes one ``name := expr`` statement.
Dispatch goes through a table keyed by every ``Opcode``; the table is
checked for completeness when this module is imported, so adding an opcode
without deciding how it is translated fails immediately.

Supports binary arithmetic, bitwise operations and integer/floating-point
comparisons. Memory, conversion, select and call instructions raise
UnimplementedOpcode. Phi nodes must be lowered by the caller beforehand
(see ``ll2go.utils.ir_helpers.lower_phis``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable

from ll2go.errors import ContractViolation, UnimplementedOpcode
from ll2go.goast import AssignStmt, BinaryExpr, Stmt, Token, define
from ll2go.ir import (
    CONVERSION_OPCODES, MEMORY_OPCODES, FCmpInst, ICmpInst, Instruction,
    Opcode, Value,
)
from ll2go.naming import Namer
from ll2go.predicates import float_pred, int_pred
from ll2go.values import ValueResolver

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Operator table
# ---------------------------------------------------------------------------

# TODO: Differentiate unsigned from signed division/remainder, and logical
# shift right from arithmetic shift right, in a type-aware lowering pass.
BINARY_TOKENS: dict[Opcode, Token] = {
    Opcode.ADD: Token.ADD,
    Opcode.FADD: Token.ADD,
    Opcode.SUB: Token.SUB,
    Opcode.FSUB: Token.SUB,
    Opcode.MUL: Token.MUL,
    Opcode.FMUL: Token.MUL,
    Opcode.UDIV: Token.QUO,
    Opcode.SDIV: Token.QUO,
    Opcode.FDIV: Token.QUO,
    Opcode.UREM: Token.REM,
    Opcode.SREM: Token.REM,
    Opcode.FREM: Token.REM,
    Opcode.SHL: Token.SHL,
    Opcode.LSHR: Token.SHR,
    Opcode.ASHR: Token.SHR,
    Opcode.AND: Token.AND,
    Opcode.OR: Token.OR,
    Opcode.XOR: Token.XOR,
}

UNIMPLEMENTED_OPCODES = frozenset(
    MEMORY_OPCODES | CONVERSION_OPCODES | {Opcode.SELECT, Opcode.CALL}
)


# ---------------------------------------------------------------------------
# Known information loss
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SemanticGap:
    """IR semantics the emitted Go operator does not preserve."""
    name: str
    constructs: tuple[str, ...]
    description: str


SEMANTIC_GAPS: tuple[SemanticGap, ...] = (
    SemanticGap(
        name="signedness",
        constructs=("udiv", "sdiv", "urem", "srem",
                    "icmp ugt", "icmp uge", "icmp ult", "icmp ule",
                    "icmp sgt", "icmp sge", "icmp slt", "icmp sle"),
        description="unsigned and signed forms emit the same operator; "
                    "operands keep whatever Go type they already have",
    ),
    SemanticGap(
        name="orderedness",
        constructs=("fcmp oeq", "fcmp ogt", "fcmp oge", "fcmp olt", "fcmp ole",
                    "fcmp one", "fcmp ueq", "fcmp ugt", "fcmp uge",
                    "fcmp ult", "fcmp ule", "fcmp une"),
        description="ordered and unordered comparisons emit the same operator; "
                    "the result for NaN operands follows Go, not the predicate",
    ),
    SemanticGap(
        name="shift-kind",
        constructs=("lshr", "ashr"),
        description="logical and arithmetic shift right both emit >>; which one "
                    "Go performs depends on the operand's signedness",
    ),
    SemanticGap(
        name="result-width",
        constructs=tuple(op.value for op in BINARY_TOKENS),
        description="the instruction's result type is not consulted; wrap-around "
                    "and truncation at the IR bit width are not reproduced",
    ),
)


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

_TRANSLATORS: dict[Opcode, str] = {}  # opcode -> InstructionTranslator method name


def translates(*opcodes: Opcode) -> Callable:
    """Register the decorated method as the translator for ``opcodes``."""
    def register(method: Callable) -> Callable:
        for op in opcodes:
            if op in _TRANSLATORS:
                raise ValueError(f"duplicate translator for {op.value}")
            _TRANSLATORS[op] = method.__name__
        return method
    return register


class InstructionTranslator:
    """Translates IR instructions, one at a time, into Go statements.

    Holds no state between calls apart from the naming service, so
    instructions may be translated in any order.
    """

    def __init__(self, namer: Namer | None = None):
        self.values = ValueResolver(namer)

    @property
    def namer(self) -> Namer:
        return self.values.namer

    def insts(self, insts: Iterable[Instruction]) -> list[Stmt]:
        """Translate a block's instructions in order, skipping phi nodes.

        Phi nodes are lowered before translation, by the caller.
        """
        stmts: list[Stmt] = []
        for inst in insts:
            if inst.opcode == Opcode.PHI:
                logger.debug("skipping phi %%%s", inst.name)
                continue
            stmts.append(self.inst(inst))
        return stmts

    def inst(self, inst: Instruction) -> Stmt:
        """Translate a single non-phi instruction."""
        method = _TRANSLATORS.get(inst.opcode)
        if method is None:
            raise UnimplementedOpcode(inst.opcode)
        return getattr(self, method)(inst)

    def binary_op(self, result: Value, x: Value, op: Token, y: Value) -> AssignStmt:
        """Build ``result := x op y``."""
        # TODO: Handle the result type (wrap-around at the IR bit width).
        expr = BinaryExpr(x=self.values.value(x), op=op, y=self.values.value(y))
        return define(self.namer.identifier_for(result), expr)

    # --- Binary and bitwise ---

    @translates(*BINARY_TOKENS)
    def _binary(self, inst) -> Stmt:
        return self.binary_op(inst, inst.x, BINARY_TOKENS[inst.opcode], inst.y)

    # --- Comparisons ---

    @translates(Opcode.ICMP)
    def _icmp(self, inst: ICmpInst) -> Stmt:
        return self.binary_op(inst, inst.x, int_pred(inst.pred), inst.y)

    @translates(Opcode.FCMP)
    def _fcmp(self, inst: FCmpInst) -> Stmt:
        return self.binary_op(inst, inst.x, float_pred(inst.pred), inst.y)

    # --- Phi ---

    @translates(Opcode.PHI)
    def _phi(self, inst) -> Stmt:
        raise ContractViolation(
            f"unexpected phi instruction %{inst.name}; phi nodes must be "
            f"lowered before translation"
        )

    # --- Not yet implemented ---

    @translates(*sorted(UNIMPLEMENTED_OPCODES, key=lambda op: op.value))
    def _unimplemented(self, inst) -> Stmt:
        raise UnimplementedOpcode(inst.opcode)


_missing = [op.value for op in Opcode if op not in _TRANSLATORS]
if _missing:
    raise RuntimeError(f"no translator registered for opcodes: {', '.join(_missing)}")
