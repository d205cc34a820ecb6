"""IR helper functions: phi lowering, phi collection, Go type names."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ll2go.errors import UnimplementedType
from ll2go.goast import DeclStmt, Ident, Stmt, assign, define
from ll2go.ir import (
    Block, Function, Instruction, Opcode, PhiInst, Type, TypeKind,
)
from ll2go.values import ValueResolver

logger = logging.getLogger(__name__)

_GO_INT_TYPES = {1: "bool", 8: "int8", 16: "int16", 32: "int32", 64: "int64"}
_GO_FLOAT_TYPES = {32: "float32", 64: "float64"}


def go_type(ty: Type) -> Ident:
    """Return the Go type for a scalar IR type."""
    if ty.kind == TypeKind.INTEGER and ty.width in _GO_INT_TYPES:
        return Ident(_GO_INT_TYPES[ty.width])
    if ty.kind == TypeKind.FLOAT and ty.width in _GO_FLOAT_TYPES:
        return Ident(_GO_FLOAT_TYPES[ty.width])
    raise UnimplementedType(ty)


def split_phis(bb: Block) -> tuple[list[PhiInst], list[Instruction]]:
    """Split a block into its leading phi nodes and the remaining instructions."""
    phis: list[PhiInst] = []
    insts = list(bb.instructions)
    for inst in insts:
        if inst.opcode != Opcode.PHI:
            break
        phis.append(inst)
    return phis, insts[len(phis):]


def collect_phis(func: Function) -> list[PhiInst]:
    """Collect all phi nodes in a function, in block order."""
    return [inst for bb in func.blocks for inst in bb.instructions
            if inst.opcode == Opcode.PHI]


@dataclass
class PhiLowering:
    """Phi nodes rewritten as merge variables.

    ``decls`` declares one merge variable per phi (at function scope).
    ``heads`` maps a block name to the statements that bind its phis, to run
    first in that block. ``copies`` maps a predecessor block name to the
    merge variable writes to run at the end of that block, before its
    terminator.
    """
    decls: list[Stmt] = field(default_factory=list)
    heads: dict[str, list[Stmt]] = field(default_factory=dict)
    copies: dict[str, list[Stmt]] = field(default_factory=dict)


def lower_phis(func: Function, resolver: ValueResolver) -> PhiLowering:
    """Lower every phi node in ``func`` to a merge variable.

    For each phi ``%x``:
    1. Declare ``var x_phi T`` at function scope
    2. Assign each incoming value to ``x_phi`` at the end of its
       predecessor block
    3. Bind ``x := x_phi`` at the top of the phi's block

    ``x`` is defined once and never reassigned, so uses of the phi keep its
    SSA value after the predecessor copies run, whichever successor is
    taken. Copies only write merge variables and only read SSA names, so the
    copies of one predecessor may run in any order.
    """
    lowering = PhiLowering()
    for bb in func.blocks:
        phis, _ = split_phis(bb)
        if not phis:
            continue
        head = lowering.heads.setdefault(bb.name, [])
        for phi in phis:
            ident = resolver.local(phi)
            merge = Ident(resolver.namer.fresh(f"{ident.name}_phi"))
            lowering.decls.append(DeclStmt(merge, go_type(phi.type)))
            head.append(define(ident.name, merge))
            for value, pred in phi.incoming:
                lowering.copies.setdefault(pred, []).append(
                    assign(merge.name, resolver.value(value))
                )
        logger.debug("lowered %d phi(s) in block %s of %s", len(phis), bb.name, func.name)
    return lowering
