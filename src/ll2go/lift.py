"""Function-level driver: phi lowering plus per-block instruction translation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ll2go.goast import Stmt
from ll2go.ir import Function
from ll2go.naming import LocalNamer, Namer
from ll2go.translate import InstructionTranslator
from ll2go.utils.ir_helpers import lower_phis

logger = logging.getLogger(__name__)


@dataclass
class LiftedFunction:
    """Straight-line Go statements for each basic block of one function.

    ``blocks`` keeps the IR block order. Terminators are not translated;
    structuring the blocks into Go control flow is up to the caller.
    """
    name: str
    params: list[str] = field(default_factory=list)
    decls: list[Stmt] = field(default_factory=list)
    blocks: dict[str, list[Stmt]] = field(default_factory=dict)


def lift_function(func: Function, namer: Namer | None = None) -> LiftedFunction:
    """Lift every block of ``func`` to Go statements.

    Phi nodes are lowered to merge variables first. Each block starts by
    binding its phis, and ends with the merge variable writes for its
    successors. Any instruction without a translator aborts the whole
    function.
    """
    translator = InstructionTranslator(namer or LocalNamer())
    # Parameters are named first so they keep their IR names on collisions.
    params = [translator.namer.identifier_for(p) for p in func.params]
    lowering = lower_phis(func, translator.values)

    lifted = LiftedFunction(name=func.name, params=params, decls=list(lowering.decls))
    for bb in func.blocks:
        stmts = list(lowering.heads.get(bb.name, []))
        stmts.extend(translator.insts(bb.instructions))
        stmts.extend(lowering.copies.get(bb.name, []))
        lifted.blocks[bb.name] = stmts

    logger.debug(
        "lifted %s: %d block(s), %d statement(s), %d merge variable(s)",
        func.name, len(lifted.blocks),
        sum(len(s) for s in lifted.blocks.values()), len(lifted.decls),
    )
    return lifted
