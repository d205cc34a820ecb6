"""LLVM IR to Go instruction lifter.

Translates the instructions of SSA-form LLVM IR, one at a time, into Go
assignment statements. Phi nodes are lowered to merge variables before
translation; control flow structuring and source printing are left to the
caller.
"""

from ll2go.errors import (
    ContractViolation, InvalidPredicate, LiftError, UnimplementedConstant,
    UnimplementedOpcode, UnimplementedPredicate, UnimplementedType,
)
from ll2go.lift import LiftedFunction, lift_function
from ll2go.naming import LocalNamer, Namer
from ll2go.predicates import float_pred, int_pred
from ll2go.translate import (
    SEMANTIC_GAPS, UNIMPLEMENTED_OPCODES, InstructionTranslator, SemanticGap,
)
from ll2go.values import ValueResolver

__all__ = [
    "ContractViolation", "InvalidPredicate", "LiftError", "UnimplementedConstant",
    "UnimplementedOpcode", "UnimplementedPredicate", "UnimplementedType",
    "LiftedFunction", "lift_function",
    "LocalNamer", "Namer",
    "float_pred", "int_pred",
    "SEMANTIC_GAPS", "UNIMPLEMENTED_OPCODES", "InstructionTranslator", "SemanticGap",
    "ValueResolver",
]
