"""Reads in-memory LLVM functions into the lifter's IR model.

Works on modules loaded or built with the ``llvm`` bindings. Unnamed values
receive the slot numbers LLVM prints for them (``%0``, ``%1``, ...), so
lifted identifiers line up with the textual IR. Terminators are skipped;
they belong to control flow structuring, not instruction translation.
"""

from __future__ import annotations

import logging

import llvm

from ll2go.errors import InvalidPredicate, UnimplementedOpcode
from ll2go.ir import (
    PTR, VOID, AllocaInst, Argument, BinaryInst, Block, CallInst, CastInst,
    FCmpInst, FloatConstant, FloatPredicate, Function, GetElementPtrInst,
    GlobalRef, ICmpInst, Instruction, IntConstant, IntPredicate, LoadInst,
    Opcode, OtherConstant, PhiInst, SelectInst, StoreInst, Type, TypeKind,
    BINARY_OPCODES, BITWISE_OPCODES, CONVERSION_OPCODES,
)

logger = logging.getLogger(__name__)

_OPCODES = {op.value: op for op in Opcode}

_FLOAT_KIND_WIDTHS = {
    "Half": 16, "BFloat": 16, "Float": 32, "Double": 64,
    "X86_FP80": 80, "FP128": 128, "PPC_FP128": 128,
}

_OTHER_KINDS = {
    "Struct": TypeKind.STRUCT,
    "Vector": TypeKind.VECTOR,
    "ScalableVector": TypeKind.VECTOR,
    "Label": TypeKind.LABEL,
}


def convert_type(ty) -> Type:
    """Convert an ``llvm.Type`` into an IR model type."""
    kind = ty.kind
    if kind == llvm.TypeKind.Integer:
        return Type.integer(ty.int_width)
    if kind == llvm.TypeKind.Pointer:
        return PTR
    if kind == llvm.TypeKind.Void:
        return VOID
    if kind == llvm.TypeKind.Array:
        return Type(TypeKind.ARRAY)
    width = _FLOAT_KIND_WIDTHS.get(kind.name)
    if width is not None:
        return Type.floating(width)
    return Type(_OTHER_KINDS.get(kind.name, TypeKind.OTHER))


def convert_opcode(opcode) -> Opcode:
    """Map an ``llvm.Opcode`` onto the closed opcode set."""
    name = opcode.name.lower()
    if name not in _OPCODES:
        raise UnimplementedOpcode(name)
    return _OPCODES[name]


def convert_int_predicate(pred) -> IntPredicate:
    try:
        return IntPredicate(pred.name.lower())
    except ValueError:
        raise InvalidPredicate(pred, "integer") from None


def convert_float_predicate(pred) -> FloatPredicate:
    # LLVMRealOEQ ... LLVMRealPredicateFalse, LLVMRealPredicateTrue
    name = pred.name.lower()
    for prefix in ("realpredicate", "predicate", "real"):
        if name.startswith(prefix):
            name = name[len(prefix):]
            break
    try:
        return FloatPredicate(name)
    except ValueError:
        raise InvalidPredicate(pred, "floating-point") from None


def _flag(value, attr: str) -> bool:
    """Read a boolean property that not every value kind exposes."""
    try:
        return bool(getattr(value, attr))
    except (AttributeError, RuntimeError):
        return False


def _signed(value: int, width: int) -> int:
    if width > 1 and value >= 1 << (width - 1):
        return value - (1 << width)
    return value


class _FunctionReader:
    """Converts one ``llvm.Function``; values are keyed by ``hash(value)``."""

    def __init__(self, func):
        self.func = func
        self.args: dict[int, Argument] = {}
        self.names: dict[int, str] = {}  # hash(inst or block) -> IR name
        self.pending: dict[int, object] = {}  # hash(inst) -> llvm instruction
        self.converted: dict[int, Instruction] = {}

    def read(self) -> Function:
        slot = 0
        params: list[Argument] = []
        for i in range(self.func.function_type.param_count):
            param = self.func.get_param(i)
            name = param.name
            if not name:
                name, slot = str(slot), slot + 1
            arg = Argument(name, convert_type(param.type))
            self.args[hash(param)] = arg
            params.append(arg)

        llvm_blocks = list(self.func.basic_blocks)
        for bb in llvm_blocks:
            name = bb.name
            if not name:
                name, slot = str(slot), slot + 1
            self.names[hash(bb)] = name
            for inst in bb.instructions:
                if inst.is_terminator:
                    continue
                name = inst.name
                if not name and inst.type.kind != llvm.TypeKind.Void:
                    name, slot = str(slot), slot + 1
                self.names[hash(inst)] = name
                self.pending[hash(inst)] = inst

        blocks = []
        for bb in llvm_blocks:
            insts = [self.instruction(inst) for inst in bb.instructions
                     if not inst.is_terminator]
            blocks.append(Block(self.names[hash(bb)], insts))
        return Function(self.func.name, params, blocks)

    # --- Operands ---

    def value(self, v):
        h = hash(v)
        if h in self.args:
            return self.args[h]
        if h in self.pending:
            return self.instruction(self.pending[h])
        ty = convert_type(v.type)
        if _flag(v, "is_constant_int"):
            return IntConstant(ty, _signed(v.const_zext_value, ty.width))
        if _flag(v, "is_global_value"):
            return GlobalRef(v.name, ty)
        if ty.is_float and _flag(v, "is_constant"):
            return FloatConstant(ty, v.const_real_value)
        if _flag(v, "is_constant"):
            return OtherConstant(ty, "constant")
        raise TypeError(f"operand of {self.func.name} is not a value of the function: {v!r}")

    # --- Instructions ---

    def instruction(self, inst) -> Instruction:
        h = hash(inst)
        if h in self.converted:
            return self.converted[h]
        opcode = convert_opcode(inst.opcode)
        name = self.names[h]
        ty = convert_type(inst.type)

        if opcode == Opcode.PHI:
            # Registered before its incoming values: loop-carried values refer back to it.
            phi = PhiInst(name=name, type=ty)
            self.converted[h] = phi
            for i in range(inst.num_incoming):
                block = self.names[hash(inst.get_incoming_block(i))]
                phi.add_incoming(self.value(inst.get_incoming_value(i)), block)
            return phi

        ops = [self.value(inst.get_operand(i)) for i in range(inst.num_operands)]
        result = self._build(inst, opcode, name, ty, ops)
        self.converted[h] = result
        return result

    def _build(self, inst, opcode: Opcode, name: str, ty: Type, ops: list) -> Instruction:
        if opcode in BINARY_OPCODES or opcode in BITWISE_OPCODES:
            return BinaryInst(opcode=opcode, name=name, type=ty, x=ops[0], y=ops[1])
        if opcode in CONVERSION_OPCODES:
            return CastInst(opcode=opcode, name=name, type=ty, src=ops[0])
        if opcode == Opcode.ICMP:
            return ICmpInst(name=name, pred=convert_int_predicate(inst.icmp_predicate),
                            x=ops[0], y=ops[1])
        if opcode == Opcode.FCMP:
            return FCmpInst(name=name, pred=convert_float_predicate(inst.fcmp_predicate),
                            x=ops[0], y=ops[1])
        if opcode == Opcode.ALLOCA:
            return AllocaInst(name=name, allocated_type=convert_type(inst.allocated_type))
        if opcode == Opcode.LOAD:
            return LoadInst(name=name, type=ty, src=ops[0])
        if opcode == Opcode.STORE:
            return StoreInst(src=ops[0], dst=ops[1])
        if opcode == Opcode.GETELEMENTPTR:
            return GetElementPtrInst(
                name=name, element_type=convert_type(inst.gep_source_element_type),
                src=ops[0], indices=tuple(ops[1:]),
            )
        if opcode == Opcode.SELECT:
            return SelectInst(name=name, type=ty, cond=ops[0], x=ops[1], y=ops[2])
        if opcode == Opcode.CALL:
            args = tuple(self.value(inst.get_arg_operand(i))
                         for i in range(inst.num_arg_operands))
            return CallInst(name=name, type=ty, callee=self.value(inst.called_value), args=args)
        raise UnimplementedOpcode(opcode)


def read_function(func) -> Function:
    """Convert one defined ``llvm.Function`` into an IR model function."""
    if func.is_declaration:
        raise ValueError(f"cannot read declaration {func.name}")
    result = _FunctionReader(func).read()
    logger.debug("read %s: %d block(s)", result.name, len(result.blocks))
    return result


def read_module(mod) -> list[Function]:
    """Convert every function defined in ``mod``; declarations are skipped."""
    return [read_function(func) for func in mod.functions if not func.is_declaration]
