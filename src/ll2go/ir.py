"""IR data model consumed by the lifter.

A small, validated mirror of LLVM IR: a closed opcode set, the integer and
floating-point comparison predicates, types, operand values and one
instruction variant per operand shape. Instances are produced by
``ll2go.utils.llvm_reader`` (or built directly in tests) and are treated as
immutable once a function has been assembled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

# ---------------------------------------------------------------------------
# Opcodes
# ---------------------------------------------------------------------------


class Opcode(str, Enum):
    """Closed set of instruction opcodes; values are the LLVM mnemonics."""
    # Binary
    ADD = "add"
    FADD = "fadd"
    SUB = "sub"
    FSUB = "fsub"
    MUL = "mul"
    FMUL = "fmul"
    UDIV = "udiv"
    SDIV = "sdiv"
    FDIV = "fdiv"
    UREM = "urem"
    SREM = "srem"
    FREM = "frem"
    # Bitwise
    SHL = "shl"
    LSHR = "lshr"
    ASHR = "ashr"
    AND = "and"
    OR = "or"
    XOR = "xor"
    # Memory
    ALLOCA = "alloca"
    LOAD = "load"
    STORE = "store"
    GETELEMENTPTR = "getelementptr"
    # Conversion
    TRUNC = "trunc"
    ZEXT = "zext"
    SEXT = "sext"
    FPTRUNC = "fptrunc"
    FPEXT = "fpext"
    FPTOUI = "fptoui"
    FPTOSI = "fptosi"
    UITOFP = "uitofp"
    SITOFP = "sitofp"
    PTRTOINT = "ptrtoint"
    INTTOPTR = "inttoptr"
    BITCAST = "bitcast"
    ADDRSPACECAST = "addrspacecast"
    # Other
    ICMP = "icmp"
    FCMP = "fcmp"
    PHI = "phi"
    SELECT = "select"
    CALL = "call"


BINARY_OPCODES = frozenset({
    Opcode.ADD, Opcode.FADD, Opcode.SUB, Opcode.FSUB, Opcode.MUL, Opcode.FMUL,
    Opcode.UDIV, Opcode.SDIV, Opcode.FDIV, Opcode.UREM, Opcode.SREM, Opcode.FREM,
})

BITWISE_OPCODES = frozenset({
    Opcode.SHL, Opcode.LSHR, Opcode.ASHR, Opcode.AND, Opcode.OR, Opcode.XOR,
})

MEMORY_OPCODES = frozenset({
    Opcode.ALLOCA, Opcode.LOAD, Opcode.STORE, Opcode.GETELEMENTPTR,
})

CONVERSION_OPCODES = frozenset({
    Opcode.TRUNC, Opcode.ZEXT, Opcode.SEXT, Opcode.FPTRUNC, Opcode.FPEXT,
    Opcode.FPTOUI, Opcode.FPTOSI, Opcode.UITOFP, Opcode.SITOFP,
    Opcode.PTRTOINT, Opcode.INTTOPTR, Opcode.BITCAST, Opcode.ADDRSPACECAST,
})


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class IntPredicate(str, Enum):
    """icmp condition codes."""
    EQ = "eq"
    NE = "ne"
    UGT = "ugt"
    UGE = "uge"
    ULT = "ult"
    ULE = "ule"
    SGT = "sgt"
    SGE = "sge"
    SLT = "slt"
    SLE = "sle"


class FloatPredicate(str, Enum):
    """fcmp condition codes (ordered ``o*`` / unordered ``u*``)."""
    FALSE = "false"
    OEQ = "oeq"
    OGT = "ogt"
    OGE = "oge"
    OLT = "olt"
    OLE = "ole"
    ONE = "one"
    ORD = "ord"
    UEQ = "ueq"
    UGT = "ugt"
    UGE = "uge"
    ULT = "ult"
    ULE = "ule"
    UNE = "une"
    UNO = "uno"
    TRUE = "true"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TypeKind(str, Enum):
    VOID = "void"
    INTEGER = "integer"
    FLOAT = "float"
    POINTER = "pointer"
    ARRAY = "array"
    STRUCT = "struct"
    VECTOR = "vector"
    LABEL = "label"
    OTHER = "other"


_FLOAT_NAMES = {16: "half", 32: "float", 64: "double", 80: "x86_fp80", 128: "fp128"}


@dataclass(frozen=True)
class Type:
    """An IR type. ``width`` is the bit width for integer and float kinds."""
    kind: TypeKind
    width: int = 0

    @classmethod
    def integer(cls, width: int) -> Type:
        return cls(TypeKind.INTEGER, width)

    @classmethod
    def floating(cls, width: int) -> Type:
        return cls(TypeKind.FLOAT, width)

    @property
    def is_integer(self) -> bool:
        return self.kind == TypeKind.INTEGER

    @property
    def is_float(self) -> bool:
        return self.kind == TypeKind.FLOAT

    @property
    def is_void(self) -> bool:
        return self.kind == TypeKind.VOID

    def __str__(self) -> str:
        if self.kind == TypeKind.INTEGER:
            return f"i{self.width}"
        if self.kind == TypeKind.FLOAT:
            return _FLOAT_NAMES.get(self.width, f"f{self.width}")
        if self.kind == TypeKind.POINTER:
            return "ptr"
        return self.kind.value


VOID = Type(TypeKind.VOID)
PTR = Type(TypeKind.POINTER)
I1 = Type.integer(1)
I8 = Type.integer(8)
I32 = Type.integer(32)
I64 = Type.integer(64)
FLOAT = Type.floating(32)
DOUBLE = Type.floating(64)


# ---------------------------------------------------------------------------
# Non-instruction values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Argument:
    """A function parameter."""
    name: str
    type: Type


@dataclass(frozen=True)
class GlobalRef:
    """A reference to a global variable or function."""
    name: str
    type: Type = PTR


@dataclass(frozen=True)
class IntConstant:
    """An integer constant, stored as its signed two's-complement value."""
    type: Type
    value: int


@dataclass(frozen=True)
class FloatConstant:
    type: Type
    value: float


@dataclass(frozen=True)
class OtherConstant:
    """A constant the lifter has no literal form for (null, undef, aggregates)."""
    type: Type
    kind: str


Constant = Union[IntConstant, FloatConstant, OtherConstant]


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class Instruction:
    """Base of all instruction variants.

    Instructions compare by identity: an instruction is also the value of
    its result, and two structurally equal instructions are still distinct
    SSA definitions.
    """
    opcode: Opcode
    name: str = ""
    type: Type = VOID

    @property
    def operands(self) -> tuple[Value, ...]:
        return ()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} %{self.name or '?'} = {self.opcode.value}>"


@dataclass(eq=False, kw_only=True, repr=False)
class BinaryInst(Instruction):
    """Binary arithmetic and bitwise instructions."""
    x: Value
    y: Value

    def __post_init__(self):
        if self.opcode not in BINARY_OPCODES and self.opcode not in BITWISE_OPCODES:
            raise ValueError(f"{self.opcode.value} is not a binary opcode")

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.x, self.y)


@dataclass(eq=False, kw_only=True, repr=False)
class ICmpInst(Instruction):
    opcode: Opcode = field(default=Opcode.ICMP, init=False)
    type: Type = I1
    pred: IntPredicate
    x: Value
    y: Value

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.x, self.y)


@dataclass(eq=False, kw_only=True, repr=False)
class FCmpInst(Instruction):
    opcode: Opcode = field(default=Opcode.FCMP, init=False)
    type: Type = I1
    pred: FloatPredicate
    x: Value
    y: Value

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.x, self.y)


@dataclass(eq=False, kw_only=True, repr=False)
class AllocaInst(Instruction):
    opcode: Opcode = field(default=Opcode.ALLOCA, init=False)
    type: Type = PTR
    allocated_type: Type


@dataclass(eq=False, kw_only=True, repr=False)
class LoadInst(Instruction):
    opcode: Opcode = field(default=Opcode.LOAD, init=False)
    src: Value

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.src,)


@dataclass(eq=False, kw_only=True, repr=False)
class StoreInst(Instruction):
    opcode: Opcode = field(default=Opcode.STORE, init=False)
    src: Value
    dst: Value

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.src, self.dst)


@dataclass(eq=False, kw_only=True, repr=False)
class GetElementPtrInst(Instruction):
    opcode: Opcode = field(default=Opcode.GETELEMENTPTR, init=False)
    type: Type = PTR
    element_type: Type
    src: Value
    indices: tuple[Value, ...] = ()

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.src, *self.indices)


@dataclass(eq=False, kw_only=True, repr=False)
class CastInst(Instruction):
    """Conversion instructions; ``type`` is the destination type."""
    src: Value

    def __post_init__(self):
        if self.opcode not in CONVERSION_OPCODES:
            raise ValueError(f"{self.opcode.value} is not a conversion opcode")

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.src,)


@dataclass(eq=False, kw_only=True, repr=False)
class PhiInst(Instruction):
    """SSA merge point. ``incoming`` pairs a value with its predecessor block name.

    Incoming edges may be added after construction, since a loop-carried
    phi refers to values defined later in the function.
    """
    opcode: Opcode = field(default=Opcode.PHI, init=False)
    incoming: list[tuple[Value, str]] = field(default_factory=list)

    def add_incoming(self, value: Value, block: str) -> None:
        self.incoming.append((value, block))

    @property
    def operands(self) -> tuple[Value, ...]:
        return tuple(v for v, _ in self.incoming)


@dataclass(eq=False, kw_only=True, repr=False)
class SelectInst(Instruction):
    opcode: Opcode = field(default=Opcode.SELECT, init=False)
    cond: Value
    x: Value
    y: Value

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.cond, self.x, self.y)


@dataclass(eq=False, kw_only=True, repr=False)
class CallInst(Instruction):
    opcode: Opcode = field(default=Opcode.CALL, init=False)
    callee: Value
    args: tuple[Value, ...] = ()

    @property
    def operands(self) -> tuple[Value, ...]:
        return (self.callee, *self.args)


Value = Union[Instruction, Argument, GlobalRef, IntConstant, FloatConstant, OtherConstant]


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Block:
    name: str
    instructions: list[Instruction] = field(default_factory=list)


@dataclass(eq=False)
class Function:
    name: str
    params: list[Argument] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)

    def get_block(self, name: str) -> Block:
        for bb in self.blocks:
            if bb.name == name:
                return bb
        raise KeyError(f"no block named {name!r} in {self.name}")
