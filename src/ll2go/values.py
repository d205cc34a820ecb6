"""Operand resolution: IR values to Go expressions."""

from __future__ import annotations

import math

from ll2go.errors import UnimplementedConstant
from ll2go.goast import BasicLit, Expr, Ident, Token, UnaryExpr
from ll2go.ir import (
    Argument, FloatConstant, GlobalRef, Instruction, IntConstant, OtherConstant,
    Value,
)
from ll2go.naming import LocalNamer, Namer


class ValueResolver:
    """Turns operands into fresh Go expression nodes.

    Named values (instruction results, arguments, globals) become identifiers
    chosen by the naming service; integer and float constants become
    literals. Constants without a Go literal form raise UnimplementedConstant.
    """

    def __init__(self, namer: Namer | None = None):
        self.namer = namer or LocalNamer()

    def value(self, v: Value) -> Expr:
        if isinstance(v, (Instruction, Argument, GlobalRef)):
            return self.local(v)
        if isinstance(v, IntConstant):
            return self._int_const(v)
        if isinstance(v, FloatConstant):
            return self._float_const(v)
        if isinstance(v, OtherConstant):
            raise UnimplementedConstant(f"{v.type} {v.kind}")
        raise TypeError(f"not an IR value: {v!r}")

    def local(self, v: Value) -> Ident:
        """Identifier for a named value."""
        return Ident(self.namer.identifier_for(v))

    def _int_const(self, c: IntConstant) -> Expr:
        if c.type.width == 1:
            # i1 is Go's bool; true/false are not integer literals.
            raise UnimplementedConstant(f"{c.type} {c.value}")
        lit = BasicLit(Token.INT, str(abs(c.value)))
        if c.value < 0:
            return UnaryExpr(Token.SUB, lit)
        return lit

    def _float_const(self, c: FloatConstant) -> Expr:
        if not math.isfinite(c.value):
            raise UnimplementedConstant(f"{c.type} {c.value}")
        lit = BasicLit(Token.FLOAT, repr(abs(c.value)))
        if math.copysign(1.0, c.value) < 0:
            return UnaryExpr(Token.SUB, lit)
        return lit
