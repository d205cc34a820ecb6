"""Comparison predicate to Go operator tables.

Go has one set of comparison operators for every numeric type, so the
signed/unsigned split of ``icmp`` and the ordered/unordered split of
``fcmp`` cannot be expressed by the operator alone. Both tables drop that
distinction; see ``ll2go.translate.SEMANTIC_GAPS``.
"""

from __future__ import annotations

from ll2go.errors import InvalidPredicate, UnimplementedPredicate
from ll2go.goast import Token
from ll2go.ir import FloatPredicate, IntPredicate

# TODO: Differentiate between unsigned and signed once operand types are
# lowered to Go's sized unsigned types.
INT_PREDICATE_TOKENS: dict[IntPredicate, Token] = {
    IntPredicate.EQ: Token.EQL,
    IntPredicate.NE: Token.NEQ,
    IntPredicate.UGT: Token.GTR,
    IntPredicate.UGE: Token.GEQ,
    IntPredicate.ULT: Token.LSS,
    IntPredicate.ULE: Token.LEQ,
    IntPredicate.SGT: Token.GTR,
    IntPredicate.SGE: Token.GEQ,
    IntPredicate.SLT: Token.LSS,
    IntPredicate.SLE: Token.LEQ,
}

# TODO: Differentiate between ordered and unordered (NaN operands).
# None marks predicates with no single-operator form.
FLOAT_PREDICATE_TOKENS: dict[FloatPredicate, Token | None] = {
    FloatPredicate.FALSE: None,
    FloatPredicate.OEQ: Token.EQL,
    FloatPredicate.OGT: Token.GTR,
    FloatPredicate.OGE: Token.GEQ,
    FloatPredicate.OLT: Token.LSS,
    FloatPredicate.OLE: Token.LEQ,
    FloatPredicate.ONE: Token.NEQ,
    FloatPredicate.ORD: None,
    FloatPredicate.UEQ: Token.EQL,
    FloatPredicate.UGT: Token.GTR,
    FloatPredicate.UGE: Token.GEQ,
    FloatPredicate.ULT: Token.LSS,
    FloatPredicate.ULE: Token.LEQ,
    FloatPredicate.UNE: Token.NEQ,
    FloatPredicate.UNO: None,
    FloatPredicate.TRUE: None,
}

FLOAT_PREDICATE_DESCRIPTIONS: dict[FloatPredicate, str] = {
    FloatPredicate.FALSE: "always-false",
    FloatPredicate.TRUE: "always-true",
    FloatPredicate.ORD: "ordered-only",
    FloatPredicate.UNO: "unordered-only",
}


def int_pred(pred: IntPredicate) -> Token:
    """Return the Go comparison operator for an integer predicate."""
    if not isinstance(pred, IntPredicate):
        raise InvalidPredicate(pred, "integer")
    return INT_PREDICATE_TOKENS[pred]


def float_pred(pred: FloatPredicate) -> Token:
    """Return the Go comparison operator for a floating-point predicate.

    Raises UnimplementedPredicate for ``false``, ``true``, ``ord`` and
    ``uno``, which test NaN-ness or nothing at all rather than comparing.
    """
    if not isinstance(pred, FloatPredicate):
        raise InvalidPredicate(pred, "floating-point")
    tok = FLOAT_PREDICATE_TOKENS[pred]
    if tok is None:
        raise UnimplementedPredicate(pred, FLOAT_PREDICATE_DESCRIPTIONS[pred])
    return tok
