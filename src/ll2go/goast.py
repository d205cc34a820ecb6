"""Go AST nodes produced by the lifter.

Only the node kinds the instruction translator emits are modelled. Nodes are
immutable and compare structurally, so translated statements can be checked
against expected trees directly. ``str()`` gives a one-line debug rendering;
printing whole Go source files is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Token(str, Enum):
    """Go tokens, valued by their source spelling."""
    # Literal kinds
    INT = "INT"
    FLOAT = "FLOAT"
    # Operators
    ADD = "+"
    SUB = "-"
    MUL = "*"
    QUO = "/"
    REM = "%"
    AND = "&"
    OR = "|"
    XOR = "^"
    SHL = "<<"
    SHR = ">>"
    EQL = "=="
    NEQ = "!="
    LSS = "<"
    GTR = ">"
    LEQ = "<="
    GEQ = ">="
    ASSIGN = "="
    DEFINE = ":="


COMPARISON_TOKENS = frozenset({
    Token.EQL, Token.NEQ, Token.LSS, Token.GTR, Token.LEQ, Token.GEQ,
})


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ident:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BasicLit:
    kind: Token  # INT or FLOAT
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UnaryExpr:
    op: Token
    x: Expr

    def __str__(self) -> str:
        return f"{self.op.value}{self.x}"


@dataclass(frozen=True)
class BinaryExpr:
    x: Expr
    op: Token
    y: Expr

    def __str__(self) -> str:
        return f"{self.x} {self.op.value} {self.y}"


Expr = Union[Ident, BasicLit, UnaryExpr, BinaryExpr]


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssignStmt:
    """``lhs tok rhs`` where ``tok`` is DEFINE (``:=``) or ASSIGN (``=``)."""
    lhs: tuple[Expr, ...]
    tok: Token
    rhs: tuple[Expr, ...]

    def __str__(self) -> str:
        lhs = ", ".join(str(e) for e in self.lhs)
        rhs = ", ".join(str(e) for e in self.rhs)
        return f"{lhs} {self.tok.value} {rhs}"


@dataclass(frozen=True)
class DeclStmt:
    """``var name type``."""
    name: Ident
    type: Ident

    def __str__(self) -> str:
        return f"var {self.name} {self.type}"


Stmt = Union[AssignStmt, DeclStmt]


def define(name: str, expr: Expr) -> AssignStmt:
    """Build ``name := expr``."""
    return AssignStmt(lhs=(Ident(name),), tok=Token.DEFINE, rhs=(expr,))


def assign(name: str, expr: Expr) -> AssignStmt:
    """Build ``name = expr``."""
    return AssignStmt(lhs=(Ident(name),), tok=Token.ASSIGN, rhs=(expr,))
