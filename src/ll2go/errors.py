"""Errors raised while lifting IR instructions.

Every failure is fatal for the function being lifted: the lifter never
emits a plausible-looking statement for a construct it cannot translate.
Callers and tests tell the cases apart by exception class.
"""

from __future__ import annotations

from enum import Enum


def _spelling(construct) -> str:
    if isinstance(construct, Enum):
        return str(construct.value)
    return str(construct)


class LiftError(Exception):
    """Base class for lifter errors."""


class UnimplementedOpcode(LiftError, NotImplementedError):
    """No translator exists yet for an instruction kind.

    ``construct`` holds the mnemonic (``"alloca"``, ``"call"``) or, for the
    subclasses, a description of the constant or type.
    """
    category = "instruction"

    def __init__(self, construct):
        self.construct = _spelling(construct)
        super().__init__(
            f"support for {self.category} `{self.construct}` not yet implemented"
        )


class UnimplementedConstant(UnimplementedOpcode):
    category = "constant"


class UnimplementedType(UnimplementedOpcode):
    category = "type"


class UnimplementedPredicate(LiftError, NotImplementedError):
    """A comparison predicate has no single Go operator equivalent."""

    def __init__(self, predicate, description: str):
        self.predicate = _spelling(predicate)
        self.description = description
        super().__init__(
            f'support for floating-point predicate "{self.predicate}" '
            f"({description}) not yet implemented"
        )


class InvalidPredicate(LiftError, ValueError):
    """A predicate value outside the integer/float predicate enumerations."""

    def __init__(self, predicate, kind: str):
        self.predicate = predicate
        super().__init__(f"invalid {kind} predicate {predicate!r}")


class ContractViolation(LiftError, RuntimeError):
    """A caller broke a precondition (a phi reached the general dispatch path)."""
