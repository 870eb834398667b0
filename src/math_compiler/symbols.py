"""
Symbol Tables
=============

This module defines the read-only vocabulary shared by every stage of
the compiler: operator identities and arities, named constants, the
English vocabulary used by the natural-language front end, and the
precedence/associativity rules used by the infix converter.

The tables are built once (``DEFAULT_SYMBOLS``) and handed by reference
to each pipeline stage. They are exposed as ``MappingProxyType`` views
inside a frozen dataclass, so no stage can mutate them.

Operator Summary
----------------
| Text  | Category  | Arity | Precedence | Associativity |
|-------|-----------|-------|------------|---------------|
| +  -  | operator  | 2     | 1          | left          |
| * / % | operator  | 2     | 2          | left          |
| ^     | operator  | 2     | 3          | right         |
| !     | operator  | 1     | 4          | (postfix)     |
| abs sin cos tan sqrt | function | 1 | 4 | (prefix)      |
| swap  | stack op  | 2     | -          | -             |
| dup   | stack op  | 1     | -          | -             |
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


# =============================================================================
# Operator Identity
# =============================================================================

class Op(Enum):
    """
    The closed set of operations the compiler understands.

    The enum value is the spelling used in postfix source. Every stage
    that dispatches on an operation keys its handler table by ``Op`` and
    checks at import time that all members are covered.
    """

    # Arithmetic operators
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    MOD = "%"
    FACTORIAL = "!"

    # Functions
    ABS = "abs"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    SQRT = "sqrt"

    # Stack manipulation
    SWAP = "swap"
    DUP = "dup"


OPERATORS: frozenset[Op] = frozenset({
    Op.ADD, Op.SUB, Op.MUL, Op.DIV, Op.POW, Op.MOD, Op.FACTORIAL,
})

FUNCTIONS: frozenset[Op] = frozenset({
    Op.ABS, Op.SIN, Op.COS, Op.TAN, Op.SQRT,
})

STACK_OPS: frozenset[Op] = frozenset({Op.SWAP, Op.DUP})


# =============================================================================
# Default Vocabulary
# =============================================================================

_ARITY = {
    "+": 2, "-": 2, "*": 2, "/": 2, "^": 2, "%": 2,
    "!": 1,
    "abs": 1, "sin": 1, "cos": 1, "tan": 1, "sqrt": 1,
    "swap": 2,
    "dup": 1,
}

_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

_WORD_TO_NUMBER = {
    "zero": "0", "one": "1", "two": "2", "three": "3", "four": "4",
    "five": "5", "six": "6", "seven": "7", "eight": "8", "nine": "9",
    "ten": "10", "eleven": "11", "twelve": "12", "thirteen": "13",
    "fourteen": "14", "fifteen": "15", "sixteen": "16", "seventeen": "17",
    "eighteen": "18", "nineteen": "19", "twenty": "20",
    "thirty": "30", "forty": "40", "fifty": "50", "sixty": "60",
    "seventy": "70", "eighty": "80", "ninety": "90",
    "hundred": "100",
    "thousand": "1000",
    "million": "1000000",
    "billion": "1000000000",
    # Constants keep their names; the tokenizer resolves them later
    "pi": "pi",
    "e": "e",
}

_WORD_TO_OPERATOR = {
    # Addition
    "plus": "+", "add": "+", "added": "+", "addition": "+", "sum": "+",
    # Subtraction
    "minus": "-", "subtract": "-", "subtracted": "-", "subtraction": "-",
    "difference": "-",
    # Multiplication
    "times": "*", "multiply": "*", "multiplied": "*", "multiplication": "*",
    "product": "*",
    # Division
    "divided": "/", "divide": "/", "division": "/", "quotient": "/",
    "over": "/",
    # Exponentiation
    "power": "^", "exponent": "^", "raised": "^", "to the power of": "^",
    # Remainder
    "modulo": "%", "mod": "%", "remainder": "%",
    # Factorial
    "factorial": "!",
    # Functions
    "sin": "sin", "sine": "sin",
    "cos": "cos", "cosine": "cos",
    "tan": "tan", "tangent": "tan",
    "sqrt": "sqrt", "square root": "sqrt", "square root of": "sqrt",
    "abs": "abs", "absolute": "abs",
}

_PRECEDENCE = {
    "+": 1, "-": 1,
    "*": 2, "/": 2, "%": 2,
    "^": 3,
    "!": 4,
    "sin": 4, "cos": 4, "tan": 4, "sqrt": 4, "abs": 4,
}

_RIGHT_ASSOCIATIVE = {"^": True}

# Multi-word phrases folded into a single word, longest first
PHRASES: tuple[tuple[str, ...], ...] = (
    ("to", "the", "power", "of"),
    ("square", "root", "of"),
    ("square", "root"),
)

# Words carrying no arithmetic meaning ("divided BY", "IS", ...)
FILLER_WORDS: frozenset[str] = frozenset({
    "and", "by", "with", "then", "to", "equals", "is", "the", "of",
})


# =============================================================================
# Symbol Table
# =============================================================================

def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class SymbolTable:
    """
    Immutable vocabulary consulted by every compiler stage.

    Attributes:
        arity: Operation text -> number of operands consumed
        constants: Constant name -> float64 value
        word_to_number: English word -> numeral text
        word_to_operator: English word or phrase -> operation text
        precedence: Operation text -> binding rank (higher binds tighter)
        right_associative: Operation text -> True if right-associative
    """
    arity: Mapping[str, int] = field(default_factory=lambda: _frozen(_ARITY))
    constants: Mapping[str, float] = field(default_factory=lambda: _frozen(_CONSTANTS))
    word_to_number: Mapping[str, str] = field(default_factory=lambda: _frozen(_WORD_TO_NUMBER))
    word_to_operator: Mapping[str, str] = field(default_factory=lambda: _frozen(_WORD_TO_OPERATOR))
    precedence: Mapping[str, int] = field(default_factory=lambda: _frozen(_PRECEDENCE))
    right_associative: Mapping[str, bool] = field(default_factory=lambda: _frozen(_RIGHT_ASSOCIATIVE))

    def __post_init__(self):
        # Wrap any plain dicts passed in by the caller
        for name in ("arity", "constants", "word_to_number", "word_to_operator",
                     "precedence", "right_associative"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, _frozen(value))

        unknown = set(self.word_to_operator.values()) - set(self.arity)
        if unknown:
            raise ValueError(
                f"word_to_operator maps to unknown operations: {sorted(unknown)}"
            )
        unknown = set(self.precedence) - set(self.arity)
        if unknown:
            raise ValueError(
                f"precedence defined for unknown operations: {sorted(unknown)}"
            )

    def is_right_associative(self, op: str) -> bool:
        return self.right_associative.get(op, False)

    def precedence_of(self, op: str) -> int:
        """Return the rank of an operation, 0 for anything unranked."""
        return self.precedence.get(op, 0)


DEFAULT_SYMBOLS = SymbolTable()
