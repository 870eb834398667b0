"""
Postfix Lexer (Tokenizer)
=========================

This module splits a postfix (Reverse Polish) expression into classified
tokens for the code generator.

Token Categories
----------------
Words are separated by whitespace and classified in a fixed order. The
order matters because categories share an alphabet: ``e`` could start a
numeric literal and is also a constant.

1. Number     - decimal or scientific literal: 3, -2.5, .5, 1e-3, 6.02E23
2. Constant   - pi, e
3. Stack op   - swap, dup
4. Function   - abs, sin, cos, tan, sqrt
5. Operator   - + - * / ^ % !

Anything else raises UnknownTokenError. A number must span the whole
word: ``1x`` is rejected rather than read as ``1``.

Example Usage
-------------
>>> from math_compiler.lexer import tokenize
>>> for token in tokenize("3 4 + pi *"):
...     print(token)
Token(NUMBER, '3', 3.0)
Token(NUMBER, '4', 4.0)
Token(OPERATOR, '+')
Token(CONSTANT, 'pi')
Token(OPERATOR, '*')
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from math_compiler.errors import UnknownTokenError
from math_compiler.symbols import (
    DEFAULT_SYMBOLS,
    FUNCTIONS,
    OPERATORS,
    STACK_OPS,
    Op,
    SymbolTable,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """Lexical category of a postfix word."""
    NUMBER = auto()      # Numeric literal, carries a float value
    CONSTANT = auto()    # Named constant (pi, e)
    OPERATOR = auto()    # + - * / ^ % !
    FUNCTION = auto()    # abs sin cos tan sqrt
    STACK_OP = auto()    # swap dup


# Optional sign, digits with optional fraction (or a bare fraction),
# optional exponent. fullmatch() makes it consume the entire word.
NUMBER_PATTERN = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


def is_number(word: str) -> bool:
    """Return True if the whole word is a numeric literal."""
    return NUMBER_PATTERN.fullmatch(word) is not None


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A classified postfix word.

    The payload depends on the kind: ``value`` is set only for NUMBER
    tokens and ``op`` only for OPERATOR, FUNCTION and STACK_OP tokens.
    Both are checked on construction so a token can never carry a field
    that is meaningless for its kind.

    Attributes:
        kind: The TokenKind classification
        text: The word exactly as written
        value: Parsed float for NUMBER tokens, otherwise None
        op: Operation identity for operator-like tokens, otherwise None
    """
    kind: TokenKind
    text: str
    value: Optional[float] = None
    op: Optional[Op] = None

    def __post_init__(self):
        if (self.kind is TokenKind.NUMBER) != (self.value is not None):
            raise ValueError(f"{self.kind.name} token '{self.text}' has invalid value {self.value!r}")
        has_op = self.kind in (TokenKind.OPERATOR, TokenKind.FUNCTION, TokenKind.STACK_OP)
        if has_op != (self.op is not None):
            raise ValueError(f"{self.kind.name} token '{self.text}' has invalid op {self.op!r}")

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.kind.name}, {self.text!r}, {self.value!r})"
        return f"Token({self.kind.name}, {self.text!r})"

    @classmethod
    def number(cls, text: str) -> "Token":
        return cls(TokenKind.NUMBER, text, value=float(text))

    @classmethod
    def constant(cls, name: str) -> "Token":
        return cls(TokenKind.CONSTANT, name)

    @classmethod
    def operation(cls, kind: TokenKind, op: Op) -> "Token":
        return cls(kind, op.value, op=op)


# =============================================================================
# Lexer Implementation
# =============================================================================

class PostfixLexer:
    """
    Tokenizes a postfix expression.

    Usage:
        lexer = PostfixLexer("3 4 +")
        tokens = list(lexer.tokenize())

    Attributes:
        expression: The postfix text being tokenized
        symbols: Vocabulary used to recognise constants
    """

    def __init__(self, expression: str, symbols: SymbolTable = DEFAULT_SYMBOLS):
        self.expression = expression
        self.symbols = symbols

    def tokenize(self) -> Iterator[Token]:
        """
        Yield one token per whitespace-delimited word.

        Raises:
            UnknownTokenError: If a word matches no token category
        """
        for position, word in enumerate(self.expression.split(), start=1):
            yield self._classify(word, position)

    def _classify(self, word: str, position: int) -> Token:
        if is_number(word):
            return Token.number(word)

        if word in self.symbols.constants:
            return Token.constant(word)

        op = _lookup_op(word)
        if op in STACK_OPS:
            return Token.operation(TokenKind.STACK_OP, op)
        if op in FUNCTIONS:
            return Token.operation(TokenKind.FUNCTION, op)
        if op in OPERATORS:
            return Token.operation(TokenKind.OPERATOR, op)

        raise UnknownTokenError(word, position)


def _lookup_op(word: str) -> Optional[Op]:
    try:
        return Op(word)
    except ValueError:
        return None


def tokenize(expression: str, symbols: SymbolTable = DEFAULT_SYMBOLS) -> list[Token]:
    """
    Tokenize a postfix expression.

    Args:
        expression: Postfix source, e.g. ``"3 4 + 2 *"``
        symbols: Vocabulary (defaults to the built-in tables)

    Returns:
        List of classified tokens in source order

    Raises:
        UnknownTokenError: If a word is not recognised
    """
    tokens = list(PostfixLexer(expression, symbols).tokenize())
    logger.debug(f"Tokenized {len(tokens)} tokens from {expression!r}")
    return tokens
