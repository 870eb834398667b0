"""
Infix to Postfix Converter
==========================

Shunting-yard reduction of an infix token stream to postfix text.

The converter never rejects input. Unbalanced parentheses are tolerated
and unknown words are dropped, so any token stream produces some postfix
expression. Validation happens later, when the postfix text is tokenized.

Precedence (higher binds tighter)
---------------------------------
| Rank | Operations                | Associativity |
|------|---------------------------|---------------|
| 1    | + -                       | left          |
| 2    | * / %                     | left          |
| 3    | ^                         | right         |
| 4    | ! abs sin cos tan sqrt    | -             |

Examples:
    2 ^ 3 ^ 2   ->  2 3 2 ^ ^     (right-nested)
    2 - 3 - 1   ->  2 3 - 1 -     (left-nested)
    sin ( 30 + 60 ) * 2  ->  30 60 + sin 2 *
"""

import logging
from typing import Iterable

from math_compiler.symbols import DEFAULT_SYMBOLS, FUNCTIONS, OPERATORS, SymbolTable

logger = logging.getLogger(__name__)

PREFIX_FUNCTIONS: frozenset[str] = frozenset(op.value for op in FUNCTIONS)
INFIX_OPERATORS: frozenset[str] = frozenset(op.value for op in OPERATORS)

LPAREN = "("
RPAREN = ")"


def is_operand(token: str, symbols: SymbolTable = DEFAULT_SYMBOLS) -> bool:
    """Return True for numerals (including -5 and .5) and constant names."""
    if token in symbols.constants:
        return True
    if token[:1].isdigit():
        return True
    return token[:1] in ("-", ".") and token[1:2].isdigit()


class InfixConverter:
    """
    Operator-precedence converter from infix tokens to postfix tokens.

    Usage:
        converter = InfixConverter()
        postfix = converter.convert(["3", "+", "4"])   # "3 4 +"
    """

    def __init__(self, symbols: SymbolTable = DEFAULT_SYMBOLS):
        self.symbols = symbols

    def convert(self, tokens: Iterable[str]) -> str:
        output: list[str] = []
        stack: list[str] = []

        for token in tokens:
            if not token:
                continue
            if is_operand(token, self.symbols):
                output.append(token)
            elif token == LPAREN or token in PREFIX_FUNCTIONS:
                stack.append(token)
            elif token == RPAREN:
                self._close_group(stack, output)
            elif token in INFIX_OPERATORS:
                self._push_operator(token, stack, output)
            else:
                logger.debug(f"Discarding unrecognised infix token {token!r}")

        while stack:
            top = stack.pop()
            if top != LPAREN:
                output.append(top)

        return " ".join(output)

    def _close_group(self, stack: list[str], output: list[str]) -> None:
        while stack and stack[-1] != LPAREN:
            output.append(stack.pop())
        if stack:
            stack.pop()

    def _push_operator(self, op: str, stack: list[str], output: list[str]) -> None:
        rank = self.symbols.precedence_of(op)
        right = self.symbols.is_right_associative(op)
        while stack and stack[-1] != LPAREN:
            top_rank = self.symbols.precedence_of(stack[-1])
            if top_rank > rank or (top_rank == rank and not right):
                output.append(stack.pop())
            else:
                break
        stack.append(op)


def to_postfix(tokens: Iterable[str], symbols: SymbolTable = DEFAULT_SYMBOLS) -> str:
    """
    Convert infix tokens to space-separated postfix text.

    >>> to_postfix(["2", "^", "3", "^", "2"])
    '2 3 2 ^ ^'
    """
    return InfixConverter(symbols).convert(tokens)
