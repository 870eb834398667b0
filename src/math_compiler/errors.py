"""
Math Compiler Error Hierarchy
=============================

This module defines the exception hierarchy for the math compiler.
All exceptions inherit from MathCompilerError, allowing callers to catch
every compiler failure with a single except clause if desired.

Exception Hierarchy
-------------------
MathCompilerError (base)
└── UnknownTokenError - a postfix word matches no token category

Only the postfix tokenizer raises. The natural-language normalizer and
the infix converter are lenient and never fail; runtime hazards in the
generated program (division by zero, stack underflow) are compiled into
guarded jumps rather than reported here.

Error messages follow this format:
    error: description
    hint: suggestion for fixing (when available)
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class MathCompilerError(Exception):
    """
    Base exception for all math compiler errors.

    Attributes:
        message: The error description
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"error: {self.message}"]
        if self.hint:
            parts.append(f"hint: {self.hint}")
        return "\n".join(parts)


# =============================================================================
# Tokenizer Errors
# =============================================================================

class UnknownTokenError(MathCompilerError):
    """
    Unrecognized word in a postfix expression.

    Raised when a whitespace-delimited word is not a numeric literal,
    a known constant, a stack operation, a function or an operator.

    Example:
        3 1x +      # '1x' is neither a number nor a name

    Attributes:
        token: The offending word, exactly as written
        position: 1-based index of the word in the expression (0 if unknown)
    """

    def __init__(self, token: str, position: int = 0):
        self.token = token
        self.position = position
        where = f" at word {position}" if position else ""
        super().__init__(
            f"unknown token '{token}'{where}",
            hint="expected a number, a constant (pi, e), an operator "
                 "(+ - * / ^ % !), a function (abs sin cos tan sqrt) "
                 "or a stack operation (swap dup)",
        )
