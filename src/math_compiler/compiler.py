"""
Math Compiler Main Module
=========================

This module provides the main compiler interface. It orchestrates the
complete compilation process:

    English → Normalize → Infix → Postfix ─┐
                                           ├→ Tokenize → Generate → Assembly
    Postfix ───────────────────────────────┘

Usage
-----
Command line:
    $ math-compiler "3 4 +"
    $ math-compiler "three plus four" out.asm

Programmatic:
    >>> from math_compiler import compile_to_assembly
    >>> asm = compile_to_assembly("pi 2 * sin")

    >>> from math_compiler import MathCompiler
    >>> result = MathCompiler().compile_source("five factorial")
    >>> result.postfix
    '5 !'

Error Handling
--------------
Only the tokenizer fails: an unrecognised postfix word raises
UnknownTokenError, which propagates to the caller unchanged.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from math_compiler.codegen import CodeGenerator
from math_compiler.lexer import Token, is_number, tokenize
from math_compiler.natural import natural_language_to_postfix
from math_compiler.symbols import DEFAULT_SYMBOLS, Op, SymbolTable

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        output_comments: Include explanatory comments in the assembly
        output_dir: Directory for assembly files when no output path is given
    """
    output_comments: bool = True
    output_dir: Path = field(default_factory=lambda: Path("output"))

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            MATH_COMPILER_OUTPUT_DIR: Default output directory
            MATH_COMPILER_COMMENTS: "0", "false", "no" or "off" disables comments
        """
        options = cls()

        if output_dir := os.environ.get("MATH_COMPILER_OUTPUT_DIR"):
            options.output_dir = Path(output_dir)

        if comments := os.environ.get("MATH_COMPILER_COMMENTS"):
            options.output_comments = comments.strip().lower() not in _FALSE_VALUES

        return options


# =============================================================================
# Input Classification
# =============================================================================

def is_postfix_word(word: str, symbols: SymbolTable = DEFAULT_SYMBOLS) -> bool:
    """Return True if the word is valid in a postfix expression."""
    if is_number(word) or word in symbols.constants:
        return True
    return word in {op.value for op in Op}


def is_natural_language(text: str, symbols: SymbolTable = DEFAULT_SYMBOLS) -> bool:
    """
    Decide whether input should go through the natural-language front end.

    Text counts as natural language when some word contains a letter and
    is not a postfix word (number, constant, function or stack operation).
    ``"pi 2 * sin"`` and ``"1e3 dup *"`` are postfix; ``"two plus 2"`` is not.
    """
    return any(
        any(ch.isalpha() for ch in word) and not is_postfix_word(word, symbols)
        for word in text.split()
    )


# =============================================================================
# Compiler
# =============================================================================

@dataclass
class CompilerResult:
    """
    Result of compiling one expression.

    Attributes:
        source: The input exactly as given
        postfix: Postfix text that was tokenized
        natural_language: True if the input was converted from English
        tokens: Classified postfix tokens
        assembly: Generated NASM source
    """
    source: str
    postfix: str = ""
    natural_language: bool = False
    tokens: list[Token] = field(default_factory=list)
    assembly: str = ""

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class MathCompiler:
    """
    Compiles postfix or English arithmetic into x86-64 assembly.

    Example:
        compiler = MathCompiler()
        result = compiler.compile_source("3 4 +")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
        symbols: Vocabulary shared by every stage
    """

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        symbols: SymbolTable = DEFAULT_SYMBOLS,
    ):
        self.options = options or CompilerOptions()
        self.symbols = symbols

    def compile_source(self, source: str) -> CompilerResult:
        """
        Compile an expression in either notation.

        Raises:
            UnknownTokenError: If the postfix text contains an unknown word
        """
        result = CompilerResult(source=source)

        if is_natural_language(source, self.symbols):
            result.natural_language = True
            result.postfix = natural_language_to_postfix(source, self.symbols)
            logger.debug(f"Natural language {source!r} -> {result.postfix!r}")
        else:
            result.postfix = source.strip()

        result.tokens = tokenize(result.postfix, self.symbols)
        result.assembly = self._generator().generate(result.tokens)
        return result

    def compile_to_string(self, expression: str) -> str:
        """Compile a postfix expression to assembly text."""
        return self._generator().generate(tokenize(expression, self.symbols))

    def compile_to_file(self, source: str, output: Path) -> CompilerResult:
        """
        Compile an expression in either notation and write the assembly.

        Parent directories are created as needed.

        Raises:
            UnknownTokenError: If the postfix text contains an unknown word
        """
        result = self.compile_source(source)
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.assembly)
        logger.debug(f"Wrote {len(result.assembly)} bytes to {output}")
        return result

    def _generator(self) -> CodeGenerator:
        return CodeGenerator(self.symbols, output_comments=self.options.output_comments)


def compile_to_assembly(expression: str, options: Optional[CompilerOptions] = None) -> str:
    """
    Compile a postfix expression to x86-64 NASM assembly.

    Args:
        expression: Postfix source, e.g. ``"3 4 +"``
        options: Compiler options (defaults if None)

    Returns:
        Assembly text

    Raises:
        UnknownTokenError: If a word is not recognised
    """
    return MathCompiler(options).compile_to_string(expression)
