"""
Math Compiler - Postfix and English Arithmetic to x86-64 Assembly
=================================================================

This package compiles small arithmetic expressions into NASM assembly
for a stack-machine evaluator. Expressions are written either in postfix
(Reverse Polish) notation or as English sentences.

Main Components
---------------
- **symbols**: Operator arities, constants, English vocabulary,
  precedence and associativity tables
- **lexer**: Postfix tokenizer
- **natural**: English normalizer (words → infix tokens)
- **infix**: Shunting-yard converter (infix → postfix)
- **codegen**: x86-64 code generator (postfix tokens → assembly)
- **compiler**: Pipeline, options and input classification
- **cli**: The ``math-compiler`` command

Quick Start
-----------
    >>> from math_compiler import compile_to_assembly, natural_language_to_postfix
    >>> natural_language_to_postfix("five to the power of two")
    '5 2 ^'
    >>> asm = compile_to_assembly("5 2 ^")

Or use the command-line tool:
    $ math-compiler "3 4 +"
    $ math-compiler "the square root of sixteen" sqrt.asm

Building the Output
-------------------
    $ nasm -f elf64 out.asm -o out.o
    $ gcc -no-pie out.o -o out -lm
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from math_compiler.errors import MathCompilerError, UnknownTokenError
from math_compiler.symbols import DEFAULT_SYMBOLS, Op, SymbolTable
from math_compiler.lexer import Token, TokenKind, PostfixLexer, tokenize
from math_compiler.natural import (
    tokenize_words,
    convert_to_infix,
    natural_language_to_postfix,
)
from math_compiler.infix import InfixConverter, to_postfix
from math_compiler.codegen import CodeGenerator
from math_compiler.compiler import (
    MathCompiler,
    CompilerOptions,
    CompilerResult,
    compile_to_assembly,
    is_natural_language,
)

__all__ = [
    # Version info
    "__version__",
    # Main API
    "compile_to_assembly",
    "natural_language_to_postfix",
    "MathCompiler",
    "CompilerOptions",
    "CompilerResult",
    "is_natural_language",
    # Errors
    "MathCompilerError",
    "UnknownTokenError",
    # Symbol tables
    "DEFAULT_SYMBOLS",
    "Op",
    "SymbolTable",
    # Lexer
    "Token",
    "TokenKind",
    "PostfixLexer",
    "tokenize",
    # Natural language
    "tokenize_words",
    "convert_to_infix",
    # Infix converter
    "InfixConverter",
    "to_postfix",
    # Code generator
    "CodeGenerator",
]
