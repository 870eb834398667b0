"""
math-compiler - Command-Line Interface
======================================

This module implements the ``math-compiler`` command. It compiles a
postfix or English arithmetic expression to x86-64 NASM assembly,
echoes the assembly and saves it to a file.

Usage Examples
--------------
Postfix expression (saved to output/3_4_+.asm):
    $ math-compiler "3 4 +"

Natural language with an explicit output file:
    $ math-compiler "the square root of sixteen" sqrt.asm

Expression read from a file:
    $ math-compiler -f input.txt output.asm

Interactive mode (no arguments):
    $ math-compiler
    Expression: pi 2 * sin
    Expression: exit

Exit Codes
----------
0 - Success
1 - Compilation error (unknown token)
2 - Invalid arguments, unreadable input or unwritable output
3 - Internal error
"""

import logging
from pathlib import Path
from typing import Optional

import click

from math_compiler import __version__
from math_compiler.compiler import CompilerOptions, CompilerResult, MathCompiler
from math_compiler.errors import MathCompilerError
from math_compiler.cli.errors import handle_cli_exception

logger = logging.getLogger(__name__)

# Characters that cannot appear in a filename on common platforms
_UNSAFE_FILENAME_CHARS = ' /\\:*?"<>|'
_MAX_FILENAME_STEM = 50

_EXIT_WORDS = ("exit", "quit")

_BANNER = "===== GENERATED ASSEMBLY ====="
_RULE = "=" * len(_BANNER)


# =============================================================================
# Helpers
# =============================================================================

def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def sanitize_for_filename(expression: str) -> str:
    """
    Turn an expression into a safe ``.asm`` filename.

    Unsafe characters become underscores and the name is cut to 50
    characters before the extension is added.

    >>> sanitize_for_filename("3 4 /")
    '3_4__.asm'
    """
    name = "".join("_" if ch in _UNSAFE_FILENAME_CHARS else ch for ch in expression)
    name = name[:_MAX_FILENAME_STEM]
    if not name.endswith(".asm"):
        name += ".asm"
    return name


def read_expression_file(path: Path) -> str:
    """Read an expression from a file, joining its lines with spaces."""
    return " ".join(line.strip() for line in path.read_text().splitlines())


def compile_expression(
    compiler: MathCompiler,
    expression: str,
    output: Path,
    echo: bool = True,
) -> CompilerResult:
    """
    Compile one expression, report progress and write the assembly.

    Raises:
        MathCompilerError: If the expression does not compile
    """
    result = compiler.compile_to_file(expression, output)
    logger.debug(f"Compiled {result.token_count} tokens from {expression!r}")

    if result.natural_language:
        click.echo(f"Converted to RPN: {result.postfix}")

    if echo:
        click.echo(f"\n{_BANNER}")
        click.echo(result.assembly, nl=False)
        click.echo(f"{_RULE}\n")

    click.echo(f"Assembly saved to {output}")
    return result


def interactive_mode(compiler: MathCompiler, echo: bool = True) -> None:
    """Read expressions until 'exit', 'quit' or end of input."""
    click.echo("Math Compiler Interactive Mode")
    click.echo("==============================")
    click.echo("Enter RPN expressions or natural language to convert to assembly.")
    click.echo("Examples:")
    click.echo("  3 4 +         (RPN for 3 + 4)")
    click.echo("  pi 2 * sin    (RPN for sin(pi * 2))")
    click.echo("  one plus two  (natural language)")
    click.echo("Enter 'exit' to quit.\n")

    while True:
        try:
            expression = click.prompt(
                "Expression", default="", show_default=False
            ).strip()
        except click.Abort:
            click.echo()
            break

        if expression in _EXIT_WORDS:
            break
        if not expression:
            continue

        output = compiler.options.output_dir / sanitize_for_filename(expression)
        try:
            compile_expression(compiler, expression, output, echo)
        except MathCompilerError as e:
            click.echo(f"Compilation {e}", err=True)
        except OSError as e:
            click.echo(f"Error: {e}", err=True)
        click.echo()


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("expression", required=False)
@click.argument(
    "output",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-f", "--file", "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the expression from a file (lines are joined with spaces)",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for generated files when OUTPUT is omitted "
         "(default: ./output or $MATH_COMPILER_OUTPUT_DIR)",
)
@click.option(
    "--no-comments",
    is_flag=True,
    help="Omit explanatory comments from the assembly",
)
@click.option(
    "--no-echo",
    is_flag=True,
    help="Do not print the generated assembly",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="math-compiler")
def main(
    expression: Optional[str],
    output: Optional[Path],
    input_file: Optional[Path],
    output_dir: Optional[Path],
    no_comments: bool,
    no_echo: bool,
    verbose: bool,
) -> None:
    """
    Compile arithmetic to x86-64 NASM assembly.

    EXPRESSION is postfix ("3 4 +") or English ("three plus four").
    OUTPUT defaults to a file named after the expression in the output
    directory. Without arguments, starts an interactive session.

    \b
    Examples:
        math-compiler "3 4 +"
        math-compiler "pi 2 * sin" output.asm
        math-compiler "one plus two"
        math-compiler -f input.txt output.asm
    """
    setup_logging(verbose)

    options = CompilerOptions.from_env()
    if output_dir is not None:
        options.output_dir = output_dir
    if no_comments:
        options.output_comments = False

    compiler = MathCompiler(options)

    if input_file is None and expression is None:
        interactive_mode(compiler, echo=not no_echo)
        return

    try:
        if input_file is not None:
            # With -f the only positional argument is the output file
            if expression is not None and output is None:
                output = Path(expression)
            elif expression is not None:
                raise click.BadParameter(
                    "cannot combine -f with an EXPRESSION argument"
                )
            expression = read_expression_file(input_file)
            logger.debug(f"Read expression {expression!r} from {input_file}")

        if output is None:
            output = options.output_dir / sanitize_for_filename(expression)

        compile_expression(compiler, expression, output, echo=not no_echo)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
