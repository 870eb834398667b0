"""
Math Compiler Command-Line Interface
====================================

This package provides the ``math-compiler`` command, a Click-based
front end that compiles one expression, an expression read from a file,
or a series of expressions typed in interactive mode.
"""

__all__ = ["mathc"]
