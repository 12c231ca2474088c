"""Pieces of a small bash-like shell: lexer, expander, heredocs, builtins and executor."""

__version__ = "0.1.0"