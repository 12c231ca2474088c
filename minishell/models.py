"""Core data types shared by the lexer, parser, expander and executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class TokenType(Enum):
    """Kinds of tokens produced by the lexer."""

    WORD = auto()
    PIPE = auto()
    IN = auto()
    OUT = auto()
    APPEND_OUT = auto()
    HEREDOC = auto()

    @property
    def is_redirection(self) -> bool:
        """True for the operators that introduce a redirection."""
        return self in (TokenType.IN, TokenType.OUT, TokenType.APPEND_OUT, TokenType.HEREDOC)


@dataclass
class Token:
    """A single lexical token: its raw text and its kind."""

    value: str
    type: TokenType


class RedirType(Enum):
    """Kinds of redirection attached to a command."""

    IN = auto()
    OUT = auto()
    APPEND = auto()
    HEREDOC = auto()

    @classmethod
    def from_token(cls, token_type: TokenType) -> RedirType:
        """Return the redirection kind introduced by a redirection operator token."""
        mapping = {
            TokenType.IN: cls.IN,
            TokenType.OUT: cls.OUT,
            TokenType.APPEND_OUT: cls.APPEND,
            TokenType.HEREDOC: cls.HEREDOC,
        }
        try:
            return mapping[token_type]
        except KeyError:
            raise ValueError(f"{token_type.name} is not a redirection operator") from None


@dataclass
class Redirection:
    """A redirection: its kind and its target file (or heredoc delimiter)."""

    type: RedirType
    file: str
    expand_heredoc_content: bool = False


@dataclass
class Command:
    """One simple command of a pipeline."""

    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)
    full_path: str | None = None
    heredoc: str | None = None

    @property
    def name(self) -> str | None:
        """The command name, or None when the command has no arguments."""
        return self.args[0] if self.args else None


@dataclass
class ShellState:
    """Mutable state of a running shell."""

    envp: list[str] = field(default_factory=list)
    last_exit_status: int = 0
    should_exit: bool = False