"""Split an input line into words and operators."""

from __future__ import annotations

from minishell.models import ShellState, Token, TokenType

SYNTAX_ERROR_STATUS = 258

_BLANKS = " \t"
_WORD_STOPS = " \t<>|"
_UNSUPPORTED = "&;()"
_QUOTES = "'\""
_OPERATORS = (
    ("<<", TokenType.HEREDOC),
    (">>", TokenType.APPEND_OUT),
    ("<", TokenType.IN),
    (">", TokenType.OUT),
    ("|", TokenType.PIPE),
)


class LexerError(Exception):
    """A syntax error found while tokenizing; ``status`` is the exit status to report."""

    def __init__(self, message: str, status: int = SYNTAX_ERROR_STATUS) -> None:
        super().__init__(message)
        self.status = status


def _fail(state: ShellState, message: str) -> None:
    state.last_exit_status = SYNTAX_ERROR_STATUS
    raise LexerError(message)


def _skip_blanks(line: str, pos: int) -> int:
    while pos < len(line) and line[pos] in _BLANKS:
        pos += 1
    return pos


def _word_end(line: str, pos: int, state: ShellState) -> int:
    while pos < len(line) and line[pos] not in _WORD_STOPS:
        quote = line[pos]
        if quote in _QUOTES:
            closing = line.find(quote, pos + 1)
            if closing == -1:
                _fail(state, "Syntax error: unclosed quote")
            pos = closing + 1
        else:
            pos += 1
    return pos


def tokenize(line: str | None, state: ShellState) -> list[Token]:
    """Turn ``line`` into tokens, keeping quotes inside words untouched.

    Raises LexerError (and sets the state's exit status to 258) on an
    unclosed quote or on one of the unsupported characters ``& ; ( )``
    at the start of a token.
    """
    if line is None:
        return []
    tokens: list[Token] = []
    pos = 0
    while True:
        pos = _skip_blanks(line, pos)
        if pos >= len(line):
            break
        char = line[pos]
        if char in _UNSUPPORTED:
            _fail(state, f"syntax error near unexpected token `{char}'")
        for text, token_type in _OPERATORS:
            if line.startswith(text, pos):
                tokens.append(Token(text, token_type))
                pos += len(text)
                break
        else:
            end = _word_end(line, pos, state)
            tokens.append(Token(line[pos:end], TokenType.WORD))
            pos = end
    return tokens