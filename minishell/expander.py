"""Variable expansion and quote removal for parsed commands."""

from __future__ import annotations

from collections.abc import Iterable

from minishell.environment import get_env_value
from minishell.models import Command, ShellState

_QUOTES = "'\""


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_alpha(char: str) -> bool:
    return "a" <= char <= "z" or "A" <= char <= "Z"


def _is_name_char(char: str) -> bool:
    return _is_alpha(char) or _is_digit(char) or char == "_"


def _expand_dollar(text: str, pos: int, state: ShellState) -> tuple[str, int]:
    """Expand the ``$`` at ``pos`` (outside single quotes).

    Returns the replacement text and the position just past what was consumed.
    """
    following = text[pos + 1]
    if following == "?":
        return get_env_value(state, "?"), pos + 2
    if _is_digit(following):
        # Positional parameters are not supported; they stay literal.
        return "$" + following, pos + 2
    if _is_alpha(following) or following == "_":
        end = pos + 1
        while end < len(text) and _is_name_char(text[end]):
            end += 1
        return get_env_value(state, text[pos + 1:end]), end
    return "$", pos + 1


def expand_string(text: str | None, state: ShellState) -> str:
    """Expand ``$`` references in ``text`` and remove its quotes.

    Single quotes suppress expansion. Inside a quoted section, quote
    characters of the other kind are dropped as well.
    """
    if text is None:
        return ""
    pieces: list[str] = []
    quote = ""
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char in _QUOTES:
            if quote == char:
                quote = ""
            elif not quote:
                quote = char
            pos += 1
            continue
        if char == "$" and pos + 1 < len(text) and quote != "'":
            piece, pos = _expand_dollar(text, pos, state)
            pieces.append(piece)
        else:
            pieces.append(char)
            pos += 1
    return "".join(pieces)


def expand_variables(commands: Iterable[Command], state: ShellState) -> None:
    """Expand every argument and redirection target of ``commands`` in place."""
    for command in commands:
        command.args = [expand_string(arg, state) for arg in command.args]
        for redirection in command.redirections:
            redirection.file = expand_string(redirection.file, state)