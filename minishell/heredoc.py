"""Reading heredoc bodies before a pipeline runs."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from minishell.expander import expand_string
from minishell.models import Command, RedirType, Redirection, ShellState

HEREDOC_PROMPT = ">"
INTERRUPTED_STATUS = 130
EOF_STATUS = 1

LineReader = Callable[[str], "str | None"]


class HeredocError(Exception):
    """Heredoc input was interrupted or ended early; ``status`` is the exit status."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


def _default_reader(prompt: str) -> str | None:
    return input(prompt)


def _read_body(
    heredoc: Redirection,
    state: ShellState,
    read_line: LineReader,
    keep: bool,
) -> str:
    """Read lines up to the delimiter; return the body when ``keep`` is set."""
    lines: list[str] = []
    while True:
        try:
            line = read_line(HEREDOC_PROMPT)
        except KeyboardInterrupt:
            state.last_exit_status = INTERRUPTED_STATUS
            raise HeredocError("heredoc interrupted", INTERRUPTED_STATUS) from None
        except EOFError:
            line = None
        if line is None:
            state.last_exit_status = EOF_STATUS
            raise HeredocError("heredoc ended before its delimiter", EOF_STATUS)
        if line == heredoc.file:
            break
        if keep:
            if heredoc.expand_heredoc_content:
                line = expand_string(line, state)
            lines.append(line + "\n")
    return "".join(lines)


def collect_heredocs(
    commands: Iterable[Command],
    state: ShellState,
    read_line: LineReader | None = None,
) -> None:
    """Read every heredoc of ``commands`` and store the body in ``Command.heredoc``.

    All heredocs of a command are read in order, but only the last one's
    body is kept. ``read_line`` is called with the prompt and returns a line,
    or None (or raises EOFError) at end of input; KeyboardInterrupt aborts.
    Raises HeredocError and sets the exit status on failure.
    """
    reader = read_line or _default_reader
    for command in commands:
        heredocs = [r for r in command.redirections if r.type is RedirType.HEREDOC]
        if not heredocs:
            continue
        last = heredocs[-1]
        body = ""
        for heredoc in heredocs:
            text = _read_body(heredoc, state, reader, heredoc is last)
            if heredoc is last:
                body = text
        command.heredoc = body