"""Shell environment handling: creation, lookup and update of variables."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping

from minishell.models import ShellState

_WHITESPACE = " \t\n\v\f\r"


def init_shell(envp: Iterable[str] | Mapping[str, str] | None = None) -> ShellState:
    """Create a shell state holding its own copy of the given environment.

    ``envp`` may be a sequence of ``KEY=VALUE`` strings or a mapping; when it
    is omitted the process environment is used.
    """
    if envp is None:
        envp = os.environ
    if isinstance(envp, Mapping):
        entries = [f"{key}={value}" for key, value in envp.items()]
    else:
        entries = list(envp)
    return ShellState(envp=entries)


def get_env_value(state: ShellState, name: str | None) -> str:
    """Return the value of ``name``; ``?`` yields the last exit status.

    Unknown variables expand to the empty string.
    """
    if name is None:
        return ""
    if name == "?":
        return str(state.last_exit_status)
    prefix = name + "="
    for entry in state.envp:
        if entry.startswith(prefix):
            return entry[len(prefix):]
    return ""


def set_env_var(state: ShellState, key: str, value: str) -> None:
    """Set ``key`` to ``value``, replacing an existing entry or appending a new one."""
    prefix = key + "="
    entry = prefix + value
    for index, existing in enumerate(state.envp):
        if existing.startswith(prefix):
            state.envp[index] = entry
            return
    state.envp.append(entry)


def is_blank(text: str | None) -> bool:
    """True when ``text`` is None, empty, or made only of whitespace."""
    if text is None:
        return True
    return all(ch in _WHITESPACE for ch in text)