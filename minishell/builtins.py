"""Commands executed by the shell itself: echo, cd, pwd, export, unset, env and exit."""

from __future__ import annotations

import errno
import os
import re
import sys
from collections.abc import Callable, Sequence

from minishell.environment import get_env_value, set_env_var
from minishell.models import ShellState

BUILTIN_NAMES = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})

_NUMERIC = re.compile(r"[+-]?[0-9]+")
_ECHO_NO_NEWLINE = re.compile(r"-n+")


def _out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def _perror(prefix: str, error: OSError | int) -> None:
    if isinstance(error, OSError):
        message = error.strerror or os.strerror(error.errno or 0)
    else:
        message = os.strerror(error)
    _err(f"{prefix}: {message}\n")


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def _finish(state: ShellState, status: int) -> int:
    state.last_exit_status = status
    return status


# ---------------------------------------------------------------- echo


def echo(args: Sequence[str]) -> int:
    """Print the arguments separated by spaces; leading ``-n`` options drop the newline."""
    start = 1
    while start < len(args) and _ECHO_NO_NEWLINE.fullmatch(args[start]):
        start += 1
    text = " ".join(args[start:])
    if start == 1:
        text += "\n"
    _out(text)
    return 0


# ---------------------------------------------------------------- cd


def _update_working_dir(state: ShellState, new_path: str) -> None:
    set_env_var(state, "OLDPWD", get_env_value(state, "PWD"))
    set_env_var(state, "PWD", new_path)


def _change_dir(state: ShellState, target: str, announce: bool = False) -> int:
    try:
        os.chdir(target)
    except OSError as error:
        _perror("minishell: cd", error)
        return _finish(state, 1)
    if announce:
        _out(target + "\n")
    try:
        canonical = os.getcwd()
    except OSError as error:
        _perror("minishell: cd: getcwd failed after chdir", error)
        return _finish(state, 1)
    _update_working_dir(state, canonical)
    return _finish(state, 0)


def _parent_path(current: str) -> str:
    length = current.rfind("/") + 1
    if length <= 1 and current.startswith("/"):
        return "/"
    if length == 0:
        return "."
    return current[: length - 1]


def _check_directory(path: str) -> OSError | int | None:
    """Return the error describing why ``path`` is not a usable directory, if any."""
    try:
        info = os.stat(path)
    except OSError as error:
        return error
    if not os.path.stat.S_ISDIR(info.st_mode):
        return errno.ENOTDIR
    return None


def cd(state: ShellState, args: Sequence[str]) -> int:
    """Change the working directory and keep PWD and OLDPWD up to date."""
    target = args[1] if len(args) > 1 else ""
    if not target:
        home = get_env_value(state, "HOME")
        if not home:
            _err("minishell: cd: HOME not set\n")
            return _finish(state, 1)
        return _change_dir(state, home)
    if target == "-":
        previous_dir = get_env_value(state, "OLDPWD")
        if not previous_dir:
            _err("minishell: cd: OLDPWD not set\n")
            return _finish(state, 1)
        return _change_dir(state, previous_dir, announce=True)
    if target == "..":
        return _change_dir(state, _parent_path(get_env_value(state, "PWD")))
    if target in (".", "./"):
        try:
            current = os.getcwd()
        except OSError as error:
            _perror("minishell: cd: getcwd failed", error)
            return _finish(state, 1)
        _update_working_dir(state, current)
        return _finish(state, 0)
    problem = _check_directory(target)
    if problem is not None:
        _perror("minishell: cd", problem)
        return _finish(state, 1)
    return _change_dir(state, target)


# ---------------------------------------------------------------- pwd


def pwd(state: ShellState) -> int:
    """Print the working directory, falling back to the PWD variable."""
    try:
        current = os.getcwd()
    except OSError as error:
        for entry in state.envp:
            if entry.startswith("PWD="):
                _out(entry[4:] + "\n")
                return _finish(state, 0)
        _perror("minishell: pwd", error)
        return _finish(state, 1)
    _out(current + "\n")
    return _finish(state, 0)


# ---------------------------------------------------------------- env


def env(state: ShellState) -> int:
    """Print every environment entry that carries a value."""
    _out("".join(entry + "\n" for entry in state.envp if "=" in entry))
    return _finish(state, 0)


# ---------------------------------------------------------------- export


def is_valid_export_name(name: str | None) -> bool:
    """True when the part of ``name`` before ``=`` is a valid identifier for export."""
    if name is None:
        return False
    if name[:1].isascii() and name[:1].isdigit():
        return False
    key = name.split("=", 1)[0]
    return all(_is_name_char(char) for char in key)


def _add_entry(state: ShellState, entry: str) -> None:
    prefix = entry.split("=", 1)[0] + "="
    for index, existing in enumerate(state.envp):
        if existing.startswith(prefix):
            state.envp[index] = entry
            return
    state.envp.append(entry)


def _print_exported(state: ShellState) -> None:
    lines = []
    for entry in sorted(state.envp):
        key, sep, value = entry.partition("=")
        if sep:
            lines.append(f'declare -x {key}="{value}"\n')
        else:
            lines.append(f"declare -x {entry}\n")
    _out("".join(lines))


def export(state: ShellState, args: Sequence[str]) -> int:
    """Set environment entries, or list them all sorted when given no names."""
    if len(args) < 2:
        _print_exported(state)
        state.last_exit_status = 0
        return 0
    status = 0
    for arg in args[1:]:
        if not is_valid_export_name(arg):
            _err(f"export: `{arg}`: not a valid identifier\n")
            status = 1
        elif "=" not in arg:
            _add_entry(state, arg + "=")
        else:
            _add_entry(state, arg)
    return _finish(state, status)


# ---------------------------------------------------------------- unset


def _is_valid_unset_name(name: str) -> bool:
    if not name or (name[0].isascii() and name[0].isdigit()):
        return False
    return all(_is_name_char(char) for char in name)


def _remove_var(state: ShellState, name: str) -> None:
    for index, entry in enumerate(state.envp):
        key, sep, _ = entry.partition("=")
        if sep and name.startswith(key):
            del state.envp[index]
            return


def unset(state: ShellState, args: Sequence[str]) -> int:
    """Remove variables from the environment."""
    status = 0
    for arg in args[1:]:
        if not _is_valid_unset_name(arg):
            _err(f"minishell: unset: `{arg}`: not a valid identifier\n")
            status = 1
        else:
            _remove_var(state, arg)
    return _finish(state, status)


# ---------------------------------------------------------------- exit


def exit_shell(state: ShellState, args: Sequence[str]) -> int:
    """Ask the shell to stop, with an optional status truncated to 8 bits."""
    _out("exit\n")
    state.should_exit = True
    if len(args) < 2:
        return state.last_exit_status
    arg = args[1]
    if not _NUMERIC.fullmatch(arg):
        _err(f"minishell: exit: {arg}: numeric argument required\n")
        state.last_exit_status = 255
    elif len(args) > 2:
        _err("minishell: exit: too many arguments\n")
        state.last_exit_status = 1
        state.should_exit = False
    else:
        state.last_exit_status = int(arg) & 0xFF
    return state.last_exit_status


# ---------------------------------------------------------------- dispatch


def is_builtin(name: str | None) -> bool:
    """True when ``name`` is a command the shell runs itself."""
    return name in BUILTIN_NAMES


def _run_echo(state: ShellState, args: Sequence[str]) -> int:
    return echo(args)


def _run_working_dir(state: ShellState, args: Sequence[str]) -> int:
    return pwd(state)


def _run_env(state: ShellState, args: Sequence[str]) -> int:
    return env(state)


_DISPATCH: dict[str, Callable[[ShellState, Sequence[str]], int]] = dict(
    echo=_run_echo,
    cd=cd,
    export=export,
    unset=unset,
    env=_run_env,
    exit=exit_shell,
)
_DISPATCH[pwd.__name__] = _run_working_dir


def run_builtin(state: ShellState, args: Sequence[str]) -> int:
    """Run the builtin named by ``args[0]`` and return its status."""
    handler = _DISPATCH.get(args[0]) if args else None
    if handler is None:
        state.last_exit_status = 1
        return 1
    return handler(state, args)