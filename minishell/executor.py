"""Running parsed pipelines: builtins in-process, other commands as child processes."""

from __future__ import annotations

import io
import os
import signal
import subprocess
import sys
import tempfile
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager, redirect_stdout
from dataclasses import dataclass
from enum import Enum, auto
from typing import IO, Any, Union

from minishell.builtins import is_builtin, run_builtin
from minishell.models import Command, RedirType, ShellState

DEFAULT_PATH = "/usr/local/bin:/usr/bin:/bin"
NOT_FOUND_STATUS = 127
EXEC_FAILED_STATUS = 126
REDIRECTION_FAILED_STATUS = 1

_SIGNALS = tuple(
    sig for sig in (signal.SIGINT, getattr(signal, "SIGQUIT", None)) if sig is not None
)

_OPEN_MODES = {RedirType.IN: "rb", RedirType.OUT: "wb", RedirType.APPEND: "ab"}

StageResult = Union["subprocess.Popen[bytes]", int]


# ---------------------------------------------------------------- signals


class SignalMode(Enum):
    """How the shell reacts to SIGINT and SIGQUIT."""

    INTERACTIVE = auto()
    NON_INTERACTIVE = auto()
    CHILD = auto()


def _interactive_handler(signum: int, frame: Any) -> None:
    """Start a fresh prompt line; the reading loop discards the current input."""
    sys.stdout.write("\n")
    sys.stdout.flush()
    raise KeyboardInterrupt


def set_signals(mode: SignalMode) -> None:
    """Install the SIGINT and SIGQUIT dispositions for ``mode``.

    At the prompt SIGINT starts a new line and SIGQUIT is ignored; while a
    pipeline runs the shell ignores both; children get the defaults back.
    """
    if mode is SignalMode.INTERACTIVE:
        on_int, on_quit = _interactive_handler, signal.SIG_IGN
    elif mode is SignalMode.NON_INTERACTIVE:
        on_int, on_quit = signal.SIG_IGN, signal.SIG_IGN
    else:
        on_int, on_quit = signal.SIG_DFL, signal.SIG_DFL
    signal.signal(signal.SIGINT, on_int)
    quit_signal = getattr(signal, "SIGQUIT", None)
    if quit_signal is not None:
        signal.signal(quit_signal, on_quit)


@contextmanager
def _signal_mode(mode: SignalMode) -> Iterator[None]:
    """Apply ``mode`` for the duration of the block, then restore the previous handlers."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    saved = {sig: signal.getsignal(sig) for sig in _SIGNALS}
    set_signals(mode)
    try:
        yield
    finally:
        for sig, handler in saved.items():
            if handler is not None:
                signal.signal(sig, handler)


def _reset_child_signals() -> None:
    set_signals(SignalMode.CHILD)


# ---------------------------------------------------------------- command lookup


def get_paths(envp: Sequence[str] | None) -> list[str]:
    """Return the PATH directories, each ending in ``/``; a default when PATH is unset or empty."""
    value = next((entry[5:] for entry in envp or () if entry.startswith("PATH=")), None)
    if not value:
        value = DEFAULT_PATH
    return [d if d.endswith("/") else d + "/" for d in value.split(":") if d]


def find_command_path(args: Sequence[str] | None, paths: Sequence[str] | None) -> str | None:
    """Locate the executable for ``args[0]``, or return None when there is none.

    A name containing ``/`` is used as given; otherwise each directory of
    ``paths`` (already ending in ``/``) is tried in order.
    """
    if not args or not args[0]:
        return None
    name = args[0]
    if "/" in name:
        return name if os.access(name, os.X_OK) else None
    if paths is None:
        return None
    for directory in paths:
        candidate = directory + name
        if os.access(candidate, os.X_OK):
            return candidate
    return None


# ---------------------------------------------------------------- redirections


class _RedirectionFailed(Exception):
    """A redirection target could not be opened; the message was already printed."""


@dataclass
class _Streams:
    stdin: IO[bytes] | None = None
    stdout: IO[bytes] | None = None

    def close(self) -> None:
        for stream in (self.stdin, self.stdout):
            if stream is not None:
                stream.close()
        self.stdin = None
        self.stdout = None


def _report(prefix: str, error: OSError) -> None:
    sys.stderr.write(f"{prefix}: {error.strerror or error}\n")
    sys.stderr.flush()


def _heredoc_file(body: str) -> IO[bytes]:
    handle = tempfile.TemporaryFile()
    handle.write(body.encode("utf-8", "surrogateescape"))
    handle.seek(0)
    return handle


def _open_redirections(command: Command) -> _Streams:
    """Open the command's redirections in order; the last input and last output win."""
    streams = _Streams()
    if command.heredoc is not None:
        streams.stdin = _heredoc_file(command.heredoc)
    for redirection in command.redirections:
        if redirection.type is RedirType.HEREDOC:
            continue
        is_input = redirection.type is RedirType.IN
        previous = streams.stdin if is_input else streams.stdout
        if previous is not None:
            previous.close()
        if is_input:
            streams.stdin = None
        else:
            streams.stdout = None
        try:
            handle = open(redirection.file, _OPEN_MODES[redirection.type])
        except OSError as error:
            _report(redirection.file, error)
            streams.close()
            raise _RedirectionFailed(redirection.file) from error
        if is_input:
            streams.stdin = handle
        else:
            streams.stdout = handle
    return streams


# ---------------------------------------------------------------- stages


def _env_mapping(envp: Sequence[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in envp:
        key, sep, value = entry.partition("=")
        if sep:
            mapping[key] = value
    return mapping


def _run_builtin(state: ShellState, args: Sequence[str], target: IO[bytes] | None) -> int:
    """Run a builtin, sending its output to ``target`` when one is given."""
    if target is None:
        return run_builtin(state, args)
    sys.stdout.flush()
    wrapper = io.TextIOWrapper(
        target, encoding="utf-8", errors="surrogateescape", write_through=True
    )
    try:
        with redirect_stdout(wrapper):
            return run_builtin(state, args)
    finally:
        wrapper.flush()
        wrapper.detach()


def _builtin_stage(
    command: Command, state: ShellState, out: IO[bytes] | None, is_last: bool
) -> tuple[StageResult, Any]:
    # A builtin inside a pipeline works on its own copy of the state.
    child = ShellState(envp=list(state.envp), last_exit_status=state.last_exit_status)
    if out is not None or is_last:
        return _run_builtin(child, command.args, out), subprocess.DEVNULL
    buffer = tempfile.TemporaryFile()
    status = _run_builtin(child, command.args, buffer)
    buffer.seek(0)
    return status, buffer


def _external_stage(
    command: Command,
    state: ShellState,
    source: Any,
    out: IO[bytes] | None,
    is_last: bool,
) -> tuple[StageResult, Any]:
    path = find_command_path(command.args, get_paths(state.envp))
    if path is None:
        sys.stderr.write(f"minishell: {command.args[0]}: command not found\n")
        sys.stderr.flush()
        return NOT_FOUND_STATUS, subprocess.DEVNULL
    stdout: Any = out if out is not None else (None if is_last else subprocess.PIPE)
    sys.stdout.flush()
    try:
        process = subprocess.Popen(
            list(command.args),
            executable=path,
            stdin=source,
            stdout=stdout,
            env=_env_mapping(state.envp),
            preexec_fn=_reset_child_signals,
        )
    except OSError as error:
        _report("minishell: execve failed", error)
        return EXEC_FAILED_STATUS, subprocess.DEVNULL
    next_input = process.stdout if process.stdout is not None else subprocess.DEVNULL
    return process, next_input


def _start_stage(
    command: Command, state: ShellState, incoming: Any, is_last: bool
) -> tuple[StageResult, Any]:
    """Start one pipeline stage; return its result and the next stage's input."""
    try:
        streams = _open_redirections(command)
    except _RedirectionFailed:
        return REDIRECTION_FAILED_STATUS, subprocess.DEVNULL
    try:
        if not command.args or not command.args[0]:
            return 0, subprocess.DEVNULL
        if is_builtin(command.args[0]):
            return _builtin_stage(command, state, streams.stdout, is_last)
        source = streams.stdin if streams.stdin is not None else incoming
        return _external_stage(command, state, source, streams.stdout, is_last)
    finally:
        streams.close()


def _close_input(stream: Any) -> None:
    if stream is not None and not isinstance(stream, int):
        stream.close()


def _wait(result: StageResult) -> int:
    if isinstance(result, int):
        return result
    code = result.wait()
    return 128 - code if code < 0 else code


def _run_pipeline(commands: Sequence[Command], state: ShellState) -> int:
    stages: list[StageResult] = []
    incoming: Any = None
    for index, command in enumerate(commands):
        is_last = index == len(commands) - 1
        try:
            result, next_input = _start_stage(command, state, incoming, is_last)
        finally:
            _close_input(incoming)
        stages.append(result)
        incoming = next_input
    _close_input(incoming)
    status = 0
    for result in stages:
        status = _wait(result)
    state.last_exit_status = status
    return status


def _single_builtin(command: Command, state: ShellState) -> int:
    try:
        streams = _open_redirections(command)
    except _RedirectionFailed:
        state.last_exit_status = REDIRECTION_FAILED_STATUS
        return REDIRECTION_FAILED_STATUS
    try:
        status = _run_builtin(state, command.args, streams.stdout)
    finally:
        streams.close()
    state.last_exit_status = status
    return status


def _redirections_only(command: Command, state: ShellState) -> int:
    try:
        streams = _open_redirections(command)
    except _RedirectionFailed:
        status = REDIRECTION_FAILED_STATUS
    else:
        streams.close()
        status = 0
    state.last_exit_status = status
    return status


def execute_commands(commands: Sequence[Command], state: ShellState) -> int:
    """Run a pipeline and record its exit status in ``state``.

    A lone builtin runs in the shell itself so it can change the state;
    everything else runs as a pipeline whose status is that of its last
    stage. A first command with no words only opens its redirections.
    Returns the resulting status, or 0 when there was nothing to run.
    """
    commands = list(commands)
    if not commands:
        return 0
    first = commands[0]
    if not first.args:
        if first.redirections:
            return _redirections_only(first, state)
        return 0
    with _signal_mode(SignalMode.NON_INTERACTIVE):
        if len(commands) == 1 and is_builtin(first.args[0]):
            return _single_builtin(first, state)
        return _run_pipeline(commands, state)