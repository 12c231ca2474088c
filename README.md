# minishell

The building blocks of a small bash-like shell, as a Python library:

- `minishell.models`: the data the shell works on: `TokenType`, `Token`,
  `RedirType` (with `RedirType.from_token`), `Redirection`, `Command` (its
  `args`, `redirections`, a `heredoc` body and a `name` property) and
  `ShellState` (environment entries as `KEY=VALUE` strings, last exit status,
  and whether the shell should exit).
- `minishell.environment`: `init_shell` creates a state from a list of
  `KEY=VALUE` strings or a mapping (the process environment by default);
  `get_env_value` reads a variable (`?` gives the last exit status, unknown
  names give an empty string); `set_env_var` replaces or appends an entry;
  `is_blank` is true for `None`, empty or whitespace-only text.
- `minishell.lexer`: `tokenize` splits a line into words and the operators
  `|`, `<`, `>`, `>>`, `<<`, leaving quotes inside words untouched. An
  unclosed quote, or one of `&`, `;`, `(`, `)` at the start of a token,
  raises `LexerError` and sets the exit status to 258.
- `minishell.expander`: `expand_string` expands `$NAME` and `$?` and removes
  quotes; nothing is expanded inside single quotes, and `$` followed by a
  digit stays literal. `expand_variables` applies it in place to every
  argument and redirection target of a list of commands.
- `minishell.heredoc`: `collect_heredocs` reads the body of each `<<`
  redirection through a callable that takes a prompt and returns a line
  (`None` or `EOFError` meaning end of input; `input` is used when none is
  given). Only the last heredoc of a command is kept, in `Command.heredoc`,
  expanded when its `expand_heredoc_content` flag is set. End of input
  before the delimiter raises `HeredocError` with status 1; a
  `KeyboardInterrupt` raises it with status 130.
- `minishell.builtins`: `echo` (with `-n`, `-nnn`), `cd` (no argument or an
  empty one goes to `HOME`, `-` goes to `OLDPWD`, `..`, `.`; keeps `PWD` and
  `OLDPWD` updated), `pwd`, `export` (lists sorted `declare -x` lines when
  given no names), `unset`, `env` and `exit_shell` (prints `exit`, sets
  `should_exit`, truncates the status to 8 bits), dispatched through
  `is_builtin` and `run_builtin`. `is_valid_export_name` checks a name for
  `export`.
- `minishell.executor`: `execute_commands` runs a list of commands as a
  pipeline, with `<`, `>`, `>>` redirections and heredoc input. A lone
  builtin runs in the shell itself and can change the state; builtins inside
  a longer pipeline work on a copy. Other commands run as child processes;
  an unknown command gives status 127. `get_paths` and `find_command_path`
  do the `PATH` lookup, falling back to `/usr/local/bin:/usr/bin:/bin` when
  `PATH` is unset or empty. `set_signals` installs the SIGINT/SIGQUIT
  handling of a `SignalMode`: `INTERACTIVE`, `NON_INTERACTIVE` or `CHILD`.

## Installing

```
pip install .
pip install ".[test]"   # with pytest
```

## Example

```python
from minishell.environment import init_shell, get_env_value, set_env_var
from minishell.expander import expand_string, expand_variables
from minishell.executor import execute_commands
from minishell.lexer import tokenize
from minishell.models import Command, Redirection, RedirType

state = init_shell(["HOME=/home/user", "PATH=/usr/bin:/bin"])

tokens = tokenize('echo "$HOME" | wc -c', state)
print([token.value for token in tokens])
# ['echo', '"$HOME"', '|', 'wc', '-c']

print(expand_string('"$HOME"/docs', state))   # /home/user/docs
print(expand_string("'$HOME'", state))         # $HOME

set_env_var(state, "GREETING", "hello")
print(get_env_value(state, "GREETING"))        # hello

# Commands are built by hand, then expanded and run.
commands = [
    Command(args=["echo", "$GREETING", "world"]),
    Command(
        args=["tr", "a-z", "A-Z"],
        redirections=[Redirection(RedirType.OUT, "out.txt")],
    ),
]
expand_variables(commands, state)
status = execute_commands(commands, state)
print(status, state.last_exit_status)          # 0 0  (out.txt holds "HELLO WORLD")
```

## What it does not do

There is no parser that turns the lexer's tokens into `Command` objects:
commands have to be built by the caller. There is also no interactive
prompt or command-line program; the package provides the pieces (lexing,
expansion, heredoc reading, builtins and execution) and leaves the
read-eval loop to the code that uses it.

## Running the tests

```
pytest
```