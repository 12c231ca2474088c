import pytest

from minishell.lexer import LexerError, tokenize
from minishell.models import ShellState, TokenType


def _lex(line, state=None):
    state = state if state is not None else ShellState()
    tokens = tokenize(line, state)
    return [t.value for t in tokens], [t.type for t in tokens]


def test_simple_words():
    values, types = _lex("ls -la")
    assert values == ["ls", "-la"]
    assert types == [TokenType.WORD, TokenType.WORD]


def test_tabs_separate_words():
    values, _ = _lex("echo\thello \t world")
    assert values == ["echo", "hello", "world"]


def test_operators_without_spaces():
    values, types = _lex("cat<in>>out|wc")
    assert values == ["cat", "<", "in", ">>", "out", "|", "wc"]
    assert types == [
        TokenType.WORD,
        TokenType.IN,
        TokenType.WORD,
        TokenType.APPEND_OUT,
        TokenType.WORD,
        TokenType.PIPE,
        TokenType.WORD,
    ]


def test_heredoc_and_out():
    values, types = _lex("cat << EOF > file")
    assert values == ["cat", "<<", "EOF", ">", "file"]
    assert types[1] is TokenType.HEREDOC
    assert types[3] is TokenType.OUT


def test_separated_redirections_are_separate_tokens():
    _, types = _lex("> >")
    assert types == [TokenType.OUT, TokenType.OUT]


def test_repeated_pipes():
    values, types = _lex("|||")
    assert values == ["|", "|", "|"]
    assert types == [TokenType.PIPE] * 3


def test_quotes_are_kept_in_words():
    values, _ = _lex('echo "a b" c')
    assert values == ["echo", '"a b"', "c"]


def test_adjacent_quoted_parts_form_one_word():
    values, types = _lex("a\"b c\"'d e'")
    assert values == ["a\"b c\"'d e'"]
    assert types == [TokenType.WORD]


def test_operators_inside_quotes_stay_in_word():
    values, types = _lex("echo 'x|y>z'")
    assert values == ["echo", "'x|y>z'"]
    assert types == [TokenType.WORD, TokenType.WORD]


def test_semicolon_inside_word_is_literal():
    values, _ = _lex("a;b")
    assert values == ["a;b"]


@pytest.mark.parametrize("line", ["", "   ", "\t \t", None])
def test_empty_input_gives_no_tokens(line):
    assert tokenize(line, ShellState()) == []


@pytest.mark.parametrize("line", ["echo \"abc", "echo 'abc", "a\"b'c"])
def test_unclosed_quote_raises(line):
    state = ShellState()
    with pytest.raises(LexerError) as info:
        tokenize(line, state)
    assert info.value.status == 258
    assert state.last_exit_status == 258
    assert "unclosed quote" in str(info.value)


@pytest.mark.parametrize("char", ["&", ";", "(", ")"])
def test_unsupported_character_raises(char):
    state = ShellState()
    with pytest.raises(LexerError) as info:
        tokenize(f"echo {char} x", state)
    assert state.last_exit_status == 258
    assert f"`{char}'" in str(info.value)


def test_success_leaves_status_untouched():
    state = ShellState(last_exit_status=5)
    tokenize("echo hi | cat", state)
    assert state.last_exit_status == 5


def test_token_values_rejoin_to_input_without_blanks():
    line = "cat <in| grep 'a b' >>out"
    values, _ = _lex(line)
    assert "".join(values) == line.replace(" ", "").replace("'ab'", "'a b'")