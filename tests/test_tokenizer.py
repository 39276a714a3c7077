import pytest

from minishell.environment import Environment
from minishell.quoting import space_separators
from minishell.tokenizer import (
    Token,
    expanded_length,
    first_word,
    is_actual_separator,
    not_first_word,
    read_token,
    should_expand_dollar,
    should_replace_tilde,
    tokenize,
    trim_right,
)

HOME = "/home/user"


@pytest.fixture
def env():
    return Environment([f"HOME={HOME}", "USER=alice"])


def contents(items):
    return [t.contents for t in items]


def test_tokenize_splits_words(env):
    words = tokenize("echo hello world", env, HOME, 0)
    assert contents(words) == ["echo", "hello", "world"]
    assert not any(t.is_sep or t.quoted for t in words)


def test_tokenize_marks_separators(env):
    words = tokenize(space_separators("cat|wc"), env, HOME, 0)
    assert contents(words) == ["cat", "|", "wc"]
    assert [t.is_sep for t in words] == [False, True, False]


def test_quoted_separator_is_not_a_separator(env):
    words = tokenize('echo "|"', env, HOME, 0)
    assert words[1].contents == "|"
    assert words[1].quoted
    assert not words[1].is_sep


def test_variable_expansion(env):
    words = tokenize("echo $USER", env, HOME, 0)
    assert words[1].contents == "alice"


def test_unset_variable_expands_to_nothing(env):
    words = tokenize("echo $NOPE", env, HOME, 0)
    assert words[1].contents == ""


def test_expansion_inside_double_quotes(env):
    words = tokenize('echo "$USER x"', env, HOME, 0)
    assert words[1].contents == "alice x"
    assert words[1].quoted


def test_no_expansion_inside_single_quotes(env):
    words = tokenize("echo '$USER'", env, HOME, 0)
    assert words[1].contents == "$USER"


def test_exit_code_expansion(env):
    words = tokenize("echo $?", env, HOME, 42)
    assert words[1].contents == str(42)


def test_tilde_expansion(env):
    assert tokenize("cd ~", env, HOME, 0)[1].contents == HOME
    assert tokenize("cd ~/docs", env, HOME, 0)[1].contents == HOME + "/docs"
    assert tokenize("cd a~", env, HOME, 0)[1].contents == "a~"


def test_escaped_quotes(env):
    word = tokenize(r"echo \"hi\"", env, HOME, 0)[1]
    assert word.contents == '"hi"'
    assert word.quoted


def test_escape_keeps_backslash_in_double_quotes(env):
    assert tokenize(r'echo "a\nb"', env, HOME, 0)[1].contents == r"a\nb"
    assert tokenize(r"echo a\nb", env, HOME, 0)[1].contents == "anb"


@pytest.mark.parametrize("line", ["", "   "])
def test_tokenize_blank_raises(env, line):
    with pytest.raises(ValueError):
        tokenize(line, env, HOME, 0)


def test_read_token_stops_at_space(env):
    text = "ab cd"
    parsed, index = read_token(text, 0, env, HOME, 0)
    assert parsed.contents == "ab"
    assert text[index] == " "


def test_read_token_past_end_raises(env):
    with pytest.raises(ValueError):
        read_token("ab", 2, env, HOME, 0)


@pytest.mark.parametrize(
    "text",
    ["hello", "~/x", "$USER", '"$USER"', "'$USER'", r"a\"b", "$NOPE", r'"a\nb"', "x y"],
)
def test_expanded_length_matches_written_token(env, text):
    parsed, _ = read_token(text, 0, env, HOME, 0)
    assert expanded_length(text, env, HOME, 0) == len(parsed.contents)


def test_expanded_length_reserves_room_for_exit_code(env):
    parsed, _ = read_token("$?", 0, env, HOME, 7)
    assert expanded_length("$?", env, HOME, 7) > len(parsed.contents)


@pytest.mark.parametrize(
    "text, index, expected",
    [("$A", 0, True), ("$ ", 0, False), ("$", 0, False), ('"$"', 1, False), ("'$A'", 1, False)],
)
def test_should_expand_dollar(text, index, expected):
    assert should_expand_dollar(text, index) is expected


@pytest.mark.parametrize(
    "text, index, expected",
    [("~", 0, True), ("a ~", 2, True), ("a~", 1, False), ("'~'", 1, False)],
)
def test_should_replace_tilde(text, index, expected):
    assert should_replace_tilde(text, index) is expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("  hello world", "hello"),
        ('"hello world" x', "hello world"),
        ("", ""),
        ("abc", "abc"),
        ("NAME=value", "NAME=value"),
        ('a "b"', "b"),
    ],
)
def test_first_word(text, expected):
    assert first_word(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [("echo hello world  ", "hello world"), ('"a b" c', "c"), ("word", "")],
)
def test_not_first_word(text, expected):
    assert not_first_word(text) == expected


@pytest.mark.parametrize("text, expected", [("abc  \t", "abc"), ("", ""), ("   ", "")])
def test_trim_right(text, expected):
    assert trim_right(text) == expected


def test_is_actual_separator():
    assert is_actual_separator(Token("|", is_sep=True))
    assert not is_actual_separator(Token("|", quoted=True))
    assert not is_actual_separator(Token("a"))
    assert not is_actual_separator(Token(""))