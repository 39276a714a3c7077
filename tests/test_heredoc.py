import pytest

from minishell.environment import Environment
from minishell.heredoc import clear_tempfile, expand_heredoc_line, heredoc


def feeder(lines, prompts=None):
    it = iter(lines)

    def read(prompt):
        if prompts is not None:
            prompts.append(prompt)
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return read


@pytest.fixture
def env():
    return Environment(["USER=alice", "X=1"])


def test_expand_variable(env):
    assert expand_heredoc_line("hello $USER", env, 0) == "hello alice\n"


def test_expand_exit_code(env):
    assert expand_heredoc_line("$?", env, 42) == "42\n"


def test_dollar_before_space_and_end_kept(env):
    assert expand_heredoc_line("cost $ 5 $", env, 0) == "cost $ 5 $\n"


def test_undefined_variable_disappears(env):
    assert expand_heredoc_line("$UNDEFINED end", env, 0) == " end\n"


def test_dollar_without_name_is_dropped(env):
    assert expand_heredoc_line("$-x", env, 0) == "-x\n"


def test_line_without_dollar_is_unchanged(env):
    line = "plain text"
    assert expand_heredoc_line(line, env, 0) == line + "\n"


def test_heredoc_stops_at_marker(tmp_path, env):
    path = tmp_path / "doc"
    prompts = []
    ok = heredoc("EOF", env, 0, feeder(["a $X", "b", "EOF", "after"], prompts), str(path))
    assert ok is True
    assert path.read_text() == "a 1\nb\n"
    assert prompts == ["> "] * 3


def test_heredoc_end_of_input(tmp_path, env):
    path = tmp_path / "doc"
    assert heredoc("EOF", env, 0, feeder(["only"]), str(path)) is True
    assert path.read_text() == "only\n"


def test_heredoc_truncates_previous_content(tmp_path, env):
    path = tmp_path / "doc"
    path.write_text("old content\n")
    heredoc("EOF", env, 0, feeder(["EOF"]), str(path))
    assert path.read_text() == ""


def test_heredoc_interrupted(tmp_path, env):
    path = tmp_path / "doc"

    def read(prompt):
        raise KeyboardInterrupt

    assert heredoc("EOF", env, 0, read, str(path)) is False


def test_clear_tempfile(tmp_path):
    path = tmp_path / "doc"
    path.write_text("x")
    clear_tempfile(str(path))
    assert not path.exists()
    clear_tempfile(str(path))
    assert not path.exists()