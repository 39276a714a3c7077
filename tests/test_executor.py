import io
import os
import sys

import pytest

from minishell.builtins import ShellExit
from minishell.commands import Command
from minishell.environment import Environment
from minishell.executor import execute


def _python(code, **kwargs):
    return Command(args=[sys.executable, "-c", code], path=sys.executable, **kwargs)


def _open_out(path):
    return os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)


def test_single_builtin_writes_to_outfile(tmp_path):
    target = tmp_path / "out.txt"
    command = Command(args=["echo", "hi"], path="echo", outfile=_open_out(target))
    status = execute([command], Environment(["HOME=/"]), 0)
    assert status == 0
    assert target.read_text() == "hi\n"
    assert command.outfile is None


def test_single_env_builtin_lists_entries(tmp_path):
    target = tmp_path / "env.txt"
    env = Environment(["A=1", "B=2"])
    command = Command(args=["env"], path="env", outfile=_open_out(target))
    assert execute([command], env, 0) == 0
    assert target.read_text().splitlines() == ["A=1", "B=2"]


def test_single_builtin_changes_shell_environment():
    env = Environment(["HOME=/"])
    command = Command(args=["export", "X=1"], path="export")
    assert execute([command], env, 0) == 0
    assert env.get("X") == "1"


def test_external_command_exit_status():
    command = _python("import sys; sys.exit(3)")
    assert execute([command], Environment(["HOME=/"]), 0) == 3


def test_command_not_found(capsys):
    command = Command(args=["nope"], path=None)
    status = execute([command], Environment(["HOME=/"]), 0)
    assert status == 127
    assert capsys.readouterr().out == "nope: command not found\n"


def test_cancelled_command_keeps_previous_status():
    command = _python("import sys; sys.exit(9)", cancel=True)
    assert execute([command], Environment(["HOME=/"]), 42) == 42


def test_single_exit_raises_shell_exit():
    command = Command(args=["exit", "5"], path="exit")
    with pytest.raises(ShellExit) as info:
        execute([command], Environment(["HOME=/"]), 0)
    assert info.value.code == 5


def test_exit_inside_pipeline_does_not_leave_shell():
    first = Command(args=["exit", "5"], path="exit")
    second = _python("import sys; sys.exit(0)")
    assert execute([first, second], Environment(["HOME=/"]), 0) == 0


def test_pipeline_status_is_from_last_command():
    first = _python("import sys; sys.exit(0)")
    second = Command(args=["exit", "5"], path="exit")
    assert execute([first, second], Environment(["HOME=/"]), 0) == 5


def test_builtin_output_feeds_next_command(tmp_path):
    target = tmp_path / "piped.txt"
    first = Command(args=["echo", "hello"], path="echo")
    second = _python(
        "import sys; sys.stdout.write(sys.stdin.read().upper())",
        outfile=_open_out(target),
    )
    assert execute([first, second], Environment(["HOME=/"]), 0) == 0
    assert target.read_text() == "HELLO\n"


def test_external_pipeline(tmp_path):
    target = tmp_path / "chain.txt"
    first = _python("print('abc')")
    second = _python(
        "import sys; sys.stdout.write(sys.stdin.read())", outfile=_open_out(target)
    )
    assert execute([first, second], Environment(["HOME=/"]), 0) == 0
    assert target.read_text() == "abc\n"


def test_infile_feeds_standard_input(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("from file")
    target = tmp_path / "copy.txt"
    command = _python(
        "import sys; sys.stdout.write(sys.stdin.read())",
        infile=os.open(source, os.O_RDONLY),
        outfile=_open_out(target),
    )
    assert execute([command], Environment(["HOME=/"]), 0) == 0
    assert target.read_text() == "from file"
    assert command.infile is None


def test_builtin_in_pipeline_leaves_environment_alone():
    env = Environment(["HOME=/"])
    first = Command(args=["export", "X=1"], path="export")
    second = _python("pass")
    execute([first, second], env, 0)
    assert env.get("X") is None
    assert len(env) == 1


def test_external_sees_environment(tmp_path):
    target = tmp_path / "var.txt"
    env = Environment(["HOME=/", "GREETING=hello"])
    command = _python(
        "import os; print(os.environ['GREETING'])", outfile=_open_out(target)
    )
    assert execute([command], env, 0) == 0
    assert target.read_text() == "hello\n"