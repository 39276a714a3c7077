"""Running a list of commands as a pipeline, builtins included."""

import io
import os
import subprocess
import sys
import threading
from collections.abc import Sequence

from minishell.builtins import ShellExit, run_builtin
from minishell.commands import Command, is_builtin
from minishell.environment import Environment

COMMAND_NOT_FOUND_STATUS = 127
EXEC_FAILURE_STATUS = 1


def _child_environ(env: Environment) -> dict[str, str]:
    """Build the environment handed to external programs."""
    result: dict[str, str] = {}
    for entry in env:
        name, sep, value = entry.partition("=")
        if sep:
            result[name] = value
    return result


def _close_quietly(fd: int | None) -> None:
    if fd is not None:
        try:
            os.close(fd)
        except OSError:
            pass


def _close_redirections(command: Command) -> None:
    _close_quietly(command.infile)
    _close_quietly(command.outfile)
    command.infile = None
    command.outfile = None


def _write_all(fd: int, data: bytes, close: bool) -> None:
    try:
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]
    except BrokenPipeError:
        pass
    finally:
        if close:
            _close_quietly(fd)


def _run_single_builtin(command: Command, env: Environment, last_exit_code: int) -> int:
    """Run a lone builtin in the shell itself, so it can change the shell's state."""
    sys.stdout.flush()
    if command.outfile is not None:
        with os.fdopen(os.dup(command.outfile), "w", encoding="utf-8") as out:
            return run_builtin(command.args, env, last_exit_code, out, sys.stderr)
    status = run_builtin(command.args, env, last_exit_code, sys.stdout, sys.stderr)
    sys.stdout.flush()
    return status


def _run_piped_builtin(
    command: Command, env: Environment, last_exit_code: int
) -> tuple[int, bytes]:
    """Run a builtin as a pipeline member: on a copy of the environment, output captured."""
    buffer = io.StringIO()
    try:
        status = run_builtin(
            command.args, Environment(env.to_list()), last_exit_code, buffer, sys.stderr
        )
    except ShellExit as exc:
        status = exc.code
    return status, buffer.getvalue().encode("utf-8")


def execute(
    commands: Sequence[Command], env: Environment, last_exit_code: int = 0
) -> int:
    """Run ``commands`` connected by pipes and return the resulting exit status.

    A single builtin runs in the shell itself and may raise ShellExit; inside
    a pipeline builtins run on a copy of the environment. Cancelled commands
    are skipped. The status is that of the last command started; when none
    is started the previous status is kept.
    """
    status = last_exit_code
    last_job: subprocess.Popen | int | None = None
    processes: list[subprocess.Popen] = []
    writers: list[threading.Thread] = []
    prev_read: int | None = None
    child_env = _child_environ(env)
    sys.stdout.flush()
    try:
        for position, command in enumerate(commands):
            try:
                if command.cancel or not command.args:
                    continue
                if len(commands) == 1 and is_builtin(command.args[0]):
                    status = _run_single_builtin(command, env, last_exit_code)
                    last_job = None
                    continue
                read_end: int | None = None
                write_end: int | None = None
                if position + 1 < len(commands):
                    read_end, write_end = os.pipe()
                stdin = command.infile if command.infile is not None else prev_read
                stdout = command.outfile if command.outfile is not None else write_end
                if command.path is None:
                    print(f"{command.args[0]}: command not found")
                    sys.stdout.flush()
                    last_job = COMMAND_NOT_FOUND_STATUS
                elif is_builtin(command.args[0]):
                    code, data = _run_piped_builtin(command, env, last_exit_code)
                    last_job = code
                    if stdout is None:
                        sys.stdout.buffer.write(data) if hasattr(
                            sys.stdout, "buffer"
                        ) else sys.stdout.write(data.decode("utf-8"))
                        sys.stdout.flush()
                    elif stdout == write_end:
                        writer = threading.Thread(
                            target=_write_all, args=(write_end, data, True), daemon=True
                        )
                        writers.append(writer)
                        writer.start()
                        write_end = None
                    else:
                        _write_all(stdout, data, False)
                else:
                    try:
                        process = subprocess.Popen(
                            command.args,
                            executable=command.path,
                            stdin=stdin,
                            stdout=stdout,
                            env=child_env,
                        )
                    except OSError as exc:
                        sys.stderr.write(f"child execve: {exc.strerror}\n")
                        last_job = EXEC_FAILURE_STATUS
                    else:
                        processes.append(process)
                        last_job = process
                _close_quietly(prev_read)
                _close_quietly(write_end)
                prev_read = read_end
            finally:
                _close_redirections(command)
    finally:
        _close_quietly(prev_read)
        if isinstance(last_job, subprocess.Popen):
            # A program killed by a signal reports status 0, as WEXITSTATUS does.
            status = max(last_job.wait(), 0)
        elif isinstance(last_job, int):
            status = last_job
        for process in processes:
            process.wait()
        for writer in writers:
            writer.join()
    return status