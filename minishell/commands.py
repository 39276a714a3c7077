"""Grouping tokens into commands: arguments, executable paths and redirections."""

import os
import stat
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from minishell.environment import Environment, split_path
from minishell.heredoc import TEMP_HEREDOC, heredoc
from minishell.tokenizer import Token

BUILTIN_NAMES = frozenset({"env", "unset", "pwd", "echo", "exit", "export", "cd"})
OPEN_FAILURE_MESSAGE = "No such file or no permissions\n"


@dataclass
class Command:
    """One simple command of a pipeline, with its redirections."""

    args: list[str] = field(default_factory=list)
    path: str | None = None
    infile: int | None = None
    outfile: int | None = None
    cancel: bool = False

    @property
    def argc(self) -> int:
        """Number of arguments, the command name included."""
        return len(self.args)


def is_builtin(name: str | None) -> bool:
    """True when ``name`` is one of the shell's own commands."""
    return name in BUILTIN_NAMES


def sep_right(tokens: Sequence[Token], index: int) -> int | None:
    """Return the position of the first separator at or after ``index``, or None."""
    for position in range(index, len(tokens)):
        if tokens[position].is_sep:
            return position
    return None


def build_argv(tokens: Sequence[Token], index: int) -> list[str]:
    """Collect the arguments of the command starting at ``index``.

    Redirection operators and the file name after them are left out; the
    command ends at the first ``|`` or ``;`` separator.
    """
    argv: list[str] = []
    i = index
    while i < len(tokens):
        token = tokens[i]
        if token.is_sep:
            if not token.contents.startswith(("<", ">")):
                break
            while i < len(tokens) and tokens[i].is_sep:
                i += 1
            i += 1
            continue
        argv.append(token.contents)
        i += 1
    return argv


def is_regular_file(path: str | None, verbose: bool = False) -> bool:
    """True when ``path`` names an existing regular file.

    Missing files are reported on stderr when ``verbose`` is set;
    directories are always reported.
    """
    if not path:
        return False
    if not os.access(path, os.F_OK):
        if verbose:
            sys.stderr.write(f"minishell: {path}: No such file or directory\n")
        return False
    try:
        mode = os.stat(path).st_mode
    except OSError:
        sys.stderr.write("Fatal error could not stat()\n")
        return False
    if stat.S_ISREG(mode):
        return True
    if stat.S_ISDIR(mode):
        sys.stderr.write(f"minishell: {path}: Is a directory\n")
    return False


def resolve_path(command: Command, env: Environment) -> str | None:
    """Find the program ``command`` runs, store it in ``command.path`` and return it.

    Builtins resolve to their own name; other names are looked up in each
    directory of PATH and then taken as a file path of their own.
    """
    if not command.args:
        return None
    name = command.args[0]
    if is_builtin(name):
        command.path = name
        return command.path
    for directory in split_path(env.get("PATH")):
        candidate = f"{directory}/{name}"
        if is_regular_file(candidate, False):
            command.path = candidate
            break
    if command.path is None and is_regular_file(name, False):
        command.path = name
    return command.path


def _filename(tokens: Sequence[Token], index: int) -> str | None:
    """Return the word after the separator run found from ``index``."""
    position = sep_right(tokens, index)
    if position is None:
        return None
    while position + 1 < len(tokens) and tokens[position].is_sep:
        position += 1
    return tokens[position].contents


def _close(fd: int | None) -> None:
    if fd is not None:
        try:
            os.close(fd)
        except OSError:
            pass


def set_infile(
    command: Command,
    tokens: Sequence[Token],
    index: int,
    env: Environment,
    last_exit_code: int = 0,
) -> bool:
    """Apply an input redirection (``<`` or ``<<``) found from ``index``.

    A missing input file cancels the command. Always returns True.
    """
    position = sep_right(tokens, index)
    if (
        position is None
        or not tokens[position].contents.startswith("<")
        or position + 1 >= len(tokens)
        or tokens[position + 1].is_sep
    ):
        return True
    operator = tokens[position].contents
    filename = _filename(tokens, index)
    if operator == "<":
        if not is_regular_file(filename, True):
            command.cancel = True
            return True
        target = filename
    elif operator == "<<":
        heredoc(filename or "", env, last_exit_code)
        target = TEMP_HEREDOC
    else:
        return True
    _close(command.infile)
    command.infile = None
    try:
        command.infile = os.open(target, os.O_RDONLY)
    except OSError:
        sys.stderr.write(OPEN_FAILURE_MESSAGE)
    return True


def set_outfile(command: Command, tokens: Sequence[Token], index: int) -> bool:
    """Apply an output redirection (``>`` or ``>>``) found from ``index``.

    Always returns True; a file that cannot be opened leaves no output file.
    """
    position = sep_right(tokens, index)
    if position is None or not tokens[position].contents.startswith(">"):
        return True
    operator = tokens[position].contents
    if operator == ">>":
        flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND
    elif operator == ">":
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    else:
        return True
    _close(command.outfile)
    command.outfile = None
    filename = _filename(tokens, position)
    try:
        command.outfile = os.open(filename or "", flags, 0o644)
    except OSError:
        sys.stderr.write(OPEN_FAILURE_MESSAGE)
    return True


def build_commands(
    tokens: Sequence[Token], env: Environment, last_exit_code: int = 0
) -> list[Command]:
    """Turn a token list into commands, one for each part between pipes."""
    commands: list[Command] = []
    current: Command | None = None
    separator: int | None = None
    index = 0
    while index < len(tokens):
        if current is None or (
            separator is not None and tokens[separator].contents.startswith("|")
        ):
            current = Command(args=build_argv(tokens, index))
            resolve_path(current, env)
            commands.append(current)
        set_outfile(current, tokens, index)
        set_infile(current, tokens, index, env, last_exit_code)
        separator = sep_right(tokens, index)
        if separator is None:
            break
        index = separator + 1
    return commands