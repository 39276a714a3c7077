"""The shell's built-in commands: echo, env, pwd, unset, export, cd and exit."""

import errno
import os
import sys
from collections.abc import Sequence
from typing import TextIO

from minishell.environment import Environment
from minishell.quoting import is_space
from minishell.tokenizer import first_word

NO_SUCH_PATH = "no such path"


class ShellExit(Exception):
    """Raised by the exit builtin; ``code`` is the status the shell ends with."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def atoi(text: str) -> int:
    """Read a leading optionally signed decimal number, skipping blanks; 0 if none."""
    i = 0
    while i < len(text) and (text[i] == " " or "\t" <= text[i] <= "\r"):
        i += 1
    sign = 1
    if i < len(text) and text[i] in "+-":
        if text[i] == "-":
            sign = -1
        i += 1
    start = i
    while i < len(text) and "0" <= text[i] <= "9":
        i += 1
    return sign * int(text[start:i]) if i > start else 0


def _is_n_flag(arg: str) -> bool:
    return arg.startswith("-n") and all(ch == "n" for ch in arg[2:])


def _write_words(words: Sequence[str], out: TextIO) -> None:
    for position, word in enumerate(words):
        if word:
            out.write(word)
            if position + 1 < len(words):
                out.write(" ")


def program_echo(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments; leading ``-n`` flags suppress the final newline."""
    out = out if out is not None else sys.stdout
    i = 1
    while i < len(args):
        first = args[1]
        if first == "-n" or (first.startswith("-n") and _is_n_flag(args[i])):
            while i < len(args) and _is_n_flag(args[i]):
                i += 1
            _write_words(args[i:], out)
            return 0
        word = args[i]
        if word:
            out.write(word)
            if i + 1 < len(args):
                out.write(" ")
        i += 1
    out.write("\n")
    return 0


def program_env(env: Environment, out: TextIO | None = None) -> int:
    """Print every environment entry, one per line."""
    out = out if out is not None else sys.stdout
    for entry in env:
        print(entry, file=out)
    return 0


def program_pwd(out: TextIO | None = None) -> int:
    """Print the working directory; return 1 when it cannot be determined."""
    out = out if out is not None else sys.stdout
    try:
        cwd = os.getcwd()
    except OSError:
        return 1
    print(cwd, file=out)
    return 0


def program_unset(args: Sequence[str], env: Environment) -> int:
    """Remove the variable named by the first argument; 1 when it is not set."""
    if len(args) < 2:
        return 0
    return 0 if env.unset(args[1]) else 1


def _valid_identifier(arg: str, err: TextIO) -> bool:
    within_name = True
    for position, ch in enumerate(arg):
        if ch == "=" and position > 0:
            within_name = False
        if within_name and not (ch.isascii() and ch.isalpha()):
            err.write(f"export: `{arg} not a valid identifier\n")
            return False
    return True


def program_export(
    args: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Set a variable from ``NAME=value``, or list the environment without one."""
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr
    arg = args[1] if len(args) > 1 else None
    if not arg:
        for entry in env:
            print(f"declare -x {entry}", file=out)
        return 0
    if not _valid_identifier(arg, err):
        return 1
    equals = arg.find("=")
    if equals == -1:
        if arg not in env.to_list():
            env.append(first_word(arg))
        return 0
    name_prefix = arg[:equals + 1]
    if env.replace_prefixed(name_prefix, arg):
        return 0
    after = arg[equals + 1:equals + 2]
    if after and is_space(after):
        env.append(name_prefix)
    else:
        env.append(first_word(arg))
    return 0


def _report_no_path(err: TextIO) -> None:
    err.write(f"{NO_SUCH_PATH}: {os.strerror(errno.ENOENT)}\n")


def _update_oldpwd(env: Environment) -> None:
    env.replace_prefixed("OLDPWD=", "OLDPWD=" + (env.get("PWD") or ""))


def _update_pwd(env: Environment, path: str) -> None:
    env.replace_prefixed("PWD=", "PWD=" + path)


def _change_dir(path: str) -> None:
    try:
        os.chdir(path)
    except OSError:
        pass


def _cd_home(env: Environment, err: TextIO) -> None:
    home = env.get("HOME")
    if home and os.access(home, os.F_OK):
        _update_oldpwd(env)
        _change_dir(home)
        _update_pwd(env, home)
    else:
        _report_no_path(err)


def program_cd(
    args: Sequence[str], env: Environment, err: TextIO | None = None
) -> int:
    """Change directory, keeping PWD and OLDPWD up to date.

    Without an argument or with ``~`` the target is HOME.
    """
    err = err if err is not None else sys.stderr
    if len(args) > 2:
        err.write("cd: too many arguments\n")
        return 1
    if not args or args[0] != "cd":
        return 0
    if len(args) == 1 or args[1] == "~":
        _cd_home(env, err)
        return 0
    target = args[1]
    if not os.access(target, os.F_OK):
        _report_no_path(err)
        return 1
    _update_oldpwd(env)
    _change_dir(target)
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = ""
    _update_pwd(env, cwd)
    return 0


def program_exit(args: Sequence[str], last_exit_code: int = 0) -> int:
    """Leave the shell by raising ShellExit with the requested or last status."""
    code = atoi(args[1]) % 256 if len(args) == 2 else last_exit_code
    raise ShellExit(code)


def run_builtin(
    args: Sequence[str],
    env: Environment,
    last_exit_code: int = 0,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run the builtin named by ``args[0]`` and return its status; 1 if unknown."""
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr
    name = args[0] if args else ""
    if name == "env":
        return program_env(env, out)
    if name == "unset":
        return program_unset(args, env)
    if name == "pwd":
        return program_pwd(out)
    if name == "echo":
        return program_echo(args, out)
    if name == "exit":
        return program_exit(args, last_exit_code)
    if name == "export":
        return program_export(args, env, out, err)
    if name == "cd":
        return program_cd(args, env, err)
    return 1