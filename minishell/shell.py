"""The interactive shell: read a line, check it, expand it and run it."""

import os
import signal
import sys
import threading
from collections.abc import Callable, Iterable, Mapping
from contextlib import contextmanager, suppress

from minishell.builtins import ShellExit
from minishell.commands import Command, build_commands
from minishell.environment import Environment
from minishell.executor import execute
from minishell.quoting import quotes_matched, space_separators
from minishell.syntax import check_tokens_syntax, early_syntax_check, has_wildcards
from minishell.tokenizer import Token, tokenize
from minishell.wildcard import expand_wildcards

PROMPT = "Minishell:"
TEMP_HEREDOC = ".temp_heredoc"

# Every control character and the space count as blanks.
_BLANKS = "".join(chr(code) for code in range(1, 33))


@contextmanager
def _prompt_signals():
    """Ignore SIGQUIT while the prompt is waiting for input."""
    if threading.current_thread() is not threading.main_thread() or not hasattr(
        signal, "SIGQUIT"
    ):
        yield
        return
    previous = signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    if previous is None:
        previous = signal.SIG_DFL
    try:
        yield
    finally:
        signal.signal(signal.SIGQUIT, previous)


class Shell:
    """State kept between the lines of one shell session."""

    def __init__(self, environ=None):
        if environ is None:
            environ = os.environ
        if isinstance(environ, Mapping):
            entries = [f"{key}={value}" for key, value in environ.items()]
        else:
            entries = list(environ)
        self.env = Environment(entries)
        if not len(self.env):
            raise ValueError("the environment is empty")
        home = self.env.get("HOME")
        if home is None:
            raise ValueError("HOME is not set")
        self.home: str = home
        self.last_exit_code = 0
        self.spaced_input: str | None = None
        self.tokens: list[Token] = []
        self.commands: list[Command] = []

    def run_line(self, line: str) -> int:
        """Check, expand and run one input line; return the last exit code."""
        stripped = line.lstrip(_BLANKS)
        if not stripped:
            return self.last_exit_code
        self.spaced_input = space_separators(stripped)
        if (
            not self.spaced_input
            or not quotes_matched(self.spaced_input)
            or not early_syntax_check(self.spaced_input)
        ):
            return self.last_exit_code
        try:
            if not self._parse_tokenize_execute():
                self.last_exit_code = 1
        finally:
            self.clear_last_command()
        return self.last_exit_code

    def _parse_tokenize_execute(self) -> bool:
        try:
            self.tokens = tokenize(
                self.spaced_input, self.env, self.home, self.last_exit_code
            )
        except ValueError:
            return False
        if not check_tokens_syntax(self.tokens):
            return False
        if has_wildcards(self.tokens):
            self._expand_wildcards()
        try:
            self.commands = build_commands(self.tokens, self.env, self.last_exit_code)
        except (ValueError, OSError):
            return False
        self.last_exit_code = execute(self.commands, self.env, self.last_exit_code)
        return True

    def _expand_wildcards(self) -> None:
        directory = self.env.get("PWD")
        if directory is None or not os.path.isdir(directory):
            return
        try:
            expanded = expand_wildcards(self.tokens, directory)
        except OSError:
            return
        if expanded is not None:
            self.tokens = list(expanded)

    def _read_line(self, read: Callable[[str], str]) -> str | None:
        with _prompt_signals():
            while True:
                try:
                    return read(PROMPT)
                except KeyboardInterrupt:
                    print()
                except EOFError:
                    return None

    def loop(self, input_func: Callable[[str], str] | None = None) -> int:
        """Read and run lines until end of input or the exit builtin."""
        read = input_func or input
        while True:
            line = self._read_line(read)
            if line is None:
                return 1
            try:
                self.run_line(line)
            except ShellExit as exc:
                return exc.code

    def clear_last_command(self) -> None:
        """Forget the last line's tokens and commands and drop the heredoc file."""
        self.commands = []
        self.tokens = []
        with suppress(FileNotFoundError):
            os.remove(TEMP_HEREDOC)
        self.spaced_input = None


def main(argv: Iterable[str] | None = None) -> int:
    """Start an interactive session."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        print("This program takes no arguments, they will be ignored.")
    try:
        shell = Shell(os.environ)
    except ValueError:
        print("Failure initializing the shell")
        return 3
    try:
        import readline  # noqa: F401  (gives input() line editing and history)
    except ImportError:
        pass
    try:
        return shell.loop()
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())