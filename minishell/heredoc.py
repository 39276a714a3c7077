"""Reading here-documents into a temporary file, with variable expansion."""

import os
from collections.abc import Callable

from minishell.environment import Environment

TEMP_HEREDOC = ".temp_heredoc"
HEREDOC_PROMPT = "> "


def _is_name_char(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalnum())


def expand_heredoc_line(line: str, env: Environment, last_exit_code: int) -> str:
    """Expand ``$NAME`` and ``$?`` in one here-document line and add a newline.

    A ``$`` at the end of the line or before a space is kept literally; one
    followed by no name character is dropped.
    """
    parts: list[str] = []
    i = 0
    while i < len(line):
        following = line[i + 1] if i + 1 < len(line) else ""
        if line[i] == "$" and following not in ("", " "):
            if following == "?":
                parts.append(str(last_exit_code))
                i += 2
                continue
            end = i + 1
            while end < len(line) and _is_name_char(line[end]):
                end += 1
            name = line[i + 1:end]
            parts.append(env.get(name) or "")
            i = end
        else:
            parts.append(line[i])
            i += 1
    parts.append("\n")
    return "".join(parts)


def heredoc(
    marker: str,
    env: Environment,
    last_exit_code: int = 0,
    input_func: Callable[[str], str] | None = None,
    path: str = TEMP_HEREDOC,
) -> bool:
    """Read lines until ``marker`` or end of input, writing them expanded to ``path``.

    The file is emptied first. Returns False when reading is interrupted
    with Ctrl-C, True otherwise.
    """
    read = input_func if input_func is not None else input
    with open(path, "w", encoding="utf-8") as out:
        while True:
            try:
                line = read(HEREDOC_PROMPT)
            except EOFError:
                return True
            except KeyboardInterrupt:
                return False
            if line == marker:
                return True
            out.write(expand_heredoc_line(line, env, last_exit_code))
            out.flush()


def clear_tempfile(path: str = TEMP_HEREDOC) -> None:
    """Remove the here-document file if it exists."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass