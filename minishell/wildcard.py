"""Expansion of unquoted ``*`` patterns against the names in a directory."""

import os
import stat
from collections.abc import Sequence
from dataclasses import dataclass, replace

from minishell.tokenizer import Token


@dataclass
class Match:
    """A directory entry whose name matched a wildcard pattern."""

    name: str
    isdir: bool
    is_match: bool = True


def is_match(filename: str, pattern: str) -> bool:
    """Tell whether ``filename`` matches ``pattern``, where ``*`` stands for any run.

    Names starting with a dot never match. After a ``*`` the match jumps to the
    first occurrence of the next pattern character and does not backtrack; a
    ``*`` followed by a single final character only compares the last
    character of the name.
    """
    if filename.startswith("."):
        return False
    f = 0
    m = 0
    name_len = len(filename)
    pattern_len = len(pattern)
    while m < pattern_len and f < name_len:
        if pattern[m] == "*":
            while m < pattern_len and pattern[m] == "*":
                m += 1
            if m == pattern_len:
                f = name_len
                continue
            if m + 1 == pattern_len:
                return filename[-1] == pattern[m]
            found = filename.find(pattern[m], f)
            if found == -1:
                return False
            f = found
        elif filename[f] == pattern[m]:
            f += 1
            m += 1
        else:
            break
    return m == pattern_len and f == name_len


def fetch_dir_contents(directory: str, pattern: str) -> list[Match]:
    """List the entries of ``directory`` matching ``pattern``, in directory order.

    Raises OSError when the directory cannot be read.
    """
    matches: list[Match] = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if not is_match(entry.name, pattern):
                continue
            try:
                mode = os.stat(os.path.join(directory, entry.name)).st_mode
                isdir = stat.S_ISDIR(mode)
            except OSError:
                isdir = False
            matches.append(Match(name=entry.name, isdir=isdir))
    return matches


def expand_wildcards(tokens: Sequence[Token], directory: str | None) -> list[Token]:
    """Replace each unquoted token holding ``*`` by the names it matches.

    The first match takes the token's place and the others follow it, each
    keeping the flags of the token it came from. Tokens without matches stay
    as they are, and so does everything when the directory cannot be read.
    The given sequence is not modified.
    """
    result = list(tokens)
    if directory is None:
        return result
    i = 0
    while i < len(result):
        token = result[i]
        if token.quoted or "*" not in token.contents:
            i += 1
            continue
        try:
            names = [match.name for match in fetch_dir_contents(directory, token.contents)]
        except OSError:
            return list(tokens)
        if names:
            result[i] = replace(token, contents=names[0])
            result[i + 1:i + 1] = [replace(token, contents=name) for name in names[1:]]
        i += 1
    return result