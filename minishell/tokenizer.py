"""Splitting a spaced command line into tokens, with variable, tilde and escape expansion."""

from dataclasses import dataclass

from minishell.environment import Environment
from minishell.quoting import is_quote, is_sep, is_space, quote_state, skip_spaces


@dataclass
class Token:
    """One word of a command line after expansion."""

    contents: str
    quoted: bool = False
    is_sep: bool = False


def _char_at(text: str, index: int) -> str:
    if 0 <= index < len(text):
        return text[index]
    return ""


def _is_name_char(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalnum())


def _variable_name(text: str, start: int) -> str:
    """Return the run of name characters beginning at ``start``."""
    end = start
    while end < len(text) and _is_name_char(text[end]):
        end += 1
    return text[start:end]


def should_replace_tilde(text: str, index: int) -> bool:
    """True when the ``~`` at ``index`` starts a word and lies outside quotes."""
    return (
        (index == 0 or (index > 0 and _char_at(text, index - 1) == " "))
        and quote_state(text, index) == 0
        and _char_at(text, index) == "~"
    )


def should_expand_dollar(text: str, index: int) -> bool:
    """True when the ``$`` at ``index`` introduces a variable to expand."""
    following = _char_at(text, index + 1)
    return (
        quote_state(text, index) < 2
        and _char_at(text, index) == "$"
        and following not in ("", " ")
        and quote_state(text, index) == quote_state(text, index + 1)
    )


def _expand_dollar(
    text: str, index: int, env: Environment, last_exit_code: int
) -> tuple[str, int]:
    """Expand the variable whose ``$`` sits at ``index``; return value and next index."""
    if _char_at(text, index + 1) == "?":
        return str(last_exit_code), index + 2
    name = _variable_name(text, index + 1)
    value = env.get(name)
    return (value or ""), index + len(name) + 1


def _escaped(text: str, index: int) -> str:
    """Return what a backslash at ``index`` followed by a character produces."""
    escaped = text[index + 1]
    if escaped == "\\" or is_quote(escaped):
        return escaped
    if quote_state(text, index) == 1:
        return "\\" + escaped
    return escaped


def _in_token(text: str, index: int) -> bool:
    return index < len(text) and (
        quote_state(text, index) != 0 or not is_space(text[index])
    )


def read_token(
    text: str,
    index: int,
    env: Environment,
    home: str | None,
    last_exit_code: int,
) -> tuple[Token, int]:
    """Read the token starting at ``index``; return it and the index just past it."""
    if index >= len(text):
        raise ValueError("no token at the given position")
    quoted = is_quote(text[index])
    parts: list[str] = []
    i = index
    while _in_token(text, i):
        state = quote_state(text, i)
        ch = text[i]
        if state == 2:
            parts.append(ch)
            i += 1
        elif is_quote(ch) and state == 0:
            i += 1
        elif should_expand_dollar(text, i):
            value, i = _expand_dollar(text, i, env, last_exit_code)
            parts.append(value)
        elif ch == "\\":
            if i + 1 < len(text):
                parts.append(_escaped(text, i))
                quoted = True
                i += 2
            else:
                parts.append(ch)
                i += 1
        elif should_replace_tilde(text, i):
            parts.append(home or "")
            i += 1
        else:
            parts.append(ch)
            i += 1
    contents = "".join(parts)
    token = Token(
        contents=contents,
        quoted=quoted,
        is_sep=bool(contents) and is_sep(contents[0]) and not quoted,
    )
    return token, i


def expanded_length(
    text: str, env: Environment, home: str | None, last_exit_code: int
) -> int:
    """Return the space reserved for the first token of ``text`` after expansion.

    An exit-status expansion (``$?``) reserves one character more than it
    writes.
    """
    length = 0
    i = 0
    while _in_token(text, i):
        state = quote_state(text, i)
        ch = text[i]
        if state == 2:
            length += 1
            i += 1
        elif is_quote(ch) and state == 0:
            i += 1
        elif should_expand_dollar(text, i):
            if _char_at(text, i + 1) == "?":
                length += len(str(last_exit_code)) + 1
                i += 2
            else:
                name = _variable_name(text, i + 1)
                length += len(env.get(name) or "")
                i += len(name) + 1
        elif ch == "\\":
            if i + 1 < len(text):
                length += len(_escaped(text, i))
                i += 2
            else:
                length += 1
                i += 1
        elif should_replace_tilde(text, i):
            length += len(home or "")
            i += 1
        else:
            length += 1
            i += 1
    return length


def tokenize(
    spaced_line: str, env: Environment, home: str | None, last_exit_code: int
) -> list[Token]:
    """Split a spaced command line into expanded tokens.

    Raises ValueError when the line holds nothing but blanks.
    """
    i = skip_spaces(spaced_line, 0)
    if i >= len(spaced_line):
        raise ValueError("nothing to tokenize")
    tokens: list[Token] = []
    while i < len(spaced_line):
        token, i = read_token(spaced_line, i, env, home, last_exit_code)
        tokens.append(token)
        i = skip_spaces(spaced_line, i)
    return tokens


def _quoted_first_word(text: str) -> str | None:
    begin: int | None = None
    for i, ch in enumerate(text):
        if is_quote(ch):
            if begin is None:
                begin = i
            elif ch == text[begin]:
                return text[begin + 1:i]
        if i > 0 and begin is None and not is_space(ch) and not is_quote(ch):
            break
    return None


def _plain_first_word(text: str) -> str:
    if " " not in text:
        return text
    start = skip_spaces(text, 0)
    rest = text[start:]
    return rest[:rest.index(" ")] if " " in rest else rest


def first_word(text: str) -> str:
    """Return the first word of ``text``, taking a leading quoted span as one word."""
    text = text[skip_spaces(text, 0):]
    if not text:
        return ""
    quoted = _quoted_first_word(text)
    if quoted is not None:
        return quoted
    return _plain_first_word(text)


def not_first_word(text: str) -> str:
    """Return what follows the first word of ``text``, trimmed of outer blanks."""
    i = skip_spaces(text, 0)
    quote_at: int | None = None
    while i < len(text):
        ch = text[i]
        if is_space(ch) and quote_at is None:
            break
        if is_quote(ch) and quote_at is None:
            quote_at = i
        elif is_quote(ch) and quote_at is not None and text[quote_at] == ch:
            break
        i += 1
    if is_quote(_char_at(text, i)):
        i += 1
    i = skip_spaces(text, i)
    return trim_right(text[i:])


def trim_right(text: str) -> str:
    """Drop trailing blanks."""
    end = len(text)
    while end > 0 and is_space(text[end - 1]):
        end -= 1
    return text[:end]


def is_actual_separator(token: Token) -> bool:
    """True for an unquoted token that starts with a separator character."""
    return bool(token.contents) and is_sep(token.contents[0]) and not token.quoted