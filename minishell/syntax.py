"""Syntax checks on raw command lines and on token lists."""

from collections.abc import Sequence

from minishell.quoting import is_sep, is_space, quote_state
from minishell.tokenizer import Token, is_actual_separator

SYNTAX_ERROR_MESSAGE = "Syntax error;"


def _has_double_pipe(text: str) -> bool:
    i = 0
    n = len(text)
    while i < n:
        while i < n and quote_state(text, i) != 0:
            i += 1
        if i < n and text[i] == "\\":
            i += 2
        if text[i:i + 2] == "||":
            return True
        i += 1
    return False


def early_syntax_check(text: str) -> bool:
    """Reject lines that start with a separator or blank, or hold an unquoted ``||``."""
    valid = True
    if text and (is_sep(text[0]) or is_space(text[0])):
        valid = False
    if valid and _has_double_pipe(text):
        valid = False
    if not valid:
        print(SYNTAX_ERROR_MESSAGE)
    return valid


def check_tokens_syntax(tokens: Sequence[Token]) -> bool:
    """Check that separators are followed by something they may precede."""
    for position, token in enumerate(tokens):
        if not is_actual_separator(token):
            continue
        if position + 1 >= len(tokens):
            print(f"syntax error to the right of token '{token.contents}'")
            return False
        following = tokens[position + 1]
        if is_actual_separator(following) and (
            token.contents,
            following.contents,
        ) != ("<", ">"):
            print(f"syntax error near unexpected token '{following.contents}'")
            return False
    return True


def has_wildcards(tokens: Sequence[Token]) -> bool:
    """True when a token after the first is unquoted and holds a ``*``."""
    return any(not t.quoted and "*" in t.contents for t in tokens[1:])