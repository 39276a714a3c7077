"""Quote tracking, separator detection and spacing of raw command lines."""

SEPARATORS = "<>;|"
QUOTES = "'\""
MISMATCHED_QUOTES_MESSAGE = "Syntax error, mismatched quotes"


def _at(text: str, index: int) -> str:
    """Return the character at ``index``, or an empty string when out of range."""
    if 0 <= index < len(text):
        return text[index]
    return ""


def is_quote(c: str) -> bool:
    """True for a single or double quote character."""
    return len(c) == 1 and c in QUOTES


def is_sep(c: str) -> bool:
    """True for one of the shell separator characters ``< > ; |``."""
    return len(c) == 1 and c in SEPARATORS


def is_space(c: str) -> bool:
    """True for any control or blank character (code point 1 to 32)."""
    return len(c) == 1 and c != "\0" and ord(c) <= 32


def _is_escaped_quote(text: str, index: int) -> bool:
    if index < 0:
        return False
    if index == 0 and is_quote(_at(text, 0)):
        return False
    if index > 1 and _at(text, index - 1) == "\\" and _at(text, index - 2) == "\\":
        return False
    return index > 0 and _at(text, index - 1) == "\\" and is_quote(_at(text, index))


def quote_state(text: str, index: int) -> int:
    """Report whether position ``index`` lies inside quotes.

    Returns 2 inside single quotes, 1 inside double quotes, 0 outside any
    quotes and -1 when ``index`` is past the end of ``text``. The quote
    characters that open or close a quoted span count as outside.
    """
    singles = 0
    doubles = 0
    for position, ch in enumerate(text):
        escaped = _is_escaped_quote(text, position)
        if ch == "'" and not escaped and doubles % 2 == 0:
            singles += 1
        if ch == '"' and not escaped and singles % 2 == 0:
            doubles += 1
        if position == index:
            if singles % 2 != 0 and (escaped or ch != "'"):
                return 2
            if doubles % 2 != 0 and (escaped or ch != '"'):
                return 1
            return 0
    return -1


def _even_number_of_quotes(text: str) -> bool:
    singles = 0
    doubles = 0
    i = 0
    while i < len(text):
        while _at(text, i) == "\\" and quote_state(text, i) != 2:
            i += 2
        ch = _at(text, i)
        if ch == "'" and doubles % 2 == 0:
            singles += 1
        if ch == '"' and singles % 2 == 0:
            doubles += 1
        i += 1
    return singles % 2 == 0 and doubles % 2 == 0


def _has_matching_quote(text: str, quote: str) -> bool:
    opposite = '"' if quote == "'" else "'"
    opposite_count = 0
    visited = set()
    i = len(text)
    while i > 0:
        while _at(text, i) == "\\" and quote_state(text, i) != 2:
            i += 2
        if i in visited:
            return False
        visited.add(i)
        ch = _at(text, i)
        if ch == opposite:
            opposite_count += 1
        if ch == quote and opposite_count % 2 == 0:
            return True
        i -= 1
    return False


def quotes_matched(text: str | None) -> bool:
    """Check that every quote in ``text`` is closed; report a syntax error if not."""
    matched = text is not None and _even_number_of_quotes(text)
    if matched and is_quote(_at(text, 0)) and not _has_matching_quote(text, text[0]):
        matched = False
    if not matched:
        print(MISMATCHED_QUOTES_MESSAGE)
    return matched


def skip_spaces(text: str, index: int) -> int:
    """Return the first position at or after ``index`` that is not a space."""
    while is_space(_at(text, index)):
        index += 1
    return index


def space_separators(text: str) -> str:
    """Surround unquoted separators with spaces and drop leading blanks.

    Doubled separators such as ``<<`` or ``>>`` are kept together, and a
    backslash keeps the character after it untouched.
    """
    parts: list[str] = []
    i = skip_spaces(text, 0)
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            parts.append(text[i:i + 2])
            i += 2
        elif quote_state(text, i) == 0 and is_sep(ch):
            operator = ch * 2 if _at(text, i + 1) == ch else ch
            parts.append(f" {operator} ")
            i += len(operator)
        else:
            parts.append(ch)
            i += 1
    return "".join(parts)