"""Expansion of code markers in served pages and base-60 digits."""

from __future__ import annotations

import string

BASE60_DIGITS = string.digits + string.ascii_uppercase + string.ascii_lowercase[:24]
_MARKER_OPEN = "/*@?@?"
_DIGIT_STATES = (6, 7)
_CLOSE_STAR = 8
_CLOSE_SLASH = 9


def base60_digit(char):
    """Value of a base-60 digit (``0-9``, ``A-Z``, ``a-x``)."""
    index = BASE60_DIGITS.find(char) if len(char) == 1 else -1
    if index < 0:
        raise ValueError(f"not a base-60 digit: {char!r}")
    return index


def base60_char(value):
    """Base-60 digit for a value from 0 to 59."""
    if not 0 <= value < 60:
        raise ValueError(f"value out of base-60 digit range: {value}")
    return BASE60_DIGITS[value]


def expand(text, code_handler):
    """Replace every ``/*@?@?XY*/`` marker with ``code_handler(code)``.

    ``XY`` are two base-60 digits giving the code. The handler returns the
    text to insert, or None for nothing. A broken marker is kept as written;
    one cut off by the end of the text is dropped.
    """
    out = []
    pending = []
    code = 0
    for char in text:
        state = len(pending)
        if state < len(_MARKER_OPEN):
            accepted = char == _MARKER_OPEN[state]
        elif state in _DIGIT_STATES:
            accepted = char in BASE60_DIGITS
            if accepted:
                code = code * 60 + base60_digit(char)
        elif state == _CLOSE_STAR:
            accepted = char == "*"
        else:
            if char == "/":
                replacement = code_handler(code)
                if replacement:
                    out.append(replacement)
                pending.clear()
                code = 0
                continue
            accepted = False
        if accepted:
            pending.append(char)
            continue
        out.extend(pending)
        pending.clear()
        code = 0
        out.append(char)
    return "".join(out)