"""Parsing of the web front end's request line and URL segments."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

GET_PREFIX = "GET /"
MAX_SEGMENT = 30
MAX_DECODED = 127
MAX_ENCODED = 126

_FIELD_BREAKS = "?\0&@ "
_LINE_BREAKS = "\r\n"
_UNRESERVED = "-_.~"
_SPLIT = re.compile("[" + re.escape(_FIELD_BREAKS) + "]")
_HEX = re.compile(r"[0-9A-Fa-f]+")


class ContentKind(enum.IntEnum):
    """How a served file is labelled and whether it is expanded as a template."""

    PLAIN = 0
    JPEG = 1
    TEMPLATE = 2
    CSS = 3
    JAVASCRIPT = 4


_MIME_TYPES = {
    ContentKind.PLAIN: "text/html",
    ContentKind.JPEG: "image/jpeg",
    ContentKind.TEMPLATE: "text/html",
    ContentKind.CSS: "text/css",
    ContentKind.JAVASCRIPT: "text/javascript",
}


@dataclass(frozen=True)
class Request:
    """A GET request line split into its URL segments.

    ``segments`` holds the raw (still encoded) parts of the target between
    field breaks. When a segment is longer than allowed, ``overlong`` is set
    and that segment and everything after it are left out.
    """

    target: str
    segments: tuple
    overlong: bool = False


def url_decode(text):
    """Decode ``+`` and ``%xx`` escapes; an over-long result gives ``""``."""
    out = []
    index = 0
    while index < len(text):
        if len(out) >= MAX_DECODED:
            return ""
        char = text[index]
        if char == "+":
            out.append(" ")
        elif char == "%":
            match = _HEX.match(text, index + 1, index + 3)
            if match:
                out.append(chr(int(match.group(), 16)))
                index += 3
                continue
            out.append(char)
        else:
            out.append(char)
        index += 1
    return "".join(out)


def url_encode(text):
    """Percent-encode everything except letters, digits and ``-_.~``.

    A result longer than the limit gives ``""``. Characters outside
    Latin-1 raise UnicodeEncodeError.
    """
    out = []
    for byte in text.encode("latin-1"):
        char = chr(byte)
        if (char.isascii() and char.isalnum()) or char in _UNRESERVED:
            out.append(char)
        else:
            out.append(f"%{byte:02X}")
    result = "".join(out)
    return "" if len(result) > MAX_ENCODED else result


def is_line_break(char):
    """True for a carriage return or line feed."""
    return char != "" and char in _LINE_BREAKS


def is_field_break(char):
    """True for the characters that separate URL segments."""
    return char != "" and char in _FIELD_BREAKS


def action_code(segment):
    """Code of an action segment (4 to 8), or 0 when it is no action."""
    if len(segment) == 4:
        if segment == "stwz":
            return 4
        if segment == "sdwz":
            return 5
        if segment[1:] == "str" and segment[0] in "RS":
            return 7 + ord(segment[0]) // ord("S")
        return 0
    if len(segment) == 6 and segment.startswith("ld") and segment[2:4].isdigit() and segment[2:4].isascii():
        return 6
    return 0


def content_kind(path):
    """Kind of content a file path is served as, chosen by its extension."""
    if path.endswith((".html", ".htm")):
        return ContentKind.TEMPLATE
    if path.endswith(".jpg"):
        return ContentKind.JPEG
    if path.endswith(".css"):
        return ContentKind.CSS
    if path.endswith(".js"):
        return ContentKind.JAVASCRIPT
    return ContentKind.PLAIN


def parse_request(data):
    """Split the request line of a GET request into URL segments.

    Raises ValueError when the data is no GET request or its request line
    has no line end or no space after the target.
    """
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("latin-1")
    if not data.startswith(GET_PREFIX):
        raise ValueError("not a GET request")
    ends = [pos for pos in (data.find("\r"), data.find("\n")) if pos >= 0]
    if not ends:
        raise ValueError("request line has no line end")
    space = data.rfind(" ", 0, min(ends))
    if space < len(GET_PREFIX):
        raise ValueError("request line has no target")
    target = data[len(GET_PREFIX):space]
    segments = []
    overlong = False
    for segment in _SPLIT.split(target):
        if len(segment) > MAX_SEGMENT:
            overlong = True
            break
        segments.append(segment)
    return Request(target, tuple(segments), overlong)


def response_header(kind):
    """HTTP response header for content of the given kind."""
    return (
        "HTTP/1.1 200 OK\r\nContent-Type: "
        + _MIME_TYPES[ContentKind(kind)]
        + "\r\nConnection: close\r\n\r\n"
    )