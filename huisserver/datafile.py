"""Line-oriented access to the server's data files."""

from __future__ import annotations

from pathlib import Path

_LINE_ENDS = "\r\n"


class DataFile:
    """A data file held in memory with a read position."""

    def __init__(self, root):
        self.root = Path(root)
        self.text = ""
        self.position = 0

    def open(self, path):
        """Load a file below the data root and rewind to its start.

        Raises FileNotFoundError when the file does not exist.
        """
        data = (self.root / path).read_bytes()
        text = data.decode("latin-1")
        end = text.find("\0")
        if end >= 0:
            text = text[:end]
        self.text = text
        self.position = 0

    def read_line(self):
        """Return the line at the read position and move past it.

        Returns an empty string at the end of the file.
        """
        text = self.text
        start = self.position
        end = start
        while end < len(text) and text[end] not in _LINE_ENDS:
            end += 1
        line = text[start:end]
        if text.startswith("\r\n", end):
            end += 2
        elif end < len(text):
            end += 1
        self.position = end
        return line

    def read_line_at(self, number):
        """Skip ``number`` lines from the read position and return the next."""
        if number < 0:
            raise ValueError("line number must not be negative")
        for _ in range(number):
            self.read_line()
        return self.read_line()

    def contents(self):
        """Return the whole loaded file."""
        return self.text


def expand_id(text, value):
    """Replace every ``!!ID`` marker in ``text`` with ``value``.

    Text stops at the first NUL character. A marker that is cut off by the
    end of the text is dropped.
    """
    out = []
    state = 0
    for char in text:
        if char == "\0":
            break
        if state == 0:
            if char == "!":
                state = 1
            else:
                out.append(char)
        elif state == 1:
            if char == "!":
                state = 2
            else:
                out.append("!" + char)
                state = 0
        elif state == 2:
            if char == "I":
                state = 3
            else:
                out.append("!!" + char)
                state = 0
        else:
            out.append(value if char == "D" else "!!I" + char)
            state = 0
    return "".join(out)