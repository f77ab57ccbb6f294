"""LED ceiling strips: per-strip animation variables, strip groups and messages."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields

from .template import base60_char, base60_digit

_BOOL = 0
_BYTE = 1
_WORD = 2

# Variable index -> (field name, storage kind).
_VARIABLES = {
    0: ("brightness", _BYTE),
    1: ("rgb_pause", _BYTE),
    2: ("negative_delay", _BOOL),
    3: ("gamma_delay", _WORD),
    4: ("negative_gamma_delay", _BOOL),
    5: ("gamma_period", _WORD),
    6: ("gamma_colour", _BYTE),
    7: ("gamma_value", _BYTE),
    8: ("gamma_i_value", _BYTE),
    9: ("gamma_i_brightness", _BYTE),
    10: ("brightness_delay", _WORD),
    11: ("negative_brightness_current", _BOOL),
    12: ("gamma_pause", _BYTE),
    13: ("brightness_amplitude", _BYTE),
    20: ("delay", _WORD),
    21: ("gamma_interval", _BYTE),
    22: ("brightness_period", _WORD),
    23: ("period", _WORD),
    40: ("random", _BYTE),
}

VARIABLE_INDICES = tuple(sorted(_VARIABLES))
BOOLEAN_INDICES = frozenset(i for i, (_, kind) in _VARIABLES.items() if kind == _BOOL)
GAMMA_PERIOD = 5
PERIOD = 23
MIN_PERIOD = 100
MAX_STRIPS = 60


def _store(kind, value):
    if kind == _BOOL:
        return bool(value)
    if kind == _BYTE:
        return value % 0x100
    return value % 0x1_0000_0000


def _base60(value):
    digits = []
    while True:
        value, rest = divmod(value, 60)
        digits.append(base60_char(rest))
        if not value:
            return "".join(reversed(digits))


def _parse_base60(text):
    value = 0
    for char in text:
        value = value * 60 + base60_digit(char)
    return value


def _count(value):
    if value >= 10_000:
        return f"{value % 100_000:05d}"
    return str(value)


def _two_digits(text, what):
    if len(text) != 2 or not (text.isascii() and text.isdigit()):
        raise ValueError(f"malformed {what}: {text!r}")
    return int(text)


@dataclass
class StripVariables:
    """Animation variables of one strip and the group it belongs to."""

    members: list = field(default_factory=list)
    group_size: int = 1
    brightness: int = 0
    rgb_pause: int = 0
    negative_delay: bool = False
    gamma_delay: int = 0
    negative_gamma_delay: bool = False
    gamma_period: int = 0
    gamma_colour: int = 0
    gamma_value: int = 0
    gamma_i_value: int = 0
    gamma_i_brightness: int = 0
    brightness_delay: int = 0
    negative_brightness_current: bool = False
    gamma_pause: int = 0
    brightness_amplitude: int = 0
    delay: int = 0
    gamma_interval: int = 0
    brightness_period: int = 0
    period: int = 0
    random: int = 0

    def value(self, index):
        """Numeric value of variable ``index``; 0 for an unknown index."""
        entry = _VARIABLES.get(index)
        if entry is None:
            return 0
        return int(getattr(self, entry[0]))

    def set_value(self, index, value):
        """Store ``value`` in variable ``index``, wrapped to its width.

        An unknown index is ignored.
        """
        entry = _VARIABLES.get(index)
        if entry is not None:
            name, kind = entry
            setattr(self, name, _store(kind, value))

    def copy_values_from(self, other):
        """Take over every variable and the group size of ``other``."""
        for item in fields(self):
            if item.name != "members":
                setattr(self, item.name, getattr(other, item.name))


class LedStrip:
    """One LED ceiling with its strips, which can be grouped to move together."""

    def __init__(self, number, address, strip_count):
        if not 0 < strip_count <= MAX_STRIPS:
            raise ValueError(f"strip count must be 1 to {MAX_STRIPS}: {strip_count}")
        self.number = number
        self.address = address
        self.strip_count = strip_count
        self.strips = [
            StripVariables(members=[other == own for other in range(strip_count)])
            for own in range(strip_count)
        ]
        self._lock = threading.RLock()

    def _check(self, strip):
        if not 0 <= strip < self.strip_count:
            raise IndexError(f"no strip {strip} on ceiling {self.number}")

    def _group(self, strip):
        return [t for t, member in enumerate(self.strips[strip].members) if member]

    def set_variable(self, strip, index, value):
        """Set a variable for the whole group of ``strip``.

        A gamma period longer than the period raises the period (to at least
        100); a period below the gamma period lowers the gamma period.
        Returns True when the change also touches the period settings, or the
        index is one of the timing variables from 20 on.
        """
        self._check(strip)
        changed = index > 19
        with self._lock:
            own = self.strips[strip]
            group = [self.strips[t] for t in self._group(strip)]
            for member in group:
                member.set_value(index, value)
            if index == GAMMA_PERIOD and own.period < value:
                period = MIN_PERIOD if 0 < value < MIN_PERIOD else value
                for member in group:
                    member.set_value(PERIOD, period)
                changed = True
            elif index == PERIOD and own.gamma_period and own.gamma_period > value:
                for member in group:
                    member.set_value(GAMMA_PERIOD, value)
        return changed

    def _detach(self, strip):
        own = self.strips[strip]
        for t, member in enumerate(own.members):
            if t != strip and member:
                own.members[t] = False
                other = self.strips[t]
                other.group_size -= 1
                other.members[strip] = False
        own.group_size = 1

    def detach(self, strip):
        """Take ``strip`` out of its group."""
        self._check(strip)
        with self._lock:
            self._detach(strip)

    def attach(self, strip, parent):
        """Move ``strip`` into the group of ``parent`` and copy its variables.

        Returns the first other member of the group.
        """
        self._check(strip)
        self._check(parent)
        if strip == parent:
            raise ValueError("a strip cannot be attached to itself")
        with self._lock:
            self._detach(strip)
            own = self.strips[strip]
            head = self.strips[parent]
            added = not head.members[strip]
            for t in range(self.strip_count):
                if t in (strip, parent):
                    continue
                own.members[t] = head.members[t]
                if own.members[t]:
                    other = self.strips[t]
                    other.group_size += int(added)
                    other.members[strip] = True
            if added:
                head.group_size += 1
            own.members[parent] = True
            head.members[strip] = True
            own.copy_values_from(head)
            return next(t for t, m in enumerate(head.members) if m and t != strip)

    def remove_child(self, strip):
        """Make the other members of the group of ``strip`` stop counting it."""
        self._check(strip)
        with self._lock:
            for t in self._group(strip):
                if t != strip:
                    other = self.strips[t]
                    other.members[strip] = False
                    other.group_size -= 1

    def state_messages(self):
        """Messages that describe every group and its non-zero variables."""
        messages = []
        with self._lock:
            covered = [False] * self.strip_count
            for number, strip in enumerate(self.strips):
                if covered[number]:
                    continue
                prefix = "$" if messages else "#"
                values = "".join(
                    "_" + base60_char(index) + _base60(strip.value(index))
                    for index in VARIABLE_INDICES
                    if strip.value(index)
                )
                if not values:
                    messages.append(prefix + base60_char(number) + "S0\n+")
                    continue
                children = [
                    t for t in range(number + 1, self.strip_count) if strip.members[t]
                ]
                for t in children:
                    covered[t] = True
                messages.append(
                    prefix
                    + base60_char(number)
                    + "S"
                    + base60_char(strip.group_size - 1)
                    + "".join("_" + base60_char(t) for t in children)
                    + values
                    + "\n+"
                )
        return messages or ["#+"]

    def variable_message(self, message):
        """Apply a ``VSSNN=value`` message and return the answer to send.

        ``SS`` is the strip and ``NN`` the variable, both decimal; the value
        is written in base 60.
        """
        if len(message) < 6 or message[0] != "V":
            raise ValueError(f"malformed variable message: {message!r}")
        strip = _two_digits(message[1:3], "strip number")
        index = _two_digits(message[3:5], "variable number")
        raw = message[6:]
        changed = self.set_variable(strip, index, _parse_base60(raw))
        head = "$" if changed else "&"
        return head + base60_char(strip) + "V" + _base60(index) + "_" + raw + "\n+"

    def group_message(self, message):
        """Apply ``ACCSS`` (attach SS to CC) or ``DSS`` (detach SS); return the answer."""
        if message[:1] == "D" and len(message) == 3:
            strip = _two_digits(message[1:3], "strip number")
            self.detach(strip)
            return "&" + base60_char(strip) + "D\n+"
        if message[:1] == "A" and len(message) == 5:
            parent = _two_digits(message[1:3], "strip number")
            strip = _two_digits(message[3:5], "strip number")
            first = self.attach(strip, parent)
            return "$" + base60_char(first) + "A" + base60_char(strip) + "\n+"
        raise ValueError(f"malformed group message: {message!r}")

    def to_json(self):
        """The strips as comma-separated JavaScript arrays for the web page."""
        with self._lock:
            parts = []
            for strip in self.strips:
                items = ["[" + ", ".join("true" if m else "false" for m in strip.members) + "]"]
                for index in VARIABLE_INDICES:
                    value = strip.value(index)
                    if index in BOOLEAN_INDICES:
                        items.append("true" if value else "false")
                    else:
                        items.append(_count(value))
                parts.append("[" + ", ".join(items) + "]")
            return ", ".join(parts)


class LedController:
    """All LED ceilings, looked up by their device address."""

    def __init__(self, addresses, strip_counts):
        addresses = list(addresses)
        strip_counts = list(strip_counts)
        if len(addresses) != len(strip_counts):
            raise ValueError("every address needs a strip count")
        self.strips = {
            address: LedStrip(number, address, count)
            for number, (address, count) in enumerate(zip(addresses, strip_counts), start=1)
        }

    def strip_for(self, address):
        """The ceiling at ``address``, or None."""
        return self.strips.get(address)